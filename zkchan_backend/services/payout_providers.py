# zkchan_backend/services/payout_providers.py
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Protocol
import logging

from zkchan_backend.config import Settings
from zkchan_backend.core.errors import PayoutConfigError

logger = logging.getLogger("zkchan.payout")

NATIVE_TRANSFER_GAS = 21_000


def to_base_units(amount, decimals: int) -> int:
    """Decimal string/number -> integer base units, e.g. "1.5" @ 18 -> 1.5e18 wei."""
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"invalid decimal amount: {amount!r}") from None
    if not value.is_finite():
        raise ValueError(f"invalid decimal amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"fractional component exceeds {decimals} decimals")
        return int(scaled)


@dataclass
class PayoutReceipt:
    tx_hash: str
    block_number: int | None = None


# ---------- Interface ----------
class PayoutClient(Protocol):
    def send_native(self, receiver: str, amount) -> PayoutReceipt: ...


# ---------- EVM (web3) ----------
class EvmPayout:
    def __init__(self, rpc_url: str, private_key: str, decimals: int = 18, timeout: int = 120):
        from web3 import Web3
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self.account = self.w3.eth.account.from_key(private_key)
        self.decimals = decimals
        self.timeout = timeout

    def send_native(self, receiver: str, amount) -> PayoutReceipt:
        from web3 import Web3
        value = to_base_units(amount, self.decimals)
        eth = self.w3.eth
        tx = {
            "to": Web3.to_checksum_address(receiver),
            "value": value,
            "nonce": eth.get_transaction_count(self.account.address, "pending"),
            "gas": NATIVE_TRANSFER_GAS,
            "gasPrice": eth.gas_price,
            "chainId": eth.chain_id,
        }
        signed = self.account.sign_transaction(tx)
        tx_hash = eth.send_raw_transaction(signed.raw_transaction)
        hex_hash = Web3.to_hex(tx_hash)
        logger.info("sent tx=%s to=%s value=%s, waiting for confirmation", hex_hash, receiver, value)

        # one confirmation; raises TimeExhausted after self.timeout seconds
        receipt = eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        if receipt["status"] == 0:
            raise RuntimeError(f"Transaction reverted: {hex_hash}")
        logger.info("tx=%s confirmed in block %s", hex_hash, receipt["blockNumber"])
        return PayoutReceipt(tx_hash=hex_hash, block_number=receipt["blockNumber"])


# ---------- Factory ----------
def get_payout_client(settings: Settings) -> PayoutClient:
    if not settings.evm_configured:
        raise PayoutConfigError("EVM_RPC_URL or EVM_PRIVATE_KEY not configured", status_code=500)
    return EvmPayout(
        settings.EVM_RPC_URL,
        settings.EVM_PRIVATE_KEY,
        decimals=settings.EVM_NATIVE_DECIMALS,
        timeout=settings.EVM_TX_TIMEOUT_SECONDS,
    )
