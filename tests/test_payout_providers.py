from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from zkchan_backend.core.errors import PayoutConfigError
from zkchan_backend.services.payout_providers import (
    EvmPayout,
    NATIVE_TRANSFER_GAS,
    get_payout_client,
    to_base_units,
)

TEST_KEY = "0x" + "11" * 32
RECEIVER = "0x" + "ab" * 20


@pytest.mark.parametrize("amount, decimals, expected", [
    ("1.5", 18, 1_500_000_000_000_000_000),
    (1.5, 18, 1_500_000_000_000_000_000),
    ("2", 6, 2_000_000),
    ("0.000001", 6, 1),
    (Decimal("10"), 0, 10),
])
def test_to_base_units(amount, decimals, expected):
    assert to_base_units(amount, decimals) == expected


def test_to_base_units_rejects_excess_precision():
    with pytest.raises(ValueError, match="fractional component exceeds 6 decimals"):
        to_base_units("0.0000001", 6)


@pytest.mark.parametrize("amount", ["abc", "", "NaN"])
def test_to_base_units_rejects_garbage(amount):
    with pytest.raises(ValueError):
        to_base_units(amount, 18)


def test_factory_requires_rpc_and_key(make_settings):
    with pytest.raises(PayoutConfigError) as exc:
        get_payout_client(make_settings(ENABLE_EVM_SEND="true", EVM_PRIVATE_KEY=TEST_KEY))
    assert exc.value.status_code == 500
    assert exc.value.message == "EVM_RPC_URL or EVM_PRIVATE_KEY not configured"


def test_factory_builds_evm_client(make_settings):
    settings = make_settings(EVM_RPC_URL="http://127.0.0.1:8545", EVM_PRIVATE_KEY=TEST_KEY,
                             EVM_NATIVE_DECIMALS=6, EVM_TX_TIMEOUT_SECONDS=15)
    client = get_payout_client(settings)
    assert isinstance(client, EvmPayout)
    assert client.decimals == 6
    assert client.timeout == 15


def _payout_with_fake_chain(receipt_status=1):
    payout = EvmPayout("http://127.0.0.1:8545", TEST_KEY, decimals=18, timeout=5)
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.gas_price = 1_000_000_000
    w3.eth.chain_id = 11155111
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("cd" * 32)
    w3.eth.wait_for_transaction_receipt.return_value = {"status": receipt_status, "blockNumber": 42}
    payout.w3 = w3
    return payout, w3


def test_send_native_signs_and_waits_for_receipt():
    payout, w3 = _payout_with_fake_chain()
    receipt = payout.send_native(RECEIVER, "0.5")

    assert receipt.tx_hash == "0x" + "cd" * 32
    assert receipt.block_number == 42
    w3.eth.get_transaction_count.assert_called_once_with(payout.account.address, "pending")
    w3.eth.send_raw_transaction.assert_called_once()
    _, kwargs = w3.eth.wait_for_transaction_receipt.call_args
    assert kwargs["timeout"] == 5


def test_send_native_reverted_receipt_raises():
    payout, _ = _payout_with_fake_chain(receipt_status=0)
    with pytest.raises(RuntimeError, match="Transaction reverted"):
        payout.send_native(RECEIVER, "0.5")


def test_send_native_rejects_bad_amount_before_broadcast():
    payout, w3 = _payout_with_fake_chain()
    with pytest.raises(ValueError):
        payout.send_native(RECEIVER, "1.0000000000000000001")
    w3.eth.send_raw_transaction.assert_not_called()


def test_native_transfer_gas_constant():
    assert NATIVE_TRANSFER_GAS == 21_000
