"""
Shared fixtures: isolated settings, a fresh app per test, fake payout clients.

No test talks to a real RPC endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from zkchan_backend.config import Settings
from zkchan_backend.main import create_app
from zkchan_backend.services.payout_providers import PayoutReceipt

ENV_KEYS = (
    "PORT", "NETWORK_NAME", "CORS_ORIGIN",
    "ENABLE_EVM_SEND", "EVM_RPC_URL", "EVM_PRIVATE_KEY", "EVM_NATIVE_DECIMALS",
    "EVM_EXPLORER_BASE", "EVM_TX_TIMEOUT_SECONDS",
    "SESSION_TTL_SECONDS", "PROOF_TTL_SECONDS", "SWEEP_INTERVAL_SECONDS", "PROVING_KEY_LABEL",
    "RATE_LIMIT_MAX", "RATE_LIMIT_WINDOW_SECONDS",
)

FAKE_TX_HASH = "0x" + "ab" * 32


class FakePayout:
    """Stands in for EvmPayout; records every send."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = []

    def send_native(self, receiver, amount):
        self.calls.append((receiver, amount))
        if self.error is not None:
            raise self.error
        return PayoutReceipt(tx_hash=FAKE_TX_HASH, block_number=1)


@pytest.fixture
def make_settings(monkeypatch):
    def _make(**env) -> Settings:
        for key in ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
        env.setdefault("RATE_LIMIT_MAX", 0)
        for key, value in env.items():
            monkeypatch.setenv(key, str(value))
        return Settings()
    return _make


@pytest.fixture
def make_client(make_settings):
    def _make(payout=None, **env) -> TestClient:
        settings = make_settings(**env)
        factory = (lambda s: payout) if payout is not None else None
        app = create_app(settings, payout_factory=factory)
        return TestClient(app, raise_server_exceptions=False)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def transfer():
    return {
        "amount": 1.5,
        "receiver": "0x" + "ab" * 20,
        "depositSignature": "sig123",
        "fromChain": "solana",
        "toChain": "ethereum",
        "mode": "shielded",
    }
