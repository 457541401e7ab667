# zkchan_backend/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]

# Load in ascending precedence; later overrides earlier
load_dotenv(ROOT / ".env")
load_dotenv(ROOT / ".env.local", override=True)
load_dotenv(ROOT / "zkchan_backend" / ".env", override=True)
load_dotenv(ROOT / "zkchan_backend" / ".env.local", override=True)


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        val = int(raw)
    except ValueError:
        return default
    return val if val >= minimum else default


def _bool_env(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() == "true"


class Settings:
    """Environment-backed settings, read once per instance."""

    def __init__(self):
        # Server
        self.PORT: int = _int_env("PORT", 8080, minimum=1)
        self.NETWORK_NAME: str = os.getenv("NETWORK_NAME", "zkchan-bridge")

        # CORS; empty means any origin
        self.ALLOWED_ORIGINS: list[str] = [
            s.strip() for s in os.getenv("CORS_ORIGIN", "").split(",") if s.strip()
        ]

        # EVM payout
        self.ENABLE_EVM_SEND: bool = _bool_env("ENABLE_EVM_SEND")
        self.EVM_RPC_URL: str = (os.getenv("EVM_RPC_URL") or "").strip()
        self.EVM_PRIVATE_KEY: str = (os.getenv("EVM_PRIVATE_KEY") or "").strip()
        self.EVM_NATIVE_DECIMALS: int = _int_env("EVM_NATIVE_DECIMALS", 18)
        # e.g. https://sepolia.etherscan.io/tx/
        self.EVM_EXPLORER_BASE: str = (os.getenv("EVM_EXPLORER_BASE") or "").strip()
        self.EVM_TX_TIMEOUT_SECONDS: int = _int_env("EVM_TX_TIMEOUT_SECONDS", 120, minimum=1)

        # Session / proof registries
        self.SESSION_TTL_SECONDS: int = _int_env("SESSION_TTL_SECONDS", 900, minimum=1)
        self.PROOF_TTL_SECONDS: int = _int_env("PROOF_TTL_SECONDS", 1800, minimum=1)
        self.SWEEP_INTERVAL_SECONDS: int = _int_env("SWEEP_INTERVAL_SECONDS", 30, minimum=1)
        self.PROVING_KEY_LABEL: str = os.getenv("PROVING_KEY_LABEL", "zkchan-transfer-v1")

        # Rate limiting (requests per window per client); 0 disables
        self.RATE_LIMIT_MAX: int = _int_env("RATE_LIMIT_MAX", 120)
        self.RATE_LIMIT_WINDOW_SECONDS: int = _int_env("RATE_LIMIT_WINDOW_SECONDS", 60, minimum=1)

    @property
    def evm_configured(self) -> bool:
        return bool(self.EVM_RPC_URL and self.EVM_PRIVATE_KEY)

    def explorer_url(self, tx_hash: str) -> Optional[str]:
        if not self.EVM_EXPLORER_BASE:
            return None
        return self.EVM_EXPLORER_BASE + tx_hash


@lru_cache
def get_settings() -> Settings:
    return Settings()
