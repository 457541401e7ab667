# zkchan_backend/routers/health.py
from fastapi import APIRouter, Depends

from zkchan_backend.config import Settings
from zkchan_backend.core.models import iso, utc_now
from zkchan_backend.deps import get_app_settings

router = APIRouter()

@router.get("/health")
def health_check(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        "network": settings.NETWORK_NAME,
        "time": iso(utc_now()),
    }

@router.get("/health/env")
def env_preview(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        # server
        "PORT": settings.PORT,
        "ALLOWED_ORIGINS": settings.ALLOWED_ORIGINS or ["*"],
        # EVM (no secrets)
        "EVM": {
            "enable_send": settings.ENABLE_EVM_SEND,
            "rpc_url_configured": bool(settings.EVM_RPC_URL),
            "private_key_configured": bool(settings.EVM_PRIVATE_KEY),
            "native_decimals": settings.EVM_NATIVE_DECIMALS,
            "explorer_base": settings.EVM_EXPLORER_BASE or None,
            "tx_timeout_seconds": settings.EVM_TX_TIMEOUT_SECONDS,
        },
        # session / proof registries
        "ZK": {
            "proving_key": settings.PROVING_KEY_LABEL,
            "session_ttl_seconds": settings.SESSION_TTL_SECONDS,
            "proof_ttl_seconds": settings.PROOF_TTL_SECONDS,
            "sweep_interval_seconds": settings.SWEEP_INTERVAL_SECONDS,
        },
        "RATE_LIMIT": {
            "max_requests": settings.RATE_LIMIT_MAX,
            "window_seconds": settings.RATE_LIMIT_WINDOW_SECONDS,
        },
    }
