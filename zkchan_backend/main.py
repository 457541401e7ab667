from contextlib import asynccontextmanager
from typing import Callable, Optional
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .core.models import ProofBundle, Session
from .core.registry import ExpiringRegistry, JobRegistry
from .error_handlers import register_error_handlers
from .middleware_logging import register_request_logging
from .middleware_ratelimit import register_rate_limit
from .routers.bridge import router as bridge_router
from .routers.health import router as health_router
from .routers.zk import router as zk_router
from .services.payout_providers import PayoutClient, get_payout_client
from .services.sweeper import Sweeper

logger = logging.getLogger("zkchan.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper: Sweeper = app.state.sweeper
    sweeper.start()
    logger.info("sweeper started interval=%ss", sweeper.interval)
    yield
    await sweeper.stop()
    logger.info("sweeper stopped")


def create_app(
    settings: Optional[Settings] = None,
    payout_factory: Optional[Callable[[Settings], PayoutClient]] = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="zkChan Bridge Backend", version="0.1.0", lifespan=lifespan)

    # =========================
    # ---- State ----
    # =========================
    app.state.settings = settings
    app.state.jobs = JobRegistry()
    app.state.sessions = ExpiringRegistry[Session](settings.SESSION_TTL_SECONDS)
    app.state.proofs = ExpiringRegistry[ProofBundle](settings.PROOF_TTL_SECONDS)
    app.state.payout_factory = payout_factory or get_payout_client
    app.state.sweeper = Sweeper(
        {"sessions": app.state.sessions, "proofs": app.state.proofs},
        interval=settings.SWEEP_INTERVAL_SECONDS,
    )

    # =========================
    # ---- Middleware ----
    # =========================
    register_error_handlers(app)
    app.state.rate_limiter = register_rate_limit(
        app, settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS
    )
    register_request_logging(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS or ["*"],
        allow_credentials=bool(settings.ALLOWED_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================
    # ---- Routes ----
    # =========================
    app.include_router(health_router)
    app.include_router(bridge_router)
    app.include_router(zk_router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)
