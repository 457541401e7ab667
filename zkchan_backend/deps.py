# zkchan_backend/deps.py
from typing import Callable
from fastapi import Request

from .config import Settings
from .core.models import ProofBundle, Session
from .core.registry import ExpiringRegistry, JobRegistry
from .services.payout_providers import PayoutClient

# everything lives on app.state so each app (and each test) gets its own registries


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_job_registry(request: Request) -> JobRegistry:
    return request.app.state.jobs


def get_session_registry(request: Request) -> ExpiringRegistry[Session]:
    return request.app.state.sessions


def get_proof_registry(request: Request) -> ExpiringRegistry[ProofBundle]:
    return request.app.state.proofs


def get_payout_factory(request: Request) -> Callable[[Settings], PayoutClient]:
    return request.app.state.payout_factory
