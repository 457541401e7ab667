# zkchan_backend/routers/bridge.py
from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from zkchan_backend.config import Settings
from zkchan_backend.core.errors import BridgeError, JobNotFound
from zkchan_backend.core.registry import JobRegistry
from zkchan_backend.deps import get_app_settings, get_job_registry, get_payout_factory
from zkchan_backend.services.bridge import execute_job, submit_transfer
from zkchan_backend.services.payout_providers import PayoutClient

logger = logging.getLogger("zkchan.bridge")

router = APIRouter(prefix="/bridge", tags=["bridge"])


@router.post("/submit")
def submit(
    body: Optional[Dict[str, Any]] = Body(default=None),
    jobs: JobRegistry = Depends(get_job_registry),
):
    try:
        job = submit_transfer(jobs, body or {})
    except BridgeError:
        raise
    except Exception:
        logger.exception("submit error")
        return JSONResponse({"error": "Internal error submitting bridge job"}, status_code=500)
    return {"jobId": job.id, "status": job.status.value}


@router.get("/job/{job_id}")
def get_job(job_id: str, jobs: JobRegistry = Depends(get_job_registry)):
    job = jobs.get(job_id)
    if job is None:
        raise JobNotFound(job_id)
    return job.to_api()


@router.post("/job/{job_id}/execute")
async def execute(
    job_id: str,
    jobs: JobRegistry = Depends(get_job_registry),
    settings: Settings = Depends(get_app_settings),
    payout_factory: Callable[[Settings], PayoutClient] = Depends(get_payout_factory),
):
    result = await execute_job(jobs, job_id, settings, payout_factory)
    return JSONResponse(result.to_api(), status_code=result.status_code)
