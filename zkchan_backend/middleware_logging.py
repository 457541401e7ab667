import logging
import re
import time
from typing import Callable, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("zkchan.request")

_JOB_PATH = re.compile(r"^/bridge/job/([^/]+)")


def job_id_from_path(path: str) -> Optional[str]:
    """Job id for /bridge/job/{id}[/execute], else None."""
    match = _JOB_PATH.match(path)
    return match.group(1) if match else None


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One line per request. Bridge job routes also carry the job id so a
    job's submit, polls and execute can be grepped together."""

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        client = request.client.host if request.client else "-"
        method = request.method
        path = request.url.path
        job = job_id_from_path(path) or "-"

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.exception(
                "%s %s job=%s client=%s status=500 in %.1fms (unhandled)",
                method, path, job, client, duration_ms
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000.0
        # failed payouts come back as 500s; surface them above the poll noise
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "%s %s job=%s client=%s status=%s in %.1fms",
            method, path, job, client, response.status_code, duration_ms
        )
        return response


def register_request_logging(app):
    app.add_middleware(RequestLogMiddleware)
