# zkchan_backend/services/bridge.py
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict
import asyncio
import logging

from zkchan_backend.config import Settings
from zkchan_backend.core.errors import BridgeError, JobNotFound
from zkchan_backend.core.models import Job, JobStatus
from zkchan_backend.core.registry import JobRegistry
from zkchan_backend.services.payout_providers import PayoutClient

logger = logging.getLogger("zkchan.bridge")

# fields kept on the job; none but amount/receiver/depositSignature are validated
TRANSFER_FIELDS = (
    "mode",
    "amount",
    "fromChain",
    "toChain",
    "fromToken",
    "toToken",
    "receiver",
    "refund",
    "depositSignature",
    "identityCommitment",
    "publicKey",
    "phantomAddress",
    "evmAddress",
)


def _positive_amount(amount: Any) -> bool:
    if amount is None or isinstance(amount, bool):
        return False
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return False
    return value.is_finite() and value > 0


def validate_transfer(body: Dict[str, Any]) -> Dict[str, Any]:
    """Check the submit body and return the payload stored on the job."""
    if not _positive_amount(body.get("amount")):
        raise BridgeError("Invalid amount")
    if not body.get("receiver"):
        raise BridgeError("Missing receiver")
    # deposit signature is trusted as-is; nothing checks it against the source chain
    if not body.get("depositSignature"):
        raise BridgeError("Missing depositSignature from Solana side")
    return {k: body.get(k) for k in TRANSFER_FIELDS}


def submit_transfer(jobs: JobRegistry, body: Dict[str, Any]) -> Job:
    payload = validate_transfer(body)
    job = jobs.create(payload)
    logger.info(
        "new job=%s amount=%s %s->%s receiver=%s",
        job.id, payload["amount"], payload["fromChain"], payload["toChain"], payload["receiver"],
    )
    return job


@dataclass
class ExecutionResult:
    job: Job
    status_code: int = 200

    def to_api(self) -> dict:
        out = {
            "jobId": self.job.id,
            "status": self.job.status.value,
            "simulated": self.job.simulated,
        }
        if self.job.status is JobStatus.failed:
            out["error"] = self.job.error_message
        elif not self.job.simulated:
            out["txHash"] = self.job.tx_hash
            out["explorerUrl"] = self.job.explorer_url
        return out


async def execute_job(
    jobs: JobRegistry,
    job_id: str,
    settings: Settings,
    payout_factory: Callable[[Settings], PayoutClient],
) -> ExecutionResult:
    """
    Run one job through pending -> executing -> completed|failed.
    Raises JobNotFound / InvalidJobState before any state change.
    """
    job = jobs.get(job_id)
    if job is None:
        raise JobNotFound(job_id)

    request = job.request or {}
    amount = str(request.get("amount") or "").strip()
    receiver = request.get("receiver")

    # payload problems go straight to failed, never through executing
    if not amount:
        job = jobs.transition(job_id, JobStatus.pending, status=JobStatus.failed,
                              error_message="Missing amount in job payload")
        return ExecutionResult(job, 400)
    if not receiver:
        job = jobs.transition(job_id, JobStatus.pending, status=JobStatus.failed,
                              error_message="Missing receiver in job payload")
        return ExecutionResult(job, 400)

    job = jobs.transition(job_id, JobStatus.pending, status=JobStatus.executing)

    if not settings.ENABLE_EVM_SEND:
        logger.info("SIMULATED payout job=%s to=%s amount=%s", job_id, receiver, amount)
        job = jobs.update(job_id, status=JobStatus.completed, simulated=True)
        return ExecutionResult(job)

    logger.info(
        "broadcasting REAL payout job=%s to=%s amount=%s decimals=%s",
        job_id, receiver, amount, settings.EVM_NATIVE_DECIMALS,
    )
    try:
        client = payout_factory(settings)
        receipt = await asyncio.wait_for(
            asyncio.to_thread(client.send_native, receiver, amount),
            # web3 applies the same limit per call; this bounds the whole send
            timeout=settings.EVM_TX_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("payout timed out for job=%s", job_id)
        job = jobs.update(job_id, status=JobStatus.failed, simulated=False,
                          error_message=f"Payout timed out after {settings.EVM_TX_TIMEOUT_SECONDS}s")
        return ExecutionResult(job, 500)
    except BridgeError as e:
        logger.error("payout not configured for job=%s: %s", job_id, e.message)
        job = jobs.update(job_id, status=JobStatus.failed, simulated=False, error_message=e.message)
        return ExecutionResult(job, e.status_code)
    except Exception as e:
        logger.exception("payout error for job=%s", job_id)
        job = jobs.update(job_id, status=JobStatus.failed, simulated=False,
                          error_message=str(e) or e.__class__.__name__)
        return ExecutionResult(job, 500)

    job = jobs.update(
        job_id,
        status=JobStatus.completed,
        simulated=False,
        tx_hash=receipt.tx_hash,
        explorer_url=settings.explorer_url(receipt.tx_hash),
        error_message=None,
    )
    return ExecutionResult(job)
