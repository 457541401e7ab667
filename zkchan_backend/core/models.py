from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
import uuid, time


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso(dt: datetime) -> str:
    # 2024-05-01T12:00:00.123Z, same shape the frontend already parses
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JobStatus(str, Enum):
    pending = "pending"
    executing = "executing"
    completed = "completed"
    failed = "failed"

    @property
    def terminal(self) -> bool:
        return self in (JobStatus.completed, JobStatus.failed)


@dataclass
class Job:
    request: Dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.pending
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    simulated: bool = False
    tx_hash: Optional[str] = None
    explorer_url: Optional[str] = None
    error_message: Optional[str] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "status": self.status.value,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
            "request": dict(self.request),
            "simulated": self.simulated,
            "txHash": self.tx_hash,
            "explorerUrl": self.explorer_url,
            "errorMessage": self.error_message,
        }


@dataclass
class Session:
    merkle_root: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)


@dataclass
class ProofBundle:
    session_id: str
    public_key: str
    commitment: str
    proof: str
    nullifier: str
    payload: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)

    def to_api(self) -> dict:
        return {
            "proofId": self.id,
            "sessionId": self.session_id,
            "publicKey": self.public_key,
            "commitment": self.commitment,
            "proof": self.proof,
            "nullifier": self.nullifier,
            "payload": dict(self.payload),
        }
