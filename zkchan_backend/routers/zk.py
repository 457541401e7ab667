# zkchan_backend/routers/zk.py
from __future__ import annotations
from typing import Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from zkchan_backend.config import Settings
from zkchan_backend.core.models import ProofBundle, Session
from zkchan_backend.core.registry import ExpiringRegistry
from zkchan_backend.deps import get_app_settings, get_proof_registry, get_session_registry
from zkchan_backend.services.proofs import accept_submission, fabricate_proof, open_session

router = APIRouter(prefix="/api", tags=["zk"])


# ---------- Models ----------
class TransferIntent(BaseModel):
    model_config = ConfigDict(extra="allow")

    commitment: str = Field(min_length=1)
    amount: Optional[Union[float, str]] = None
    receiver: Optional[str] = None
    fromChain: Optional[str] = None
    toChain: Optional[str] = None
    token: Optional[str] = None


class ProveRequest(BaseModel):
    sessionId: str = Field(min_length=1)
    publicKey: str = Field(min_length=1)
    payload: TransferIntent


class SubmitRequest(BaseModel):
    proofId: str = Field(min_length=1)
    proof: str = Field(min_length=1)
    commitment: str = Field(min_length=1)
    nullifier: str = Field(min_length=1)
    network: str = Field(min_length=1)
    mode: str = Field(min_length=1)


# ---------- Routes ----------
@router.post("/session")
def create_session(
    sessions: ExpiringRegistry[Session] = Depends(get_session_registry),
    settings: Settings = Depends(get_app_settings),
):
    return open_session(sessions, settings)


@router.post("/prove")
def prove(
    req: ProveRequest,
    sessions: ExpiringRegistry[Session] = Depends(get_session_registry),
    proofs: ExpiringRegistry[ProofBundle] = Depends(get_proof_registry),
    settings: Settings = Depends(get_app_settings),
):
    return fabricate_proof(
        sessions, proofs, settings,
        session_id=req.sessionId,
        public_key=req.publicKey,
        payload=req.payload.model_dump(exclude_none=True),
    )


@router.post("/submit")
def submit(
    req: SubmitRequest,
    proofs: ExpiringRegistry[ProofBundle] = Depends(get_proof_registry),
    settings: Settings = Depends(get_app_settings),
):
    return accept_submission(
        proofs, settings,
        proof_id=req.proofId,
        proof=req.proof,
        commitment=req.commitment,
        nullifier=req.nullifier,
        network=req.network,
        mode=req.mode,
    )
