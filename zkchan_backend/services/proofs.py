# zkchan_backend/services/proofs.py
"""
Session / prove / submit scaffolding.

Nothing here does real proving or chain submission: proofs, nullifiers,
merkle roots and tx hashes are random hex strings. Only the shape of the
flow (ids, TTLs, schema checks) is meaningful.
"""
from __future__ import annotations
import logging
import secrets

from zkchan_backend.config import Settings
from zkchan_backend.core.errors import BridgeError
from zkchan_backend.core.models import ProofBundle, Session
from zkchan_backend.core.registry import ExpiringRegistry

logger = logging.getLogger("zkchan.zk")

PROOF_BYTES = 256


def _hex(nbytes: int) -> str:
    return "0x" + secrets.token_hex(nbytes)


def open_session(sessions: ExpiringRegistry[Session], settings: Settings) -> dict:
    session = sessions.put(Session(merkle_root=_hex(32)))
    logger.info("session=%s opened", session.id)
    return {
        "sessionId": session.id,
        "merkleRoot": session.merkle_root,
        "provingKey": settings.PROVING_KEY_LABEL,
        "expiresIn": settings.SESSION_TTL_SECONDS,
    }


def fabricate_proof(
    sessions: ExpiringRegistry[Session],
    proofs: ExpiringRegistry[ProofBundle],
    settings: Settings,
    session_id: str,
    public_key: str,
    payload: dict,
) -> dict:
    session = sessions.get(session_id)
    if session is None:
        raise BridgeError("Invalid or expired sessionId")

    bundle = proofs.put(ProofBundle(
        session_id=session.id,
        public_key=public_key,
        commitment=payload["commitment"],
        proof=_hex(PROOF_BYTES),
        nullifier=_hex(32),
        payload=payload,
    ))
    logger.info("proof=%s issued for session=%s", bundle.id, session.id)
    out = bundle.to_api()
    out["merkleRoot"] = session.merkle_root
    out["expiresIn"] = settings.PROOF_TTL_SECONDS
    return out


def accept_submission(
    proofs: ExpiringRegistry[ProofBundle],
    settings: Settings,
    proof_id: str,
    proof: str,
    commitment: str,
    nullifier: str,
    network: str,
    mode: str,
) -> dict:
    bundle = proofs.get(proof_id)
    if bundle is None:
        raise BridgeError("Invalid or expired proofId")
    if (proof, commitment, nullifier) != (bundle.proof, bundle.commitment, bundle.nullifier):
        raise BridgeError("Proof bundle mismatch")

    tx_hash = _hex(32)
    logger.info("proof=%s accepted network=%s mode=%s tx=%s", bundle.id, network, mode, tx_hash)
    return {
        "accepted": True,
        "network": network,
        "mode": mode,
        "txHash": tx_hash,
        "explorerUrl": settings.explorer_url(tx_hash),
        "bundle": bundle.to_api(),
    }
