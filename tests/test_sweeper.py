import asyncio
import time

from fastapi.testclient import TestClient

from zkchan_backend.core.models import ProofBundle, Session
from zkchan_backend.core.registry import ExpiringRegistry
from zkchan_backend.main import create_app
from zkchan_backend.services.sweeper import Sweeper


def _bundle(created_at):
    return ProofBundle(session_id="s", public_key="pk", commitment="c",
                       proof="0x1", nullifier="0x2", created_at=created_at)


def test_sweep_once_evicts_per_registry_ttl():
    now = 10_000.0
    sessions = ExpiringRegistry(ttl_seconds=900)
    proofs = ExpiringRegistry(ttl_seconds=1800)
    stale_session = sessions.put(Session(merkle_root="0x", created_at=now - 1000))
    live_session = sessions.put(Session(merkle_root="0x", created_at=now - 10))
    kept_bundle = proofs.put(_bundle(now - 1000))
    stale_bundle = proofs.put(_bundle(now - 2000))

    removed = Sweeper({"sessions": sessions, "proofs": proofs}).sweep_once(now)

    assert removed == {"sessions": 1, "proofs": 1}
    assert stale_session.id not in sessions
    assert live_session.id in sessions
    assert kept_bundle.id in proofs
    assert stale_bundle.id not in proofs


def test_periodic_sweep_removes_expired_session():
    async def scenario():
        sessions = ExpiringRegistry(ttl_seconds=1)
        session = sessions.put(Session(merkle_root="0x", created_at=time.time() - 5))
        sweeper = Sweeper({"sessions": sessions}, interval=0.01)
        sweeper.start()
        assert sweeper.running
        await asyncio.sleep(0.1)
        await sweeper.stop()
        assert not sweeper.running
        return sessions, session

    sessions, session = asyncio.run(scenario())
    assert session.id not in sessions
    assert len(sessions) == 0


def test_sweeper_survives_registry_error():
    class Broken:
        def sweep(self, now=None):
            raise RuntimeError("boom")

    async def scenario():
        sweeper = Sweeper({"broken": Broken()}, interval=0.01)
        sweeper.start()
        await asyncio.sleep(0.05)
        alive = sweeper.running
        await sweeper.stop()
        return alive

    assert asyncio.run(scenario()) is True


def test_lifespan_starts_and_stops_sweeper(make_settings):
    app = create_app(make_settings(SWEEP_INTERVAL_SECONDS=30))
    with TestClient(app) as client:
        assert client.app.state.sweeper.running
        assert client.get("/health").status_code == 200
    assert not app.state.sweeper.running
