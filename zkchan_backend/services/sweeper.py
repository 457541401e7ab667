# zkchan_backend/services/sweeper.py
from __future__ import annotations
from typing import Dict, Optional
import asyncio
import logging

from zkchan_backend.core.registry import ExpiringRegistry

logger = logging.getLogger("zkchan.sweeper")


class Sweeper:
    """Periodically evicts expired entries from a set of named registries."""

    def __init__(self, registries: Dict[str, ExpiringRegistry], interval: float = 30):
        self.registries = registries
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    def sweep_once(self, now: Optional[float] = None) -> Dict[str, int]:
        removed = {name: reg.sweep(now) for name, reg in self.registries.items()}
        if any(removed.values()):
            logger.info("evicted %s", " ".join(f"{k}={v}" for k, v in removed.items()))
        return removed

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("sweep failed")

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
