"""Periodic liveness check-ins to an external monitor."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import CanaryConfig
from .executors import HttpFetcher

LOGGER = logging.getLogger(__name__)

CHECKIN_TIMEOUT = 5.0


class CanaryHeartbeat:
    """Pings the canary URL on its own timer, independent of message handling."""

    def __init__(self, canary: CanaryConfig, fetcher: Optional[HttpFetcher] = None) -> None:
        self._canary = canary
        self._fetcher = fetcher or HttpFetcher()
        self._task: Optional[asyncio.Task[None]] = None

    async def checkin(self) -> bool:
        result = await self._fetcher.fetch(self._canary.url, timeout=CHECKIN_TIMEOUT)
        if result.error:
            LOGGER.error("Could not connect to canary: %s", result.error)
            return False
        if not result.ok:
            LOGGER.error("Could not check in to canary: HTTP status %s", result.status)
            return False
        LOGGER.info("Canary check-in succeeded")
        return True

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._canary.interval)
            try:
                await self.checkin()
            except Exception:
                LOGGER.exception("Canary check-in crashed; retrying in %ss", self._canary.interval)
