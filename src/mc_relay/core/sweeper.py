"""Background task that drops expired verification codes on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from mc_relay.core.codes import VerificationCodeStore

logger = logging.getLogger(__name__)


class CodeSweeper:
    """
    Periodically calls ``VerificationCodeStore.sweep()``.

    Runs independently of request traffic on the current event loop. The
    sweep shares the store's lock with ``redeem()``.
    """

    def __init__(self, store: VerificationCodeStore, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="code-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            removed = self.store.sweep()
            if removed:
                logger.info("Expired %d verification code(s)", removed)
