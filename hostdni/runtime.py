from __future__ import annotations

import asyncio
from typing import Optional

from hostdni.logger import get_logger
from hostdni.metrics import record_token_rotation
from hostdni.security import TokenManager

_logger = get_logger("runtime")


class RuntimeController:
    """Owns background loops; request handlers only touch the shared TokenManager."""

    def __init__(self, tokens: TokenManager, *, rotation_seconds: Optional[float] = None) -> None:
        self._tokens = tokens
        self._interval = float(rotation_seconds or tokens.rotation_seconds)
        self._stop = asyncio.Event()
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._tasks.append(asyncio.create_task(self._token_rotation_loop()))
        _logger.info(
            "runtime.tokens.start",
            "Started token rotation loop",
            interval_seconds=self._interval,
        )

    async def stop(self) -> None:
        self._stop.set()
        if not self._tasks:
            return
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        _logger.info("runtime.stop", "Stopped runtime controller")

    async def _token_rotation_loop(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
                return
            except asyncio.TimeoutError:
                pass
            fresh = self._tokens.rotate()
            record_token_rotation()
            _logger.info("runtime.tokens.rotate", "API token rotated", token=fresh)
