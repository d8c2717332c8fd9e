"""Cancellable periodic refresh used by the open views."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class PeriodicRefresh(Generic[ResultT]):
    """Run ``fetch`` every ``interval`` seconds and hand the result to ``apply``.

    Only one fetch runs at a time: a tick that finds one in flight is skipped.
    Failures are logged and retried on the next tick. After :meth:`stop`,
    results of fetches still in flight are dropped instead of applied.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        fetch: Callable[[], Awaitable[ResultT]],
        apply: Callable[[ResultT], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._apply = apply
        self._task: asyncio.Task | None = None
        self._in_flight = False
        self._closed = False
        self.failures = 0
        self.completed = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop; the first tick is immediate."""

        if self._closed:
            raise RuntimeError(f"Refresh '{self.name}' was stopped")
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name=self.name)

    async def trigger(self) -> bool:
        """Refresh now unless a refresh is already running; return whether it ran."""

        if self._closed or self._in_flight:
            return False
        self._in_flight = True
        try:
            result = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception:
            self.failures += 1
            logger.warning("Refresh '%s' failed; retrying next tick", self.name, exc_info=True)
            return True
        finally:
            self._in_flight = False

        if self._closed:
            logger.debug("Dropping result of '%s' received after stop", self.name)
            return True
        if self._apply is not None:
            try:
                self._apply(result)
            except Exception:
                self.failures += 1
                logger.exception("Applying result of '%s' failed", self.name)
                return True
        self.completed += 1
        return True

    async def stop(self) -> None:
        self._closed = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        while not self._closed:
            await self.trigger()
            await asyncio.sleep(self.interval)


__all__ = ["PeriodicRefresh"]
