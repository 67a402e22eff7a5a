from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Set

logger = logging.getLogger("simulator")


class Scheduler:
    """Deferred and periodic work on the running asyncio event loop.

    One-shot callbacks are tracked until they fire so they can be cancelled
    as a unit on shutdown. Periodic work runs as an asyncio task which the
    caller cancels to stop it.
    """

    def __init__(self) -> None:
        self._pending: Set[asyncio.TimerHandle] = set()
        self._periodic: Set[asyncio.Task] = set()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        handle: Optional[asyncio.TimerHandle] = None

        def _run() -> None:
            self._pending.discard(handle)  # type: ignore[arg-type]
            callback(*args)

        handle = loop.call_later(max(delay, 0.0), _run)
        self._pending.add(handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], Any]) -> asyncio.Task:
        """Invoke ``callback`` every ``interval`` seconds, first after one interval."""

        async def _repeat() -> None:
            while True:
                await asyncio.sleep(interval)
                try:
                    callback()
                except Exception:
                    logger.exception("Periodic callback %r failed", callback)

        task = asyncio.get_running_loop().create_task(_repeat())
        self._periodic.add(task)
        task.add_done_callback(self._periodic.discard)
        return task

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def cancel_all(self) -> None:
        for handle in list(self._pending):
            handle.cancel()
        self._pending.clear()
        for task in list(self._periodic):
            task.cancel()
