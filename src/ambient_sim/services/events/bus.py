from __future__ import annotations

import logging
from typing import Callable, Dict, List, Type, TypeVar

from src.ambient_sim.domain.events import SimulatorEvent

logger = logging.getLogger("events")

E = TypeVar("E", bound=SimulatorEvent)
Handler = Callable[[E], None]


class EventBus:
    """Synchronous in-process publish/subscribe keyed by event type.

    Handlers for an event type are invoked in registration order. A failing
    handler is logged and skipped; it never prevents later handlers from
    receiving the event.
    """

    def __init__(self) -> None:
        self._handlers: Dict[type, List[Callable]] = {}

    def subscribe(self, event_type: Type[E], handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type[E], handler: Handler) -> None:
        """Remove the first registration of ``handler``; no-op if absent."""

        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return

    def publish(self, event: SimulatorEvent) -> None:
        # Snapshot so handlers added or removed mid-publish do not affect it.
        handlers = list(self._handlers.get(type(event), ()))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for event %s", handler, event.name)

    def handler_count(self, event_type: Type[E]) -> int:
        return len(self._handlers.get(event_type, ()))
