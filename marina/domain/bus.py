"""Synchronous in-process publish/subscribe bus for marina domain events."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

from marina.observability.logging import get_logger

logger = get_logger(__name__)


class EventBus:
    """Delivers each published event to the handlers subscribed to its type.

    Delivery happens inline, in subscription order. A handler that raises
    stops delivery and the error propagates to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Any) -> None:
        handlers = self._subscribers.get(type(event), [])
        logger.debug(
            "publishing domain event",
            extra={
                "extra_fields": {
                    "event_type": type(event).__name__,
                    "handler_count": len(handlers),
                }
            },
        )
        for handler in list(handlers):
            handler(event)
