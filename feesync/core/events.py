"""In-process event bus for cross-component cart notifications.

Mirrors the page-level custom events (``cart:updated``,
``paypal-fee-changed``): any component may emit, any component may subscribe.
Handlers are awaited in subscription order; a failing handler is logged and
does not prevent the others from running.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Awaitable[None] | None]


class EventBus:
    """In-memory pub/sub keyed by event name."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, name: str, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` for ``name`` and return its unsubscribe callable."""
        self._subscribers.setdefault(name, []).append(handler)
        logger.debug(f"Subscribed to {name}, total: {len(self._subscribers[name])}")

        def _unsubscribe() -> None:
            self.unsubscribe(name, handler)

        return _unsubscribe

    def unsubscribe(self, name: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(name)
        if not handlers:
            return
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            del self._subscribers[name]

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name, []))

    async def emit(self, name: str, **detail: Any) -> None:
        handlers = list(self._subscribers.get(name, []))
        for handler in handlers:
            try:
                result = handler(**detail)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Handler error for event {name}: {e}")

    def clear(self) -> None:
        self._subscribers.clear()
