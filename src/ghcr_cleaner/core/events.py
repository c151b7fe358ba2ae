"""Synchronous delivery of cleanup events to their subscribers.

The orchestrator and the deletion executor emit; CLI formatters subscribe.
A bus without subscribers is the quiet default for library use.
"""

from collections.abc import Callable
from typing import Any

from ghcr_cleaner.contracts.events import CleanupEvent


class EventBus:
    """Routes each cleanup event to the handlers registered for its exact type.

    Handlers run in subscription order; their exceptions propagate to the
    emitter.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def emit(self, event: CleanupEvent) -> None:
        for handler in self._subscribers.get(type(event), ()):
            handler(event)
