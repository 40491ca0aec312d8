"""In-process notification that a building's valuation changed.

Writes that touch lease terms, factor overrides or use periods publish a
``ValuationChanged`` event. Subscribers (e.g. a portfolio roll-up cache)
decide what to invalidate; the engine itself caches nothing.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValuationChanged:
    """A building's valuation inputs were changed by a successful write."""

    building_id: str
    reason: str
    timestamp: float = field(default_factory=time.time)


Subscriber = Callable[[ValuationChanged], None]


class EventBus:
    """Synchronous pub/sub for valuation change events."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: ValuationChanged) -> int:
        """Deliver an event to every subscriber.

        A failing subscriber is logged and skipped so one broken cache
        cannot undo a write that already succeeded.

        Returns:
            Number of subscribers notified successfully.
        """
        delivered = 0
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Subscriber failed handling valuation change for %s", event.building_id
                )
                continue
            delivered += 1
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
