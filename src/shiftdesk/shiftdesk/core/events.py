from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityChange:
    """A row-level change pushed to live viewers (shift boards, clocks)."""

    company_id: int
    entity: str
    action: str
    entity_id: Optional[int] = None


Subscriber = Callable[[EntityChange], None]


class EventBus:
    """In-process fan-out of entity changes.

    A transport adapter (websocket, pub/sub) subscribes here; the store stays the
    source of truth, so a failing subscriber never affects the write.
    """

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def publish(self, change: EntityChange) -> None:
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                _logger.exception("entity change subscriber failed for %s", change)
