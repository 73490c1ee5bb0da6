"""In-process change feed for lead rows."""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict

from ..schemas.leads import LeadRead

logger = logging.getLogger(__name__)


class LeadChangeKind(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(slots=True)
class LeadChange:
    """A single row change; ``lead`` is None for deletions."""

    kind: LeadChangeKind
    lead_id: str
    lead: LeadRead | None = None

    def to_message(self) -> dict:
        return {
            "type": "lead_changed",
            "kind": self.kind.value,
            "lead_id": self.lead_id,
            "lead": self.lead.model_dump(mode="json") if self.lead is not None else None,
        }


Subscriber = Callable[[LeadChange], Awaitable[None]]


class LeadChangeBroker:
    """Fan out lead changes to board sessions and websocket listeners."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, Subscriber] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, subscriber_id: str, callback: Subscriber) -> None:
        async with self._lock:
            self._subscribers[subscriber_id] = callback

    async def unsubscribe(self, subscriber_id: str) -> None:
        async with self._lock:
            self._subscribers.pop(subscriber_id, None)

    def subscriber_ids(self) -> list[str]:
        return list(self._subscribers)

    async def publish(self, change: LeadChange) -> None:
        """Deliver a change to every subscriber; one failure never blocks the rest."""

        async with self._lock:
            subscribers = list(self._subscribers.items())

        if not subscribers:
            return

        results = await asyncio.gather(
            *(callback(change) for _, callback in subscribers), return_exceptions=True
        )
        for (subscriber_id, _), result in zip(subscribers, results):
            if isinstance(result, Exception):
                logger.warning("Lead change delivery to %s failed: %s", subscriber_id, result)


broker = LeadChangeBroker()
