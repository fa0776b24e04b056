"""Domain events handed to the notification collaborator.

Services publish one event per committed mutation, after the save. Delivery
(WebSocket, email, push) is the collaborator's job; ``QueueEventPublisher``
buffers events on an ``asyncio.Queue`` for an in-process consumer.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from src.pm_common.enums import MarketEventType


@dataclass(frozen=True)
class DomainEvent:
    type: MarketEventType
    aggregate_id: str  # market id or creator id
    occurred_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)


class EventPublisherProtocol(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...


class QueueEventPublisher:
    def __init__(self, maxsize: int = 0) -> None:
        self.queue: asyncio.Queue[DomainEvent] = asyncio.Queue(maxsize=maxsize)

    async def publish(self, event: DomainEvent) -> None:
        await self.queue.put(event)

    def drain(self) -> list[DomainEvent]:
        """Pop every buffered event without waiting."""
        events: list[DomainEvent] = []
        while not self.queue.empty():
            events.append(self.queue.get_nowait())
        return events
