"""
In-process implementation of EventPublisher.
"""

import logging
from typing import List, Sequence, Type, TypeVar

from shop.events import DomainEvent
from shop.repositories import EventHandler, EventPublisher

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=DomainEvent)


class MemoryEventPublisher(EventPublisher):
    """
    Records every published event in order and hands each one to the
    subscribed handlers, in subscription order.

    A handler that raises stops delivery of that event to later handlers
    and the error propagates to the publisher's caller. The event stays
    recorded.
    """

    def __init__(self) -> None:
        self.events: List[DomainEvent] = []
        self.handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self.handlers.append(handler)

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)
        logger.debug(
            "MemoryEventPublisher: Event recorded",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "handler_count": len(self.handlers),
            },
        )
        for handler in self.handlers:
            await handler.handle(event)

    async def publish_batch(self, events: Sequence[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    def events_of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
