"""
EventPublisher that writes each domain event to the application log.

Useful where no broker is deployed: every event becomes one structured log
record on the ``shop.events`` logger, with its JSON payload attached.
"""

import logging
from typing import Optional, Sequence

from shop.events import DomainEvent
from shop.repositories import EventPublisher


class LoggingEventPublisher(EventPublisher):
    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        level: int = logging.INFO,
    ) -> None:
        self.logger = logger or logging.getLogger("shop.events")
        self.level = level

    async def publish(self, event: DomainEvent) -> None:
        self.logger.log(
            self.level,
            "Domain event published",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
                "payload": event.model_dump_json(),
            },
        )

    async def publish_batch(self, events: Sequence[DomainEvent]) -> None:
        self.logger.log(
            self.level,
            "Publishing domain event batch",
            extra={"event_count": len(events)},
        )
        for event in events:
            await self.publish(event)
