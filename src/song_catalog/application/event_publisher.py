"""Application-level event publishing contracts."""

from __future__ import annotations

import logging
from typing import Protocol

from song_catalog.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    """Port for publishing domain events."""

    async def publish(self, event: DomainEvent) -> None:
        """Publish a single event."""


class NullEventPublisher:
    """No-op publisher used when change notifications are disabled."""

    async def publish(self, event: DomainEvent) -> None:  # noqa: ARG002
        return


class CompositeEventPublisher:
    """Forward each event to several publishers; one failing does not stop the rest."""

    def __init__(self, *publishers: EventPublisher) -> None:
        self._publishers = publishers

    async def publish(self, event: DomainEvent) -> None:
        for publisher in self._publishers:
            try:
                await publisher.publish(event)
            except Exception as error:  # noqa: BLE001
                logger.warning(
                    "Event publisher failed; continuing with remaining publishers.",
                    extra={
                        "publisher": type(publisher).__name__,
                        "event_name": type(event).__name__,
                        "correlation_id": event.correlation_id,
                    },
                    exc_info=error,
                )
