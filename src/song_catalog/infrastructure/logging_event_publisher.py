"""Simple logging-backed implementation of the event publisher."""

from __future__ import annotations

import logging

from song_catalog.domain.events import DomainEvent

LOGGER = logging.getLogger("song_catalog.events")


class LoggingEventPublisher:
    """Emit event payload summaries to structured logs."""

    async def publish(self, event: DomainEvent) -> None:
        LOGGER.info(
            "domain_event_emitted",
            extra={
                "event_name": type(event).__name__,
                "event_type": event.event_type,
                "correlation_id": event.correlation_id,
                "song_id": event.payload_summary.get("songId"),
                "occurred_at": event.occurred_at.isoformat(),
            },
        )
