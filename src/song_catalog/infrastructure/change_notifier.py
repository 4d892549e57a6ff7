"""Real-time change-notification fan-out to live subscribers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable
from uuid import uuid4

from song_catalog.domain.errors import DeliveryFailed
from song_catalog.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Sender = Callable[[dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class SubscriberHandle:
    subscriber_id: str


class ChangeNotifier:
    """Registry of subscriber send capabilities with best-effort broadcast.

    ``publish`` schedules delivery in the background so callers never wait on
    slow subscribers. Each broadcast iterates a copy of the registry, so
    subscribing or unsubscribing mid-broadcast is safe. A subscriber whose send
    fails or times out is dropped; delivery to the others continues.
    """

    def __init__(self, delivery_timeout_seconds: float = 5.0) -> None:
        self._delivery_timeout_seconds = delivery_timeout_seconds
        self._subscribers: dict[SubscriberHandle, Sender] = {}
        self._pending: set[asyncio.Task[int]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, sender: Sender) -> SubscriberHandle:
        handle = SubscriberHandle(subscriber_id=uuid4().hex)
        self._subscribers[handle] = sender
        logger.info("Change feed subscriber registered", extra={"subscriber_id": handle.subscriber_id})
        return handle

    def unsubscribe(self, handle: SubscriberHandle) -> None:
        if self._subscribers.pop(handle, None) is not None:
            logger.info("Change feed subscriber removed", extra={"subscriber_id": handle.subscriber_id})

    async def publish(self, event: DomainEvent) -> None:
        task = asyncio.create_task(self.broadcast(event.to_message()))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Send ``message`` to every current subscriber; return the delivered count."""

        targets = list(self._subscribers.items())
        if not targets:
            return 0
        results = await asyncio.gather(
            *(self._deliver(handle, sender, message) for handle, sender in targets)
        )
        return sum(results)

    async def drain(self) -> None:
        """Wait for scheduled broadcasts to finish."""

        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _deliver(self, handle: SubscriberHandle, sender: Sender, message: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(sender(message), timeout=self._delivery_timeout_seconds)
        except Exception as error:  # noqa: BLE001
            failure = DeliveryFailed(f"Could not deliver {message.get('type')} to subscriber")
            logger.warning(
                "Dropping change feed subscriber after failed delivery.",
                extra={
                    "subscriber_id": handle.subscriber_id,
                    "code": failure.code,
                    "event_type": message.get("type"),
                },
                exc_info=error,
            )
            self.unsubscribe(handle)
            return False
        return True
