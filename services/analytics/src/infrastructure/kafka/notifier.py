"""Fire-and-forget event notifications.

Request handlers call ``publish`` which only enqueues onto a bounded queue; a
dedicated sender task drains the queue into the Kafka producer on a worker
thread, so a producer stuck on a full local buffer never stalls the loop.
Delivery is at-most-once: a full queue drops the event, a producer failure is
logged and the event discarded. Neither ever reaches the caller.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Protocol, Tuple

from src.core.logger import get_logger
from src.schemas.event_message import EventMessage

from shared.constants import Topics
from shared.utils import run_blocking

from .metrics import (
    EVENT_PUBLISH_ERRORS_TOTAL,
    EVENT_QUEUE_CURRENT_SIZE,
    EVENTS_DROPPED_TOTAL,
    EVENTS_PUBLISHED_TOTAL,
)

logger = get_logger("analytics.kafka.notifier")


class MessageSender(Protocol):
    def send(self, topic: str, event: EventMessage) -> None: ...

    def flush(self, timeout: float = ...) -> int: ...


class EventNotifier:
    def __init__(
        self,
        sender: MessageSender,
        max_queue_size: int = 1000,
        source: str = "analytics-api",
        poll_interval_s: float = 0.25,
        flush_timeout_s: float = 5.0,
    ):
        self.sender = sender
        self.source = source
        self.poll_interval_s = poll_interval_s
        self.flush_timeout_s = flush_timeout_s
        self.queue: asyncio.Queue[Tuple[str, EventMessage]] = asyncio.Queue(
            maxsize=max_queue_size
        )
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # Publishing (called from request handlers)
    def publish(
        self,
        event_type: str,
        entity_type: str,
        entity_id: Optional[int],
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Enqueue an event without blocking; False when it had to be dropped."""
        event = EventMessage(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            data=data or {},
            source=self.source,
        )
        topic = Topics.for_entity(entity_type)
        try:
            self.queue.put_nowait((topic, event))
        except asyncio.QueueFull:
            EVENTS_DROPPED_TOTAL.inc()
            logger.warning(
                "event_dropped_queue_full",
                extra={
                    "topic": topic,
                    "event_type": event_type,
                    "entity_id": entity_id,
                },
            )
            return False
        EVENT_QUEUE_CURRENT_SIZE.set(self.queue.qsize())
        return True

    def send_order_event(self, event_type: str, order_id: int, data: Dict[str, Any]):
        return self.publish(event_type, "ORDER", order_id, data)

    def send_product_event(
        self, event_type: str, product_id: int, data: Dict[str, Any]
    ):
        return self.publish(event_type, "PRODUCT", product_id, data)

    def send_alert_event(self, event_type: str, alert_id: int, data: Dict[str, Any]):
        return self.publish(event_type, "ALERT", alert_id, data)

    def send_analytics_event(self, event_type: str, data: Dict[str, Any]):
        return self.publish(event_type, "ANALYTICS", None, data)

    # Background sender
    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._sender_loop())
        logger.info("event_notifier_started")

    async def stop(self) -> None:
        """Drain whatever is queued, stop the sender and flush the producer."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
        else:
            # Never started: still deliver what was queued
            await self._drain()
        await run_blocking(self.sender.flush, self.flush_timeout_s)
        logger.info("event_notifier_stopped")

    async def _sender_loop(self) -> None:
        while not self._stop_event.is_set() or not self.queue.empty():
            try:
                topic, event = await asyncio.wait_for(
                    self.queue.get(), self.poll_interval_s
                )
            except asyncio.TimeoutError:
                continue
            await run_blocking(self._deliver, topic, event)
            self.queue.task_done()

    async def _drain(self) -> None:
        while not self.queue.empty():
            topic, event = self.queue.get_nowait()
            await run_blocking(self._deliver, topic, event)
            self.queue.task_done()

    def _deliver(self, topic: str, event: EventMessage) -> None:
        EVENT_QUEUE_CURRENT_SIZE.set(self.queue.qsize())
        try:
            self.sender.send(topic, event)
        except Exception as e:
            EVENT_PUBLISH_ERRORS_TOTAL.inc()
            logger.error(
                "event_publish_failed",
                extra={
                    "topic": topic,
                    "event_type": event.event_type,
                    "entity_id": event.entity_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return
        EVENTS_PUBLISHED_TOTAL.labels(topic=topic).inc()
