import asyncio
import json
from typing import Any, Callable, Optional

from aiokafka import AIOKafkaConsumer
from src.core.config import Settings, settings
from src.core.logger import get_logger

from .handlers import dispatch
from .metrics import EVENTS_CONSUMED_TOTAL

logger = get_logger("analytics.kafka.consumer")


def _deserialize(value: Optional[bytes]) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        # Handed to dispatch as-is so it is logged and skipped there
        return value


def build_consumer(cfg: Settings = settings) -> AIOKafkaConsumer:
    return AIOKafkaConsumer(
        *cfg.event_consumer_topics,
        bootstrap_servers=cfg.kafka_bootstrap_servers,
        group_id=cfg.event_consumer_group,
        enable_auto_commit=True,
        auto_offset_reset=cfg.event_consume_from,
        value_deserializer=_deserialize,
    )


async def start_consumer_with_retries(
    consumer: Any,
    attempts: int = 7,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
) -> None:
    """Start the Kafka consumer with exponential backoff.

    Raises RuntimeError after exhausting retries.
    """
    delay = initial_delay
    for attempt in range(1, attempts + 1):
        try:
            await consumer.start()
            logger.info(
                "kafka_consumer_started",
                extra={
                    "topics": list(settings.event_consumer_topics),
                    "attempt": attempt,
                },
            )
            return
        except Exception as e:  # noqa
            logger.warning(
                "kafka_consumer_start_failed",
                extra={"attempt": attempt, "error": str(e), "retry_in": delay},
            )
            if attempt < attempts:
                await asyncio.sleep(delay)
                delay = min(delay * 2, max_delay)
    raise RuntimeError("Kafka consumer could not start after retries")


async def consume_loop(
    app_state: Any,
    consumer_factory: Callable[[], Any] = build_consumer,
) -> None:
    """Consume the event topics and hand each record to its handler.

    Sets ``app_state.consumer_ready`` once the consumer has joined the group.
    A record that fails in its handler is logged and skipped.
    """
    consumer = consumer_factory()
    await start_consumer_with_retries(consumer)
    ready = getattr(app_state, "consumer_ready", None)
    if ready is not None:
        ready.set()
    try:
        async for msg in consumer:
            EVENTS_CONSUMED_TOTAL.labels(topic=msg.topic).inc()
            try:
                dispatch(msg.topic, msg.value)
            except Exception:  # noqa
                logger.exception(
                    "event_handler_failed",
                    extra={"topic": msg.topic, "offset": msg.offset},
                )
    except asyncio.CancelledError:  # graceful cancellation
        logger.info("consume_loop_cancelled")
        raise
    except Exception as e:  # noqa
        logger.exception("consume_loop_fatal", extra={"error": str(e)})
        raise
    finally:
        await consumer.stop()
        logger.info("kafka_consumer_stopped")
