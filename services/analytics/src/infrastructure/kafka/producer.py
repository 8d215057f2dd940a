import time

from confluent_kafka import KafkaException, Producer
from src.core.config import settings
from src.core.errors import PublishFailure
from src.core.logger import get_logger
from src.schemas.event_message import EventMessage

logger = get_logger("analytics.kafka.producer")

# Local buffer retries before giving up on a single message
_BUFFER_RETRIES = 50


class EventProducer:
    def __init__(self):
        self.producer = Producer(
            {
                "bootstrap.servers": settings.kafka_bootstrap_servers,
                "client.id": settings.otel_service_name,
                "acks": "all",
                "linger.ms": 20,
            }
        )

    def _delivery_report(self, err, msg):
        if err:
            logger.error("kafka_delivery_failed", extra={"error": str(err)})
        else:
            logger.debug(
                "kafka_delivery_success",
                extra={
                    "topic": msg.topic(),
                    "partition": msg.partition(),
                    "offset": msg.offset(),
                },
            )

    def send(self, topic: str, event: EventMessage) -> None:
        """Hand ``event`` to the local producer queue.

        Raises PublishFailure when the message cannot be queued; delivery
        itself is reported asynchronously through ``_delivery_report``.
        """
        payload = event.model_dump_json(by_alias=True).encode("utf-8")
        key = event.message_key.encode("utf-8")

        for attempt in range(_BUFFER_RETRIES):
            try:
                self.producer.produce(
                    topic=topic,
                    key=key,
                    value=payload,
                    callback=self._delivery_report,
                )
                break
            except BufferError:
                self.producer.poll(0)
                if attempt % 10 == 0:
                    logger.debug(
                        "producer_buffer_full_retrying",
                        extra={"attempt": attempt + 1, "topic": topic},
                    )
                time.sleep(0.001)
            except KafkaException as e:
                logger.error(
                    "kafka_produce_error",
                    extra={
                        "topic": topic,
                        "event_type": event.event_type,
                        "error_code": str(e.args[0].code()),
                        "retriable": e.args[0].retriable(),
                    },
                )
                raise PublishFailure(topic, f"Kafka produce error: {e}") from e
        else:
            raise PublishFailure(topic, "producer queue full")

        self.producer.poll(0)
        logger.info(
            "event_sent",
            extra={"topic": topic, "event_type": event.event_type},
        )

    def flush(self, timeout: float = 5.0):
        """Flush outstanding messages"""
        remaining = self.producer.flush(timeout=timeout)
        if remaining > 0:
            logger.warning(
                "producer_flush_remaining", extra={"remaining_messages": remaining}
            )
        return remaining
