from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ValidationError as SchemaError
from src.core.logger import get_logger
from src.schemas.event_message import EventMessage

from shared.constants import Topics

logger = get_logger("analytics.kafka.handlers")

Handler = Callable[[EventMessage], None]


def parse_event(topic: str, payload: Any) -> Optional[EventMessage]:
    """Validate a raw record value; None (and a warning) when it is unusable."""
    if not isinstance(payload, dict):
        logger.warning(
            "malformed_event_skipped",
            extra={"topic": topic, "reason": "payload is not an object"},
        )
        return None
    try:
        return EventMessage.model_validate(payload)
    except SchemaError as e:
        logger.warning(
            "malformed_event_skipped",
            extra={"topic": topic, "reason": str(e)},
        )
        return None


def _entity_handler(action: str, entity: str) -> Handler:
    def handle(event: EventMessage) -> None:
        logger.info(
            action,
            extra={
                "entity_type": entity,
                "entity_id": event.entity_id,
                "event_source": event.source,
            },
        )

    return handle


def _analytics_handler(action: str) -> Handler:
    def handle(event: EventMessage) -> None:
        logger.info(action, extra={"event_source": event.source})

    return handle


HANDLERS: Dict[Tuple[str, str], Handler] = {
    (Topics.ORDER_EVENTS, "ORDER_CREATED"): _entity_handler(
        "order_created_processed", "ORDER"
    ),
    (Topics.ORDER_EVENTS, "ORDER_UPDATED"): _entity_handler(
        "order_updated_processed", "ORDER"
    ),
    (Topics.ORDER_EVENTS, "ORDER_COMPLETED"): _entity_handler(
        "order_completed_processed", "ORDER"
    ),
    (Topics.PRODUCT_EVENTS, "PRODUCT_CREATED"): _entity_handler(
        "product_created_processed", "PRODUCT"
    ),
    (Topics.PRODUCT_EVENTS, "PRODUCT_UPDATED"): _entity_handler(
        "product_updated_processed", "PRODUCT"
    ),
    (Topics.PRODUCT_EVENTS, "INVENTORY_LOW"): _entity_handler(
        "inventory_low_processed", "PRODUCT"
    ),
    (Topics.ALERT_EVENTS, "ALERT_CREATED"): _entity_handler(
        "alert_created_processed", "ALERT"
    ),
    (Topics.ALERT_EVENTS, "ALERT_READ"): _entity_handler(
        "alert_read_processed", "ALERT"
    ),
    (Topics.ANALYTICS_EVENTS, "METRICS_CALCULATED"): _analytics_handler(
        "metrics_calculated_processed"
    ),
    (Topics.ANALYTICS_EVENTS, "REPORT_GENERATED"): _analytics_handler(
        "report_generated_processed"
    ),
}


def dispatch(topic: str, payload: Any) -> bool:
    """Route one record to its handler. Returns True when a handler ran."""
    event = parse_event(topic, payload)
    if event is None:
        return False
    logger.info(
        "event_received",
        extra={
            "topic": topic,
            "event_type": event.event_type,
            "entity_id": event.entity_id,
        },
    )
    handler = HANDLERS.get((topic, event.event_type))
    if handler is None:
        logger.warning(
            "unknown_event_type",
            extra={"topic": topic, "event_type": event.event_type},
        )
        return False
    handler(event)
    return True
