import logging

from src.infrastructure.kafka.handlers import HANDLERS, dispatch, parse_event

from shared.constants import Topics


def _payload(event_type: str, entity_type: str = "ORDER", entity_id=1) -> dict:
    return {
        "eventType": event_type,
        "entityType": entity_type,
        "entityId": entity_id,
        "data": {},
        "timestamp": "2024-03-15T12:00:00Z",
        "source": "analytics-api",
    }


def test_every_topic_has_handlers():
    topics = {topic for topic, _ in HANDLERS}
    assert topics == set(Topics.all_topics())


def test_known_event_is_handled():
    assert dispatch(Topics.ORDER_EVENTS, _payload("ORDER_CREATED")) is True
    assert (
        dispatch(Topics.ALERT_EVENTS, _payload("ALERT_READ", "ALERT", 4)) is True
    )
    assert (
        dispatch(
            Topics.ANALYTICS_EVENTS,
            _payload("REPORT_GENERATED", "ANALYTICS", None),
        )
        is True
    )


def test_unknown_event_type_logs_warning(caplog):
    with caplog.at_level(logging.WARNING):
        handled = dispatch(Topics.ORDER_EVENTS, _payload("ORDER_TELEPORTED"))
    assert handled is False
    assert any(r.getMessage() == "unknown_event_type" for r in caplog.records)


def test_event_on_wrong_topic_is_unknown():
    assert dispatch(Topics.PRODUCT_EVENTS, _payload("ORDER_CREATED")) is False


def test_malformed_payloads_are_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        assert dispatch(Topics.ORDER_EVENTS, b"\xff not json") is False
        assert dispatch(Topics.ORDER_EVENTS, {"entityType": "ORDER"}) is False
    assert [
        r.getMessage() for r in caplog.records if r.levelno == logging.WARNING
    ] == ["malformed_event_skipped", "malformed_event_skipped"]
    assert parse_event(Topics.ORDER_EVENTS, None) is None
