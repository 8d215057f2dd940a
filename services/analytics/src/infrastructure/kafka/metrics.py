from shared.metrics import get_counter, get_gauge

# Outbound notifications
EVENTS_PUBLISHED_TOTAL = get_counter(
    "events_published_total",
    "Events handed to the Kafka producer.",
    service="analytics",
    labelnames=("topic",),
)
EVENTS_DROPPED_TOTAL = get_counter(
    "events_dropped_total",
    "Events dropped because the outbound queue was full.",
    service="analytics",
)
EVENT_PUBLISH_ERRORS_TOTAL = get_counter(
    "event_publish_errors_total",
    "Events the producer failed to accept (logged and discarded).",
    service="analytics",
)
EVENT_QUEUE_CURRENT_SIZE = get_gauge(
    "event_queue_current_size",
    "Current size of the outbound event queue.",
    service="analytics",
)

# Inbound consumption
EVENTS_CONSUMED_TOTAL = get_counter(
    "events_consumed_total",
    "Kafka records consumed by the event listener.",
    service="analytics",
    labelnames=("topic",),
)
