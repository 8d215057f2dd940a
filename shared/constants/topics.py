class Topics:
    """Centralised Kafka topic definitions"""

    ORDER_EVENTS = "order-events"
    PRODUCT_EVENTS = "product-events"
    ALERT_EVENTS = "alert-events"
    ANALYTICS_EVENTS = "analytics-events"

    _BY_ENTITY = {
        "ORDER": ORDER_EVENTS,
        "PRODUCT": PRODUCT_EVENTS,
        "ALERT": ALERT_EVENTS,
        "ANALYTICS": ANALYTICS_EVENTS,
    }

    @classmethod
    def for_entity(cls, entity_type: str) -> str:
        """Resolve the topic an entity type publishes to."""
        topic = cls._BY_ENTITY.get(entity_type.upper())
        if not topic:
            raise ValueError(f"Unknown entity type: {entity_type}")
        return topic

    @classmethod
    def all_topics(cls) -> list[str]:
        return [
            cls.ORDER_EVENTS,
            cls.PRODUCT_EVENTS,
            cls.ALERT_EVENTS,
            cls.ANALYTICS_EVENTS,
        ]
