import asyncio
import fnmatch
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import fakeredis.aioredis
import pytest
from src.core.config import Settings
from src.infrastructure.database.engine import Database
from src.infrastructure.database.models import Customer, Order, OrderItem, Product
from src.infrastructure.kafka.notifier import EventNotifier
from src.infrastructure.redis.cache import ReadThroughCache
from src.schemas.event_message import EventMessage

FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0)


class RecordingSender:
    """Stands in for the Kafka producer and keeps every message it is given."""

    def __init__(self, fail: bool = False):
        self.sent: List[Tuple[str, EventMessage]] = []
        self.fail = fail
        self.flushed = 0

    def send(self, topic: str, event: EventMessage) -> None:
        if self.fail:
            raise RuntimeError("broker down")
        self.sent.append((topic, event))

    def flush(self, timeout: float = 5.0) -> int:
        self.flushed += 1
        return 0

    def event_types(self) -> List[str]:
        return [event.event_type for _, event in self.sent]


class MemoryRedis:
    """Loop-agnostic async Redis double for the HTTP tests."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    async def scan_iter(self, match: Optional[str] = None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatch(key, match):
                yield key

    async def delete(self, *keys):
        return sum(1 for k in keys if self.data.pop(k, None) is not None)

    async def ping(self):
        return True

    async def aclose(self):
        return None


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        app_environment="testing",
        bcrypt_rounds=4,
        event_consumer_enabled=False,
    )


@pytest.fixture
def db(test_settings):
    database = Database.from_settings(test_settings)
    database.create_schema()
    yield database
    database.dispose()


@pytest.fixture
def redis_client():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def cache(redis_client, test_settings):
    return ReadThroughCache.from_settings(redis_client, test_settings)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def notifier(sender):
    return EventNotifier(sender, max_queue_size=100)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def seed(db):
    """Persist ORM objects and return them with their ids populated."""

    def _seed(*objects):
        with db.session_scope() as session:
            session.add_all(objects)
            session.flush()
        return objects

    return _seed


@pytest.fixture
def make_product():
    counter = {"n": 0}

    def _make(name: str = "Widget", inventory: int = 10, **kwargs) -> Product:
        counter["n"] += 1
        fields = dict(
            name=name,
            sku=f"SKU-{counter['n']:04d}",
            price=Decimal("10.00"),
            cost_price=Decimal("4.00"),
            inventory=inventory,
            rating=Decimal("4.50"),
            review_count=3,
            is_active=True,
        )
        fields.update(kwargs)
        return Product(**fields)

    return _make


@pytest.fixture
def customer(seed) -> Customer:
    (c,) = seed(Customer(first_name="Ada", last_name="Lovelace", email="ada@x.io"))
    return c


@pytest.fixture
def make_order(customer):
    def _make(
        amount: str,
        order_date: datetime = FIXED_NOW,
        items: Optional[List[Tuple[Product, int, str]]] = None,
    ) -> Order:
        order = Order(
            customer_id=customer.id,
            total_amount=Decimal(amount),
            status="delivered",
            order_date=order_date,
        )
        for product, quantity, unit_price in items or []:
            order.items.append(
                OrderItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=Decimal(unit_price),
                )
            )
        return order

    return _make


@pytest.fixture
def client(db, test_settings, notifier):
    """TestClient over the real app with state wired to test doubles.

    The lifespan is not run; ``app.state`` is populated directly.
    """
    from fastapi.testclient import TestClient
    from src.main import app

    app.state.db = db
    app.state.cache = ReadThroughCache.from_settings(MemoryRedis(), test_settings)
    app.state.notifier = notifier
    app.state.ready_event = asyncio.Event()
    app.state.ready_event.set()
    yield TestClient(app)
    for name in ("db", "cache", "notifier", "ready_event"):
        delattr(app.state, name)
