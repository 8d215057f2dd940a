import asyncio
import json
from types import SimpleNamespace

import pytest
from src.infrastructure.kafka.consumer import (
    _deserialize,
    consume_loop,
    start_consumer_with_retries,
)


class DummyKafkaConsumer:
    def __init__(self, start_failures: int = 0, messages=()):
        self._failures_left = start_failures
        self._messages = list(messages)
        self.start_calls = 0
        self.stopped = False

    async def start(self):
        self.start_calls += 1
        if self._failures_left > 0:
            self._failures_left -= 1
            raise RuntimeError("start failure")

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._messages:
            return self._messages.pop(0)
        raise StopAsyncIteration

    async def stop(self):
        self.stopped = True


@pytest.mark.asyncio
async def test_start_consumer_with_retries():
    dummy_consumer = DummyKafkaConsumer(start_failures=2)

    await start_consumer_with_retries(dummy_consumer, initial_delay=0)

    # Two failures + one success => three start attempts
    assert dummy_consumer.start_calls == 3


@pytest.mark.asyncio
async def test_start_consumer_gives_up():
    dummy_consumer = DummyKafkaConsumer(start_failures=10)

    with pytest.raises(RuntimeError):
        await start_consumer_with_retries(dummy_consumer, attempts=3, initial_delay=0)
    assert dummy_consumer.start_calls == 3


@pytest.mark.asyncio
async def test_consume_loop_dispatches_and_sets_ready(monkeypatch):
    from src.infrastructure.kafka import consumer as consumer_mod

    seen = []
    monkeypatch.setattr(
        consumer_mod, "dispatch", lambda topic, value: seen.append((topic, value))
    )
    messages = [
        SimpleNamespace(topic="order-events", value={"eventType": "A"}, offset=0),
        SimpleNamespace(topic="alert-events", value={"eventType": "B"}, offset=1),
    ]
    dummy_consumer = DummyKafkaConsumer(messages=messages)
    app_state = SimpleNamespace(consumer_ready=asyncio.Event())

    await consume_loop(app_state, consumer_factory=lambda: dummy_consumer)

    assert app_state.consumer_ready.is_set()
    assert [t for t, _ in seen] == ["order-events", "alert-events"]
    assert dummy_consumer.stopped is True


@pytest.mark.asyncio
async def test_handler_error_does_not_stop_loop(monkeypatch):
    from src.infrastructure.kafka import consumer as consumer_mod

    calls = []

    def flaky(topic, value):
        calls.append(value)
        if len(calls) == 1:
            raise KeyError("boom")

    monkeypatch.setattr(consumer_mod, "dispatch", flaky)
    messages = [
        SimpleNamespace(topic="order-events", value={}, offset=i) for i in range(2)
    ]
    dummy_consumer = DummyKafkaConsumer(messages=messages)

    await consume_loop(SimpleNamespace(), consumer_factory=lambda: dummy_consumer)

    assert len(calls) == 2


def test_deserialize():
    assert _deserialize(json.dumps({"a": 1}).encode()) == {"a": 1}
    assert _deserialize(None) is None
    assert _deserialize(b"\xff") == b"\xff"
