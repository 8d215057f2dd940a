import asyncio
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator
from src.api.errors import register_exception_handlers
from src.api.router import api_router
from src.core.config import settings
from src.core.logger import configure_logging, get_logger
from src.infrastructure.database.engine import Database
from src.infrastructure.kafka.consumer import consume_loop
from src.infrastructure.kafka.notifier import EventNotifier
from src.infrastructure.kafka.producer import EventProducer
from src.infrastructure.redis.cache import ReadThroughCache

from shared.utils import retry_async, run_blocking

# Configure logging once and get service logger
configure_logging()
logger = get_logger("analytics.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("analytics_service_starting")
    app.state.db = Database.from_settings(settings)
    if settings.database_create_schema:
        await run_blocking(app.state.db.create_schema)
    app.state.redis = await _init_redis_with_retry()
    app.state.cache = ReadThroughCache.from_settings(app.state.redis, settings)
    app.state.producer = EventProducer()
    app.state.notifier = EventNotifier(
        app.state.producer,
        max_queue_size=settings.event_queue_max_size,
        source=settings.event_source,
        poll_interval_s=settings.event_sender_poll_interval_ms / 1000,
        flush_timeout_s=settings.event_producer_flush_timeout_seconds,
    )
    app.state.notifier.start()
    app.state.consumer_ready = asyncio.Event()
    app.state.consumer_task = None
    if settings.event_consumer_enabled:
        app.state.consumer_task = asyncio.create_task(consume_loop(app.state))
    app.state.ready_event = asyncio.Event()
    app.state.ready_event.set()
    try:
        yield
    finally:
        logger.info("analytics_service_stopping")
        app.state.ready_event.clear()
        task = app.state.consumer_task
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:  # expected during shutdown
                logger.debug("consumer_task_cancelled")
            except Exception:  # noqa
                logger.debug("consumer_task_non_critical_exit", exc_info=True)
        await app.state.notifier.stop()
        await app.state.cache.close()
        app.state.db.dispose()


app = FastAPI(title="E-commerce Analytics API", version="0.1.0", lifespan=lifespan)
register_exception_handlers(app)
app.include_router(api_router)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
    inprogress_name="analytics_inprogress",
    inprogress_labels=True,
)
instrumentator.instrument(app)


async def _init_redis_with_retry() -> redis.Redis:
    """Connect to Redis; when it stays down keep the client and run uncached."""

    def _client() -> redis.Redis:
        return redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            decode_responses=True,
        )

    async def _connect():
        r = _client()
        try:
            await r.ping()
        except Exception:
            await r.aclose()
            raise
        return r

    async def _on_retry(attempt: int, exc: BaseException, sleep_for: float):
        logger.warning(
            "redis_connect_retry",
            extra={
                "attempt": attempt,
                "error": str(exc),
                "sleep_for": round(sleep_for, 2),
            },
        )

    try:
        r = await retry_async(
            _connect,
            retries=settings.redis_connect_retries,
            base_delay=0.5,
            max_delay=8.0,
            jitter=0.2,
            on_retry=_on_retry,
        )
    except Exception as e:  # noqa
        logger.error("redis_unavailable_running_uncached", extra={"error": str(e)})
        return _client()
    logger.info("redis_connected")
    return r


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
