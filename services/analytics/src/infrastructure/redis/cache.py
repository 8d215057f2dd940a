from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError
from redis.asyncio import Redis
from redis.exceptions import RedisError
from src.core.config import Settings
from src.core.logger import get_logger

from shared.constants import CacheNamespaces

from .keys import entry_name
from .metrics import (
    CACHE_ERRORS_TOTAL,
    CACHE_EVICTIONS_TOTAL,
    CACHE_HITS_TOTAL,
    CACHE_MISSES_TOTAL,
)

T = TypeVar("T")

logger = get_logger("analytics.cache")

# Failures that mean "cache unreachable", never fatal to a request
CACHE_FAILURES = (RedisError, OSError)


class ReadThroughCache:
    """Namespaced JSON cache over Redis with per-namespace TTLs.

    Notes:
        - Entry keys are ``{prefix}:{namespace}:{tag}:{digest}``; the digest
          covers every argument that shapes the cached value.
        - A ``None`` TTL stores the entry until the namespace is evicted.
        - Redis being down never fails a caller: reads miss, writes and
          evictions are skipped, and the failure is logged and counted.
    """

    def __init__(
        self,
        redis: Redis,
        ttls: Dict[str, Optional[int]],
        prefix: str = "analytics",
    ):
        self.r = redis
        self.ttls = dict(ttls)
        self.prefix = prefix

    @classmethod
    def from_settings(cls, redis: Redis, settings: Settings) -> "ReadThroughCache":
        return cls(
            redis,
            ttls={
                CacheNamespaces.DASHBOARD_METRICS: (
                    settings.cache_ttl_dashboard_metrics_seconds
                ),
                CacheNamespaces.PRODUCT_METRICS: (
                    settings.cache_ttl_product_metrics_seconds
                ),
                CacheNamespaces.SALES_DATA: settings.cache_ttl_sales_data_seconds,
                CacheNamespaces.ALERTS: None,
            },
            prefix=settings.cache_key_prefix,
        )

    def ttl_for(self, namespace: str) -> Optional[int]:
        if namespace not in self.ttls:
            raise ValueError(f"Unknown cache namespace: {namespace}")
        return self.ttls[namespace]

    def _key(self, namespace: str, key: str) -> str:
        return CacheNamespaces.entry_key(self.prefix, namespace, key)

    async def get(self, namespace: str, key: str) -> Optional[str]:
        full_key = self._key(namespace, key)
        try:
            return await self.r.get(full_key)
        except CACHE_FAILURES as e:
            CACHE_ERRORS_TOTAL.labels(namespace=namespace, operation="get").inc()
            logger.warning(
                "cache_get_failed",
                extra={"namespace": namespace, "entry": key, "error": str(e)},
            )
            return None

    async def put(
        self, namespace: str, key: str, value: str, ttl: Optional[int] = None
    ) -> bool:
        full_key = self._key(namespace, key)
        expiry = ttl if ttl is not None else self.ttl_for(namespace)
        try:
            await self.r.set(full_key, value, ex=expiry)
            return True
        except CACHE_FAILURES as e:
            CACHE_ERRORS_TOTAL.labels(namespace=namespace, operation="put").inc()
            logger.warning(
                "cache_put_failed",
                extra={"namespace": namespace, "entry": key, "error": str(e)},
            )
            return False

    async def evict_all(self, namespace: str) -> int:
        """Drop every entry of ``namespace``; returns how many were removed."""
        pattern = CacheNamespaces.namespace_pattern(self.prefix, namespace)
        try:
            keys = [k async for k in self.r.scan_iter(match=pattern)]
            removed = await self.r.delete(*keys) if keys else 0
        except CACHE_FAILURES as e:
            CACHE_ERRORS_TOTAL.labels(namespace=namespace, operation="evict").inc()
            logger.error(
                "cache_evict_failed",
                extra={"namespace": namespace, "error": str(e)},
            )
            return 0
        CACHE_EVICTIONS_TOTAL.labels(namespace=namespace).inc(removed)
        logger.debug(
            "cache_namespace_evicted",
            extra={"namespace": namespace, "removed": removed},
        )
        return removed

    async def get_or_compute(
        self,
        namespace: str,
        tag: str,
        params: Dict[str, Any],
        loader: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
    ) -> T:
        """Return the cached value for ``(tag, params)`` or compute and store it."""
        key = entry_name(tag, params)
        cached = await self.get(namespace, key)
        if cached is not None:
            try:
                value = adapter.validate_json(cached)
            except SchemaError:
                logger.warning(
                    "cache_entry_unreadable",
                    extra={"namespace": namespace, "entry": key},
                )
            else:
                CACHE_HITS_TOTAL.labels(namespace=namespace).inc()
                return value

        CACHE_MISSES_TOTAL.labels(namespace=namespace).inc()
        value = await loader()
        await self.put(namespace, key, adapter.dump_json(value, by_alias=True).decode())
        return value

    async def ping(self) -> bool:
        return bool(await self.r.ping())

    async def close(self) -> None:
        await self.r.aclose()
