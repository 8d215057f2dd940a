from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session
from src.core.clock import utcnow
from src.core.config import Settings, settings
from src.core.errors import UpstreamUnavailableError, ValidationError
from src.core.logger import get_logger
from src.infrastructure.database.engine import Database
from src.infrastructure.redis.cache import ReadThroughCache

from shared.utils import run_blocking

T = TypeVar("T")

CENTS = Decimal("0.01")

# Largest value a BIGINT column or bound parameter can hold
MAX_SQL_INT = 2**63 - 1

logger = get_logger("analytics.services")


def to_money(value: Any) -> Decimal:
    """Quantize an aggregate to cents; a missing aggregate is zero."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class QueryService:
    """Shared plumbing for services that read the store through the cache.

    Repository work is synchronous and runs off the event loop, one session
    per call. A store that cannot be reached surfaces as
    ``UpstreamUnavailableError``.
    """

    def __init__(
        self,
        db: Database,
        cache: ReadThroughCache,
        config: Settings = settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.cache = cache
        self.config = config
        self.clock = clock

    async def _query(self, work: Callable[[Session], T]) -> T:
        def _run() -> T:
            with self.db.session_scope() as session:
                return work(session)

        try:
            return await run_blocking(_run)
        except (OperationalError, InterfaceError) as e:
            logger.error(
                "database_unavailable",
                extra={"error_type": type(e).__name__, "error": str(e.orig)},
            )
            raise UpstreamUnavailableError("database") from e

    def _check_page(self, page: int, size: int) -> None:
        if page < 0:
            raise ValidationError("page must be >= 0", field="page")
        if size < 1 or size > self.config.max_page_size:
            raise ValidationError(
                f"size must be between 1 and {self.config.max_page_size}",
                field="size",
            )
        if (page + 1) * size > MAX_SQL_INT:
            raise ValidationError("page is out of range", field="page")

    @staticmethod
    def _offset(page: int, size: int) -> int:
        return page * size
