from fastapi import APIRouter, Request, Response
from src.core.logger import get_logger
from src.infrastructure.redis.cache import CACHE_FAILURES

from shared.utils import run_blocking

router = APIRouter()

logger = get_logger("analytics.health")


@router.get("/healthz")
async def healthz(request: Request):
    """Store and cache probes; only a dead store fails the check."""
    try:
        await run_blocking(request.app.state.db.ping)
    except Exception as e:
        logger.warning("health_database_down", extra={"error": str(e)})
        return Response(status_code=503, content=f"database unavailable: {e}")
    try:
        redis_ok = await request.app.state.cache.ping()
    except CACHE_FAILURES as e:
        logger.warning("health_redis_down", extra={"error": str(e)})
        redis_ok = False
    return {"status": "ok", "database": True, "redis": redis_ok}


@router.get("/readyz")
async def readyz(request: Request):
    ready = getattr(request.app.state, "ready_event", None)
    if ready is not None and ready.is_set():
        return {"status": "ready"}
    return Response(status_code=503, content="not ready")
