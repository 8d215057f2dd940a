from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError
from src.core.errors import UpstreamUnavailableError
from src.services.dashboard_service import DashboardService
from src.services.product_service import ProductService


@pytest.fixture
def unreachable_db(db, monkeypatch):
    @contextmanager
    def refuse():
        raise OperationalError(
            "SELECT 1", {}, ConnectionRefusedError("connection refused")
        )
        yield  # pragma: no cover

    monkeypatch.setattr(db, "session_scope", refuse)
    return db


@pytest.mark.asyncio
async def test_dashboard_raises_upstream_unavailable(unreachable_db, cache, clock):
    service = DashboardService(unreachable_db, cache, clock=clock)
    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await service.get_dashboard_metrics()
    assert exc_info.value.upstream == "database"


@pytest.mark.asyncio
async def test_failed_load_is_not_cached(unreachable_db, cache, redis_client):
    service = ProductService(unreachable_db, cache)
    with pytest.raises(UpstreamUnavailableError):
        await service.get_low_stock_products(5)
    assert await redis_client.keys("*") == []


def test_store_outage_is_503_over_http(client, unreachable_db):
    resp = client.get("/dashboard/metrics")
    assert resp.status_code == 503
    assert resp.json() == {
        "error": "UPSTREAM_UNAVAILABLE",
        "message": "database is unavailable",
    }
