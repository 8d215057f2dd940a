from fastapi import Depends, Request
from src.infrastructure.database.engine import Database
from src.infrastructure.kafka.notifier import EventNotifier
from src.infrastructure.redis.cache import ReadThroughCache
from src.services.alert_service import AlertService
from src.services.auth_service import AuthService
from src.services.dashboard_service import DashboardService
from src.services.product_service import ProductService


def get_db(request: Request) -> Database:
    return request.app.state.db  # type: ignore[return-value]


def get_cache(request: Request) -> ReadThroughCache:
    return request.app.state.cache  # type: ignore[return-value]


def get_notifier(request: Request) -> EventNotifier:
    return request.app.state.notifier  # type: ignore[return-value]


def get_dashboard_service(
    db: Database = Depends(get_db), cache: ReadThroughCache = Depends(get_cache)
) -> DashboardService:
    return DashboardService(db, cache)


def get_product_service(
    db: Database = Depends(get_db), cache: ReadThroughCache = Depends(get_cache)
) -> ProductService:
    return ProductService(db, cache)


def get_alert_service(
    db: Database = Depends(get_db),
    cache: ReadThroughCache = Depends(get_cache),
    notifier: EventNotifier = Depends(get_notifier),
) -> AlertService:
    return AlertService(db, cache, notifier)


def get_auth_service(db: Database = Depends(get_db)) -> AuthService:
    return AuthService(db)
