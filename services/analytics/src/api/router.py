from fastapi import APIRouter

from .endpoints import alerts, auth, dashboard, health, products

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(dashboard.router)
api_router.include_router(products.router)
api_router.include_router(alerts.router)
api_router.include_router(auth.router)
