from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends
from src.api.dependencies import get_dashboard_service
from src.domain.models import DashboardMetrics, SalesChartPoint
from src.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardMetricsResponse(DashboardMetrics):
    formatted_total_sales: str


def format_currency(amount: Decimal) -> str:
    return f"${amount:,.2f}"


@router.get("/metrics", response_model=DashboardMetricsResponse)
async def dashboard_metrics(svc: DashboardService = Depends(get_dashboard_service)):
    metrics = await svc.get_dashboard_metrics()
    return DashboardMetricsResponse(
        **metrics.model_dump(),
        formatted_total_sales=format_currency(metrics.total_sales),
    )


@router.get("/sales-chart", response_model=List[SalesChartPoint])
async def sales_chart(svc: DashboardService = Depends(get_dashboard_service)):
    return await svc.get_sales_chart_data()
