from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

from pydantic import TypeAdapter
from sqlalchemy.orm import Session
from src.domain.models import DashboardMetrics, SalesChartPoint
from src.infrastructure.database.repositories import (
    AlertRepository,
    CustomerRepository,
    OrderRepository,
    SalesMetricRepository,
)

from shared.constants import CacheNamespaces

from .base import QueryService, to_money

_METRICS = TypeAdapter(DashboardMetrics)
_CHART = TypeAdapter(List[SalesChartPoint])


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class DashboardService(QueryService):
    """Month-to-date KPIs and the recent daily sales series."""

    async def get_dashboard_metrics(self) -> DashboardMetrics:
        now = self.clock()
        start = month_start(now)

        def load(session: Session) -> DashboardMetrics:
            orders = OrderRepository(session)
            total_orders = orders.count_between(start, now)
            total_customers = CustomerRepository(session).count()
            conversion = (
                total_customers / total_orders * 100 if total_orders > 0 else 0.0
            )
            return DashboardMetrics(
                total_sales=to_money(orders.sum_total_amount_between(start, now)),
                total_orders=total_orders,
                total_customers=total_customers,
                average_order_value=to_money(
                    orders.average_total_amount_between(start, now)
                ),
                conversion_rate=conversion,
                unread_alerts=AlertRepository(session).count_unread(),
            )

        return await self.cache.get_or_compute(
            CacheNamespaces.DASHBOARD_METRICS,
            "metrics",
            {"windowStart": start.isoformat()},
            lambda: self._query(load),
            _METRICS,
        )

    async def get_sales_chart_data(self) -> List[SalesChartPoint]:
        now = self.clock()
        start = now - timedelta(days=self.config.sales_chart_days)

        def load(session: Session) -> List[SalesChartPoint]:
            return [
                SalesChartPoint(
                    date=row.date,
                    sales=to_money(row.total_sales),
                    orders=row.total_orders,
                    average_order_value=to_money(row.average_order_value),
                )
                for row in SalesMetricRepository(session).find_between(start, now)
            ]

        # Keyed by the day so one entry serves the whole TTL
        return await self.cache.get_or_compute(
            CacheNamespaces.SALES_DATA,
            "chart",
            {"day": now.date().isoformat(), "days": self.config.sales_chart_days},
            lambda: self._query(load),
            _CHART,
        )
