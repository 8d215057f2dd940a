from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Wire models serialize with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardMetrics(CamelModel):
    """Month-to-date KPIs shown on the dashboard overview."""

    total_sales: Decimal
    total_orders: int
    total_customers: int
    average_order_value: Decimal
    # total_customers / total_orders * 100; a placeholder, not a funnel rate
    conversion_rate: float
    unread_alerts: int


class SalesChartPoint(CamelModel):
    date: datetime
    sales: Decimal
    orders: int
    average_order_value: Decimal


class ProductView(CamelModel):
    id: int
    name: str
    sku: str
    price: Decimal
    inventory: int
    category_name: Optional[str] = None
    vendor_name: Optional[str] = None
    rating: Decimal
    review_count: int
    # Only populated by revenue rankings
    total_revenue: Optional[Decimal] = None
    units_sold: Optional[int] = None


class Page(CamelModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def build(cls, content: List[T], page: int, size: int, total: int) -> "Page[T]":
        return cls(
            content=content,
            page=page,
            size=size,
            total_elements=total,
            total_pages=(total + size - 1) // size if size else 0,
        )


class AlertView(CamelModel):
    id: int
    type: str
    title: str
    message: str
    severity: str
    is_read: bool
    created_at: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AlertCreate(CamelModel):
    type: str = Field(..., min_length=1, description="Alert category")
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    severity: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Type specific key/value pairs"
    )


class UnreadCount(CamelModel):
    count: int
