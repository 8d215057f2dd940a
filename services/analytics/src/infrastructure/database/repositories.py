"""Query classes over the ORM entities.

Each repository wraps one ``Session`` for the duration of a service call and
returns entities or plain aggregates. Aggregates come back raw (possibly
``None``); normalising them is the caller's job.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import Alert, Customer, Order, OrderItem, Product, SalesMetric, User


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class OrderRepository:
    def __init__(self, session: Session):
        self._session = session

    def count_between(self, start: datetime, end: datetime) -> int:
        stmt = select(func.count(Order.id)).where(Order.order_date.between(start, end))
        return self._session.execute(stmt).scalar_one()

    def sum_total_amount_between(
        self, start: datetime, end: datetime
    ) -> Optional[Decimal]:
        stmt = select(func.sum(Order.total_amount)).where(
            Order.order_date.between(start, end)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def average_total_amount_between(
        self, start: datetime, end: datetime
    ) -> Optional[Any]:
        stmt = select(func.avg(Order.total_amount)).where(
            Order.order_date.between(start, end)
        )
        return self._session.execute(stmt).scalar_one_or_none()


class CustomerRepository:
    def __init__(self, session: Session):
        self._session = session

    def count(self) -> int:
        return self._session.execute(select(func.count(Customer.id))).scalar_one()


class ProductRepository:
    def __init__(self, session: Session):
        self._session = session

    def _active(self):
        return (
            select(Product)
            .where(Product.is_active.is_(True))
            .options(selectinload(Product.category), selectinload(Product.vendor))
        )

    def find_active(self, offset: int, limit: int) -> Tuple[List[Product], int]:
        total = self._session.execute(
            select(func.count(Product.id)).where(Product.is_active.is_(True))
        ).scalar_one()
        stmt = self._active().order_by(Product.id).offset(offset).limit(limit)
        return list(self._session.execute(stmt).scalars().all()), total

    def find_top_selling(self, limit: int) -> List[Tuple[Product, Decimal, int]]:
        """Active products ranked by order-item revenue, id breaking ties."""
        revenue = func.sum(OrderItem.quantity * OrderItem.unit_price).label("revenue")
        units = func.sum(OrderItem.quantity).label("units")
        ranked = (
            select(OrderItem.product_id, revenue, units)
            .group_by(OrderItem.product_id)
            .subquery()
        )
        stmt = (
            self._active()
            .join(ranked, ranked.c.product_id == Product.id)
            .add_columns(ranked.c.revenue, ranked.c.units)
            .order_by(ranked.c.revenue.desc(), Product.id.asc())
            .limit(limit)
        )
        return [
            (product, rev, int(qty or 0))
            for product, rev, qty in self._session.execute(stmt).all()
        ]

    def find_low_stock(self, threshold: int) -> List[Product]:
        stmt = (
            self._active()
            .where(Product.inventory < threshold)
            .order_by(Product.inventory, Product.id)
        )
        return list(self._session.execute(stmt).scalars().all())

    def search_by_name(
        self, query: str, offset: int, limit: int
    ) -> Tuple[List[Product], int]:
        condition = Product.name.ilike(f"%{_escape_like(query)}%", escape="\\")
        total = self._session.execute(
            select(func.count(Product.id)).where(
                Product.is_active.is_(True), condition
            )
        ).scalar_one()
        stmt = (
            self._active()
            .where(condition)
            .order_by(Product.id)
            .offset(offset)
            .limit(limit)
        )
        return list(self._session.execute(stmt).scalars().all()), total


class AlertRepository:
    def __init__(self, session: Session):
        self._session = session

    def _newest_first(self):
        return select(Alert).order_by(Alert.created_at.desc(), Alert.id.desc())

    def get(self, alert_id: int) -> Optional[Alert]:
        return self._session.get(Alert, alert_id)

    def add(self, alert: Alert) -> Alert:
        self._session.add(alert)
        self._session.flush()
        return alert

    def find_all(self, offset: int, limit: int) -> Tuple[List[Alert], int]:
        total = self._session.execute(select(func.count(Alert.id))).scalar_one()
        stmt = self._newest_first().offset(offset).limit(limit)
        return list(self._session.execute(stmt).scalars().all()), total

    def find_unread(self) -> List[Alert]:
        stmt = self._newest_first().where(Alert.is_read.is_(False))
        return list(self._session.execute(stmt).scalars().all())

    def count_unread(self) -> int:
        stmt = select(func.count(Alert.id)).where(Alert.is_read.is_(False))
        return self._session.execute(stmt).scalar_one()

    def find_by_severity(self, severity: str) -> List[Alert]:
        stmt = self._newest_first().where(Alert.severity == severity)
        return list(self._session.execute(stmt).scalars().all())

    def find_by_type(self, alert_type: str) -> List[Alert]:
        stmt = self._newest_first().where(Alert.type == alert_type)
        return list(self._session.execute(stmt).scalars().all())


class SalesMetricRepository:
    def __init__(self, session: Session):
        self._session = session

    def find_between(self, start: datetime, end: datetime) -> List[SalesMetric]:
        stmt = (
            select(SalesMetric)
            .where(SalesMetric.date.between(start, end))
            .order_by(SalesMetric.date.asc(), SalesMetric.id.asc())
        )
        return list(self._session.execute(stmt).scalars().all())


class UserRepository:
    def __init__(self, session: Session):
        self._session = session

    def find_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        return self._session.execute(stmt).scalar_one_or_none()

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username).limit(1)
        return self._session.execute(stmt).first() is not None

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email).limit(1)
        return self._session.execute(stmt).first() is not None

    def add(self, user: User) -> User:
        self._session.add(user)
        self._session.flush()
        return user
