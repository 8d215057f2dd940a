from __future__ import annotations

from typing import Callable, List, Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session
from src.core.errors import NotFoundError, ValidationError
from src.core.logger import get_logger
from src.domain.models import AlertCreate, AlertView, Page
from src.infrastructure.database.models import Alert
from src.infrastructure.database.repositories import AlertRepository
from src.infrastructure.kafka.notifier import EventNotifier

from shared.constants import CacheNamespaces

from .base import MAX_SQL_INT, QueryService

logger = get_logger("analytics.alerts")

_LIST = TypeAdapter(List[AlertView])

ALERT_CREATED = "ALERT_CREATED"
ALERT_READ = "ALERT_READ"


def to_view(alert: Alert) -> AlertView:
    return AlertView(
        id=alert.id,
        type=alert.type,
        title=alert.title,
        message=alert.message,
        severity=alert.severity,
        is_read=alert.is_read,
        created_at=alert.created_at,
        metadata=alert.details or {},
    )


class AlertService(QueryService):
    """Alert listings plus the one-way unread to read transition.

    Writes commit first, then evict the ``alerts`` namespace, then publish.
    """

    def __init__(self, db, cache, notifier: EventNotifier, **kwargs):
        super().__init__(db, cache, **kwargs)
        self.notifier = notifier

    def _severity(self, severity: str) -> str:
        value = (severity or "").strip().lower()
        if value not in self.config.alert_severities:
            raise ValidationError(f"Unknown severity: {severity}", field="severity")
        return value

    def _type(self, alert_type: str) -> str:
        value = (alert_type or "").strip().lower()
        if value not in self.config.alert_types:
            raise ValidationError(f"Unknown alert type: {alert_type}", field="type")
        return value

    async def _list(self, find: Callable[[AlertRepository], List[Alert]]):
        return await self._query(
            lambda session: [to_view(a) for a in find(AlertRepository(session))]
        )

    async def get_all_alerts(self, page: int, size: int) -> Page[AlertView]:
        self._check_page(page, size)

        def load(session: Session) -> Page[AlertView]:
            rows, total = AlertRepository(session).find_all(
                self._offset(page, size), size
            )
            return Page[AlertView].build([to_view(a) for a in rows], page, size, total)

        return await self._query(load)

    async def get_unread_alerts(self) -> List[AlertView]:
        return await self.cache.get_or_compute(
            CacheNamespaces.ALERTS,
            "unread",
            {},
            lambda: self._list(lambda repo: repo.find_unread()),
            _LIST,
        )

    async def get_unread_alerts_count(self) -> int:
        return await self._query(
            lambda session: AlertRepository(session).count_unread()
        )

    async def get_alerts_by_severity(self, severity: str) -> List[AlertView]:
        value = self._severity(severity)
        return await self._list(lambda repo: repo.find_by_severity(value))

    async def get_alerts_by_type(self, alert_type: str) -> List[AlertView]:
        value = self._type(alert_type)
        return await self._list(lambda repo: repo.find_by_type(value))

    async def create_alert(self, data: AlertCreate) -> AlertView:
        severity = self._severity(data.severity)
        alert_type = self._type(data.type)

        def create(session: Session) -> AlertView:
            alert = AlertRepository(session).add(
                Alert(
                    type=alert_type,
                    title=data.title,
                    message=data.message,
                    severity=severity,
                    is_read=False,
                    details=dict(data.metadata),
                )
            )
            return to_view(alert)

        view = await self._query(create)
        await self.cache.evict_all(CacheNamespaces.ALERTS)
        self.notifier.send_alert_event(
            ALERT_CREATED,
            view.id,
            {"alertType": view.type, "severity": view.severity, "title": view.title},
        )
        logger.info(
            "alert_created",
            extra={"alert_id": view.id, "alert_type": view.type},
        )
        return view

    async def mark_as_read(self, alert_id: int) -> AlertView:
        """Mark an alert read. Repeating the call changes nothing."""
        if not 1 <= alert_id <= MAX_SQL_INT:
            raise NotFoundError("Alert", alert_id)

        def mark(session: Session) -> tuple[AlertView, bool]:
            alert: Optional[Alert] = AlertRepository(session).get(alert_id)
            if alert is None:
                raise NotFoundError("Alert", alert_id)
            if alert.is_read:
                return to_view(alert), False
            alert.is_read = True
            session.flush()
            return to_view(alert), True

        view, changed = await self._query(mark)
        if not changed:
            return view
        await self.cache.evict_all(CacheNamespaces.ALERTS)
        self.notifier.send_alert_event(ALERT_READ, view.id, {"alertType": view.type})
        logger.info("alert_marked_read", extra={"alert_id": view.id})
        return view
