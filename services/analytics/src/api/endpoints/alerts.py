from typing import List

from fastapi import APIRouter, Depends, status
from src.api.dependencies import get_alert_service
from src.core.config import settings
from src.domain.models import AlertCreate, AlertView, Page, UnreadCount
from src.services.alert_service import AlertService

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=Page[AlertView])
async def list_alerts(
    page: int = 0,
    size: int = settings.default_page_size,
    svc: AlertService = Depends(get_alert_service),
):
    return await svc.get_all_alerts(page, size)


@router.get("/unread", response_model=List[AlertView])
async def unread_alerts(svc: AlertService = Depends(get_alert_service)):
    return await svc.get_unread_alerts()


@router.get("/count/unread", response_model=UnreadCount)
async def unread_count(svc: AlertService = Depends(get_alert_service)):
    return UnreadCount(count=await svc.get_unread_alerts_count())


@router.get("/severity/{severity}", response_model=List[AlertView])
async def alerts_by_severity(
    severity: str, svc: AlertService = Depends(get_alert_service)
):
    return await svc.get_alerts_by_severity(severity)


@router.get("/type/{alert_type}", response_model=List[AlertView])
async def alerts_by_type(
    alert_type: str, svc: AlertService = Depends(get_alert_service)
):
    return await svc.get_alerts_by_type(alert_type)


@router.post("", response_model=AlertView, status_code=status.HTTP_201_CREATED)
async def create_alert(
    body: AlertCreate, svc: AlertService = Depends(get_alert_service)
):
    return await svc.create_alert(body)


@router.post("/{alert_id}/mark-read", response_model=AlertView)
async def mark_read(alert_id: int, svc: AlertService = Depends(get_alert_service)):
    return await svc.mark_as_read(alert_id)
