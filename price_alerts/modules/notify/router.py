import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from price_alerts.core.database import get_async_session
from price_alerts.core.dependencies import CurrentUserDep, limit_alert_creation
from price_alerts.core.exceptions import UpstreamError
from price_alerts.modules.notify.schemas import AlertCreate, AlertCreated, AlertOut
from price_alerts.modules.notify.service import AlertService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Alerts"])


@router.post(
    "/postalert",
    response_model=AlertCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_alert_creation)],
)
async def create_alert(
    data: AlertCreate,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_async_session),
):
    service = AlertService(session)
    alert_id = await service.create_alert(user.uid, data)
    return AlertCreated(message="Alert saved", id=alert_id)


@router.get("/alerts", response_model=list[AlertOut])
async def list_alerts(
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_async_session),
):
    service = AlertService(session)
    try:
        return await service.list_alerts(user.uid)
    except SQLAlchemyError:
        logger.exception("Error fetching alerts for user %s", user.uid)
        raise UpstreamError("Failed to fetch alerts")


@router.delete("/alerts/{alert_id}")
async def delete_alert(
    alert_id: str,
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_async_session),
):
    service = AlertService(session)
    try:
        await service.delete_alert(alert_id, user.uid)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Error deleting alert %s", alert_id)
        raise UpstreamError("Failed to delete alert")
    return {"message": "Alert deleted"}
