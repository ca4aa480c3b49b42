import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from price_alerts.core.database import get_async_session
from price_alerts.core.dependencies import CurrentUserDep
from price_alerts.core.exceptions import UpstreamError
from price_alerts.modules.stats.schemas import UsageStatOut
from price_alerts.modules.stats.service import StatsService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=list[UsageStatOut])
async def list_stats(
    user: CurrentUserDep,
    session: AsyncSession = Depends(get_async_session),
):
    service = StatsService(session)
    try:
        return await service.list_for_user(user.uid)
    except SQLAlchemyError:
        logger.exception("Error fetching stats for user %s", user.uid)
        raise UpstreamError("Failed to fetch stats")
