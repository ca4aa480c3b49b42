import logging
from datetime import datetime

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from price_alerts.core.config import settings
from price_alerts.core.database import async_session_maker
from price_alerts.modules.notify.service import AlertService, CheckReport


logger = logging.getLogger(__name__)

# None means server-local time
TIMEZONE = pytz.timezone(settings.SCHEDULER_TIMEZONE) if settings.SCHEDULER_TIMEZONE else None

scheduler = AsyncIOScheduler(timezone=TIMEZONE) if TIMEZONE else AsyncIOScheduler()


async def check_alerts() -> CheckReport:
    logger.info("[%s] Running alert checker...", datetime.now(TIMEZONE))

    async with async_session_maker() as session:
        alert_service = AlertService(session)
        return await alert_service.check_all()


def schedule_alert_checks() -> None:
    # cycles never overlap: a late run is merged into the next one
    scheduler.add_job(
        check_alerts,
        CronTrigger(minute=settings.ALERT_CHECK_MINUTES, timezone=TIMEZONE),
        id="check_alerts",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
