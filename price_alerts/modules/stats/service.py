import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from price_alerts.core.database import async_session_maker
from price_alerts.modules.auth.schemas import Identity
from price_alerts.modules.stats.repository import UsageStatRepository
from price_alerts.modules.stats.schemas import UsageStatOut


logger = logging.getLogger(__name__)

_pending: set[asyncio.Task] = set()


def sanitize_route(route: str) -> str:
    return route.replace("/", "_")


class StatsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UsageStatRepository(session)

    async def record_hit(self, route: str, identity: Identity) -> None:
        await self.repo.increment(sanitize_route(route), identity.uid, identity.email)
        await self.session.commit()

    async def list_for_user(self, user_id: int) -> list[UsageStatOut]:
        return await self.repo.get_all_by(user_id=user_id)


async def record_usage(route: str, identity: Identity) -> None:
    """Failures only reach the log; the request that caused the hit never sees them."""
    try:
        async with async_session_maker() as session:
            await StatsService(session).record_hit(route, identity)
    except Exception:
        logger.exception("Failed to record usage for %s (user %s)", route, identity.uid)


def schedule_usage(route: str, identity: Identity) -> None:
    """Fire-and-forget `record_usage`, detached from the request/response path."""
    task = asyncio.create_task(record_usage(route, identity))
    _pending.add(task)
    task.add_done_callback(_pending.discard)


async def drain_pending() -> None:
    if _pending:
        await asyncio.gather(*_pending, return_exceptions=True)
