from datetime import datetime, timezone

from sqlalchemy.dialects import postgresql, sqlite

from price_alerts.core.repository import BaseRepository
from price_alerts.modules.stats.models import UsageStat
from price_alerts.modules.stats.schemas import UsageStatOut


class UsageStatRepository(BaseRepository):
    model = UsageStat
    schema = UsageStatOut

    def _insert(self):
        if self.session.bind.dialect.name == "sqlite":
            return sqlite.insert(self.model)
        return postgresql.insert(self.model)

    async def increment(self, route: str, user_id: int, email: str | None) -> None:
        """Single-statement upsert, so concurrent hits never lose an increment."""
        now = datetime.now(timezone.utc)
        stmt = (
            self._insert()
            .values(route=route, user_id=user_id, email=email, count=1, last_request=now)
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.model.route, self.model.user_id],
            set_={
                "count": self.model.count + 1,
                "email": stmt.excluded.email,
                "last_request": stmt.excluded.last_request,
            },
        )
        await self.session.execute(stmt)
