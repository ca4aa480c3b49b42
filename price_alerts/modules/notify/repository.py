from datetime import datetime, timezone

from sqlalchemy import select, update

from price_alerts.core.repository import BaseRepository
from price_alerts.modules.notify.models import Alert
from price_alerts.modules.notify.schemas import AlertOut


class AlertRepository(BaseRepository):
    model = Alert
    schema = AlertOut

    async def get_by_owner(self, user_id: int) -> list[AlertOut]:
        return await self.get_all_by(user_id=user_id)

    async def get_all_untriggered(self) -> list[AlertOut]:
        query = select(self.model).where(self.model.triggered.is_(False))
        result = await self.session.execute(query)
        return [self._to_schema(obj) for obj in result.scalars().all()]

    async def mark_triggered(self, alert_id: str) -> bool:
        """Flip the latch. Returns False when the alert was already triggered (or is gone)."""
        stmt = (
            update(self.model)
            .where(self.model.id == alert_id, self.model.triggered.is_(False))
            .values(triggered=True, triggered_at=datetime.now(timezone.utc))
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
