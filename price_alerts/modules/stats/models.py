from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone

from price_alerts.core.database import Base


class UsageStat(Base):
    __tablename__ = "usage_stats"
    __table_args__ = (
        UniqueConstraint("route", "user_id", name="uix_route_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # sanitized route template, e.g. "_alerts_{alert_id}"
    route: Mapped[str] = mapped_column(nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(nullable=False, index=True)
    email: Mapped[str] = mapped_column(nullable=True)
    count: Mapped[int] = mapped_column(nullable=False, default=0)
    last_request: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
