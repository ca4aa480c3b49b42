import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from price_alerts.core.database import Base


SYMBOL_MAX_LENGTH = 16


class Direction(str, Enum):
    ABOVE = "above"  # fires when price >= target
    BELOW = "below"  # fires when price <= target


class AlertStatus(str, Enum):
    ACTIVE = "active"
    TRIGGERED = "triggered"


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol: Mapped[str] = mapped_column(String(SYMBOL_MAX_LENGTH), nullable=False)
    alert_name: Mapped[str] = mapped_column(nullable=False)
    target_price: Mapped[float] = mapped_column(nullable=False)
    direction: Mapped[str] = mapped_column(String(8), nullable=False)
    # one-way latch, only ever set by AlertRepository.mark_triggered
    triggered: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    triggered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
