import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from price_alerts.core.exceptions import Forbidden, NotFound, UpstreamError, ValidationError
from price_alerts.modules.auth.service import AuthService
from price_alerts.modules.notify.mailer import ResendMailer
from price_alerts.modules.notify.models import SYMBOL_MAX_LENGTH, Direction
from price_alerts.modules.notify.repository import AlertRepository
from price_alerts.modules.notify.schemas import AlertAdd, AlertCreate, AlertOut
from price_alerts.modules.stocks.feed import FinnhubPriceFeed


logger = logging.getLogger(__name__)


def is_crossed(direction: str, current_price: float, target_price: float) -> bool:
    """Both bounds are inclusive: an alert sitting exactly on its target fires."""
    if direction == Direction.ABOVE:
        return current_price >= target_price
    if direction == Direction.BELOW:
        return current_price <= target_price
    return False


def _movement(direction: str) -> str:
    return "risen to" if direction == Direction.ABOVE else "fallen to"


class Outcome(str, Enum):
    TRIGGERED = "triggered"
    PENDING = "pending"
    FAILED = "failed"


@dataclass
class AlertOutcome:
    alert_id: str
    symbol: str
    outcome: Outcome
    price: float | None = None
    notified: bool = False
    error: str | None = None


@dataclass
class CheckReport:
    outcomes: list[AlertOutcome] = field(default_factory=list)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for o in self.outcomes if o.outcome == outcome)

    @property
    def triggered(self) -> int:
        return self._count(Outcome.TRIGGERED)

    @property
    def pending(self) -> int:
        return self._count(Outcome.PENDING)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)


class AlertService:
    def __init__(
        self,
        session: AsyncSession,
        feed: FinnhubPriceFeed | None = None,
        mailer: ResendMailer | None = None,
    ):
        self.session = session
        self.repo = AlertRepository(session)
        self.auth = AuthService(session)
        self.feed = feed or FinnhubPriceFeed()
        self.mailer = mailer or ResendMailer()

    # === CRUD ===
    async def create_alert(self, user_id: int, data: AlertCreate) -> str:
        symbol = (data.symbol or "").strip().upper()
        alert_name = (data.alert_name or "").strip()
        direction = (data.direction or "").strip()

        if not symbol or not data.target_price or not alert_name or not direction:
            logger.error("Adding alert error: data is missing: %s", data.model_dump())
            raise ValidationError("Missing fields")

        if len(symbol) > SYMBOL_MAX_LENGTH:
            raise ValidationError(f"Symbol must be at most {SYMBOL_MAX_LENGTH} characters")

        if direction not in {d.value for d in Direction}:
            raise ValidationError("Invalid direction")

        if not math.isfinite(data.target_price) or data.target_price <= 0:
            raise ValidationError("Target price must be a positive number")

        try:
            alert = await self.repo.add(AlertAdd(
                user_id=user_id,
                symbol=symbol,
                alert_name=alert_name,
                target_price=data.target_price,
                direction=direction,
            ))
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception("Error saving alert for user %s", user_id)
            raise UpstreamError("Failed to save alert")

        return alert.id

    async def list_alerts(self, user_id: int) -> list[AlertOut]:
        return await self.repo.get_by_owner(user_id)

    async def delete_alert(self, alert_id: str, user_id: int) -> None:
        alert = await self.repo.get_one_or_none(id=alert_id)
        if not alert:
            raise NotFound("Alert not found")
        if alert.user_id != user_id:
            raise Forbidden("You do not have permission to delete this alert")

        await self.repo.delete(id=alert_id, user_id=user_id)
        await self.session.commit()

    # === Background check ===
    async def check_all(self) -> CheckReport:
        """One batch cycle over every untriggered alert.

        Each alert is evaluated in isolation: a failing quote, identity lookup
        or store write is recorded in the report and the loop moves on.
        """
        report = CheckReport()
        alerts = await self.repo.get_all_untriggered()
        if not alerts:
            logger.info("No pending alerts.")
            return report

        for alert in alerts:
            report.outcomes.append(await self._evaluate(alert))

        logger.info(
            "Alert check done: %d triggered, %d pending, %d failed",
            report.triggered, report.pending, report.failed,
        )
        return report

    # === Internal ===
    async def _evaluate(self, alert: AlertOut) -> AlertOutcome:
        try:
            quote = await self.feed.get_quote(alert.symbol)
        except Exception as e:
            logger.error("Failed to fetch quote for %s (alert %s): %s", alert.symbol, alert.id, e)
            return AlertOutcome(alert.id, alert.symbol, Outcome.FAILED, error=str(e))

        price = quote.current
        if not is_crossed(alert.direction, price, alert.target_price):
            logger.info(
                "%s: %s has not %s %s yet.",
                alert.symbol, price, _movement(alert.direction), alert.target_price,
            )
            return AlertOutcome(alert.id, alert.symbol, Outcome.PENDING, price=price)

        logger.info("Alert triggered for %s at %s", alert.symbol, price)
        try:
            notified = await self._notify(alert, price)
            await self.repo.mark_triggered(alert.id)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.exception("Error checking alert %s", alert.id)
            return AlertOutcome(alert.id, alert.symbol, Outcome.FAILED, price=price, error=str(e))

        return AlertOutcome(alert.id, alert.symbol, Outcome.TRIGGERED, price=price, notified=notified)

    async def _notify(self, alert: AlertOut, price: float) -> bool:
        email = await self.auth.get_user_email(alert.user_id)
        if not email:
            logger.warning("No email for user %s, alert %s fires silently", alert.user_id, alert.id)
            return False

        subject = f"Stock Alert: {alert.symbol}"
        body = (
            f"The price of {alert.symbol} has {_movement(alert.direction)} "
            f"your target of ${alert.target_price}.\n\nCurrent Price: ${price}"
        )
        # a lost notification never rolls back the trigger
        try:
            return await self.mailer.send_email(email, subject, body)
        except Exception as e:
            logger.error("Error sending alert email to %s: %s", email, e)
            return False
