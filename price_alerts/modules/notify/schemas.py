from datetime import datetime

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from price_alerts.modules.notify.models import AlertStatus, Direction


class AlertCreate(BaseModel):
    """Every field is optional here so that missing ones are reported as 400 by the service."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    symbol: str | None = None
    target_price: float | None = None
    alert_name: str | None = None
    direction: str | None = None


class AlertAdd(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    user_id: int
    symbol: str
    alert_name: str
    target_price: float
    direction: Direction


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: int
    symbol: str
    alert_name: str
    target_price: float
    direction: Direction
    triggered: bool
    created_at: datetime
    triggered_at: datetime | None = None

    @computed_field
    @property
    def status(self) -> AlertStatus:
        return AlertStatus.TRIGGERED if self.triggered else AlertStatus.ACTIVE


class AlertCreated(BaseModel):
    message: str
    id: str
