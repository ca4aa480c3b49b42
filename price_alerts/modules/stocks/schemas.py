from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Quote(BaseModel):
    """Finnhub /quote payload: c, h, l, pc."""
    model_config = ConfigDict(populate_by_name=True)

    current: float = Field(alias="c")
    high: float = Field(alias="h")
    low: float = Field(alias="l")
    previous_close: float = Field(alias="pc")


class CompanyProfile(BaseModel):
    name: str | None = None
    ticker: str | None = None


class StockOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None
    symbol: str
    current_price: float
    percent_change: str
    high: float
    low: float
