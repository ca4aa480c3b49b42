import logging

from fastapi import APIRouter, Depends, Query

from price_alerts.core.dependencies import CurrentUserDep
from price_alerts.core.exceptions import UpstreamError, ValidationError
from price_alerts.modules.stocks.feed import FinnhubPriceFeed, get_price_feed
from price_alerts.modules.stocks.schemas import StockOut
from price_alerts.modules.stocks.service import StockService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stocks"])


@router.get("/stocks", response_model=list[StockOut])
async def list_stocks(
    user: CurrentUserDep,
    feed: FinnhubPriceFeed = Depends(get_price_feed),
):
    service = StockService(feed)
    try:
        return await service.get_watchlist()
    except Exception:
        logger.exception("Failed to fetch watchlist quotes")
        raise UpstreamError("Failed to fetch stock data")


@router.get("/stock", response_model=StockOut)
async def get_stock(
    user: CurrentUserDep,
    symbol: str | None = Query(None),
    feed: FinnhubPriceFeed = Depends(get_price_feed),
):
    if not symbol or not symbol.strip():
        raise ValidationError("Symbol is required")

    service = StockService(feed)
    try:
        return await service.get_stock(symbol.strip().upper())
    except Exception:
        logger.exception("Failed to fetch stock data for %s", symbol)
        raise UpstreamError("Failed to fetch stock data")
