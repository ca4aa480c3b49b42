import asyncio

from price_alerts.core.config import settings
from price_alerts.modules.stocks.feed import FinnhubPriceFeed
from price_alerts.modules.stocks.schemas import Quote, StockOut


def percent_change(quote: Quote) -> str:
    if not quote.previous_close:
        return "0.00"
    return f"{(quote.current - quote.previous_close) / quote.previous_close * 100:.2f}"


def to_stock_out(symbol: str, name: str | None, quote: Quote) -> StockOut:
    return StockOut(
        name=name,
        symbol=symbol,
        current_price=quote.current,
        percent_change=percent_change(quote),
        high=quote.high,
        low=quote.low,
    )


class StockService:
    def __init__(self, feed: FinnhubPriceFeed):
        self.feed = feed

    async def get_watchlist(self, symbols: list[str] | None = None) -> list[StockOut]:
        symbols = symbols or settings.watchlist_symbols
        quotes = await asyncio.gather(*(self.feed.get_quote(s) for s in symbols))
        return [to_stock_out(s, s, q) for s, q in zip(symbols, quotes)]

    async def get_stock(self, symbol: str) -> StockOut:
        quote, profile = await asyncio.gather(
            self.feed.get_quote(symbol),
            self.feed.get_profile(symbol),
        )
        return to_stock_out(symbol, profile.name, quote)
