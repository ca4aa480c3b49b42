import pytest

from price_alerts.modules.stocks.schemas import Quote
from price_alerts.modules.stocks.service import percent_change


async def test_quote_reads_finnhub_keys():
    quote = Quote.model_validate({"c": 101.5, "h": 102, "l": 99, "pc": 100, "t": 0})
    assert (quote.current, quote.high, quote.low, quote.previous_close) == (101.5, 102, 99, 100)


@pytest.mark.parametrize(
    "current, previous, expected",
    [(110, 100, "10.00"), (99, 100, "-1.00"), (100, 300, "-66.67"), (5, 0, "0.00")],
)
async def test_percent_change(current, previous, expected):
    quote = Quote(current=current, high=current, low=current, previous_close=previous)
    assert percent_change(quote) == expected


async def test_list_watchlist(client, make_user, feed):
    _, headers = await make_user("ann@example.com")
    feed.prices.update({"AAPL": 110, "MSFT": 300, "GOOGL": 140, "AMZN": 180})
    feed.previous_close["AAPL"] = 100

    response = await client.get("/stocks", headers=headers)
    assert response.status_code == 200
    stocks = response.json()
    assert [s["symbol"] for s in stocks] == ["AAPL", "MSFT", "GOOGL", "AMZN"]
    assert stocks[0] == {
        "name": "AAPL",
        "symbol": "AAPL",
        "currentPrice": 110,
        "percentChange": "10.00",
        "high": 111,
        "low": 109,
    }
    assert stocks[1]["percentChange"] == "0.00"


async def test_list_watchlist_upstream_error(client, make_user, feed):
    _, headers = await make_user("ann@example.com")
    feed.prices.update({"AAPL": 110})

    response = await client.get("/stocks", headers=headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch stock data"


async def test_single_stock(client, make_user, feed):
    _, headers = await make_user("ann@example.com")
    feed.prices["TSLA"] = 250

    response = await client.get("/stock", params={"symbol": "tsla"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["symbol"] == "TSLA"
    assert body["name"] == "TSLA Inc"
    assert body["currentPrice"] == 250


async def test_single_stock_requires_symbol(client, make_user, feed):
    _, headers = await make_user("ann@example.com")
    response = await client.get("/stock", headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Symbol is required"


async def test_single_stock_upstream_error(client, make_user, feed):
    _, headers = await make_user("ann@example.com")
    response = await client.get("/stock", params={"symbol": "NOPE"}, headers=headers)
    assert response.status_code == 500


async def test_stocks_require_auth(client, feed):
    assert (await client.get("/stocks")).status_code == 401
    assert (await client.get("/stock", params={"symbol": "AAPL"})).status_code == 401
