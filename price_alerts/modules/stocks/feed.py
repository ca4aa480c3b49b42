import httpx

from price_alerts.core.config import settings
from price_alerts.modules.stocks.schemas import CompanyProfile, Quote


class FinnhubPriceFeed:
    """Fresh quote per call, no caching."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: float | None = None):
        self.api_key = api_key or settings.FINNHUB_API_KEY
        self.base_url = (base_url or settings.FINNHUB_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT

    async def _get(self, path: str, symbol: str) -> dict:
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
            response = await client.get(
                f"{self.base_url}{path}",
                params={"symbol": symbol, "token": self.api_key},
            )
            response.raise_for_status()
            return response.json()

    async def get_quote(self, symbol: str) -> Quote:
        return Quote.model_validate(await self._get("/quote", symbol))

    async def get_profile(self, symbol: str) -> CompanyProfile:
        return CompanyProfile.model_validate(await self._get("/stock/profile2", symbol))


def get_price_feed() -> FinnhubPriceFeed:
    return FinnhubPriceFeed()
