"""
CoinMarketCap REST API Client

API Documentation:
    https://coinmarketcap.com/api/documentation/v1/

Authentication:
    Every request carries the X-CMC_PRO_API_KEY header.
"""

from typing import Any, Optional

from providers.base_client import BaseAPIClient


class CoinMarketCapAPIClient(BaseAPIClient):
    """
    Async client for the CoinMarketCap cryptocurrency endpoints.

    Example:
        >>> async with CoinMarketCapAPIClient(api_key=key) as client:
        ...     quotes = await client.get_quotes_latest("BTC")
    """

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        from core.config import settings

        self.api_key = api_key
        headers = {"X-CMC_PRO_API_KEY": api_key} if api_key else {}
        super().__init__("coinmarketcap", base_url or settings.coinmarketcap_base_url, headers=headers)

    async def get_quotes_latest(self, symbol: str) -> Any:
        """
        GET /v1/cryptocurrency/quotes/latest?symbol=SYM

        Response Format (trimmed):
            {"data": {"BTC": {"id": 1, "quote": {"USD": {"price": 43250.71}}}}}
        """
        return await self._get("/v1/cryptocurrency/quotes/latest", {"symbol": symbol}, symbol=symbol)

    async def get_map(self, symbol: str) -> Any:
        """
        GET /v1/cryptocurrency/map?symbol=SYM

        Response Format (trimmed):
            {"data": [{"id": 1, "symbol": "BTC", "name": "Bitcoin"}]}
        """
        return await self._get("/v1/cryptocurrency/map", {"symbol": symbol}, symbol=symbol)

    async def get_quotes_historical(self, cmc_id: int, time_start: int, time_end: int, symbol: str = "") -> Any:
        """
        GET /v1/cryptocurrency/quotes/historical with monthly interval.

        Args:
            cmc_id: Numeric CoinMarketCap id (from get_map)
            time_start: Window start, Unix seconds
            time_end: Window end, Unix seconds

        Response Format (trimmed):
            {"data": {"quotes": [{"timestamp": "2024-01-01T00:00:00.000Z",
                                  "quote": {"USD": {"price": 42280.23}}}, ...]}}
        """
        params = {
            "id": cmc_id,
            "time_start": time_start,
            "time_end": time_end,
            "interval": "monthly",
        }
        return await self._get("/v1/cryptocurrency/quotes/historical", params, symbol=symbol)
