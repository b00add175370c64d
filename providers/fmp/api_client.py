"""
Financial Modeling Prep REST API Client

API Documentation:
    https://site.financialmodelingprep.com/developer/docs

Authentication:
    The key is sent as the ``apikey`` query parameter on every request.
"""

from typing import Any, Optional

from providers.base_client import BaseAPIClient


class FMPAPIClient(BaseAPIClient):
    """
    Async client for the FMP v3 quote and historical endpoints.

    Example:
        >>> async with FMPAPIClient(api_key=key) as client:
        ...     quote = await client.get_quote("AAPL")
    """

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        from core.config import settings

        self.api_key = api_key
        super().__init__("fmp", base_url or settings.fmp_base_url)

    async def get_quote(self, symbol: str) -> Any:
        """
        GET /api/v3/quote/{symbol}

        Response Format (trimmed):
            [{"symbol": "AAPL", "price": 189.84, ...}]
        """
        return await self._get(f"/api/v3/quote/{symbol}", {"apikey": self.api_key}, symbol=symbol)

    async def get_historical_price_full(self, symbol: str, timeseries: int = 12) -> Any:
        """
        GET /api/v3/historical-price-full/{symbol} as a close-only line series.

        Response Format (trimmed, newest first):
            {"symbol": "AAPL", "historical": [{"date": "2024-01-31", "close": 184.4}, ...]}
        """
        params = {
            "apikey": self.api_key,
            "serietype": "line",
            "timeseries": timeseries,
        }
        return await self._get(f"/api/v3/historical-price-full/{symbol}", params, symbol=symbol)
