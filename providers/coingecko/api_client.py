"""
CoinGecko REST API Client

Thin wrapper over BaseAPIClient for the two CoinGecko endpoints the
aggregator uses. Responses are returned as decoded JSON; field extraction
happens in CoinGeckoProvider.

API Documentation:
    https://docs.coingecko.com/reference/introduction

Hosts:
    - Public: https://api.coingecko.com/api/v3 (low rate limit, no key)
    - Pro:    https://pro-api.coingecko.com/api/v3 (key sent as x_cg_pro_api_key)
"""

from typing import Any, Dict, Optional

from providers.base_client import BaseAPIClient


class CoinGeckoAPIClient(BaseAPIClient):
    """
    Async client for CoinGecko.

    The pro host is selected when an API key is given; otherwise the public
    host is used.

    Example:
        >>> async with CoinGeckoAPIClient(api_key="") as client:
        ...     coin = await client.get_coin("bitcoin", symbol="BTC")
    """

    def __init__(self, api_key: str = "", public_url: Optional[str] = None, pro_url: Optional[str] = None):
        from core.config import settings

        self.api_key = api_key
        if api_key:
            base_url = pro_url or settings.coingecko_pro_url
        else:
            base_url = public_url or settings.coingecko_public_url
        super().__init__("coingecko", base_url)

    @property
    def is_pro(self) -> bool:
        return bool(self.api_key)

    def _with_key(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.api_key:
            params["x_cg_pro_api_key"] = self.api_key
        return params

    async def get_coin(self, coin_id: str, symbol: str = "") -> Any:
        """
        GET /coins/{id} with market data only.

        Response Format (trimmed):
            {"id": "bitcoin", "market_data": {"current_price": {"usd": 43250.71, ...}}}
        """
        params = self._with_key({
            "localization": "false",
            "tickers": "false",
            "market_data": "true",
            "community_data": "false",
            "developer_data": "false",
            "sparkline": "false",
        })
        return await self._get(f"/coins/{coin_id}", params, symbol=symbol)

    async def get_market_chart(self, coin_id: str, days: int = 365, symbol: str = "") -> Any:
        """
        GET /coins/{id}/market_chart at monthly granularity.

        Response Format (trimmed):
            {"prices": [[1704067200000, 42280.23], ...], "market_caps": [...], ...}
        """
        params = self._with_key({
            "vs_currency": "usd",
            "days": days,
            "interval": "monthly",
        })
        return await self._get(f"/coins/{coin_id}/market_chart", params, symbol=symbol)
