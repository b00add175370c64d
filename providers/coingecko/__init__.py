"""
CoinGecko Provider

Primary crypto provider. CoinGecko addresses coins by id rather than ticker,
so common tickers are mapped through a static table; anything else falls
back to ``asset.id``.

Endpoints Used:
    - GET /coins/{id}                - current price (market_data.current_price.usd)
    - GET /coins/{id}/market_chart   - 365 days of prices, reduced to monthly points

Credentials:
    COINGECKO_API_KEY is optional. With it the pro host is used; without it
    the public host is used and a warning is logged.
"""

from typing import List, Optional

from core.errors import ProviderError, UnexpectedResponseError
from core.logging import get_logger
from core.provider_interface import ProviderInterface
from core.schemas import Asset, AssetType, HistoricalPoint
from core.utils.formatting import format_price
from core.utils.series import reduce_to_monthly
from providers.base_client import dig, to_price
from .api_client import CoinGeckoAPIClient


logger = get_logger(__name__)

COINGECKO_IDS = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "sol": "solana",
    "ada": "cardano",
    "xrp": "ripple",
    "doge": "dogecoin",
    "dot": "polkadot",
    "link": "chainlink",
    "ltc": "litecoin",
    "uni": "uniswap",
    "bch": "bitcoin-cash",
    "xlm": "stellar",
    "usdt": "tether",
    "usdc": "usd-coin",
}

HISTORY_DAYS = 365


def resolve_coin_id(asset: Asset) -> Optional[str]:
    """
    Map an asset to its CoinGecko coin id.

    Example:
        >>> resolve_coin_id(Asset(symbol="BTC", type="crypto"))
        'bitcoin'
        >>> resolve_coin_id(Asset(symbol="PEPE", type="crypto", id="pepe"))
        'pepe'
    """
    return COINGECKO_IDS.get(asset.symbol.lower()) or asset.id


class CoinGeckoProvider(ProviderInterface):
    """
    CoinGecko adapter implementing ProviderInterface.

    Example:
        >>> provider = CoinGeckoProvider()
        >>> await provider.initialize()
        >>> await provider.fetch_price(Asset(symbol="ETH", type="crypto"))
        '2291'
    """

    name = "coingecko"
    display_name = "CoinGecko"
    supported_types = frozenset({AssetType.CRYPTO})
    requires_api_key = False

    def __init__(self, api_key: Optional[str] = None, client: Optional[CoinGeckoAPIClient] = None):
        from core.config import settings

        self.api_key = settings.coingecko_api_key if api_key is None else api_key
        self.client = client or CoinGeckoAPIClient(api_key=self.api_key)

    async def initialize(self) -> None:
        await self.client.open()
        logger.info(f"CoinGecko connector initialized ({'pro' if self.client.is_pro else 'public'} API)")

    async def shutdown(self) -> None:
        await self.client.close()

    def _coin_id(self, asset: Asset) -> str:
        coin_id = resolve_coin_id(asset)
        if not coin_id:
            raise UnexpectedResponseError(
                self.name, asset.symbol, f"No CoinGecko id known for {asset.name}"
            )
        if not self.client.is_pro:
            logger.warning("CoinGecko API key not found, using public API which has lower rate limits")
        return coin_id

    # ============================================
    # Data Methods
    # ============================================

    async def fetch_price(self, asset: Asset) -> str:
        try:
            coin_id = self._coin_id(asset)
            data = await self.client.get_coin(coin_id, symbol=asset.symbol)
            price = to_price(dig(data, "market_data", "current_price", "usd"))
            if price is None:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not get price data for {asset.name} from CoinGecko"
                )
            return format_price(price)
        except ProviderError as e:
            logger.error(f"CoinGecko API error for {asset.name}: {e.message}")
            raise

    async def fetch_historical(self, asset: Asset) -> List[HistoricalPoint]:
        try:
            coin_id = self._coin_id(asset)
            data = await self.client.get_market_chart(coin_id, days=HISTORY_DAYS, symbol=asset.symbol)
            prices = data.get("prices") if isinstance(data, dict) else None
            if not isinstance(prices, list):
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not get historical data for {asset.name} from CoinGecko"
                )
            try:
                return reduce_to_monthly(prices)
            except (TypeError, ValueError, IndexError) as e:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Malformed price samples for {asset.name}: {e}"
                )
        except ProviderError as e:
            logger.error(f"CoinGecko historical data API error for {asset.name}: {e.message}")
            raise

