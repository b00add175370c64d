"""
CoinMarketCap Provider

Crypto fallback provider. Queries by uppercased ticker.

Endpoints Used:
    - GET /v1/cryptocurrency/quotes/latest      - current price (data[SYM].quote.USD.price)
    - GET /v1/cryptocurrency/map                - ticker -> numeric id
    - GET /v1/cryptocurrency/quotes/historical  - one year of monthly quotes

Credentials:
    COINMARKETCAP_API_KEY is required; without it every call fails with
    MissingCredentialsError before touching the network.
"""

from typing import List, Optional

from core.errors import MissingCredentialsError, ProviderError, UnexpectedResponseError
from core.logging import get_logger
from core.provider_interface import ProviderInterface
from core.schemas import Asset, AssetType, HistoricalPoint
from core.utils.formatting import format_price
from core.utils.time import current_utc_datetime, datetime_to_timestamp, month_label, one_year_before
from providers.base_client import dig, to_price
from .api_client import CoinMarketCapAPIClient


logger = get_logger(__name__)


class CoinMarketCapProvider(ProviderInterface):
    """CoinMarketCap adapter implementing ProviderInterface."""

    name = "coinmarketcap"
    display_name = "CoinMarketCap"
    supported_types = frozenset({AssetType.CRYPTO})
    requires_api_key = True

    def __init__(self, api_key: Optional[str] = None, client: Optional[CoinMarketCapAPIClient] = None, clock=None):
        from core.config import settings

        self.api_key = settings.coinmarketcap_api_key if api_key is None else api_key
        self.client = client or CoinMarketCapAPIClient(api_key=self.api_key)
        self.clock = clock or current_utc_datetime

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def initialize(self) -> None:
        if not self.is_configured():
            logger.warning("CoinMarketCap API key not found; provider will fail until COINMARKETCAP_API_KEY is set")
            return
        await self.client.open()
        logger.info("CoinMarketCap connector initialized")

    async def shutdown(self) -> None:
        await self.client.close()

    def _require_key(self, asset: Asset) -> None:
        if not self.is_configured():
            raise MissingCredentialsError(self.name, asset.symbol, "CoinMarketCap API key not found")

    # ============================================
    # Data Methods
    # ============================================

    async def fetch_price(self, asset: Asset) -> str:
        try:
            self._require_key(asset)
            symbol = asset.symbol.upper()

            data = await self.client.get_quotes_latest(symbol)
            price = to_price(dig(data, "data", symbol, "quote", "USD", "price"))
            if price is None:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not get price data for {asset.name} from CoinMarketCap"
                )
            return format_price(price)
        except ProviderError as e:
            logger.error(f"CoinMarketCap API error for {asset.name}: {e.message}")
            raise

    async def fetch_historical(self, asset: Asset) -> List[HistoricalPoint]:
        try:
            self._require_key(asset)
            symbol = asset.symbol.upper()

            cmc_id = dig(await self.client.get_map(symbol), "data", 0, "id")
            if cmc_id is None:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not find CoinMarketCap ID for {asset.name}"
                )

            end = self.clock()
            start = one_year_before(end)

            data = await self.client.get_quotes_historical(
                cmc_id,
                time_start=datetime_to_timestamp(start),
                time_end=datetime_to_timestamp(end),
                symbol=symbol,
            )
            quotes = dig(data, "data", "quotes")
            if not isinstance(quotes, list):
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not get historical data for {asset.name} from CoinMarketCap"
                )

            try:
                points = [
                    HistoricalPoint(month_label(q["timestamp"]), float(q["quote"]["USD"]["price"]))
                    for q in quotes
                ]
            except (KeyError, TypeError, ValueError) as e:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Malformed historical quote for {asset.name}: {e}"
                )
            return points[-12:]
        except ProviderError as e:
            logger.error(f"CoinMarketCap historical data API error for {asset.name}: {e.message}")
            raise
