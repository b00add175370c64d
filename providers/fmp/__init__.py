"""
Financial Modeling Prep Provider

Prices stocks, fx pairs, commodities and indices.

Endpoints Used:
    - GET /api/v3/quote/{symbol}                  - current price (first element's "price")
    - GET /api/v3/historical-price-full/{symbol}  - last 12 closes, newest first

Symbol Mapping:
    stock      AAPL          -> AAPL
    fx         EUR + USD     -> EURUSD (or the symbol without "/")
    commodity  XAU, XAG, CL  -> GOLD, SILVER, OIL
    index      US30, SPX, NDX -> DJI, SPY, QQQ
    anything else passes through unchanged

Credentials:
    FMP_API_KEY is required; without it every call fails with
    MissingCredentialsError before touching the network.
"""

from typing import List, Optional

from core.errors import MissingCredentialsError, ProviderError, UnexpectedResponseError
from core.logging import get_logger
from core.provider_interface import ProviderInterface
from core.schemas import Asset, AssetType, HistoricalPoint
from core.utils.formatting import format_price
from core.utils.time import month_label
from providers.base_client import dig, to_price
from .api_client import FMPAPIClient


logger = get_logger(__name__)

COMMODITY_ALIASES = {
    "XAU": "GOLD",
    "XAG": "SILVER",
    "CL": "OIL",
}

INDEX_ALIASES = {
    "US30": "DJI",
    "SPX": "SPY",
    "NDX": "QQQ",
}


def resolve_fmp_symbol(asset: Asset) -> str:
    """
    Map an asset to the symbol FMP expects.

    Examples:
        >>> resolve_fmp_symbol(Asset(symbol="EUR/USD", type="fx", base="EUR", quote="USD"))
        'EURUSD'
        >>> resolve_fmp_symbol(Asset(symbol="GBP/USD", type="fx"))
        'GBPUSD'
        >>> resolve_fmp_symbol(Asset(symbol="XAU", type="commodity"))
        'GOLD'
    """
    if asset.type == AssetType.FX:
        if asset.base and asset.quote:
            return f"{asset.base}{asset.quote}"
        # "EUR/USD" would otherwise become an extra path segment
        return asset.symbol.replace("/", "").upper()
    if asset.type == AssetType.COMMODITY:
        return COMMODITY_ALIASES.get(asset.symbol, asset.symbol)
    if asset.type == AssetType.INDEX:
        return INDEX_ALIASES.get(asset.symbol, asset.symbol)
    return asset.symbol


class FMPProvider(ProviderInterface):
    """FMP adapter implementing ProviderInterface."""

    name = "fmp"
    display_name = "FMP"
    supported_types = frozenset({AssetType.STOCK, AssetType.FX, AssetType.COMMODITY, AssetType.INDEX})
    requires_api_key = True

    def __init__(self, api_key: Optional[str] = None, client: Optional[FMPAPIClient] = None):
        from core.config import settings

        self.api_key = settings.fmp_api_key if api_key is None else api_key
        self.client = client or FMPAPIClient(api_key=self.api_key)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def initialize(self) -> None:
        if not self.is_configured():
            logger.warning("FMP API key not found; provider will fail until FMP_API_KEY is set")
            return
        await self.client.open()
        logger.info("FMP connector initialized")

    async def shutdown(self) -> None:
        await self.client.close()

    def _require_key(self, asset: Asset) -> None:
        if not self.is_configured():
            raise MissingCredentialsError(self.name, asset.symbol, "FMP API key not found")

    # ============================================
    # Data Methods
    # ============================================

    async def fetch_price(self, asset: Asset) -> str:
        try:
            self._require_key(asset)
            symbol = resolve_fmp_symbol(asset)

            data = await self.client.get_quote(symbol)
            price = to_price(dig(data, 0, "price"))
            if price is None:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not get price for {asset.name} from FMP"
                )
            return format_price(price)
        except ProviderError as e:
            logger.error(f"FMP API error for {asset.name}: {e.message}")
            raise

    async def fetch_historical(self, asset: Asset) -> List[HistoricalPoint]:
        try:
            self._require_key(asset)
            symbol = resolve_fmp_symbol(asset)

            data = await self.client.get_historical_price_full(symbol, timeseries=12)
            historical = dig(data, "historical")
            if not isinstance(historical, list):
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Could not get historical data for {asset.name} from FMP"
                )

            try:
                points = [
                    HistoricalPoint(month_label(item["date"]), float(item["close"]))
                    for item in reversed(historical)
                ]
            except (KeyError, TypeError, ValueError) as e:
                raise UnexpectedResponseError(
                    self.name, asset.symbol, f"Malformed historical row for {asset.name}: {e}"
                )
            return points[-12:]
        except ProviderError as e:
            logger.error(f"FMP historical data API error for {asset.name}: {e.message}")
            raise
