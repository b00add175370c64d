"""
Price Service - Fallback Orchestrator

Central registry of provider adapters plus the per-asset-class fallback
chains that decide which providers are tried, in which order.

Behavior:
    get_asset_price(asset)
        - asset.price_usd set -> returned as-is, no network call
        - otherwise each provider in the asset type's chain is tried in order;
          each attempt goes through the price cache under
          "{provider}-price-{symbol}"; the first success wins
    get_asset_historical_data(asset)
        - same ordering through the historical cache; always fetches (no
          pre-known series exists)

Failure policy:
    - Chain of one provider (the default for stock/fx/commodity/index): that
      provider's error propagates unchanged
    - Longer chain (crypto: coingecko -> coinmarketcap): when every provider
      fails, AssetDataUnavailableError lists each attempt

Every attempt, success and failure is logged; that log is the only
operability signal of the subsystem.

Example Usage:
    service = PriceService()
    await service.initialize()

    price = await service.get_asset_price(Asset(symbol="BTC", type="crypto"))
    points = await service.get_asset_historical_data(Asset(symbol="AAPL", type="stock"))

    await service.shutdown()
"""

from functools import partial
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from core.cache import TTLCache, cache_key
from core.errors import (
    AssetDataUnavailableError,
    ProviderError,
    UnsupportedAssetTypeError,
    UpstreamUnavailableError,
)
from core.logging import get_logger, log_provider_event
from core.provider_interface import ProviderInterface
from core.schemas import Asset, AssetType, HistoricalPoint, HistoricalSeries, PriceQuote


logger = get_logger(__name__)

AssetLike = Union[Asset, Mapping[str, Any]]


class PriceService:
    """
    Provider registry and fallback orchestrator.

    Attributes:
        providers: Provider instances by name
        chains: Ordered provider names per asset type
        price_cache: TTL cache for formatted prices
        historical_cache: TTL cache for monthly series

    Example:
        >>> service = PriceService(
        ...     providers=[FMPProvider(api_key="k")],
        ...     chains={"stock": ["fmp"]},
        ...     price_cache=TTLCache(ttl_seconds=60, clock=fake_clock),
        ... )
    """

    def __init__(
        self,
        providers: Optional[Iterable[ProviderInterface]] = None,
        chains: Optional[Mapping[Union[str, AssetType], Sequence[str]]] = None,
        price_cache: Optional[TTLCache] = None,
        historical_cache: Optional[TTLCache] = None,
    ):
        """
        Build the registry and validate the chains.

        Args:
            providers: Provider instances (defaults to one of each registered provider)
            chains: Asset type -> ordered provider names (defaults to settings)
            price_cache: Cache for prices (defaults to TTLCache with settings.cache_ttl)
            historical_cache: Cache for series (same default)

        Raises:
            ValueError: If a chain names a provider that is not registered
        """
        if providers is None:
            # providers import core modules, so the registry is imported lazily
            from providers import PROVIDER_CLASSES
            providers = [cls() for cls in PROVIDER_CLASSES.values()]

        if chains is None:
            from core.config import settings
            chains = settings.provider_chains

        self.providers: Dict[str, ProviderInterface] = {p.name: p for p in providers}

        self.chains: Dict[AssetType, List[str]] = {}
        for asset_type, names in chains.items():
            unknown = [n for n in names if n not in self.providers]
            if unknown:
                raise ValueError(
                    f"Chain for '{AssetType(asset_type).value}' names unknown provider(s): {', '.join(unknown)}. "
                    f"Registered: {', '.join(self.providers)}"
                )
            self.chains[AssetType(asset_type)] = list(names)

        self.price_cache = price_cache if price_cache is not None else TTLCache()
        self.historical_cache = historical_cache if historical_cache is not None else TTLCache()

        logger.info(
            f"PriceService initialized with {len(self.providers)} provider(s): {', '.join(self.providers)}"
        )

    # ============================================
    # Chain Resolution
    # ============================================

    def chain_for(self, asset_type: Union[str, AssetType]) -> List[ProviderInterface]:
        """
        Ordered provider instances for an asset type.

        Raises:
            UnsupportedAssetTypeError: If no providers are configured for the type
        """
        asset_type = AssetType(asset_type)
        names = self.chains.get(asset_type)
        if not names:
            raise UnsupportedAssetTypeError(f"No providers configured for asset type '{asset_type.value}'")
        return [self.providers[name] for name in names]

    # ============================================
    # Public Operations
    # ============================================

    async def get_asset_price(self, asset: AssetLike) -> str:
        """
        Formatted USD price for an asset.

        Raises:
            ProviderError: Single-provider chain failed
            AssetDataUnavailableError: Every provider of a longer chain failed
            UnsupportedAssetTypeError: No chain for the asset type
        """
        quote = await self.get_price_quote(asset)
        return quote.price

    async def get_asset_historical_data(self, asset: AssetLike) -> List[HistoricalPoint]:
        """
        Up to 12 monthly (month, price) points, oldest first.

        Raises:
            Same as get_asset_price
        """
        series = await self.get_historical_series(asset)
        return series.points

    async def get_price_quote(self, asset: AssetLike) -> PriceQuote:
        """Price plus the name of the provider that served it."""
        asset = _as_asset(asset)

        if asset.price_usd:
            logger.debug(f"Using pre-known price for {asset.name}: ${asset.price_usd}")
            return PriceQuote(symbol=asset.symbol, type=asset.type, price=asset.price_usd, provider=None)

        price, provider = await self._resolve(asset, "price", self.price_cache, "fetch_price")
        logger.info(f"Successfully fetched price for {asset.name} from {provider}: ${price}")
        return PriceQuote(symbol=asset.symbol, type=asset.type, price=price, provider=provider)

    async def get_historical_series(self, asset: AssetLike) -> HistoricalSeries:
        """Monthly series plus the name of the provider that served it."""
        asset = _as_asset(asset)

        points, provider = await self._resolve(asset, "historical", self.historical_cache, "fetch_historical")
        logger.info(f"Successfully fetched historical data for {asset.name} from {provider}")
        return HistoricalSeries(symbol=asset.symbol, type=asset.type, provider=provider, points=list(points))

    # ============================================
    # Fallback Walk
    # ============================================

    async def _resolve(self, asset: Asset, kind: str, cache: TTLCache, method: str) -> Tuple[Any, str]:
        chain = self.chain_for(asset.type)
        attempts: List[ProviderError] = []

        for provider in chain:
            key = cache_key(provider.name, kind, asset.symbol)
            if key in cache:
                log_provider_event(provider.name, "cache_hit", asset.name, kind)
            else:
                log_provider_event(provider.name, "attempt", asset.name, kind)

            try:
                value = await cache.get_or_fetch(key, partial(getattr(provider, method), asset))
            except Exception as e:
                if len(chain) == 1:
                    log_provider_event(provider.name, "failure", asset.name, str(e))
                    logger.error(f"Error getting {kind} for {asset.name}: {e}")
                    raise

                if isinstance(e, ProviderError):
                    error = e
                else:
                    logger.exception(f"Unexpected error from {provider.name} for {asset.name}")
                    error = UpstreamUnavailableError(provider.name, asset.symbol, f"{type(e).__name__}: {e}")

                log_provider_event(provider.name, "failure", asset.name, error.message)
                attempts.append(error)
                continue

            log_provider_event(provider.name, "success", asset.name, kind)
            return value, provider.name

        failure = AssetDataUnavailableError(asset.symbol, kind, attempts)
        logger.error(str(failure))
        raise failure

    # ============================================
    # Lifecycle Management
    # ============================================

    async def initialize(self) -> None:
        """Initialize every provider; a failing provider does not stop the others."""
        logger.info("Initializing all providers...")

        for name, provider in self.providers.items():
            try:
                await provider.initialize()
            except Exception as e:
                logger.error(f"✗ Failed to initialize {name}: {e}")

        logger.info("All providers initialized")

    async def shutdown(self) -> None:
        """Shut down every provider, continuing past individual errors."""
        logger.info("Shutting down all providers...")

        for name, provider in self.providers.items():
            try:
                await provider.shutdown()
            except Exception as e:
                logger.error(f"✗ Error shutting down {name}: {e}")

        logger.info("All providers shut down")

    async def health_check(self) -> Dict[str, bool]:
        """Provider name -> health status."""
        status = {}
        for name, provider in self.providers.items():
            try:
                status[name] = await provider.health_check()
            except Exception as e:
                logger.error(f"Health check failed for {name}: {e}")
                status[name] = False
        return status

    # ============================================
    # Introspection
    # ============================================

    def list_providers(self) -> List[Dict[str, Any]]:
        """Registered providers with their configuration status."""
        return [
            {
                "name": p.name,
                "display_name": p.display_name or p.name,
                "configured": p.is_configured(),
                "requires_api_key": p.requires_api_key,
                "asset_types": sorted(t.value for t in p.supported_types),
            }
            for p in self.providers.values()
        ]

    def describe_chains(self) -> Dict[str, List[str]]:
        return {asset_type.value: list(names) for asset_type, names in self.chains.items()}

    def __repr__(self) -> str:
        return f"<PriceService(providers={list(self.providers)})>"


def _as_asset(asset: AssetLike) -> Asset:
    if isinstance(asset, Asset):
        return asset
    return Asset.model_validate(asset)


# ============================================
# Global Service Instance
# ============================================

_service: Optional[PriceService] = None


def get_price_service() -> PriceService:
    """
    Get the process-wide PriceService (created on first call).

    Example:
        >>> from core.price_service import get_price_service
        >>> price = await get_price_service().get_asset_price(asset)
    """
    global _service
    if _service is None:
        _service = PriceService()
        logger.debug("Created global PriceService instance")
    return _service


async def get_asset_price(asset: AssetLike) -> str:
    """Formatted USD price via the global service."""
    return await get_price_service().get_asset_price(asset)


async def get_asset_historical_data(asset: AssetLike) -> List[HistoricalPoint]:
    """Monthly series via the global service."""
    return await get_price_service().get_asset_historical_data(asset)
