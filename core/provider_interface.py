"""
Provider Interface - Abstract Contract for All Market-Data Providers

This module defines the abstract base class every provider adapter implements.
The orchestrator (PriceService) works with ProviderInterface only, so a
provider can be added or reordered in a chain without touching the fallback
logic.

Example:
    class FMPProvider(ProviderInterface):
        name = "fmp"
        supported_types = {AssetType.STOCK, AssetType.FX, ...}

        async def fetch_price(self, asset):
            ...

Contract:
    - fetch_price returns a formatted price string (core.utils.formatting)
    - fetch_historical returns at most 12 HistoricalPoint, oldest first
    - Failures are raised as core.errors.ProviderError subclasses; adapters
      log and re-raise, they never swallow
    - Adapters do not cache; caching belongs to the orchestrator
"""

from abc import ABC, abstractmethod
from typing import FrozenSet, List

from core.schemas import Asset, AssetType, HistoricalPoint


class ProviderInterface(ABC):
    """
    Abstract Base Class for Provider Adapters

    Class Attributes:
        name: Unique identifier (lowercase, used in chains and cache keys)
        display_name: Human-readable name for log lines and errors
        supported_types: Asset classes the provider can price
        requires_api_key: True if the provider refuses to run without a key

    Abstract Methods:
        - fetch_price: Current USD price as a formatted string
        - fetch_historical: Up to 12 monthly points, oldest first

    Optional Methods (can be overridden):
        - initialize / shutdown: HTTP session lifecycle
        - health_check: Lightweight reachability probe
        - is_configured: Whether credentials are present
    """

    name: str
    display_name: str = ""
    supported_types: FrozenSet[AssetType] = frozenset()
    requires_api_key: bool = False

    # ============================================
    # Data Methods
    # ============================================

    @abstractmethod
    async def fetch_price(self, asset: Asset) -> str:
        """
        Fetch the current USD price of an asset.

        Args:
            asset: Instrument to price

        Returns:
            str: Magnitude-tiered decimal string (e.g., "43250", "1.08")

        Raises:
            MissingCredentialsError: Required API key absent (before any network call)
            UpstreamUnavailableError: Transport failure, timeout or non-2xx status
            UnexpectedResponseError: 2xx response without the expected fields
        """
        ...

    @abstractmethod
    async def fetch_historical(self, asset: Asset) -> List[HistoricalPoint]:
        """
        Fetch up to 12 monthly (month-label, price) points, oldest first.

        Raises:
            Same as fetch_price
        """
        ...

    # ============================================
    # Optional Lifecycle Methods
    # ============================================

    async def initialize(self) -> None:
        """Set up HTTP sessions. Default does nothing; must be idempotent."""
        pass

    async def shutdown(self) -> None:
        """Release HTTP sessions. Default does nothing; must not raise."""
        pass

    async def health_check(self) -> bool:
        """
        Check if the provider is usable.

        Default implementation reports whether credentials are configured.
        Should not raise; return False on errors.
        """
        return self.is_configured()

    # ============================================
    # Helper Methods
    # ============================================

    def is_configured(self) -> bool:
        """True when the provider has what it needs to make calls."""
        return True

    def supports(self, asset_type: AssetType) -> bool:
        """True if the provider can price this asset class."""
        return AssetType(asset_type) in self.supported_types

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}')>"
