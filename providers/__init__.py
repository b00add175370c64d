"""
Provider Adapters Package

Each market-data provider has its own subpackage:
- api_client.py: REST calls on top of providers.base_client.BaseAPIClient
- __init__.py: Provider class implementing core.provider_interface.ProviderInterface

Adding a provider means adding a subpackage and registering it in
PROVIDER_CLASSES; chains in the configuration can then name it.
"""

from providers.coingecko import CoinGeckoProvider
from providers.coinmarketcap import CoinMarketCapProvider
from providers.fmp import FMPProvider


PROVIDER_CLASSES = {
    CoinGeckoProvider.name: CoinGeckoProvider,
    CoinMarketCapProvider.name: CoinMarketCapProvider,
    FMPProvider.name: FMPProvider,
}

__all__ = ["CoinGeckoProvider", "CoinMarketCapProvider", "FMPProvider", "PROVIDER_CLASSES"]
