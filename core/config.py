"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Provider API keys (presence changes behavior, not just values)
- Per-asset-class provider chains as comma-separated strings
- Cache TTL and HTTP client tuning

Usage:
    from core.config import settings

    print(settings.cache_ttl)
    print(settings.provider_chains["crypto"])  # ['coingecko', 'coinmarketcap']
"""

from typing import Dict, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


ASSET_TYPES = ("crypto", "stock", "fx", "commodity", "index")
KNOWN_PROVIDERS = ("coingecko", "coinmarketcap", "fmp")


def _split(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        coingecko_api_key: Optional CoinGecko Pro key (switches to the pro host)
        coinmarketcap_api_key: Required for any CoinMarketCap call
        fmp_api_key: Required for any Financial Modeling Prep call
        cache_ttl: Freshness window for cached prices and series, in seconds
        request_timeout: Total timeout for a single outbound HTTP request
        request_max_attempts: Attempts per request on rate-limit responses (1 = no retry)
        crypto_providers .. index_providers: Ordered fallback chain per asset class
    """

    # ============================================
    # Provider Credentials
    # ============================================

    coingecko_api_key: str = Field(
        default="",
        description="CoinGecko Pro API key (optional, unlocks pro host and higher rate limit)"
    )

    coinmarketcap_api_key: str = Field(
        default="",
        description="CoinMarketCap API key (required for any CoinMarketCap call)"
    )

    fmp_api_key: str = Field(
        default="",
        description="Financial Modeling Prep API key (required for any FMP call)"
    )

    # ============================================
    # Provider Endpoints
    # ============================================

    coingecko_public_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko public API base URL"
    )

    coingecko_pro_url: str = Field(
        default="https://pro-api.coingecko.com/api/v3",
        description="CoinGecko Pro API base URL (used when an API key is set)"
    )

    coinmarketcap_base_url: str = Field(
        default="https://pro-api.coinmarketcap.com",
        description="CoinMarketCap API base URL"
    )

    fmp_base_url: str = Field(
        default="https://financialmodelingprep.com",
        description="Financial Modeling Prep API base URL"
    )

    # ============================================
    # Fallback Chains (comma-separated, in priority order)
    # ============================================

    crypto_providers: str = Field(default="coingecko,coinmarketcap")
    stock_providers: str = Field(default="fmp")
    fx_providers: str = Field(default="fmp")
    commodity_providers: str = Field(default="fmp")
    index_providers: str = Field(default="fmp")

    # ============================================
    # Caching & HTTP
    # ============================================

    cache_ttl: int = Field(
        default=1800,
        description="Cache TTL in seconds (30 minutes)"
    )

    request_timeout: int = Field(
        default=30,
        description="HTTP request timeout in seconds"
    )

    request_max_attempts: int = Field(
        default=1,
        description="Attempts per request when rate limited (1 disables retries)"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Derived Properties
    # ============================================

    @property
    def provider_chains(self) -> Dict[str, List[str]]:
        """
        Ordered provider names per asset type.

        Example:
            >>> settings.provider_chains["crypto"]
            ['coingecko', 'coinmarketcap']
        """
        return {
            "crypto": _split(self.crypto_providers),
            "stock": _split(self.stock_providers),
            "fx": _split(self.fx_providers),
            "commodity": _split(self.commodity_providers),
            "index": _split(self.index_providers),
        }

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS origins string to a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def has_api_key(self, provider: str) -> bool:
        """True if the credential for the given provider is set."""
        return bool(getattr(self, f"{provider}_api_key", ""))


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Raises:
        ValueError: If a chain is empty or names an unknown provider,
                    or if the port, TTL or log level is invalid
    """
    # logging.py imports config.py, so the logger is imported lazily
    from core.logging import logger

    config = config or settings

    for asset_type, chain in config.provider_chains.items():
        if not chain:
            raise ValueError(f"Provider chain for '{asset_type}' must name at least one provider")
        for name in chain:
            if name not in KNOWN_PROVIDERS:
                raise ValueError(
                    f"Unknown provider '{name}' in '{asset_type}' chain. "
                    f"Must be one of: {', '.join(KNOWN_PROVIDERS)}"
                )

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    if config.cache_ttl <= 0:
        raise ValueError(f"CACHE_TTL must be positive, got {config.cache_ttl}")

    if config.request_max_attempts < 1:
        raise ValueError(f"REQUEST_MAX_ATTEMPTS must be at least 1, got {config.request_max_attempts}")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    for asset_type, chain in config.provider_chains.items():
        for name in chain:
            if name != "coingecko" and not config.has_api_key(name):
                logger.warning(f"{name} is in the '{asset_type}' chain but {name.upper()}_API_KEY is not set")

    logger.info("Configuration validated successfully")
    for asset_type, chain in config.provider_chains.items():
        logger.info(f"Chain {asset_type}: {' -> '.join(chain)}")
    logger.info(f"CoinGecko: {'pro' if config.coingecko_api_key else 'public'} API")
    logger.info(f"Cache TTL: {config.cache_ttl}s")
    logger.info(f"Log level: {config.log_level.upper()}")
