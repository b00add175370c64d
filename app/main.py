"""
FastAPI Application - Asset Price Aggregator API

Exposes the fallback orchestrator over HTTP.

Providers:
    - CoinGecko (crypto, primary)
    - CoinMarketCap (crypto, fallback)
    - Financial Modeling Prep (stocks, fx, commodities, indices)

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings, validate_configuration
from core.errors import (
    AssetDataUnavailableError,
    MissingCredentialsError,
    ProviderError,
    UnsupportedAssetTypeError,
)
from core.logging import logger
from core.price_service import get_price_service
from core.schemas import Asset, AssetType, HistoricalSeries, PriceQuote


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        await service.initialize()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await service.shutdown()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="Asset Price Aggregator API",
    description=(
        "Current USD prices and 12-month histories for crypto, stocks, fx, "
        "commodities and indices, aggregated from CoinGecko, CoinMarketCap and FMP.\n\n"
        "## Endpoints\n"
        "- `GET /price/{asset_type}/{symbol}` - Formatted USD price\n"
        "- `GET /historical/{asset_type}/{symbol}` - Monthly closes, oldest first\n"
        "- `GET /providers` - Registered providers and fallback chains\n"
        "- `GET /health` - Provider health\n"
    ),
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

service = get_price_service()  # Global price service


# ============================================
# Error Translation
# ============================================

def to_http_error(error: Exception) -> HTTPException:
    """
    Map aggregator errors to HTTP responses.

    MissingCredentialsError      -> 503 (server not configured for this provider)
    UnsupportedAssetTypeError    -> 400
    other ProviderError          -> 502 (upstream failed or answered garbage)
    AssetDataUnavailableError    -> 502 (every provider in the chain failed)
    """
    if isinstance(error, MissingCredentialsError):
        return HTTPException(
            status_code=503,
            detail={"message": str(error), "kind": error.kind.value, "provider": error.provider}
        )
    if isinstance(error, ProviderError):
        return HTTPException(
            status_code=502,
            detail={"message": str(error), "kind": error.kind.value, "provider": error.provider}
        )
    if isinstance(error, AssetDataUnavailableError):
        return HTTPException(
            status_code=502,
            detail={
                "message": str(error),
                "kind": "all_providers_failed",
                "attempts": [
                    {"provider": e.provider, "kind": e.kind.value, "message": e.message}
                    for e in error.attempts
                ]
            }
        )
    if isinstance(error, UnsupportedAssetTypeError):
        return HTTPException(status_code=400, detail={"message": str(error), "kind": "unsupported_asset_type"})
    return HTTPException(status_code=500, detail={"message": f"Internal error: {error}", "kind": "internal"})


def build_asset(
    asset_type: AssetType,
    symbol: str,
    name: Optional[str],
    coin_id: Optional[str],
    base: Optional[str],
    quote: Optional[str],
) -> Asset:
    return Asset(symbol=symbol, name=name or "", type=asset_type, id=coin_id, base=base, quote=quote)


# ============================================
# System Endpoints
# ============================================

@app.get("/", tags=["System"])
async def root():
    """API information and registered providers."""
    return {
        "name": "Asset Price Aggregator API",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "providers": list(service.providers)
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Provider health; "degraded" when any provider is unusable."""
    health = await service.health_check()
    return {
        "status": "healthy" if all(health.values()) else "degraded",
        "providers": health
    }


@app.get("/providers", tags=["System"])
async def list_providers():
    """Registered providers and the fallback chain per asset type."""
    return {
        "providers": service.list_providers(),
        "chains": service.describe_chains()
    }


# ============================================
# Market Data Endpoints
# ============================================

@app.get("/price/{asset_type}/{symbol}", response_model=PriceQuote, tags=["Market Data"])
async def get_price(
    asset_type: AssetType,
    symbol: str,
    name: Optional[str] = Query(None, description="Display name used in logs"),
    coin_id: Optional[str] = Query(None, alias="id", description="CoinGecko id for unmapped tickers"),
    base: Optional[str] = Query(None, description="FX base currency (e.g., EUR)"),
    quote: Optional[str] = Query(None, description="FX quote currency (e.g., USD)"),
):
    """
    Current USD price, formatted with magnitude-tiered precision.

    Examples:
        GET /price/crypto/BTC
        GET /price/fx/EURUSD?base=EUR&quote=USD
        GET /price/commodity/XAU
    """
    asset = build_asset(asset_type, symbol, name, coin_id, base, quote)
    try:
        return await service.get_price_quote(asset)
    except (ProviderError, AssetDataUnavailableError, UnsupportedAssetTypeError) as e:
        logger.error(f"Price error {asset_type.value}/{symbol}: {e}")
        raise to_http_error(e)


@app.get("/historical/{asset_type}/{symbol}", response_model=HistoricalSeries, tags=["Market Data"])
async def get_historical(
    asset_type: AssetType,
    symbol: str,
    name: Optional[str] = Query(None, description="Display name used in logs"),
    coin_id: Optional[str] = Query(None, alias="id", description="CoinGecko id for unmapped tickers"),
    base: Optional[str] = Query(None, description="FX base currency (e.g., EUR)"),
    quote: Optional[str] = Query(None, description="FX quote currency (e.g., USD)"),
):
    """
    Up to 12 monthly [month, price] points, oldest first.

    Example:
        GET /historical/stock/AAPL
    """
    asset = build_asset(asset_type, symbol, name, coin_id, base, quote)
    try:
        return await service.get_historical_series(asset)
    except (ProviderError, AssetDataUnavailableError, UnsupportedAssetTypeError) as e:
        logger.error(f"Historical error {asset_type.value}/{symbol}: {e}")
        raise to_http_error(e)
