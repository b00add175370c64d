"""
Normalized Data Schemas

This module defines the Pydantic models shared by every provider adapter and
by the HTTP surface.

Key Principle:
    Regardless of which provider answers (CoinGecko, CoinMarketCap, FMP), the
    result is normalized into these schemas: a formatted USD price string or a
    list of (month, price) points ordered oldest to newest.

Models:
    - AssetType: Instrument class that selects the provider chain
    - Asset: Immutable description of the instrument being priced
    - HistoricalPoint: One monthly (month-label, price) point
    - PriceQuote: Price plus the provider that served it
    - HistoricalSeries: Monthly series plus the provider that served it
"""

from enum import Enum
from typing import List, NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ============================================
# Asset Schema
# ============================================

class AssetType(str, Enum):
    """Instrument class. Each value maps to an ordered provider chain."""

    CRYPTO = "crypto"
    STOCK = "stock"
    FX = "fx"
    COMMODITY = "commodity"
    INDEX = "index"


class Asset(BaseModel):
    """
    Tradable instrument descriptor.

    Immutable input to every fetch operation.

    Attributes:
        symbol: Ticker as the user knows it (e.g., "BTC", "AAPL", "XAU")
        name: Display name used in log lines (defaults to the symbol)
        type: Asset class, selects the provider chain
        id: Provider-native id (CoinGecko coin id for unmapped tickers)
        base: FX base currency (e.g., "EUR")
        quote: FX quote currency (e.g., "USD")
        price_usd: Pre-known formatted price; when set, no fetch happens

    Example:
        >>> Asset(symbol="EUR/USD", type="fx", base="EUR", quote="USD")
        >>> Asset(symbol="BTC", name="Bitcoin", type="crypto")
    """

    symbol: str = Field(
        ...,
        min_length=1,
        description="Ticker symbol",
        examples=["BTC", "AAPL", "XAU", "SPX"]
    )

    name: str = Field(
        default="",
        description="Human-readable name (defaults to symbol)",
        examples=["Bitcoin", "Apple Inc."]
    )

    type: AssetType = Field(
        ...,
        description="Asset class"
    )

    id: Optional[str] = Field(
        default=None,
        description="Provider-native id (e.g., CoinGecko 'pepe')"
    )

    base: Optional[str] = Field(default=None, description="FX base currency")
    quote: Optional[str] = Field(default=None, description="FX quote currency")

    price_usd: Optional[str] = Field(
        default=None,
        alias="priceUsd",
        description="Pre-known formatted USD price (bypasses fetch)"
    )

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "symbol": "BTC",
                "name": "Bitcoin",
                "type": "crypto"
            }
        }
    )

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("symbol must not be blank")
        return v

    @field_validator("base", "quote")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        """FX legs are uppercase currency codes"""
        return v.strip().upper() if v else None

    @model_validator(mode="after")
    def default_name(self) -> "Asset":
        if not self.name:
            # frozen model, bypass __setattr__
            object.__setattr__(self, "name", self.symbol)
        return self


# ============================================
# Historical Series Schema
# ============================================

class HistoricalPoint(NamedTuple):
    """
    Last observed price in a calendar month.

    A tuple so it serializes as a JSON ``["Jan", 42000.5]`` pair.
    """

    month: str
    price: float


# ============================================
# Response Models
# ============================================

class PriceQuote(BaseModel):
    """Formatted USD price for an asset and the provider that served it."""

    symbol: str
    type: AssetType
    price: str = Field(..., description="Magnitude-tiered decimal string", examples=["43250", "1.08"])
    provider: Optional[str] = Field(
        default=None,
        description="Provider that served the price (None when pre-known)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"symbol": "BTC", "type": "crypto", "price": "43250", "provider": "coingecko"}
        }
    )


class HistoricalSeries(BaseModel):
    """Up to 12 monthly points, oldest first."""

    symbol: str
    type: AssetType
    provider: str
    points: List[HistoricalPoint] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "symbol": "AAPL",
                "type": "stock",
                "provider": "fmp",
                "points": [["Jan", 185.2], ["Feb", 181.4]]
            }
        }
    )
