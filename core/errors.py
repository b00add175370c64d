"""
Error Taxonomy

Every failure inside the aggregator is one of three kinds, each carrying the
provider and the asset symbol so callers and tests can branch on ``kind``
instead of matching message strings:

    MISSING_CREDENTIALS   - a required API key is absent (raised before any network call)
    UPSTREAM_UNAVAILABLE  - the HTTP call failed, timed out, or returned non-2xx
    UNEXPECTED_SHAPE      - a 2xx response lacks the expected field path

The orchestrator wraps the attempts of a multi-provider chain in
AssetDataUnavailableError when every provider failed.
"""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UNEXPECTED_SHAPE = "unexpected_shape"


class ProviderError(Exception):
    """Base class for a single provider's failure."""

    kind: ErrorKind

    def __init__(self, provider: str, symbol: str, message: str):
        self.provider = provider
        self.symbol = symbol
        self.message = message
        super().__init__(f"[{provider}] {message}")


class MissingCredentialsError(ProviderError):
    kind = ErrorKind.MISSING_CREDENTIALS


class UpstreamUnavailableError(ProviderError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE

    def __init__(self, provider: str, symbol: str, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(provider, symbol, message)


class UnexpectedResponseError(ProviderError):
    kind = ErrorKind.UNEXPECTED_SHAPE


class AssetDataUnavailableError(Exception):
    """
    Every provider in the asset's chain failed.

    Attributes:
        symbol: Asset symbol
        data_kind: "price" or "historical"
        attempts: The ProviderError raised by each provider, in chain order
    """

    def __init__(self, symbol: str, data_kind: str, attempts: List[ProviderError]):
        self.symbol = symbol
        self.data_kind = data_kind
        self.attempts = list(attempts)
        tried = "; ".join(f"{e.provider}: {e.message}" for e in self.attempts)
        super().__init__(f"Could not get {data_kind} for {symbol} from any provider ({tried})")

    @property
    def providers(self) -> List[str]:
        return [e.provider for e in self.attempts]


class UnsupportedAssetTypeError(Exception):
    """No provider chain is configured for the asset type."""
