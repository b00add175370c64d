"""
Shared REST Client

Async HTTP client used by every provider adapter. It handles:
- aiohttp session lifecycle (async context manager, lazy session creation)
- One GET per attempt with a total timeout
- Optional retry with linear backoff on rate-limit statuses (429, 418, 503)
- Translation of transport failures into UpstreamUnavailableError

Retries are off by default (REQUEST_MAX_ATTEMPTS=1): a transient upstream
failure is a hard failure for that request and the orchestrator moves on to
the next provider in the chain.

Usage:
    async with BaseAPIClient("fmp", "https://financialmodelingprep.com") as client:
        data = await client._get("/api/v3/quote/AAPL", {"apikey": key}, symbol="AAPL")
"""

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from core.errors import UnexpectedResponseError, UpstreamUnavailableError
from core.logging import get_logger, log_api_request, log_api_response


RATE_LIMIT_STATUSES = (429, 418, 503)


class BaseAPIClient:
    """
    Async HTTP client for a single provider host.

    Attributes:
        provider: Provider identifier used in logs and errors
        base_url: Host plus version prefix, without trailing slash
        headers: Headers sent with every request (e.g., API key header)
        timeout: Total timeout per request in seconds
        max_attempts: Attempts per request on rate-limit responses
        session: aiohttp ClientSession, created on first use
    """

    def __init__(
        self,
        provider: str,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        from core.config import settings

        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.headers = {"Accept": "application/json", **(headers or {})}
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.request_max_attempts)
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = get_logger(f"providers.{provider}.client")

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers=self.headers)
            self.logger.debug(f"{self.provider} session created")

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()
            self.logger.debug(f"{self.provider} session closed")
        self.session = None

    # ============================================
    # HTTP Request Handler
    # ============================================

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, symbol: str = "") -> Any:
        """
        GET ``base_url + path`` and return the decoded JSON body.

        Args:
            path: Endpoint path (e.g., "/coins/bitcoin")
            params: Optional query parameters
            symbol: Asset symbol, carried into errors

        Returns:
            Decoded JSON response

        Raises:
            UpstreamUnavailableError: Non-2xx status, timeout or transport error
            UnexpectedResponseError: 2xx body that is not JSON
        """
        await self.open()

        url = f"{self.base_url}{path}"
        log_api_request(self.provider, path, params)

        for attempt in range(self.max_attempts):
            last_attempt = attempt + 1 >= self.max_attempts
            started = time.monotonic()

            try:
                async with self.session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    log_api_response(self.provider, path, resp.status, time.monotonic() - started)

                    if 200 <= resp.status < 300:
                        try:
                            return await resp.json(content_type=None)
                        except ValueError as e:
                            raise UnexpectedResponseError(
                                self.provider, symbol, f"Invalid JSON from {path}: {e}"
                            )

                    if resp.status in RATE_LIMIT_STATUSES and not last_attempt:
                        delay = 1.5 * (attempt + 1)
                        self.logger.warning(
                            f"Rate limited (HTTP {resp.status}) on {path}. "
                            f"Retrying in {delay:.1f}s... (attempt {attempt + 1}/{self.max_attempts})"
                        )
                        await asyncio.sleep(delay)
                        continue

                    text = await resp.text(errors="replace")
                    self.logger.error(f"HTTP {resp.status} on {path}: {text[:200]}")
                    raise UpstreamUnavailableError(
                        self.provider, symbol, f"HTTP {resp.status} from {path}", status=resp.status
                    )

            except asyncio.TimeoutError:
                self.logger.error(f"Timeout on {path} (attempt {attempt + 1}/{self.max_attempts})")
                if last_attempt:
                    raise UpstreamUnavailableError(
                        self.provider, symbol, f"Timed out after {self.timeout}s on {path}"
                    )
                await asyncio.sleep(1.0 * (attempt + 1))

            except aiohttp.ClientError as e:
                self.logger.error(f"Request failed on {path}: {e} (attempt {attempt + 1}/{self.max_attempts})")
                if last_attempt:
                    raise UpstreamUnavailableError(self.provider, symbol, f"Request to {path} failed: {e}")
                await asyncio.sleep(1.0 * (attempt + 1))

        raise UpstreamUnavailableError(
            self.provider, symbol, f"Failed to fetch {path} after {self.max_attempts} attempts"
        )


# ============================================
# Response Helpers
# ============================================

def dig(data: Any, *path: Any) -> Any:
    """
    Walk a nested JSON path; None if any hop is missing.

    Example:
        >>> dig({"a": {"b": [10, 20]}}, "a", "b", 0)
        10
    """
    for key in path:
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and isinstance(key, int) and -len(data) <= key < len(data):
            data = data[key]
        else:
            return None
    return data


def to_price(value: Any) -> Optional[float]:
    """Positive finite float from a JSON number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if price != price or price in (float("inf"), float("-inf")) or price <= 0:
        return None
    return price
