"""
Unified Logging Configuration

Sets up a centralized logging system for the aggregator. All modules import the
logger from here instead of using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Application started")
    log = get_logger(__name__)  # "marketfeed.providers.fmp"

Log Levels used by the aggregator:
    DEBUG    - Raw request/response lines, cache hits
    INFO     - Provider attempts and successes in the fallback chain
    WARNING  - Provider failures that still have a fallback, public-API usage
    ERROR    - Failures that reach the caller

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file (default INFO).
"""

import logging
import sys
from typing import Optional


ROOT_LOGGER_NAME = "marketfeed"


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include logger name in log messages

    Returns:
        logging.Logger: Configured root application logger

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] marketfeed: Application started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s:")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    return root


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    _log_level = settings.log_level
except ImportError:
    _log_level = "INFO"

logger = setup_logging(log_level=_log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger of the application logger.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger named "marketfeed.<name>"

    Example:
        # In providers/fmp/__init__.py:
        log = get_logger(__name__)
        log.info("Fetching quote")
        # Output: 2024-01-01 12:00:00 [INFO] marketfeed.providers.fmp: Fetching quote
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(provider: str, endpoint: str, params: dict = None) -> None:
    """
    Log an outbound API request. API keys in params are masked.

    Example:
        >>> log_api_request("fmp", "/api/v3/quote/AAPL", {"apikey": "secret"})
        [DEBUG] API Request: fmp /api/v3/quote/AAPL | Params: {'apikey': '***'}
    """
    if params:
        masked = {
            k: ("***" if "key" in k.lower() else v)
            for k, v in params.items()
        }
        logger.debug(f"API Request: {provider} {endpoint} | Params: {masked}")
    else:
        logger.debug(f"API Request: {provider} {endpoint}")


def log_api_response(provider: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("coingecko", "/coins/bitcoin", 200, 0.342)
        [DEBUG] API Response: coingecko /coins/bitcoin | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {provider} {endpoint} | Status: {status}{time_str}")


def log_provider_event(provider: str, event: str, asset: str, details: str = None) -> None:
    """
    Log a fallback-chain transition with consistent formatting.

    Events:
        attempt, cache_hit, success -> INFO (cache_hit at DEBUG)
        failure                     -> WARNING

    Example:
        >>> log_provider_event("coingecko", "failure", "Bitcoin", "HTTP 429")
        [WARNING] Provider: coingecko failure | Asset: Bitcoin | HTTP 429
    """
    details_str = f" | {details}" if details else ""

    if event == "failure":
        level = logging.WARNING
    elif event == "cache_hit":
        level = logging.DEBUG
    else:
        level = logging.INFO
    logger.log(level, f"Provider: {provider} {event} | Asset: {asset}{details_str}")


logger.debug("Logging system initialized")
