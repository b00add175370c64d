"""
Price Formatting

Every provider adapter returns prices through format_price so the output is
identical regardless of which provider answered. Precision is tiered by
magnitude:

    price >= 1000  ->  0 decimals   ("43250")
    price >= 100   ->  1 decimal    ("512.3")
    price >= 1     ->  2 decimals   ("1.08")
    price <  1     ->  6 decimals   ("0.000123")
"""

from typing import Union


_TIERS = (
    (1000.0, 0),
    (100.0, 1),
    (1.0, 2),
)


def decimals_for(price: float) -> int:
    """Number of decimal digits used for a price of this magnitude."""
    for threshold, decimals in _TIERS:
        if price >= threshold:
            return decimals
    return 6


def format_price(price: Union[int, float, str]) -> str:
    """
    Format a USD price with magnitude-tiered precision.

    When rounding carries the value into a higher tier (999.96 rounds to
    1000.0), the value is formatted again at that tier, so parsing the
    result and formatting it again always yields the same string.

    Raises:
        ValueError: If price is not a finite number

    Examples:
        >>> format_price(43250.71)
        '43251'
        >>> format_price(0.00012345)
        '0.000123'
        >>> format_price(999.96)
        '1000'
    """
    value = float(price)
    if value != value or value in (float("inf"), float("-inf")):
        raise ValueError(f"Cannot format non-finite price: {price!r}")

    decimals = decimals_for(value)
    text = f"{value:.{decimals}f}"

    rounded_decimals = decimals_for(float(text))
    if rounded_decimals != decimals:
        text = f"{float(text):.{rounded_decimals}f}"

    return text
