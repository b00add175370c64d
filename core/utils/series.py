"""
Series Helpers

Reduces raw (timestamp, price) samples into monthly points. A month's
representative price is the latest sample dated within that month, not an
average.
"""

from typing import Iterable, List, Sequence, Tuple, Union

from core.schemas import HistoricalPoint
from core.utils.time import MONTH_NAMES, to_utc_datetime


Sample = Union[Sequence[float], Tuple[float, float]]


def reduce_to_monthly(samples: Iterable[Sample], limit: int = 12) -> List[HistoricalPoint]:
    """
    Collapse (timestamp, price) samples into one point per calendar month.

    Samples are sorted ascending by timestamp. Walking them in order, each
    time the (year, month) changes the previous month's last-seen price is
    emitted; the final month is emitted after the loop. Only the most recent
    ``limit`` points are returned, oldest first.

    Args:
        samples: Pairs of (epoch seconds or milliseconds, price)
        limit: Maximum number of monthly points to keep

    Returns:
        List of HistoricalPoint ordered oldest to newest

    Example:
        >>> reduce_to_monthly([(1704067200000, 42000.0), (1706659200000, 43000.0)])
        [HistoricalPoint(month='Jan', price=43000.0)]
    """
    ordered = sorted(((float(s[0]), float(s[1])) for s in samples), key=lambda s: s[0])

    monthly: List[HistoricalPoint] = []
    current = None
    last_price = None

    for timestamp, price in ordered:
        dt = to_utc_datetime(timestamp)
        key = (dt.year, dt.month)

        if key != current:
            if current is not None:
                monthly.append(HistoricalPoint(MONTH_NAMES[current[1] - 1], last_price))
            current = key

        last_price = price

    if current is not None:
        monthly.append(HistoricalPoint(MONTH_NAMES[current[1] - 1], last_price))

    return monthly[-limit:] if limit > 0 else []
