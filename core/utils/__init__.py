"""
Core Utilities Package

Modules:
    - time: Timestamp conversion and month labels
    - formatting: Magnitude-tiered USD price formatting
    - series: Monthly reduction of raw price samples
"""

from core.utils.time import to_utc_datetime, month_label
from core.utils.formatting import format_price

__all__ = ["to_utc_datetime", "month_label", "format_price"]
