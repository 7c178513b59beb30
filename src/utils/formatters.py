"""Display formatting helpers for dashboard values."""

import math
from typing import Any

LARGE_NUMBER_UNITS = ("", "K", "M", "B", "T")


def is_valid_number(value: Any) -> bool:
    """True for finite ints and floats (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_blank(value: Any) -> bool:
    return not is_valid_number(value) or value == 0


def format_number(num: Any, decimals: int = 2) -> str:
    """
    Format a number with thousands separators and fixed decimals.

    Args:
        num: Number to format
        decimals: Number of decimal places

    Returns:
        Formatted string, "0" for zero or missing values
    """
    if _is_blank(num):
        return "0"
    return f"{num:,.{decimals}f}"


def format_currency(value: Any, symbol: str = "$") -> str:
    """
    Format a USD amount. Amounts below 1 in magnitude get four decimals so small-cap
    prices stay readable; everything else gets two.
    """
    if _is_blank(value):
        return f"{symbol}0"
    decimals = 4 if abs(value) < 1 else 2
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{decimals}f}"


def format_percentage(num: Any) -> str:
    if _is_blank(num):
        return "0"
    return f"{num:.2f}%"


def format_large_number(num: Any) -> str:
    """
    Abbreviate a number with a K/M/B/T suffix.

    Examples:
        >>> format_large_number(1_530_000)
        '1.5M'
        >>> format_large_number(999)
        '999'
    """
    if _is_blank(num):
        return "0"

    tier = int(math.log10(abs(num)) / 3)
    if tier <= 0:
        return str(int(num)) if float(num).is_integer() else str(num)

    tier = min(tier, len(LARGE_NUMBER_UNITS) - 1)
    scaled = num / 10 ** (tier * 3)
    return f"{scaled:.1f}{LARGE_NUMBER_UNITS[tier]}"


def calculate_percentage_change(old_value: Any, new_value: Any) -> float:
    """Percentage change from old_value to new_value; 0 when undefined."""
    if not is_valid_number(old_value) or not is_valid_number(new_value) or old_value == 0:
        return 0.0
    return (new_value - old_value) / old_value * 100


def clamp(value: float, minimum: float, maximum: float) -> float:
    return min(max(value, minimum), maximum)
