# Rev 0.1.0
from __future__ import annotations
import math


def format_currency(amount: float, symbol: str = "$") -> str:
    """1234.5 -> '$1,234.50'; negatives keep the sign ahead of the symbol."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def round_half_up(value: float) -> int:
    # round() is banker's rounding; progress labels round .5 up
    return int(math.floor(value + 0.5))


def format_percent(value: float) -> str:
    return f"{round_half_up(value)}%"
