"""Utility helpers for calculator modules."""

from __future__ import annotations


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value`` (already in percent)."""

    if float(int(value)) == value:
        return f"{int(value)}%"
    return f"{value:g}%"


def format_won(amount: float) -> str:
    """Format ``amount`` the way ko-KR displays whole won, e.g. ``1,234 원``."""

    rounded = int(round_half_up(amount))
    return f"{rounded:,} 원"


def round_half_up(value: float) -> float:
    """Round to the nearest integer with halves moving towards positive infinity."""

    floor = int(value // 1)
    return float(floor + 1 if value - floor >= 0.5 else floor)


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
