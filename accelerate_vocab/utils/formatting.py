"""Small numeric and display helpers shared by analytics, dashboards and games."""

from __future__ import annotations

import math
from typing import Iterable, Optional

NO_DATA = '—'


def round_half_up(value: float) -> int:
    """Round like a schoolbook (2.5 -> 3), not like ``round`` (2.5 -> 2)."""

    return int(math.floor(value + 0.5))


def accuracy_percent(correct: int, total: int) -> Optional[int]:
    """``round(100 * correct / total)``, or ``None`` when there is nothing to divide by."""

    if not total:
        return None
    return round_half_up(100.0 * correct / total)


def mean(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the non-null values, ``None`` when there are none."""

    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def format_accuracy(value: Optional[float]) -> str:
    if value is None:
        return NO_DATA
    return f"{value:.1f}%"


def format_duration(seconds: Optional[int]) -> str:
    """``45s`` under a minute, ``3m 5s`` otherwise."""

    if seconds is None:
        return NO_DATA
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    minutes, rest = divmod(seconds, 60)
    return f"{minutes}m {rest}s"


def format_clock(seconds: int) -> str:
    """``M:SS`` for countdowns."""

    minutes, rest = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{rest:02d}"


def accuracy_band(value: Optional[float]) -> str:
    """CSS band for an accuracy figure: good (>= 80), fair (>= 60), poor, none."""

    if value is None:
        return 'none'
    if value >= 80:
        return 'good'
    if value >= 60:
        return 'fair'
    return 'poor'
