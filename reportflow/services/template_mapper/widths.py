"""Column width allocation for table regions.

Percentages are balanced to sum to exactly 100 and pixel widths to sum to
exactly the table width. Rounding residue always lands on the last column
first; callers and tests rely on that placement.
"""

from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence, TypeVar

from .mapping import TableColumn

TOTAL_PCT = 100
MIN_SHARE = 1

ColumnT = TypeVar("ColumnT", bound=TableColumn)


def round_half_up(value: float) -> int:
    return int(Decimal(repr(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _sanitize(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _absorb_residue(shares: List[int], target: int, order: Sequence[int]) -> List[int]:
    """Move ``target - sum(shares)`` onto ``order[-1]``, spilling backwards at the floor."""

    diff = target - sum(shares)
    for idx in reversed(order):
        if diff == 0:
            break
        adjusted = max(MIN_SHARE, shares[idx] + diff)
        diff -= adjusted - shares[idx]
        shares[idx] = adjusted
    return shares


def normalize_width_values(values: Sequence[object]) -> List[int]:
    """Rescale raw width percentages so they sum to exactly 100."""

    count = len(values)
    if count == 0:
        return []

    sanitized = [_sanitize(v) for v in values]
    total = sum(sanitized)
    if total <= 0:
        base = TOTAL_PCT // count
        shares = [max(MIN_SHARE, base) for _ in range(count)]
        shares[-1] = max(MIN_SHARE, TOTAL_PCT - sum(shares[:-1]))
        return shares

    shares = [max(MIN_SHARE, round_half_up(v / total * TOTAL_PCT)) for v in sanitized]
    return _absorb_residue(shares, TOTAL_PCT, range(count))


def normalize_width_values_keep_index(values: Sequence[object], keep_index: int) -> List[int]:
    """Like :func:`normalize_width_values`, but ``values[keep_index]`` is authoritative."""

    count = len(values)
    if count == 0:
        return []
    if keep_index < 0 or keep_index >= count:
        return normalize_width_values(values)
    if count == 1:
        return [TOTAL_PCT]

    kept = round_half_up(_sanitize(values[keep_index])) or MIN_SHARE
    kept = min(max(MIN_SHARE, kept), TOTAL_PCT - MIN_SHARE * (count - 1))

    others = [i for i in range(count) if i != keep_index]
    rest = TOTAL_PCT - kept
    weights = {i: _sanitize(values[i]) for i in others}
    weight_sum = sum(weights.values())
    if weight_sum <= 0:
        weights = {i: 1.0 for i in others}
        weight_sum = float(len(others))

    shares = [0] * count
    shares[keep_index] = kept
    for i in others:
        shares[i] = max(MIN_SHARE, round_half_up(weights[i] / weight_sum * rest))
    return _absorb_residue(shares, TOTAL_PCT, others)


def allocate_pixel_widths(width_pcts: Sequence[object], total_width: float) -> List[int]:
    """Convert percentages into pixel widths summing to exactly ``total_width``."""

    if not width_pcts:
        return []
    target = round_half_up(total_width)
    widths = [max(MIN_SHARE, round_half_up(_sanitize(p) / TOTAL_PCT * target)) for p in width_pcts]
    return _absorb_residue(widths, target, range(len(widths)))


def _with_widths(columns: Sequence[ColumnT], shares: Sequence[int]) -> List[ColumnT]:
    return [col.model_copy(update={"width_pct": share}) for col, share in zip(columns, shares)]


def normalize_width_pct(columns: Sequence[ColumnT]) -> List[ColumnT]:
    """Return copies of ``columns`` whose ``widthPct`` values sum to exactly 100."""

    return _with_widths(columns, normalize_width_values([c.width_pct for c in columns]))


def normalize_width_pct_keep_index(columns: Sequence[ColumnT], keep_index: int) -> List[ColumnT]:
    """Rebalance around the column the user just edited."""

    shares = normalize_width_values_keep_index([c.width_pct for c in columns], keep_index)
    return _with_widths(columns, shares)


__all__ = [
    "allocate_pixel_widths",
    "normalize_width_pct",
    "normalize_width_pct_keep_index",
    "normalize_width_values",
    "normalize_width_values_keep_index",
    "round_half_up",
]
