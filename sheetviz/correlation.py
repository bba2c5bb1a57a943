"""
Pairwise Pearson correlation for SheetViz.

Each unordered pair of requested columns is correlated over the rows
where *both* cells parse as numbers (pairwise-complete cases), so
different pairs may use different row subsets.

Guards:

- zero denominator (one side has no variance) → r = 0
- values near the float limit are rescaled before summing
- r² == 1 → t = ±inf, always significant
- fewer than two complete rows → pair skipped, no entry emitted
"""

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from .constants import (
    SIGNIFICANCE_T_CRITICAL,
    STRENGTH_MODERATE,
    STRENGTH_STRONG,
    STRENGTH_THRESHOLDS,
    STRENGTH_VERY_WEAK,
    STRENGTH_WEAK,
)
from .data_model import CorrelationResult, Table
from .descriptive_stats import unit_scale
from .errors import InsufficientData
from .table_parser import parse_number

log = logging.getLogger(__name__)

_TEMPLATES = {
    STRENGTH_STRONG: (
        "There is a strong {adverb} correlated relationship between {a} and "
        "{b}. As one variable increases, the other tends to {trend} "
        "significantly."
    ),
    STRENGTH_MODERATE: (
        "There is a moderate {adverb} correlated relationship between {a} "
        "and {b}. The variables show a noticeable pattern of moving together."
    ),
    STRENGTH_WEAK: (
        "There is a weak {adverb} correlated relationship between {a} and "
        "{b}. The variables show some tendency to move together but the "
        "relationship is not very strong."
    ),
    STRENGTH_VERY_WEAK: (
        "There is very little to no linear relationship between {a} and "
        "{b}. The variables appear to be largely independent of each other."
    ),
}


def paired_values(table: Table, col_a: str, col_b: str) -> Tuple[List[float], List[float]]:
    """Aligned numeric vectors for two columns, pairwise-complete.

    A row is dropped from both vectors when either cell fails to parse.
    """
    xs: List[float] = []
    ys: List[float] = []
    for a, b in zip(table.column(col_a), table.column(col_b)):
        x, y = parse_number(a), parse_number(b)
        if x is None or y is None:
            continue
        xs.append(x)
        ys.append(y)
    return xs, ys


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson ``r`` by the raw-sums formula, clamped to ``[-1, 1]``.

    Each vector is rescaled by a power of two first (``r`` does not
    change under scaling), so no product or sum overflows for finite
    input.  Exact summation keeps ``pearson(x, y) == pearson(y, x)``
    bit-for-bit.
    """
    n = len(xs)
    if n != len(ys):
        raise ValueError(f"pearson: length mismatch {n} vs {len(ys)}")
    x, _ = unit_scale(np.asarray(xs, dtype=float))
    y, _ = unit_scale(np.asarray(ys, dtype=float))
    sum_x = math.fsum(x)
    sum_y = math.fsum(y)
    sum_xy = math.fsum(x * y)
    sum_x2 = math.fsum(x * x)
    sum_y2 = math.fsum(y * y)

    numerator = n * sum_xy - sum_x * sum_y
    spread_x = n * sum_x2 - sum_x * sum_x
    spread_y = n * sum_y2 - sum_y * sum_y
    # Guard: no linear variance on one side (negative only through rounding)
    if spread_x <= 0 or spread_y <= 0:
        return 0.0
    denominator = math.sqrt(spread_x * spread_y)
    # Guard: spreads too small to multiply without underflow
    if denominator == 0:
        return 0.0
    r = numerator / denominator
    if not math.isfinite(r):
        return 0.0
    return max(-1.0, min(1.0, r))


def classify_strength(r: float) -> str:
    magnitude = abs(r)
    for bound, label in STRENGTH_THRESHOLDS:
        if magnitude >= bound:
            return label
    return STRENGTH_VERY_WEAK


def t_statistic(r: float, n: int) -> float:
    """``r * sqrt((n - 2) / (1 - r²))``; ±inf for a perfect correlation."""
    if n < 2:
        raise ValueError(f"t_statistic requires n >= 2, got {n}")
    denom = 1.0 - r * r
    # Guard: perfect correlation
    if denom <= 0:
        return math.copysign(math.inf, r)
    return r * math.sqrt((n - 2) / denom)


def interpret(r: float, strength: str, col_a: str, col_b: str) -> str:
    """Plain-language sentence for a ``(sign, strength)`` combination."""
    positive = r >= 0
    return _TEMPLATES[strength].format(
        adverb="positively" if positive else "negatively",
        trend="increase" if positive else "decrease",
        a=col_a,
        b=col_b,
    )


def correlate_pair(table: Table, col_a: str, col_b: str) -> CorrelationResult:
    """Correlate two columns.

    Raises
    ------
    KeyError
        If either column is not in *table*.
    InsufficientData
        If fewer than two rows have both values.
    """
    xs, ys = paired_values(table, col_a, col_b)
    n = len(xs)
    if n < 2:
        raise InsufficientData(f"{col_a} / {col_b}", needed=2, found=n)

    r = pearson(xs, ys)
    strength = classify_strength(r)
    t = t_statistic(r, n)
    return CorrelationResult(
        column_a=col_a,
        column_b=col_b,
        coefficient=r,
        strength=strength,
        significant=abs(t) > SIGNIFICANCE_T_CRITICAL,
        sample_size=n,
        t_statistic=t,
        direction="positive" if r >= 0 else "negative",
        interpretation=interpret(r, strength, col_a, col_b),
    )


def correlate_all(table: Table, columns: Sequence[str]) -> List[CorrelationResult]:
    """One result per unordered pair ``(i < j)`` of *columns*.

    Pairs without two complete rows are skipped silently (logged at
    DEBUG); the rest of the batch is unaffected.
    """
    for col in columns:
        if col not in table.columns:
            raise KeyError(f"Unknown column: {col!r}")

    results: List[CorrelationResult] = []
    for i in range(len(columns)):
        for j in range(i + 1, len(columns)):
            try:
                results.append(correlate_pair(table, columns[i], columns[j]))
            except InsufficientData as exc:
                log.debug("Skipping pair in correlate_all: %s", exc)
    return results
