"""
Descriptive statistics for SheetViz.

Per-column summary statistics over the numeric cells of a ``Table``.
Cells are coerced with ``parse_number``; blanks and unparsable text
are discarded before any statistic is computed.

Numeric guards (no NaN or inf ever reaches the caller):

- one value          → variance = standard deviation = 0
- all values equal   → variance = 0
- standard dev. == 0 → skewness = kurtosis = 0
- variance or range beyond the float range → ``OverflowError``; the
  batch ``describe`` leaves that column out

Moments are computed on values rescaled by a power of two (exact in
binary floating point), so sums of squares cannot overflow for any
finite input.
"""

import logging
import math
from collections import Counter
from typing import Dict, Iterable, Sequence, Tuple

import numpy as np

from .data_model import DescriptiveStats, Table
from .data_quality import floor_quartiles
from .errors import InsufficientData
from .table_parser import parse_number

log = logging.getLogger(__name__)


def first_mode(values: Sequence[float]) -> float:
    """Most frequent value; ties go to the value seen first in *values*.

    Examples
    --------
    >>> first_mode([3.0, 1.0, 1.0, 3.0, 2.0])
    3.0
    """
    if not values:
        raise ValueError("first_mode requires at least one value")
    counts = Counter(values)
    best, best_count = values[0], counts[values[0]]
    for v in values:
        if counts[v] > best_count:
            best, best_count = v, counts[v]
    return best


def unit_scale(arr: np.ndarray) -> Tuple[np.ndarray, int]:
    """Rescale *arr* by a power of two so every magnitude is below 1.

    Returns ``(scaled, exponent)`` with ``arr == np.ldexp(scaled, exponent)``.
    An all-zero or empty array is returned unchanged with exponent 0.
    """
    peak = float(np.max(np.abs(arr))) if arr.size else 0.0
    if peak == 0.0:
        return arr, 0
    _, exponent = math.frexp(peak)
    return np.ldexp(arr, -exponent), exponent


def sample_variance(arr: np.ndarray, mean: float) -> float:
    """``Σ(x - mean)² / (n - 1)``; 0 for a single or constant sample."""
    n = arr.size
    # Guard: n - 1 == 0, and constant data where rounding could leave residue
    if n < 2 or arr.min() == arr.max():
        return 0.0
    return float(np.sum((arr - mean) ** 2) / (n - 1))


def shape_moments(arr: np.ndarray, mean: float, std: float):
    """Return ``(skewness, excess kurtosis)``, both 0 when ``std == 0``."""
    if std == 0:
        return 0.0, 0.0
    z = (arr - mean) / std
    skewness = float(np.mean(z ** 3))
    kurtosis = float(np.mean(z ** 4)) - 3.0
    return skewness, kurtosis


def describe_values(values: Iterable[float], subject: str = "values") -> DescriptiveStats:
    """Summary statistics of already-numeric *values*.

    Parameters
    ----------
    values : iterable of float
        Finite numbers in row order (order matters for mode ties).
    subject : str
        Name used in the error message.

    Raises
    ------
    InsufficientData
        If *values* is empty.
    OverflowError
        If the variance or the range is too large for a float.
    """
    ordered = [float(v) for v in values]
    n = len(ordered)
    if n == 0:
        raise InsufficientData(subject, needed=1, found=0)

    arr = np.asarray(ordered, dtype=float)
    scaled, exponent = unit_scale(arr)
    s = np.sort(arr)
    mean_scaled = math.fsum(scaled) / n
    if n % 2 == 0:
        # Guard: halve before adding, two values near the float limit overflow
        median = s[n // 2 - 1] / 2.0 + s[n // 2] / 2.0
    else:
        median = s[n // 2]
    var_scaled = sample_variance(scaled, mean_scaled)
    std_scaled = math.sqrt(var_scaled)
    skewness, kurtosis = shape_moments(scaled, mean_scaled, std_scaled)
    q1, q3 = floor_quartiles(s)
    lo, hi = float(s[0]), float(s[-1])

    # Guard: spread that no float can hold
    try:
        variance = math.ldexp(var_scaled, 2 * exponent)
    except OverflowError:
        raise OverflowError(f"Variance of {subject} exceeds the float range") from None
    if not math.isfinite(hi - lo):
        raise OverflowError(f"Range of {subject} exceeds the float range")

    return DescriptiveStats(
        count=n,
        mean=math.ldexp(mean_scaled, exponent),
        median=float(median),
        mode=first_mode(ordered),
        min=lo,
        max=hi,
        range=hi - lo,
        variance=variance,
        standard_deviation=math.ldexp(std_scaled, exponent),
        skewness=skewness,
        kurtosis=kurtosis,
        q1=float(q1),
        q3=float(q3),
    )


def column_values(table: Table, column: str):
    """Finite numbers of *column* in row order (``KeyError`` if unknown)."""
    parsed = (parse_number(c) for c in table.column(column))
    return [v for v in parsed if v is not None]


def describe(table: Table, columns: Sequence[str]) -> Dict[str, DescriptiveStats]:
    """Describe each requested column.

    A column with no valid numbers, or whose spread overflows a float,
    is left out of the result; the rest of the batch is still computed.
    Unknown column names raise ``KeyError``.

    Returns
    -------
    dict
        ``{column: DescriptiveStats}`` in requested order.
    """
    result: Dict[str, DescriptiveStats] = {}
    for col in columns:
        try:
            result[col] = describe_values(column_values(table, col), subject=col)
        except (InsufficientData, OverflowError) as exc:
            log.debug("Skipping column in describe: %s", exc)
    return result


def interpret_skewness(value: float) -> str:
    if abs(value) < 0.5:
        return "Approximately symmetric"
    if value > 0:
        return "Right-skewed (tail extends right)"
    return "Left-skewed (tail extends left)"


def interpret_kurtosis(value: float) -> str:
    if abs(value) < 1:
        return "Normal tail behavior"
    if value > 0:
        return "Heavy-tailed distribution"
    return "Light-tailed distribution"
