"""
Data-quality assessment for SheetViz.

Profiles every column of a ``Table`` (inferred type, completeness,
uniqueness, IQR outliers) and turns the profiles into an ordered list
of recommendations.

Recommendation order is fixed: all missing-data warnings first, then
low-uniqueness notes, then outlier alerts; within each group columns
appear in declaration order.
"""

import logging
import math
from typing import List, Sequence, Tuple

from .constants import (
    COMPLETENESS_WARN_BELOW,
    INFERRED_DATE,
    INFERRED_EMPTY,
    INFERRED_NUMERIC,
    INFERRED_TEXT,
    OUTLIER_ALERT_ABOVE,
    OUTLIER_IQR_FACTOR,
    OUTLIER_MIN_VALUES,
    TYPE_MATCH_RATIO,
    TYPE_SAMPLE_SIZE,
    UNIQUENESS_INFO_BELOW,
)
from .data_model import Cell, ColumnProfile, QualityReport, Recommendation, Table
from .table_parser import parse_date, parse_number, round_half_up

log = logging.getLogger(__name__)

ACTION_MISSING = "Consider data imputation or column removal"
ACTION_DUPLICATES = "Check for duplicate values or consider categorization"
ACTION_OUTLIERS = "Consider outlier treatment or investigation"


def floor_quartiles(sorted_values: Sequence[float]) -> Tuple[float, float]:
    """Return ``(q1, q3)`` by the floor-index method.

    ``q1 = s[floor(n * 0.25)]`` and ``q3 = s[floor(n * 0.75)]`` on the
    ascending values *s*.  No interpolation.
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("floor_quartiles requires at least one value")
    return (
        sorted_values[math.floor(n * 0.25)],
        sorted_values[math.floor(n * 0.75)],
    )


def infer_column_type(cells: Sequence[Cell]) -> str:
    """Classify a column as numeric, date, text or empty.

    Up to the first 100 non-null cells are sampled.  A column is
    numeric when at least 80% of the sample parses as finite numbers,
    otherwise date when at least 80% parses as dates.
    """
    sample = [c for c in cells if c is not None][:TYPE_SAMPLE_SIZE]
    if not sample:
        return INFERRED_EMPTY
    numeric = sum(1 for c in sample if parse_number(c) is not None)
    if numeric / len(sample) >= TYPE_MATCH_RATIO:
        return INFERRED_NUMERIC
    dates = sum(1 for c in sample if parse_date(c) is not None)
    if dates / len(sample) >= TYPE_MATCH_RATIO:
        return INFERRED_DATE
    return INFERRED_TEXT


def count_outliers(values: Sequence[float]) -> Tuple[int, float]:
    """Count values outside Tukey's fences ``[Q1 - 1.5 IQR, Q3 + 1.5 IQR]``.

    Returns
    -------
    count : int
    percentage : float
        ``count / len(values) * 100``, rounded to two decimals.
        ``(0, 0.0)`` when fewer than four values are given.
    """
    if len(values) < OUTLIER_MIN_VALUES:
        return 0, 0.0
    q1, q3 = floor_quartiles(sorted(values))
    iqr = q3 - q1
    lower = q1 - OUTLIER_IQR_FACTOR * iqr
    upper = q3 + OUTLIER_IQR_FACTOR * iqr
    count = sum(1 for v in values if v < lower or v > upper)
    return count, round_half_up(count / len(values) * 100)


def profile_column(name: str, cells: Sequence[Cell]) -> ColumnProfile:
    """Compute the quality profile of one column's cells."""
    total = len(cells)
    present = [c for c in cells if c is not None]

    # Guard: zero rows → completeness 0, zero present → uniqueness 0
    completeness = round_half_up(len(present) / total * 100) if total else 0.0
    uniqueness = (
        round_half_up(len(set(present)) / len(present) * 100) if present else 0.0
    )

    inferred = infer_column_type(present)
    outlier_count, outlier_pct = 0, 0.0
    if inferred == INFERRED_NUMERIC:
        numbers = [v for v in (parse_number(c) for c in present) if v is not None]
        outlier_count, outlier_pct = count_outliers(numbers)

    return ColumnProfile(
        name=name,
        inferred_type=inferred,
        completeness=completeness,
        uniqueness=uniqueness,
        outlier_count=outlier_count,
        outlier_percentage=outlier_pct,
    )


def build_recommendations(profiles: Sequence[ColumnProfile]) -> List[Recommendation]:
    """Turn column profiles into ordered findings."""
    recs: List[Recommendation] = []

    for p in profiles:
        if p.completeness < COMPLETENESS_WARN_BELOW:
            missing = round_half_up(100 - p.completeness)
            recs.append(Recommendation(
                kind='warning',
                column=p.name,
                message=f'Column "{p.name}" has {missing:.2f}% missing data',
                action=ACTION_MISSING,
            ))

    # Text is expected to repeat; an empty column reports uniqueness 0
    for p in profiles:
        if p.inferred_type == INFERRED_TEXT:
            continue
        if p.uniqueness < UNIQUENESS_INFO_BELOW:
            recs.append(Recommendation(
                kind='info',
                column=p.name,
                message=f'Column "{p.name}" has low uniqueness ({p.uniqueness:.2f}%)',
                action=ACTION_DUPLICATES,
            ))

    for p in profiles:
        if p.outlier_count > 0 and p.outlier_percentage > OUTLIER_ALERT_ABOVE:
            recs.append(Recommendation(
                kind='alert',
                column=p.name,
                message=(
                    f'Column "{p.name}" has {p.outlier_count} outliers '
                    f'({p.outlier_percentage:.2f}%)'
                ),
                action=ACTION_OUTLIERS,
            ))

    return recs


def assess(table: Table) -> QualityReport:
    """Profile every column of *table* and derive recommendations.

    Parameters
    ----------
    table : Table

    Returns
    -------
    QualityReport
        ``per_column`` in declaration order, ``recommendations`` in the
        fixed warning → info → alert order.
    """
    profiles = [profile_column(name, table.column(name)) for name in table.columns]
    recs = build_recommendations(profiles)
    log.debug(
        "Assessed %d columns over %d rows: %d recommendations",
        len(profiles), table.n_rows, len(recs),
    )
    return QualityReport(per_column=profiles, recommendations=recs)


def numeric_columns(report: QualityReport) -> List[str]:
    """Names of columns inferred numeric, in declaration order."""
    return [p.name for p in report.per_column if p.inferred_type == INFERRED_NUMERIC]
