"""
Data model for SheetViz.

Immutable dataclasses for the normalised table and for every derived
result (quality profiles, descriptive statistics, correlations, chart
data).  A ``Table`` is built once per analysis or render request by
``table_parser`` and never mutated; engines receive it read-only and
return fresh result objects.

Missing cells are modelled as ``None`` and are always present as
explicit keys, so ``row[column]`` never raises for a declared column.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .errors import DuplicateColumn

Cell = Union[float, int, str, None]


def _finite_or_none(value: float) -> Optional[float]:
    """JSON-safe float: non-finite values become ``None``."""
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class Table:
    """Rectangular, column-ordered view over uploaded rows.

    Parameters
    ----------
    columns : tuple of str
        Unique column names in declaration order.
    rows : tuple of mapping
        One read-only mapping per row.  Every mapping has exactly the
        keys in ``columns``; blank cells hold ``None``.

    Raises
    ------
    DuplicateColumn
        If a column name appears twice.
    ValueError
        If a row does not carry exactly the declared columns.
    """
    columns: Tuple[str, ...]
    rows: Tuple[Mapping[str, Cell], ...] = ()

    def __post_init__(self):
        seen = set()
        for name in self.columns:
            if name in seen:
                raise DuplicateColumn(name)
            seen.add(name)
        frozen_rows = []
        for idx, row in enumerate(self.rows):
            if set(row.keys()) != seen:
                raise ValueError(
                    f"Row {idx} keys {sorted(row.keys())} do not match "
                    f"the declared columns {list(self.columns)}."
                )
            if not isinstance(row, MappingProxyType):
                row = MappingProxyType(dict(row))
            frozen_rows.append(row)
        # frozen dataclass: bypass __setattr__ for normalised containers
        object.__setattr__(self, 'columns', tuple(self.columns))
        object.__setattr__(self, 'rows', tuple(frozen_rows))

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> List[Cell]:
        """Return the cells of *name* in row order.

        Raises ``KeyError`` for an undeclared column.
        """
        if name not in self.columns:
            raise KeyError(f"Unknown column: {name!r}")
        return [row[name] for row in self.rows]


@dataclass(frozen=True)
class ColumnProfile:
    """Data-quality profile of one column.

    ``completeness``, ``uniqueness`` and ``outlier_percentage`` are
    percentages in ``[0, 100]`` rounded to two decimals.
    """
    name: str
    inferred_type: str
    completeness: float
    uniqueness: float
    outlier_count: int = 0
    outlier_percentage: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            'name': self.name,
            'inferredType': self.inferred_type,
            'completeness': self.completeness,
            'uniqueness': self.uniqueness,
            'outlierCount': self.outlier_count,
            'outlierPercentage': self.outlier_percentage,
        }


@dataclass(frozen=True)
class Recommendation:
    """One human-readable data-quality finding.

    Parameters
    ----------
    kind : str
        ``"warning"``, ``"info"`` or ``"alert"``.
    column : str
        Column the finding refers to.
    message : str
        What was found, e.g. ``Column "Sales" has 12.50% missing data``.
    action : str
        Suggested remedy.
    """
    kind: str
    column: str
    message: str
    action: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'type': self.kind,
            'column': self.column,
            'message': self.message,
            'action': self.action,
        }


@dataclass(frozen=True)
class QualityReport:
    per_column: List[ColumnProfile]
    recommendations: List[Recommendation]

    def profile(self, name: str) -> ColumnProfile:
        for p in self.per_column:
            if p.name == name:
                return p
        raise KeyError(f"No profile for column: {name!r}")

    def to_dict(self) -> Dict[str, object]:
        return {
            'perColumn': [p.to_dict() for p in self.per_column],
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class DescriptiveStats:
    """Summary statistics of one numeric column.

    ``variance`` is the sample variance (``n - 1`` denominator) and is
    0 for a single value.  ``skewness`` and ``kurtosis`` (excess) are 0
    when the standard deviation is 0.  ``q1``/``q3`` use the floor-index
    method on the sorted values.
    """
    count: int
    mean: float
    median: float
    mode: float
    min: float
    max: float
    range: float
    variance: float
    standard_deviation: float
    skewness: float
    kurtosis: float
    q1: float
    q3: float

    def to_dict(self) -> Dict[str, object]:
        return {
            'count': self.count,
            'mean': self.mean,
            'median': self.median,
            'mode': self.mode,
            'min': self.min,
            'max': self.max,
            'range': self.range,
            'variance': self.variance,
            'standardDeviation': self.standard_deviation,
            'skewness': self.skewness,
            'kurtosis': self.kurtosis,
            'q1': self.q1,
            'q3': self.q3,
        }


@dataclass(frozen=True)
class CorrelationResult:
    """Pearson correlation of one unordered column pair.

    Parameters
    ----------
    column_a, column_b : str
        The pair, in requested-column order.
    coefficient : float
        Pearson ``r`` in ``[-1, 1]``.
    strength : str
        ``strong``, ``moderate``, ``weak`` or ``very-weak``.
    significant : bool
        ``|t| > 2``.
    sample_size : int
        Pairwise-complete rows used.
    t_statistic : float
        ``r * sqrt((n-2)/(1-r²))``; ``inf`` (signed) when ``r² == 1``.
    direction : str
        ``"positive"`` or ``"negative"``.
    interpretation : str
        Templated plain-language description.
    """
    column_a: str
    column_b: str
    coefficient: float
    strength: str
    significant: bool
    sample_size: int = 0
    t_statistic: float = 0.0
    direction: str = "positive"
    interpretation: str = ""

    @property
    def pair(self) -> frozenset:
        """Order-independent identity of the pair."""
        return frozenset((self.column_a, self.column_b))

    def to_dict(self) -> Dict[str, object]:
        return {
            'columnA': self.column_a,
            'columnB': self.column_b,
            'coefficient': self.coefficient,
            'strength': self.strength,
            'significant': self.significant,
            'sampleSize': self.sample_size,
            'tStatistic': _finite_or_none(self.t_statistic),
            'direction': self.direction,
            'interpretation': self.interpretation,
        }


@dataclass(frozen=True)
class ChartData:
    """Category labels and values bound to one chart.

    ``labels`` and ``values`` are parallel and in input order.
    """
    labels: Tuple[str, ...]
    values: Tuple[float, ...]
    label_column: str = ""
    value_column: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'labels', tuple(str(x) for x in self.labels))
        object.__setattr__(self, 'values', tuple(float(v) for v in self.values))
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"ChartData has {len(self.labels)} labels but "
                f"{len(self.values)} values."
            )

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def total(self) -> float:
        return math.fsum(self.values)
