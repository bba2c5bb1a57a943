"""
Analysis orchestration for SheetViz.

Runs the analysis path end to end: normalise the upload into a
``Table``, assess data quality, pick the columns to analyse, then run
the descriptive-statistics and correlation engines.  The result
serialises to the presentation contract::

    {
      "summary":      {column: DescriptiveStats},
      "correlations": [CorrelationResult, ...],
      "dataQuality":  {"perColumn": [...], "recommendations": [...]},
      "skippedColumns": [...],
      "notice": str or null
    }
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .constants import DEFAULT_MAX_SELECTED_COLUMNS, FULL_ANALYSIS_ROW_CAP
from .correlation import correlate_all
from .data_model import CorrelationResult, DescriptiveStats, QualityReport, Table
from .data_quality import assess, numeric_columns
from .descriptive_stats import describe
from .table_parser import normalize_table

log = logging.getLogger(__name__)

EMPTY_RESULT_NOTICE = "No numeric data available for the selected columns."


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analysis request produced.

    Parameters
    ----------
    table : Table
        The normalised (and capped) input.
    columns : list of str
        Columns the engines were asked to analyse.
    summary : dict
        ``{column: DescriptiveStats}`` for the columns that succeeded.
    correlations : list of CorrelationResult
    quality : QualityReport
    skipped_columns : list of str
        Requested columns omitted from ``summary`` (no valid numbers).
    notice : str or None
        Set only when no requested column could be described.
    """
    table: Table
    columns: List[str]
    summary: Dict[str, DescriptiveStats]
    correlations: List[CorrelationResult]
    quality: QualityReport
    skipped_columns: List[str] = field(default_factory=list)
    notice: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            'summary': {k: v.to_dict() for k, v in self.summary.items()},
            'correlations': [c.to_dict() for c in self.correlations],
            'dataQuality': self.quality.to_dict(),
            'skippedColumns': list(self.skipped_columns),
            'notice': self.notice,
        }


def default_columns(report: QualityReport,
                    limit: int = DEFAULT_MAX_SELECTED_COLUMNS) -> List[str]:
    """First *limit* numeric columns in declaration order."""
    return numeric_columns(report)[:limit]


def run_analysis(
    source,
    columns: Optional[Sequence[str]] = None,
    row_cap: int = FULL_ANALYSIS_ROW_CAP,
) -> AnalysisResult:
    """Analyse an upload description or an existing ``Table``.

    Parameters
    ----------
    source : dict or Table
        Either upload shape accepted by ``normalize_table``.
    columns : sequence of str, optional
        Columns to describe and correlate.  Defaults to the first five
        columns inferred numeric.
    row_cap : int
        At most this many rows are analysed.

    Raises
    ------
    DuplicateColumn
        If the upload declares a column twice.
    KeyError
        If *columns* names a column the table does not have.
    """
    table = normalize_table(source, row_cap=row_cap)
    quality = assess(table)
    selected = list(columns) if columns is not None else default_columns(quality)

    summary = describe(table, selected)
    correlations = correlate_all(table, selected)
    skipped = [c for c in selected if c not in summary]
    notice = EMPTY_RESULT_NOTICE if not summary else None

    log.info(
        "Analysis complete: %d rows, %d/%d columns described, %d correlations",
        table.n_rows, len(summary), len(selected), len(correlations),
    )
    return AnalysisResult(
        table=table,
        columns=selected,
        summary=summary,
        correlations=correlations,
        quality=quality,
        skipped_columns=skipped,
        notice=notice,
    )


def export_analysis_json(result: AnalysisResult, filepath: str) -> str:
    """Write ``result.to_dict()`` as indented JSON and return the path."""
    with open(filepath, 'w', encoding='utf-8') as fh:
        json.dump(result.to_dict(), fh, indent=2, allow_nan=False)
        fh.write('\n')
    log.info("Wrote analysis report to %s", filepath)
    return filepath
