"""
Table parser for SheetViz.

Normalises upload preview data into an immutable ``Table``.  Accepts
the two upload shapes as plain dicts:

- ``{"headers": [...], "rows": [[...], ...]}`` (array rows)
- ``{"rows": [{...}, ...], "columns": [...]}`` (record rows; ``columns``
  optional, defaults to the union of keys in first-seen order)

and delimited text exports on disk.  Handles:

- A caller-chosen row cap (rows beyond it are dropped with a warning)
- Ragged array rows (padded with ``None`` or truncated, with a warning)
- Blank cells (``None``, ``""`` and whitespace-only strings map to ``None``)
- Auto-detected delimiters (tab → semicolon → comma) and UTF-8 BOM markers
- European locale decimal-comma numbers in ``parse_number``
"""

import csv
import logging
import math
import os
import warnings
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Mapping, Optional, Sequence

from .constants import FULL_ANALYSIS_ROW_CAP
from .data_model import Cell, ChartData, Table

log = logging.getLogger(__name__)

# Formats tried by parse_date after ISO-8601, in order
DATE_FORMATS = (
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M",
)

_MAX_WARNED_EXAMPLES = 10


# ── Locale-safe number parsing ───────────────────────────────────────────

def _strip_grouping(text: str, sep: str) -> str:
    """Drop thousand separators *sep*; later groups must be 3 digits."""
    head, *groups = text.split(sep)
    if not all(len(g) == 3 and g.isdigit() for g in groups):
        raise ValueError(f"malformed digit grouping: {text!r}")
    return head + ''.join(groups)


def _locale_float(text: str) -> float:
    """Parse a numeric string that may use comma as decimal separator.

    Handles:
    - Standard period decimals: ``"3.14"``
    - European comma decimals: ``"3,14"``
    - Thousand separators in either convention: ``"1,234.5"``,
      ``"1.234,5"``, ``"1,234,567"``

    Raises ``ValueError`` for non-numeric or non-finite strings, for
    Python-only literals such as ``"1_000"`` and for separators that do
    not form 3-digit groups (``"1,2,3"``).
    """
    s = text.strip()
    # space, no-break space and thin space as thousand separators
    for sep in (' ', '\u00a0', '\u2009'):
        s = s.replace(sep, '')
    if not s:
        raise ValueError("empty string")
    if '_' in s:
        raise ValueError(f"underscore in number: {text.strip()!r}")
    # If both '.' and ',' are present, the last one is the decimal mark
    if ',' in s and '.' in s:
        if s.rfind(',') > s.rfind('.'):
            whole, frac = s.rsplit(',', 1)
            s = _strip_grouping(whole, '.') + '.' + frac
        else:
            whole, frac = s.rsplit('.', 1)
            s = _strip_grouping(whole, ',') + '.' + frac
    elif s.count(',') == 1:
        s = s.replace(',', '.')
    elif ',' in s:
        # "1,234,567": thousand separators only
        s = _strip_grouping(s, ',')
    result = float(s)
    if not math.isfinite(result):
        raise ValueError(f"non-finite value: {text.strip()!r}")
    return result


def parse_number(cell: Cell) -> Optional[float]:
    """Coerce a cell to a finite float, or ``None`` if it is not one.

    Examples
    --------
    >>> parse_number(" 42 ")
    42.0
    >>> parse_number("1.234,5")
    1234.5
    >>> parse_number("abc") is None
    True
    """
    if cell is None or isinstance(cell, bool):
        return None
    if isinstance(cell, (int, float)):
        value = float(cell)
        return value if math.isfinite(value) else None
    if not isinstance(cell, str):
        return None
    try:
        return _locale_float(cell)
    except ValueError:
        return None


def round_half_up(value: float, ndigits: int = 2) -> float:
    """Round half away from zero to *ndigits* decimals (no banker's rounding)."""
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def parse_date(cell: Cell) -> Optional[datetime]:
    """Parse a text cell as a calendar date, or return ``None``.

    Numbers are never dates here; numeric detection runs first.
    """
    if not isinstance(cell, str):
        return None
    s = cell.strip()
    if not s:
        return None
    iso = s[:-1] + '+00:00' if s.endswith('Z') else s
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


# ── Cell / row normalisation ─────────────────────────────────────────────

def normalize_cell(value) -> Cell:
    """Map one raw upload value onto ``float | int | str | None``."""
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, int):
        return value
    text = value if isinstance(value, str) else str(value)
    if not text.strip():
        return None
    return text


def _header_name(raw, idx: int) -> str:
    name = "" if raw is None else str(raw).strip()
    return name or f"Column {idx + 1}"


def _check_row_cap(row_cap: int) -> int:
    if isinstance(row_cap, bool) or not isinstance(row_cap, int) or row_cap < 1:
        raise ValueError(f"row_cap must be a positive integer, got {row_cap!r}")
    return row_cap


def _apply_cap(rows: Sequence, row_cap: int) -> Sequence:
    if len(rows) > row_cap:
        warnings.warn(
            f"Input has {len(rows)} rows; only the first {row_cap} "
            f"are used (row cap).",
            stacklevel=3,
        )
        return rows[:row_cap]
    return rows


def table_from_rows(
    headers: Sequence,
    rows: Iterable[Sequence],
    row_cap: int = FULL_ANALYSIS_ROW_CAP,
) -> Table:
    """Build a ``Table`` from a header row and array data rows.

    Parameters
    ----------
    headers : sequence
        Column names, in order.  Blank names become ``"Column <n>"``.
    rows : iterable of sequence
        Data rows; cell ``i`` belongs to ``headers[i]``.
    row_cap : int
        Maximum number of data rows to keep.

    Raises
    ------
    DuplicateColumn
        If two headers normalise to the same name.
    """
    row_cap = _check_row_cap(row_cap)
    columns = [_header_name(h, i) for i, h in enumerate(headers)]
    data_rows = _apply_cap(list(rows), row_cap)
    n_cols = len(columns)

    ragged: List[str] = []
    built = []
    for idx, raw in enumerate(data_rows, start=1):
        cells = list(raw) if raw is not None else []
        if len(cells) != n_cols:
            ragged.append(f"row {idx} has {len(cells)} cells")
            cells = (cells + [None] * n_cols)[:n_cols]
        built.append({
            name: normalize_cell(cell) for name, cell in zip(columns, cells)
        })

    if ragged:
        detail = "; ".join(ragged[:_MAX_WARNED_EXAMPLES])
        if len(ragged) > _MAX_WARNED_EXAMPLES:
            detail += f" ... and {len(ragged) - _MAX_WARNED_EXAMPLES} more"
        warnings.warn(
            f"Expected {n_cols} cells per row: {detail}. Short rows were "
            f"padded with blanks, long rows truncated.",
            stacklevel=2,
        )

    table = Table(columns=tuple(columns), rows=tuple(built))
    log.debug("Built table: %d columns x %d rows", len(columns), table.n_rows)
    return table


def table_from_records(
    records: Iterable[Mapping],
    columns: Optional[Sequence[str]] = None,
    row_cap: int = FULL_ANALYSIS_ROW_CAP,
) -> Table:
    """Build a ``Table`` from row objects.

    When *columns* is omitted the column list is the union of record
    keys in first-seen order.  Keys outside an explicit *columns* list
    are ignored; absent keys become ``None``.
    """
    row_cap = _check_row_cap(row_cap)
    data_rows = _apply_cap(list(records), row_cap)

    if columns is None:
        names: List[str] = []
        seen = set()
        for rec in data_rows:
            for key in rec.keys():
                if key not in seen:
                    seen.add(key)
                    names.append(key)
        columns = names
    columns = [str(c) for c in columns]

    built = []
    for rec in data_rows:
        lookup = {str(k): v for k, v in rec.items()}
        built.append({
            name: normalize_cell(lookup.get(name)) for name in columns
        })

    table = Table(columns=tuple(columns), rows=tuple(built))
    log.debug("Built table: %d columns x %d rows", len(columns), table.n_rows)
    return table


def normalize_table(source, row_cap: int = FULL_ANALYSIS_ROW_CAP) -> Table:
    """Normalise an upload description (either shape) into a ``Table``.

    A ``Table`` passed in is re-capped and returned.
    """
    if isinstance(source, Table):
        row_cap = _check_row_cap(row_cap)
        if source.n_rows <= row_cap:
            return source
        return Table(
            columns=source.columns,
            rows=tuple(_apply_cap(source.rows, row_cap)),
        )
    if not isinstance(source, Mapping):
        raise ValueError(
            f"Table source must be a mapping with 'rows', got "
            f"{type(source).__name__}."
        )
    if 'rows' not in source:
        raise ValueError("Table source is missing the 'rows' key.")
    if source.get('headers') is not None:
        return table_from_rows(source['headers'], source['rows'], row_cap)
    return table_from_records(source['rows'], source.get('columns'), row_cap)


# ── Delimited text files ─────────────────────────────────────────────────

def _detect_delimiter(sample_line: str) -> str:
    """Detect the field delimiter from a sample line.

    Priority: tab → semicolon → comma.  European exports use
    semicolons as field delimiters with comma decimals.
    """
    if '\t' in sample_line:
        return '\t'
    if ';' in sample_line:
        return ';'
    return ','


def load_csv_table(filepath: str, row_cap: int = FULL_ANALYSIS_ROW_CAP) -> Table:
    """Load a delimited text export into a ``Table``.

    The first non-blank line is the header.  The delimiter is detected
    from the header and applied to every line; quoted fields may contain
    the delimiter.

    Raises
    ------
    FileNotFoundError
        If *filepath* does not exist.
    ValueError
        If the file has no header row.
    """
    if not os.path.isfile(filepath):
        raise FileNotFoundError(f"Data file not found: {filepath}")

    file_size = os.path.getsize(filepath)
    if file_size > 100 * 1024 * 1024:
        warnings.warn(
            f"File is very large ({file_size / (1024 * 1024):.0f} MB). "
            f"Only the first {row_cap} rows will be analysed.",
            stacklevel=2,
        )

    with open(filepath, 'r', encoding='utf-8-sig', newline='') as fh:
        raw_lines = [ln.rstrip('\r\n') for ln in fh if ln.strip()]

    if not raw_lines:
        raise ValueError(
            f"File '{os.path.basename(filepath)}' has no header row."
        )

    delimiter = _detect_delimiter(raw_lines[0])
    parsed = [
        [cell.strip() for cell in tokens]
        for tokens in csv.reader(raw_lines, delimiter=delimiter)
    ]
    log.info(
        "Loaded '%s': %d data rows, delimiter %r",
        os.path.basename(filepath), len(parsed) - 1, delimiter,
    )
    return table_from_rows(parsed[0], parsed[1:], row_cap)


# ── Chart binding ────────────────────────────────────────────────────────

BLANK_LABEL = "(blank)"


def chart_data_from_table(table: Table, label_column: str,
                          value_column: str) -> ChartData:
    """Bind one label column and one value column to chart categories.

    Every row becomes one category, in row order.  Blank labels show as
    ``"(blank)"``; value cells that do not parse count as ``0.0``.

    Raises ``KeyError`` for an unknown column.
    """
    labels = []
    values = []
    unparsed = 0
    for label, cell in zip(table.column(label_column), table.column(value_column)):
        labels.append(BLANK_LABEL if label is None else str(label))
        value = parse_number(cell)
        if value is None:
            # Guard: unparsable or blank value → 0
            unparsed += 1
            value = 0.0
        values.append(value)
    if unparsed:
        log.debug("%d value cell(s) in %r charted as 0", unparsed, value_column)
    return ChartData(labels=labels, values=values,
                     label_column=label_column, value_column=value_column)
