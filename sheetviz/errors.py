"""
Exception taxonomy for SheetViz.

Structural failures (a malformed table, an unwritable export target)
propagate to the caller.  ``InsufficientData`` is raised by the
single-column and single-pair helpers only; the batch engines catch it
and leave that column or pair out of their result.
"""


class SheetVizError(Exception):
    """Base class for all SheetViz errors."""


class DuplicateColumn(SheetVizError, ValueError):
    """A table was declared with the same column name twice."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Duplicate column name: {column!r}")


class InsufficientData(SheetVizError, ValueError):
    """A column or column pair has too few valid values for a statistic."""

    def __init__(self, subject: str, needed: int, found: int):
        self.subject = subject
        self.needed = needed
        self.found = found
        super().__init__(
            f"{subject}: need at least {needed} valid value(s), found {found}"
        )


class RenderTargetUnavailable(SheetVizError, RuntimeError):
    """No drawing surface or destination was available for an export."""
