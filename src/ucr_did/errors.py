"""Typed exceptions raised by the ucr-did pipeline.

Every error aborts the current category before the estimator runs or any
output file is written. All of them derive from :class:`UcrDidError`, and
each one also derives from the closest built-in exception so callers that
catch ``FileNotFoundError`` or ``ValueError`` keep working.
"""

from __future__ import annotations


class UcrDidError(Exception):
    """Base class for pipeline errors."""


class MissingFileError(UcrDidError, FileNotFoundError):
    """An input file does not exist."""

    def __init__(self, path, what: str = "input file"):
        self.path = str(path)
        self.what = what
        super().__init__(f"Missing {what}: {self.path}")


class SchemaMismatchError(UcrDidError, ValueError):
    """One or more expected columns are absent."""

    def __init__(self, missing, available=None, where: str = "input"):
        self.missing = list(missing)
        self.available = sorted(available) if available is not None else []
        self.where = where
        msg = f"Missing required columns in {where}: {self.missing}."
        if self.available:
            msg += f" Available: {self.available}"
        super().__init__(msg)


class EmptyPanelAfterFilterError(UcrDidError, ValueError):
    """A cleaning stage removed every reporting unit."""

    def __init__(self, stage: str, n_units_before: int):
        self.stage = stage
        self.n_units_before = n_units_before
        super().__init__(
            f"{stage} removed all {n_units_before:,} units; nothing left to estimate"
        )


class JoinMissError(UcrDidError, ValueError):
    """A non-null date key has no entry in the period-index table."""

    def __init__(self, column: str, keys):
        self.column = column
        self.keys = sorted({str(k) for k in keys})
        shown = self.keys[:10]
        more = f" (+{len(self.keys) - 10} more)" if len(self.keys) > 10 else ""
        super().__init__(
            f"{len(self.keys)} value(s) of {column!r} not found in period index: "
            f"{shown}{more}"
        )


class EstimatorError(UcrDidError, RuntimeError):
    """The group-time ATT estimator rejected its input or failed."""


class DateParseError(UcrDidError, ValueError):
    """A non-missing date value could not be parsed."""

    def __init__(self, column: str, values, where: str = "input"):
        self.column = column
        self.values = sorted({str(v) for v in values})
        self.where = where
        shown = self.values[:10]
        more = f" (+{len(self.values) - 10} more)" if len(self.values) > 10 else ""
        super().__init__(
            f"{len(self.values)} unparseable value(s) of {column!r} in {where}: {shown}{more}"
        )
