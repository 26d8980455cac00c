"""Readers for the raw agency panel and the period-index table."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .._types import Frequency, PanelConfig
from ..errors import DateParseError, MissingFileError, SchemaMismatchError

logger = logging.getLogger(__name__)


def _read_table(path: str | Path, what: str) -> pd.DataFrame:
    """Read a .dta, .xlsx/.xls, .csv or .parquet file by suffix."""
    path = Path(path)
    if not path.exists():
        raise MissingFileError(path, what)

    suffix = path.suffix.lower()
    if suffix == ".dta":
        return pd.read_stata(path)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path)
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix == ".parquet":
        return pd.read_parquet(path)
    raise ValueError(f"Unsupported file type for {what}: {path.suffix!r}")


def to_period_key(values: pd.Series, frequency: Frequency) -> pd.Series:
    """Normalize dates (or date-like strings) to calendar period keys.

    Missing values stay missing (``NaT``).
    """
    if isinstance(values.dtype, pd.PeriodDtype):
        return values.dt.asfreq(frequency.period_code)
    dates = pd.to_datetime(values, errors="coerce")
    return dates.dt.to_period(frequency.period_code)


def _parse_period_keys(
    values: pd.Series, frequency: Frequency, column: str, where: str
) -> pd.Series:
    """Period keys for a date column; a present value that fails to parse raises."""
    keys = to_period_key(values, frequency)
    present = values.notna()
    if not (
        pd.api.types.is_datetime64_any_dtype(values) or isinstance(values.dtype, pd.PeriodDtype)
    ):
        present &= values.astype(str).str.strip().ne("")
    unparsed = present & keys.isna()
    if unparsed.any():
        raise DateParseError(column, values[unparsed], where=where)
    return keys


def load_panel(
    path: str | Path,
    config: PanelConfig | None = None,
    frequency: str | Frequency = "monthly",
) -> pd.DataFrame:
    """Load the raw panel and add period keys for both date columns.

    Parameters
    ----------
    path : str or Path
        Panel file (.dta, .xlsx, .csv or .parquet).
    config : PanelConfig, optional
        Column name mapping.
    frequency : str or Frequency
        Granularity of the period keys (month or year).

    Returns
    -------
    pd.DataFrame
        Input records with ``period_key_col`` and ``onset_key_col`` added.
        The unit id is coerced to string.

    Raises
    ------
    MissingFileError
        If ``path`` does not exist.
    SchemaMismatchError
        If the unit, state, date or onset column is absent.
    DateParseError
        If a non-missing date or onset value cannot be parsed. Missing
        onsets are kept as never-treated.
    """
    c = config or PanelConfig()
    freq = Frequency.from_name(frequency)

    df = _read_table(path, "panel file")
    required = [c.unit_col, c.state_col, c.date_col, c.onset_col]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaMismatchError(missing, df.columns, where=str(path))

    df[c.unit_col] = df[c.unit_col].astype(str)
    df[c.period_key_col] = _parse_period_keys(df[c.date_col], freq, c.date_col, str(path))
    df[c.onset_key_col] = _parse_period_keys(df[c.onset_col], freq, c.onset_col, str(path))

    n_missing = int(df[c.period_key_col].isna().sum())
    if n_missing:
        logger.warning("%s rows have no %s", f"{n_missing:,}", c.date_col)

    logger.info(
        "Loaded %s: %s rows, %s units, %s periods",
        Path(path).name,
        f"{len(df):,}",
        f"{df[c.unit_col].nunique():,}",
        f"{df[c.period_key_col].nunique():,}",
    )
    return df


def load_period_index(
    path: str | Path,
    key_col: str = "period_key",
    index_col: str = "time",
    frequency: str | Frequency = "monthly",
) -> pd.DataFrame:
    """Load the period-index lookup table.

    Returns
    -------
    pd.DataFrame
        Two columns: ``key_col`` (calendar Periods) and ``index_col``
        (integer ordinal).

    Raises
    ------
    MissingFileError
        If ``path`` does not exist.
    SchemaMismatchError
        If either column is absent.
    ValueError
        If a period key appears more than once.
    """
    freq = Frequency.from_name(frequency)
    df = _read_table(path, "period index")
    return prepare_period_index(df, key_col, index_col, freq, where=str(path))


def prepare_period_index(
    df: pd.DataFrame,
    key_col: str = "period_key",
    index_col: str = "time",
    frequency: str | Frequency = "monthly",
    where: str = "period index",
) -> pd.DataFrame:
    """Validate and normalize an in-memory period-index table."""
    freq = Frequency.from_name(frequency)
    missing = [col for col in (key_col, index_col) if col not in df.columns]
    if missing:
        raise SchemaMismatchError(missing, df.columns, where=where)

    out = df[[key_col, index_col]].copy()
    out[key_col] = to_period_key(out[key_col], freq)
    out = out.dropna(subset=[key_col, index_col])
    out[index_col] = out[index_col].astype(int)

    dupes = out.loc[out[key_col].duplicated(), key_col]
    if len(dupes) > 0:
        raise ValueError(
            f"Duplicate period keys in {where}: {sorted(str(k) for k in dupes.unique())}"
        )

    logger.info(
        "Period index: %s keys (%s .. %s)",
        f"{len(out):,}",
        out[key_col].min(),
        out[key_col].max(),
    )
    return out.reset_index(drop=True)
