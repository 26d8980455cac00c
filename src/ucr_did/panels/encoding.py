"""Integer time encoding for the group-time ATT estimator.

The estimator needs integer period, onset-cohort and unit labels. Periods
come from an external period-index table; units and states get dense ids.
"""

from __future__ import annotations

import logging

import pandas as pd

from .._types import Frequency, PanelConfig
from ..errors import JoinMissError, SchemaMismatchError
from ._base import BasePanelStep

logger = logging.getLogger(__name__)


def _dense_ids(values: pd.Series) -> pd.Series:
    """Map each distinct value to 1..N in sorted order."""
    ordered = sorted(values.dropna().unique())
    mapping = {v: i for i, v in enumerate(ordered, start=1)}
    return values.map(mapping).astype(int)


class IntegerTimeEncoder(BasePanelStep):
    """Encode observation and onset periods as integers.

    Parameters
    ----------
    df : pd.DataFrame
        Filtered panel with ``period_key_col`` and ``onset_key_col``.
    period_index : pd.DataFrame
        Lookup table from period key to integer ordinal, as returned by
        :func:`ucr_did.io.load_period_index`.
    frequency : str or Frequency
        Determines the placebo shift (12 periods monthly, 1 annual).
    placebo : bool
        Shift every onset one year later.
    key_col, index_col : str
        Column names in ``period_index``.
    config : PanelConfig, optional
        Column name mapping.

    Example
    -------
    >>> encoded = IntegerTimeEncoder(df, period_index, placebo=True).build()
    """

    def __init__(
        self,
        df: pd.DataFrame,
        period_index: pd.DataFrame,
        frequency: str | Frequency = "monthly",
        placebo: bool = False,
        key_col: str = "period_key",
        index_col: str = "time",
        config: PanelConfig | None = None,
    ):
        self.frequency = Frequency.from_name(frequency)
        self.placebo = placebo
        missing = [col for col in (key_col, index_col) if col not in period_index.columns]
        if missing:
            raise SchemaMismatchError(missing, period_index.columns, where="period index")
        self._lookup = pd.Series(
            period_index[index_col].astype(int).values,
            index=period_index[key_col].values,
        )
        super().__init__(df, config)

    def _required_columns(self) -> list[str]:
        c = self.config
        return [c.unit_col, c.state_col, c.period_key_col, c.onset_key_col]

    def build(self) -> pd.DataFrame:
        """Add integer period, onset, unit-id and state-group columns.

        Returns
        -------
        pd.DataFrame
            Panel with added columns ``time_col``, ``onset_time_col``
            (``never_treated_value`` for never-treated units), ``id_col``
            and ``state_group_col``, all integer and non-null.

        Raises
        ------
        JoinMissError
            If an observation period, or a non-missing onset period, is not
            in the period index.
        """
        c = self.config
        df = self._df.copy()

        time = df[c.period_key_col].map(self._lookup)
        unmatched = time.isna()
        if unmatched.any():
            raise JoinMissError(c.period_key_col, df.loc[unmatched, c.period_key_col])
        df[c.time_col] = time.astype(int)

        onset = df[c.onset_key_col].map(self._lookup)
        has_onset = df[c.onset_key_col].notna()
        unmatched = has_onset & onset.isna()
        if unmatched.any():
            raise JoinMissError(c.onset_key_col, df.loc[unmatched, c.onset_key_col])

        if self.placebo:
            onset = onset + self.frequency.placebo_shift
            logger.info("Placebo: onset shifted by %s periods", self.frequency.placebo_shift)

        df[c.onset_time_col] = onset.fillna(c.never_treated_value).astype(int)
        df[c.id_col] = _dense_ids(df[c.unit_col])
        df[c.state_group_col] = _dense_ids(df[c.state_col].astype(str))

        self._panel = df
        self._log_summary(df)
        return df

    def _log_summary(self, df: pd.DataFrame) -> None:
        c = self.config
        units = df.drop_duplicates(c.unit_col)
        never = units[c.onset_time_col] == c.never_treated_value
        logger.info(
            "Encoded: %s units (%s treated, %s never-treated), %s cohorts, %s states",
            f"{len(units):,}",
            f"{int((~never).sum()):,}",
            f"{int(never.sum()):,}",
            f"{units.loc[~never, c.onset_time_col].nunique():,}",
            f"{df[c.state_group_col].nunique():,}",
        )


def select_onset_cohorts(
    df: pd.DataFrame,
    years: list[int] | tuple[int, ...],
    config: PanelConfig | None = None,
) -> pd.DataFrame:
    """Keep never-treated units and units whose onset falls in ``years``.

    Used for year-grouped runs that estimate effects for a subset of
    switching cohorts against the same controls.

    Parameters
    ----------
    df : pd.DataFrame
        Panel with ``onset_key_col``.
    years : list[int]
        Calendar years of onset to keep.
    config : PanelConfig, optional
        Column name mapping.

    Returns
    -------
    pd.DataFrame
        Filtered copy. Never-treated rows are always kept.
    """
    c = config or PanelConfig()
    if c.onset_key_col not in df.columns:
        raise SchemaMismatchError([c.onset_key_col], df.columns, where="select_onset_cohorts")

    onset = df[c.onset_key_col]
    keep = onset.isna() | onset.dt.year.isin(list(years))

    out = df[keep].copy()
    logger.info(
        "Onset cohorts %s: %s -> %s units",
        list(years),
        f"{df[c.unit_col].nunique():,}",
        f"{out[c.unit_col].nunique():,}",
    )
    return out
