"""Panel balancing: excluded jurisdictions and incomplete units."""

from __future__ import annotations

import logging

import pandas as pd

from .._types import PanelConfig
from ._base import BasePanelStep

logger = logging.getLogger(__name__)


class PanelBalancer(BasePanelStep):
    """Make the panel rectangular.

    Drops rows from excluded states (and rows with no state name), counts
    ``T``, the number of distinct observation periods left, and keeps only
    units with exactly ``T`` records, one per distinct period.

    Parameters
    ----------
    df : pd.DataFrame
        Loaded panel with ``unit_col``, ``state_col`` and ``period_key_col``.
    config : PanelConfig, optional
        Column name mapping; ``excluded_states`` lists the dropped states.

    Example
    -------
    >>> balanced = PanelBalancer(df_raw).build()
    """

    def __init__(self, df: pd.DataFrame, config: PanelConfig | None = None):
        super().__init__(df, config)
        self.n_periods: int | None = None

    def _required_columns(self) -> list[str]:
        c = self.config
        return [c.unit_col, c.state_col, c.period_key_col]

    def build(self) -> pd.DataFrame:
        """Balance the panel.

        Returns
        -------
        pd.DataFrame
            Panel where every unit has exactly ``self.n_periods`` records.

        Raises
        ------
        EmptyPanelAfterFilterError
            If no unit has a complete set of periods.
        """
        c = self.config
        df = self._df

        state = df[c.state_col]
        excluded = state.isna() | state.astype(str).str.strip().isin(c.excluded_states)
        if excluded.any():
            logger.info(
                "Dropping %s rows from excluded states %s",
                f"{int(excluded.sum()):,}",
                sorted(state[excluded].dropna().astype(str).unique().tolist()),
            )
        df = df[~excluded]

        self.n_periods = int(df[c.period_key_col].nunique())
        per_unit = df.groupby(c.unit_col)[c.period_key_col].agg(["size", "nunique"])
        duplicated = per_unit["size"] != per_unit["nunique"]
        if duplicated.any():
            logger.warning(
                "%s units have repeated or missing periods and are dropped",
                f"{int(duplicated.sum()):,}",
            )
        complete = per_unit[
            (per_unit["size"] == self.n_periods) & (per_unit["nunique"] == self.n_periods)
        ].index
        logger.info("Balancing on %s distinct periods", f"{self.n_periods:,}")

        out = self._keep_units(df, complete)
        self._panel = out
        return out
