"""Replace negative crime counts with the unit's own mean."""

from __future__ import annotations

import logging

import pandas as pd

from .._types import PanelConfig
from ._base import BasePanelStep

logger = logging.getLogger(__name__)


class NegativeValueCorrector(BasePanelStep):
    """Correct negative values in one count column, unit by unit.

    Each negative cell is replaced by the mean of the same unit's
    non-negative, non-missing values in that column. The means are computed
    once from the uncorrected series, so a replaced cell never feeds into
    another replacement. Units with no valid value are filled with 0.

    Parameters
    ----------
    df : pd.DataFrame
        Panel data.
    column : str
        Count column to correct.
    config : PanelConfig, optional
        Column name mapping.

    Example
    -------
    >>> corrected = NegativeValueCorrector(df, "murder").build()
    """

    def __init__(
        self,
        df: pd.DataFrame,
        column: str,
        config: PanelConfig | None = None,
    ):
        self.column = column
        self.n_corrected = 0
        super().__init__(df, config)

    def _required_columns(self) -> list[str]:
        return [self.config.unit_col, self.column]

    def unit_means(self) -> pd.Series:
        """Mean of each unit's non-negative values, indexed by unit."""
        c = self.config
        values = self._df[self.column]
        valid = values.where(values >= 0)
        return valid.groupby(self._df[c.unit_col]).mean()

    def build(self) -> pd.DataFrame:
        """Return a copy with negative values in ``column`` replaced.

        All other columns are unchanged.
        """
        c = self.config
        df = self._df.copy()
        negative = df[self.column] < 0
        self.n_corrected = int(negative.sum())

        if self.n_corrected:
            means = df[c.unit_col].map(self.unit_means())
            empty_units = df.loc[negative & means.isna(), c.unit_col].unique()
            if len(empty_units) > 0:
                logger.warning(
                    "%s units have no non-negative %s values; filling with 0",
                    f"{len(empty_units):,}",
                    self.column,
                )
            df[self.column] = df[self.column].astype(float)
            df.loc[negative, self.column] = means[negative].fillna(0.0)
            logger.warning(
                "Corrected %s negative %s values across %s units",
                f"{self.n_corrected:,}",
                self.column,
                f"{df.loc[negative, c.unit_col].nunique():,}",
            )

        self._panel = df
        return df
