"""Drop units whose series swings from zero to an implausibly high count."""

from __future__ import annotations

import logging

import pandas as pd

from .._types import CrimeCategory, Frequency, PanelConfig
from ._base import BasePanelStep

logger = logging.getLogger(__name__)


class DiscrepancyFilter(BasePanelStep):
    """Remove units that report zero in one period and a large count in another.

    A unit is dropped when the minimum of ``rate_col`` over its periods is
    exactly 0 and the maximum of ``count_col`` exceeds the frequency's
    threshold (500 monthly, 5000 annual). The rate and the count are read
    from separate columns.

    Parameters
    ----------
    df : pd.DataFrame
        Balanced panel.
    count_col : str
        Absolute count column tested against the threshold.
    rate_col : str
        Rate column tested for zeros.
    frequency : str or Frequency
        ``"monthly"`` or ``"annual"``.
    config : PanelConfig, optional
        Column name mapping.
    """

    def __init__(
        self,
        df: pd.DataFrame,
        count_col: str,
        rate_col: str,
        frequency: str | Frequency = "monthly",
        config: PanelConfig | None = None,
    ):
        self.count_col = count_col
        self.rate_col = rate_col
        self.frequency = Frequency.from_name(frequency)
        super().__init__(df, config)

    @classmethod
    def for_category(
        cls,
        df: pd.DataFrame,
        category: CrimeCategory,
        frequency: str | Frequency = "monthly",
        config: PanelConfig | None = None,
    ) -> DiscrepancyFilter:
        return cls(df, category.count_col, category.rate_col, frequency, config)

    @property
    def threshold(self) -> int:
        return self.frequency.discrepancy_threshold

    def _required_columns(self) -> list[str]:
        return [self.config.unit_col, self.count_col, self.rate_col]

    def flag_units(self) -> pd.DataFrame:
        """Per-unit discrepancy statistics.

        Returns
        -------
        pd.DataFrame
            One row per unit with ``min_rate``, ``max_count`` and
            ``discrepant`` (bool).
        """
        c = self.config
        stats = self._df.groupby(c.unit_col).agg(
            min_rate=(self.rate_col, "min"),
            max_count=(self.count_col, "max"),
        )
        stats["discrepant"] = (stats["min_rate"] == 0) & (
            stats["max_count"] > self.threshold
        )
        return stats.reset_index()

    def build(self) -> pd.DataFrame:
        """Drop discrepant units.

        Raises
        ------
        EmptyPanelAfterFilterError
            If every unit is discrepant.
        """
        c = self.config
        stats = self.flag_units()
        keep = stats.loc[~stats["discrepant"], c.unit_col]
        logger.info(
            "Discrepancy check on %s/%s (threshold %s): %s units flagged",
            self.rate_col,
            self.count_col,
            f"{self.threshold:,}",
            f"{int(stats['discrepant'].sum()):,}",
        )
        out = self._keep_units(self._df, keep)
        self._panel = out
        return out
