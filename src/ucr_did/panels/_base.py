"""Base class for the panel cleaning steps."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import pandas as pd

from .._types import PanelConfig
from ..errors import EmptyPanelAfterFilterError, SchemaMismatchError

logger = logging.getLogger(__name__)


class BasePanelStep(ABC):
    """Abstract base for one stage of panel preparation.

    Each step copies its input on construction and returns a new DataFrame
    from ``build()``; the caller's frame is never modified. Shared logic for
    column validation, empty-panel checks and summary statistics lives here.

    Parameters
    ----------
    df : pd.DataFrame
        Panel records with at least the columns named by
        ``_required_columns()``.
    config : PanelConfig, optional
        Column name mapping. Uses defaults if not provided.
    """

    def __init__(self, df: pd.DataFrame, config: PanelConfig | None = None):
        self.config = config or PanelConfig()
        self._df = df.copy()
        self._validate_input()
        self._panel: pd.DataFrame | None = None

    def _required_columns(self) -> list[str]:
        return [self.config.unit_col]

    def _validate_input(self) -> None:
        """Check required columns exist."""
        required = self._required_columns()
        missing = [col for col in required if col not in self._df.columns]
        if missing:
            raise SchemaMismatchError(
                missing, self._df.columns, where=type(self).__name__
            )

        logger.debug(
            "%s initialized: %s observations, %s units",
            type(self).__name__,
            f"{len(self._df):,}",
            f"{self._df[self.config.unit_col].nunique():,}",
        )

    @abstractmethod
    def build(self) -> pd.DataFrame:
        """Run the step. Returns a new DataFrame."""
        ...

    @property
    def panel(self) -> pd.DataFrame:
        """Lazily build and cache the result."""
        if self._panel is None:
            self._panel = self.build()
        return self._panel

    def summary(self) -> pd.DataFrame:
        """Return before/after counts for this step.

        Returns
        -------
        pd.DataFrame
            One-row DataFrame with n_obs, n_units, n_periods and
            n_dropped_units.
        """
        c = self.config
        df = self.panel
        n_in = self._df[c.unit_col].nunique()
        n_out = df[c.unit_col].nunique()
        stats = {
            "step": type(self).__name__,
            "n_obs": len(df),
            "n_units": n_out,
            "n_periods": (
                df[c.period_key_col].nunique() if c.period_key_col in df.columns else None
            ),
            "n_dropped_units": n_in - n_out,
        }
        return pd.DataFrame([stats])

    def _keep_units(self, df: pd.DataFrame, keep: pd.Index | list) -> pd.DataFrame:
        """Restrict ``df`` to ``keep`` units, refusing to return an empty panel."""
        c = self.config
        n_before = df[c.unit_col].nunique()
        out = df[df[c.unit_col].isin(keep)].copy()
        n_after = out[c.unit_col].nunique()
        if n_after == 0:
            raise EmptyPanelAfterFilterError(type(self).__name__, n_before)

        logger.info(
            "%s: %s -> %s units (%s dropped), %s rows",
            type(self).__name__,
            f"{n_before:,}",
            f"{n_after:,}",
            f"{n_before - n_after:,}",
            f"{len(out):,}",
        )
        return out
