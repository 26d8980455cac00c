"""Estimator interface and result containers for group-time ATT estimation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..errors import EstimatorError, SchemaMismatchError

logger = logging.getLogger(__name__)

DYNAMIC_COLUMNS = ["event_time", "att", "se"]


@dataclass(frozen=True)
class DynamicATT:
    """Event-study aggregation: one (event_time, att, se) row per relative period.

    ``crit_val`` is the critical value for confidence bands when the
    estimator supplies one (uniform bands); otherwise pointwise normal
    critical values are used downstream.
    """

    estimates: pd.DataFrame
    crit_val: float | None = None

    def __post_init__(self) -> None:
        missing = [col for col in DYNAMIC_COLUMNS if col not in self.estimates.columns]
        if missing:
            raise SchemaMismatchError(missing, self.estimates.columns, where="DynamicATT")
        est = (
            self.estimates[DYNAMIC_COLUMNS]
            .sort_values("event_time")
            .reset_index(drop=True)
        )
        object.__setattr__(self, "estimates", est)

    def __len__(self) -> int:
        return len(self.estimates)


@dataclass(frozen=True)
class SimpleATT:
    """Overall ATT: a single point estimate and its standard error."""

    att: float
    se: float


@dataclass(frozen=True)
class GroupTimeResult:
    """Output of one estimator fit, aggregated both ways."""

    dynamic: DynamicATT
    simple: SimpleATT
    n_units: int = 0
    n_obs: int = 0


class GroupTimeEstimator(ABC):
    """Narrow interface to a staggered-adoption group-time ATT estimator.

    Subclasses implement ``_fit``. ``fit`` validates the panel first, so
    degenerate input is rejected with :class:`EstimatorError` before any
    estimation library is called.

    Parameters
    ----------
    est_method : str
        Estimation method tag passed through to the implementation.
    control_group : str
        Comparison group policy (``"notyettreated"`` or ``"nevertreated"``).
    base_period : str
        Base period policy (``"universal"`` or ``"varying"``).
    """

    def __init__(
        self,
        est_method: str = "dr",
        control_group: str = "notyettreated",
        base_period: str = "universal",
    ):
        self.est_method = est_method
        self.control_group = control_group
        self.base_period = base_period

    def fit(
        self,
        df: pd.DataFrame,
        outcome: str,
        time_col: str,
        id_col: str,
        group_col: str,
        cluster_cols: list[str] | tuple[str, ...] = (),
    ) -> GroupTimeResult:
        """Estimate group-time ATTs and aggregate them.

        Parameters
        ----------
        df : pd.DataFrame
            Balanced, encoded panel.
        outcome : str
            Outcome column.
        time_col, id_col, group_col : str
            Integer period, unit id and onset period (0 = never treated).
        cluster_cols : sequence of str
            Cluster variables for standard errors.

        Returns
        -------
        GroupTimeResult

        Raises
        ------
        EstimatorError
            If the input is degenerate or the estimator fails.
        """
        self._validate(df, outcome, time_col, id_col, group_col, list(cluster_cols))
        logger.info(
            "%s: %s on %s units x %s periods (method=%s, control=%s, base=%s)",
            type(self).__name__,
            outcome,
            f"{df[id_col].nunique():,}",
            f"{df[time_col].nunique():,}",
            self.est_method,
            self.control_group,
            self.base_period,
        )
        result = self._fit(df, outcome, time_col, id_col, group_col, list(cluster_cols))
        if len(result.dynamic) == 0:
            raise EstimatorError(f"{type(self).__name__} returned no event-time estimates")
        if not np.isfinite(result.simple.att):
            raise EstimatorError(
                f"{type(self).__name__} returned a non-finite overall ATT ({result.simple.att})"
            )
        return result

    @abstractmethod
    def _fit(
        self,
        df: pd.DataFrame,
        outcome: str,
        time_col: str,
        id_col: str,
        group_col: str,
        cluster_cols: list[str],
    ) -> GroupTimeResult:
        ...

    def _validate(
        self,
        df: pd.DataFrame,
        outcome: str,
        time_col: str,
        id_col: str,
        group_col: str,
        cluster_cols: list[str],
    ) -> None:
        needed = [outcome, time_col, id_col, group_col] + cluster_cols
        missing = [col for col in needed if col not in df.columns]
        if missing:
            raise SchemaMismatchError(missing, df.columns, where=type(self).__name__)

        if df.empty:
            raise EstimatorError("Cannot estimate on an empty panel")

        for col in (time_col, id_col, group_col):
            if df[col].isna().any() or not pd.api.types.is_integer_dtype(df[col]):
                raise EstimatorError(f"Column {col!r} must be a non-null integer column")

        if df[outcome].isna().all():
            raise EstimatorError(f"Outcome {outcome!r} is entirely missing")

        for col in cluster_cols:
            n = df[col].nunique()
            if n < 2:
                raise EstimatorError(f"Cluster variable {col!r} has {n} cluster(s); need at least 2")

        groups = df.drop_duplicates(id_col)[group_col]
        if (groups == 0).all():
            raise EstimatorError("No treated units: every unit is never-treated")
