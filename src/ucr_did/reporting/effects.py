"""Effect-size extraction from the dynamic (event-study) aggregation."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .._types import Frequency
from ..estimation import DynamicATT

logger = logging.getLogger(__name__)

SE_RULES = ("mean", "independent")


def event_time_to_year(event_time: pd.Series, periods_per_year: int = 12) -> pd.Series:
    """Bucket relative periods into relative years: ``floor(e / 12) + 1``.

    Event times 0..11 map to year 1, -12..-1 to year 0.
    """
    return (np.floor(event_time / periods_per_year) + 1).astype(int)


def _binned_se(se: pd.Series, rule: str) -> float:
    if rule == "mean":
        return float(se.mean())
    # sqrt(sum se^2) / n: the SE of a mean of independent estimates
    return float(np.sqrt((se ** 2).sum()) / len(se))


def extract_effect_sizes(
    dynamic: DynamicATT | pd.DataFrame,
    frequency: str | Frequency = "monthly",
    se_rule: str = "mean",
) -> pd.DataFrame:
    """Convert event-time estimates into a ``year, mean, se`` table.

    Parameters
    ----------
    dynamic : DynamicATT or pd.DataFrame
        Event-study estimates with ``event_time``, ``att`` and ``se``.
    frequency : str or Frequency
        Annual estimates are relabelled directly (``year = event_time``).
        Monthly estimates are bucketed into relative years and averaged.
    se_rule : str
        How monthly standard errors are combined within a year bucket:
        ``"mean"`` averages them, ``"independent"`` treats the monthly
        estimates as independent (``sqrt(sum se^2) / n``).

    Returns
    -------
    pd.DataFrame
        Rows ordered by ``year``.
    """
    if se_rule not in SE_RULES:
        raise ValueError(f"Unsupported se_rule: {se_rule!r}. Use one of {list(SE_RULES)}")

    freq = Frequency.from_name(frequency)
    est = dynamic.estimates if isinstance(dynamic, DynamicATT) else dynamic

    if freq.periods_per_year == 1:
        out = pd.DataFrame({
            "year": est["event_time"].astype(int).values,
            "mean": est["att"].astype(float).values,
            "se": est["se"].astype(float).values,
        })
    else:
        years = event_time_to_year(est["event_time"], freq.periods_per_year)
        grouped = est.assign(year=years).groupby("year")
        out = pd.DataFrame({
            "mean": grouped["att"].mean(),
            "se": grouped["se"].apply(lambda s: _binned_se(s, se_rule)),
        }).reset_index()

    out = out.sort_values("year").reset_index(drop=True)
    logger.info(
        "Effect sizes: %s event times -> %s years (%s, se_rule=%s)",
        f"{len(est):,}",
        f"{len(out):,}",
        freq.name,
        se_rule,
    )
    return out
