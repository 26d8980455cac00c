"""Event-study plots of dynamic ATT estimates."""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from .._types import Frequency
from ..estimation import DynamicATT
from ._style import COLORS, FIGSIZE, get_z


def event_study_caption(outcome_label: str, source_label: str, ci: float = 0.95) -> str:
    """Two-sentence caption for an event-study figure."""
    return (
        f"Dynamic effect of the reporting-system switch on {outcome_label.lower()} "
        f"by time relative to the switch ({source_label}). "
        f"Bars show {int(round(ci * 100))}% confidence intervals clustered by agency and state."
    )


def _draw(ax, dynamic: DynamicATT, frequency: Frequency, z: float, markersize: float = 5) -> None:
    est = dynamic.estimates
    crit = dynamic.crit_val if dynamic.crit_val is not None and np.isfinite(dynamic.crit_val) else z
    pre = est["event_time"] < 0

    for mask, key, label in ((pre, "pre", "Pre-switch"), (~pre, "post", "Post-switch")):
        part = est[mask]
        if len(part) == 0:
            continue
        ax.errorbar(
            part["event_time"],
            part["att"],
            yerr=crit * part["se"],
            fmt="o",
            color=COLORS[key],
            ecolor=COLORS[key],
            elinewidth=1,
            capsize=2,
            markersize=markersize,
            label=label,
        )

    ax.axhline(0, color=COLORS["zero"], linewidth=1)
    ax.axvline(-0.5, color=COLORS["highlight"], linestyle="--", linewidth=1.5, alpha=0.7)

    lo, hi = frequency.xlim
    ax.set_xlim(lo - 0.5, hi + 0.5)
    ax.set_xticks(range(lo, hi + 1, frequency.xtick_step))


def plot_event_study(
    dynamic: DynamicATT,
    frequency: str | Frequency = "monthly",
    title: str | None = None,
    caption: str | None = None,
    ci: float = 0.95,
    ylabel: str = "ATT",
):
    """Plot event-time ATT estimates with confidence intervals.

    Parameters
    ----------
    dynamic : DynamicATT
        Dynamic aggregation from the estimator.
    frequency : str or Frequency
        Sets the x-axis limits and tick spacing (yearly ticks for monthly
        data).
    title : str, optional
        Plot title.
    caption : str, optional
        Caption printed below the axes.
    ci : float
        Confidence level (0.80, 0.90, 0.95 or 0.99). A uniform critical
        value on ``dynamic`` takes precedence.
    ylabel : str
        Y-axis label.

    Returns
    -------
    matplotlib.figure.Figure
        8.75 x 5.40 inch figure.
    """
    import matplotlib.pyplot as plt

    freq = Frequency.from_name(frequency)
    z = get_z(ci)

    fig, ax = plt.subplots(figsize=FIGSIZE)
    _draw(ax, dynamic, freq, z)

    unit = "Months" if freq.periods_per_year == 12 else "Years"
    ax.set_xlabel(f"{unit} Relative to Switch", fontsize=12, fontweight="bold")
    ax.set_ylabel(ylabel, fontsize=12, fontweight="bold")
    if title:
        ax.set_title(title, fontsize=13, fontweight="bold")
    ax.legend(frameon=False, loc="upper left")

    if caption:
        fig.text(0.01, 0.01, caption, fontsize=8, ha="left", va="bottom", wrap=True)
        fig.tight_layout(rect=(0, 0.07, 1, 1))
    else:
        fig.tight_layout()
    return fig


def plot_event_study_grid(
    results: Mapping[str, DynamicATT],
    frequency: str | Frequency = "monthly",
    ncols: int = 2,
    ci: float = 0.95,
    suptitle: str | None = None,
):
    """Grid of event-study plots, one panel per label in ``results``.

    Returns
    -------
    matplotlib.figure.Figure
    """
    import matplotlib.pyplot as plt

    freq = Frequency.from_name(frequency)
    z = get_z(ci)

    n = max(len(results), 1)
    nrows = (n + ncols - 1) // ncols
    fig, axes = plt.subplots(
        nrows, ncols, figsize=(FIGSIZE[0] * ncols * 0.6, FIGSIZE[1] * nrows * 0.6)
    )
    axes = np.atleast_1d(axes).flatten()

    for ax, (label, dynamic) in zip(axes, results.items()):
        _draw(ax, dynamic, freq, z, markersize=3)
        ax.set_title(label, fontsize=11, fontweight="bold")
        ax.tick_params(labelsize=8)

    for idx in range(len(results), len(axes)):
        axes[idx].set_visible(False)

    if suptitle:
        fig.suptitle(suptitle, fontsize=13, fontweight="bold")
    fig.tight_layout()
    return fig
