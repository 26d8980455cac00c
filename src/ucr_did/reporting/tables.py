"""Effect tables, simple-ATT tables and their LaTeX rendering."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

import pandas as pd

from .._types import CATEGORY_ORDER, CrimeCategory, DataSource
from ..errors import SchemaMismatchError
from ..estimation import SimpleATT

logger = logging.getLogger(__name__)

YEAR_HEADER = "Years Post-Switch"
SINGLE_HEADERS = {"year": YEAR_HEADER, "mean": "Mean Effect", "se": "Standard Error"}
SIMPLE_ROWS = ["Mean", "SE"]
POST_YEARS = (1, 2, 3, 4, 5)
NA_REP = "--"

# Columns printed without decimals; everything else gets two
INTEGER_HEADERS = {YEAR_HEADER, "Year", "N", "Units"}


def _post_years(effects: pd.DataFrame, years: Iterable[int]) -> pd.DataFrame:
    missing = [col for col in ("year", "mean", "se") if col not in effects.columns]
    if missing:
        raise SchemaMismatchError(missing, effects.columns, where="effect-size table")
    out = effects[effects["year"].isin(list(years))]
    return out[["year", "mean", "se"]].sort_values("year").reset_index(drop=True)


def effect_table(
    effects: pd.DataFrame,
    source: DataSource,
    comparison: pd.DataFrame | None = None,
    comparison_source: DataSource | None = None,
    years: Iterable[int] = POST_YEARS,
) -> pd.DataFrame:
    """Build the post-switch effect table, optionally side by side with a second source.

    Parameters
    ----------
    effects : pd.DataFrame
        ``year, mean, se`` rows for ``source``.
    source : DataSource
        Source of ``effects``.
    comparison : pd.DataFrame, optional
        Previously persisted ``year, mean, se`` rows from another source.
    comparison_source : DataSource, optional
        Source of ``comparison``. Required with ``comparison``.
    years : iterable of int
        Relative years to keep (default 1..5).

    Returns
    -------
    pd.DataFrame
        Table with human-readable headers. Years missing from one source
        show up as NaN.
    """
    years = list(years)
    primary = _post_years(effects, years)

    if comparison is None:
        return primary.rename(columns=SINGLE_HEADERS)

    if comparison_source is None:
        raise ValueError("comparison_source is required when comparison is given")

    other = _post_years(comparison, years)
    primary = primary.rename(columns={
        "mean": f"{source.label} Mean",
        "se": f"{source.label} SE",
    })
    other = other.rename(columns={
        "mean": f"{comparison_source.label} Mean",
        "se": f"{comparison_source.label} SE",
    })
    merged = primary.merge(other, on="year", how="outer").sort_values("year")
    return merged.rename(columns={"year": YEAR_HEADER}).reset_index(drop=True)


def _formatter(decimals: int):
    def fmt(value) -> str:
        return NA_REP if pd.isna(value) else f"{value:.{decimals}f}"

    return fmt


def render_latex(
    table: pd.DataFrame,
    caption: str,
    label: str | None = None,
    index: bool = False,
) -> str:
    """Render a table as a LaTeX fragment.

    Year and count columns are printed with 0 decimals, effect and SE
    columns with 2. Missing cells print as ``--``.
    """
    formatters = {
        col: _formatter(0 if col in INTEGER_HEADERS else 2) for col in table.columns
    }
    return table.to_latex(
        index=index,
        formatters=formatters,
        na_rep=NA_REP,
        caption=caption,
        label=label,
        position="htbp",
    )


def simple_att_table(simple: SimpleATT, category: CrimeCategory) -> pd.DataFrame:
    """Two-row (Mean, SE) single-column table named after the category."""
    return pd.DataFrame({category.label: [simple.att, simple.se]}, index=SIMPLE_ROWS)


def combine_simple_att(
    tables: Mapping[str, pd.DataFrame] | Iterable[pd.DataFrame],
    require_all: bool = True,
) -> pd.DataFrame:
    """Combine per-category simple-ATT tables column-wise.

    Parameters
    ----------
    tables : mapping or iterable of pd.DataFrame
        Single-column (Mean, SE) tables, each named after its category.
    require_all : bool
        Raise unless all eight categories are present.

    Returns
    -------
    pd.DataFrame
        Columns in the fixed category order (Total Crime, Murder, Rape,
        Robbery, Assault, Aggravated Assault, Burglary, Theft), rows Mean
        and SE.

    Raises
    ------
    SchemaMismatchError
        If ``require_all`` and a category is missing, or a column is not a
        known category.
    """
    frames = list(tables.values()) if isinstance(tables, Mapping) else list(tables)
    columns: dict[str, pd.Series] = {}
    for frame in frames:
        if len(frame) != len(SIMPLE_ROWS):
            raise ValueError(f"Simple-ATT table must have 2 rows, got {len(frame)}")
        for col in frame.columns:
            columns[col] = pd.Series(frame[col].values, index=SIMPLE_ROWS)

    unknown = [col for col in columns if col not in CATEGORY_ORDER]
    if unknown:
        raise SchemaMismatchError(unknown, CATEGORY_ORDER, where="known crime categories")

    missing = [label for label in CATEGORY_ORDER if label not in columns]
    if missing and require_all:
        raise SchemaMismatchError(missing, columns, where="simple-ATT tables")

    order = [label for label in CATEGORY_ORDER if label in columns]
    combined = pd.DataFrame({label: columns[label] for label in order}, index=SIMPLE_ROWS)
    logger.info("Combined simple ATT for %s categories", len(order))
    return combined


def effect_caption(category: CrimeCategory, source: DataSource, comparison: DataSource | None = None) -> str:
    sources = source.label if comparison is None else f"{source.label} and {comparison.label}"
    return (
        f"Estimated effect of the reporting-system switch on {category.label.lower()} "
        f"in years one to five after the switch ({sources}). "
        "Standard errors clustered by agency and state."
    )


def summary_caption(source: DataSource) -> str:
    return (
        f"Overall average treatment effect on the treated by crime category ({source.label}). "
        "Standard errors clustered by agency and state."
    )
