"""Persist and re-read effect-size tables, simple-ATT tables and table fragments."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..errors import MissingFileError, SchemaMismatchError

logger = logging.getLogger(__name__)

EFFECT_COLUMNS = ["year", "mean", "se"]
SIMPLE_ROWS = ["Mean", "SE"]


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_effect_sizes(df: pd.DataFrame, path: str | Path) -> None:
    """Write an effect-size table as a ``year,mean,se`` CSV.

    Parameters
    ----------
    df : pd.DataFrame
        Effect sizes with ``year``, ``mean`` and ``se`` columns.
    path : str or Path
        Output file path.
    """
    missing = [col for col in EFFECT_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaMismatchError(missing, df.columns, where="effect-size table")

    path = Path(path)
    _ensure_parent(path)
    df[EFFECT_COLUMNS].to_csv(path, index=False)
    logger.info("Exported %s effect-size rows to %s", f"{len(df):,}", path)


def read_effect_sizes(path: str | Path) -> pd.DataFrame:
    """Read an effect-size CSV written by :func:`write_effect_sizes`.

    A leading ``name`` column (older header variant) is accepted and dropped.
    """
    path = Path(path)
    if not path.exists():
        raise MissingFileError(path, "effect-size table")

    df = pd.read_csv(path)
    if "name" in df.columns and "year" not in df.columns:
        df = df.rename(columns={"name": "year"})
    missing = [col for col in EFFECT_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaMismatchError(missing, df.columns, where=str(path))

    df = df[EFFECT_COLUMNS].copy()
    df["year"] = df["year"].astype(int)
    return df.sort_values("year").reset_index(drop=True)


def write_simple_att(df: pd.DataFrame, path: str | Path) -> None:
    """Write a single-column (Mean, SE) simple-ATT table."""
    path = Path(path)
    _ensure_parent(path)
    df.to_csv(path, index=False)
    logger.info("Exported simple ATT %s to %s", list(df.columns), path)


def read_simple_att(path: str | Path) -> pd.DataFrame:
    """Read a simple-ATT CSV back into a (Mean, SE)-indexed table."""
    path = Path(path)
    if not path.exists():
        raise MissingFileError(path, "simple-ATT table")

    df = pd.read_csv(path)
    if len(df) != len(SIMPLE_ROWS) or df.shape[1] != 1:
        raise ValueError(
            f"Expected a single-column, two-row table in {path}, got shape {df.shape}"
        )
    df.index = SIMPLE_ROWS
    return df


def write_summary_table(df: pd.DataFrame, path: str | Path) -> None:
    """Write the combined (Mean, SE) x category table, keeping row labels."""
    path = Path(path)
    _ensure_parent(path)
    df.to_csv(path, index=True)
    logger.info("Exported summary table (%s columns) to %s", df.shape[1], path)


def write_tex(tex: str, path: str | Path) -> None:
    """Write a typeset table fragment."""
    path = Path(path)
    _ensure_parent(path)
    path.write_text(tex)
    logger.info("Exported table fragment to %s", path)


def save_figure(fig, path: str | Path, dpi: int = 100) -> None:
    """Save a matplotlib figure and close it."""
    import matplotlib.pyplot as plt

    path = Path(path)
    _ensure_parent(path)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.info("Exported figure to %s", path)
