"""Shared visualization style and color palette."""

from __future__ import annotations

COLORS = {
    "pre": "#3D405B",
    "post": "#E07A5F",
    "highlight": "#E63946",
    "zero": "#555555",
}

FIGSIZE = (8.75, 5.40)
DPI = 100

# Two-sided normal critical values by confidence level
Z_VALUES = {
    0.80: 1.282,
    0.90: 1.645,
    0.95: 1.960,
    0.99: 2.576,
}


def get_z(ci: float) -> float:
    """Critical value for a two-sided interval at level ``ci``."""
    level = round(ci, 2)
    if level not in Z_VALUES:
        raise ValueError(f"Unsupported CI level: {ci}. Use one of {sorted(Z_VALUES)}")
    return Z_VALUES[level]


def apply_style() -> None:
    """Apply the ucr-did default matplotlib style."""
    import matplotlib.pyplot as plt

    plt.rcParams.update({
        "figure.figsize": FIGSIZE,
        "figure.dpi": DPI,
        "axes.spines.top": False,
        "axes.spines.right": False,
        "font.size": 11,
        "axes.titlesize": 13,
        "axes.labelsize": 11,
    })
