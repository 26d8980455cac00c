"""Readers and writers for panel inputs and report outputs."""

from .export import (
    read_effect_sizes,
    read_simple_att,
    save_figure,
    write_effect_sizes,
    write_simple_att,
    write_summary_table,
    write_tex,
)
from .loader import load_panel, load_period_index, prepare_period_index

__all__ = [
    "load_panel",
    "load_period_index",
    "prepare_period_index",
    "read_effect_sizes",
    "read_simple_att",
    "save_figure",
    "write_effect_sizes",
    "write_simple_att",
    "write_summary_table",
    "write_tex",
]
