"""Effect-size extraction and table building."""

from .effects import SE_RULES, event_time_to_year, extract_effect_sizes
from .tables import (
    combine_simple_att,
    effect_caption,
    effect_table,
    render_latex,
    simple_att_table,
    summary_caption,
)

__all__ = [
    "SE_RULES",
    "event_time_to_year",
    "extract_effect_sizes",
    "effect_table",
    "effect_caption",
    "render_latex",
    "simple_att_table",
    "combine_simple_att",
    "summary_caption",
]
