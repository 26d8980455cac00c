"""Event-study figures."""

from .event_study import event_study_caption, plot_event_study, plot_event_study_grid

__all__ = [
    "event_study_caption",
    "plot_event_study",
    "plot_event_study_grid",
]
