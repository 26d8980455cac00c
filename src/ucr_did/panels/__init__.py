"""Panel cleaning steps that prepare agency records for estimation."""

from .balance import PanelBalancer
from .correction import NegativeValueCorrector
from .discrepancy import DiscrepancyFilter
from .encoding import IntegerTimeEncoder, select_onset_cohorts

__all__ = [
    "PanelBalancer",
    "DiscrepancyFilter",
    "IntegerTimeEncoder",
    "NegativeValueCorrector",
    "select_onset_cohorts",
]
