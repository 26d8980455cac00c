"""Group-time ATT estimation behind a narrow interface."""

from ._base import DynamicATT, GroupTimeEstimator, GroupTimeResult, SimpleATT
from .csdid import CsdidEstimator

__all__ = [
    "GroupTimeEstimator",
    "GroupTimeResult",
    "DynamicATT",
    "SimpleATT",
    "CsdidEstimator",
]
