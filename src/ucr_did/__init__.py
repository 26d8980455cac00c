"""ucr-did: staggered difference-in-differences on agency crime panels."""

from ._types import (
    ALT,
    ANNUAL,
    CRIME_CATEGORIES,
    FBI,
    MONTHLY,
    CrimeCategory,
    DataSource,
    Frequency,
    PanelConfig,
    StudyConfig,
    get_category,
)
from .errors import (
    DateParseError,
    EmptyPanelAfterFilterError,
    EstimatorError,
    JoinMissError,
    MissingFileError,
    SchemaMismatchError,
    UcrDidError,
)
from .estimation import CsdidEstimator, GroupTimeEstimator
from .panels import DiscrepancyFilter, IntegerTimeEncoder, NegativeValueCorrector, PanelBalancer
from .study import CrimeStudy

__all__ = [
    "PanelConfig",
    "StudyConfig",
    "Frequency",
    "MONTHLY",
    "ANNUAL",
    "CrimeCategory",
    "CRIME_CATEGORIES",
    "get_category",
    "DataSource",
    "FBI",
    "ALT",
    "PanelBalancer",
    "DiscrepancyFilter",
    "IntegerTimeEncoder",
    "NegativeValueCorrector",
    "GroupTimeEstimator",
    "CsdidEstimator",
    "CrimeStudy",
    "UcrDidError",
    "MissingFileError",
    "SchemaMismatchError",
    "EmptyPanelAfterFilterError",
    "EstimatorError",
    "JoinMissError",
    "DateParseError",
]

__version__ = "0.1.0"
