"""Shared fixtures for ucr-did tests."""

import numpy as np
import pandas as pd
import pytest

from ucr_did import CRIME_CATEGORIES, PanelConfig
from ucr_did.estimation import DynamicATT, GroupTimeEstimator, GroupTimeResult, SimpleATT
from ucr_did.io import prepare_period_index
from ucr_did.panels import IntegerTimeEncoder, PanelBalancer

MONTHS = pd.period_range("2015-01", periods=24, freq="M")

# unit -> (state, onset date)
UNITS = {
    "AL0010000": ("Alabama", "2015-07-15"),
    "AL0020000": ("Alabama", None),
    "GA0010000": ("Georgia", "2016-01-01"),
    "GA0020000": ("Georgia", None),
    "TX0010000": ("Texas", "2015-10-01"),
    "TX0020000": ("Texas", None),
    "DC0010000": ("District of Columbia", None),
}
INCOMPLETE_UNIT = "TX0030000"


def add_period_keys(df: pd.DataFrame, freq: str = "M") -> pd.DataFrame:
    """Mimic the loader: derive period keys from the two date columns."""
    df = df.copy()
    df["period_key"] = pd.to_datetime(df["date"]).dt.to_period(freq)
    df["onset_key"] = pd.to_datetime(df["nibrs_start_date"]).dt.to_period(freq)
    return df


def make_rows(ori, state, onset, months, rng):
    rows = []
    for month in months:
        row = {
            "ori": ori,
            "state": state,
            "date": month.to_timestamp(),
            "nibrs_start_date": pd.Timestamp(onset) if onset else pd.NaT,
        }
        for cat in CRIME_CATEGORIES:
            count = int(rng.integers(5, 50))
            row[cat.count_col] = count
            row[cat.rate_col] = count / 10.0
        rows.append(row)
    return rows


@pytest.fixture
def with_keys():
    """The loader's period-key derivation, for hand-built frames."""
    return add_period_keys


@pytest.fixture
def config() -> PanelConfig:
    return PanelConfig()


@pytest.fixture
def raw_records() -> pd.DataFrame:
    """Raw records as they sit in the panel file (no period keys).

    - 3 treated units (Alabama 2015-07, Texas 2015-10, Georgia 2016-01)
    - 3 never-treated units
    - 1 District of Columbia unit (excluded)
    - 1 Texas unit with only 20 of 24 months (incomplete)
    """
    rng = np.random.default_rng(42)
    rows = []
    for ori, (state, onset) in UNITS.items():
        rows.extend(make_rows(ori, state, onset, MONTHS, rng))
    rows.extend(make_rows(INCOMPLETE_UNIT, "Texas", None, MONTHS[:20], rng))
    return pd.DataFrame(rows)


@pytest.fixture
def raw_panel(raw_records) -> pd.DataFrame:
    """Raw records with period keys, as returned by ``load_panel``."""
    return add_period_keys(raw_records)


@pytest.fixture
def period_index_table() -> pd.DataFrame:
    return pd.DataFrame({
        "period_key": [str(p) for p in MONTHS],
        "time": range(1, len(MONTHS) + 1),
    })


@pytest.fixture
def period_index(period_index_table) -> pd.DataFrame:
    return prepare_period_index(period_index_table)


@pytest.fixture
def balanced_panel(raw_panel, config) -> pd.DataFrame:
    return PanelBalancer(raw_panel, config).build()


@pytest.fixture
def encoded_panel(balanced_panel, period_index, config) -> pd.DataFrame:
    return IntegerTimeEncoder(balanced_panel, period_index, config=config).build()


class StubEstimator(GroupTimeEstimator):
    """Returns fixed estimates and records every call."""

    def __init__(self, event_times=range(-6, 7), att=1.5, se=0.3):
        super().__init__()
        self.event_times = list(event_times)
        self.att = att
        self.se = se
        self.calls = []

    def _fit(self, df, outcome, time_col, id_col, group_col, cluster_cols):
        self.calls.append({"outcome": outcome, "df": df.copy(), "clusters": cluster_cols})
        estimates = pd.DataFrame({
            "event_time": self.event_times,
            "att": [0.1 * e for e in self.event_times],
            "se": [0.05] * len(self.event_times),
        })
        return GroupTimeResult(
            dynamic=DynamicATT(estimates),
            simple=SimpleATT(att=self.att, se=self.se),
            n_units=df[id_col].nunique(),
            n_obs=len(df),
        )


@pytest.fixture
def stub_estimator() -> StubEstimator:
    return StubEstimator()


@pytest.fixture
def stub_factory():
    """Build fresh stub estimators inside a test."""
    return StubEstimator
