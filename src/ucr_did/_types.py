"""Shared types and configuration for ucr-did."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PanelConfig:
    """Column name mapping for the agency panel.

    Every pipeline stage takes this as its configuration argument.
    Create one and pass it to the loader, the cleaning steps and the study.

    Parameters
    ----------
    unit_col : str
        Reporting agency identifier (9-character ORI code).
    state_col : str
        State name.
    date_col : str
        Observation date.
    onset_col : str
        Raw treatment-onset date. Missing means never treated.
    period_key_col, onset_key_col : str
        Calendar period keys derived by the loader from ``date_col`` and
        ``onset_col``.
    time_col, onset_time_col : str
        Integer period columns written by the encoder.
    id_col : str
        Dense integer unit id written by the encoder.
    state_group_col : str
        Integer state group written by the encoder (second cluster variable).
    excluded_states : tuple[str, ...]
        State names dropped before balancing. Missing state names are
        always dropped.
    never_treated_value : int
        Onset integer for never-treated units.

    Example
    -------
    >>> config = PanelConfig(unit_col="ori9", onset_col="switch_date")
    """

    unit_col: str = "ori"
    state_col: str = "state"
    date_col: str = "date"
    onset_col: str = "nibrs_start_date"
    period_key_col: str = "period_key"
    onset_key_col: str = "onset_key"
    time_col: str = "time"
    onset_time_col: str = "treat_time"
    id_col: str = "id"
    state_group_col: str = "state_group"
    excluded_states: tuple[str, ...] = ("District of Columbia", "")
    never_treated_value: int = 0


@dataclass(frozen=True)
class Frequency:
    """Period granularity of a run and everything that depends on it."""

    name: str
    period_code: str
    discrepancy_threshold: int
    periods_per_year: int
    xlim: tuple[int, int]
    xtick_step: int

    @property
    def placebo_shift(self) -> int:
        """Onset shift (in periods) for a one-year-later placebo date."""
        return self.periods_per_year

    @classmethod
    def from_name(cls, name: str | Frequency) -> Frequency:
        """Resolve ``"monthly"``, ``"annual"`` (or ``"yearly"``) to a Frequency."""
        if isinstance(name, Frequency):
            return name
        key = name.lower()
        if key in ("yearly", "year"):
            key = "annual"
        if key not in FREQUENCIES:
            raise ValueError(
                f"Unknown frequency: {name!r}. Use one of {sorted(FREQUENCIES)}"
            )
        return FREQUENCIES[key]


MONTHLY = Frequency(
    name="monthly",
    period_code="M",
    discrepancy_threshold=500,
    periods_per_year=12,
    xlim=(-60, 60),
    xtick_step=12,
)
ANNUAL = Frequency(
    name="annual",
    period_code="Y",
    discrepancy_threshold=5000,
    periods_per_year=1,
    xlim=(-8, 8),
    xtick_step=1,
)
FREQUENCIES = {f.name: f for f in (MONTHLY, ANNUAL)}


@dataclass(frozen=True)
class CrimeCategory:
    """One crime category and the columns it is measured in.

    ``count_col`` is the outcome handed to the estimator and the column the
    negative-value correction targets. ``rate_col`` is only consulted by the
    discrepancy filter, and only when ``discrepancy`` is set.
    """

    name: str
    abbr: str
    label: str
    discrepancy: bool = True
    count_col: str = ""
    rate_col: str = ""

    def __post_init__(self) -> None:
        if not self.count_col:
            object.__setattr__(self, "count_col", self.name)
        if not self.rate_col:
            object.__setattr__(self, "rate_col", f"{self.name}_rate")


CRIME_CATEGORIES: tuple[CrimeCategory, ...] = (
    CrimeCategory("crime", "c", "Total Crime"),
    CrimeCategory("murder", "m", "Murder", discrepancy=False),
    CrimeCategory("rape", "p", "Rape", discrepancy=False),
    CrimeCategory("robbery", "r", "Robbery", discrepancy=False),
    CrimeCategory("assault", "a", "Assault"),
    CrimeCategory("agg_assault", "aa", "Aggravated Assault", discrepancy=False),
    CrimeCategory("burglary", "b", "Burglary"),
    CrimeCategory("theft", "t", "Theft"),
)

CATEGORY_ORDER: tuple[str, ...] = tuple(c.label for c in CRIME_CATEGORIES)


def get_category(key: str | CrimeCategory) -> CrimeCategory:
    """Look up a crime category by name, abbreviation or label."""
    if isinstance(key, CrimeCategory):
        return key
    for cat in CRIME_CATEGORIES:
        if key in (cat.name, cat.abbr, cat.label):
            return cat
    raise ValueError(
        f"Unknown crime category: {key!r}. "
        f"Use one of {[c.name for c in CRIME_CATEGORIES]}"
    )


@dataclass(frozen=True)
class DataSource:
    """A data source: ``tag`` goes into file names, ``label`` into tables."""

    tag: str
    label: str


FBI = DataSource("fbi", "FBI UCR")
ALT = DataSource("alt", "Alternative UCR")


@dataclass(frozen=True)
class StudyConfig:
    """Parameters threaded through one run of the pipeline.

    Parameters
    ----------
    panel_path, period_index_path : str
        Raw panel file and the period-index lookup file.
    output_dir : str
        Directory for CSVs, figures and table fragments.
    frequency : str
        ``"monthly"`` or ``"annual"``.
    source : DataSource
        Source of ``panel_path``. Its tag prefixes every output file.
    comparison : DataSource, optional
        When set, effect tables are merged with this source's persisted
        effect sizes (two-source comparison table).
    placebo : bool
        Shift every onset one year later (falsification run).
    onset_years : tuple[int, ...], optional
        Keep only treated units whose onset falls in these calendar years.
    se_rule : str
        Standard-error rule for month-to-year binning (``"mean"`` or
        ``"independent"``).
    """

    panel_path: str
    period_index_path: str
    output_dir: str = "output"
    frequency: str = "monthly"
    source: DataSource = FBI
    comparison: DataSource | None = None
    placebo: bool = False
    onset_years: tuple[int, ...] | None = None
    period_key_col: str = "period_key"
    period_index_col: str = "time"
    est_method: str = "dr"
    control_group: str = "notyettreated"
    base_period: str = "universal"
    se_rule: str = "mean"
    ci: float = 0.95
    categories: tuple[str, ...] = field(
        default_factory=lambda: tuple(c.name for c in CRIME_CATEGORIES)
    )
    panel_config: PanelConfig = field(default_factory=PanelConfig)

    @property
    def freq(self) -> Frequency:
        return Frequency.from_name(self.frequency)
