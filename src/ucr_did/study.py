"""End-to-end study: clean, estimate and report every crime category for one source.

Each category runs on the same balanced snapshot. The cleaning steps return
new frames, so the order in which categories run does not change any result.
Nothing is written for a category until all of its outputs have been built.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from ._types import CRIME_CATEGORIES, CrimeCategory, DataSource, StudyConfig, get_category
from .estimation import CsdidEstimator, GroupTimeEstimator, GroupTimeResult
from .io import (
    load_panel,
    load_period_index,
    read_effect_sizes,
    read_simple_att,
    save_figure,
    write_effect_sizes,
    write_simple_att,
    write_summary_table,
    write_tex,
)
from .panels import (
    DiscrepancyFilter,
    IntegerTimeEncoder,
    NegativeValueCorrector,
    PanelBalancer,
    select_onset_cohorts,
)
from .reporting import (
    combine_simple_att,
    effect_caption,
    effect_table,
    extract_effect_sizes,
    render_latex,
    simple_att_table,
    summary_caption,
)
from .visualization import event_study_caption, plot_event_study, plot_event_study_grid
from .visualization._style import DPI, apply_style

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryResult:
    """Everything one category's sub-pipeline produced."""

    category: CrimeCategory
    panel: pd.DataFrame
    fit: GroupTimeResult
    effects: pd.DataFrame
    effect_table: pd.DataFrame
    simple_table: pd.DataFrame
    paths: dict[str, Path] = field(default_factory=dict)


@dataclass(frozen=True)
class StudyResult:
    """Per-category results plus the combined summary table."""

    categories: dict[str, CategoryResult]
    summary: pd.DataFrame
    paths: dict[str, Path] = field(default_factory=dict)


class CrimeStudy:
    """Run the staggered DiD analysis for one data source and frequency.

    Parameters
    ----------
    config : StudyConfig
        Run parameters.
    estimator : GroupTimeEstimator, optional
        Defaults to :class:`CsdidEstimator` with the config's method,
        control-group and base-period policies.
    period_index : pd.DataFrame, optional
        Pre-loaded period index. Read from ``config.period_index_path``
        when omitted.

    Example
    -------
    >>> cfg = StudyConfig("ucr_monthly.dta", "period_index.xlsx", output_dir="out")
    >>> result = CrimeStudy(cfg).run()
    >>> result.summary
    """

    def __init__(
        self,
        config: StudyConfig,
        estimator: GroupTimeEstimator | None = None,
        period_index: pd.DataFrame | None = None,
    ):
        self.config = config
        self.freq = config.freq
        self.estimator = estimator or CsdidEstimator(
            est_method=config.est_method,
            control_group=config.control_group,
            base_period=config.base_period,
        )
        self._period_index = period_index
        self._snapshot: pd.DataFrame | None = None

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def period_index(self) -> pd.DataFrame:
        if self._period_index is None:
            cfg = self.config
            self._period_index = load_period_index(
                cfg.period_index_path,
                key_col=cfg.period_key_col,
                index_col=cfg.period_index_col,
                frequency=self.freq,
            )
        return self._period_index

    def prepare(self, raw: pd.DataFrame | None = None) -> pd.DataFrame:
        """Load (unless ``raw`` is given) and balance the panel.

        The result is cached and shared, read-only, by every category.
        """
        cfg = self.config
        if raw is None:
            raw = load_panel(cfg.panel_path, cfg.panel_config, self.freq)

        balancer = PanelBalancer(raw, cfg.panel_config)
        df = balancer.build()
        if cfg.onset_years:
            df = select_onset_cohorts(df, cfg.onset_years, cfg.panel_config)

        self._snapshot = df
        return df

    @property
    def snapshot(self) -> pd.DataFrame:
        if self._snapshot is None:
            self.prepare()
        return self._snapshot

    # ------------------------------------------------------------------
    # Output paths
    # ------------------------------------------------------------------

    def _tag(self, source: DataSource | None = None) -> str:
        tag = f"{(source or self.config.source).tag}_{self.freq.name}"
        if self.config.placebo:
            tag += "_placebo"
        return tag

    def output_path(
        self,
        category: CrimeCategory | None,
        kind: str,
        source: DataSource | None = None,
    ) -> Path:
        """Path of one output file, e.g. ``out/fbi_monthly_m_effects.csv``."""
        stem = self._tag(source)
        if category is not None:
            stem += f"_{category.abbr}"
        return Path(self.config.output_dir) / f"{stem}_{kind}"

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def clean(self, category: CrimeCategory | str, panel: pd.DataFrame | None = None) -> pd.DataFrame:
        """Filter, encode and correct the snapshot for one category."""
        cfg = self.config
        pc = cfg.panel_config
        cat = get_category(category)
        df = self.snapshot if panel is None else panel

        if cat.discrepancy:
            df = DiscrepancyFilter.for_category(df, cat, self.freq, pc).build()
        df = IntegerTimeEncoder(
            df,
            self.period_index,
            frequency=self.freq,
            placebo=cfg.placebo,
            key_col=cfg.period_key_col,
            index_col=cfg.period_index_col,
            config=pc,
        ).build()
        return NegativeValueCorrector(df, cat.count_col, pc).build()

    def run_category(
        self,
        category: CrimeCategory | str,
        panel: pd.DataFrame | None = None,
    ) -> CategoryResult:
        """Run one category end to end and write its outputs.

        Raises
        ------
        UcrDidError
            Any pipeline error. No file for this category is written.
        """
        cfg = self.config
        pc = cfg.panel_config
        cat = get_category(category)
        logger.info("=== %s (%s, %s) ===", cat.label, cfg.source.label, self.freq.name)

        df = self.clean(cat, panel)
        fit = self.estimator.fit(
            df,
            outcome=cat.count_col,
            time_col=pc.time_col,
            id_col=pc.id_col,
            group_col=pc.onset_time_col,
            cluster_cols=[pc.id_col, pc.state_group_col],
        )
        effects = extract_effect_sizes(fit.dynamic, self.freq, cfg.se_rule)

        comparison = None
        if cfg.comparison is not None:
            comparison = read_effect_sizes(
                self.output_path(cat, "effects.csv", source=cfg.comparison)
            )
        table = effect_table(effects, cfg.source, comparison, cfg.comparison)
        tex = render_latex(
            table,
            caption=effect_caption(cat, cfg.source, cfg.comparison),
            label=f"tab:{self._tag()}_{cat.abbr}",
        )
        simple = simple_att_table(fit.simple, cat)

        apply_style()
        fig = plot_event_study(
            fit.dynamic,
            self.freq,
            title=f"{cat.label} ({cfg.source.label})",
            caption=event_study_caption(cat.label, cfg.source.label, cfg.ci),
            ci=cfg.ci,
        )

        paths = {
            "effects": self.output_path(cat, "effects.csv"),
            "simple": self.output_path(cat, "simple.csv"),
            "table": self.output_path(cat, "table.tex"),
            "figure": self.output_path(cat, "event_study.png"),
        }
        self._write_category(paths, effects, simple, tex, fig)

        return CategoryResult(
            category=cat,
            panel=df,
            fit=fit,
            effects=effects,
            effect_table=table,
            simple_table=simple,
            paths=paths,
        )

    def _write_category(self, paths, effects, simple, tex, fig) -> None:
        """Write one category's files through a staging directory.

        Files are moved into place only after all four were written, so an
        I/O error leaves no partial output. The figure is always closed.
        """
        import matplotlib.pyplot as plt

        out_dir = Path(self.config.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        try:
            with tempfile.TemporaryDirectory(dir=out_dir, prefix=".staging-") as tmp:
                staged = {key: Path(tmp) / path.name for key, path in paths.items()}
                write_effect_sizes(effects, staged["effects"])
                write_simple_att(simple, staged["simple"])
                write_tex(tex, staged["table"])
                save_figure(fig, staged["figure"], dpi=DPI)
                for key, path in paths.items():
                    staged[key].replace(path)
        finally:
            plt.close(fig)

    def run(self) -> StudyResult:
        """Run every configured category, then write the combined outputs."""
        import matplotlib.pyplot as plt

        cfg = self.config
        snapshot = self.snapshot
        categories = [get_category(name) for name in cfg.categories]

        results: dict[str, CategoryResult] = {}
        for cat in categories:
            results[cat.name] = self.run_category(cat, snapshot)

        summary = combine_simple_att(
            {name: res.simple_table for name, res in results.items()},
            require_all=len(categories) == len(CRIME_CATEGORIES),
        )
        paths = self._write_summary(summary)

        grid = plot_event_study_grid(
            {res.category.label: res.fit.dynamic for res in results.values()},
            self.freq,
            ci=cfg.ci,
            suptitle=f"Event Studies by Crime Category ({cfg.source.label})",
        )
        paths["grid"] = self.output_path(None, "event_study_grid.png")
        try:
            save_figure(grid, paths["grid"], dpi=DPI)
        finally:
            plt.close(grid)

        logger.info("Study complete: %s categories", len(results))
        return StudyResult(categories=results, summary=summary, paths=paths)

    def combine_persisted(self, categories: list[str] | None = None) -> pd.DataFrame:
        """Rebuild the combined summary from simple-ATT CSVs already on disk."""
        names = categories or [c.name for c in CRIME_CATEGORIES]
        cats = [get_category(name) for name in names]
        tables = [read_simple_att(self.output_path(cat, "simple.csv")) for cat in cats]
        summary = combine_simple_att(tables, require_all=len(cats) == len(CRIME_CATEGORIES))
        self._write_summary(summary)
        return summary

    def _write_summary(self, summary: pd.DataFrame) -> dict[str, Path]:
        paths = {
            "summary_csv": self.output_path(None, "did_summary.csv"),
            "summary_tex": self.output_path(None, "did_summary.tex"),
        }
        write_summary_table(summary, paths["summary_csv"])
        write_tex(
            render_latex(
                summary,
                caption=summary_caption(self.config.source),
                label=f"tab:{self._tag()}_summary",
                index=True,
            ),
            paths["summary_tex"],
        )
        return paths
