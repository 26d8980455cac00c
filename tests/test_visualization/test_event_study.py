"""Tests for event-study figures."""

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import pytest
from matplotlib.figure import Figure

from ucr_did.estimation import DynamicATT
from ucr_did.visualization import event_study_caption, plot_event_study, plot_event_study_grid


@pytest.fixture
def monthly_dynamic() -> DynamicATT:
    event_times = list(range(-24, 37))
    return DynamicATT(pd.DataFrame({
        "event_time": event_times,
        "att": [0.01 * e for e in event_times],
        "se": [0.05] * len(event_times),
    }))


@pytest.fixture
def annual_dynamic() -> DynamicATT:
    event_times = list(range(-4, 6))
    return DynamicATT(pd.DataFrame({
        "event_time": event_times,
        "att": [0.1 * e for e in event_times],
        "se": [0.05] * len(event_times),
    }))


class TestPlotEventStudy:
    def teardown_method(self):
        plt.close("all")

    def test_returns_figure(self, monthly_dynamic):
        fig = plot_event_study(monthly_dynamic, "monthly")
        assert isinstance(fig, Figure)

    def test_figure_size(self, monthly_dynamic):
        fig = plot_event_study(monthly_dynamic, "monthly")
        width, height = fig.get_size_inches()
        assert width == pytest.approx(8.75)
        assert height == pytest.approx(5.40)

    def test_monthly_axis(self, monthly_dynamic):
        fig = plot_event_study(monthly_dynamic, "monthly")
        ax = fig.axes[0]
        assert list(ax.get_xticks()) == list(range(-60, 61, 12))
        assert ax.get_xlim() == pytest.approx((-60.5, 60.5))
        assert "Months" in ax.get_xlabel()

    def test_annual_axis(self, annual_dynamic):
        fig = plot_event_study(annual_dynamic, "annual")
        ax = fig.axes[0]
        assert list(ax.get_xticks()) == list(range(-8, 9))
        assert "Years" in ax.get_xlabel()

    def test_pre_and_post_series(self, monthly_dynamic):
        fig = plot_event_study(monthly_dynamic, "monthly")
        labels = fig.axes[0].get_legend_handles_labels()[1]
        assert labels == ["Pre-switch", "Post-switch"]

    def test_only_post_estimates(self):
        dyn = DynamicATT(pd.DataFrame({"event_time": [0, 1], "att": [0.1, 0.2], "se": [0.1, 0.1]}))
        fig = plot_event_study(dyn, "annual")
        assert fig.axes[0].get_legend_handles_labels()[1] == ["Post-switch"]

    def test_title_and_caption(self, monthly_dynamic):
        caption = event_study_caption("Murder", "FBI UCR")
        fig = plot_event_study(monthly_dynamic, "monthly", title="Murder", caption=caption)
        assert fig.axes[0].get_title() == "Murder"
        assert any(t.get_text() == caption for t in fig.texts)

    def test_unsupported_ci(self, monthly_dynamic):
        with pytest.raises(ValueError, match="Unsupported CI"):
            plot_event_study(monthly_dynamic, "monthly", ci=0.5)


class TestEventStudyCaption:
    def test_two_sentences(self):
        caption = event_study_caption("Total Crime", "FBI UCR", ci=0.9)
        assert "total crime" in caption
        assert "90% confidence" in caption
        assert caption.count(". ") == 1


class TestPlotEventStudyGrid:
    def teardown_method(self):
        plt.close("all")

    def test_one_panel_per_result(self, monthly_dynamic):
        results = {"Murder": monthly_dynamic, "Rape": monthly_dynamic, "Theft": monthly_dynamic}
        fig = plot_event_study_grid(results, "monthly", ncols=2)
        visible = [ax for ax in fig.axes if ax.get_visible()]
        assert len(fig.axes) == 4
        assert [ax.get_title() for ax in visible] == ["Murder", "Rape", "Theft"]

    def test_single_panel(self, annual_dynamic):
        fig = plot_event_study_grid({"Murder": annual_dynamic}, "annual", ncols=1)
        assert len(fig.axes) == 1

    def test_suptitle(self, annual_dynamic):
        fig = plot_event_study_grid({"Murder": annual_dynamic}, "annual", suptitle="All crimes")
        assert fig._suptitle.get_text() == "All crimes"
