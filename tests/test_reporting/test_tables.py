"""Tests for effect tables, simple-ATT tables and LaTeX rendering."""

import numpy as np
import pandas as pd
import pytest

from ucr_did import ALT, CRIME_CATEGORIES, FBI, SchemaMismatchError, get_category
from ucr_did.estimation import SimpleATT
from ucr_did.reporting import (
    combine_simple_att,
    effect_caption,
    effect_table,
    render_latex,
    simple_att_table,
    summary_caption,
)

LABELS = [
    "Total Crime", "Murder", "Rape", "Robbery",
    "Assault", "Aggravated Assault", "Burglary", "Theft",
]


@pytest.fixture
def effects() -> pd.DataFrame:
    return pd.DataFrame({
        "year": range(-2, 7),
        "mean": [0.0, 0.0, 0.1, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
        "se": [0.1] * 9,
    })


@pytest.fixture
def all_simple() -> dict:
    return {
        cat.label: simple_att_table(SimpleATT(att=i + 0.5, se=0.1), cat)
        for i, cat in enumerate(CRIME_CATEGORIES)
    }


class TestEffectTable:
    def test_post_years_only(self, effects):
        table = effect_table(effects, FBI)
        assert table["Years Post-Switch"].tolist() == [1, 2, 3, 4, 5]

    def test_single_source_headers(self, effects):
        table = effect_table(effects, FBI)
        assert list(table.columns) == ["Years Post-Switch", "Mean Effect", "Standard Error"]
        assert table["Mean Effect"].tolist() == pytest.approx([0.5, 0.6, 0.7, 0.8, 0.9])

    def test_comparison_side_by_side(self, effects):
        other = effects.assign(mean=effects["mean"] * 2)
        table = effect_table(effects, FBI, comparison=other, comparison_source=ALT)

        assert list(table.columns) == [
            "Years Post-Switch",
            "FBI UCR Mean", "FBI UCR SE",
            "Alternative UCR Mean", "Alternative UCR SE",
        ]
        assert table["Alternative UCR Mean"].tolist() == pytest.approx([1.0, 1.2, 1.4, 1.6, 1.8])

    def test_comparison_missing_year_is_nan(self, effects):
        other = effects[effects["year"] != 3]
        table = effect_table(effects, FBI, comparison=other, comparison_source=ALT)
        row = table.set_index("Years Post-Switch").loc[3]
        assert np.isnan(row["Alternative UCR Mean"])
        assert row["FBI UCR Mean"] == pytest.approx(0.7)

    def test_comparison_requires_source(self, effects):
        with pytest.raises(ValueError, match="comparison_source"):
            effect_table(effects, FBI, comparison=effects)

    def test_missing_columns(self, effects):
        with pytest.raises(SchemaMismatchError):
            effect_table(effects.drop(columns=["se"]), FBI)


class TestRenderLatex:
    def test_decimals(self, effects):
        tex = render_latex(effect_table(effects, FBI), caption="Effects")
        assert "0.50" in tex
        assert "0.10" in tex
        # years print without decimals
        assert "1.00 &" not in tex
        assert "\\begin{table}[htbp]" in tex
        assert "\\caption{Effects}" in tex

    def test_missing_cells(self, effects):
        other = effects[effects["year"] != 3]
        table = effect_table(effects, FBI, comparison=other, comparison_source=ALT)
        tex = render_latex(table, caption="Effects", label="tab:effects")
        assert "--" in tex
        assert "nan" not in tex
        assert "\\label{tab:effects}" in tex

    def test_index_rows(self, all_simple):
        tex = render_latex(combine_simple_att(all_simple), caption="Summary", index=True)
        assert "Mean" in tex
        assert "SE" in tex
        assert "Aggravated Assault" in tex


class TestSimpleAttTables:
    def test_simple_table(self):
        table = simple_att_table(SimpleATT(att=1.5, se=0.3), get_category("murder"))
        assert list(table.columns) == ["Murder"]
        assert list(table.index) == ["Mean", "SE"]
        assert table.loc["SE", "Murder"] == pytest.approx(0.3)

    def test_combine_fixed_order(self, all_simple):
        shuffled = dict(reversed(list(all_simple.items())))
        combined = combine_simple_att(shuffled)
        assert list(combined.columns) == LABELS
        assert list(combined.index) == ["Mean", "SE"]
        assert combined.loc["Mean", "Total Crime"] == pytest.approx(0.5)
        assert combined.loc["Mean", "Theft"] == pytest.approx(7.5)

    def test_combine_from_iterable(self, all_simple):
        combined = combine_simple_att(list(all_simple.values()))
        assert combined.shape == (2, 8)

    def test_combine_ignores_source_index(self, all_simple):
        tables = {k: v.reset_index(drop=True) for k, v in all_simple.items()}
        combined = combine_simple_att(tables)
        assert combined.loc["SE", "Murder"] == pytest.approx(0.1)

    def test_missing_category_raises(self, all_simple):
        del all_simple["Rape"]
        with pytest.raises(SchemaMismatchError, match="Rape"):
            combine_simple_att(all_simple)

    def test_missing_category_allowed(self, all_simple):
        del all_simple["Rape"]
        combined = combine_simple_att(all_simple, require_all=False)
        assert "Rape" not in combined.columns
        assert combined.shape == (2, 7)

    def test_unknown_category_raises(self, all_simple):
        all_simple["Arson"] = pd.DataFrame({"Arson": [1.0, 0.1]}, index=["Mean", "SE"])
        with pytest.raises(SchemaMismatchError, match="Arson"):
            combine_simple_att(all_simple)

    def test_wrong_row_count_raises(self, all_simple):
        all_simple["Murder"] = pd.DataFrame({"Murder": [1.0]})
        with pytest.raises(ValueError, match="2 rows"):
            combine_simple_att(all_simple)


class TestCaptions:
    def test_effect_caption_names_sources(self):
        caption = effect_caption(get_category("b"), FBI, ALT)
        assert "burglary" in caption
        assert "FBI UCR and Alternative UCR" in caption

    def test_summary_caption(self):
        assert "FBI UCR" in summary_caption(FBI)
