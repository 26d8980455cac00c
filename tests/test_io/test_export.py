"""Tests for effect-size, simple-ATT and table writers."""

import pandas as pd
import pytest

from ucr_did import MissingFileError, SchemaMismatchError
from ucr_did.io import (
    read_effect_sizes,
    read_simple_att,
    write_effect_sizes,
    write_simple_att,
    write_summary_table,
    write_tex,
)


@pytest.fixture
def effects() -> pd.DataFrame:
    return pd.DataFrame({
        "year": [-1, 1, 2],
        "mean": [0.1, 0.5, 0.7],
        "se": [0.2, 0.25, 0.3],
    })


class TestEffectSizes:
    def test_written_columns(self, effects, tmp_path):
        path = tmp_path / "effects.csv"
        write_effect_sizes(effects.assign(extra=1), path)

        header = path.read_text().splitlines()[0]
        assert header == "year,mean,se"

    def test_read_back(self, effects, tmp_path):
        path = tmp_path / "effects.csv"
        write_effect_sizes(effects, path)
        pd.testing.assert_frame_equal(read_effect_sizes(path), effects)

    def test_creates_parent_dirs(self, effects, tmp_path):
        path = tmp_path / "a" / "b" / "effects.csv"
        write_effect_sizes(effects, path)
        assert path.exists()

    def test_name_header_accepted(self, tmp_path):
        path = tmp_path / "effects.csv"
        path.write_text("name,mean,se\n2,0.7,0.3\n1,0.5,0.25\n")

        df = read_effect_sizes(path)
        assert df["year"].tolist() == [1, 2]

    def test_missing_columns_on_write(self, effects, tmp_path):
        with pytest.raises(SchemaMismatchError):
            write_effect_sizes(effects.drop(columns=["se"]), tmp_path / "x.csv")

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingFileError):
            read_effect_sizes(tmp_path / "missing.csv")


class TestSimpleAtt:
    def test_read_back_restores_row_labels(self, tmp_path):
        table = pd.DataFrame({"Murder": [1.5, 0.3]}, index=["Mean", "SE"])
        path = tmp_path / "simple.csv"
        write_simple_att(table, path)

        df = read_simple_att(path)
        assert list(df.index) == ["Mean", "SE"]
        assert df.loc["Mean", "Murder"] == pytest.approx(1.5)
        assert df.loc["SE", "Murder"] == pytest.approx(0.3)

    def test_wrong_shape_raises(self, tmp_path):
        path = tmp_path / "simple.csv"
        path.write_text("Murder,Rape\n1,2\n3,4\n")
        with pytest.raises(ValueError, match="single-column"):
            read_simple_att(path)


class TestTableFragments:
    def test_summary_keeps_row_labels(self, tmp_path):
        table = pd.DataFrame({"Murder": [1.5, 0.3]}, index=["Mean", "SE"])
        path = tmp_path / "summary.csv"
        write_summary_table(table, path)

        df = pd.read_csv(path, index_col=0)
        assert list(df.index) == ["Mean", "SE"]

    def test_write_tex(self, tmp_path):
        path = tmp_path / "out" / "table.tex"
        write_tex("\\begin{table}\n\\end{table}\n", path)
        assert path.read_text().startswith("\\begin{table}")
