"""Tests for the chart-spec export script."""

import json
from unittest.mock import patch

from income_dashboard.loaders import DataLoadError, load_chart_spec
from scripts.export_chart_specs import CONFIG, income_distribution, main, top_cities, write_spec


class TestFigures:
    def test_income_distribution_skips_unusable_rows(self, city_frame):
        fig = income_distribution(city_frame)
        assert fig.data[0].type == "box"
        assert "Nevada" not in list(fig.data[0].x)

    def test_top_cities_descending(self, city_frame):
        fig = top_cities(city_frame, n=2)
        assert list(fig.data[0].x) == ["Boston", "Austin"]
        assert list(fig.data[0].y) == [90000.0, 80000.0]


class TestExport:
    def test_written_spec_reloads(self, city_frame, tmp_path):
        path = tmp_path / "out" / "top.json"
        write_spec(top_cities(city_frame), path)
        spec = load_chart_spec(path)
        assert spec["config"] == CONFIG
        assert spec["data"][0]["type"] == "bar"
        assert "layout" in spec

    @patch("scripts.export_chart_specs.fetch_csv")
    def test_main_writes_both_specs(self, mock_fetch, city_frame, tmp_path):
        mock_fetch.return_value = city_frame
        assert main(["--url", "http://x/income.csv", "--out", str(tmp_path)]) == 0
        written = sorted(p.name for p in tmp_path.glob("*.json"))
        assert written == ["income_distribution_by_state.json", "top_city_incomes.json"]
        assert json.loads((tmp_path / "top_city_incomes.json").read_text())["config"] == CONFIG

    @patch("scripts.export_chart_specs.fetch_csv")
    def test_main_fetch_failure(self, mock_fetch, tmp_path):
        mock_fetch.side_effect = DataLoadError("could not fetch http://x")
        assert main(["--out", str(tmp_path)]) == 1
        assert list(tmp_path.iterdir()) == []
