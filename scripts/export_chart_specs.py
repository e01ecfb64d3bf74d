# scripts/export_chart_specs.py
# Builds the chart specs shown on the "Python" tab from the income CSV and writes
# them to data/charts/ as {data, layout, config} JSON.
from __future__ import annotations
from pathlib import Path
import argparse
import json
import sys

import plotly.express as px

from income_dashboard.config import CHARTS_DIR, Settings, configure_logging
from income_dashboard.loaders import DataLoadError, fetch_csv, normalize_records, top_n

CONFIG = {"displayModeBar": False, "responsive": True}


def income_distribution(frame):
    recs = normalize_records(frame, "State_Name", "Mean")
    fig = px.box(recs, x="name", y="mean", points=False,
                 labels={"name": "State", "mean": "Mean household income ($)"},
                 title="Distribution of Mean Income by State")
    fig.update_layout(margin={"r": 0, "t": 40, "l": 0, "b": 0}, xaxis_tickangle=-45)
    return fig


def top_cities(frame, n: int = 20):
    recs = top_n(normalize_records(frame, "City", "Mean"), n)
    fig = px.bar(recs, x="name", y="mean",
                 labels={"name": "City", "mean": "Mean household income ($)"},
                 title=f"Top {n} City Records by Mean Income")
    fig.update_traces(hovertemplate="<b>%{x}</b><br>Mean income: $%{y:,.0f}<extra></extra>")
    fig.update_layout(margin={"r": 0, "t": 40, "l": 0, "b": 0})
    return fig


def write_spec(fig, path: Path) -> None:
    spec = json.loads(fig.to_json())
    spec["config"] = CONFIG
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(spec), encoding="utf-8")
    print(f"✅ Wrote {path}")


def main(argv=None) -> int:
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(description="Export chart specs for the Python tab.")
    ap.add_argument("--url", default=settings.city_income_url, help="income CSV (City, State_Name, Mean)")
    ap.add_argument("--out", type=Path, default=CHARTS_DIR)
    args = ap.parse_args(argv)
    configure_logging(settings.log_level)

    try:
        frame = fetch_csv(args.url, settings.timeout)
    except DataLoadError as exc:
        print(f"❗ {exc}")
        return 1

    write_spec(income_distribution(frame), args.out / "income_distribution_by_state.json")
    write_spec(top_cities(frame), args.out / "top_city_incomes.json")
    return 0


if __name__ == "__main__":
    sys.exit(main())
