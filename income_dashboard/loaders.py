# income_dashboard/loaders.py
"""Fetch remote income datasets and normalize them into record tables.

A record table is a DataFrame with a ``name`` column (category) and a finite
``mean`` column (measure). Anything that cannot be coerced is dropped here so
the scale and mark code never sees NaN.
"""
from __future__ import annotations
from io import StringIO
from pathlib import Path
from dataclasses import dataclass, field
import json
import logging

import numpy as np
import pandas as pd
import requests

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ["name", "mean"]


class DataLoadError(RuntimeError):
    """A remote or bundled resource could not be fetched or parsed."""


# ---------------- Fetch ----------------
def _get(url: str, timeout: float) -> requests.Response:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise DataLoadError(f"could not fetch {url}: {exc}") from exc
    return resp


def fetch_json(url: str, timeout: float = 30.0):
    resp = _get(url, timeout)
    try:
        return resp.json()
    except ValueError as exc:
        raise DataLoadError(f"{url} did not return valid JSON: {exc}") from exc


def fetch_csv(url: str, timeout: float = 30.0) -> pd.DataFrame:
    resp = _get(url, timeout)
    try:
        return pd.read_csv(StringIO(resp.text), dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise DataLoadError(f"{url} did not return a readable CSV: {exc}") from exc


# ---------------- Normalize ----------------
def empty_records() -> pd.DataFrame:
    return pd.DataFrame({"name": pd.Series(dtype=str), "mean": pd.Series(dtype=float)})


def normalize_records(frame: pd.DataFrame, key: str, value: str,
                      carry: tuple[str, ...] = ()) -> pd.DataFrame:
    """Coerce ``value`` to float and keep only rows with a finite measure and a key.

    Columns named in ``carry`` are copied through unchanged, ahead of name/mean.
    """
    missing = [c for c in (key, value, *carry) if c not in frame.columns]
    if missing:
        raise DataLoadError(f"missing columns: {', '.join(missing)}")

    out = frame[list(carry)].copy()
    out["name"] = frame[key]
    out["mean"] = pd.to_numeric(frame[value], errors="coerce").astype(float)
    keep = np.isfinite(out["mean"]) & out["name"].notna()
    dropped = int((~keep).sum())
    if dropped:
        logger.debug("dropped %d row(s) with unusable %s/%s", dropped, key, value)
    out = out[keep].copy()
    out["name"] = out["name"].astype(str)
    return out.reset_index(drop=True)


def highest_per_name(records: pd.DataFrame) -> pd.DataFrame:
    """One row per name (its highest measure), descending; ties keep input order."""
    if records.empty:
        return records
    return (records.sort_values("mean", ascending=False, kind="stable")
                   .drop_duplicates("name")
                   .reset_index(drop=True))


def top_n(records: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """Descending by measure; ties keep their input order."""
    return (records.sort_values("mean", ascending=False, kind="stable")
                   .head(n).reset_index(drop=True))


def split_groupings(frame: pd.DataFrame, city_col: str = "City",
                    state_col: str = "State_Name", value_col: str = "Mean") -> tuple[pd.DataFrame, pd.DataFrame]:
    """City-level and state-level record lists from one income CSV.

    Cities are named "City, State" so same-named cities in different states
    stay apart.
    """
    cities = normalize_records(frame, city_col, value_col, carry=(state_col,))
    state = cities.pop(state_col)
    cities["name"] = np.where(state.notna(), cities["name"] + ", " + state.astype(str), cities["name"])
    states = normalize_records(frame, state_col, value_col)
    return highest_per_name(cities), highest_per_name(states)


# ---------------- Datasets ----------------
@dataclass
class StateIncome:
    states: pd.DataFrame = field(default_factory=empty_records)
    cities: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame({"state": pd.Series(dtype=str),
                                              "name": pd.Series(dtype=str),
                                              "mean": pd.Series(dtype=float)})
    )

    def __len__(self) -> int:
        return len(self.states)

    def state(self, name: str) -> pd.Series | None:
        hit = self.states[self.states["name"] == name]
        return None if hit.empty else hit.iloc[0]

    def cities_of(self, name: str) -> pd.DataFrame:
        sub = self.cities[self.cities["state"] == name]
        return highest_per_name(sub[RECORD_COLUMNS])


def parse_state_income(payload) -> StateIncome:
    """``[{state, mean, cities: [{city, mean}, ...]}, ...]`` -> StateIncome."""
    if not isinstance(payload, list):
        raise DataLoadError(f"expected a list of states, got {type(payload).__name__}")

    rows = [p for p in payload if isinstance(p, dict)]
    states = normalize_records(pd.DataFrame(rows, columns=["state", "mean"]), "state", "mean")

    city_rows = []
    for p in rows:
        for c in p.get("cities") or []:
            if isinstance(c, dict):
                city_rows.append({"state": p.get("state"), "city": c.get("city"), "mean": c.get("mean")})
    raw = pd.DataFrame(city_rows, columns=["state", "city", "mean"])
    cities = normalize_records(raw, "city", "mean", carry=("state",))
    cities["state"] = cities["state"].astype(str)

    return StateIncome(states=states, cities=cities)


def load_state_income(url: str, timeout: float = 30.0) -> StateIncome:
    data = parse_state_income(fetch_json(url, timeout))
    logger.info("loaded income for %d states (%d cities)", len(data.states), len(data.cities))
    return data


def load_city_state_income(url: str, timeout: float = 30.0) -> tuple[pd.DataFrame, pd.DataFrame]:
    cities, states = split_groupings(fetch_csv(url, timeout))
    logger.info("loaded %d cities / %d states from %s", len(cities), len(states), url)
    return cities, states


# ---------------- Chart specs ----------------
def list_chart_specs(directory: Path) -> list[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("chart spec directory %s does not exist", directory)
        return []
    return sorted(directory.glob("*.json"))


def load_chart_spec(path: Path) -> dict | None:
    """Read a bundled ``{data, layout, config}`` file; None when unusable."""
    try:
        with open(path, encoding="utf-8") as f:
            spec = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("could not read chart spec %s: %s", path, exc)
        return None
    if not isinstance(spec, dict):
        logger.warning("chart spec %s is not an object", path)
        return None
    return spec
