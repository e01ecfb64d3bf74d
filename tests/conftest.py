"""Shared fixtures for the income dashboard tests."""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from income_dashboard.loaders import parse_state_income


CITY_CSV = """City,State_Name,Mean
Austin,Texas,70000
Dallas,Texas,50000
Boston,Massachusetts,90000
Austin,Texas,80000
Nowhere,Nevada,n/a
Reno,Nevada,
"""


@pytest.fixture
def city_csv_text():
    return CITY_CSV


@pytest.fixture
def city_frame():
    from io import StringIO
    return pd.read_csv(StringIO(CITY_CSV), dtype=str)


@pytest.fixture
def state_income_payload():
    return [
        {"state": "Alpha", "mean": 60000,
         "cities": [{"city": "A1", "mean": 50000}, {"city": "A2", "mean": 70000}, {"city": "A3", "mean": "x"}]},
        {"state": "Beta", "mean": 80000, "cities": []},
        {"state": "Gamma", "mean": "n/a", "cities": [{"city": "G1", "mean": 1}]},
    ]


@pytest.fixture
def state_income(state_income_payload):
    return parse_state_income(state_income_payload)


@pytest.fixture
def topology():
    """Quantized topology: a square built from two arcs, a triangle, and a multipolygon."""
    return {
        "type": "Topology",
        "transform": {"scale": [1, 1], "translate": [0, 0]},
        "arcs": [
            [[0, 0], [1, 0], [0, 1]],
            [[1, 1], [-1, 0], [0, -1]],
            [[5, 5], [1, 0], [0, 1], [-1, 0], [0, -1]],
            [[2, 0], [1, 0], [0, 1], [-1, -1]],
        ],
        "objects": {
            "states": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": "01", "arcs": [[0, 1]], "properties": {"name": "Alpha"}},
                    {"type": "Polygon", "id": "02", "arcs": [[3]], "properties": {"name": "Beta"}},
                    {"type": "MultiPolygon", "id": "03", "arcs": [[[2]]], "properties": {"name": "Delta"}},
                ],
            }
        },
    }


def _polygon(fid, name, ring):
    return {"type": "Feature", "id": fid, "properties": {"name": name},
            "geometry": {"type": "Polygon", "coordinates": [ring]}}


@pytest.fixture
def us_geo():
    """Decoded regions: Alpha and Beta have income records, Delta has none."""
    return {"type": "FeatureCollection", "features": [
        _polygon("01", "Alpha", [[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]),
        _polygon("02", "Beta", [[2, 0], [3, 0], [3, 1], [2, 0]]),
        _polygon("03", "Delta", [[5, 5], [6, 5], [6, 6], [5, 6], [5, 5]]),
    ]}


def find_component(tree, component_id):
    """Depth-first search of a Dash component tree by id."""
    if tree is None:
        return None
    if getattr(tree, "id", None) == component_id:
        return tree
    children = getattr(tree, "children", None)
    if isinstance(children, (list, tuple)):
        for child in children:
            hit = find_component(child, component_id)
            if hit is not None:
                return hit
    elif children is not None and not isinstance(children, str):
        return find_component(children, component_id)
    return None


def collect_text(tree) -> str:
    """All string children in a component tree, joined."""
    if tree is None:
        return ""
    if isinstance(tree, str):
        return tree
    if isinstance(tree, (list, tuple)):
        return " ".join(collect_text(c) for c in tree)
    return collect_text(getattr(tree, "children", None))
