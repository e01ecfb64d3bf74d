# income_dashboard/geo.py
from __future__ import annotations
from io import BytesIO
import json
import logging

import geopandas as gpd
import numpy as np
import pandas as pd

from income_dashboard.loaders import DataLoadError, fetch_json
from income_dashboard.scales import SequentialColorScale

logger = logging.getLogger(__name__)

FALLBACK_FILL = "#ccc"


# ---------------- TopoJSON -> GeoJSON ----------------
def topology_to_features(topology: dict, object_name: str = "states") -> dict:
    """One named object of a TopoJSON topology as a GeoJSON FeatureCollection.

    GDAL's TopoJSON driver exposes every topology object as a layer; the
    object's ``id`` becomes the feature id and its properties are kept.
    """
    objects = topology.get("objects") or {}
    if object_name not in objects:
        raise DataLoadError(f"topology has no object {object_name!r} (found: {', '.join(objects) or 'none'})")
    try:
        gdf = gpd.read_file(BytesIO(json.dumps(topology).encode("utf-8")), layer=object_name)
    except (ValueError, RuntimeError, OSError) as exc:
        raise DataLoadError(f"could not read topology object {object_name!r}: {exc}") from exc
    if "id" in gdf.columns:
        gdf = gdf.set_index("id")
    return json.loads(gdf.to_json())


def as_feature_collection(doc, object_name: str = "states") -> dict:
    kind = doc.get("type") if isinstance(doc, dict) else None
    if kind == "Topology":
        return topology_to_features(doc, object_name)
    if kind == "FeatureCollection":
        return doc
    raise DataLoadError(f"expected a TopoJSON Topology or GeoJSON FeatureCollection, got {kind!r}")


def load_us_states(url: str, timeout: float = 30.0, object_name: str = "states") -> dict:
    geo = as_feature_collection(fetch_json(url, timeout), object_name)
    logger.info("loaded %d region(s) from %s", len(geo["features"]), url)
    return geo


# ---------------- Join ----------------
def region_name(feature: dict) -> str:
    return str((feature.get("properties") or {}).get("name", ""))


def join_regions(geo: dict, records: pd.DataFrame, scale: SequentialColorScale | None) -> pd.DataFrame:
    """One row per region: name, joined mean (NaN on a miss) and fill colour.

    The join is by display name. A region with no record, or when there is no
    scale at all, gets the fallback fill.
    """
    means = dict(zip(records["name"], records["mean"])) if not records.empty else {}
    rows = []
    for feat in geo.get("features", []):
        name = region_name(feat)
        mean = means.get(name, np.nan)
        hit = scale is not None and name in means
        rows.append({"id": feat.get("id"), "name": name, "mean": mean,
                     "fill": scale(mean) if hit else FALLBACK_FILL})
    out = pd.DataFrame(rows, columns=["id", "name", "mean", "fill"])
    misses = int(out["mean"].isna().sum())
    if misses:
        logger.debug("%d region(s) had no income record", misses)
    return out
