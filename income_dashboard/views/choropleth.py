# income_dashboard/views/choropleth.py
from __future__ import annotations
import numpy as np
import pandas as pd
import plotly.graph_objects as go

from income_dashboard.scales import SequentialColorScale

BORDER        = ("#fff", 0.5)
BORDER_ACTIVE = ("#000", 1.5)


def _identity_colorscale(fills: list[str]) -> list[list]:
    """Colorscale where z == i lands exactly on fills[i]."""
    if len(fills) == 1:
        return [[0.0, fills[0]], [1.0, fills[0]]]
    last = len(fills) - 1
    return [[i / last, c] for i, c in enumerate(fills)]


def hovered_region(hover_data) -> str | None:
    """Region name from a dcc.Graph hoverData payload (None on pointer-out)."""
    if hover_data and hover_data.get("points"):
        loc = hover_data["points"][0].get("location")
        return str(loc) if loc else None
    return None


def region_at(events, names) -> str | None:
    """Region name under a streamlit-plotly-events hover.

    None when nothing is hovered, when the point is not on the region trace
    (the colour legend is trace 1), or when it carries no usable index.
    """
    if not events:
        return None
    point = events[0]
    if point.get("curveNumber", 0) != 0:
        return None
    idx = point.get("pointIndex", point.get("pointNumber"))
    if idx is None or not 0 <= int(idx) < len(names):
        return None
    return str(names[int(idx)])


def choropleth_figure(geo: dict, regions: pd.DataFrame, scale: SequentialColorScale | None,
                      highlighted: str | None = None, *, width: int = 700, height: int = 500) -> go.Figure:
    """US states filled by joined mean income; unmatched regions keep the fallback fill."""
    fills = regions["fill"].tolist()
    active = regions["name"] == highlighted
    line_color = np.where(active, BORDER_ACTIVE[0], BORDER[0])
    line_width = np.where(active, BORDER_ACTIVE[1], BORDER[1])

    hover = regions["mean"].map(lambda v: f"${v:,.0f}" if pd.notna(v) else "No data")
    fig = go.Figure(go.Choropleth(
        geojson=geo,
        featureidkey="properties.name",
        locations=regions["name"],
        z=list(range(len(regions))),
        zmin=0, zmax=max(1, len(regions) - 1),
        colorscale=_identity_colorscale(fills) if fills else None,
        showscale=False,
        marker_line_color=line_color.tolist(),
        marker_line_width=line_width.tolist(),
        text=hover,
        hovertemplate="<b>%{location}</b><br>%{text}<extra></extra>",
    ))

    if scale is not None:
        lo, hi = scale.domain
        # colour legend only; the point itself is never drawn
        fig.add_trace(go.Scattergeo(
            lon=[None], lat=[None], mode="markers", hoverinfo="skip", showlegend=False,
            marker=dict(
                color=[lo], cmin=lo, cmax=hi, colorscale=scale.colorscale, showscale=True,
                colorbar=dict(title=dict(text="Mean Income ($)", side="top"), orientation="h",
                              x=1, xanchor="right", y=0, yanchor="top", len=0.45, thickness=15,
                              tickformat="$,.0f", nticks=5),
            ),
        ))

    fig.update_geos(scope="usa", projection_type="albers usa", fitbounds="locations", visible=False)
    fig.update_layout(
        title=dict(text="Mean Income by State", x=0.5, xanchor="center", font=dict(size=20)),
        width=width, height=height,
        margin=dict(l=40, r=40, t=40, b=40),
        paper_bgcolor="rgba(0,0,0,0)", geo_bgcolor="rgba(0,0,0,0)",
        uirevision="us-states",
    )
    return fig
