# app_dash.py
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from uuid import uuid4
import logging

import pandas as pd
from dash import Dash, dcc, html, Input, Output, State, no_update
from dash.exceptions import PreventUpdate

from income_dashboard.config import Settings, configure_logging
from income_dashboard.geo import join_regions, load_us_states
from income_dashboard.loaders import (DataLoadError, StateIncome, list_chart_specs, load_chart_spec,
                                      load_city_state_income, load_state_income, top_n)
from income_dashboard.scales import SequentialColorScale, color_scale
from income_dashboard.state import ClientViews, SelectionState, ViewSession, load_into
from income_dashboard.views.bar_chart import REVEAL_JS, ranking_figure
from income_dashboard.views.chart_spec import chart_spec_view
from income_dashboard.views.choropleth import choropleth_figure, hovered_region
from income_dashboard.views.detail_view import NO_SELECTION, detail_view
from income_dashboard.views.widget_embed import EmbedResource

logger = logging.getLogger(__name__)

SETTINGS = Settings.from_env()
CLIENTS  = ClientViews()

TABS = [
    ("map", "Choropleth Map"),
    ("dualchart", "Bar Chart"),
    ("tableau", "Tableau"),
    ("python", "Python"),
]
REVEALED_GRAPHS = ("top-cities", "top-states", "detail-chart")
LOADING = "Loading data..."
MUTED   = {"fontSize": "14px", "color": "#4b5563"}
CARD    = {"background": "#fff", "borderRadius": "8px", "border": "1px solid #e5e7eb",
           "boxShadow": "0 1px 3px rgba(0,0,0,0.08)", "padding": "8px"}


def loading_text(text: str = LOADING):
    return html.P(text, className="loading", style=MUTED)


# ---------------- Datasets (cached per URL) ----------------
@dataclass(frozen=True)
class MapData:
    geo: dict
    income: StateIncome
    scale: SequentialColorScale
    regions: pd.DataFrame


@lru_cache(maxsize=8)
def load_map_data(topology_url: str, income_url: str, timeout: float) -> MapData:
    geo = load_us_states(topology_url, timeout)
    income = load_state_income(income_url, timeout)
    if len(income) == 0:
        raise DataLoadError(f"no state income records in {income_url}")
    scale = color_scale(income.states["mean"], "Blues")
    return MapData(geo, income, scale, join_regions(geo, income.states, scale))


@lru_cache(maxsize=8)
def load_rankings(url: str, timeout: float) -> dict[str, pd.DataFrame]:
    cities, states = load_city_state_income(url, timeout)
    if cities.empty or states.empty:
        raise DataLoadError(f"no city or state records in {url}")
    return {"cities": top_n(cities, 10), "states": top_n(states, 10)}


def map_data() -> MapData:
    return load_map_data(SETTINGS.topology_url, SETTINGS.state_income_url, SETTINGS.timeout)


def rankings() -> dict[str, pd.DataFrame]:
    return load_rankings(SETTINGS.city_income_url, SETTINGS.timeout)


def loaded(loader):
    """Dataset for a hover callback; a failed load leaves the figure as it is."""
    try:
        return loader()
    except DataLoadError as exc:
        logger.warning("skipping update: %s", exc)
        raise PreventUpdate from exc


# ---------------- Tab content ----------------
def map_tab(session: ViewSession):
    load_into(session, "map", map_data)
    data = session.get("map")
    if data is None:
        return html.Div([loading_text()])

    return html.Div([
        html.P(f"Loaded data for {len(data.income)} states.", style=MUTED),
        html.Div([
            html.Div(
                dcc.Graph(id="state-map", figure=map_figure(data), clear_on_unhover=True,
                          config={"displayModeBar": False}),
                style={"flex": "2", "minWidth": "540px"},
            ),
            html.Div(id="detail-panel", children=loading_text(NO_SELECTION),
                     style={**CARD, "flex": "1", "minWidth": "320px"}),
        ], style={"display": "flex", "gap": "12px"}),
        dcc.Store(id="selected-state"),
        dcc.Store(id="detail-values", data={}),
        dcc.Store(id="detail-chart-revealed"),
    ])


def dual_tab(session: ViewSession):
    load_into(session, "rankings", rankings)
    ranked = session.get("rankings")
    if ranked is None:
        return html.Div([loading_text()])

    return html.Div([
        dcc.Graph(id="top-cities", figure=top_figure(ranked, "cities"), clear_on_unhover=True),
        dcc.Graph(id="top-states", figure=top_figure(ranked, "states"), clear_on_unhover=True),
        dcc.Store(id="top-cities-revealed"),
        dcc.Store(id="top-states-revealed"),
    ], style={"display": "flex", "flexWrap": "wrap", "justifyContent": "center", "gap": "20px",
              "background": "#f8f9fa", "padding": "20px", "borderRadius": "8px",
              "boxShadow": "0 4px 12px rgba(0,0,0,0.1)"})


def tableau_tab(session: ViewSession):
    embed = EmbedResource()
    with session.scoped("tableau", embed.acquire, embed.release) as viz:
        doc = viz.document()
    return html.Iframe(srcDoc=doc, style={"width": "100%", "height": "80vh", "border": "none"})


def python_tab(session: ViewSession):
    specs = list_chart_specs(SETTINGS.charts_dir)
    session.apply("specs", specs)
    options = [{"label": p.stem.replace("_", " ").title(), "value": str(p)} for p in specs]
    return html.Div([
        dcc.Dropdown(id="chart-spec-select", options=options,
                     value=(options[0]["value"] if options else None),
                     clearable=False, style={"width": "360px", "marginBottom": "12px"}),
        html.Div(id="chart-spec-panel", children=chart_spec_view(None)),
    ])


TAB_BUILDERS = {"map": map_tab, "dualchart": dual_tab, "tableau": tableau_tab, "python": python_tab}


# ---------------- Figures ----------------
def map_figure(data: MapData, highlighted: str | None = None):
    return choropleth_figure(data.geo, data.regions, data.scale, highlighted=highlighted)


TOP_STYLE = {"cities": ("Top 10 Cities", "#3498db"), "states": ("Top 10 States", "#e74c3c")}


def top_figure(ranked: dict, which: str, hovered: str | None = None, reveal: bool = True):
    title, color = TOP_STYLE[which]
    return ranking_figure(ranked[which], title, color, hovered=hovered, reveal=reveal)


def hovered_bar(hover_data) -> str | None:
    if hover_data and hover_data.get("points"):
        key = hover_data["points"][0].get("customdata")
        return str(key) if key is not None else None
    return None


# ---------------- Callbacks ----------------
def render_tab(tab, client_id):
    builder = TAB_BUILDERS.get(tab)
    if builder is None or not client_id:
        raise PreventUpdate
    lifecycle = CLIENTS.lifecycle(client_id)
    session = lifecycle.mount(tab)
    content = builder(session)
    if not lifecycle.is_live(session):
        # this client switched tabs while the old one was loading
        raise PreventUpdate
    return content


def highlight_region(hover_data):
    return map_figure(loaded(map_data), highlighted=hovered_region(hover_data))


def select_state(hover_data, current):
    name = hovered_region(hover_data)
    if not name:
        raise PreventUpdate
    snapshot = SelectionState(current).select(name)
    if snapshot.name == current:
        return no_update
    return snapshot.name


def update_detail(selected, previous):
    previous = previous or {}
    detail = detail_view(selected, loaded(map_data).income, previous=previous)
    diff = detail.diff
    logger.debug("detail %s: +%d ~%d -%d", selected, len(diff.enter), len(diff.update), len(diff.exit))
    if detail.figure is None:
        return loading_text(detail.message), {}
    if diff.unchanged and detail.values == previous:
        return no_update, no_update
    graph = dcc.Graph(id="detail-chart", figure=detail.figure, config={"displayModeBar": False})
    return graph, detail.values


def hover_ranking(hover_data, which: str):
    return top_figure(loaded(rankings), which, hovered=hovered_bar(hover_data), reveal=False)


def show_chart_spec(path):
    if not path:
        return chart_spec_view(None)
    return chart_spec_view(load_chart_spec(path))


def register_callbacks(app: Dash) -> None:
    app.callback(Output("tab-content", "children"), Input("tabs", "value"),
                 State("client-id", "data"))(render_tab)
    app.callback(Output("state-map", "figure"), Input("state-map", "hoverData"),
                 prevent_initial_call=True)(highlight_region)
    app.callback(Output("selected-state", "data"), Input("state-map", "hoverData"),
                 State("selected-state", "data"), prevent_initial_call=True)(select_state)
    app.callback(Output("detail-panel", "children"), Output("detail-values", "data"),
                 Input("selected-state", "data"), State("detail-values", "data"),
                 prevent_initial_call=True)(update_detail)
    app.callback(Output("top-cities", "figure"), Input("top-cities", "hoverData"),
                 prevent_initial_call=True)(lambda h: hover_ranking(h, "cities"))
    app.callback(Output("top-states", "figure"), Input("top-states", "hoverData"),
                 prevent_initial_call=True)(lambda h: hover_ranking(h, "states"))
    app.callback(Output("chart-spec-panel", "children"), Input("chart-spec-select", "value"))(show_chart_spec)
    for graph in REVEALED_GRAPHS:
        app.clientside_callback(REVEAL_JS, Output(f"{graph}-revealed", "data"),
                                Input(graph, "figure"), State(graph, "id"))


# ---------------- Dash app ----------------
def build_layout():
    """Page shell; served fresh per page load so every client gets its own id."""
    return html.Div(
        style={"padding": "16px", "fontFamily": "Inter, system-ui, -apple-system, Segoe UI, Roboto, sans-serif"},
        children=[
            dcc.Store(id="client-id", data=uuid4().hex),
            html.Header([
                html.H1("House Prices and Income Analysis", style={"margin": "0 0 12px 0"}),
                dcc.Tabs(id="tabs", value="map",
                         children=[dcc.Tab(label=label, value=value) for value, label in TABS]),
            ]),
            html.Div(id="tab-content", style={"marginTop": "16px"}),
        ],
    )


def create_app() -> Dash:
    app = Dash(__name__, suppress_callback_exceptions=True)
    app.title = "House Prices and Income Analysis"
    app.layout = build_layout
    register_callbacks(app)
    return app


app = create_app()
server = app.server

if __name__ == "__main__":
    configure_logging(SETTINGS.log_level)
    app.run(debug=SETTINGS.debug)
