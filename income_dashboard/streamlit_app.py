# income_dashboard/streamlit_app.py
# streamlit run income_dashboard/streamlit_app.py
from __future__ import annotations
import streamlit as st
import streamlit.components.v1 as components

from income_dashboard.config import Settings, configure_logging
from income_dashboard.geo import join_regions, load_us_states
from income_dashboard.loaders import (list_chart_specs, load_chart_spec, load_city_state_income,
                                      load_state_income, top_n)
from income_dashboard.scales import color_scale
from income_dashboard.state import SelectionState, ViewSession, load_into
from income_dashboard.views.bar_chart import ranking_figure
from income_dashboard.views.choropleth import choropleth_figure, region_at
from income_dashboard.views.detail_view import detail_view
from income_dashboard.views.widget_embed import EmbedResource

# Optional hover-to-select
try:
    from streamlit_plotly_events import plotly_events
    HAS_EVENTS = True
except ImportError:
    HAS_EVENTS = False

SETTINGS = Settings.from_env()
configure_logging(SETTINGS.log_level)

st.set_page_config(page_title="House Prices and Income Analysis", layout="wide")


# ---------- loaders (cached per process) ----------
@st.cache_data(show_spinner=False)
def _us_states(url: str, timeout: float):
    return load_us_states(url, timeout)


@st.cache_data(show_spinner=False)
def _state_income(url: str, timeout: float):
    return load_state_income(url, timeout)


@st.cache_data(show_spinner=False)
def _city_state_income(url: str, timeout: float):
    return load_city_state_income(url, timeout)


if "selection" not in st.session_state:
    st.session_state.selection = SelectionState()


# ---------- views ----------
def map_view(session: ViewSession) -> None:
    load_into(session, "geo", lambda: _us_states(SETTINGS.topology_url, SETTINGS.timeout))
    load_into(session, "income", lambda: _state_income(SETTINGS.state_income_url, SETTINGS.timeout))
    us, income = session.get("geo"), session.get("income")
    if us is None or income is None or len(income) == 0:
        st.caption("Loading data...")
        return
    st.caption(f"Loaded data for {len(income)} states.")

    scale = color_scale(income.states["mean"], "Blues")
    regions = join_regions(us, income.states, scale)
    selection: SelectionState = st.session_state.selection

    col_map, col_detail = st.columns([2, 1])
    with col_map:
        fig = choropleth_figure(us, regions, scale, highlighted=selection.current.name)
        if HAS_EVENTS:
            ev = plotly_events(fig, click_event=False, hover_event=True, select_event=False, key="state_map")
            selection.select(region_at(ev, regions["name"].tolist()))
        else:
            st.plotly_chart(fig, use_container_width=True, key="state_map")
            names = regions.loc[regions["mean"].notna(), "name"].sort_values().tolist()
            picked = st.selectbox("Select state", [""] + names, key="fallback_pick")
            selection.select(picked)

    with col_detail:
        detail = detail_view(selection.current.name, income, reveal=False)
        if detail.figure is None:
            st.info(detail.message)
        else:
            st.plotly_chart(detail.figure, use_container_width=True, key="detail_chart")


def dual_view(session: ViewSession) -> None:
    load_into(session, "rankings",
              lambda: _city_state_income(SETTINGS.city_income_url, SETTINGS.timeout))
    rankings = session.get("rankings")
    if rankings is None or rankings[0].empty or rankings[1].empty:
        st.caption("Loading data...")
        return
    cities, states = rankings
    c1, c2 = st.columns(2)
    c1.plotly_chart(ranking_figure(top_n(cities, 10), "Top 10 Cities", "#3498db", reveal=False), key="top_cities")
    c2.plotly_chart(ranking_figure(top_n(states, 10), "Top 10 States", "#e74c3c", reveal=False), key="top_states")


def tableau_view(session: ViewSession) -> None:
    embed = EmbedResource()
    with session.scoped("tableau", embed.acquire, embed.release) as viz:
        components.html(viz.document(), height=800, scrolling=True)


def python_view(session: ViewSession) -> None:
    specs = list_chart_specs(SETTINGS.charts_dir)
    if not specs:
        st.caption("Loading chart...")
        return
    path = st.selectbox("Chart", specs, format_func=lambda p: p.stem.replace("_", " ").title())
    spec = load_chart_spec(path)
    if not spec:
        st.caption("Loading chart...")
        return
    st.plotly_chart({"data": spec.get("data", []), "layout": spec.get("layout", {})},
                    config=spec.get("config") or {}, key="chart_spec")


# ---------- UI ----------
st.title("House Prices and Income Analysis")

VIEWS = [("map", "Choropleth Map", map_view), ("dualchart", "Bar Chart", dual_view),
         ("tableau", "Tableau", tableau_view), ("python", "Python", python_view)]

for tab, (view, _, render) in zip(st.tabs([label for _, label, _ in VIEWS]), VIEWS):
    with tab:
        session = ViewSession(view=view, token=0)
        try:
            render(session)
        finally:
            session.close()
