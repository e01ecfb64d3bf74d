"""Tests for the Streamlit front end, run headless through AppTest."""

import importlib.util
from unittest.mock import patch

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

from conftest import ROOT
from income_dashboard.loaders import split_groupings
from income_dashboard.views.detail_view import NO_SELECTION

SCRIPT = str(ROOT / "income_dashboard" / "streamlit_app.py")

pytestmark = pytest.mark.skipif(
    importlib.util.find_spec("streamlit_plotly_events") is not None,
    reason="map selection goes through the selectbox only without streamlit-plotly-events",
)


@pytest.fixture
def app(us_geo, state_income, city_frame):
    st.cache_data.clear()
    with patch("income_dashboard.geo.load_us_states", return_value=us_geo), \
         patch("income_dashboard.loaders.load_state_income", return_value=state_income), \
         patch("income_dashboard.loaders.load_city_state_income", return_value=split_groupings(city_frame)):
        at = AppTest.from_file(SCRIPT, default_timeout=30)
        at.run()
        yield at
    st.cache_data.clear()


class TestStreamlitApp:
    def test_renders_without_errors(self, app):
        assert not app.exception
        assert app.title[0].value == "House Prices and Income Analysis"
        assert "Loaded data for 2 states." in [c.value for c in app.caption]

    def test_nothing_selected_at_first(self, app):
        assert NO_SELECTION in [i.value for i in app.info]

    def test_picking_a_state_shows_its_cities(self, app):
        app.selectbox(key="fallback_pick").select("Alpha").run()
        assert not app.exception
        assert NO_SELECTION not in [i.value for i in app.info]

    def test_state_without_cities(self, app):
        app.selectbox(key="fallback_pick").select("Beta").run()
        assert "No city data for Beta" in [i.value for i in app.info]

    def test_clearing_the_pick_keeps_the_selection(self, app):
        app.selectbox(key="fallback_pick").select("Beta").run()
        app.selectbox(key="fallback_pick").select("").run()
        assert "No city data for Beta" in [i.value for i in app.info]
