"""Tests for band/linear/colour scales and the formatting helpers."""

import math

import pytest
from plotly.colors import sample_colorscale

from income_dashboard.scales import (
    LinearScale,
    band_scale,
    color_scale,
    darker,
    format_money,
    measure_scale,
    nice_bounds,
    ticks,
)


class TestNiceAndTicks:
    def test_nice_rounds_upper_bound_outward(self):
        assert nice_bounds(0, 97.9) == (0, 100)
        assert nice_bounds(0, 110) == (0, 110)
        assert nice_bounds(0, 93_500) == (0, 100_000)

    def test_nice_leaves_degenerate_domain_alone(self):
        assert nice_bounds(0, 0) == (0, 0)

    def test_ticks(self):
        assert ticks(0, 110, 5) == [0, 20, 40, 60, 80, 100]
        assert ticks(0, 1, 2) == [0.0, 0.5, 1.0]
        assert ticks(3, 3, 5) == [3]


class TestMeasureScale:
    def test_padding_and_nice(self):
        y = measure_scale([50, 90], (400, 0))
        assert y.domain == (0, 100)
        assert y(0) == 400
        assert y(100) == 0
        assert y.extent(90) == pytest.approx(360)

    def test_without_nice_uses_exact_padding(self):
        y = measure_scale([100], (400, 0), nice=False)
        assert y.domain[1] == pytest.approx(110)

    def test_max_extent_matches_span_within_padding(self):
        values = [12_345.0, 67_890.5, 3_210.0, 45_000.0]
        span = 350.0
        y = measure_scale(values, (span, 0))
        top = max(values)
        assert y.domain[1] >= top * 1.1
        assert y.extent(top) == pytest.approx(span * top / y.domain[1])
        assert y.extent(top) <= span / 1.1 + 1e-9

    def test_monotonic(self):
        values = [5.0, 1.0, 9.5, 3.3, 7.0, 0.0]
        y = measure_scale(values, (300, 0))
        extents = [y.extent(v) for v in sorted(values)]
        assert extents == sorted(extents)

    def test_ignores_non_finite_values(self):
        y = measure_scale([10, float("nan"), None], (100, 0), nice=False)
        assert y.domain[1] == pytest.approx(11)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            measure_scale([], (100, 0))

    def test_degenerate_domain_maps_to_midpoint(self):
        y = LinearScale(domain=(0.0, 0.0), range=(100.0, 0.0))
        assert y(0) == 50

    def test_invert_maps_pixels_back(self):
        y = measure_scale([50, 90], (400, 0))
        assert y.invert(400) == 0
        assert y.invert(y(72.5)) == pytest.approx(72.5)


class TestBandScale:
    def test_positions_and_bandwidth(self):
        x = band_scale(["a", "b", "c"], (0, 100), padding=0.2)
        assert x.step == pytest.approx(31.25)
        assert x.bandwidth == pytest.approx(25)
        assert [x(n) for n in "abc"] == pytest.approx([6.25, 37.5, 68.75])
        assert x.center("b") == pytest.approx(50)

    def test_unknown_name_has_no_position(self):
        assert band_scale(["a"], (0, 10))("z") is None

    def test_duplicates_keep_first_position(self):
        x = band_scale(["a", "b", "a"], (0, 100))
        assert x.domain == ("a", "b")

    def test_order_is_callers(self):
        x = band_scale(["z", "a"], (0, 100))
        assert x("z") < x("a")

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            band_scale([], (0, 100))


class TestColorScale:
    def test_domain_is_min_max(self):
        c = color_scale([30, 10, 20])
        assert c.domain == (10, 30)

    def test_endpoints_match_colorscale(self):
        c = color_scale([10, 20], "Blues")
        lo, hi = sample_colorscale("Blues", [0.0, 1.0])
        assert c(10) == lo
        assert c(20) == hi
        assert c.range() == (lo, hi)

    def test_out_of_range_clamps(self):
        c = color_scale([10, 20])
        assert c(-100) == c(10)
        assert c(1e9) == c(20)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            color_scale([float("nan")])


class TestHelpers:
    def test_format_money(self):
        assert format_money(1234.4) == "$1,234"
        assert format_money(56789.123, 2) == "$56,789.12"
        assert format_money(-5) == "-$5"

    def test_darker(self):
        assert darker("#646464", 1) == "rgb(70, 70, 70)"
        assert darker("rgb(100, 200, 10)", 0) == "rgb(100, 200, 10)"

    def test_darker_is_darker(self):
        r, g, b = (int(v) for v in darker("#3498db", 0.7)[4:-1].split(","))
        assert (r, g, b) < (0x34, 0x98, 0xdb)
        assert math.isclose(b, 0xdb * 0.7 ** 0.7, abs_tol=1)

    def test_darker_rejects_named_colours(self):
        with pytest.raises(ValueError):
            darker("steelblue")
