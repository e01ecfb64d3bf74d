# income_dashboard/scales.py
"""Value -> drawing-space mappings shared by every chart.

Band scales place categories along x, linear scales map measures to pixel
extents (with d3-style "nice" bounds and ticks), and sequential colour scales
fill choropleth regions. All of them refuse empty input; views check for an
empty record list before building a scale.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence
import math

from plotly.colors import hex_to_rgb, label_rgb, sample_colorscale, unlabel_rgb

_E10, _E5, _E2 = math.sqrt(50), math.sqrt(10), math.sqrt(2)


# ---------------- Ticks / nice ----------------
def tick_increment(start: float, stop: float, count: int) -> float:
    """Positive: tick step. Negative: inverse of a fractional step (-1/step)."""
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / (10 ** power)
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power >= 0:
        return factor * 10 ** power
    return -(10 ** -power) / factor


def nice_bounds(start: float, stop: float, count: int = 10) -> tuple[float, float]:
    if not (math.isfinite(start) and math.isfinite(stop)) or stop <= start or count <= 0:
        return start, stop
    prestep = None
    for _ in range(10):
        step = tick_increment(start, stop, count)
        if step == prestep:
            break
        if step > 0:
            start, stop = math.floor(start / step) * step, math.ceil(stop / step) * step
        elif step < 0:
            start, stop = math.ceil(start * step) / step, math.floor(stop * step) / step
        else:
            break
        prestep = step
    return start, stop


def ticks(start: float, stop: float, count: int = 10) -> list[float]:
    if count <= 0 or not (math.isfinite(start) and math.isfinite(stop)):
        return []
    if start == stop:
        return [start]
    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    inc = tick_increment(lo, hi, count)
    if inc > 0:
        i0, i1 = math.ceil(lo / inc), math.floor(hi / inc)
        out = [i * inc for i in range(i0, i1 + 1)]
    else:
        inv = -inc
        i0, i1 = math.ceil(lo * inv), math.floor(hi * inv)
        out = [i / inv for i in range(i0, i1 + 1)]
    return out[::-1] if reverse else out


# ---------------- Scales ----------------
@dataclass(frozen=True)
class LinearScale:
    domain: tuple[float, float]
    range: tuple[float, float]

    def __call__(self, value: float) -> float:
        (d0, d1), (r0, r1) = self.domain, self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, px: float) -> float:
        (d0, d1), (r0, r1) = self.domain, self.range
        if r1 == r0:
            return d0
        return d0 + (px - r0) / (r1 - r0) * (d1 - d0)

    def extent(self, value: float) -> float:
        """Pixel length from the domain's zero point to ``value``."""
        return abs(self(value) - self(self.domain[0]))

    def ticks(self, count: int = 10) -> list[float]:
        return ticks(self.domain[0], self.domain[1], count)


@dataclass(frozen=True)
class BandScale:
    domain: tuple[str, ...]
    range: tuple[float, float]
    padding: float = 0.2

    @property
    def step(self) -> float:
        n = len(self.domain)
        r0, r1 = self.range
        return (r1 - r0) / max(1.0, n - self.padding + 2 * self.padding)

    @property
    def bandwidth(self) -> float:
        return self.step * (1 - self.padding)

    def __call__(self, name: str) -> float | None:
        try:
            i = self.domain.index(name)
        except ValueError:
            return None
        r0, r1 = self.range
        n = len(self.domain)
        start = r0 + (r1 - r0 - self.step * (n - self.padding)) / 2
        return start + self.step * i

    def center(self, name: str) -> float | None:
        x = self(name)
        return None if x is None else x + self.bandwidth / 2


@dataclass(frozen=True)
class SequentialColorScale:
    domain: tuple[float, float]
    colorscale: str = "Blues"

    def __call__(self, value: float) -> str:
        lo, hi = self.domain
        t = 0.5 if hi == lo else (value - lo) / (hi - lo)
        return sample_colorscale(self.colorscale, [min(1.0, max(0.0, t))])[0]

    def range(self) -> tuple[str, str]:
        lo, hi = sample_colorscale(self.colorscale, [0.0, 1.0])
        return lo, hi


# ---------------- Builders ----------------
def _finite(values: Iterable[float]) -> list[float]:
    return [float(v) for v in values if v is not None and math.isfinite(float(v))]


def band_scale(names: Sequence[str], extent: tuple[float, float], padding: float = 0.2) -> BandScale:
    """Distinct names in the order given (callers pre-sort for top-N views)."""
    domain = tuple(dict.fromkeys(names))
    if not domain:
        raise ValueError("cannot build a band scale from an empty record list")
    return BandScale(domain=domain, range=extent, padding=padding)


def measure_scale(values: Iterable[float], extent: tuple[float, float],
                  padding_factor: float = 1.1, nice: bool = True) -> LinearScale:
    """``[0, max * padding_factor]`` onto ``extent`` (baseline first, top second)."""
    vals = _finite(values)
    if not vals:
        raise ValueError("cannot build a measure scale from an empty record list")
    top = max(vals) * padding_factor
    lo, hi = (0.0, top) if top >= 0 else (top, 0.0)
    if nice:
        lo, hi = nice_bounds(lo, hi)
    return LinearScale(domain=(lo, hi), range=extent)


def color_scale(values: Iterable[float], colorscale: str = "Blues") -> SequentialColorScale:
    vals = _finite(values)
    if not vals:
        raise ValueError("cannot build a colour scale from an empty record list")
    return SequentialColorScale(domain=(min(vals), max(vals)), colorscale=colorscale)


# ---------------- Formatting / colour helpers ----------------
def format_money(value: float, decimals: int = 0) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


def darker(color: str, k: float = 1.0) -> str:
    """Scale each channel by 0.7**k (d3's color.darker)."""
    c = color.strip()
    if c.startswith("#"):
        rgb = hex_to_rgb(c)
    elif c.startswith("rgb"):
        rgb = unlabel_rgb(c)
    else:
        raise ValueError(f"unsupported colour {color!r}; use #rrggbb or rgb(...)")
    f = 0.7 ** k
    return label_rgb(tuple(int(round(max(0.0, min(255.0, ch * f)))) for ch in rgb[:3]))
