# income_dashboard/marks.py
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Sequence
import logging

import pandas as pd

from income_dashboard.scales import BandScale, LinearScale, darker, format_money

logger = logging.getLogger(__name__)

HOVER_STROKE = "#333"


@dataclass(frozen=True)
class Mark:
    """One bar, keyed by its category name. Geometry is final (post-reveal) pixels."""
    key: str
    value: float
    x: float
    width: float
    y: float
    height: float
    fill: str
    delay_ms: int = 0
    duration_ms: int = 1000
    label: str | None = None
    stroke: str | None = None
    stroke_width: float = 0.0

    @property
    def baseline(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> float:
        return self.x + self.width / 2

    def initial(self) -> "Mark":
        """State before the reveal: zero height sitting on the baseline."""
        return replace(self, y=self.baseline, height=0.0)

    def hovered(self, decimals: int = 2) -> "Mark":
        return replace(self, fill=darker(self.fill, 0.7), stroke=HOVER_STROKE, stroke_width=2.0,
                       label=format_money(self.value, decimals))


def bar_marks(records: pd.DataFrame, x: BandScale, y: LinearScale, fill: str,
              stagger_ms: int = 100, duration_ms: int = 1000, labels: bool = False) -> list[Mark]:
    """Marks in record order; reveal delay grows with the index."""
    marks = []
    for i, (name, value) in enumerate(zip(records["name"], records["mean"])):
        x0 = x(name)
        if x0 is None:
            continue
        top = y(value)
        marks.append(Mark(
            key=name, value=float(value),
            x=x0, width=x.bandwidth,
            y=min(top, y(0.0)), height=y.extent(value),
            fill=fill, delay_ms=i * stagger_ms, duration_ms=duration_ms,
            label=format_money(value) if labels else None,
        ))
    return marks


def with_hover(marks: Sequence[Mark], key: str | None) -> list[Mark]:
    """Swap the hovered mark for its highlighted variant; everyone else keeps the base fill."""
    return [m.hovered() if key is not None and m.key == key else m for m in marks]


# ---------------- Keyed reconciliation ----------------
@dataclass(frozen=True)
class MarkDiff:
    enter: tuple[str, ...]
    update: tuple[str, ...]
    exit: tuple[str, ...]

    @property
    def unchanged(self) -> bool:
        return not self.enter and not self.exit


def reconcile(previous: Sequence[Mark] | Sequence[str], current: Sequence[Mark]) -> tuple[list[Mark], MarkDiff]:
    """Join ``current`` against ``previous`` by key.

    Returns the marks to draw (one per key, in ``current`` order) and the
    enter/update/exit key sets. ``previous`` may be marks or bare keys.
    """
    prev_keys = [p if isinstance(p, str) else p.key for p in previous]
    seen: dict[str, Mark] = {}
    for m in current:
        if m.key in seen:
            logger.debug("duplicate mark key %r; keeping the last one", m.key)
        seen[m.key] = m
    prev = set(prev_keys)
    diff = MarkDiff(
        enter=tuple(k for k in seen if k not in prev),
        update=tuple(k for k in seen if k in prev),
        exit=tuple(k for k in dict.fromkeys(prev_keys) if k not in seen),
    )
    return list(seen.values()), diff


def initial_values(marks: Sequence[Mark], y: LinearScale) -> list[float]:
    """Bar values before the reveal: every mark collapsed onto its baseline."""
    return [y.invert(m.initial().y) for m in marks]


def reveal_frames(marks: Sequence[Mark], start: Sequence[float] | None = None) -> list[list[float]]:
    """Bar values per animation step: step i shows marks 0..i at full value.

    Marks not yet revealed sit at ``start`` (zero when omitted).
    """
    base = list(start) if start is not None else [0.0] * len(marks)
    ordered = sorted(range(len(marks)), key=lambda i: marks[i].delay_ms)
    shown: set[int] = set()
    frames = []
    for i in ordered:
        shown.add(i)
        frames.append([m.value if j in shown else base[j] for j, m in enumerate(marks)])
    return frames
