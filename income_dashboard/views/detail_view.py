# income_dashboard/views/detail_view.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping

import plotly.graph_objects as go

from income_dashboard.loaders import StateIncome, top_n
from income_dashboard.marks import Mark, MarkDiff, reconcile
from income_dashboard.scales import format_money
from income_dashboard.views.bar_chart import Frame, bar_figure, layout_marks

DETAIL_FRAME = Frame(width=320, height=500, top=70, right=20, bottom=100, left=70)
DETAIL_FILL  = "#4682b4"

NO_SELECTION = "Hover over a state to view city income data"


@dataclass(frozen=True)
class Detail:
    figure: go.Figure | None = None
    message: str | None = None
    marks: list[Mark] = field(default_factory=list)
    diff: MarkDiff = field(default_factory=lambda: MarkDiff((), (), ()))

    @property
    def values(self) -> dict[str, float]:
        return {m.key: m.value for m in self.marks}


def detail_view(selected: str | None, data: StateIncome,
                previous: Mapping[str, float] | None = None, reveal: bool = True) -> Detail:
    """Ranked city bars for the selected state, or a placeholder message.

    ``previous`` maps the keys currently on screen to their values. Bars whose
    key is still present grow from their old value, new bars grow from zero,
    and bars that left are not drawn.
    """
    previous = dict(previous or {})
    if not selected:
        return Detail(message=NO_SELECTION, diff=reconcile(list(previous), [])[1])

    cities = data.cities_of(selected)
    if cities.empty:
        return Detail(message=f"No city data for {selected}", diff=reconcile(list(previous), [])[1])

    ranked = top_n(cities, n=len(cities))
    marks, y = layout_marks(ranked, DETAIL_FRAME, DETAIL_FILL, nice=False,
                            stagger_ms=100, duration_ms=800, labels=True)
    marks, diff = reconcile(list(previous), marks)
    updated = set(diff.update)
    start = [previous[m.key] if m.key in updated else 0.0 for m in marks]
    fig = bar_figure(marks, y, DETAIL_FRAME, y_title="Mean Income", animate=True,
                     reveal=reveal, start=start)

    state = data.state(selected)
    subtitle = f"State Mean Income: {format_money(state['mean'])}" if state is not None else ""
    fig.update_layout(title=dict(
        text=f"<b>{selected}</b><br><span style='font-size:14px'>{subtitle}</span>",
        x=0.5, xanchor="center", font=dict(size=16),
    ))
    fig.update_xaxes(tickfont=dict(size=10))
    return Detail(figure=fig, marks=marks, diff=diff)
