# income_dashboard/views/bar_chart.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

import pandas as pd
import plotly.graph_objects as go

from income_dashboard.marks import Mark, bar_marks, initial_values, reveal_frames, with_hover
from income_dashboard.scales import LinearScale, band_scale, format_money, measure_scale


@dataclass(frozen=True)
class Frame:
    """Drawing region: outer size plus margins (pixels)."""
    width: int = 550
    height: int = 450
    top: int = 50
    right: int = 30
    bottom: int = 100
    left: int = 80

    @property
    def x_extent(self) -> tuple[float, float]:
        return (0.0, float(self.width - self.left - self.right))

    @property
    def y_extent(self) -> tuple[float, float]:
        # baseline first: larger values move up
        return (float(self.height - self.top - self.bottom), 0.0)


DUAL_FRAME = Frame()


def layout_marks(records: pd.DataFrame, frame: Frame, fill: str, *, padding_factor: float = 1.1,
                 nice: bool = True, stagger_ms: int = 100, duration_ms: int = 1000,
                 labels: bool = False) -> tuple[list[Mark], LinearScale]:
    """Scales + marks for a record list; callers must skip empty input."""
    x = band_scale(list(records["name"]), frame.x_extent, padding=0.2)
    y = measure_scale(records["mean"], frame.y_extent, padding_factor=padding_factor, nice=nice)
    return bar_marks(records, x, y, fill, stagger_ms=stagger_ms, duration_ms=duration_ms, labels=labels), y


def bar_figure(marks: Sequence[Mark], y: LinearScale, frame: Frame, *, title: str | None = None,
               y_title: str | None = None, tick_format=format_money, grid: bool = True,
               dashed_grid: bool = False, tick_angle: int = -45, animate: bool = False,
               reveal: bool = False, start: Sequence[float] | None = None) -> go.Figure:
    """Draw marks as bars on a pixel x axis (band positions) and a value y axis.

    With ``reveal`` the bars are drawn at ``start`` (their baselines when
    omitted) and ``layout.meta`` asks the page to play the frames on load.
    """
    xs = [m.center for m in marks]
    text = [m.label or "" for m in marks]
    if reveal:
        start = list(start) if start is not None else initial_values(marks, y)
    fig = go.Figure(go.Bar(
        ids=[m.key for m in marks],
        x=xs,
        y=start if reveal else [m.value for m in marks],
        width=[m.width for m in marks],
        marker=dict(
            color=[m.fill for m in marks],
            line=dict(color=[m.stroke or "rgba(0,0,0,0)" for m in marks],
                      width=[m.stroke_width for m in marks]),
            cornerradius=4,
        ),
        text=text,
        textposition="outside",
        cliponaxis=False,
        customdata=[m.key for m in marks],
        hovertemplate="%{customdata}<br>$%{y:,.2f}<extra></extra>",
    ))

    y_ticks = y.ticks(5)
    fig.update_xaxes(
        range=list(frame.x_extent), tickmode="array", tickvals=xs, ticktext=[m.key for m in marks],
        tickangle=tick_angle, showgrid=False, zeroline=False, fixedrange=True,
    )
    fig.update_yaxes(
        range=[y.domain[0], y.domain[1]], tickmode="array", tickvals=y_ticks,
        ticktext=[tick_format(t) for t in y_ticks], title_text=y_title,
        showgrid=grid, gridcolor="#e0e0e0", griddash=("dash" if dashed_grid else "solid"),
        zeroline=False, fixedrange=True,
    )
    fig.update_layout(
        title=dict(text=title, x=0.5, xanchor="center") if title else None,
        width=frame.width, height=frame.height,
        margin=dict(l=frame.left, r=frame.right, t=frame.top, b=frame.bottom),
        plot_bgcolor="rgba(0,0,0,0)", paper_bgcolor="rgba(0,0,0,0)",
        showlegend=False,
        transition=dict(duration=max((m.duration_ms for m in marks), default=0), easing="cubic-in-out"),
    )
    if (animate or reveal) and marks:
        steps = reveal_frames(marks, start if reveal else None)
        step_ms = max(1, marks[1].delay_ms - marks[0].delay_ms) if len(marks) > 1 else marks[0].duration_ms
        fig.frames = [go.Frame(name=str(i), data=[go.Bar(ids=[m.key for m in marks], y=vals)])
                      for i, vals in enumerate(steps)]
        fig.update_layout(updatemenus=[dict(
            type="buttons", showactive=False, x=1, y=1.1, xanchor="right",
            buttons=[dict(label="Replay", method="animate",
                          args=[None, dict(frame=dict(duration=step_ms, redraw=False),
                                           transition=dict(duration=marks[0].duration_ms),
                                           fromcurrent=False)])],
        )])
        if reveal:
            fig.update_layout(meta=dict(reveal=True, step_ms=step_ms,
                                        duration_ms=marks[0].duration_ms))
    return fig


# Plays a revealing figure's frames once it is on the page. Figures without
# ``layout.meta.reveal`` (hover redraws) are left alone.
REVEAL_JS = """
function (figure, graphId) {
    if (!figure || !figure.layout || !figure.layout.meta || !figure.layout.meta.reveal) {
        return window.dash_clientside.no_update;
    }
    var meta = figure.layout.meta;
    setTimeout(function () {
        var gd = document.querySelector('#' + graphId + ' .js-plotly-plot');
        if (gd && window.Plotly) {
            window.Plotly.animate(gd, null, {
                frame: {duration: meta.step_ms, redraw: false},
                transition: {duration: meta.duration_ms, easing: 'cubic-in-out'},
                mode: 'immediate'
            });
        }
    }, 50);
    return (figure.frames || []).length;
}
"""


# ---------------- Top-N dual chart ----------------
def ranking_figure(records: pd.DataFrame, title: str, color: str, hovered: str | None = None,
                   frame: Frame = DUAL_FRAME, reveal: bool = True) -> go.Figure:
    """One of the two "Top 10" charts: rounded bars, dashed grid, value label on hover."""
    marks, y = layout_marks(records, frame, color)
    marks = with_hover(marks, hovered)
    return bar_figure(marks, y, frame, title=title, y_title="Mean Value",
                      tick_format=lambda v: f"{v:,.0f}", dashed_grid=True, animate=True, reveal=reveal)
