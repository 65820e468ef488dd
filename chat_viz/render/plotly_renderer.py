"""Turn a RenderableChartSpec into plotly figure JSON.

Keys, colors and axis parameters are taken as given; nothing here decides
which field plays which role.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import plotly.io as pio

from chat_viz.models.chart_spec import RenderableChartSpec
from chat_viz.utils.logging import log_event

_DEFAULT_TEMPLATE = str(os.getenv("CV_PLOT_TEMPLATE", "plotly_white")).strip() or "plotly_white"
_BASE_FONT_FAMILY = "Inter, Segoe UI, Helvetica Neue, Arial, sans-serif"
_GRID_COLOR = "rgba(226, 232, 240, 0.8)"
_CHART_HEIGHT = 300


def _resolve_template_name() -> str:
    if _DEFAULT_TEMPLATE in pio.templates:
        return _DEFAULT_TEMPLATE
    if "plotly_white" in pio.templates:
        return "plotly_white"
    return "plotly"


def _frame(chart: RenderableChartSpec, numeric_cols: List[str]) -> pd.DataFrame:
    df = pd.DataFrame(chart.records)
    for col in numeric_cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def _category_bar(chart: RenderableChartSpec) -> go.Figure:
    series = chart.series[0]
    df = _frame(chart, [series.key])
    fig = px.bar(df, x=chart.category_axis.key, y=series.key)
    fig.update_traces(marker_color=series.color, name=series.name, showlegend=True)
    return fig


def _line(chart: RenderableChartSpec) -> go.Figure:
    series = chart.series[0]
    df = _frame(chart, [series.key])
    fig = px.line(df, x=chart.category_axis.key, y=series.key, markers=True)
    fig.update_traces(line_color=series.color, name=series.name, showlegend=True)
    return fig


def _grouped_bar(chart: RenderableChartSpec) -> go.Figure:
    keys = [series.key for series in chart.series]
    df = _frame(chart, keys)
    fig = go.Figure()
    for series in chart.series:
        fig.add_trace(
            go.Bar(
                x=df[chart.category_axis.key].tolist(),
                y=df[series.key].tolist(),
                name=series.name,
                marker_color=series.color,
            )
        )
    fig.update_layout(barmode="group")
    return fig


def _pie(chart: RenderableChartSpec) -> go.Figure:
    values = pd.to_numeric(pd.Series([wedge.value for wedge in chart.wedges]), errors="coerce")
    fig = go.Figure(
        go.Pie(
            labels=[str(wedge.label) for wedge in chart.wedges],
            values=values.tolist(),
            marker=dict(colors=[wedge.color for wedge in chart.wedges], line=dict(color="white", width=2)),
            textinfo="label",
            sort=False,
        )
    )
    fig.update_layout(showlegend=True)
    return fig


def _scatter(chart: RenderableChartSpec) -> go.Figure:
    x_key = chart.category_axis.key
    y_key = chart.value_axis.key
    df = _frame(chart, [x_key, y_key])
    fig = px.scatter(df, x=x_key, y=y_key)
    name = chart.series[0].name if chart.series else None
    fig.update_traces(
        marker=dict(color=chart.point_color, size=10, opacity=0.85, line=dict(width=1, color="white")),
        name=name,
        showlegend=True,
    )
    return fig


_FIGURE_BUILDERS = {
    "category-bar": _category_bar,
    "line": _line,
    "grouped-bar": _grouped_bar,
    "pie": _pie,
    "scatter": _scatter,
}


def _apply_axis_style(fig: go.Figure, chart: RenderableChartSpec) -> None:
    category_axis = chart.category_axis
    value_axis = chart.value_axis
    fig.update_xaxes(
        title_text=category_axis.label,
        tickangle=category_axis.tick_angle,
        tickformat=category_axis.tick_format,
        showgrid=True,
        gridcolor=_GRID_COLOR,
        automargin=True,
    )
    fig.update_yaxes(
        title_text=value_axis.label,
        tickformat=value_axis.tick_format,
        showgrid=True,
        gridcolor=_GRID_COLOR,
        automargin=True,
    )
    if category_axis.tick_angle is not None:
        fig.update_xaxes(type="category")


def _apply_visual_polish(fig: go.Figure, chart: RenderableChartSpec) -> None:
    fig.update_layout(
        template=_resolve_template_name(),
        height=_CHART_HEIGHT,
        font=dict(family=_BASE_FONT_FAMILY, size=13, color="#1e293b"),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0.0),
        margin=dict(l=20, r=30, t=5, b=50),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        separators=".,",
    )
    if chart.variant == "pie":
        fig.update_traces(hovertemplate=f"%{{label}}: %{{value:{chart.tooltip_format}}}<extra></extra>")
        return
    fig.update_traces(hovertemplate=f"%{{x}}<br>%{{y:{chart.tooltip_format}}}<extra>%{{fullData.name}}</extra>")
    _apply_axis_style(fig, chart)


def render_figure(chart: RenderableChartSpec) -> Optional[Dict[str, Any]]:
    """Build plotly figure JSON; returns None if plotly rejects the data."""
    builder = _FIGURE_BUILDERS.get(chart.variant)
    if builder is None:
        log_event("render.noop", {"variant": chart.variant})
        return None
    try:
        fig = builder(chart)
        _apply_visual_polish(fig, chart)
    except (KeyError, TypeError, ValueError) as exc:
        log_event("render.error", {"variant": chart.variant, "error": str(exc)}, level="error")
        return None

    # Numpy types in figure JSON can break Pydantic serialization
    fig_json = json.loads(pio.to_json(fig))
    log_event("render.success", {"variant": chart.variant, "trace_count": len(fig.data)})
    return fig_json
