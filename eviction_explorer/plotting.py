from typing import Any, Dict, Optional

import pandas as pd
import plotly.graph_objects as go

from .views import ScatterView


# ============================================================
# Configuration / constants
# ============================================================

POINT_COLOR = "#9aa5b1"
SELECTED_COLOR = "#d62728"
AVERAGE_COLOR = "#1f77b4"
TRAJECTORY_COLOR = "#ff7f0e"

MAP_CENTER: Dict[str, float] = {"lon": -71.07, "lat": 42.33}
MAP_STYLE = "carto-positron"

HOVER_TEMPLATE_INVESTOR = (
    "Tract: %{customdata}<br>"
    "Investor purchases: %{x:,}<br>"
    "Eviction rate: %{y:.1%}<extra></extra>"
)

HOVER_TEMPLATE_INDICATOR = (
    "Tract: %{customdata}<br>"
    "%{meta}: %{x:,.0f}<br>"
    "Eviction rate: %{y:.1%}<extra></extra>"
)


# ============================================================
# Helper functions
# ============================================================


def _point_traces(view: ScatterView, hover_template: str, meta: str = "") -> list:
    """Unselected and selected point clouds, in that draw order."""
    traces = []
    for is_selected, color, name, size in (
        (False, POINT_COLOR, "Census tracts", 7),
        (True, SELECTED_COLOR, "Selected tracts", 11),
    ):
        sub = view.points[view.points["selected"] == is_selected]
        if sub.empty:
            continue
        traces.append(
            go.Scatter(
                x=sub["x"],
                y=sub["y"],
                mode="markers",
                marker=dict(size=size, color=color, opacity=0.8),
                name=name,
                customdata=sub["id"],
                meta=meta,
                hovertemplate=hover_template,
            )
        )
    return traces


def _average_trace(view: ScatterView) -> go.Scatter:
    avg_x, avg_y = view.regional_average
    return go.Scatter(
        x=[avg_x],
        y=[avg_y],
        mode="markers",
        marker=dict(size=14, color=AVERAGE_COLOR, symbol="star"),
        name="Regional average",
        hovertemplate="Regional average<extra></extra>",
    )


def _trajectory_traces(view: ScatterView) -> list:
    """One year-by-year line per selected tract."""
    selected = view.points.loc[view.points["selected"], "id"]
    if selected.empty or not view.years:
        return []

    by_year = pd.concat(
        [frame.assign(year=year) for year, frame in view.years.items()],
        ignore_index=True,
    )
    traces = []
    for tract_id in selected.unique():
        path = by_year[by_year["id"] == tract_id].sort_values("year")
        if len(path) < 2:
            continue
        traces.append(
            go.Scatter(
                x=path["x"],
                y=path["y"],
                mode="lines+markers+text",
                text=path["year"],
                textposition="top center",
                line=dict(width=2, color=TRAJECTORY_COLOR, dash="dot"),
                marker=dict(size=5, color=TRAJECTORY_COLOR),
                name=f"Tract {tract_id}",
                showlegend=False,
                hoverinfo="skip",
            )
        )
    return traces


def _layout(fig: go.Figure, title: str, x_title: str, view: ScatterView) -> go.Figure:
    fig.update_xaxes(title_text=x_title)
    fig.update_yaxes(title_text="Eviction rate", tickformat=".0%")
    # Fixed global ranges keep axes stable as filters change
    if view.max_x > view.min_x:
        fig.update_xaxes(range=[view.min_x, view.max_x])
    if view.max_y > view.min_y:
        fig.update_yaxes(range=[view.min_y, view.max_y])
    fig.update_layout(
        title=dict(text=f"<b>{title}</b>"),
        legend=dict(
            orientation="h",
            x=0.5,
            y=1.02,
            xanchor="center",
            yanchor="bottom",
            bordercolor="#c7c7c7",
            borderwidth=2,
            bgcolor="#f9f9f9",
            font=dict(size=12),
        ),
        margin=dict(t=100, l=50, r=80, b=40),
        plot_bgcolor="#f5f7fb",
    )
    return fig


# ============================================================
# Main plotting functions
# ============================================================


def create_investor_scatter(
    view: ScatterView, investor_label: str, year: str, *, trajectories: bool = True
) -> go.Figure:
    """
    Scatter of investor purchases against eviction rate for one year.

    Selected tracts are highlighted and, when ``trajectories`` is set,
    traced across every year in ``view.years``.
    """
    fig = go.Figure()
    for trace in _point_traces(view, HOVER_TEMPLATE_INVESTOR):
        fig.add_trace(trace)
    if trajectories:
        for trace in _trajectory_traces(view):
            fig.add_trace(trace)
    fig.add_trace(_average_trace(view))
    return _layout(
        fig,
        f"{investor_label} purchases vs. eviction rate ({year})",
        f"{investor_label} purchases",
        view,
    )


def create_indicator_scatter(
    view: ScatterView, indicator_label: str, year: str
) -> go.Figure:
    fig = go.Figure()
    for trace in _point_traces(view, HOVER_TEMPLATE_INDICATOR, meta=indicator_label):
        fig.add_trace(trace)
    fig.add_trace(_average_trace(view))
    return _layout(
        fig, f"{indicator_label} vs. eviction rate ({year})", indicator_label, view
    )


def create_tract_map(
    boundaries: Dict[str, Any],
    values: pd.DataFrame,
    *,
    value_label: str,
    zmax: Optional[float] = None,
) -> go.Figure:
    """
    Choropleth of ``values`` (``id``/``value`` rows) over tract boundaries.

    Features are matched on ``properties.normalized_id``.
    """
    fig = go.Figure(
        go.Choroplethmap(
            geojson=boundaries,
            featureidkey="properties.normalized_id",
            locations=values["id"],
            z=values["value"],
            zmin=0,
            zmax=zmax or None,
            colorscale="Reds",
            marker_opacity=0.7,
            marker_line_width=0.5,
            colorbar=dict(title=value_label),
            hovertemplate="Tract %{location}<br>%{z:.1%}<extra></extra>",
        )
    )
    fig.update_layout(
        map=dict(style=MAP_STYLE, center=MAP_CENTER, zoom=10),
        margin=dict(t=10, l=0, r=0, b=0),
    )
    return fig
