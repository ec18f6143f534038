"""
Plotly figures for the seat price views.
Titles are added in app.py; figures only carry axes and data.
"""
from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from . import buckets
from .stats import FLOOR_SECTION

PRICE_SERIES = (
    ("avg_price", "Average price", "#8884d8"),
    ("max_price", "Highest price", "#82ca9d"),
    ("min_price", "Lowest price", "#ffc658"),
)


def _layout(fig: go.Figure, height: int) -> go.Figure:
    fig.update_layout(
        height=height,
        margin=dict(t=30, l=80, r=20, b=40),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, x=0),
    )
    fig.update_xaxes(tickformat=",")
    return fig


def fig_price_bars(view: pd.DataFrame, label: str, top_n: int | None = None, spread: bool = False) -> go.Figure:
    """
    Horizontal bars of average price per group, highest first.
    ``spread`` adds max/min bars next to the average.
    """
    data = view if top_n is None else view.head(top_n)
    # plotly draws the first category at the bottom
    data = data.iloc[::-1]
    series = PRICE_SERIES if spread else PRICE_SERIES[:1]

    fig = go.Figure()
    for col, name, color in series:
        fig.add_bar(
            name=name,
            y=data[label].astype(str),
            x=data[col],
            orientation="h",
            marker_color=color,
            customdata=data["count"],
            hovertemplate="%{y}: %{x:,.0f}원 (%{customdata} seats)<extra></extra>",
        )
    fig.update_layout(barmode="group", xaxis_title="Price (원)")
    return _layout(fig, height=max(320, 28 * len(data) * len(series)))


def fig_zone_tiles(heatmap: pd.DataFrame, section: str = FLOOR_SECTION) -> go.Figure:
    """Average price per zone, colored by relative price band."""
    tiles = heatmap[heatmap["section"] == section]
    colors = [buckets.BAND_COLORS[band] for band in tiles["band"]]
    fig = go.Figure(
        go.Bar(
            x=tiles["zone"].astype(str),
            y=tiles["avg_price"],
            marker_color=colors,
            text=tiles["count"].map(lambda n: f"{n} seats"),
            textposition="outside",
            customdata=tiles["band"],
            hovertemplate="%{x}: %{y:,.0f}원 (%{customdata})<extra></extra>",
        )
    )
    fig.update_layout(
        yaxis_title="Average price (원)",
        xaxis_tickangle=-35,
        margin=dict(t=30, l=40, r=20, b=80),
    )
    fig.update_yaxes(tickformat=",")
    return fig


def fig_cross_tab(matrix: pd.DataFrame) -> go.Figure:
    """Floor × grade average prices; empty cells show as gaps."""
    text = matrix.apply(lambda col: col.map(lambda v: "-" if pd.isna(v) else f"{v:,.0f}원"))
    fig = go.Figure(
        go.Heatmap(
            z=matrix.values,
            x=[str(c) for c in matrix.columns],
            y=[str(i) for i in matrix.index],
            text=text.values,
            texttemplate="%{text}",
            colorscale=[
                [0.0, buckets.BAND_COLORS["very-low"]],
                [0.5, buckets.BAND_COLORS["mid"]],
                [1.0, buckets.BAND_COLORS["very-high"]],
            ],
            hoverongaps=False,
            colorbar=dict(title="원", tickformat=","),
        )
    )
    fig.update_layout(
        xaxis_title="Grade",
        yaxis_title="Floor",
        margin=dict(t=30, l=80, r=20, b=40),
    )
    return fig
