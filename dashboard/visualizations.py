from __future__ import annotations

import numpy as np
import plotly.express as px
import plotly.graph_objects as go

from dashboard.constants import FINANCE_COLORS, MOOD_COLORS
from dashboard.theme import get_active_theme


def _active_theme():
    return get_active_theme()[1]


def apply_common_plot_style(fig, title, show_xgrid=True, show_ygrid=True):
    theme = _active_theme()
    fig.update_layout(
        title=title,
        title_font=dict(color=theme["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"]),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(
            showgrid=show_xgrid,
            gridcolor=theme["plot_grid"],
            tickfont=dict(color=theme["text_soft"]),
            zeroline=False,
        ),
        yaxis=dict(
            showgrid=show_ygrid,
            gridcolor=theme["plot_grid"],
            tickfont=dict(color=theme["text_soft"]),
            zeroline=False,
        ),
    )
    return fig


def mood_color(score):
    if score <= 3:
        return MOOD_COLORS["low"]
    if score <= 6:
        return MOOD_COLORS["mid"]
    return MOOD_COLORS["high"]


def mood_trend_chart(frame):
    fig = go.Figure()
    if not frame.empty:
        scores = frame["mood_score"].astype(float).to_numpy()
        # 3-entry rolling mean, shorter at the start
        window = np.ones(3)
        sums = np.convolve(scores, window)[: len(scores)]
        counts = np.convolve(np.ones(len(scores)), window)[: len(scores)]
        fig.add_trace(
            go.Scatter(
                x=frame["date"],
                y=scores,
                mode="markers",
                name="Score",
                marker=dict(size=10, color=[mood_color(score) for score in scores]),
                text=frame["mood_label"],
                hovertemplate="%{x}<br>%{y} • %{text}<extra></extra>",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=frame["date"],
                y=sums / counts,
                mode="lines",
                name="Trend",
                line=dict(color=_active_theme()["accent"], width=2),
            )
        )
    fig.update_yaxes(range=[0.5, 10.5], dtick=1)
    return apply_common_plot_style(fig, "Mood over time")


def expense_breakdown_chart(frame):
    fig = px.pie(frame, names="category", values="amount", hole=0.45)
    fig.update_traces(textinfo="label+percent")
    return apply_common_plot_style(fig, "Expenses by category", show_xgrid=False, show_ygrid=False)


def finance_totals_chart(totals):
    labels = ["Income", "Expense"]
    values = [totals["income"], totals["expense"]]
    fig = go.Figure(
        go.Bar(
            x=labels,
            y=values,
            marker_color=[FINANCE_COLORS["income"], FINANCE_COLORS["expense"]],
        )
    )
    return apply_common_plot_style(fig, "Income vs expense", show_xgrid=False)


def hourly_temperature_chart(hours, unit):
    suffix = "°C" if unit == "celsius" else "°F"
    fig = go.Figure(
        go.Scatter(
            x=[hour.get("time") for hour in hours],
            y=[hour.get("temperature") for hour in hours],
            mode="lines+markers",
            line=dict(color=_active_theme()["accent"]),
        )
    )
    return apply_common_plot_style(fig, f"Hourly temperature ({suffix})")
