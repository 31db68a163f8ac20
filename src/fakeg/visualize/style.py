"""
Plot styling shared by the FakeG figures.
"""

from typing import Any, Literal, TypeAlias

import plotly.colors
import plotly.graph_objects as go

StyleName: TypeAlias = Literal["development", "publication"]

FONT_FAMILY = "Helvetica"
FONT_COLOR = "#333333"

FONT_SIZES: dict[str, int] = {
    "title": 20,
    "axis_title": 16,
    "tick_label": 14,
    "legend": 12,
}

AXIS_STYLE: dict[str, Any] = {
    "showgrid": True,
    "gridwidth": 1,
    "gridcolor": "#E7E7E7",
    "zeroline": False,
    "linewidth": 2,
    "linecolor": "#333333",
}

LAYOUT_STYLE: dict[str, Any] = {
    "plot_bgcolor": "#FBFCFF",
    "paper_bgcolor": "#FBFCFF",
    "margin": dict(t=60, b=40, r=40),
}

DEVELOPMENT_STYLE: dict[str, Any] = {
    "template": "plotly_dark",
    "plot_bgcolor": "black",
    "paper_bgcolor": "black",
    "font": dict(color="white"),
}


def palette(n: int, name: str = "Plotly") -> list[str]:
    """`n` colors cycled from a plotly qualitative palette."""
    colors = getattr(plotly.colors.qualitative, name)
    return [colors[i % len(colors)] for i in range(n)]


def get_font_dict(size: int, bold: bool = False) -> dict[str, Any]:
    return dict(
        family=FONT_FAMILY,
        size=size,
        color=FONT_COLOR,
        weight="bold" if bold else None,
    )


def apply_publication_style(fig: go.Figure) -> None:
    """Light background, dark axes and Helvetica fonts on every axis of the figure."""
    fig.update_layout(font=get_font_dict(FONT_SIZES["tick_label"]))
    if fig.layout.title is not None:
        fig.layout.title.update(font=get_font_dict(FONT_SIZES["title"], bold=True))

    for key in fig.layout:
        if key.startswith("xaxis") or key.startswith("yaxis"):
            getattr(fig.layout, key).update(
                AXIS_STYLE,
                title_font=get_font_dict(FONT_SIZES["axis_title"], bold=True),
                tickfont=get_font_dict(FONT_SIZES["tick_label"]),
            )
    fig.update_layout(LAYOUT_STYLE, legend=dict(font=get_font_dict(FONT_SIZES["legend"])))


def apply_development_style(fig: go.Figure) -> None:
    """Dark theme for quick looks while debugging a conversion."""
    fig.update_layout(**DEVELOPMENT_STYLE)


def apply_style(fig: go.Figure, style: StyleName = "development") -> None:
    if style == "publication":
        apply_publication_style(fig)
    else:
        apply_development_style(fig)
