"""Light theme configuration for simulation charts."""

from __future__ import annotations

from typing import Dict


PACIFIC = "#0177CC"
DENIM = "#02487B"
SLATE = "#25303E"
HONEY = "#FFBC03"
LIME = "#63BA01"
RED = "#E65B53"
GRAY_300 = "#C8D1DF"
GRAY_500 = "#8F99A8"
FOG = "#F5F7FA"
CARD_BACKGROUND = "#FFFFFF"
DENSITY_FILL = "rgba(1, 119, 204, 0.1)"


LIGHT_THEME: Dict[str, object] = {
    "name": "light",
    "background_color": FOG,
    "card_background": CARD_BACKGROUND,
    "text_color": SLATE,
    "subtext_color": GRAY_500,
    "palette": {
        "density": PACIFIC,
        "density_fill": DENSITY_FILL,
        "true_value": LIME,
        "sampled_value": RED,
        "average_marker": LIME,
        "p99_marker": RED,
        "interval": DENIM,
        "accent": HONEY,
        "neutral": GRAY_500,
    },
    "plotly_template": {
        "layout": {
            "font": {"family": "Roboto, Open Sans, sans-serif", "color": SLATE},
            "paper_bgcolor": FOG,
            "plot_bgcolor": CARD_BACKGROUND,
            "title": {"font": {"size": 14, "color": SLATE}},
            "legend": {"bgcolor": CARD_BACKGROUND, "bordercolor": GRAY_300},
            "xaxis": {
                "gridcolor": "rgba(0, 0, 0, 0.1)",
                "linecolor": GRAY_300,
                "zerolinecolor": GRAY_300,
            },
            "yaxis": {
                "gridcolor": "rgba(0, 0, 0, 0.1)",
                "linecolor": GRAY_300,
                "zerolinecolor": GRAY_300,
            },
        }
    },
}
