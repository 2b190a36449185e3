"""Analytics Bot — QuickChart Renderer.

Turns a chronological GA4 series into a QuickChart image URL. The URL
fully encodes the chart config, so rendering is deterministic and needs
no network call.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from app.config import Settings

CHART_DAYS = 14


def chart_series(ga_rows: Sequence[Dict[str, Any]], days: int = CHART_DAYS) -> List[Dict[str, Any]]:
    """Newest `days` dated rows from a newest-first series, in chronological order."""
    dated = [r for r in ga_rows if r.get("event_date")]
    return list(reversed(dated[:days]))


def _label(event_date: str) -> str:
    try:
        d = date.fromisoformat(str(event_date)[:10])
    except ValueError:
        return str(event_date)
    return f"{d.day}/{d.month}"


def build_chart_config(series: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Line chart of sessions and active users."""
    return {
        "type": "line",
        "data": {
            "labels": [_label(r["event_date"]) for r in series],
            "datasets": [
                {
                    "label": "Sessions",
                    "data": [r.get("sessions") or 0 for r in series],
                    "borderColor": "#4A90D9",
                    "backgroundColor": "rgba(74, 144, 217, 0.1)",
                    "fill": True,
                    "tension": 0.3,
                    "pointRadius": 3,
                },
                {
                    "label": "Active Users",
                    "data": [r.get("active_users") or 0 for r in series],
                    "borderColor": "#7B68EE",
                    "backgroundColor": "rgba(123, 104, 238, 0.05)",
                    "fill": False,
                    "tension": 0.3,
                    "pointRadius": 3,
                    "borderDash": [5, 5],
                },
            ],
        },
        "options": {
            "plugins": {
                "legend": {"position": "bottom", "labels": {"boxWidth": 12, "padding": 20}}
            },
            "scales": {
                "y": {"beginAtZero": True, "grid": {"color": "#f0f0f0"}},
                "x": {"grid": {"display": False}},
            },
        },
    }


class ChartRenderer:
    """Builds QuickChart URLs for the traffic trend chart."""

    def __init__(self, settings: Settings):
        self.base_url = settings.quickchart_base_url
        self.width = settings.chart_width
        self.height = settings.chart_height

    def render(self, series: Sequence[Dict[str, Any]]) -> Optional[str]:
        """Return an image URL, or None when there are fewer than two points."""
        if len(series) < 2:
            return None
        config = json.dumps(build_chart_config(series), separators=(",", ":"))
        encoded = quote(config, safe="-_.!~*'()")
        return f"{self.base_url}?c={encoded}&w={self.width}&h={self.height}&bkg=white"
