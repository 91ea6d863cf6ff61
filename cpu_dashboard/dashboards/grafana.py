"""Assemble the CPU usage dashboard."""
from __future__ import annotations

import json
from typing import Sequence, Tuple

from .models import DashboardDocument, PanelKind, PanelSpec
from .panels import build_panel

DASHBOARD_TITLE = "CPU Usage Dashboard"
DASHBOARD_UID = "custom-dashboard"
DASHBOARD_TAGS: Tuple[str, ...] = ("cpu_usage", "custom")
REFRESH_INTERVAL = "10s"
TIME_FROM = "now-5m"
TIME_TO = "now"

DEFAULT_PANELS: Tuple[PanelSpec, ...] = (
    PanelSpec(PanelKind.GAUGE, 1, "Average Cluster CPU", x=0, y=0, w=8, h=8),
    PanelSpec(PanelKind.BARCHART, 2, "CPU per Server", x=8, y=0, w=16, h=8),
    PanelSpec(PanelKind.TIMESERIES, 3, "CPU Trends", x=0, y=8, w=24, h=10),
)


def assemble_dashboard(specs: Sequence[PanelSpec]) -> DashboardDocument:
    """Return the dashboard with one panel per spec, in input order."""

    return DashboardDocument(
        title=DASHBOARD_TITLE,
        uid=DASHBOARD_UID,
        panels=tuple(build_panel(spec) for spec in specs),
        tags=DASHBOARD_TAGS,
        refresh=REFRESH_INTERVAL,
        time_from=TIME_FROM,
        time_to=TIME_TO,
    )


def serialize_dashboard(document: DashboardDocument) -> str:
    return json.dumps(document.to_dict(), indent=2)


def build_cpu_dashboard(specs: Sequence[PanelSpec] = DEFAULT_PANELS) -> str:
    """Assemble and serialise the dashboard in one step."""

    return serialize_dashboard(assemble_dashboard(specs))
