"""Grafana dashboard definitions for CPU usage monitoring."""

from .grafana import DEFAULT_PANELS, assemble_dashboard, build_cpu_dashboard, serialize_dashboard
from .models import DashboardDocument, PanelDocument, PanelKind, PanelSpec
from .panels import build_panel

__all__ = [
    "DEFAULT_PANELS",
    "DashboardDocument",
    "PanelDocument",
    "PanelKind",
    "PanelSpec",
    "assemble_dashboard",
    "build_cpu_dashboard",
    "build_panel",
    "serialize_dashboard",
]
