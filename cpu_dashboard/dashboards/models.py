"""Grafana dashboard document models."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class PanelKind(str, Enum):
    """Panel visualizations supported by the generator."""

    TIMESERIES = "timeseries"
    GAUGE = "gauge"
    BARCHART = "barchart"


@dataclass(frozen=True, slots=True)
class PanelSpec:
    """Placement and identity of a single panel on the 24-column grid."""

    kind: PanelKind
    id: int
    title: str
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True, slots=True)
class GridPos:
    x: int
    y: int
    w: int
    h: int

    @classmethod
    def from_spec(cls, spec: PanelSpec) -> "GridPos":
        return cls(x=spec.x, y=spec.y, w=spec.w, h=spec.h)

    def to_dict(self) -> Dict[str, int]:
        return {"h": self.h, "w": self.w, "x": self.x, "y": self.y}


@dataclass(frozen=True, slots=True)
class DatasourceRef:
    type: str
    uid: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "uid": self.uid}


@dataclass(frozen=True, slots=True)
class Query:
    """A Prometheus target evaluated by a panel."""

    datasource: DatasourceRef
    expr: str
    legend_format: str
    ref_id: str
    instant: bool = False

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "datasource": self.datasource.to_dict(),
            "expr": self.expr,
            "legendFormat": self.legend_format,
            "refId": self.ref_id,
        }
        if self.instant:
            payload["instant"] = True
        return payload


@dataclass(frozen=True, slots=True)
class ThresholdStep:
    """Colour applied once a value crosses ``value``; ``None`` marks the baseline."""

    color: str
    value: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        return {"color": self.color, "value": self.value}


@dataclass(frozen=True, slots=True)
class FieldConfig:
    color_mode: str
    unit: str = "percent"
    no_value: int = 0
    min: Optional[int] = None
    max: Optional[int] = None
    thresholds: Tuple[ThresholdStep, ...] = ()
    custom: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        defaults: Dict[str, object] = {"unit": self.unit, "noValue": self.no_value}
        if self.min is not None:
            defaults["min"] = self.min
        if self.max is not None:
            defaults["max"] = self.max
        defaults["color"] = {"mode": self.color_mode}
        if self.thresholds:
            defaults["thresholds"] = {"steps": [step.to_dict() for step in self.thresholds]}
        if self.custom:
            defaults["custom"] = dict(self.custom)
        return {"defaults": defaults}


@dataclass(frozen=True, slots=True)
class PanelDocument:
    """Fully assembled Grafana panel."""

    id: int
    title: str
    kind: PanelKind
    grid_pos: GridPos
    datasource: DatasourceRef
    targets: Tuple[Query, ...]
    field_config: FieldConfig
    options: Mapping[str, Any]

    def to_dict(self) -> Dict[str, object]:
        return {
            "datasource": self.datasource.to_dict(),
            "gridPos": self.grid_pos.to_dict(),
            "targets": [target.to_dict() for target in self.targets],
            "id": self.id,
            "title": self.title,
            "type": self.kind.value,
            "fieldConfig": self.field_config.to_dict(),
            "options": _plain(self.options),
        }


@dataclass(frozen=True, slots=True)
class DashboardDocument:
    """Root Grafana dashboard definition."""

    title: str
    uid: str
    panels: Tuple[PanelDocument, ...]
    tags: Tuple[str, ...]
    refresh: str
    time_from: str
    time_to: str
    editable: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "editable": self.editable,
            "panels": [panel.to_dict() for panel in self.panels],
            "refresh": self.refresh,
            "tags": list(self.tags),
            "time": {"from": self.time_from, "to": self.time_to},
            "title": self.title,
            "uid": self.uid,
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
