"""Build Grafana panels for the CPU usage dashboard."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Mapping, Tuple

from .models import (
    DatasourceRef,
    FieldConfig,
    GridPos,
    PanelDocument,
    PanelKind,
    PanelSpec,
    Query,
    ThresholdStep,
)

PROMETHEUS_DATASOURCE = DatasourceRef(type="prometheus", uid="DS_PROMETHEUS_UID")

CPU_METRIC = "cpu_usage"
FRESHNESS_WINDOW_SECONDS = 60
# Drops series whose latest sample is older than the freshness window.
GUARDED_CPU_EXPR = (
    f"{CPU_METRIC} AND (time() - timestamp({CPU_METRIC}) < {FRESHNESS_WINDOW_SECONDS})"
)
AVERAGE_CPU_EXPR = f"avg({GUARDED_CPU_EXPR})"

INSTANCE_LEGEND = "{{instance}}"
AVERAGE_LEGEND = "Average"

GAUGE_THRESHOLDS: Tuple[ThresholdStep, ...] = (
    ThresholdStep(color="green"),
    ThresholdStep(color="red", value=80),
)


@dataclass(frozen=True, slots=True)
class PanelOverrides:
    """Complete kind-specific portion of a panel."""

    targets: Tuple[Query, ...]
    field_config: FieldConfig
    options: Mapping[str, Any]


def default_query() -> Query:
    """Return the per-instance CPU query every panel starts from."""

    return Query(
        datasource=PROMETHEUS_DATASOURCE,
        expr=GUARDED_CPU_EXPR,
        legend_format=INSTANCE_LEGEND,
        ref_id="A",
    )


def reduce_options(**extra: Any) -> Dict[str, Any]:
    """Options collapsing each series to its last observed value.

    Keyword arguments are emitted ahead of the shared ``reduceOptions`` block.
    """

    options: Dict[str, Any] = dict(extra)
    options["reduceOptions"] = {"values": False, "calcs": ["last"], "fields": ""}
    return options


def _timeseries(query: Query) -> PanelOverrides:
    average = replace(query, expr=AVERAGE_CPU_EXPR, legend_format=AVERAGE_LEGEND, ref_id="B")
    return PanelOverrides(
        targets=(query, average),
        field_config=FieldConfig(
            color_mode="palette-classic",
            custom={"axisLabel": "CPU Usage (%)", "fillOpacity": 10, "lineWidth": 2},
        ),
        options={
            "legend": {
                "calcs": ["mean", "last", "max"],
                "displayMode": "table",
                "placement": "bottom",
                "showLegend": True,
            }
        },
    )


def _gauge(query: Query) -> PanelOverrides:
    return PanelOverrides(
        targets=(
            replace(query, expr=AVERAGE_CPU_EXPR, legend_format=AVERAGE_LEGEND, instant=True),
        ),
        field_config=FieldConfig(
            color_mode="thresholds",
            min=0,
            max=100,
            thresholds=GAUGE_THRESHOLDS,
        ),
        options=reduce_options(
            orientation="auto",
            showThresholdLabels=False,
            showThresholdMarkers=True,
        ),
    )


def _barchart(query: Query) -> PanelOverrides:
    # One bar per instance, so the per-instance query is kept as is.
    return PanelOverrides(
        targets=(replace(query, instant=True),),
        field_config=FieldConfig(color_mode="palette-classic"),
        options=reduce_options(
            orientation="auto",
            xTickLabelRotation=0,
            xTickLabelSpacing=0,
        ),
    )


KIND_HANDLERS: Mapping[PanelKind, Callable[[Query], PanelOverrides]] = {
    PanelKind.TIMESERIES: _timeseries,
    PanelKind.GAUGE: _gauge,
    PanelKind.BARCHART: _barchart,
}


def build_panel(spec: PanelSpec) -> PanelDocument:
    """Return the Grafana panel described by ``spec``."""

    overrides = KIND_HANDLERS[spec.kind](default_query())
    return PanelDocument(
        id=spec.id,
        title=spec.title,
        kind=spec.kind,
        grid_pos=GridPos.from_spec(spec),
        datasource=PROMETHEUS_DATASOURCE,
        targets=overrides.targets,
        field_config=overrides.field_config,
        options=overrides.options,
    )
