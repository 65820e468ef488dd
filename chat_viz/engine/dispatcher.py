"""Select and parameterize one chart variant per resolved descriptor."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

from chat_viz.engine.errors import UnsupportedKind
from chat_viz.engine.key_resolver import ResolvedKeys
from chat_viz.engine.palette import pick_color
from chat_viz.models.chart_spec import AxisSpec, PieWedge, RenderableChartSpec, SeriesSpec
from chat_viz.models.descriptor import ChartKind

CATEGORY_TICK_ANGLE = -45
THOUSANDS_FORMAT = ","
SCATTER_SERIES_NAME = "Data Points"

DispatchResult = Union[RenderableChartSpec, UnsupportedKind]


def _category_axis(keys: ResolvedKeys, labels: Dict[str, Optional[str]]) -> AxisSpec:
    return AxisSpec(
        key=keys.category_key,
        label=labels.get("category") or keys.category_key,
        tick_angle=CATEGORY_TICK_ANGLE,
    )


def _value_axis(key: str, label: Optional[str]) -> AxisSpec:
    return AxisSpec(key=key, label=label or key, tick_format=THOUSANDS_FORMAT, numeric=True)


def _single_series(mark: str) -> Callable[..., RenderableChartSpec]:
    variant = ChartKind.CATEGORY_BAR.value if mark == "bar" else ChartKind.LINE.value

    def _build(keys, records, palette, labels) -> RenderableChartSpec:
        return RenderableChartSpec(
            variant=variant,
            records=records,
            category_axis=_category_axis(keys, labels),
            value_axis=_value_axis(keys.value_key, labels.get("value")),
            series=[
                SeriesSpec(
                    key=keys.value_key,
                    name=labels.get("value") or keys.value_key,
                    color=pick_color(palette, 0),
                    mark=mark,
                )
            ],
        )

    return _build


def _pie(keys, records, palette, labels) -> RenderableChartSpec:
    wedges = [
        PieWedge(
            label=record.get(keys.category_key),
            value=record.get(keys.value_key),
            color=pick_color(palette, index),
        )
        for index, record in enumerate(records)
    ]
    return RenderableChartSpec(
        variant=ChartKind.PIE.value,
        records=records,
        category_axis=AxisSpec(key=keys.category_key, label=labels.get("category") or keys.category_key),
        value_axis=_value_axis(keys.value_key, labels.get("value")),
        wedges=wedges,
    )


def _scatter(keys, records, palette, labels) -> RenderableChartSpec:
    y_key = keys.secondary_value_key or keys.value_key
    point_color = pick_color(palette, 0)
    return RenderableChartSpec(
        variant=ChartKind.SCATTER.value,
        records=records,
        category_axis=_value_axis(keys.value_key, labels.get("category")),
        value_axis=_value_axis(y_key, labels.get("value")),
        series=[SeriesSpec(key=y_key, name=SCATTER_SERIES_NAME, color=point_color, mark="point")],
        point_color=point_color,
    )


def _grouped_bar(keys, records, palette, labels) -> RenderableChartSpec:
    series = [
        SeriesSpec(key=name, name=name, color=pick_color(palette, index), mark="bar")
        for index, name in enumerate(keys.series_keys)
    ]
    return RenderableChartSpec(
        variant=ChartKind.GROUPED_BAR.value,
        records=records,
        category_axis=_category_axis(keys, labels),
        value_axis=_value_axis(keys.value_key, labels.get("value")),
        series=series,
    )


_BUILDERS: Dict[ChartKind, Callable[..., RenderableChartSpec]] = {
    ChartKind.CATEGORY_BAR: _single_series("bar"),
    ChartKind.LINE: _single_series("line"),
    ChartKind.PIE: _pie,
    ChartKind.SCATTER: _scatter,
    ChartKind.GROUPED_BAR: _grouped_bar,
}


def dispatch_chart(
    kind: ChartKind,
    keys: ResolvedKeys,
    records: List[Dict[str, Any]],
    palette: List[str],
    *,
    category_label: Optional[str] = None,
    value_label: Optional[str] = None,
    raw_kind: Optional[str] = None,
) -> DispatchResult:
    builder = _BUILDERS.get(kind)
    if builder is None:
        return UnsupportedKind(raw_kind if raw_kind is not None else kind.value)
    labels = {"category": category_label, "value": value_label}
    return builder(keys, records, palette, labels)
