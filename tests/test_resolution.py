from __future__ import annotations

import copy

from chat_viz.config.viz_config import Settings
from chat_viz.engine.resolution import build_resolved_spec, resolve_visualization

_SETTINGS = Settings()


def test_resolve_bar_with_explicit_hints() -> None:
    payload = {
        "type": "bar",
        "data": [{"Region": "East", "Total": 100}, {"Region": "West", "Total": 80}],
        "x_axis": "Region",
        "y_axis": "Total",
    }

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.status == "ok"
    assert result.renderable
    assert result.chart.variant == "category-bar"
    assert result.resolved.category_key == "Region"
    assert result.resolved.value_key == "Total"
    assert result.resolved.normalized_records == payload["data"]
    assert result.request_id.startswith("cv-")


def test_resolve_unsupported_kind_keeps_tag() -> None:
    result = resolve_visualization({"type": "radar", "data": [{"a": "x", "b": 1}]}, settings=_SETTINGS)

    assert result.status == "unsupported"
    assert result.notice == "unknown chart type: radar"
    assert result.error["kind"] == "radar"
    assert result.chart is None


def test_resolve_absent_visualization_is_not_a_chart() -> None:
    assert resolve_visualization(None, settings=_SETTINGS).status == "none"
    assert resolve_visualization({}, settings=_SETTINGS).status == "none"


def test_resolve_empty_data_renders_placeholder() -> None:
    result = resolve_visualization({"type": "bar", "data": []}, settings=_SETTINGS)

    assert result.status == "placeholder"
    assert result.notice == "No data available for this chart"
    assert result.error["code"] == "MALFORMED_DESCRIPTOR"


def test_resolve_non_object_visualization_renders_placeholder() -> None:
    result = resolve_visualization(["not", "a", "descriptor"], settings=_SETTINGS)

    assert result.status == "placeholder"
    assert result.error["code"] == "MALFORMED_DESCRIPTOR"


def test_resolve_missing_group_value_renders_placeholder() -> None:
    payload = {
        "type": "bar",
        "group_by": "segment",
        "data": [
            {"x": "x1", "groups": [{"group": "A", "value": 1}]},
            {"x": "x2", "groups": [{"group": "B", "value": 2}]},
        ],
    }

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.status == "placeholder"
    assert result.error["code"] == "MISSING_GROUP_VALUE"


def test_resolve_is_idempotent_and_leaves_input_untouched() -> None:
    payload = {"type": "pie", "data": [{"Size": "Mid", "Claim": "1200"}, {"Size": "Large", "Claim": "900"}]}
    snapshot = copy.deepcopy(payload)

    first = build_resolved_spec(payload, settings=_SETTINGS)
    second = build_resolved_spec(payload, settings=_SETTINGS)

    assert (first.category_key, first.value_key) == (second.category_key, second.value_key)
    assert len(first.normalized_records) == len(second.normalized_records)
    assert payload == snapshot


def test_resolve_pie_palette_covers_every_wedge() -> None:
    data = [{"label": f"c{i}", "value": i} for i in range(15)]

    result = resolve_visualization({"type": "pie", "data": data}, settings=_SETTINGS)

    assert len(result.resolved.palette) == 15
    assert result.chart.wedges[14].color.endswith("99")


def test_resolve_grouped_bar_from_bar_tag() -> None:
    payload = {
        "type": "bar",
        "group_by": "gender",
        "x_axis": "age_group",
        "data": [
            {"x": "18-39", "groups": [{"group": "M", "y": 12}, {"group": "F", "y": 4}]},
            {"x": "40-64", "groups": [{"group": "M", "y": 9}, {"group": "F", "y": 6}]},
        ],
    }

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.status == "ok"
    assert result.chart.variant == "grouped-bar"
    assert result.resolved.shape == "grouped"
    assert [s.key for s in result.chart.series] == ["M", "F"]
    assert result.resolved.normalized_records[0] == {"age_group": "18-39", "M": 12, "F": 4}


def test_resolve_inconsistent_records_fills_missing_keys() -> None:
    payload = {"type": "bar", "data": [{"Region": "East", "Total": 1}, {"Region": "West"}]}

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.status == "ok"
    codes = [warning["code"] for warning in result.warnings]
    assert "INCONSISTENT_RECORD_SHAPE" in codes
    assert "MISSING_KEY_IN_RECORD" in codes
    assert result.resolved.normalized_records[1] == {"Region": "West", "Total": None}


def test_resolve_accepts_legacy_axis_names() -> None:
    payload = {"type": "line", "data": [{"x": "Jan", "y": 3}], "xAxis": "Month", "yAxis": "Sales"}

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.resolved.category_key == "Month"
    assert result.resolved.value_key == "Sales"
    assert result.resolved.shape == "tuple"


def test_resolve_labels_are_independent_of_keys() -> None:
    payload = {
        "type": "bar",
        "data": [{"Region": "East", "Total": 1}],
        "x_label": "Sales region",
        "y_label": "Claims ($)",
    }

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.chart.category_axis.key == "Region"
    assert result.chart.category_axis.label == "Sales region"
    assert result.chart.value_axis.label == "Claims ($)"


def test_resolve_can_attach_figure_json() -> None:
    payload = {"type": "bar", "data": [{"Region": "East", "Total": 1}]}

    result = resolve_visualization(payload, settings=_SETTINGS, include_figure=True)

    assert result.figure_json is not None
    assert result.figure_json["data"][0]["type"] == "bar"


def test_resolve_mixed_tuple_records_reports_blanked_values() -> None:
    payload = {
        "type": "line",
        "data": [{"x": "Jan", "y": 1}, {"month": "Feb"}],
        "x_axis": "Month",
        "y_axis": "Sales",
    }

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.status == "ok"
    codes = [warning["code"] for warning in result.warnings]
    assert codes.count("INCONSISTENT_RECORD_SHAPE") == 1
    assert {w["key"] for w in result.warnings if w["code"] == "MISSING_KEY_IN_RECORD"} == {"Month", "Sales"}
    assert result.resolved.normalized_records[1] == {"Month": None, "Sales": None}


def test_resolve_integer_beyond_float_range_stays_contained() -> None:
    payload = {"type": "bar", "data": [{"Region": "East", "Total": 10**400}]}

    result = resolve_visualization(payload, settings=_SETTINGS)

    assert result.status == "ok"
    assert result.resolved.category_key == "Region"
    assert result.resolved.value_key == "Total"
