from __future__ import annotations

import copy

import pytest

from chat_viz.engine.errors import InconsistentRecordShape, MalformedDescriptor, MissingGroupValue
from chat_viz.engine.normalizer import SHAPE_GROUPED, SHAPE_NAMED, SHAPE_TUPLE, normalize_records
from chat_viz.models.descriptor import VisualizationDescriptor


def _descriptor(**payload) -> VisualizationDescriptor:
    return VisualizationDescriptor.from_payload(payload)


def test_tuple_records_renamed_to_declared_fields() -> None:
    descriptor = _descriptor(type="bar", data=[{"x": 1, "y": 2}], x_axis="Month", y_axis="Sales")

    result = normalize_records(descriptor)

    assert result.records == [{"Month": 1, "Sales": 2}]
    assert result.shape == SHAPE_TUPLE


def test_tuple_records_use_default_name_for_missing_hint() -> None:
    descriptor = _descriptor(type="line", data=[{"x": "Jan", "y": 5}], x_axis="Month")

    result = normalize_records(descriptor)

    assert result.records == [{"Month": "Jan", "yValue": 5}]


def test_tuple_records_without_hints_pass_through() -> None:
    descriptor = _descriptor(type="scatter", data=[{"x": 1, "y": 2}, {"x": 3, "y": 4}])

    result = normalize_records(descriptor)

    assert result.records == [{"x": 1, "y": 2}, {"x": 3, "y": 4}]
    assert result.shape == SHAPE_TUPLE


def test_grouped_records_explode_per_category() -> None:
    descriptor = _descriptor(
        type="bar",
        group_by="region",
        data=[
            {"x": "x1", "groups": [{"group": "A", "value": 1}, {"group": "B", "value": 2}]},
            {"x": "x2", "groups": [{"group": "A", "value": 3}, {"group": "B", "value": 4}]},
        ],
    )

    result = normalize_records(descriptor)

    assert result.shape == SHAPE_GROUPED
    assert result.series_keys == ("A", "B")
    assert result.category_key == "xValue"
    assert result.records == [
        {"xValue": "x1", "A": 1, "B": 2},
        {"xValue": "x2", "A": 3, "B": 4},
    ]


def test_grouped_records_accept_legacy_value_key_and_category_hint() -> None:
    descriptor = _descriptor(
        type="bar",
        group_by="gender",
        x_axis="Quarter",
        data=[
            {"x": "Q1", "groups": [{"group": "M", "y": 10}, {"group": "F", "y": 12}]},
            {"x": "Q2", "groups": [{"group": "F", "y": 9}, {"group": "M", "y": 7}]},
        ],
    )

    result = normalize_records(descriptor)

    assert result.series_keys == ("M", "F")
    assert result.records[1] == {"Quarter": "Q2", "M": 7, "F": 9}


def test_grouped_records_missing_group_value_raises() -> None:
    descriptor = _descriptor(
        type="bar",
        group_by="segment",
        data=[
            {"x": "x1", "groups": [{"group": "B", "value": 1}, {"group": "A", "value": 2}]},
            {"x": "x2", "groups": [{"group": "A", "value": 3}, {"group": "C", "value": 4}]},
        ],
    )

    with pytest.raises(MissingGroupValue) as excinfo:
        normalize_records(descriptor)

    assert excinfo.value.details == {"category": "x1", "group": "C"}


def test_group_field_without_nested_lists_is_not_grouped() -> None:
    descriptor = _descriptor(type="bar", group_by="region", data=[{"region": "East", "total": 5}])

    result = normalize_records(descriptor)

    assert result.shape == SHAPE_NAMED
    assert result.series_keys == ()


@pytest.mark.parametrize(
    "data",
    [None, [], "abc", {"a": 1}, [1, 2], [{"a": [1, 2]}], [{"a": 1}, "oops"]],
)
def test_malformed_records_raise(data) -> None:
    descriptor = _descriptor(type="bar", data=data)

    with pytest.raises(MalformedDescriptor):
        normalize_records(descriptor)


def test_normalize_does_not_mutate_input() -> None:
    data = [{"x": 1, "y": 2}, {"x": 3, "y": 4}]
    snapshot = copy.deepcopy(data)
    descriptor = _descriptor(type="line", data=data, x_axis="Month", y_axis="Sales")

    result = normalize_records(descriptor)
    result.records[0]["Month"] = 99

    assert data == snapshot


def test_inconsistent_second_record_is_reported_not_fatal() -> None:
    descriptor = _descriptor(type="bar", data=[{"a": "x", "b": 2}, {"a": "y"}])

    result = normalize_records(descriptor)

    assert result.records == [{"a": "x", "b": 2}, {"a": "y"}]
    assert len(result.issues) == 1
    assert isinstance(result.issues[0], InconsistentRecordShape)


def test_non_tuple_record_in_tuple_data_is_reported_and_kept() -> None:
    descriptor = _descriptor(
        type="line",
        data=[{"x": "Jan", "y": 1}, {"month": "Feb"}],
        x_axis="Month",
        y_axis="Sales",
    )

    result = normalize_records(descriptor)

    assert result.records == [{"Month": "Jan", "Sales": 1}, {"month": "Feb"}]
    assert len(result.issues) == 1
    assert isinstance(result.issues[0], InconsistentRecordShape)
    assert result.issues[0].details["second_fields"] == ["month"]
