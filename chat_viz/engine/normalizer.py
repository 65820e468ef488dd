"""Record shape normalization.

- Grouped records (one record holding several named sub-series) are exploded
  into one flat record per category with one field per group name.
- Tuple records ({x, y}) are renamed to the caller-declared axis fields.
- Anything else passes through as new dict copies; input records are never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from chat_viz.engine.errors import (
    InconsistentRecordShape,
    MalformedDescriptor,
    MissingGroupValue,
    VisualizationError,
)
from chat_viz.models.descriptor import VisualizationDescriptor
from chat_viz.utils.logging import log_event

TUPLE_X_FIELD = "x"
TUPLE_Y_FIELD = "y"
DEFAULT_CATEGORY_KEY = "xValue"
DEFAULT_VALUE_KEY = "yValue"
GROUP_LIST_FIELD = "groups"
_GROUP_NAME_FIELD = "group"
# "y" is the legacy spelling used by older backend replies.
_GROUP_VALUE_FIELDS = ("value", "y")
_SCALAR_TYPES = (str, int, float, bool, type(None))

SHAPE_NAMED = "named"
SHAPE_TUPLE = "tuple"
SHAPE_GROUPED = "grouped"


@dataclass(frozen=True)
class NormalizedShape:
    records: List[Dict[str, Any]]
    shape: str = SHAPE_NAMED
    # grouped 전개로 생긴 시리즈 필드 (first-seen order)
    series_keys: Tuple[str, ...] = ()
    category_key: Optional[str] = None
    issues: Tuple[VisualizationError, ...] = ()


def _require_records(records: Any) -> List[Mapping[str, Any]]:
    if records is None:
        raise MalformedDescriptor("visualization has no data")
    if not isinstance(records, (list, tuple)):
        raise MalformedDescriptor("visualization data must be an array", data_type=type(records).__name__)
    if not records:
        raise MalformedDescriptor("visualization data is empty")
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise MalformedDescriptor(
                "every record must be an object of field values",
                record_index=index,
                record_type=type(record).__name__,
            )
    return list(records)


def _require_scalar_fields(record: Mapping[str, Any], *, skip: Sequence[str] = ()) -> None:
    for name, value in record.items():
        if name in skip:
            continue
        if not isinstance(value, _SCALAR_TYPES):
            raise MalformedDescriptor(
                "record fields must hold scalar values",
                field=str(name),
                value_type=type(value).__name__,
            )


def _group_entries(record: Mapping[str, Any], group_field: Optional[str]) -> Optional[List[Any]]:
    for name in (GROUP_LIST_FIELD, group_field):
        if not name:
            continue
        entries = record.get(name)
        if isinstance(entries, list) and all(isinstance(entry, Mapping) for entry in entries):
            return entries
    return None


def _is_grouped(descriptor: VisualizationDescriptor, records: List[Mapping[str, Any]]) -> bool:
    if not descriptor.group_field:
        return False
    return all(_group_entries(record, descriptor.group_field) is not None for record in records)


def _category_coordinate(record: Mapping[str, Any], descriptor: VisualizationDescriptor) -> Any:
    if TUPLE_X_FIELD in record:
        return record[TUPLE_X_FIELD]
    if descriptor.category_field and descriptor.category_field in record:
        return record[descriptor.category_field]
    for name, value in record.items():
        if name in (GROUP_LIST_FIELD, descriptor.group_field):
            continue
        if isinstance(value, _SCALAR_TYPES):
            return value
    return None


def _explode_groups(
    descriptor: VisualizationDescriptor,
    records: List[Mapping[str, Any]],
) -> NormalizedShape:
    category_key = descriptor.category_field or DEFAULT_CATEGORY_KEY
    group_names: List[str] = []
    rows: List[Tuple[Any, Dict[str, Any]]] = []

    for record in records:
        values: Dict[str, Any] = {}
        for entry in _group_entries(record, descriptor.group_field) or []:
            name = str(entry.get(_GROUP_NAME_FIELD))
            if name == category_key:
                raise MalformedDescriptor(
                    "group name collides with the category field",
                    group=name,
                )
            if name not in group_names:
                group_names.append(name)
            for value_field in _GROUP_VALUE_FIELDS:
                if value_field in entry:
                    values[name] = entry[value_field]
                    break
        rows.append((_category_coordinate(record, descriptor), values))

    exploded: List[Dict[str, Any]] = []
    for category, values in rows:
        flat: Dict[str, Any] = {category_key: category}
        for name in group_names:
            if name not in values:
                raise MissingGroupValue(category, name)
            flat[name] = values[name]
        exploded.append(flat)

    return NormalizedShape(
        records=exploded,
        shape=SHAPE_GROUPED,
        series_keys=tuple(group_names),
        category_key=category_key,
    )


def _rename_tuple(record: Mapping[str, Any], category_key: str, value_key: str) -> Dict[str, Any]:
    if set(record.keys()) == {TUPLE_X_FIELD, TUPLE_Y_FIELD}:
        return {category_key: record[TUPLE_X_FIELD], value_key: record[TUPLE_Y_FIELD]}
    # 다른 모양의 레코드는 x/y 키만 바꾸고 나머지 필드는 그대로 둔다
    names = {TUPLE_X_FIELD: category_key, TUPLE_Y_FIELD: value_key}
    return {names.get(name, name): value for name, value in record.items()}


def _rename_tuples(
    descriptor: VisualizationDescriptor,
    records: List[Mapping[str, Any]],
) -> Optional[NormalizedShape]:
    category_key = descriptor.category_field or DEFAULT_CATEGORY_KEY
    value_key = descriptor.value_field or DEFAULT_VALUE_KEY
    if category_key == value_key:
        log_event(
            "normalize.tuple.name_collision",
            {"category_key": category_key, "value_key": value_key},
            level="warning",
        )
        return None
    renamed = [_rename_tuple(record, category_key, value_key) for record in records]
    return NormalizedShape(records=renamed, shape=SHAPE_TUPLE)


def _check_uniform(records: Sequence[Mapping[str, Any]]) -> Tuple[VisualizationError, ...]:
    if len(records) < 2:
        return ()
    first_fields = list(records[0].keys())
    second_fields = list(records[1].keys())
    if set(first_fields) == set(second_fields):
        return ()
    issue = InconsistentRecordShape(
        "records do not share one field set",
        first_fields=first_fields,
        second_fields=second_fields,
    )
    log_event("normalize.inconsistent_shape", issue.to_dict(), level="warning")
    return (issue,)


def normalize_records(descriptor: VisualizationDescriptor) -> NormalizedShape:
    records = _require_records(descriptor.records)
    first = records[0]
    # shape check runs on the records as sent, before any renaming
    issues = _check_uniform(records)

    if _is_grouped(descriptor, records):
        _require_scalar_fields(first, skip=(GROUP_LIST_FIELD, descriptor.group_field or ""))
        normalized = _explode_groups(descriptor, records)
    else:
        _require_scalar_fields(first)
        normalized = None
        is_tuple = set(first.keys()) == {TUPLE_X_FIELD, TUPLE_Y_FIELD}
        if is_tuple and (descriptor.category_field or descriptor.value_field):
            normalized = _rename_tuples(descriptor, records)
        if normalized is None:
            normalized = NormalizedShape(
                records=[dict(record) for record in records],
                shape=SHAPE_TUPLE if is_tuple else SHAPE_NAMED,
            )

    if not issues:
        return normalized
    return NormalizedShape(
        records=normalized.records,
        shape=normalized.shape,
        series_keys=normalized.series_keys,
        category_key=normalized.category_key,
        issues=normalized.issues + issues,
    )
