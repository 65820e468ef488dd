"""Error taxonomy for visualization resolution.

Every error is scoped to a single chart render. `notice` is the text shown in
place of the chart; the assistant reply itself is never affected.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class VisualizationError(Exception):
    code = "VISUALIZATION_ERROR"
    notice = "Chart could not be displayed"
    fatal = True

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class MalformedDescriptor(VisualizationError):
    code = "MALFORMED_DESCRIPTOR"
    notice = "No data available for this chart"


class InconsistentRecordShape(VisualizationError):
    code = "INCONSISTENT_RECORD_SHAPE"
    fatal = False


class MissingGroupValue(VisualizationError):
    code = "MISSING_GROUP_VALUE"

    def __init__(self, category: Any, group: str) -> None:
        super().__init__(
            f"missing value for group {group!r} at category {category!r}",
            category=category,
            group=group,
        )


class MissingKeyInRecord(VisualizationError):
    code = "MISSING_KEY_IN_RECORD"
    fatal = False

    def __init__(self, key: str, record_index: int) -> None:
        super().__init__(
            f"record {record_index} has no field {key!r}",
            key=key,
            record_index=record_index,
        )


class UnresolvableKeys(VisualizationError):
    code = "UNRESOLVABLE_KEYS"


class UnsupportedKind(VisualizationError):
    """Returned (not raised) by the dispatcher for an unknown chart tag."""

    code = "UNSUPPORTED_KIND"

    def __init__(self, kind: Optional[str]) -> None:
        self.kind = "" if kind is None else str(kind)
        super().__init__(f"unsupported chart kind {self.kind!r}", kind=self.kind)
        self.notice = f"unknown chart type: {self.kind}"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, UnsupportedKind) and other.kind == self.kind

    def __hash__(self) -> int:
        return hash((self.code, self.kind))
