"""Visualization descriptor as sent by the chat backend."""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from chat_viz.engine.errors import MalformedDescriptor


class ChartKind(str, Enum):
    CATEGORY_BAR = "category-bar"
    PIE = "pie"
    LINE = "line"
    SCATTER = "scatter"
    GROUPED_BAR = "grouped-bar"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: Any) -> "ChartKind":
        text = str(tag or "").strip().lower()
        return _KIND_TAGS.get(text, cls.UNKNOWN)


# Backend tags (and their legacy spellings) accepted for each chart kind.
_KIND_TAGS = {
    "bar": ChartKind.CATEGORY_BAR,
    "category-bar": ChartKind.CATEGORY_BAR,
    "category_bar": ChartKind.CATEGORY_BAR,
    "pie": ChartKind.PIE,
    "line": ChartKind.LINE,
    "scatter": ChartKind.SCATTER,
    "grouped-bar": ChartKind.GROUPED_BAR,
    "grouped_bar": ChartKind.GROUPED_BAR,
}


# 입력: backend visualization payload
# 출력: VisualizationDescriptor 모델
class VisualizationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    # 원본 차트 타입 태그 (bar, pie, line, scatter, grouped_bar ...)
    raw_kind: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("type", "kind", "chart_type", "raw_kind"),
    )
    # 레코드 배열. 형태 검증은 normalizer에서 한다
    records: Any = Field(default=None, validation_alias=AliasChoices("data", "records"))
    # 축 필드 힌트
    category_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("x_axis", "xAxis", "categoryField", "category_field"),
    )
    value_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("y_axis", "yAxis", "valueField", "value_field"),
    )
    # 표시용 라벨
    category_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("x_label", "xLabel", "categoryLabel", "category_label"),
    )
    value_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("y_label", "yLabel", "valueLabel", "value_label"),
    )
    group_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("group_by", "groupBy", "groupField", "group_field"),
    )

    @field_validator(
        "raw_kind",
        "category_field",
        "value_field",
        "category_label",
        "value_label",
        "group_field",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None

    @property
    def kind(self) -> ChartKind:
        return ChartKind.from_tag(self.raw_kind)

    @classmethod
    def from_payload(cls, payload: Any) -> "VisualizationDescriptor":
        if isinstance(payload, VisualizationDescriptor):
            return payload
        if not isinstance(payload, Mapping):
            raise MalformedDescriptor(
                "visualization must be an object",
                payload_type=type(payload).__name__,
            )
        return cls.model_validate(dict(payload))


def is_empty_visualization(payload: Any) -> bool:
    """An absent or empty visualization means there is no chart to render."""
    if payload is None:
        return True
    if isinstance(payload, Mapping):
        return len(payload) == 0
    return False
