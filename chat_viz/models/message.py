"""Chat message types consumed by the thread renderer."""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from chat_viz.models.chart_spec import ChartRenderResult

SENDER_USER = "user"
SENDER_ASSISTANT = "assistant"
# Live replies from the chat backend are tagged "bot".
_SENDER_ALIASES = {"bot": SENDER_ASSISTANT, "human": SENDER_USER}


class ChatMessage(BaseModel):
    text: str = Field(default="", validation_alias=AliasChoices("text", "content"))
    sender: Literal["user", "assistant"] = Field(
        default=SENDER_ASSISTANT,
        validation_alias=AliasChoices("sender", "role"),
    )
    timestamp: Optional[str] = None
    # Kept as sent; the resolver reports non-object payloads as malformed.
    visualization: Any = None

    @field_validator("text", mode="before")
    @classmethod
    def _text_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("sender", mode="before")
    @classmethod
    def _normalize_sender(cls, value: Any) -> str:
        text = str(value or SENDER_ASSISTANT).strip().lower()
        return _SENDER_ALIASES.get(text, text)

    @property
    def wants_chart(self) -> bool:
        return self.sender == SENDER_ASSISTANT and bool(self.visualization)


class RenderedMessage(BaseModel):
    message: ChatMessage
    chart: Optional[ChartRenderResult] = None
