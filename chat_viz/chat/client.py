"""HTTP client for the chat backend."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from chat_viz.models.message import ChatMessage
from chat_viz.utils.logging import log_event

_TIME_FORMAT = "%H:%M"


class ChatApiError(RuntimeError):
    pass


def format_timestamp(value: Any) -> Optional[str]:
    """Render a history timestamp as HH:MM; unparseable values pass through as text."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime(_TIME_FORMAT)
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).strftime(_TIME_FORMAT)
    except ValueError:
        return text


def current_timestamp() -> str:
    return datetime.now().strftime(_TIME_FORMAT)


def format_history(history: List[Dict[str, Any]]) -> List[ChatMessage]:
    messages: List[ChatMessage] = []
    for index, entry in enumerate(history):
        if not isinstance(entry, dict):
            log_event("chat.history.skip", {"index": index, "reason": "not_an_object"}, level="warning")
            continue
        try:
            message = ChatMessage.model_validate(
                {
                    "text": entry.get("content", entry.get("text")),
                    "sender": entry.get("role", entry.get("sender")),
                    "visualization": entry.get("visualization"),
                    "timestamp": format_timestamp(entry.get("timestamp")),
                }
            )
        except ValidationError as exc:
            log_event("chat.history.skip", {"index": index, "reason": str(exc)}, level="warning")
            continue
        messages.append(message)
    return messages


@dataclass
class ChatApiClient:
    base_url: str
    timeout: float = 30.0
    transport: Optional[httpx.BaseTransport] = None

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, path, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            log_event("chat.api.error", {"method": method, "path": path, "error": str(exc)}, level="error")
            raise ChatApiError(f"{method} {path} failed: {exc}") from exc
        except ValueError as exc:
            log_event("chat.api.invalid_json", {"method": method, "path": path}, level="error")
            raise ChatApiError(f"{method} {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise ChatApiError(f"{method} {path} returned {type(data).__name__}, expected object")
        return data

    def create_session(self, client_id: str) -> str:
        data = self._request("POST", "/api/chat/session", {"client_id": client_id})
        chat_id = data.get("chat_id")
        if data.get("status") != "success" or not chat_id:
            raise ChatApiError(f"failed to create session: {data.get('message')}")
        return str(chat_id)

    def fetch_history(self, chat_id: str) -> List[ChatMessage]:
        data = self._request("GET", f"/api/chat/history/{chat_id}")
        history = data.get("history")
        if data.get("status") != "success" or not isinstance(history, list):
            raise ChatApiError(f"failed to fetch history: {data.get('message')}")
        return format_history(history)

    def send_message(self, chat_id: str, text: str) -> ChatMessage:
        data = self._request("POST", "/api/chat", {"message": text, "chat_id": chat_id})
        return ChatMessage(
            text=data.get("response") or "",
            sender="bot",
            visualization=data.get("visualization"),
            timestamp=current_timestamp(),
        )

    def reset(self, chat_id: str) -> None:
        self._request("POST", "/api/reset", {"chat_id": chat_id})
