"""Chat session lifecycle: bootstrap, send, reset."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from chat_viz.chat.client import ChatApiClient, ChatApiError, current_timestamp
from chat_viz.chat.session import (
    JsonFileStore,
    KeyValueStore,
    ensure_client_id,
    forget_chat_id,
    remember_chat_id,
    stored_chat_id,
)
from chat_viz.chat.thread import render_thread
from chat_viz.config.viz_config import Settings, get_settings
from chat_viz.models.message import SENDER_ASSISTANT, SENDER_USER, ChatMessage, RenderedMessage
from chat_viz.utils.logging import log_event

FALLBACK_REPLY = "Oops, something went wrong. Try again!"


@dataclass
class Conversation:
    client: ChatApiClient
    store: KeyValueStore
    chat_id: Optional[str] = None
    messages: List[ChatMessage] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Conversation":
        settings = settings or get_settings()
        client = ChatApiClient(base_url=settings.chat_api_base_url, timeout=settings.chat_api_timeout_sec)
        return cls(client=client, store=JsonFileStore(settings.chat_store_path))

    def start(self) -> List[ChatMessage]:
        """Reload the stored chat if there is one, otherwise open a new session."""
        client_id = ensure_client_id(self.store)
        chat_id = stored_chat_id(self.store)
        if not chat_id:
            self._open_session(client_id)
            return self.messages

        self.chat_id = chat_id
        try:
            self.messages = self.client.fetch_history(chat_id)
        except ChatApiError as exc:
            log_event("conversation.history.error", {"chat_id": chat_id, "error": str(exc)}, level="error")
            self.messages = []
        return self.messages

    def _open_session(self, client_id: str) -> Optional[str]:
        try:
            chat_id = self.client.create_session(client_id)
        except ChatApiError as exc:
            log_event("conversation.session.error", {"client_id": client_id, "error": str(exc)}, level="error")
            return None
        self.chat_id = chat_id
        remember_chat_id(self.store, chat_id)
        log_event("conversation.session.created", {"client_id": client_id, "chat_id": chat_id})
        return chat_id

    def send(self, text: str) -> Optional[ChatMessage]:
        text = (text or "").strip()
        if not text or not self.chat_id:
            return None

        timestamp = current_timestamp()
        self.messages.append(ChatMessage(text=text, sender=SENDER_USER, timestamp=timestamp))
        try:
            reply = self.client.send_message(self.chat_id, text)
            reply = reply.model_copy(update={"timestamp": timestamp})
        except ChatApiError as exc:
            log_event("conversation.send.error", {"chat_id": self.chat_id, "error": str(exc)}, level="error")
            reply = ChatMessage(text=FALLBACK_REPLY, sender=SENDER_ASSISTANT, timestamp=timestamp)
        self.messages.append(reply)
        return reply

    def reset(self) -> Optional[str]:
        if not self.chat_id:
            return None
        try:
            self.client.reset(self.chat_id)
        except ChatApiError as exc:
            log_event("conversation.reset.error", {"chat_id": self.chat_id, "error": str(exc)}, level="error")
            return self.chat_id

        self.messages = []
        self.chat_id = None
        forget_chat_id(self.store)
        return self._open_session(ensure_client_id(self.store))

    def rendered(self, settings: Optional[Settings] = None) -> List[RenderedMessage]:
        return render_thread(self.messages, settings=settings)
