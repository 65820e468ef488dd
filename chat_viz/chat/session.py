"""Client/session id persistence through an injected key-value store."""
from __future__ import annotations

import json
import random
import string
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from chat_viz.utils.logging import log_event

CLIENT_ID_KEY = "client_id"
CHAT_ID_KEY = "chat_id"
_CLIENT_ID_SUFFIX_LEN = 9
_BASE36 = string.digits + string.ascii_lowercase


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@dataclass
class InMemoryStore:
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class JsonFileStore:
    """String values kept in one JSON object on disk."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            log_event("session.store.corrupt", {"path": str(self.path)}, level="warning")
            return {}
        if isinstance(data, dict):
            return {str(k): str(v) for k, v in data.items() if v is not None}
        return {}

    def _save(self, payload: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, ensure_ascii=True), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        payload = self._load()
        payload[key] = value
        self._save(payload)

    def delete(self, key: str) -> None:
        payload = self._load()
        if key in payload:
            del payload[key]
            self._save(payload)


def generate_client_id(
    *,
    clock: Callable[[], float] = time.time,
    rng: Optional[random.Random] = None,
) -> str:
    rng = rng or random.Random()
    millis = int(clock() * 1000)
    suffix = "".join(rng.choice(_BASE36) for _ in range(_CLIENT_ID_SUFFIX_LEN))
    return f"client_{millis}_{suffix}"


def ensure_client_id(store: KeyValueStore, *, factory: Callable[[], str] = generate_client_id) -> str:
    client_id = store.get(CLIENT_ID_KEY)
    if client_id:
        return client_id
    client_id = factory()
    store.set(CLIENT_ID_KEY, client_id)
    log_event("session.client_id.created", {"client_id": client_id})
    return client_id


def stored_chat_id(store: KeyValueStore) -> Optional[str]:
    return store.get(CHAT_ID_KEY) or None


def remember_chat_id(store: KeyValueStore, chat_id: str) -> None:
    store.set(CHAT_ID_KEY, chat_id)


def forget_chat_id(store: KeyValueStore) -> None:
    store.delete(CHAT_ID_KEY)
