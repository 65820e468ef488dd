"""Load chat visualization settings from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv

# Load project-level .env regardless of current working directory.
_DOTENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_DOTENV_PATH)

# Field names of the claims dataset the assistant was first built against.
DEFAULT_CATEGORY_FALLBACK_FIELDS = ("Vehicle Size",)
DEFAULT_VALUE_FALLBACK_FIELDS = ("Total Claim Amount",)


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _int(value: str | None, default: int, *, minimum: int = 1) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return max(minimum, int(value))
    except ValueError:
        return default


def _float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _str(value: str | None, default: str = "") -> str:
    if value is None:
        return default
    return value


def _list(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    # An explicitly empty variable disables the fallback list.
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    category_fallback_fields: Tuple[str, ...] = DEFAULT_CATEGORY_FALLBACK_FIELDS
    value_fallback_fields: Tuple[str, ...] = DEFAULT_VALUE_FALLBACK_FIELDS
    max_records: int = 10000
    include_figure: bool = False

    chat_api_base_url: str = "http://localhost:5000"
    chat_api_timeout_sec: float = 30.0
    chat_store_path: str = "var/chat_session.json"
    cors_allow_origins: Tuple[str, ...] = ("http://localhost:3000", "http://127.0.0.1:3000")

    def cors_origins(self) -> List[str]:
        return [origin for origin in self.cors_allow_origins if origin]


def load_settings() -> Settings:
    return Settings(
        category_fallback_fields=_list(
            os.getenv("VIZ_CATEGORY_FALLBACK_FIELDS"), DEFAULT_CATEGORY_FALLBACK_FIELDS
        ),
        value_fallback_fields=_list(
            os.getenv("VIZ_VALUE_FALLBACK_FIELDS"), DEFAULT_VALUE_FALLBACK_FIELDS
        ),
        max_records=_int(os.getenv("VIZ_MAX_RECORDS"), 10000),
        include_figure=_bool(os.getenv("VIZ_INCLUDE_FIGURE"), False),
        chat_api_base_url=_str(os.getenv("CHAT_API_BASE_URL"), "http://localhost:5000"),
        chat_api_timeout_sec=_float(os.getenv("CHAT_API_TIMEOUT_SEC"), 30.0),
        chat_store_path=_str(os.getenv("CHAT_STORE_PATH"), "var/chat_session.json"),
        cors_allow_origins=_list(
            os.getenv("CORS_ALLOW_ORIGINS"),
            ("http://localhost:3000", "http://127.0.0.1:3000"),
        ),
    )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_settings()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _SETTINGS
    _SETTINGS = None
