"""Structured JSON event logging for chart resolution and the chat plumbing.

Every event is one JSON line on the shared `chat_viz` logger. Extra sinks
(an audit file, a test collector) can subscribe through `add_event_sink`.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List
from uuid import uuid4

EventSink = Callable[[Dict[str, Any]], None]

_LOGGER_NAME = "chat_viz"
_SERVICE_NAME = "chat-viz"
_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_EVENT_SINKS: List[EventSink] = []


def _configured_level() -> int:
    name = str(os.getenv("CV_LOG_LEVEL", "INFO")).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger() -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_configured_level())
    return logger


def new_request_id() -> str:
    """Id tying together the events of one chart resolution."""
    return f"cv-{uuid4().hex[:12]}"


def add_event_sink(sink: EventSink) -> None:
    if sink not in _EVENT_SINKS:
        _EVENT_SINKS.append(sink)


def remove_event_sink(sink: EventSink) -> None:
    if sink in _EVENT_SINKS:
        _EVENT_SINKS.remove(sink)


def log_event(
    event: str,
    payload: Dict[str, Any] | None = None,
    *,
    level: str = "info",
) -> None:
    level_name = level.lower()
    record: Dict[str, Any] = {
        "event": event,
        "ts": datetime.now(timezone.utc).isoformat(),
        "service": _SERVICE_NAME,
        "level": level_name,
        **(payload or {}),
    }
    logger = get_logger()
    emit = getattr(logger, level_name, logger.info)
    emit("%s", json.dumps(record, ensure_ascii=False, default=str))

    # sink에는 JSON 호환 값만 넘긴다
    safe_record = json.loads(json.dumps(record, ensure_ascii=False, default=str))
    for sink in list(_EVENT_SINKS):
        sink(safe_record)
