from __future__ import annotations

import re

from chat_viz.config.viz_config import Settings
from chat_viz.engine.resolution import resolve_visualization
from chat_viz.utils.logging import add_event_sink, log_event, new_request_id, remove_event_sink


def test_new_request_id_format() -> None:
    assert re.fullmatch(r"cv-[0-9a-f]{12}", new_request_id())


def test_log_event_reaches_sinks_as_json_values() -> None:
    events = []
    add_event_sink(events.append)
    try:
        log_event("custom.event", {"count": 3, "kind": object}, level="warning")
    finally:
        remove_event_sink(events.append)

    assert len(events) == 1
    assert events[0]["event"] == "custom.event"
    assert events[0]["level"] == "warning"
    assert events[0]["service"] == "chat-viz"
    assert events[0]["count"] == 3
    assert isinstance(events[0]["kind"], str)


def test_resolution_logs_request_id_and_latency() -> None:
    events = []
    add_event_sink(events.append)
    try:
        result = resolve_visualization(
            {"type": "bar", "data": [{"Region": "East", "Total": 1}]},
            settings=Settings(),
            request_id="cv-test",
        )
    finally:
        remove_event_sink(events.append)

    done = [event for event in events if event["event"] == "resolve.done"]
    assert result.request_id == "cv-test"
    assert done and done[0]["request_id"] == "cv-test"
    assert done[0]["latency_ms"] >= 0
