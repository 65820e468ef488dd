"""Render a message thread with one contained chart per assistant reply."""
from __future__ import annotations

from typing import Iterable, List, Optional

from chat_viz.config.viz_config import Settings
from chat_viz.engine.resolution import resolve_visualization
from chat_viz.models.chart_spec import ChartRenderResult
from chat_viz.models.message import ChatMessage, RenderedMessage
from chat_viz.utils.logging import log_event

CHART_FAILED_NOTICE = "Chart could not be displayed"


def render_message(
    message: ChatMessage,
    *,
    settings: Optional[Settings] = None,
    include_figure: Optional[bool] = None,
) -> RenderedMessage:
    if not message.wants_chart:
        return RenderedMessage(message=message)
    try:
        chart = resolve_visualization(
            message.visualization,
            settings=settings,
            include_figure=include_figure,
        )
    except Exception as exc:
        # Fail-safe: the reply text must survive any chart failure.
        log_event("thread.chart.error", {"error": str(exc)}, level="error")
        chart = ChartRenderResult(
            status="placeholder",
            notice=CHART_FAILED_NOTICE,
            error={"code": "RENDER_FAILED", "message": str(exc)},
        )
    return RenderedMessage(message=message, chart=chart)


def render_thread(
    messages: Iterable[ChatMessage],
    *,
    settings: Optional[Settings] = None,
    include_figure: Optional[bool] = None,
) -> List[RenderedMessage]:
    return [
        render_message(message, settings=settings, include_figure=include_figure)
        for message in messages
    ]
