from __future__ import annotations

from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from chat_viz.chat.thread import render_thread
from chat_viz.config.viz_config import get_settings
from chat_viz.engine.resolution import resolve_visualization
from chat_viz.models.chart_spec import ChartRenderResult
from chat_viz.models.message import ChatMessage, RenderedMessage
from chat_viz.utils.logging import log_event, new_request_id

settings = get_settings()
MAX_RECORDS = settings.max_records

app = FastAPI(title="Chat Visualization API")

origins = settings.cors_origins()
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class ResolveRequest(BaseModel):
    visualization: Dict[str, Any] | None = None
    include_figure: bool | None = None


class RenderThreadRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    include_figure: bool | None = None


def _record_count(visualization: Any) -> int:
    if not isinstance(visualization, dict):
        return 0
    data = visualization.get("data", visualization.get("records"))
    return len(data) if isinstance(data, list) else 0


def _validate_record_limit(visualizations: List[Any]) -> None:
    for visualization in visualizations:
        if _record_count(visualization) > MAX_RECORDS:
            raise HTTPException(
                status_code=413,
                detail={"code": "RECORDS_LIMIT_EXCEEDED", "message": f"records size must be <= {MAX_RECORDS}"},
            )


@app.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@app.post("/visualize/resolve", response_model=ChartRenderResult)
def resolve(req: ResolveRequest) -> ChartRenderResult:
    _validate_record_limit([req.visualization])
    request_id = new_request_id()
    log_event(
        "request.resolve",
        {"request_id": request_id, "record_count": _record_count(req.visualization)},
    )
    return resolve_visualization(
        req.visualization,
        settings=settings,
        request_id=request_id,
        include_figure=req.include_figure,
    )


@app.post("/messages/render", response_model=List[RenderedMessage])
def render_messages(req: RenderThreadRequest) -> List[RenderedMessage]:
    _validate_record_limit([message.visualization for message in req.messages])
    log_event("request.render_thread", {"message_count": len(req.messages)})
    return render_thread(req.messages, settings=settings, include_figure=req.include_figure)
