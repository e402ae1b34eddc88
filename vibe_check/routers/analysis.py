"""Analysis endpoints for the Vibe Check FastAPI backend."""

from __future__ import annotations

import json
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .. import __version__
from ..errors import ValidationError
from ..pipeline import AnalysisPipeline, Notification
from ..schemas import DEFAULT_SKILL_LEVEL, AnalyzeRequest, HealthResponse
from ..store import ResultStore


router = APIRouter(prefix="/api", tags=["analysis"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_pipeline(request: Request) -> AnalysisPipeline:
    return request.app.state.pipeline


def get_store(request: Request) -> ResultStore:
    return request.app.state.store


def format_sse(notification: Notification) -> str:
    """Render a notification as one ``text/event-stream`` frame."""

    return f"event: {notification.event}\ndata: {json.dumps(notification.data, allow_nan=False)}\n\n"


@router.get("/health", response_model=HealthResponse)
async def healthcheck() -> HealthResponse:
    """Simple health check endpoint."""

    return HealthResponse(status="ok", version=__version__)


@router.post("/analyze")
async def analyze(
    payload: Optional[AnalyzeRequest] = None,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> StreamingResponse:
    """Stream stage results for an idea as server-sent events."""

    idea = payload.idea if payload else None
    if not idea or not idea.strip():
        raise ValidationError("idea is required")
    skill_level = (payload.skill_level or "").strip() or DEFAULT_SKILL_LEVEL

    def stream() -> Iterator[str]:
        for notification in pipeline.run(idea, skill_level):
            yield format_sse(notification)

    return StreamingResponse(stream(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/result/{result_id}")
def fetch_result(result_id: str, store: ResultStore = Depends(get_store)) -> JSONResponse:
    """Return a previously stored analysis by its shareable identifier."""

    record = store.get(result_id)
    return JSONResponse(record.to_public())
