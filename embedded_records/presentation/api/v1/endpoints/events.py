"""Server-sent events stream for editor renders and user notices."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from embedded_records.application.services import SSEManager
from embedded_records.infrastructure.dependencies import get_sse_manager

router = APIRouter(tags=["Events"])


@router.get("/events")
async def stream_events(
    session_id: str | None = Query(None, description="Only follow this editor session"),
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint for editor updates.

    Clients connect via EventSource and receive 'editor.render' events after
    each successful write-back and 'editor.notice' events for user notices.
    """
    return StreamingResponse(
        sse.subscribe(session_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
