"""RenderNotifier backed by the SSE broadcaster."""

from typing import Any

from embedded_records.application.interfaces import NoticeLevel, RenderNotifier
from embedded_records.application.services.sse_manager import SSEManager

RENDER_EVENT = "editor.render"
NOTICE_EVENT = "editor.notice"


class SSERenderNotifier(RenderNotifier):
    def __init__(self, sse: SSEManager):
        self._sse = sse

    async def render(self, session_id: str, record: dict[str, Any]) -> None:
        await self._sse.broadcast(
            RENDER_EVENT, {"session_id": session_id, "record": record}, session_id=session_id
        )

    async def notify(self, level: NoticeLevel, message: str) -> None:
        await self._sse.broadcast(NOTICE_EVENT, {"level": level, "message": message})
