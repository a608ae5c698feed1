"""Port through which the engine asks the UI layer to re-render or notify."""

from abc import ABC, abstractmethod
from typing import Literal

NoticeLevel = Literal["info", "warning", "error"]


class RenderNotifier(ABC):
    """Implemented by whatever paints editors (SSE broadcaster, test spy, ...)."""

    @abstractmethod
    async def render(self, session_id: str, record: dict) -> None:
        """Ask the editor for ``session_id`` to re-render with ``record``."""
        ...

    @abstractmethod
    async def notify(self, level: NoticeLevel, message: str) -> None:
        """Surface a user-visible notice."""
        ...
