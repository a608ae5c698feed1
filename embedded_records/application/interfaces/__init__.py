from .container_repository import ContainerRepository
from .render_notifier import NoticeLevel, RenderNotifier

__all__ = [
    "ContainerRepository",
    "NoticeLevel",
    "RenderNotifier",
]
