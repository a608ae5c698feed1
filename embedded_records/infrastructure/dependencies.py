"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from embedded_records.application.interfaces import ContainerRepository, RenderNotifier
from embedded_records.application.services import (
    ContainerService,
    ContainerWriteQueue,
    EditorSessionRegistry,
    EmbeddedRecordEditor,
    EmbeddedRecordManager,
    GroupManager,
    SSEManager,
    SSERenderNotifier,
    Synchronizer,
)
from embedded_records.config import get_settings
from embedded_records.infrastructure.database.repositories import SQLAlchemyContainerRepository
from embedded_records.infrastructure.database.session import get_db_session


# ── Process-wide singletons ──────────────────────────────────────────


@lru_cache
def get_sse_manager() -> SSEManager:
    return SSEManager()


@lru_cache
def get_write_queue() -> ContainerWriteQueue:
    return ContainerWriteQueue(enabled=get_settings().serialize_container_writes)


@lru_cache
def get_session_registry() -> EditorSessionRegistry:
    settings = get_settings()
    return EditorSessionRegistry(
        idle_timeout=timedelta(minutes=settings.editor_session_idle_minutes),
        max_sessions=settings.max_editor_sessions,
    )


# ── Request-scoped ───────────────────────────────────────────────────


def get_acting_user(x_user_id: str | None = Header(None)) -> str | None:
    """The acting user, taken from the ``X-User-Id`` header."""
    return x_user_id


async def get_container_repository(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ContainerRepository, None]:
    yield SQLAlchemyContainerRepository(session)


async def get_container_service(
    repository: ContainerRepository = Depends(get_container_repository),
) -> AsyncGenerator[ContainerService, None]:
    """Provides a ContainerService instance with its repository wired up."""
    yield ContainerService(repository)


def get_render_notifier(sse: SSEManager = Depends(get_sse_manager)) -> RenderNotifier:
    return SSERenderNotifier(sse)


async def get_synchronizer(
    repository: ContainerRepository = Depends(get_container_repository),
    notifier: RenderNotifier = Depends(get_render_notifier),
    write_queue: ContainerWriteQueue = Depends(get_write_queue),
) -> AsyncGenerator[Synchronizer, None]:
    yield Synchronizer(repository, notifier=notifier, write_queue=write_queue)


async def get_editor(
    synchronizer: Synchronizer = Depends(get_synchronizer),
    registry: EditorSessionRegistry = Depends(get_session_registry),
) -> AsyncGenerator[EmbeddedRecordEditor, None]:
    """Provides the editor lifecycle service bound to this request's storage."""
    yield EmbeddedRecordEditor(synchronizer, registry)


async def get_record_manager(
    synchronizer: Synchronizer = Depends(get_synchronizer),
) -> AsyncGenerator[EmbeddedRecordManager, None]:
    yield EmbeddedRecordManager(synchronizer)


async def get_group_manager(
    synchronizer: Synchronizer = Depends(get_synchronizer),
) -> AsyncGenerator[GroupManager, None]:
    yield GroupManager(synchronizer)
