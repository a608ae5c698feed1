"""Editor lifecycle service — open, edit and close embedded records.

Each open editor is an :class:`EditorSession` holding its transient entity,
its container and the locator of the record it edits. Every edit funnels
through :meth:`Synchronizer.write_back`; there is no second write path.
"""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Any

from embedded_records.application.services.character_effects import build_changes
from embedded_records.application.services.materializer import Materializer
from embedded_records.application.services.record_codec import build_default_effect
from embedded_records.application.services.synchronizer import Mutation, Synchronizer
from embedded_records.application.services.toggle_codec import apply_toggle, ensure_lifecycle
from embedded_records.domain.data_paths import merge_object, set_property
from embedded_records.domain.entities import (
    LIFECYCLE_KINDS,
    Container,
    ContainerKind,
    EditorSession,
    KeyedRecords,
    RecordKind,
    RecordLocator,
    WriteOutcome,
    WriteStatus,
)
from embedded_records.domain.exceptions import RecordNotFoundError
from embedded_records.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("embedded_records.sync.editor")


class EditorSessionRegistry:
    """In-process registry of open editor sessions, keyed by session id.

    Sessions idle for longer than ``idle_timeout`` are evicted on the next
    access. Once ``max_sessions`` are open, adding a session evicts the least
    recently used one. Evicted sessions are marked closed so that a caller
    still holding one gets SKIPPED outcomes instead of writes.
    """

    def __init__(
        self,
        idle_timeout: timedelta = timedelta(hours=1),
        max_sessions: int = 500,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._sessions: dict[str, EditorSession] = {}
        self.idle_timeout = idle_timeout
        self.max_sessions = max_sessions
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def add(self, session: EditorSession) -> None:
        self.prune()
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.last_used)
            self._evict(oldest, "capacity")
        session.last_used = self._clock()
        self._sessions[session.id] = session

    def get(self, session_id: str) -> EditorSession | None:
        self.prune()
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_used = self._clock()
        return session

    def remove(self, session_id: str) -> EditorSession | None:
        return self._sessions.pop(session_id, None)

    def remove_container(self, container_id: str) -> list[EditorSession]:
        """Close and drop every session editing ``container_id``."""
        sessions = self.for_container(container_id)
        for session in sessions:
            self._evict(session, "container deleted")
        return sessions

    def prune(self) -> int:
        """Evict sessions idle past the timeout; returns how many were evicted."""
        cutoff = self._clock() - self.idle_timeout
        stale = [s for s in self._sessions.values() if s.last_used < cutoff]
        for session in stale:
            self._evict(session, "idle")
        return len(stale)

    def for_container(self, container_id: str) -> list[EditorSession]:
        return [s for s in self._sessions.values() if s.container.id == container_id]

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[EditorSession]:
        return iter(list(self._sessions.values()))

    def _evict(self, session: EditorSession, reason: str) -> None:
        self._sessions.pop(session.id, None)
        session.closed = True
        logger.info("Evicted editor %s (%s)", session.id, reason)


def default_locator(container: Container, record: dict[str, Any], is_effect: bool) -> RecordLocator:
    """Where a record opened from ``container`` is stored, by container kind."""
    record_id = record["id"]
    kind = record.get("kind")
    if container.kind == ContainerKind.TRANSFORMATION.value:
        if kind == RecordKind.ACTION_CARD.value:
            return RecordLocator.member("embeddedActionCards", record_id)
        return RecordLocator.member("embeddedCombatPowers", record_id)
    if container.kind == ContainerKind.ACTOR.value:
        return RecordLocator.member("actionCards", record_id)
    if is_effect:
        return RecordLocator.member("embeddedEffects", record_id)
    if kind == RecordKind.TRANSFORMATION.value:
        return RecordLocator.member("embeddedTransformations", record_id)
    return RecordLocator.single("embeddedItem")


class EmbeddedRecordEditor:
    """Drives one or more editor sessions over embedded records."""

    def __init__(
        self,
        synchronizer: Synchronizer,
        registry: EditorSessionRegistry,
        materializer: Materializer | None = None,
    ):
        self._synchronizer = synchronizer
        self._registry = registry
        self._materializer = materializer or Materializer()

    # ── Lifecycle ────────────────────────────────────────────────────

    def open(
        self,
        record: dict[str, Any],
        container: Container,
        is_effect: bool = False,
        locator: RecordLocator | None = None,
    ) -> EditorSession:
        """Materialize ``record`` and register an editor session for it.

        ``record`` should be the live value held by ``container`` so that
        repairs made while materializing (fresh ids, the default lifecycle
        effect) are persisted by the next write-back.
        """
        entity = self._materializer.materialize(record, container, is_effect)
        locator = locator or default_locator(container, record, is_effect)
        if locator.is_list and locator.record_id != entity.original_id:
            locator = RecordLocator.member(locator.field_path, entity.original_id)

        session = EditorSession(entity=entity, container=container, locator=locator)
        self._registry.add(session)
        logger.info(
            "Opened editor %s for '%s' (%s) in container %s",
            session.id,
            entity.name,
            locator.field_path,
            container.id,
        )
        return session

    def open_record(
        self,
        container: Container,
        field_path: str,
        record_id: str | None = None,
        is_effect: bool = False,
    ) -> EditorSession:
        """Open the record stored at ``field_path`` (and ``record_id`` for lists).

        Raises:
            RecordNotFoundError: If no record is stored there.
        """
        value = container.get(field_path)
        if record_id is None:
            if not isinstance(value, dict):
                raise RecordNotFoundError(field_path, None)
            return self.open(value, container, is_effect, RecordLocator.single(field_path))

        # Look the record up in the live list, not a clone.
        record = KeyedRecords(value if isinstance(value, list) else []).get(record_id)
        if record is None:
            raise RecordNotFoundError(field_path, record_id)
        return self.open(
            record, container, is_effect, RecordLocator.member(field_path, record_id)
        )

    def get_session(self, session_id: str) -> EditorSession | None:
        return self._registry.get(session_id)

    def close(self, session: EditorSession) -> WriteOutcome:
        """Unregister the session. Writes already in flight are not cancelled."""
        session.closed = True
        self._registry.remove(session.id)
        logger.info("Closed editor %s", session.id)
        return self._outcome(session, WriteStatus.SUCCESS)

    # ── Edits ────────────────────────────────────────────────────────

    async def on_save(self, session: EditorSession, field_path: str, content: Any) -> WriteOutcome:
        """Rich-editor save of a single property (description, image, ...)."""

        def mutate(record: dict[str, Any]) -> None:
            set_property(record, field_path, content)

        return await self._write(session, mutate, notice=f"Saved '{field_path}'.")

    async def on_submit(self, session: EditorSession, form_data: dict[str, Any]) -> WriteOutcome:
        """Deep-merge submitted form data into the record."""
        if not isinstance(form_data, dict):
            return self._outcome(session, WriteStatus.REJECTED, "Form data must be a mapping")

        def mutate(record: dict[str, Any]) -> None:
            merge_object(record, form_data)

        return await self._write(session, mutate)

    async def on_toggle(self, session: EditorSession, checked: bool) -> WriteOutcome:
        """Switch the record's lifecycle effect on or off."""
        fallback = self._fallback_effect(session)
        if fallback is None:
            slog.step_warning(
                SyncStage.TOGGLE, "No lifecycle effect to toggle", record=session.entity.id
            )
            return self._outcome(session, WriteStatus.SKIPPED, "Record has no lifecycle effect")

        def mutate(record: dict[str, Any]) -> None:
            apply_toggle(record, bool(checked), fallback)

        slog.step_start(SyncStage.TOGGLE, f"Toggling '{session.entity.name}'", on=bool(checked))
        return await self._write(session, mutate)

    async def on_tint_change(self, session: EditorSession, tint: str) -> WriteOutcome:
        fallback = self._fallback_effect(session)
        if fallback is None:
            return self._outcome(session, WriteStatus.SKIPPED, "Record has no lifecycle effect")

        def mutate(record: dict[str, Any]) -> None:
            ensure_lifecycle(record, fallback)["tint"] = tint

        return await self._write(session, mutate)

    async def on_character_effects(
        self,
        session: EditorSession,
        regular: list[dict[str, Any]],
        hidden: list[dict[str, Any]],
        new_effect: dict[str, Any] | None = None,
    ) -> WriteOutcome:
        """Rebuild the lifecycle effect's ``changes`` from ability rows."""
        fallback = self._fallback_effect(session)
        if fallback is None:
            logger.warning(
                "No lifecycle effect found and none can be created for '%s'",
                session.entity.name,
            )
            return self._outcome(session, WriteStatus.SKIPPED, "Record has no lifecycle effect")

        changes = build_changes(regular, hidden, new_effect)

        def mutate(record: dict[str, Any]) -> None:
            ensure_lifecycle(record, fallback)["changes"] = changes

        return await self._write(session, mutate)

    # ── Helpers ──────────────────────────────────────────────────────

    async def _write(
        self,
        session: EditorSession,
        mutate: Mutation,
        notice: str | None = None,
    ) -> WriteOutcome:
        if session.closed:
            return self._outcome(session, WriteStatus.SKIPPED, "Editor is closed")
        if not session.entity.is_editable:
            logger.warning(
                "Edit refused: container %s is not editable for user %s",
                session.container.id,
                session.container.acting_user_id,
            )
            return self._outcome(session, WriteStatus.NOT_EDITABLE, "Container is not editable")
        return await self._synchronizer.write_back(
            session.container,
            session.locator,
            mutate,
            entity=session.entity,
            session_id=session.id,
            success_notice=notice,
        )

    @staticmethod
    def _fallback_effect(session: EditorSession) -> dict[str, Any] | None:
        """The entity's lifecycle effect, or a fresh default for status/gear."""
        entity = session.entity
        if entity.first_effect is not None:
            return entity.first_effect.to_object()
        if entity.kind in LIFECYCLE_KINDS:
            return build_default_effect(entity.to_object())
        return None

    @staticmethod
    def _outcome(
        session: EditorSession,
        status: WriteStatus,
        message: str | None = None,
    ) -> WriteOutcome:
        return WriteOutcome(
            status=status,
            container_id=session.container.id,
            field_path=session.locator.field_path,
            record_id=session.entity.original_id,
            message=message,
        )
