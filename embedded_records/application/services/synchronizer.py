"""Synchronizer — the single write path from a transient entity back into its container.

Every edit (form submit, rich-editor save, toggle, tint) reloads the target
field from storage, is applied to an isolated clone of the record, mirrored
pre-emptively into local state, and then written to storage as the whole
field. Failures never escape: they are converted into a :class:`WriteOutcome`.
"""

import copy
import logging
from collections.abc import Callable
from typing import Any

from embedded_records.application.interfaces import ContainerRepository, RenderNotifier
from embedded_records.application.services.toggle_codec import ensure_lifecycle, lifecycle_effect
from embedded_records.application.services.write_queue import ContainerWriteQueue
from embedded_records.domain.entities import (
    LIFECYCLE_KINDS,
    Container,
    KeyedRecords,
    RecordLocator,
    TransientEntity,
    WriteOutcome,
    WriteStatus,
)
from embedded_records.domain.exceptions import (
    MalformedRecordError,
    RecordNotFoundError,
    WriteFailureError,
)
from embedded_records.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("embedded_records.sync.synchronizer")

# A mutation receives the isolated record clone. It may change it in place
# (returning None) or return a replacement record.
Mutation = Callable[[dict[str, Any]], dict[str, Any] | None]


class Synchronizer:
    """Applies mutations to embedded records and writes them back."""

    def __init__(
        self,
        repository: ContainerRepository,
        notifier: RenderNotifier | None = None,
        write_queue: ContainerWriteQueue | None = None,
    ):
        self._repository = repository
        self._notifier = notifier
        self._write_queue = write_queue or ContainerWriteQueue(enabled=False)

    async def write_back(
        self,
        container: Container,
        locator: RecordLocator,
        mutate: Mutation,
        *,
        entity: TransientEntity | None = None,
        session_id: str | None = None,
        success_notice: str | None = None,
    ) -> WriteOutcome:
        """Mutate the record at ``locator`` and persist the whole field."""
        async with self._write_queue.slot(container.id):
            try:
                await self._refresh_field(container, locator.field_path)
            except Exception as e:
                slog.step_error(SyncStage.ERROR, "Could not reload field before write", error=e)
                await self._notify("error", f"Failed to save changes to '{container.name}'.")
                return self._outcome(container, locator, WriteStatus.WRITE_FAILED, str(e))

            slog.step_start(
                SyncStage.WRITE_BACK,
                f"Writing '{locator.field_path}'",
                container=container.id,
                record=locator.record_id or "-",
            )

            try:
                new_value, record = self._apply(container, locator, mutate)
            except RecordNotFoundError as e:
                slog.step_warning(SyncStage.WRITE_BACK, str(e), container=container.id)
                return self._outcome(container, locator, WriteStatus.RECORD_NOT_FOUND, str(e))
            except (MalformedRecordError, KeyError, TypeError, ValueError) as e:
                slog.step_error(SyncStage.WRITE_BACK, "Mutation rejected", error=e)
                await self._notify("error", f"Could not apply the change: {e}")
                return self._outcome(container, locator, WriteStatus.REJECTED, str(e))

            # Pre-emptive local update, before the remote write resolves.
            if entity is not None:
                entity.replace_source(record)
            container.apply_update({locator.field_path: new_value})

            try:
                await self.commit_fields(container.id, {locator.field_path: new_value})
            except WriteFailureError as e:
                slog.step_error(SyncStage.ERROR, "Write-back failed, local state kept", error=e)
                await self._notify("error", f"Failed to save changes to '{container.name}'.")
                return self._outcome(
                    container, locator, WriteStatus.WRITE_FAILED, str(e), record=record
                )

            slog.step_complete(
                SyncStage.WRITE_BACK,
                f"Stored '{locator.field_path}'",
                container=container.id,
                record=record.get("id"),
            )

        if session_id is not None:
            await self._render(session_id, record)
        if success_notice:
            await self._notify("info", success_notice)
        return self._outcome(container, locator, WriteStatus.SUCCESS, record=record)

    async def commit_fields(self, container_id: str, changes: dict[str, Any]) -> None:
        """Persist ``{path: value}`` changes, raising WriteFailureError on any rejection."""
        try:
            await self._repository.update_fields(container_id, changes)
        except WriteFailureError:
            raise
        except Exception as e:
            raise WriteFailureError(container_id, ", ".join(changes), cause=e) from e

    # ── Helpers ──────────────────────────────────────────────────────

    def _apply(
        self,
        container: Container,
        locator: RecordLocator,
        mutate: Mutation,
    ) -> tuple[Any, dict[str, Any]]:
        """Return ``(new field value, mutated record)`` without touching the container."""
        current = container.get(locator.field_path)

        if not locator.is_list:
            if not isinstance(current, dict):
                raise RecordNotFoundError(locator.field_path, None)
            record = copy.deepcopy(current)
            result = mutate(record)
            record = result if result is not None else record
            return record, record

        records = KeyedRecords.from_field(current)
        record = records.get(locator.record_id)
        if record is None:
            raise RecordNotFoundError(locator.field_path, locator.record_id)
        result = mutate(record)
        if result is not None:
            record = result
            records.replace(locator.record_id, record)
        return records.to_list(), record

    async def _refresh_field(self, container: Container, field_path: str) -> None:
        """Reload ``field_path`` from storage so the write starts from stored siblings.

        Repairs made in place at materialization (ids, the default lifecycle
        effect) exist only locally until written, so they are carried over
        onto the stored value.
        """
        fresh = await self._repository.get_by_id(container.id)
        if fresh is None:
            return
        value = copy.deepcopy(fresh.get(field_path))
        _carry_repairs(container.get(field_path), value)
        container.apply_update({field_path: value})
        slog.detail("Refreshed field before write", field=field_path)

    async def _render(self, session_id: str, record: dict[str, Any]) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.render(session_id, record)
        except Exception:
            logger.exception("Render notification failed for session %s", session_id)

    async def _notify(self, level: str, message: str) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.notify(level, message)
        except Exception:
            logger.exception("User notice could not be delivered")

    @staticmethod
    def _outcome(
        container: Container,
        locator: RecordLocator,
        status: WriteStatus,
        message: str | None = None,
        record: dict[str, Any] | None = None,
    ) -> WriteOutcome:
        return WriteOutcome(
            status=status,
            container_id=container.id,
            field_path=locator.field_path,
            record_id=locator.record_id or (record or {}).get("id"),
            message=message,
            record=record,
        )


def _carry_repairs(local: Any, stored: Any) -> None:
    """Copy locally repaired ids and lifecycle effects onto ``stored`` in place.

    Records without a stored id are matched by position, as they were when
    the id was assigned.
    """
    if isinstance(local, dict) and isinstance(stored, dict):
        _carry_record_repairs(local, stored)
        return
    if not isinstance(local, list) or not isinstance(stored, list):
        return

    stored_ids = {r.get("id") for r in stored if isinstance(r, dict) and r.get("id")}
    for index, record in enumerate(stored):
        if not isinstance(record, dict) or record.get("id") or index >= len(local):
            continue
        candidate = local[index]
        if isinstance(candidate, dict) and candidate.get("id") and candidate["id"] not in stored_ids:
            record["id"] = candidate["id"]

    local_by_id = {r["id"]: r for r in local if isinstance(r, dict) and r.get("id")}
    for record in stored:
        if isinstance(record, dict) and record.get("id") in local_by_id:
            _carry_record_repairs(local_by_id[record["id"]], record)


def _carry_record_repairs(local: dict[str, Any], stored: dict[str, Any]) -> None:
    if not stored.get("id") and local.get("id"):
        stored["id"] = local["id"]
    if stored.get("kind") in LIFECYCLE_KINDS and not stored.get("effects"):
        effect = lifecycle_effect(local)
        if effect is not None:
            ensure_lifecycle(stored, copy.deepcopy(effect))
        return
    local_effects = local.get("effects")
    stored_effects = stored.get("effects")
    if not isinstance(local_effects, list) or not isinstance(stored_effects, list):
        return
    for descriptor, repaired in zip(stored_effects, local_effects):
        if isinstance(descriptor, dict) and not descriptor.get("id") and isinstance(repaired, dict):
            if repaired.get("id"):
                descriptor["id"] = repaired["id"]
