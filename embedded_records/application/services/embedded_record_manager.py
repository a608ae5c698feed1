"""Container-level management of embedded records: set, add, remove, create.

Each operation writes the whole field once. Local container state is only
updated after storage accepted the write.
"""

import copy
import logging
from typing import Any

from embedded_records.application.services import default_data
from embedded_records.application.services.record_codec import RecordCodec
from embedded_records.application.services.synchronizer import Synchronizer
from embedded_records.domain.entities import (
    CONTAINER_FIELDS,
    LIFECYCLE_KINDS,
    Container,
    ContainerKind,
    KeyedRecords,
    RecordKind,
)
from embedded_records.domain.exceptions import UnsupportedRecordKindError, WriteFailureError
from embedded_records.domain.ids import new_id
from embedded_records.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("embedded_records.sync.records")

EMBEDDED_ITEM_KINDS = [
    RecordKind.COMBAT_POWER.value,
    RecordKind.GEAR.value,
    RecordKind.FEATURE.value,
]
ROLL_TYPES = ("roll", "flat", "none")


class EmbeddedRecordManager:
    """Adds, replaces and removes records held by a container."""

    def __init__(self, synchronizer: Synchronizer, codec: RecordCodec | None = None):
        self._synchronizer = synchronizer
        self._codec = codec or RecordCodec()

    # ── Action card: single embedded item ────────────────────────────

    async def set_embedded_item(self, container: Container, record: dict[str, Any]) -> bool:
        """Store a copy of ``record`` as the action card's embedded item.

        Raises:
            UnsupportedRecordKindError: If the record is not a combat power, gear or feature.
        """
        self._require_kind(record, EMBEDDED_ITEM_KINDS)
        if not self._has_field(container, "embeddedItem"):
            return False

        item = copy.deepcopy(record)
        item["id"] = new_id()
        item.setdefault("system", {})
        item.setdefault("effects", [])
        sanitize_roll(item)
        self._codec.ensure_lifecycle_effect(item)
        self._codec.ensure_identity(item)

        return await self._commit(
            container, {"embeddedItem": item}, f"Set embedded item '{item.get('name', '')}'"
        )

    async def clear_embedded_item(self, container: Container) -> bool:
        if not self._has_field(container, "embeddedItem"):
            return False
        return await self._commit(container, {"embeddedItem": None}, "Cleared embedded item")

    # ── List fields ──────────────────────────────────────────────────

    async def add_embedded_effect(self, container: Container, record: dict[str, Any]) -> bool:
        """Append a status or gear record to ``embeddedEffects`` under a fresh id."""
        self._require_kind(record, sorted(LIFECYCLE_KINDS))
        effect = copy.deepcopy(record)
        effect["id"] = new_id()
        self._codec.ensure_lifecycle_effect(effect)
        self._codec.ensure_identity(effect)
        return await self._append(container, "embeddedEffects", effect)

    async def add_embedded_transformation(self, container: Container, record: dict[str, Any]) -> bool:
        self._require_kind(record, [RecordKind.TRANSFORMATION.value])
        transformation = copy.deepcopy(record)
        transformation["id"] = new_id()
        return await self._append(container, "embeddedTransformations", transformation)

    async def add_combat_power(self, container: Container, record: dict[str, Any]) -> bool:
        """Add a combat power to a transformation; a power already present is ignored."""
        self._require_kind(record, [RecordKind.COMBAT_POWER.value])
        return await self._append_unique(container, "embeddedCombatPowers", record)

    async def add_action_card(self, container: Container, record: dict[str, Any]) -> bool:
        self._require_kind(record, [RecordKind.ACTION_CARD.value])
        return await self._append_unique(container, "embeddedActionCards", record)

    async def remove_embedded_record(
        self, container: Container, field_path: str, record_id: str
    ) -> bool:
        """Remove ``record_id`` from a list field. A missing id is a no-op."""
        if not record_id:
            logger.warning("No record id provided for removal from '%s'", field_path)
            return False
        if not self._has_field(container, field_path):
            return False

        records = KeyedRecords.from_field(container.get(field_path))
        skipped = len(records) - len(records.ids())
        if skipped:
            logger.warning(
                "Skipping %d malformed entries in '%s' of container %s",
                skipped,
                field_path,
                container.id,
            )
        if records.remove(record_id) is None:
            logger.info("Record %s not found in '%s' — nothing to remove", record_id, field_path)
            return True

        return await self._commit(
            container, {field_path: records.to_list()}, f"Removed {record_id} from '{field_path}'"
        )

    # ── Create from defaults ─────────────────────────────────────────

    async def create_new_power(self, container: Container) -> bool:
        """New combat power: the action card's embedded item, or a transformation's power."""
        if container.kind == ContainerKind.TRANSFORMATION.value:
            return await self.add_combat_power(
                container, default_data.combat_power_data(container, "transformation")
            )
        return await self.set_embedded_item(
            container, default_data.combat_power_data(container, "actionCard")
        )

    async def create_new_status(self, container: Container) -> bool:
        current = container.get("embeddedEffects") or []
        if current:
            logger.warning(
                "Create new status called but %d effects still exist on %s",
                len(current),
                container.id,
            )
            return False
        return await self.add_embedded_effect(container, default_data.status_data(container))

    async def create_new_transformation(self, container: Container) -> bool:
        return await self.add_embedded_transformation(
            container, default_data.transformation_data(container)
        )

    async def create_new_action_card(self, container: Container) -> bool:
        return await self.add_action_card(container, default_data.action_card_data(container))

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _require_kind(record: dict[str, Any], supported: list[str]) -> None:
        kind = record.get("kind") if isinstance(record, dict) else None
        if kind not in supported:
            raise UnsupportedRecordKindError(str(kind), supported)

    @staticmethod
    def _has_field(container: Container, field_path: str) -> bool:
        if field_path in CONTAINER_FIELDS.get(container.kind, {}):
            return True
        logger.warning(
            "Container kind '%s' has no embedded field '%s'", container.kind, field_path
        )
        return False

    async def _append(self, container: Container, field_path: str, record: dict[str, Any]) -> bool:
        if not self._has_field(container, field_path):
            return False
        records = KeyedRecords.from_field(container.get(field_path))
        records.append(record)
        return await self._commit(
            container,
            {field_path: records.to_list()},
            f"Added '{record.get('name', '')}' to '{field_path}'",
        )

    async def _append_unique(
        self, container: Container, field_path: str, record: dict[str, Any]
    ) -> bool:
        data = copy.deepcopy(record)
        if not data.get("id"):
            data["id"] = new_id()
        if data["id"] in KeyedRecords.from_field(container.get(field_path)):
            logger.debug("Record %s already in '%s'", data["id"], field_path)
            return True
        return await self._append(container, field_path, data)

    async def _commit(self, container: Container, changes: dict[str, Any], message: str) -> bool:
        try:
            await self._synchronizer.commit_fields(container.id, changes)
        except WriteFailureError as e:
            slog.step_error(SyncStage.RECORDS, message, error=e)
            return False
        container.apply_update(changes)
        slog.step_complete(SyncStage.RECORDS, message, container=container.id)
        return True


def sanitize_roll(record: dict[str, Any]) -> None:
    """Force ``system.roll.type`` into roll/flat/none and derive ``requiresTarget``."""
    roll = record.setdefault("system", {}).get("roll")
    if not isinstance(roll, dict):
        return
    if roll.get("type") not in ROLL_TYPES:
        roll["type"] = "roll"
    roll["requiresTarget"] = roll["type"] != "none"
