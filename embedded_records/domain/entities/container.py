"""Domain entity — a persisted container holding embedded records inline."""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any
from uuid import uuid4

from embedded_records.domain.data_paths import get_property, set_property


class OwnershipLevel(IntEnum):
    """Ownership levels, ordered so that a higher level implies the lower ones."""

    NONE = 0
    LIMITED = 1
    OBSERVER = 2
    OWNER = 3


class ContainerKind(str, Enum):
    ACTION_CARD = "actionCard"
    TRANSFORMATION = "transformation"
    ACTOR = "actor"


# Embedded fields per container kind: field name -> True when list-valued.
CONTAINER_FIELDS: dict[str, dict[str, bool]] = {
    ContainerKind.ACTION_CARD.value: {
        "embeddedItem": False,
        "embeddedEffects": True,
        "embeddedTransformations": True,
    },
    ContainerKind.TRANSFORMATION.value: {
        "embeddedCombatPowers": True,
        "embeddedActionCards": True,
    },
    ContainerKind.ACTOR.value: {
        "actionCards": True,
        "actionCardGroups": True,
    },
}


def default_container_data(kind: str) -> dict[str, Any]:
    """Empty embedded fields for a freshly created container of ``kind``."""
    fields = CONTAINER_FIELDS.get(kind, {})
    return {name: ([] if is_list else None) for name, is_list in fields.items()}


@dataclass
class Container:
    """Core domain entity that owns one or more arrays of embedded records.

    ``data`` is the persisted plain mapping; embedded fields are addressed by
    dotted paths into it. Permission queries are answered for the user bound
    through :meth:`bind_user` when the container was loaded.
    """

    name: str
    kind: str
    data: dict[str, Any] = field(default_factory=dict)
    icon: str = ""
    ownership: dict[str, int] = field(
        default_factory=lambda: {"default": int(OwnershipLevel.NONE)}
    )
    locked: bool = False
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    acting_user_id: str | None = field(default=None, compare=False, repr=False)

    def bind_user(self, user_id: str | None) -> "Container":
        self.acting_user_id = user_id
        return self

    # ── Storage interface ────────────────────────────────────────────

    def get(self, path: str) -> Any:
        """Return the live value stored at ``path`` (``None`` when absent)."""
        return get_property(self.data, path)

    def apply_update(self, changes: dict[str, Any]) -> None:
        """Apply a ``{path: value}`` update to the local state."""
        for path, value in changes.items():
            set_property(self.data, path, copy.deepcopy(value))
        self.updated_at = datetime.now(timezone.utc)

    # ── Permissions ──────────────────────────────────────────────────

    def permission_level(self, user_id: str | None) -> int:
        default = self.ownership.get("default", OwnershipLevel.NONE)
        if user_id is None:
            return int(default)
        return int(self.ownership.get(user_id, default))

    def test_user_permission(
        self, user_id: str | None, permission: int, exact: bool = False
    ) -> bool:
        level = self.permission_level(user_id)
        return level == permission if exact else level >= permission

    def can_user_modify(self, user_id: str | None, action: str = "update") -> bool:
        if action not in ("create", "update", "delete"):
            return False
        if self.locked:
            return False
        return self.test_user_permission(user_id, OwnershipLevel.OWNER)

    @property
    def is_owner(self) -> bool:
        return self.test_user_permission(self.acting_user_id, OwnershipLevel.OWNER)

    @property
    def is_editable(self) -> bool:
        return self.is_owner and not self.locked
