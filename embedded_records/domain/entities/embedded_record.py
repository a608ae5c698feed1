"""Domain entities for embedded records and their runtime (transient) form."""

import copy
from enum import Enum
from typing import TYPE_CHECKING, Any

from embedded_records.domain.data_paths import merge_object
from embedded_records.domain.entities.permissions import PermissionSource, UnownedPermissions

if TYPE_CHECKING:
    from embedded_records.domain.entities.container import Container


class RecordKind(str, Enum):
    STATUS = "status"
    GEAR = "gear"
    COMBAT_POWER = "combatPower"
    FEATURE = "feature"
    ACTION_CARD = "actionCard"
    TRANSFORMATION = "transformation"


# Kinds that always carry exactly one lifecycle effect descriptor.
LIFECYCLE_KINDS = frozenset({RecordKind.STATUS.value, RecordKind.GEAR.value})

DEFAULT_TINT = "#ffffff"


class ActiveEffect:
    """Runtime view over one effect descriptor, parented to a transient entity.

    The descriptor dict is shared with the parent's source so that local
    updates on the effect are visible when the parent is serialized.
    """

    def __init__(self, source: dict[str, Any], parent: "TransientEntity"):
        self._source = source
        self.parent = parent

    @property
    def id(self) -> str:
        return self._source.get("id", "")

    @property
    def name(self) -> str:
        return self._source.get("name", "")

    @property
    def icon(self) -> str:
        return self._source.get("icon", "")

    @property
    def changes(self) -> list[dict[str, Any]]:
        return self._source.setdefault("changes", [])

    @property
    def duration(self) -> dict[str, Any]:
        return self._source.setdefault("duration", {})

    @property
    def tint(self) -> str:
        return self._source.get("tint", DEFAULT_TINT)

    @property
    def transfer(self) -> bool:
        return bool(self._source.get("transfer", True))

    @property
    def disabled(self) -> bool:
        return bool(self._source.get("disabled", False))

    def update_source(self, partial: dict[str, Any]) -> None:
        merge_object(self._source, partial)

    def to_object(self) -> dict[str, Any]:
        return copy.deepcopy(self._source)

    def __repr__(self) -> str:
        return f"<ActiveEffect(id={self.id}, name='{self.name}')>"


class TransientEntity:
    """Runtime-only materialization of exactly one embedded record.

    It has no parent linkage in storage; ``container`` is only a
    back-reference used for permission answers and write-back. Every
    permission query is answered by ``permissions``, which starts out as
    :class:`UnownedPermissions` until a delegate is attached.
    """

    def __init__(
        self,
        source: dict[str, Any],
        *,
        container: "Container | None" = None,
        is_effect: bool = False,
    ):
        self._source: dict[str, Any] = copy.deepcopy(source)
        self.parent = None
        self.container = container
        self.is_effect = is_effect
        self.original_id: str = self._source.get("id", "")
        self.permissions: PermissionSource = UnownedPermissions()
        self.effects: dict[str, ActiveEffect] = {}

    # ── Record fields ────────────────────────────────────────────────

    @property
    def id(self) -> str:
        return self._source.get("id", "")

    @property
    def kind(self) -> str:
        return self._source.get("kind", "")

    @property
    def name(self) -> str:
        return self._source.get("name", "")

    @property
    def icon(self) -> str:
        return self._source.get("icon", "")

    @property
    def system(self) -> dict[str, Any]:
        return self._source.setdefault("system", {})

    @property
    def first_effect(self) -> ActiveEffect | None:
        """The lifecycle effect — always the first descriptor."""
        return next(iter(self.effects.values()), None)

    # ── Delegated permissions ────────────────────────────────────────

    @property
    def is_owner(self) -> bool:
        return self.permissions.is_owner

    @property
    def is_editable(self) -> bool:
        return self.permissions.is_editable

    @property
    def ownership(self) -> dict[str, int]:
        return self.permissions.ownership

    def test_user_permission(
        self, user_id: str | None, permission: int, exact: bool = False
    ) -> bool:
        return self.permissions.test_user_permission(user_id, permission, exact=exact)

    def can_user_modify(self, user_id: str | None, action: str = "update") -> bool:
        return self.permissions.can_user_modify(user_id, action)

    # ── Local state ──────────────────────────────────────────────────

    def attach_effect(self, descriptor: dict[str, Any]) -> ActiveEffect:
        effect = ActiveEffect(descriptor, parent=self)
        self.effects[effect.id] = effect
        return effect

    def rebuild_effects(self) -> None:
        self.effects = {}
        for descriptor in self._source.get("effects") or []:
            if isinstance(descriptor, dict):
                self.attach_effect(descriptor)

    def update_source(self, partial: dict[str, Any]) -> None:
        """Merge ``partial`` into the local source without touching storage."""
        merge_object(self._source, partial)
        if "effects" in partial:
            self.rebuild_effects()

    def replace_source(self, record: dict[str, Any]) -> None:
        """Replace the local source with ``record`` wholesale."""
        self._source = copy.deepcopy(record)
        self.rebuild_effects()

    def to_object(self) -> dict[str, Any]:
        return copy.deepcopy(self._source)

    def __repr__(self) -> str:
        return (
            f"<TransientEntity(id={self.id}, kind='{self.kind}', "
            f"name='{self.name}', is_effect={self.is_effect})>"
        )
