"""Group manager — named groups of records inside one container.

Records reference their group through ``groupId``. Groups with no members
are dissolved after every membership-removing operation, except explicit
placeholders created without initial members.
"""

import copy
import logging
import re
from collections.abc import Iterable
from typing import Any

from embedded_records.application.services.synchronizer import Synchronizer
from embedded_records.domain.entities import Container, KeyedRecords, RecordGroup
from embedded_records.domain.exceptions import (
    EntityNotFoundError,
    RecordNotFoundError,
    WriteFailureError,
)
from embedded_records.domain.ids import new_id
from embedded_records.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("embedded_records.sync.groups")

SORT_STEP = 100000
_GROUP_NAME = re.compile(r"^Group (\d+)$")


def next_group_name(groups: Iterable[RecordGroup]) -> str:
    highest = 0
    for group in groups:
        match = _GROUP_NAME.match(group.name)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"Group {highest + 1}"


class GroupManager:
    """Keeps a container's group list consistent with its records' memberships."""

    def __init__(
        self,
        synchronizer: Synchronizer,
        records_field: str = "actionCards",
        groups_field: str = "actionCardGroups",
    ):
        self._synchronizer = synchronizer
        self.records_field = records_field
        self.groups_field = groups_field

    # ── Queries ──────────────────────────────────────────────────────

    def groups(self, container: Container) -> list[RecordGroup]:
        raw = container.get(self.groups_field)
        if not isinstance(raw, list):
            return []
        for group in raw:
            # Repaired in place so the id stays stable until the next group write stores it.
            if isinstance(group, dict) and not group.get("id"):
                group["id"] = new_id()
                logger.warning(
                    "Group '%s' in container %s had no id, assigned %s",
                    group.get("name", ""),
                    container.id,
                    group["id"],
                )
        return [RecordGroup.from_dict(g) for g in raw if isinstance(g, dict)]

    def get_group(self, container: Container, group_id: str) -> RecordGroup:
        for group in self.groups(container):
            if group.id == group_id:
                return group
        raise EntityNotFoundError("RecordGroup", group_id)

    def members(self, container: Container, group_id: str) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(r)
            for r in self._records(container)
            if isinstance(r, dict) and r.get("groupId") == group_id
        ]

    # ── Group operations ─────────────────────────────────────────────

    async def create_group(
        self,
        container: Container,
        name: str | None = None,
        initial_member_ids: Iterable[str] = (),
    ) -> RecordGroup | None:
        groups = self.groups(container)
        member_ids = list(dict.fromkeys(initial_member_ids))
        records = self._records(container)
        for record_id in member_ids:
            if record_id not in records:
                raise RecordNotFoundError(self.records_field, record_id)

        group = RecordGroup(
            name=name or next_group_name(groups),
            sort=len(groups) * SORT_STEP,
            placeholder=not member_ids,
        )
        groups.append(group)

        former_groups = set()
        for index, record_id in enumerate(member_ids):
            record = records.get(record_id)
            if record.get("groupId"):
                former_groups.add(record["groupId"])
            record["groupId"] = group.id
            record["sort"] = index * SORT_STEP

        groups = self._without_empty(groups, records, only=former_groups)
        changes = {self.groups_field: self._dump(groups)}
        if member_ids:
            changes[self.records_field] = records.to_list()
        if not await self._commit(container, changes, f"Created group '{group.name}'"):
            return None
        return group

    async def rename_group(self, container: Container, group_id: str, name: str) -> bool:
        groups = self.groups(container)
        self._find(groups, group_id).name = name
        return await self._commit(
            container, {self.groups_field: self._dump(groups)}, f"Renamed group {group_id}"
        )

    async def toggle_collapsed(self, container: Container, group_id: str) -> bool:
        groups = self.groups(container)
        group = self._find(groups, group_id)
        group.collapsed = not group.collapsed
        return await self._commit(
            container, {self.groups_field: self._dump(groups)}, f"Toggled group {group_id}"
        )

    async def delete_group(self, container: Container, group_id: str) -> bool:
        """Ungroup every member, then remove the group."""
        groups = self.groups(container)
        group = self._find(groups, group_id)
        records = self._records(container)
        for record in records:
            if isinstance(record, dict) and record.get("groupId") == group_id:
                record["groupId"] = None

        changes = {
            self.groups_field: self._dump([g for g in groups if g.id != group_id]),
            self.records_field: records.to_list(),
        }
        return await self._commit(container, changes, f"Deleted group '{group.name}'")

    async def assign_to_group(
        self, container: Container, record_id: str, group_id: str | None
    ) -> bool:
        """Move a record into ``group_id`` (or out of any group when None)."""
        records = self._records(container)
        record = records.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.records_field, record_id)

        groups = self.groups(container)
        if group_id is not None:
            self._find(groups, group_id).placeholder = False

        former = record.get("groupId")
        if former == group_id:
            return True
        record["groupId"] = group_id

        changes = {self.records_field: records.to_list()}
        if group_id is not None:
            changes[self.groups_field] = self._dump(groups)
        if not await self._commit(container, changes, f"Assigned {record_id} to {group_id}"):
            return False
        if former:
            await self.check_dissolution(container, former)
        return True

    async def check_dissolution(self, container: Container, group_id: str) -> bool:
        """Remove ``group_id`` when it has no members left. Returns True when removed."""
        groups = self.groups(container)
        remaining = self._without_empty(groups, self._records(container), only={group_id})
        if len(remaining) == len(groups):
            return False
        return await self._commit(
            container, {self.groups_field: self._dump(remaining)}, f"Dissolved group {group_id}"
        )

    async def cleanup_empty_groups(self, container: Container) -> list[str]:
        """Sweep every memberless group; returns the ids removed."""
        groups = self.groups(container)
        remaining = self._without_empty(groups, self._records(container))
        kept = {g.id for g in remaining}
        removed = [g.id for g in groups if g.id not in kept]
        if not removed:
            return []
        if not await self._commit(
            container,
            {self.groups_field: self._dump(remaining)},
            f"Cleaned up {len(removed)} empty groups",
        ):
            return []
        return removed

    # ── Record operations ────────────────────────────────────────────

    async def delete_record(self, container: Container, record_id: str) -> bool:
        return await self.delete_records(container, [record_id]) == 1

    async def delete_records(self, container: Container, record_ids: Iterable[str]) -> int:
        """Delete records, then dissolve the groups they leave empty."""
        records = self._records(container)
        affected: set[str] = set()
        deleted = 0
        for record_id in record_ids:
            removed = records.remove(record_id)
            if removed is None:
                logger.info("Record %s not found in '%s'", record_id, self.records_field)
                continue
            deleted += 1
            if removed.get("groupId"):
                affected.add(removed["groupId"])
        if not deleted:
            return 0

        if not await self._commit(
            container, {self.records_field: records.to_list()}, f"Deleted {deleted} records"
        ):
            return 0
        for group_id in affected:
            await self.check_dissolution(container, group_id)
        await self.cleanup_empty_groups(container)
        return deleted

    async def duplicate_group(self, container: Container, group_id: str) -> RecordGroup | None:
        """Copy a group and all its members under fresh ids, in a single write."""
        groups = self.groups(container)
        source = self._find(groups, group_id)
        records = self._records(container)

        copy_group = RecordGroup(
            name=f"{source.name} (Copy)",
            sort=len(groups) * SORT_STEP,
            collapsed=source.collapsed,
        )
        copies = []
        for record in list(records):
            if not isinstance(record, dict) or record.get("groupId") != group_id:
                continue
            duplicate = copy.deepcopy(record)
            duplicate["id"] = new_id()
            duplicate["groupId"] = copy_group.id
            for effect in duplicate.get("effects") or []:
                if isinstance(effect, dict):
                    effect["id"] = new_id()
            copies.append(duplicate)
        if not copies:
            copy_group.placeholder = True

        for duplicate in copies:
            records.append(duplicate)
        groups.append(copy_group)

        changes = {
            self.records_field: records.to_list(),
            self.groups_field: self._dump(groups),
        }
        if not await self._commit(
            container, changes, f"Duplicated group '{source.name}' ({len(copies)} records)"
        ):
            return None
        return copy_group

    # ── Helpers ──────────────────────────────────────────────────────

    def _records(self, container: Container) -> KeyedRecords:
        return KeyedRecords.from_field(container.get(self.records_field))

    @staticmethod
    def _find(groups: list[RecordGroup], group_id: str) -> RecordGroup:
        for group in groups:
            if group.id == group_id:
                return group
        raise EntityNotFoundError("RecordGroup", group_id)

    @staticmethod
    def _without_empty(
        groups: list[RecordGroup],
        records: KeyedRecords,
        only: set[str] | None = None,
    ) -> list[RecordGroup]:
        """Drop memberless groups (restricted to ``only`` when given), sparing placeholders."""
        occupied = {r.get("groupId") for r in records if isinstance(r, dict)}
        return [
            g
            for g in groups
            if g.id in occupied or g.placeholder or (only is not None and g.id not in only)
        ]

    @staticmethod
    def _dump(groups: list[RecordGroup]) -> list[dict[str, Any]]:
        return [g.to_dict() for g in groups]

    async def _commit(self, container: Container, changes: dict[str, Any], message: str) -> bool:
        try:
            await self._synchronizer.commit_fields(container.id, changes)
        except WriteFailureError as e:
            slog.step_error(SyncStage.GROUP, message, error=e)
            return False
        container.apply_update(changes)
        slog.step_complete(SyncStage.GROUP, message, container=container.id)
        return True
