"""Ordered id → record mapping used in place of index arithmetic on lists."""

import copy
from collections.abc import Iterator
from typing import Any


class KeyedRecords:
    """An ordered mapping of embedded records keyed by their ``id``.

    Built from the stored list and projected back to a list only when the
    field is written. Entries without a usable id (or repeating an id already
    seen) are kept in place under a private key so that they are written back
    unchanged but can never be matched by a lookup.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None):
        self._items: dict[Any, dict[str, Any]] = {}
        self._orphans = 0
        for record in records or []:
            record_id = record.get("id") if isinstance(record, dict) else None
            if isinstance(record_id, str) and record_id and record_id not in self._items:
                self._items[record_id] = record
            else:
                self._items[("orphan", self._orphans)] = record
                self._orphans += 1

    @classmethod
    def from_field(cls, value: Any) -> "KeyedRecords":
        """Deep-clone a stored list value into a new mapping."""
        if not isinstance(value, list):
            return cls([])
        return cls(copy.deepcopy(value))

    def __contains__(self, record_id: object) -> bool:
        return isinstance(record_id, str) and record_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self._items.values())

    def ids(self) -> list[str]:
        return [key for key in self._items if isinstance(key, str)]

    def get(self, record_id: str) -> dict[str, Any] | None:
        return self._items.get(record_id)

    def replace(self, record_id: str, record: dict[str, Any]) -> None:
        if record_id not in self:
            raise KeyError(record_id)
        self._items[record_id] = record

    def append(self, record: dict[str, Any]) -> None:
        record_id = record.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise ValueError("Appended records must carry an id")
        if record_id in self._items:
            raise ValueError(f"Duplicate record id '{record_id}'")
        self._items[record_id] = record

    def remove(self, record_id: str) -> dict[str, Any] | None:
        if record_id not in self:
            return None
        return self._items.pop(record_id)

    def to_list(self) -> list[dict[str, Any]]:
        return list(self._items.values())
