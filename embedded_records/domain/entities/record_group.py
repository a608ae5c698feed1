"""Domain entity — a named, orderable group of embedded records."""

from dataclasses import dataclass, field
from typing import Any

from embedded_records.domain.ids import new_id


@dataclass
class RecordGroup:
    """A group owned by a container; member records reference it by ``groupId``.

    ``placeholder`` marks a group created without members. It is kept while
    empty and becomes an ordinary group once a member is assigned.
    """

    name: str
    sort: int = 0
    collapsed: bool = False
    placeholder: bool = False
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RecordGroup":
        return cls(
            id=str(payload.get("id") or new_id()),
            name=str(payload.get("name", "")),
            sort=int(payload.get("sort", 0) or 0),
            collapsed=bool(payload.get("collapsed", False)),
            placeholder=bool(payload.get("placeholder", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "sort": self.sort,
            "collapsed": self.collapsed,
        }
        if self.placeholder:
            data["placeholder"] = True
        return data
