"""Request-scoped value objects passed between materializer, editor and synchronizer."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from embedded_records.domain.entities.container import Container
from embedded_records.domain.entities.embedded_record import TransientEntity
from embedded_records.domain.ids import new_id


@dataclass(frozen=True)
class RecordLocator:
    """Which container field to write, and which list member when list-valued."""

    field_path: str
    record_id: str | None = None

    @classmethod
    def single(cls, field_path: str) -> "RecordLocator":
        return cls(field_path=field_path)

    @classmethod
    def member(cls, field_path: str, record_id: str) -> "RecordLocator":
        return cls(field_path=field_path, record_id=record_id)

    @property
    def is_list(self) -> bool:
        return self.record_id is not None


class WriteStatus(str, Enum):
    SUCCESS = "success"
    RECORD_NOT_FOUND = "record_not_found"
    WRITE_FAILED = "write_failed"
    NOT_EDITABLE = "not_editable"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass
class WriteOutcome:
    """Non-throwing result of an editor write."""

    status: WriteStatus
    container_id: str
    field_path: str
    record_id: str | None = None
    message: str | None = None
    record: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status == WriteStatus.SUCCESS


@dataclass
class EditorSession:
    """The lifetime of one open editor over one transient entity."""

    entity: TransientEntity
    container: Container
    locator: RecordLocator
    id: str = field(default_factory=new_id)
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_used: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    closed: bool = False
