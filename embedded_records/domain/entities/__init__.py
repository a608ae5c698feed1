from .container import Container, ContainerKind, OwnershipLevel, CONTAINER_FIELDS, default_container_data
from .embedded_record import (
    ActiveEffect,
    DEFAULT_TINT,
    LIFECYCLE_KINDS,
    RecordKind,
    TransientEntity,
)
from .editor_session import EditorSession, RecordLocator, WriteOutcome, WriteStatus
from .keyed_records import KeyedRecords
from .permissions import PermissionSource, UnownedPermissions
from .record_group import RecordGroup

__all__ = [
    "Container",
    "ContainerKind",
    "OwnershipLevel",
    "CONTAINER_FIELDS",
    "default_container_data",
    "ActiveEffect",
    "DEFAULT_TINT",
    "LIFECYCLE_KINDS",
    "RecordKind",
    "TransientEntity",
    "EditorSession",
    "RecordLocator",
    "WriteOutcome",
    "WriteStatus",
    "KeyedRecords",
    "PermissionSource",
    "UnownedPermissions",
    "RecordGroup",
]
