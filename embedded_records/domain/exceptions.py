"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class RecordNotFoundError(Exception):
    """Raised when a locator resolves to no matching embedded record."""

    def __init__(self, field_path: str, record_id: str | None):
        self.field_path = field_path
        self.record_id = record_id
        super().__init__(f"Embedded record '{record_id}' not found in '{field_path}'")


class WriteFailureError(Exception):
    """Raised when the container storage rejects a field update."""

    def __init__(self, container_id: str, field_path: str, cause: Exception | None = None):
        self.container_id = container_id
        self.field_path = field_path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Failed to write '{field_path}' on container '{container_id}'{detail}"
        )


class MalformedRecordError(Exception):
    """Raised when an embedded record payload cannot be interpreted at all."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed embedded record: {reason}")


class UnsupportedRecordKindError(Exception):
    """Raised when a record kind is not accepted by the target field."""

    def __init__(self, kind: str, supported: list[str]):
        self.kind = kind
        self.supported = supported
        super().__init__(
            f"Record kind '{kind}' is not supported here (supported: {', '.join(supported)})"
        )


class PermissionDeniedError(Exception):
    """Raised when the acting user may not modify a container."""

    def __init__(self, container_id: str, user_id: str | None):
        self.container_id = container_id
        self.user_id = user_id
        super().__init__(f"User '{user_id}' may not modify container '{container_id}'")
