"""Maps domain exceptions to HTTP errors for the v1 endpoints."""

from fastapi import HTTPException, status

from embedded_records.domain.exceptions import (
    EntityNotFoundError,
    MalformedRecordError,
    PermissionDeniedError,
    RecordNotFoundError,
    UnsupportedRecordKindError,
)

DOMAIN_ERRORS = (
    EntityNotFoundError,
    RecordNotFoundError,
    PermissionDeniedError,
    MalformedRecordError,
    UnsupportedRecordKindError,
)


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, (EntityNotFoundError, RecordNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return HTTPException(status_code=code, detail=str(exc))
