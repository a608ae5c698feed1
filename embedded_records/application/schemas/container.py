"""Pydantic DTOs (Data Transfer Objects) for containers and their embedded records."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from embedded_records.domain.entities import ContainerKind


class ContainerCreate(BaseModel):
    """Schema for creating a new container."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Fireball"])
    kind: ContainerKind = Field(..., examples=["actionCard"])
    icon: str = Field("", max_length=1024)
    data: dict[str, Any] | None = Field(
        None, examples=[{"description": "<p>Burns.</p>", "embeddedEffects": []}],
    )
    ownership: dict[str, int] | None = Field(None, examples=[{"default": 0, "user-1": 3}])
    locked: bool = False


class ContainerUpdate(BaseModel):
    """Schema for updating an existing container — all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    icon: str | None = None
    data: dict[str, Any] | None = None
    ownership: dict[str, int] | None = None
    locked: bool | None = None


class ContainerResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    kind: str
    icon: str
    data: dict[str, Any]
    ownership: dict[str, int]
    locked: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EmbeddedRecordPayload(BaseModel):
    """A record to embed. Extra keys are kept as-is."""

    kind: str = Field(..., examples=["status"])
    name: str = Field("", max_length=255)
    icon: str = ""
    system: dict[str, Any] = Field(default_factory=dict)
    effects: list[dict[str, Any]] = Field(default_factory=list)

    model_config = {"extra": "allow"}


class CreateDefaultRecordRequest(BaseModel):
    """Create a record of ``kind`` from the container's defaults."""

    kind: str = Field(..., examples=["combatPower", "status", "transformation", "actionCard"])


class RecordOperationResponse(BaseModel):
    success: bool
    container: ContainerResponse
