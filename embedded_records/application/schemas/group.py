"""Pydantic DTOs for record groups."""

from pydantic import BaseModel, Field


class GroupCreate(BaseModel):
    name: str | None = Field(None, max_length=255, description="Defaults to the next 'Group N'")
    member_ids: list[str] = Field(default_factory=list)


class GroupRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GroupAssign(BaseModel):
    record_id: str
    group_id: str | None = None


class GroupResponse(BaseModel):
    id: str
    name: str
    sort: int
    collapsed: bool
    placeholder: bool = False
    member_ids: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}
