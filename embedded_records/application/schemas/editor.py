"""Pydantic DTOs for the editor lifecycle endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class OpenEditorRequest(BaseModel):
    container_id: str
    field_path: str = Field(..., examples=["embeddedEffects", "embeddedItem"])
    record_id: str | None = Field(None, description="Required for list-valued fields")
    is_effect: bool = False


class SaveContentRequest(BaseModel):
    field_path: str = Field(..., examples=["system.description", "icon"])
    content: Any = None


class SubmitFormRequest(BaseModel):
    form_data: dict[str, Any] = Field(..., examples=[{"name": "Burning", "system.bgColor": "#aa0000"}])


class ToggleRequest(BaseModel):
    checked: bool


class TintRequest(BaseModel):
    tint: str = Field(..., examples=["#ff8800"])


class AbilityRow(BaseModel):
    ability: str
    mode: str = "add"
    value: Any = 0


class NewEffectRow(BaseModel):
    type: Literal["abilities", "hiddenAbilities"]
    ability: str


class CharacterEffectsRequest(BaseModel):
    regular: list[AbilityRow] = Field(default_factory=list)
    hidden: list[AbilityRow] = Field(default_factory=list)
    new_effect: NewEffectRow | None = None


class EffectResponse(BaseModel):
    id: str
    name: str
    icon: str
    tint: str
    is_on: bool
    changes: list[dict[str, Any]]


class EditorSessionResponse(BaseModel):
    """An open editor: the materialized record plus delegated permissions."""

    session_id: str
    container_id: str
    field_path: str
    record_id: str | None
    is_effect: bool
    is_owner: bool
    is_editable: bool
    record: dict[str, Any]
    effects: list[EffectResponse]
    character_effects: dict[str, list[dict[str, Any]]]


class WriteOutcomeResponse(BaseModel):
    status: str
    ok: bool
    container_id: str
    field_path: str
    record_id: str | None = None
    message: str | None = None
    record: dict[str, Any] | None = None
