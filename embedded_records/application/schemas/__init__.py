from .container import (
    ContainerCreate,
    ContainerUpdate,
    ContainerResponse,
    CreateDefaultRecordRequest,
    EmbeddedRecordPayload,
    RecordOperationResponse,
)
from .editor import (
    AbilityRow,
    CharacterEffectsRequest,
    EditorSessionResponse,
    EffectResponse,
    NewEffectRow,
    OpenEditorRequest,
    SaveContentRequest,
    SubmitFormRequest,
    TintRequest,
    ToggleRequest,
    WriteOutcomeResponse,
)
from .group import GroupAssign, GroupCreate, GroupRename, GroupResponse

__all__ = [
    "ContainerCreate",
    "ContainerUpdate",
    "ContainerResponse",
    "CreateDefaultRecordRequest",
    "EmbeddedRecordPayload",
    "RecordOperationResponse",
    "AbilityRow",
    "CharacterEffectsRequest",
    "EditorSessionResponse",
    "EffectResponse",
    "NewEffectRow",
    "OpenEditorRequest",
    "SaveContentRequest",
    "SubmitFormRequest",
    "TintRequest",
    "ToggleRequest",
    "WriteOutcomeResponse",
    "GroupAssign",
    "GroupCreate",
    "GroupRename",
    "GroupResponse",
]
