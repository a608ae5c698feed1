"""Editor lifecycle endpoints — open, edit and close embedded-record editors."""

from fastapi import APIRouter, Depends, HTTPException, status

from embedded_records.application.schemas.editor import (
    CharacterEffectsRequest,
    EditorSessionResponse,
    EffectResponse,
    OpenEditorRequest,
    SaveContentRequest,
    SubmitFormRequest,
    TintRequest,
    ToggleRequest,
    WriteOutcomeResponse,
)
from embedded_records.application.services import ContainerService, EmbeddedRecordEditor
from embedded_records.application.services.character_effects import categorize_changes
from embedded_records.application.services.toggle_codec import decode
from embedded_records.domain.entities import EditorSession, WriteOutcome
from embedded_records.infrastructure.dependencies import (
    get_acting_user,
    get_container_service,
    get_editor,
)
from embedded_records.presentation.api.v1.endpoints.errors import (
    DOMAIN_ERRORS,
    to_http_exception,
)

router = APIRouter(prefix="/editors", tags=["Editors"])


def _session_response(session: EditorSession) -> EditorSessionResponse:
    entity = session.entity
    effects = [
        EffectResponse(
            id=e.id,
            name=e.name,
            icon=e.icon,
            tint=e.tint,
            is_on=decode(e.duration),
            changes=list(e.changes),
        )
        for e in entity.effects.values()
    ]
    first = entity.first_effect
    return EditorSessionResponse(
        session_id=session.id,
        container_id=session.container.id,
        field_path=session.locator.field_path,
        record_id=session.locator.record_id,
        is_effect=entity.is_effect,
        is_owner=entity.is_owner,
        is_editable=entity.is_editable,
        record=entity.to_object(),
        effects=effects,
        character_effects=categorize_changes(first.changes if first else []),
    )


def _outcome_response(outcome: WriteOutcome) -> WriteOutcomeResponse:
    return WriteOutcomeResponse(
        status=outcome.status.value,
        ok=outcome.ok,
        container_id=outcome.container_id,
        field_path=outcome.field_path,
        record_id=outcome.record_id,
        message=outcome.message,
        record=outcome.record,
    )


def _require_session(
    editor: EmbeddedRecordEditor, session_id: str, user_id: str | None
) -> EditorSession:
    """Look up a session opened by ``user_id``; sessions are bound to their opener."""
    session = editor.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Editor session '{session_id}' not found",
        )
    if session.container.acting_user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Editor session '{session_id}' belongs to another user",
        )
    return session


@router.post("", response_model=EditorSessionResponse, status_code=status.HTTP_201_CREATED)
async def open_editor(
    request: OpenEditorRequest,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> EditorSessionResponse:
    """Materialize an embedded record and open an editor session for it."""
    try:
        container = await service.get_container(request.container_id, user_id)
        session = editor.open_record(
            container, request.field_path, request.record_id, request.is_effect
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _session_response(session)


@router.get("/{session_id}", response_model=EditorSessionResponse)
async def get_editor_session(
    session_id: str,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> EditorSessionResponse:
    return _session_response(_require_session(editor, session_id, user_id))


@router.post("/{session_id}/save", response_model=WriteOutcomeResponse)
async def save_content(
    session_id: str,
    request: SaveContentRequest,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> WriteOutcomeResponse:
    """Rich-editor save of a single property."""
    session = _require_session(editor, session_id, user_id)
    return _outcome_response(await editor.on_save(session, request.field_path, request.content))


@router.post("/{session_id}/submit", response_model=WriteOutcomeResponse)
async def submit_form(
    session_id: str,
    request: SubmitFormRequest,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> WriteOutcomeResponse:
    session = _require_session(editor, session_id, user_id)
    return _outcome_response(await editor.on_submit(session, request.form_data))


@router.post("/{session_id}/toggle", response_model=WriteOutcomeResponse)
async def toggle_lifecycle(
    session_id: str,
    request: ToggleRequest,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> WriteOutcomeResponse:
    """Switch the lifecycle effect on or off."""
    session = _require_session(editor, session_id, user_id)
    return _outcome_response(await editor.on_toggle(session, request.checked))


@router.post("/{session_id}/tint", response_model=WriteOutcomeResponse)
async def change_tint(
    session_id: str,
    request: TintRequest,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> WriteOutcomeResponse:
    session = _require_session(editor, session_id, user_id)
    return _outcome_response(await editor.on_tint_change(session, request.tint))


@router.post("/{session_id}/character-effects", response_model=WriteOutcomeResponse)
async def update_character_effects(
    session_id: str,
    request: CharacterEffectsRequest,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> WriteOutcomeResponse:
    session = _require_session(editor, session_id, user_id)
    outcome = await editor.on_character_effects(
        session,
        [row.model_dump() for row in request.regular],
        [row.model_dump() for row in request.hidden],
        request.new_effect.model_dump() if request.new_effect else None,
    )
    return _outcome_response(outcome)


@router.delete("/{session_id}", response_model=WriteOutcomeResponse)
async def close_editor(
    session_id: str,
    user_id: str | None = Depends(get_acting_user),
    editor: EmbeddedRecordEditor = Depends(get_editor),
) -> WriteOutcomeResponse:
    """Close the editor. Writes already issued still complete."""
    session = _require_session(editor, session_id, user_id)
    return _outcome_response(editor.close(session))
