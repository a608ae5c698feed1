"""Container CRUD endpoints plus embedded-record add/remove."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from embedded_records.application.schemas.container import (
    ContainerCreate,
    ContainerResponse,
    ContainerUpdate,
    CreateDefaultRecordRequest,
    EmbeddedRecordPayload,
    RecordOperationResponse,
)
from embedded_records.application.services import (
    ContainerService,
    EditorSessionRegistry,
    EmbeddedRecordManager,
)
from embedded_records.domain.entities import Container, ContainerKind, RecordKind
from embedded_records.infrastructure.dependencies import (
    get_acting_user,
    get_container_service,
    get_record_manager,
    get_session_registry,
)
from embedded_records.presentation.api.v1.endpoints.errors import (
    DOMAIN_ERRORS,
    to_http_exception,
)

router = APIRouter(prefix="/containers", tags=["Containers"])


def _operation(success: bool, container: Container) -> RecordOperationResponse:
    return RecordOperationResponse(
        success=success,
        container=ContainerResponse.model_validate(container, from_attributes=True),
    )


@router.get("", response_model=list[ContainerResponse])
async def list_containers(
    kind: ContainerKind | None = Query(None, description="Filter by container kind"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ContainerService = Depends(get_container_service),
) -> list[ContainerResponse]:
    """Retrieve a filtered, paginated list of containers."""
    containers = await service.list_containers(
        kind=kind.value if kind else None, skip=skip, limit=limit
    )
    return [ContainerResponse.model_validate(c, from_attributes=True) for c in containers]


@router.get("/{container_id}", response_model=ContainerResponse)
async def get_container(
    container_id: str,
    service: ContainerService = Depends(get_container_service),
) -> ContainerResponse:
    """Retrieve a single container by ID."""
    try:
        container = await service.get_container(container_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return ContainerResponse.model_validate(container, from_attributes=True)


@router.post("", response_model=ContainerResponse, status_code=status.HTTP_201_CREATED)
async def create_container(
    data: ContainerCreate,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
) -> ContainerResponse:
    """Create a new container. The acting user becomes its owner."""
    container = await service.create_container(data, user_id)
    return ContainerResponse.model_validate(container, from_attributes=True)


@router.put("/{container_id}", response_model=ContainerResponse)
async def update_container(
    container_id: str,
    data: ContainerUpdate,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
) -> ContainerResponse:
    """Update an existing container."""
    try:
        container = await service.update_container(container_id, data, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return ContainerResponse.model_validate(container, from_attributes=True)


@router.delete("/{container_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_container(
    container_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    registry: EditorSessionRegistry = Depends(get_session_registry),
) -> None:
    """Delete a container by ID and close its open editors."""
    try:
        await service.delete_container(container_id, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    registry.remove_container(container_id)


# ── Embedded records ─────────────────────────────────────────────────


@router.put("/{container_id}/embedded-item", response_model=RecordOperationResponse)
async def set_embedded_item(
    container_id: str,
    record: EmbeddedRecordPayload,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: EmbeddedRecordManager = Depends(get_record_manager),
) -> RecordOperationResponse:
    """Store a combat power, gear or feature as the action card's embedded item."""
    try:
        container = await service.get_modifiable(container_id, user_id)
        success = await manager.set_embedded_item(container, record.model_dump())
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _operation(success, container)


@router.delete("/{container_id}/embedded-item", response_model=RecordOperationResponse)
async def clear_embedded_item(
    container_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: EmbeddedRecordManager = Depends(get_record_manager),
) -> RecordOperationResponse:
    try:
        container = await service.get_modifiable(container_id, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _operation(await manager.clear_embedded_item(container), container)


@router.post(
    "/{container_id}/records/{field_path}",
    response_model=RecordOperationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_record(
    container_id: str,
    field_path: str,
    record: EmbeddedRecordPayload,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: EmbeddedRecordManager = Depends(get_record_manager),
) -> RecordOperationResponse:
    """Append a record to one of the container's list fields."""
    adders = {
        "embeddedEffects": manager.add_embedded_effect,
        "embeddedTransformations": manager.add_embedded_transformation,
        "embeddedCombatPowers": manager.add_combat_power,
        "embeddedActionCards": manager.add_action_card,
    }
    add = adders.get(field_path)
    if add is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown embedded field '{field_path}'",
        )
    try:
        container = await service.get_modifiable(container_id, user_id)
        success = await add(container, record.model_dump())
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _operation(success, container)


@router.post(
    "/{container_id}/defaults",
    response_model=RecordOperationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_default_record(
    container_id: str,
    request: CreateDefaultRecordRequest,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: EmbeddedRecordManager = Depends(get_record_manager),
) -> RecordOperationResponse:
    """Create a record of the requested kind from the container's defaults."""
    creators = {
        RecordKind.COMBAT_POWER.value: manager.create_new_power,
        RecordKind.STATUS.value: manager.create_new_status,
        RecordKind.TRANSFORMATION.value: manager.create_new_transformation,
        RecordKind.ACTION_CARD.value: manager.create_new_action_card,
    }
    create = creators.get(request.kind)
    if create is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"No default data for kind '{request.kind}'",
        )
    try:
        container = await service.get_modifiable(container_id, user_id)
        success = await create(container)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _operation(success, container)


@router.delete(
    "/{container_id}/records/{field_path}/{record_id}",
    response_model=RecordOperationResponse,
)
async def remove_record(
    container_id: str,
    field_path: str,
    record_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: EmbeddedRecordManager = Depends(get_record_manager),
) -> RecordOperationResponse:
    try:
        container = await service.get_modifiable(container_id, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    success = await manager.remove_embedded_record(container, field_path, record_id)
    return _operation(success, container)
