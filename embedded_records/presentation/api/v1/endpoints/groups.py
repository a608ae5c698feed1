"""Record group endpoints for containers that support grouping."""

from fastapi import APIRouter, Depends, HTTPException, status

from embedded_records.application.schemas.group import (
    GroupAssign,
    GroupCreate,
    GroupRename,
    GroupResponse,
)
from embedded_records.application.services import ContainerService, GroupManager
from embedded_records.domain.entities import Container, RecordGroup
from embedded_records.infrastructure.dependencies import (
    get_acting_user,
    get_container_service,
    get_group_manager,
)
from embedded_records.presentation.api.v1.endpoints.errors import (
    DOMAIN_ERRORS,
    to_http_exception,
)

router = APIRouter(prefix="/containers/{container_id}/groups", tags=["Groups"])


def _group_response(manager: GroupManager, container: Container, group: RecordGroup) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        sort=group.sort,
        collapsed=group.collapsed,
        placeholder=group.placeholder,
        member_ids=[m["id"] for m in manager.members(container, group.id)],
    )


def _write_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to save the container"
    )


@router.get("", response_model=list[GroupResponse])
async def list_groups(
    container_id: str,
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> list[GroupResponse]:
    try:
        container = await service.get_container(container_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return [_group_response(manager, container, g) for g in manager.groups(container)]


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    container_id: str,
    data: GroupCreate,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> GroupResponse:
    """Create a group, optionally moving records into it."""
    try:
        container = await service.get_modifiable(container_id, user_id)
        group = await manager.create_group(container, data.name, data.member_ids)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    if group is None:
        raise _write_failed()
    return _group_response(manager, container, group)


@router.patch("/{group_id}", response_model=GroupResponse)
async def rename_group(
    container_id: str,
    group_id: str,
    data: GroupRename,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> GroupResponse:
    try:
        container = await service.get_modifiable(container_id, user_id)
        if not await manager.rename_group(container, group_id, data.name):
            raise _write_failed()
        group = manager.get_group(container, group_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _group_response(manager, container, group)


@router.post("/{group_id}/collapse", response_model=GroupResponse)
async def toggle_collapsed(
    container_id: str,
    group_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> GroupResponse:
    try:
        container = await service.get_modifiable(container_id, user_id)
        if not await manager.toggle_collapsed(container, group_id):
            raise _write_failed()
        group = manager.get_group(container, group_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    return _group_response(manager, container, group)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    container_id: str,
    group_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> None:
    """Delete a group; its members become ungrouped."""
    try:
        container = await service.get_modifiable(container_id, user_id)
        deleted = await manager.delete_group(container, group_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    if not deleted:
        raise _write_failed()


@router.post(
    "/{group_id}/duplicate", response_model=GroupResponse, status_code=status.HTTP_201_CREATED
)
async def duplicate_group(
    container_id: str,
    group_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> GroupResponse:
    """Copy a group together with all of its member records."""
    try:
        container = await service.get_modifiable(container_id, user_id)
        group = await manager.duplicate_group(container, group_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    if group is None:
        raise _write_failed()
    return _group_response(manager, container, group)


@router.post("/assign", status_code=status.HTTP_204_NO_CONTENT)
async def assign_to_group(
    container_id: str,
    data: GroupAssign,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> None:
    """Move a record into a group, or out of any group when ``group_id`` is null."""
    try:
        container = await service.get_modifiable(container_id, user_id)
        assigned = await manager.assign_to_group(container, data.record_id, data.group_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    if not assigned:
        raise _write_failed()


@router.delete("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_grouped_record(
    container_id: str,
    record_id: str,
    user_id: str | None = Depends(get_acting_user),
    service: ContainerService = Depends(get_container_service),
    manager: GroupManager = Depends(get_group_manager),
) -> None:
    """Delete a record and dissolve any group it leaves empty."""
    try:
        container = await service.get_modifiable(container_id, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    if not await manager.delete_record(container, record_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Record '{record_id}' not found",
        )
