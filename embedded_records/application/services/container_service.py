"""Application service (use case) for Container operations."""

from embedded_records.application.interfaces import ContainerRepository
from embedded_records.application.schemas.container import ContainerCreate, ContainerUpdate
from embedded_records.domain.entities import Container, OwnershipLevel, default_container_data
from embedded_records.domain.exceptions import EntityNotFoundError, PermissionDeniedError


class ContainerService:
    """Orchestrates container CRUD logic. Depends on the repository port (DI)."""

    def __init__(self, repository: ContainerRepository):
        self._repository = repository

    async def get_container(self, container_id: str, user_id: str | None = None) -> Container:
        container = await self._repository.get_by_id(container_id)
        if container is None:
            raise EntityNotFoundError("Container", container_id)
        return container.bind_user(user_id)

    async def get_modifiable(
        self, container_id: str, user_id: str | None, action: str = "update"
    ) -> Container:
        """Load a container the acting user may modify.

        Raises:
            EntityNotFoundError: If the container does not exist.
            PermissionDeniedError: If ``user_id`` may not perform ``action``.
        """
        container = await self.get_container(container_id, user_id)
        if not container.can_user_modify(user_id, action):
            raise PermissionDeniedError(container_id, user_id)
        return container

    async def list_containers(
        self,
        *,
        kind: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Container]:
        return await self._repository.get_all(kind=kind, skip=skip, limit=limit)

    async def create_container(self, data: ContainerCreate, user_id: str | None = None) -> Container:
        kind = data.kind.value
        payload = default_container_data(kind)
        payload.update(data.data or {})

        ownership = dict(data.ownership or {"default": int(OwnershipLevel.NONE)})
        if user_id is not None:
            ownership.setdefault(user_id, int(OwnershipLevel.OWNER))

        container = Container(
            name=data.name,
            kind=kind,
            icon=data.icon,
            data=payload,
            ownership=ownership,
            locked=data.locked,
        )
        created = await self._repository.create(container)
        return created.bind_user(user_id)

    async def update_container(
        self, container_id: str, data: ContainerUpdate, user_id: str | None = None
    ) -> Container:
        container = await self.get_container(container_id, user_id)
        # Owners may always unlock; every other change needs an unlocked container.
        only_lock = data.model_dump(exclude_unset=True).keys() <= {"locked"}
        if not container.test_user_permission(user_id, OwnershipLevel.OWNER) or (
            container.locked and not only_lock
        ):
            raise PermissionDeniedError(container_id, user_id)

        if data.name is not None:
            container.name = data.name
        if data.icon is not None:
            container.icon = data.icon
        if data.data is not None:
            container.apply_update(data.data)
        if data.ownership is not None:
            container.ownership = data.ownership
        if data.locked is not None:
            container.locked = data.locked

        updated = await self._repository.update(container)
        return updated.bind_user(user_id)

    async def delete_container(self, container_id: str, user_id: str | None = None) -> bool:
        await self.get_modifiable(container_id, user_id, action="delete")
        return await self._repository.delete(container_id)
