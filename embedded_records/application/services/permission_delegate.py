"""Permission delegate — transient entities answer permission queries via their container."""

from embedded_records.domain.entities import Container, PermissionSource, TransientEntity


class ContainerPermissionDelegate(PermissionSource):
    """Forwards every permission query to the parent container.

    A transient entity has no ownership record of its own; without this
    adapter it would always evaluate as non-editable.
    """

    def __init__(self, container: Container):
        self._container = container

    @property
    def container(self) -> Container:
        return self._container

    @property
    def is_owner(self) -> bool:
        return self._container.is_owner

    @property
    def is_editable(self) -> bool:
        return self._container.is_editable

    @property
    def ownership(self) -> dict[str, int]:
        return self._container.ownership

    def test_user_permission(
        self, user_id: str | None, permission: int, exact: bool = False
    ) -> bool:
        return self._container.test_user_permission(user_id, permission, exact=exact)

    def can_user_modify(self, user_id: str | None, action: str = "update") -> bool:
        return self._container.can_user_modify(user_id, action)


def delegate_permissions(entity: TransientEntity, container: Container) -> TransientEntity:
    entity.permissions = ContainerPermissionDelegate(container)
    entity.container = container
    return entity
