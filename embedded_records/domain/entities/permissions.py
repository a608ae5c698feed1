"""Permission capability interface shared by containers and transient entities."""

from abc import ABC, abstractmethod


class PermissionSource(ABC):
    """Answers ownership and editability queries for one entity."""

    @property
    @abstractmethod
    def is_owner(self) -> bool: ...

    @property
    @abstractmethod
    def is_editable(self) -> bool: ...

    @property
    @abstractmethod
    def ownership(self) -> dict[str, int]: ...

    @abstractmethod
    def test_user_permission(
        self, user_id: str | None, permission: int, exact: bool = False
    ) -> bool: ...

    @abstractmethod
    def can_user_modify(self, user_id: str | None, action: str = "update") -> bool: ...


class UnownedPermissions(PermissionSource):
    """Permissions of an entity with no ownership record of its own."""

    @property
    def is_owner(self) -> bool:
        return False

    @property
    def is_editable(self) -> bool:
        return False

    @property
    def ownership(self) -> dict[str, int]:
        return {}

    def test_user_permission(
        self, user_id: str | None, permission: int, exact: bool = False
    ) -> bool:
        return False

    def can_user_modify(self, user_id: str | None, action: str = "update") -> bool:
        return False
