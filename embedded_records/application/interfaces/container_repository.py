"""Abstract repository interface (port) for Container persistence."""

from abc import ABC, abstractmethod
from typing import Any

from embedded_records.domain.entities import Container


class ContainerRepository(ABC):
    """Port for container persistence — implemented in the infrastructure layer.

    ``update_fields`` is the sole write path used while editing embedded
    records: it replaces whole field values addressed by dotted paths.
    """

    @abstractmethod
    async def get_by_id(self, container_id: str) -> Container | None:
        """Retrieve a single container by its UUID."""
        ...

    @abstractmethod
    async def get_all(
        self,
        *,
        kind: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Container]:
        """Retrieve a filtered, paginated list of containers."""
        ...

    @abstractmethod
    async def create(self, container: Container) -> Container:
        """Persist a new container and return it."""
        ...

    @abstractmethod
    async def update(self, container: Container) -> Container:
        """Update an existing container's name, icon, data and permissions."""
        ...

    @abstractmethod
    async def update_fields(self, container_id: str, changes: dict[str, Any]) -> None:
        """Replace the values at the given dotted field paths.

        Raises:
            EntityNotFoundError: If the container does not exist.
        """
        ...

    @abstractmethod
    async def delete(self, container_id: str) -> bool:
        """Delete a container. Returns True if deleted, False if not found."""
        ...
