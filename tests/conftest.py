"""Shared fakes for the embedded-records test suite."""

import asyncio
import copy
from typing import Any

import pytest

from embedded_records.application.interfaces import ContainerRepository, RenderNotifier
from embedded_records.domain.data_paths import set_property
from embedded_records.domain.entities import Container, OwnershipLevel
from embedded_records.domain.exceptions import EntityNotFoundError


class FakeContainerRepository(ContainerRepository):
    """In-memory fake repository. Stores deep copies, like a real database."""

    def __init__(self):
        self._containers: dict[str, Container] = {}
        self.writes: list[dict[str, Any]] = []
        self.fail_writes = False
        self.fail_reads = False
        # Suspend inside update_fields so concurrent writers can interleave.
        self.yield_on_write = False

    def seed(self, container: Container) -> Container:
        self._containers[container.id] = copy.deepcopy(container)
        return container

    def stored(self, container_id: str) -> Container:
        return self._containers[container_id]

    async def get_by_id(self, container_id: str) -> Container | None:
        if self.fail_reads:
            raise ConnectionError("storage unavailable")
        container = self._containers.get(container_id)
        return copy.deepcopy(container) if container else None

    async def get_all(
        self, *, kind: str | None = None, skip: int = 0, limit: int = 100
    ) -> list[Container]:
        containers = [
            c for c in self._containers.values() if kind is None or c.kind == kind
        ]
        return [copy.deepcopy(c) for c in containers[skip : skip + limit]]

    async def create(self, container: Container) -> Container:
        self._containers[container.id] = copy.deepcopy(container)
        return container

    async def update(self, container: Container) -> Container:
        if container.id not in self._containers:
            raise EntityNotFoundError("Container", container.id)
        self._containers[container.id] = copy.deepcopy(container)
        return container

    async def update_fields(self, container_id: str, changes: dict[str, Any]) -> None:
        if self.fail_writes:
            raise ConnectionError("storage unavailable")
        if self.yield_on_write:
            await asyncio.sleep(0)
        container = self._containers.get(container_id)
        if container is None:
            raise EntityNotFoundError("Container", container_id)
        self.writes.append(copy.deepcopy(changes))
        for path, value in changes.items():
            set_property(container.data, path, copy.deepcopy(value))

    async def delete(self, container_id: str) -> bool:
        return self._containers.pop(container_id, None) is not None


class SpyNotifier(RenderNotifier):
    def __init__(self):
        self.renders: list[tuple[str, dict]] = []
        self.notices: list[tuple[str, str]] = []

    async def render(self, session_id: str, record: dict) -> None:
        self.renders.append((session_id, record))

    async def notify(self, level: str, message: str) -> None:
        self.notices.append((level, message))


def _make_container(kind: str = "actionCard", data: dict | None = None, **kwargs) -> Container:
    """An owner-bound container for user ``u1``."""
    kwargs.setdefault(
        "ownership", {"default": int(OwnershipLevel.NONE), "u1": int(OwnershipLevel.OWNER)}
    )
    container = Container(name=kwargs.pop("name", "Fireball"), kind=kind, data=data or {}, **kwargs)
    return container.bind_user("u1")


@pytest.fixture
def repository() -> FakeContainerRepository:
    return FakeContainerRepository()


@pytest.fixture
def notifier() -> SpyNotifier:
    return SpyNotifier()


@pytest.fixture
def make_container():
    return _make_container
