"""Concrete repository implementation for Container backed by SQLAlchemy."""

import copy
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from embedded_records.application.interfaces import ContainerRepository
from embedded_records.domain.data_paths import set_property
from embedded_records.domain.entities import Container
from embedded_records.domain.exceptions import EntityNotFoundError
from embedded_records.infrastructure.database.models import ContainerModel


class SQLAlchemyContainerRepository(ContainerRepository):
    """Implements the ContainerRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ContainerModel) -> Container:
        """Map ORM model → domain entity."""
        return Container(
            id=model.id,
            name=model.name,
            kind=model.kind,
            icon=model.icon,
            data=copy.deepcopy(model.data or {}),
            ownership=dict(model.ownership or {}),
            locked=model.locked,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Container) -> ContainerModel:
        """Map domain entity → ORM model (for creation)."""
        return ContainerModel(
            id=entity.id,
            name=entity.name,
            kind=entity.kind,
            icon=entity.icon,
            data=copy.deepcopy(entity.data),
            ownership=dict(entity.ownership),
            locked=entity.locked,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def get_by_id(self, container_id: str) -> Container | None:
        result = await self._session.get(ContainerModel, container_id)
        if result is not None:
            # Always read the stored row, not a value cached earlier in this session.
            await self._session.refresh(result)
        return self._to_entity(result) if result else None

    async def get_all(
        self,
        *,
        kind: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Container]:
        stmt = select(ContainerModel)

        if kind is not None:
            stmt = stmt.where(ContainerModel.kind == kind)

        stmt = stmt.offset(skip).limit(limit).order_by(ContainerModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, container: Container) -> Container:
        model = self._to_model(container)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, container: Container) -> Container:
        model = await self._session.get(ContainerModel, container.id)
        if model is None:
            raise EntityNotFoundError("Container", container.id)
        model.name = container.name
        model.icon = container.icon
        model.data = copy.deepcopy(container.data)
        model.ownership = dict(container.ownership)
        model.locked = container.locked
        model.updated_at = datetime.now(timezone.utc)
        await self._session.flush()
        return self._to_entity(model)

    async def update_fields(self, container_id: str, changes: dict[str, Any]) -> None:
        """Replace whole field values and commit.

        Each field write is its own unit of work so that a serialized writer
        sees it as soon as it returns.
        """
        model = await self._session.get(ContainerModel, container_id)
        if model is None:
            raise EntityNotFoundError("Container", container_id)

        # Reassign a new dict: in-place JSON mutation is not change-tracked.
        data = copy.deepcopy(model.data or {})
        for path, value in changes.items():
            set_property(data, path, copy.deepcopy(value))
        model.data = data
        model.updated_at = datetime.now(timezone.utc)
        await self._session.flush()
        await self._session.commit()

    async def delete(self, container_id: str) -> bool:
        model = await self._session.get(ContainerModel, container_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True
