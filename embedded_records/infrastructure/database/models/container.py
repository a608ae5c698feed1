"""SQLAlchemy ORM model for the Container entity."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from embedded_records.infrastructure.database.base import Base


class ContainerModel(Base):
    """ORM model — maps to the 'containers' table.

    Embedded records live inline in the ``data`` JSON column.
    """

    __tablename__ = "containers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    icon: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ownership: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (Index("ix_containers_kind", "kind"),)

    def __repr__(self) -> str:
        return f"<ContainerModel(id={self.id}, kind='{self.kind}', name='{self.name}')>"
