"""Materializer — builds a transient entity from a parent-held record."""

import logging
from typing import Any

from embedded_records.application.services.permission_delegate import delegate_permissions
from embedded_records.application.services.record_codec import RecordCodec
from embedded_records.domain.entities import Container, TransientEntity
from embedded_records.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("embedded_records.sync.materializer")


class Materializer:
    """Composes the record codec and the permission delegate.

    The returned entity is self-sufficient for an editor: it carries its
    effect collection keyed by descriptor id and answers permission
    queries through the container.
    """

    def __init__(self, codec: RecordCodec | None = None):
        self._codec = codec or RecordCodec()

    @property
    def codec(self) -> RecordCodec:
        return self._codec

    def materialize(
        self,
        record: dict[str, Any],
        container: Container,
        is_effect: bool = False,
    ) -> TransientEntity:
        with slog.timed_step(
            SyncStage.MATERIALIZE,
            f"Materializing embedded record in '{container.name}'",
            container=container.id,
            is_effect=is_effect,
        ):
            normalized = self._codec.normalize(record, container, is_effect)

            # No parent linkage: storage must never treat it as a real child.
            entity = TransientEntity(normalized, is_effect=is_effect)
            entity.rebuild_effects()
            delegate_permissions(entity, container)
            entity.original_id = record["id"]

            slog.detail(
                f"Built '{entity.name}'",
                id=entity.id,
                kind=entity.kind,
                effects=len(entity.effects),
            )
        return entity
