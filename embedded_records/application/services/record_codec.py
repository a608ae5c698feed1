"""Record codec — normalizes persisted embedded records and injects defaults."""

import copy
import logging
from typing import Any

from embedded_records.application.services.toggle_codec import encode as encode_toggle
from embedded_records.domain.entities import DEFAULT_TINT, LIFECYCLE_KINDS, Container
from embedded_records.domain.exceptions import MalformedRecordError
from embedded_records.domain.ids import new_id

logger = logging.getLogger(__name__)


def build_default_effect(record: dict[str, Any]) -> dict[str, Any]:
    """A lifecycle effect descriptor named and iconed after ``record``, toggled off."""
    return {
        "id": new_id(),
        "name": record.get("name", ""),
        "icon": record.get("icon", ""),
        "changes": [],
        "disabled": False,
        "duration": encode_toggle(False),
        "flags": {},
        "tint": DEFAULT_TINT,
        "transfer": True,
        "statuses": [],
    }


class RecordCodec:
    """Converts between a parent-held record and the runtime record shape.

    ``normalize`` repairs the raw record *in place* (fresh ids, the default
    lifecycle effect) so that those repairs are persisted by the next
    write-back, and returns an independent normalized copy for runtime use.
    """

    def ensure_identity(self, record: dict[str, Any]) -> bool:
        """Assign fresh ids to the record and its effects where missing."""
        repaired = False
        if not isinstance(record.get("id"), str) or not record.get("id"):
            record["id"] = new_id()
            repaired = True
            logger.warning(
                "Embedded record '%s' had no id — assigned %s",
                record.get("name", ""),
                record["id"],
            )
        for descriptor in record.get("effects") or []:
            if isinstance(descriptor, dict) and not descriptor.get("id"):
                descriptor["id"] = new_id()
                repaired = True
        return repaired

    def ensure_lifecycle_effect(self, record: dict[str, Any]) -> bool:
        """Give a status/gear record its lifecycle effect when it has none.

        Returns True when a default effect was injected.
        """
        if record.get("kind") not in LIFECYCLE_KINDS:
            return False
        effects = record.get("effects")
        if isinstance(effects, list) and effects:
            return False
        default_effect = build_default_effect(record)
        if isinstance(effects, list):
            effects.append(default_effect)
        else:
            record["effects"] = [default_effect]
        logger.debug(
            "Injected default lifecycle effect %s into '%s'",
            default_effect["id"],
            record.get("name", ""),
        )
        return True

    def normalize(
        self,
        record: dict[str, Any],
        container: Container | None = None,
        is_effect: bool = False,
    ) -> dict[str, Any]:
        if not isinstance(record, dict):
            raise MalformedRecordError(f"expected a mapping, got {type(record).__name__}")

        self.ensure_identity(record)
        self.ensure_lifecycle_effect(record)

        normalized = copy.deepcopy(record)
        normalized.setdefault("system", {})
        effects = normalized.get("effects")
        if not isinstance(effects, list):
            normalized["effects"] = []
        else:
            normalized["effects"] = [e for e in effects if isinstance(e, dict)]

        if normalized.get("kind") in LIFECYCLE_KINDS and len(normalized["effects"]) > 1:
            logger.warning(
                "Record '%s' in container %s carries %d effects — only the first is the lifecycle effect",
                normalized["id"],
                container.id if container else "-",
                len(normalized["effects"]),
            )
            normalized["effects"] = normalized["effects"][:1]

        return normalized

    def encode(self, normalized: dict[str, Any]) -> dict[str, Any]:
        """Return the persisted form of a normalized record."""
        return copy.deepcopy(normalized)
