"""Identifier generation for embedded records, effects and groups."""

from uuid import uuid4


def new_id() -> str:
    """Return a fresh 16-character identifier."""
    return uuid4().hex[:16]
