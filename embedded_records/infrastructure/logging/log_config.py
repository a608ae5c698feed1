"""Logging setup for the record synchronization service.

Every write-back emits step logs through the ``embedded_records.sync``
logger, and the services log their own warnings beside it. Those two
sources share the ``log_level_sync`` setting so a noisy edit session can
be traced at DEBUG while SQL and HTTP chatter stays at WARNING.

Usage:
    from embedded_records.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the application lifespan
"""

import logging
import sys

from embedded_records.config import get_settings


# ── Settings field → logger names ───────────────────────────────────

_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_sql": [
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "aiosqlite",
    ],
    "log_level_http": [
        "httpx",
        "httpcore",
    ],
    "log_level_uvicorn": [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
    ],
    "log_level_sync": [
        "embedded_records.sync",
        "embedded_records.application.services",
    ],
}


def setup_logging() -> None:
    """Apply the root level and the per-category levels from Settings."""
    settings = get_settings()
    root_level = _parse_level(settings.log_level)

    root = logging.getLogger()
    root.setLevel(root_level)

    # Test runs and CLI scripts start without a handler.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(levelname)-8s %(name)s: %(message)s",
            )
        )
        root.addHandler(handler)

    for settings_field, logger_names in _CATEGORY_MAP.items():
        raw_level: str = getattr(settings, settings_field, "INFO")
        level = _parse_level(raw_level)

        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s, sql=%s, http=%s, uvicorn=%s, sync=%s",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_http,
        settings.log_level_uvicorn,
        settings.log_level_sync,
    )


def _parse_level(raw: str) -> int:
    """Map a level name to its logging constant; unknown names give INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
