from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PACKAGE_ROOT / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Embedded Records API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./data/embedded_records.db"
    cors_origins: list[str] = ["http://localhost:3020"]

    # Queue writes per container id instead of relying only on the
    # pre-emptive local update (last container write wins when False).
    serialize_container_writes: bool = False

    # Open editor sessions are dropped after this much inactivity, and the
    # least recently used one is dropped once the cap is reached.
    editor_session_idle_minutes: int = 60
    max_editor_sessions: int = 500

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_sync: str = "INFO"             # materialize / write-back pipeline

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
