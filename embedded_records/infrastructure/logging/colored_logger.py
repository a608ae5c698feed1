"""Colored sync logger — ANSI-colored console logging for embedded-record writes.

Provides a SyncLogger with color-coded output per synchronization stage,
making it easy to follow a record from materialization to write-back in
the terminal.

Color scheme:
    🟢 Green   — Materialize
    🔵 Blue    — Write-back
    🟡 Yellow  — Lifecycle toggle
    🟣 Magenta — Groups
    🔴 Red     — Errors
    ⚪ Gray    — Details / Stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


# ── Sync Stage Definitions ───────────────────────────────────────────

class SyncStage:
    """Predefined synchronization stages with colors and icons."""

    MATERIALIZE = ("MATERIALIZE", _Colors.GREEN, "🧩")
    WRITE_BACK = ("WRITE_BACK", _Colors.BLUE, "💾")
    TOGGLE = ("TOGGLE", _Colors.YELLOW, "🔀")
    GROUP = ("GROUP", _Colors.MAGENTA, "🗂️")
    RECORDS = ("RECORDS", _Colors.CYAN, "📦")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


# ── SyncLogger ───────────────────────────────────────────────────────

class SyncLogger:
    """Color-coded logger for the materialize / write-back path.

    Usage:
        log = SyncLogger("embedded_records.sync")
        log.step_start(SyncStage.WRITE_BACK, "Writing embeddedEffects", record_id="e1")
        log.step_complete(SyncStage.WRITE_BACK, "Stored 3 records")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    @staticmethod
    def _details(kwargs: dict[str, Any]) -> str:
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {_Colors.GRAY}({details}){_Colors.RESET}"

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += self._details(kwargs)
        self._logger.debug(formatted)

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += self._details(kwargs)
        self._logger.info(formatted)

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, _, icon = stage
        formatted = (
            f"{_Colors.YELLOW}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.YELLOW}{message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += self._details(kwargs)
        self._logger.warning(formatted)

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a step error in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            formatted += f" {_Colors.DIM}({details}){_Colors.RESET}"
        self._logger.debug(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(SyncStage.MATERIALIZE, "Materializing e1"):
                entity = materializer.materialize(...)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed * 1000:.1f}ms", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed * 1000:.1f}ms", **kwargs)
