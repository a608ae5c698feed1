"""Toggle codec — encodes the lifecycle on/off switch as an effect duration.

The lifecycle effect of a status or gear record is "on" when its duration
has a positive number of seconds. The magnitude used for "on" is a fixed
sentinel (one week) and is never interpreted as a real timer.
"""

from typing import Any

LIFECYCLE_ON_SECONDS = 604800


def encode(is_on: bool) -> dict[str, Any]:
    """Return the duration value for a toggle state."""
    return {
        "seconds": LIFECYCLE_ON_SECONDS if is_on else 0,
        "startTime": None,
        "combat": "",
        "rounds": 0,
        "turns": 0,
        "startRound": 0,
        "startTurn": 0,
    }


def decode(duration: Any) -> bool:
    """Return True when ``duration`` represents the "on" state."""
    if not isinstance(duration, dict):
        return False
    seconds = duration.get("seconds") or 0
    try:
        return float(seconds) > 0
    except (TypeError, ValueError):
        return False


def lifecycle_effect(record: dict[str, Any]) -> dict[str, Any] | None:
    """The record's lifecycle effect descriptor: always the first one."""
    effects = record.get("effects")
    if isinstance(effects, list) and effects and isinstance(effects[0], dict):
        return effects[0]
    return None


def is_lifecycle_on(record: dict[str, Any]) -> bool:
    effect = lifecycle_effect(record)
    return decode(effect.get("duration")) if effect else False


def ensure_lifecycle(
    record: dict[str, Any], fallback_effect: dict[str, Any] | None
) -> dict[str, Any] | None:
    """Return the record's lifecycle effect, inserting ``fallback_effect`` first when missing."""
    effect = lifecycle_effect(record)
    if effect is not None or fallback_effect is None:
        return effect
    effects = record.get("effects")
    if not isinstance(effects, list):
        effects = record["effects"] = []
    effect = dict(fallback_effect)
    effects.insert(0, effect)
    return effect


def apply_toggle(
    record: dict[str, Any],
    is_on: bool,
    fallback_effect: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    """Set the lifecycle effect of ``record`` on or off, in place.

    When the record has no effect yet, ``fallback_effect`` (typically the
    transient entity's lifecycle effect) is inserted first. Returns the
    updated descriptor, or None when there is nothing to toggle.
    """
    effect = ensure_lifecycle(record, fallback_effect)
    if effect is None:
        return None
    effect["duration"] = encode(is_on)
    return effect
