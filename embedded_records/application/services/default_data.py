"""Default data for records created from a container's context."""

from typing import Any

from embedded_records.application.services.record_codec import build_default_effect
from embedded_records.domain.entities import Container, RecordKind
from embedded_records.domain.ids import new_id

DEFAULT_BG_COLOR = "#8B4513"
DEFAULT_TEXT_COLOR = "#ffffff"


def default_roll() -> dict[str, Any]:
    return {
        "type": "roll",
        "ability": "unaugmented",
        "bonus": 0,
        "diceAdjustments": {"advantage": 0, "disadvantage": 0, "total": 0},
    }


def combat_power_data(parent: Container, context: str = "actionCard") -> dict[str, Any]:
    """A combat power derived from ``parent``.

    In the ``transformation`` context the power is named after the
    transformation instead of copying it.
    """
    record = {
        "id": new_id(),
        "kind": RecordKind.COMBAT_POWER.value,
        "name": parent.name,
        "icon": parent.icon,
        "system": {
            "description": parent.get("description") or "",
            "prerequisites": "",
            "targeted": True,
            "bgColor": parent.get("bgColor") or DEFAULT_BG_COLOR,
            "textColor": parent.get("textColor") or DEFAULT_TEXT_COLOR,
            "roll": default_roll(),
        },
        "effects": [],
    }
    if context == "transformation":
        record["name"] = f"{parent.name} Power"
        record["system"]["description"] = f"Combat power from {parent.name} transformation"
    return record


def status_data(parent: Container) -> dict[str, Any]:
    record = {
        "id": new_id(),
        "kind": RecordKind.STATUS.value,
        "name": parent.name,
        "icon": parent.icon,
        "system": {
            "description": parent.get("description") or "",
            "bgColor": parent.get("bgColor"),
            "textColor": parent.get("textColor"),
        },
    }
    effect = build_default_effect(record)
    effect["name"] = f"{parent.name} Effect"
    effect["tint"] = parent.get("textColor") or effect["tint"]
    record["effects"] = [effect]
    return record


def transformation_data(parent: Container) -> dict[str, Any]:
    return {
        "id": new_id(),
        "kind": RecordKind.TRANSFORMATION.value,
        "name": parent.name,
        "icon": parent.icon,
        "system": {
            "description": parent.get("description") or "",
            "size": 1,
            "cursed": False,
            "embeddedCombatPowers": [],
            "resolveAdjustment": 0,
            "powerAdjustment": 0,
            "tokenImage": "",
        },
        "effects": [],
    }


def action_card_data(parent: Container) -> dict[str, Any]:
    return {
        "id": new_id(),
        "kind": RecordKind.ACTION_CARD.value,
        "name": f"{parent.name} Action",
        "icon": parent.icon,
        "system": {
            "description": f"Action card from {parent.name} transformation",
            "bgColor": DEFAULT_BG_COLOR,
            "textColor": DEFAULT_TEXT_COLOR,
            "mode": "attackChain",
            "attackChain": {
                "firstStat": "acro",
                "secondStat": "phys",
                "damageCondition": "never",
                "damageFormula": "1d6",
                "damageType": "damage",
                "damageThreshold": 15,
                "statusCondition": "oneSuccess",
                "statusThreshold": 15,
            },
            "embeddedItem": None,
            "embeddedEffects": [],
            "embeddedTransformations": [],
            "repetitions": "1",
            "statusApplicationLimit": 1,
        },
        "effects": [],
    }


def record_data(kind: str, parent: Container, context: str = "actionCard") -> dict[str, Any] | None:
    """Dispatch to the factory for ``kind``; None when there is none."""
    if kind == RecordKind.COMBAT_POWER.value:
        return combat_power_data(parent, context)
    if kind == RecordKind.STATUS.value:
        return status_data(parent)
    if kind == RecordKind.TRANSFORMATION.value:
        return transformation_data(parent)
    if kind == RecordKind.ACTION_CARD.value:
        return action_card_data(parent)
    return None
