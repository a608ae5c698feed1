"""Character effects — translate ability rows to and from lifecycle effect changes."""

from typing import Any

ADD_MODE = 2
OVERRIDE_MODE = 5

ABILITIES = ("acro", "phys", "fort", "will", "wits")
HIDDEN_ABILITIES = ("dice", "cmax", "cmin", "fmax", "fmin", "vuln", "powerMult", "resolveMult")
OVERRIDE_ABILITIES = ("powerOverride", "resolveOverride")

_REGULAR_SUFFIX = {
    "add": "change",
    "override": "override",
    "advantage": "diceAdjustments.advantage",
    "disadvantage": "diceAdjustments.disadvantage",
}


def _regular_change(row: dict[str, Any]) -> dict[str, Any]:
    mode = row.get("mode", "add")
    suffix = _REGULAR_SUFFIX.get(mode, "transform")
    return {
        "key": f"system.abilities.{row['ability']}.{suffix}",
        "mode": OVERRIDE_MODE if mode == "override" else ADD_MODE,
        "value": row.get("value", 0),
    }


def _hidden_change(row: dict[str, Any]) -> dict[str, Any]:
    mode = row.get("mode", "add")
    return {
        "key": f"system.hiddenAbilities.{row['ability']}.{'change' if mode == 'add' else 'override'}",
        "mode": ADD_MODE if mode == "add" else OVERRIDE_MODE,
        "value": row.get("value", 0),
    }


def build_changes(
    regular: list[dict[str, Any]],
    hidden: list[dict[str, Any]],
    new_effect: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """Build an effect's ``changes`` list from regular and hidden ability rows.

    Rows without an ``ability`` are ignored. ``new_effect`` appends a blank
    ``system.<type>.<ability>.change`` row when both keys are present.
    """
    changes = [_regular_change(row) for row in regular if row.get("ability")]
    changes += [_hidden_change(row) for row in hidden if row.get("ability")]

    if new_effect and new_effect.get("type") and new_effect.get("ability"):
        changes.append(
            {
                "key": f"system.{new_effect['type']}.{new_effect['ability']}.change",
                "mode": ADD_MODE,
                "value": 0,
            }
        )
    return changes


def _row_mode(change: dict[str, Any]) -> str:
    key = change.get("key", "")
    if "disadvantage" in key:
        return "disadvantage"
    if "advantage" in key:
        return "advantage"
    if "transform" in key:
        return "transform"
    if change.get("mode") == OVERRIDE_MODE:
        return "override"
    return "add"


def categorize_changes(changes: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Split effect changes into regular, hidden and override ability rows."""
    rows: dict[str, list[dict[str, Any]]] = {"regular": [], "hidden": [], "override": []}
    every_ability = ABILITIES + HIDDEN_ABILITIES
    for change in changes or []:
        key = change.get("key", "")
        if key == "system.power.override":
            ability = "powerOverride"
        elif key == "system.resolve.override":
            ability = "resolveOverride"
        else:
            ability = next((a for a in every_ability if a in key), None)
        if ability is None:
            continue

        row = {"ability": ability, "mode": _row_mode(change), "value": change.get("value")}
        if ability in HIDDEN_ABILITIES:
            rows["hidden"].append(row)
        elif ability in OVERRIDE_ABILITIES:
            rows["override"].append(row)
        else:
            rows["regular"].append(row)
    return rows
