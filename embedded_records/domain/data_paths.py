"""Dotted-path access and deep merge over plain JSON-like mappings."""

import copy
from typing import Any

_MISSING = object()


def split_path(path: str) -> list[str]:
    if not path:
        raise ValueError("Field path must not be empty")
    return path.split(".")


def get_property(data: Any, path: str, default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` when any segment is missing."""
    current = data
    for segment in split_path(path):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return default
    return current


def has_property(data: Any, path: str) -> bool:
    return get_property(data, path, _MISSING) is not _MISSING


def set_property(data: dict[str, Any], path: str, value: Any) -> None:
    """Set ``value`` at ``path``, creating intermediate mappings as needed.

    A numeric segment addresses an existing element of a list. Segments that
    would replace a list, or index past its end, raise ValueError.
    """
    segments = split_path(path)
    current: Any = data
    for segment in segments[:-1]:
        if isinstance(current, list):
            child = current[_list_index(current, segment, path)]
            if not isinstance(child, (dict, list)):
                raise ValueError(f"Cannot descend into '{segment}' of '{path}'")
        else:
            child = current.get(segment)
            if not isinstance(child, (dict, list)):
                child = {}
                current[segment] = child
        current = child

    if isinstance(current, list):
        current[_list_index(current, segments[-1], path)] = value
    else:
        current[segments[-1]] = value


def _list_index(items: list[Any], segment: str, path: str) -> int:
    if not segment.isdigit() or int(segment) >= len(items):
        raise ValueError(f"'{segment}' is not an index into the list at '{path}'")
    return int(segment)


def expand_object(flat: dict[str, Any]) -> dict[str, Any]:
    """Expand dotted keys (``{"system.description": x}``) into nested mappings."""
    expanded: dict[str, Any] = {}
    for key, value in flat.items():
        if isinstance(value, dict):
            value = expand_object(value)
        if "." in key:
            existing = get_property(expanded, key, _MISSING)
            if isinstance(existing, dict) and isinstance(value, dict):
                merge_object(existing, value)
            else:
                set_property(expanded, key, value)
        elif isinstance(expanded.get(key), dict) and isinstance(value, dict):
            merge_object(expanded[key], value)
        else:
            expanded[key] = value
    return expanded


def merge_object(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``source`` into ``target`` in place and return ``target``.

    Nested mappings merge key by key. A mapping with numeric keys merges into
    the matching elements of an existing list (``{"effects.0.tint": x}``);
    every other value, lists included, replaces what was there. Dotted keys
    in ``source`` are expanded first.
    """
    for key, value in expand_object(source).items():
        _merge_into(target, key, value, key)
    return target


def _merge_into(target: dict[str, Any] | list[Any], key: str, value: Any, path: str) -> None:
    if isinstance(target, list):
        slot: Any = _list_index(target, key, path)
        existing = target[slot]
    else:
        slot = key
        existing = target.get(key)

    if isinstance(existing, (dict, list)) and isinstance(value, dict):
        for child_key, child_value in value.items():
            _merge_into(existing, child_key, child_value, f"{path}.{child_key}")
    else:
        target[slot] = copy.deepcopy(value)
