"""Unit tests for dotted-path helpers."""

import pytest

from embedded_records.domain.data_paths import (
    expand_object,
    get_property,
    has_property,
    merge_object,
    set_property,
)


def test_get_property_walks_dicts_and_list_indexes():
    data = {"system": {"roll": {"type": "flat"}}, "effects": [{"id": "x"}]}
    assert get_property(data, "system.roll.type") == "flat"
    assert get_property(data, "effects.0.id") == "x"
    assert get_property(data, "effects.3.id", "missing") == "missing"
    assert has_property(data, "system.roll") is True
    assert has_property(data, "system.cost") is False


def test_set_property_creates_intermediate_mappings():
    data = {"system": "not a dict"}
    set_property(data, "system.description", "hi")
    assert data == {"system": {"description": "hi"}}


def test_empty_path_is_rejected():
    with pytest.raises(ValueError):
        get_property({}, "")


def test_expand_object_nests_dotted_keys():
    assert expand_object({"system.cost": 1, "system": {"range": 2}, "name": "x"}) == {
        "system": {"cost": 1, "range": 2},
        "name": "x",
    }


def test_merge_object_replaces_lists_and_merges_mappings():
    target = {"system": {"cost": 1, "tags": ["a"]}, "name": "old"}
    merge_object(target, {"system.tags": ["b"], "name": "new"})
    assert target == {"system": {"cost": 1, "tags": ["b"]}, "name": "new"}


def test_set_property_indexes_into_existing_lists():
    data = {"effects": [{"id": "fx", "tint": "#ffffff"}, {"id": "fy"}]}
    set_property(data, "effects.0.tint", "#ff0000")
    set_property(data, "effects.1", {"id": "fz"})
    assert data == {"effects": [{"id": "fx", "tint": "#ff0000"}, {"id": "fz"}]}


@pytest.mark.parametrize("path", ["effects.5.tint", "effects.tint", "effects.-1"])
def test_set_property_refuses_to_replace_a_list(path):
    data = {"effects": [{"id": "fx"}]}
    with pytest.raises(ValueError):
        set_property(data, path, "#ff0000")
    assert data == {"effects": [{"id": "fx"}]}


def test_merge_object_merges_numeric_keys_into_list_elements():
    target = {"effects": [{"id": "fx", "tint": "#ffffff", "flags": {"a": 1}}]}
    merge_object(target, {"effects.0.tint": "#00ff00", "effects.0.flags.b": 2})
    assert target == {"effects": [{"id": "fx", "tint": "#00ff00", "flags": {"a": 1, "b": 2}}]}


def test_merge_object_rejects_out_of_range_list_keys():
    with pytest.raises(ValueError):
        merge_object({"effects": []}, {"effects.0.tint": "#00ff00"})
