"""Unit tests for the lifecycle toggle codec."""

from embedded_records.application.services.toggle_codec import (
    LIFECYCLE_ON_SECONDS,
    apply_toggle,
    decode,
    encode,
    is_lifecycle_on,
)


def test_encode_decode_symmetry():
    assert decode(encode(True)) is True
    assert decode(encode(False)) is False


def test_encode_uses_only_the_sentinel_or_zero():
    assert encode(True)["seconds"] == LIFECYCLE_ON_SECONDS == 604800
    assert encode(False)["seconds"] == 0
    assert encode(True)["startTime"] is None
    assert encode(False) == {
        "seconds": 0,
        "startTime": None,
        "combat": "",
        "rounds": 0,
        "turns": 0,
        "startRound": 0,
        "startTurn": 0,
    }


def test_decode_treats_any_positive_magnitude_as_on():
    assert decode({"seconds": 18000}) is True
    assert decode({"seconds": 0}) is False
    assert decode({}) is False
    assert decode(None) is False
    assert decode({"seconds": "abc"}) is False


def test_apply_toggle_targets_the_first_effect_only():
    record = {
        "effects": [
            {"id": "first", "duration": encode(False)},
            {"id": "second", "duration": encode(False)},
        ]
    }
    apply_toggle(record, True)
    assert record["effects"][0]["duration"]["seconds"] == 604800
    assert record["effects"][1]["duration"]["seconds"] == 0
    assert is_lifecycle_on(record)


def test_apply_toggle_inserts_fallback_when_no_effect_is_stored():
    record = {"id": "r1", "effects": []}
    effect = apply_toggle(record, True, {"id": "tmp", "name": "Burning"})
    assert effect["id"] == "tmp"
    assert record["effects"] == [effect]
    assert effect["duration"]["seconds"] == 604800


def test_apply_toggle_without_effect_or_fallback_is_a_noop():
    record = {"id": "r1"}
    assert apply_toggle(record, True) is None
    assert "effects" not in record
