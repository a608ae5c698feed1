"""Unit tests for the Materializer."""

from embedded_records.application.services.materializer import Materializer


def test_status_materializes_with_exactly_one_effect(make_container):
    container = make_container(data={"embeddedEffects": []})
    record = {"id": "e1", "kind": "status", "name": "Burning", "effects": []}

    entity = Materializer().materialize(record, container, is_effect=True)

    assert len(entity.effects) == 1
    assert entity.first_effect.duration["seconds"] == 0
    assert entity.first_effect.parent is entity


def test_lifecycle_kinds_always_have_one_effect(make_container):
    container = make_container()
    materializer = Materializer()
    for kind in ("status", "gear"):
        for effects in ([], [{"id": "a"}], [{"id": "a"}, {"id": "b"}]):
            entity = materializer.materialize(
                {"id": f"{kind}-1", "kind": kind, "effects": list(effects)}, container
            )
            assert len(entity.effects) == 1


def test_entity_is_unparented_and_keeps_identity(make_container):
    container = make_container()
    entity = Materializer().materialize(
        {"id": "p1", "kind": "combatPower", "name": "Strike"}, container
    )
    assert entity.parent is None
    assert entity.container is container
    assert entity.original_id == "p1"
    assert entity.kind == "combatPower"
    assert entity.is_effect is False


def test_effects_are_keyed_by_descriptor_id(make_container):
    container = make_container()
    entity = Materializer().materialize(
        {"id": "g1", "kind": "gear", "effects": [{"id": "fx1", "name": "Sharp"}]}, container
    )
    assert list(entity.effects) == ["fx1"]
    assert entity.effects["fx1"].name == "Sharp"


def test_permissions_are_delegated_to_container(make_container):
    container = make_container()
    entity = Materializer().materialize({"id": "e1", "kind": "status"}, container)
    assert entity.is_owner is True
    assert entity.is_editable is True

    container.locked = True
    assert entity.is_editable is False


def test_missing_id_is_assigned_and_recorded(make_container):
    record = {"kind": "feature", "name": "Keen Eye"}
    entity = Materializer().materialize(record, make_container())
    assert entity.original_id == record["id"]
    assert entity.id == record["id"]
