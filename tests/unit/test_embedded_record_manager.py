"""Unit tests for container-level embedded record management."""

import pytest

from embedded_records.application.services import EmbeddedRecordManager, Synchronizer
from embedded_records.application.services.embedded_record_manager import sanitize_roll
from embedded_records.domain.exceptions import UnsupportedRecordKindError


@pytest.fixture
def manager(repository) -> EmbeddedRecordManager:
    return EmbeddedRecordManager(Synchronizer(repository))


@pytest.mark.asyncio
async def test_set_embedded_item_stores_a_copy_under_a_fresh_id(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedItem": None}))
    source = {"id": "src", "kind": "gear", "name": "Cloak", "system": {}}

    assert await manager.set_embedded_item(container, source) is True

    item = repository.stored(container.id).get("embeddedItem")
    assert item["id"] != "src"
    assert item["name"] == "Cloak"
    assert len(item["effects"]) == 1
    assert item["effects"][0]["duration"]["seconds"] == 0
    assert source == {"id": "src", "kind": "gear", "name": "Cloak", "system": {}}
    assert container.get("embeddedItem") == item


@pytest.mark.asyncio
async def test_set_embedded_item_rejects_unsupported_kind(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedItem": None}))
    with pytest.raises(UnsupportedRecordKindError):
        await manager.set_embedded_item(container, {"id": "x", "kind": "status"})
    assert repository.writes == []


@pytest.mark.asyncio
async def test_set_embedded_item_on_wrong_container_kind_is_refused(repository, manager, make_container):
    container = repository.seed(make_container(kind="actor", data={"actionCards": []}))
    assert await manager.set_embedded_item(container, {"id": "p", "kind": "combatPower"}) is False
    assert repository.writes == []


@pytest.mark.asyncio
async def test_clear_embedded_item(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedItem": {"id": "p1", "kind": "feature"}}))
    assert await manager.clear_embedded_item(container) is True
    assert repository.stored(container.id).get("embeddedItem") is None


@pytest.mark.asyncio
async def test_add_embedded_effect_appends_with_lifecycle_effect(repository, manager, make_container):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "status", "effects": []}]})
    )

    assert await manager.add_embedded_effect(container, {"id": "e1", "kind": "status", "name": "Burning"})

    effects = repository.stored(container.id).get("embeddedEffects")
    assert len(effects) == 2
    assert effects[1]["id"] != "e1"
    assert effects[1]["effects"][0]["name"] == "Burning"


@pytest.mark.asyncio
async def test_add_combat_power_ignores_duplicates(repository, manager, make_container):
    container = repository.seed(
        make_container(kind="transformation", data={"embeddedCombatPowers": [{"id": "p1", "kind": "combatPower"}]})
    )

    assert await manager.add_combat_power(container, {"id": "p1", "kind": "combatPower"}) is True
    assert repository.writes == []

    assert await manager.add_combat_power(container, {"id": "p2", "kind": "combatPower"}) is True
    ids = [p["id"] for p in repository.stored(container.id).get("embeddedCombatPowers")]
    assert ids == ["p1", "p2"]


@pytest.mark.asyncio
async def test_remove_embedded_record(repository, manager, make_container):
    container = repository.seed(
        make_container(
            data={"embeddedEffects": [{"id": "e1", "kind": "status"}, "junk", {"id": "e2", "kind": "gear"}]}
        )
    )

    assert await manager.remove_embedded_record(container, "embeddedEffects", "e1") is True

    assert repository.stored(container.id).get("embeddedEffects") == ["junk", {"id": "e2", "kind": "gear"}]


@pytest.mark.asyncio
async def test_remove_missing_record_is_a_no_op(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedEffects": [{"id": "e1"}]}))
    assert await manager.remove_embedded_record(container, "embeddedEffects", "nope") is True
    assert await manager.remove_embedded_record(container, "embeddedEffects", "") is False
    assert repository.writes == []


@pytest.mark.asyncio
async def test_failed_write_leaves_local_state_untouched(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedEffects": [{"id": "e1"}]}))
    repository.fail_writes = True

    assert await manager.remove_embedded_record(container, "embeddedEffects", "e1") is False
    assert container.get("embeddedEffects") == [{"id": "e1"}]


@pytest.mark.asyncio
async def test_create_new_power_in_transformation(repository, manager, make_container):
    container = repository.seed(
        make_container(kind="transformation", name="Wolf", data={"embeddedCombatPowers": []})
    )

    assert await manager.create_new_power(container) is True

    (power,) = repository.stored(container.id).get("embeddedCombatPowers")
    assert power["name"] == "Wolf Power"
    assert power["system"]["description"] == "Combat power from Wolf transformation"


@pytest.mark.asyncio
async def test_create_new_power_on_action_card_sets_embedded_item(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedItem": None}))
    assert await manager.create_new_power(container) is True
    item = repository.stored(container.id).get("embeddedItem")
    assert item["name"] == "Fireball"
    assert item["system"]["roll"]["requiresTarget"] is True


@pytest.mark.asyncio
async def test_create_new_status_only_when_no_effects_exist(repository, manager, make_container):
    container = repository.seed(make_container(data={"embeddedEffects": [], "textColor": "#00ff00"}))

    assert await manager.create_new_status(container) is True
    (status,) = repository.stored(container.id).get("embeddedEffects")
    assert status["effects"][0]["name"] == "Fireball Effect"
    assert status["effects"][0]["tint"] == "#00ff00"

    assert await manager.create_new_status(container) is False
    assert len(repository.writes) == 1


def test_sanitize_roll():
    record = {"system": {"roll": {"type": "bogus"}}}
    sanitize_roll(record)
    assert record["system"]["roll"] == {"type": "roll", "requiresTarget": True}

    record = {"system": {"roll": {"type": "none"}}}
    sanitize_roll(record)
    assert record["system"]["roll"]["requiresTarget"] is False
