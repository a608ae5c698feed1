"""Unit tests for the editor lifecycle service."""

from datetime import datetime, timedelta, timezone

import pytest

from embedded_records.application.services import (
    EditorSessionRegistry,
    EmbeddedRecordEditor,
    EmbeddedRecordManager,
    Synchronizer,
)
from embedded_records.domain.entities import OwnershipLevel, WriteStatus
from embedded_records.domain.exceptions import RecordNotFoundError


@pytest.fixture
def registry() -> EditorSessionRegistry:
    return EditorSessionRegistry()


@pytest.fixture
def editor(repository, notifier, registry) -> EmbeddedRecordEditor:
    return EmbeddedRecordEditor(Synchronizer(repository, notifier=notifier), registry)


@pytest.mark.asyncio
async def test_toggle_scenario_writes_sentinel_into_first_effect(repository, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "status", "effects": []}]})
    )

    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)
    assert len(session.entity.effects) == 1
    assert session.entity.first_effect.duration["seconds"] == 0

    outcome = await editor.on_toggle(session, True)

    assert outcome.ok
    stored = repository.stored(container.id).get("embeddedEffects")[0]
    assert stored["id"] == "e1"
    assert stored["effects"][0]["duration"]["seconds"] == 604800
    assert session.entity.first_effect.duration["seconds"] == 604800


@pytest.mark.asyncio
async def test_toggle_off_after_on(repository, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "gear", "name": "Cloak"}]})
    )
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)
    await editor.on_toggle(session, True)
    await editor.on_toggle(session, False)
    stored = repository.stored(container.id).get("embeddedEffects")[0]
    assert stored["effects"][0]["duration"]["seconds"] == 0


@pytest.mark.asyncio
async def test_toggle_on_record_without_lifecycle_effect_is_skipped(repository, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedItem": {"id": "p1", "kind": "combatPower", "effects": []}})
    )
    session = editor.open_record(container, "embeddedItem")
    outcome = await editor.on_toggle(session, True)
    assert outcome.status == WriteStatus.SKIPPED
    assert repository.writes == []


@pytest.mark.asyncio
async def test_on_save_sets_a_single_property(repository, notifier, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedItem": {"id": "p1", "kind": "combatPower", "system": {}}})
    )
    session = editor.open_record(container, "embeddedItem")

    outcome = await editor.on_save(session, "system.description", "<p>Hits hard.</p>")

    assert outcome.ok
    stored = repository.stored(container.id).get("embeddedItem")
    assert stored["system"]["description"] == "<p>Hits hard.</p>"
    assert session.entity.system["description"] == "<p>Hits hard.</p>"
    assert ("info", "Saved 'system.description'.") in notifier.notices
    assert notifier.renders[-1][0] == session.id


@pytest.mark.asyncio
async def test_on_submit_deep_merges_dotted_form_data(repository, editor, make_container):
    container = repository.seed(
        make_container(
            kind="transformation",
            data={
                "embeddedCombatPowers": [
                    {"id": "p1", "kind": "combatPower", "name": "Claw", "system": {"cost": 1, "targeted": True}}
                ]
            },
        )
    )
    session = editor.open_record(container, "embeddedCombatPowers", "p1")

    outcome = await editor.on_submit(session, {"name": "Big Claw", "system.cost": 3})

    assert outcome.ok
    stored = repository.stored(container.id).get("embeddedCombatPowers")[0]
    assert stored["name"] == "Big Claw"
    assert stored["system"] == {"cost": 3, "targeted": True}


@pytest.mark.asyncio
async def test_consecutive_edits_do_not_lose_earlier_changes(repository, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "status", "name": "Old"}]})
    )
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    await editor.on_save(session, "system.description", "desc")
    await editor.on_tint_change(session, "#ff0000")
    await editor.on_submit(session, {"name": "New"})

    stored = repository.stored(container.id).get("embeddedEffects")[0]
    assert stored["system"]["description"] == "desc"
    assert stored["effects"][0]["tint"] == "#ff0000"
    assert stored["name"] == "New"


@pytest.mark.asyncio
async def test_character_effects_rebuild_lifecycle_changes(repository, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "status", "effects": []}]})
    )
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    outcome = await editor.on_character_effects(
        session,
        regular=[{"ability": "acro", "mode": "add", "value": 2}],
        hidden=[{"ability": "dice", "mode": "override", "value": 20}],
        new_effect={"type": "abilities", "ability": "will"},
    )

    assert outcome.ok
    changes = repository.stored(container.id).get("embeddedEffects")[0]["effects"][0]["changes"]
    assert changes == [
        {"key": "system.abilities.acro.change", "mode": 2, "value": 2},
        {"key": "system.hiddenAbilities.dice.override", "mode": 5, "value": 20},
        {"key": "system.abilities.will.change", "mode": 2, "value": 0},
    ]


@pytest.mark.asyncio
async def test_non_editable_container_refuses_writes(repository, editor, make_container):
    container = make_container(
        data={"embeddedEffects": [{"id": "e1", "kind": "status"}]},
        ownership={"default": int(OwnershipLevel.OBSERVER)},
    )
    repository.seed(container)
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    assert session.entity.is_editable is False
    outcome = await editor.on_toggle(session, True)
    assert outcome.status == WriteStatus.NOT_EDITABLE
    assert repository.writes == []


@pytest.mark.asyncio
async def test_close_unregisters_and_later_edits_are_skipped(repository, registry, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedItem": {"id": "p1", "kind": "combatPower"}})
    )
    session = editor.open_record(container, "embeddedItem")
    assert editor.get_session(session.id) is session

    closed = editor.close(session)

    assert closed.ok
    assert len(registry) == 0
    outcome = await editor.on_submit(session, {"name": "late"})
    assert outcome.status == WriteStatus.SKIPPED


@pytest.mark.asyncio
async def test_write_failure_is_reported_not_raised(repository, notifier, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedItem": {"id": "p1", "kind": "combatPower", "name": "A"}})
    )
    session = editor.open_record(container, "embeddedItem")
    repository.fail_writes = True

    outcome = await editor.on_submit(session, {"name": "B"})

    assert outcome.status == WriteStatus.WRITE_FAILED
    assert session.entity.name == "B"
    assert notifier.notices[-1][0] == "error"


def test_open_record_missing_raises_record_not_found(editor, make_container):
    container = make_container(data={"embeddedEffects": []})
    with pytest.raises(RecordNotFoundError):
        editor.open_record(container, "embeddedEffects", "nope")


def test_open_derives_locator_from_container_kind(editor, make_container):
    card = make_container(data={"embeddedEffects": [], "embeddedItem": None})
    transformation = make_container(kind="transformation", data={"embeddedCombatPowers": []})

    effect_session = editor.open({"id": "e1", "kind": "status"}, card, is_effect=True)
    item_session = editor.open({"id": "p1", "kind": "combatPower"}, card)
    power_session = editor.open({"id": "p2", "kind": "combatPower"}, transformation)

    assert (effect_session.locator.field_path, effect_session.locator.record_id) == ("embeddedEffects", "e1")
    assert (item_session.locator.field_path, item_session.locator.record_id) == ("embeddedItem", None)
    assert (power_session.locator.field_path, power_session.locator.record_id) == ("embeddedCombatPowers", "p2")


@pytest.mark.asyncio
async def test_edit_from_long_lived_session_keeps_records_added_elsewhere(
    repository, editor, make_container
):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "status", "name": "Burning"}]})
    )
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    # Another request loads the container and adds a sibling record.
    manager = EmbeddedRecordManager(Synchronizer(repository))
    added = await manager.add_embedded_effect(
        await repository.get_by_id(container.id), {"kind": "gear", "name": "Cloak"}
    )
    assert added

    outcome = await editor.on_save(session, "name", "Burning Hot")

    assert outcome.ok
    stored = repository.stored(container.id).get("embeddedEffects")
    assert [r["name"] for r in stored] == ["Burning Hot", "Cloak"]
    assert len(stored[0]["effects"]) == 1
    assert [r["name"] for r in session.container.get("embeddedEffects")] == ["Burning Hot", "Cloak"]


@pytest.mark.asyncio
async def test_on_save_with_list_index_edits_the_element(repository, editor, make_container):
    container = repository.seed(
        make_container(
            data={
                "embeddedEffects": [
                    {"id": "e1", "kind": "status", "effects": [{"id": "fx", "tint": "#ffffff"}]}
                ]
            }
        )
    )
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    outcome = await editor.on_save(session, "effects.0.tint", "#ff0000")

    assert outcome.ok
    effects = repository.stored(container.id).get("embeddedEffects")[0]["effects"]
    assert isinstance(effects, list)
    assert effects[0]["id"] == "fx"
    assert effects[0]["tint"] == "#ff0000"


@pytest.mark.asyncio
async def test_out_of_range_list_index_is_rejected(repository, notifier, editor, make_container):
    container = repository.seed(
        make_container(data={"embeddedEffects": [{"id": "e1", "kind": "status", "effects": [{"id": "fx"}]}]})
    )
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    save = await editor.on_save(session, "effects.3.tint", "#ff0000")
    submit = await editor.on_submit(session, {"effects.3.tint": "#ff0000"})

    assert save.status == WriteStatus.REJECTED
    assert submit.status == WriteStatus.REJECTED
    assert repository.writes == []
    assert repository.stored(container.id).get("embeddedEffects")[0]["effects"] == [{"id": "fx"}]


class _Clock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now += timedelta(minutes=minutes)


def _three_effects(repository, make_container):
    return repository.seed(
        make_container(
            data={
                "embeddedEffects": [
                    {"id": f"e{i}", "kind": "status", "name": f"Effect {i}"} for i in range(1, 4)
                ]
            }
        )
    )


@pytest.mark.asyncio
async def test_idle_sessions_are_evicted_and_closed(repository, make_container):
    clock = _Clock()
    registry = EditorSessionRegistry(idle_timeout=timedelta(minutes=10), clock=clock)
    editor = EmbeddedRecordEditor(Synchronizer(repository), registry)
    container = _three_effects(repository, make_container)
    session = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)

    clock.advance(11)

    assert editor.get_session(session.id) is None
    assert len(registry) == 0
    assert session.closed is True
    outcome = await editor.on_save(session, "name", "Late")
    assert outcome.status == WriteStatus.SKIPPED
    assert repository.writes == []


def test_access_keeps_a_session_alive(repository, make_container):
    clock = _Clock()
    registry = EditorSessionRegistry(idle_timeout=timedelta(minutes=10), clock=clock)
    editor = EmbeddedRecordEditor(Synchronizer(repository), registry)
    session = editor.open_record(_three_effects(repository, make_container), "embeddedEffects", "e1", is_effect=True)

    clock.advance(6)
    assert editor.get_session(session.id) is session
    clock.advance(6)
    assert editor.get_session(session.id) is session


def test_full_registry_evicts_least_recently_used(repository, make_container):
    clock = _Clock()
    registry = EditorSessionRegistry(max_sessions=2, clock=clock)
    editor = EmbeddedRecordEditor(Synchronizer(repository), registry)
    container = _three_effects(repository, make_container)

    first = editor.open_record(container, "embeddedEffects", "e1", is_effect=True)
    clock.advance(1)
    second = editor.open_record(container, "embeddedEffects", "e2", is_effect=True)
    clock.advance(1)
    registry.get(first.id)
    clock.advance(1)
    third = editor.open_record(container, "embeddedEffects", "e3", is_effect=True)

    assert {s.id for s in registry} == {first.id, third.id}
    assert second.closed is True


def test_remove_container_closes_its_sessions(repository, registry, editor, make_container):
    container = _three_effects(repository, make_container)
    other = repository.seed(make_container(data={"embeddedEffects": [{"id": "x", "kind": "gear"}]}))
    sessions = [
        editor.open_record(container, "embeddedEffects", "e1", is_effect=True),
        editor.open_record(container, "embeddedEffects", "e2", is_effect=True),
    ]
    kept = editor.open_record(other, "embeddedEffects", "x", is_effect=True)

    removed = registry.remove_container(container.id)

    assert {s.id for s in removed} == {s.id for s in sessions}
    assert all(s.closed for s in sessions)
    assert list(registry) == [kept]
