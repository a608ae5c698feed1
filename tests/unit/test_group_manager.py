"""Unit tests for record groups inside an actor container."""

import pytest

from embedded_records.application.services import GroupManager, Synchronizer
from embedded_records.application.services.group_manager import next_group_name
from embedded_records.domain.entities import RecordGroup
from embedded_records.domain.exceptions import EntityNotFoundError, RecordNotFoundError


@pytest.fixture
def groups(repository) -> GroupManager:
    return GroupManager(Synchronizer(repository))


@pytest.fixture
def actor(repository, make_container):
    return repository.seed(
        make_container(
            kind="actor",
            name="Hero",
            data={
                "actionCards": [
                    {"id": "a", "kind": "actionCard", "name": "Slash", "groupId": "g1", "effects": [{"id": "fx"}]},
                    {"id": "b", "kind": "actionCard", "name": "Stab", "groupId": "g1"},
                    {"id": "c", "kind": "actionCard", "name": "Dodge"},
                ],
                "actionCardGroups": [{"id": "g1", "name": "Melee", "sort": 0, "collapsed": False}],
            },
        )
    )


@pytest.mark.asyncio
async def test_group_dissolves_only_when_last_member_is_deleted(repository, groups, actor):
    assert await groups.delete_record(actor, "a") is True
    assert [g.id for g in groups.groups(actor)] == ["g1"]
    assert [r["id"] for r in groups.members(actor, "g1")] == ["b"]

    assert await groups.delete_record(actor, "b") is True
    assert groups.groups(actor) == []
    assert repository.stored(actor.id).get("actionCardGroups") == []


@pytest.mark.asyncio
async def test_delete_records_counts_only_existing(groups, actor):
    assert await groups.delete_records(actor, ["a", "missing", "c"]) == 2
    assert [r["id"] for r in actor.get("actionCards")] == ["b"]


@pytest.mark.asyncio
async def test_create_group_without_members_is_a_kept_placeholder(repository, groups, actor):
    group = await groups.create_group(actor)

    assert group.name == "Group 1"
    assert group.placeholder is True
    assert await groups.cleanup_empty_groups(actor) == []
    stored = repository.stored(actor.id).get("actionCardGroups")
    assert stored[-1] == {"id": group.id, "name": "Group 1", "sort": 100000, "collapsed": False, "placeholder": True}


@pytest.mark.asyncio
async def test_assigning_a_member_clears_placeholder(groups, actor):
    group = await groups.create_group(actor, "Defense")

    assert await groups.assign_to_group(actor, "c", group.id) is True
    assert groups.get_group(actor, group.id).placeholder is False

    assert await groups.assign_to_group(actor, "c", None) is True
    assert [g.id for g in groups.groups(actor)] == ["g1"]


@pytest.mark.asyncio
async def test_create_group_with_members_dissolves_emptied_former_group(groups, actor):
    group = await groups.create_group(actor, "All", ["a", "b"])

    assert [g.id for g in groups.groups(actor)] == [group.id]
    assert [r["id"] for r in groups.members(actor, group.id)] == ["a", "b"]
    assert group.placeholder is False


@pytest.mark.asyncio
async def test_create_group_with_unknown_member_raises(repository, groups, actor):
    with pytest.raises(RecordNotFoundError):
        await groups.create_group(actor, "Bad", ["zzz"])
    assert repository.writes == []


@pytest.mark.asyncio
async def test_next_group_name_follows_highest_number(groups, actor):
    await groups.create_group(actor)
    await groups.create_group(actor, "Group 7")
    assert next_group_name(groups.groups(actor)) == "Group 8"
    assert next_group_name([RecordGroup(name="Melee")]) == "Group 1"


@pytest.mark.asyncio
async def test_rename_and_collapse(groups, actor):
    assert await groups.rename_group(actor, "g1", "Close Combat")
    assert await groups.toggle_collapsed(actor, "g1")

    group = groups.get_group(actor, "g1")
    assert (group.name, group.collapsed) == ("Close Combat", True)


@pytest.mark.asyncio
async def test_delete_group_ungroups_members(groups, actor):
    assert await groups.delete_group(actor, "g1") is True
    assert groups.groups(actor) == []
    assert all(r.get("groupId") is None for r in actor.get("actionCards"))
    assert len(actor.get("actionCards")) == 3


@pytest.mark.asyncio
async def test_duplicate_group_copies_members_in_one_write(repository, groups, actor):
    duplicate = await groups.duplicate_group(actor, "g1")

    assert duplicate.name == "Melee (Copy)"
    assert len(repository.writes) == 1
    copies = groups.members(actor, duplicate.id)
    assert [r["name"] for r in copies] == ["Slash", "Stab"]
    assert {r["id"] for r in copies}.isdisjoint({"a", "b"})
    assert copies[0]["effects"][0]["id"] != "fx"
    assert len(groups.members(actor, "g1")) == 2


@pytest.mark.asyncio
async def test_failed_write_keeps_local_state(repository, groups, actor):
    repository.fail_writes = True

    assert await groups.create_group(actor, "Nope") is None
    assert await groups.delete_record(actor, "a") is False

    assert [g.id for g in groups.groups(actor)] == ["g1"]
    assert len(actor.get("actionCards")) == 3


def test_unknown_group_raises(groups, actor):
    with pytest.raises(EntityNotFoundError):
        groups.get_group(actor, "nope")


@pytest.mark.asyncio
async def test_batch_delete_dissolves_group_emptied_by_the_batch(repository, groups, actor):
    assert await groups.delete_records(actor, ["a", "b"]) == 2

    assert groups.groups(actor) == []
    stored = repository.stored(actor.id)
    assert stored.get("actionCardGroups") == []
    assert [r["id"] for r in stored.get("actionCards")] == ["c"]


@pytest.mark.asyncio
async def test_cleanup_sweeps_stale_empty_groups_and_persists(repository, groups, make_container):
    actor = repository.seed(
        make_container(
            kind="actor",
            name="Hero",
            data={
                "actionCards": [{"id": "a", "kind": "actionCard", "groupId": "g1"}],
                "actionCardGroups": [
                    {"id": "g1", "name": "Melee", "sort": 0, "collapsed": False},
                    {"id": "g2", "name": "Ranged", "sort": 100000, "collapsed": False},
                    {"id": "g3", "name": "Later", "sort": 200000, "collapsed": False, "placeholder": True},
                ],
            },
        )
    )

    assert await groups.cleanup_empty_groups(actor) == ["g2"]

    assert [g["id"] for g in repository.stored(actor.id).get("actionCardGroups")] == ["g1", "g3"]
    assert await groups.cleanup_empty_groups(actor) == []


@pytest.mark.asyncio
async def test_group_without_id_gets_one_stable_repaired_id(repository, groups, make_container):
    actor = repository.seed(
        make_container(
            kind="actor",
            name="Hero",
            data={
                "actionCards": [],
                "actionCardGroups": [{"name": "Unkeyed", "sort": 0, "collapsed": False, "placeholder": True}],
            },
        )
    )

    first = groups.groups(actor)[0].id
    assert groups.groups(actor)[0].id == first
    assert groups.get_group(actor, first).name == "Unkeyed"

    assert await groups.rename_group(actor, first, "Keyed")
    assert repository.stored(actor.id).get("actionCardGroups")[0]["id"] == first
