"""Tests specific to the in-memory backend's generated storage."""

import pytest

from entigen.stacks.base.backend import generate
from entigen.stacks.memory import MemoryBackend


@pytest.fixture
def db(stamps_model, load_generated):
    result = generate(stamps_model, MemoryBackend())
    assert result.success, result.errors
    return load_generated(result).database.StampsDatabase()


class TestMemoryStore:
    def test_identities_shared_across_entities(self, db):
        user = db.create_user(name="ann")
        stamp = db.create_stamp(title="Penny Black", userID=user.ID)
        assert (user.ID, stamp.ID) == (1, 2)

    def test_sub_entity_in_every_level(self, db):
        stamp = db.create_stamp(title="Penny Black")
        assert db._items[stamp.ID] is stamp
        assert db._stamps[stamp.ID] is stamp
        assert db.find_item_by_id(stamp.ID) is stamp

    def test_delete_stops_when_parent_row_missing(self, db):
        stamp = db.create_stamp(title="Penny Black")
        del db._items[stamp.ID]

        assert db.delete_stamp(stamp.ID) is False
        assert db.count_stamps() == 1

    def test_edit_mutates_stored_instance(self, db):
        user = db.create_user(name="ann")
        assert db.edit_user(user, "age", "7") is True
        assert db._users[user.ID].age == 7

    def test_instances_are_independent(self, db):
        first = db.create_user(name="ann")
        second = db.create_user(name="bob")
        first.name = "changed"
        assert second.name == "bob"
