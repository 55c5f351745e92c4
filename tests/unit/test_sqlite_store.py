"""Tests specific to the SQLite backend's generated storage."""

from decimal import Decimal

import pytest

from entigen.stacks.base.backend import generate
from entigen.stacks.sqlite import SQLiteBackend


@pytest.fixture
def generated(stamps_model, load_generated):
    result = generate(stamps_model, SQLiteBackend())
    assert result.success, result.errors
    return load_generated(result)


@pytest.fixture
def db(generated):
    database = generated.database.StampsDatabase()
    yield database
    database.close()


class TestSchema:
    def test_one_table_per_entity(self, db):
        rows = db._connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY rowid"
        ).fetchall()
        assert [row[0] for row in rows] == ["Users", "Items", "Stamps", "Coins", "Profiles"]

    def test_dynamic_field_has_no_column(self, db):
        columns = [row[1] for row in db._connection.execute('PRAGMA table_info("Stamps")')]
        assert columns == ["ID", "rarity", "price"]

    def test_sub_entity_row_shares_root_id(self, db):
        stamp = db.create_stamp(title="Penny Black")
        item = db._connection.execute('SELECT "ItemKind" FROM "Items" WHERE "ID" = ?', (stamp.ID,))
        assert item.fetchone()[0] == int(stamp.ItemKind)
        row = db._connection.execute('SELECT "ID" FROM "Stamps"').fetchone()
        assert row[0] == stamp.ID


class TestSQLiteStore:
    def test_delete_stops_when_parent_row_missing(self, db):
        stamp = db.create_stamp(title="Penny Black")
        db._connection.execute('DELETE FROM "Items" WHERE "ID" = ?', (stamp.ID,))

        assert db.delete_stamp(stamp.ID) is False
        assert db.count_stamps() == 1

    def test_values_survive_reopen(self, generated, tmp_path):
        path = str(tmp_path / "stamps.db")
        m = generated.models

        db = generated.database.StampsDatabase(path)
        user = db.create_user(name="ann", age=41, active=True)
        stamp = db.create_stamp(
            title="Inverted Jenny", userID=user.ID, rarity=m.Rarity.Legendary,
            price=Decimal("1350000.00"),
        )
        coin = db.create_coin(title="Double Eagle", weight=33, image=b"\x00\xff")
        db.close()

        db = generated.database.StampsDatabase(path)
        try:
            assert db.find_item_by_id(stamp.ID) == stamp
            assert db.find_item_by_id(coin.ID) == coin
            assert db.find_user_by_id(user.ID) == user
            assert db.count_items() == 2
        finally:
            db.close()

    def test_identities_continue_after_reopen(self, generated, tmp_path):
        path = str(tmp_path / "stamps.db")

        db = generated.database.StampsDatabase(path)
        first = db.create_user(name="ann")
        db.delete_user(first.ID)
        db.close()

        db = generated.database.StampsDatabase(path)
        try:
            assert db.create_user(name="bob").ID > first.ID
        finally:
            db.close()
