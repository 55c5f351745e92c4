"""Tests for naming helpers."""

import pytest

from entigen.core.strings import camel_to_snake, cap_lower, cap_upper, pluralize


class TestPluralize:
    @pytest.mark.parametrize(
        "word,plural",
        [
            ("Stamp", "Stamps"),
            ("Category", "Categories"),
            ("Key", "Keys"),
            ("Box", "Boxes"),
            ("Match", "Matches"),
            ("Person", "People"),
            ("Status", "Statuses"),
            ("Leaf", "Leaves"),
            ("Knife", "Knives"),
            ("Hero", "Heroes"),
            ("Photo", "Photos"),
            ("StampCategory", "StampCategories"),
            ("ShippingAddress", "ShippingAddresses"),
            ("", ""),
        ],
    )
    def test_rules(self, word, plural):
        assert pluralize(word) == plural

    def test_lowercase_irregular(self):
        assert pluralize("child") == "children"


class TestCase:
    def test_cap_lower(self):
        assert cap_lower("UserID") == "userID"
        assert cap_lower("") == ""

    def test_cap_upper(self):
        assert cap_upper("stamps") == "Stamps"
        assert cap_upper("") == ""

    @pytest.mark.parametrize(
        "name,snake",
        [
            ("GetStampsOfUser", "get_stamps_of_user"),
            ("ownerID", "owner_id"),
            ("ID", "id"),
            ("StampCategory", "stamp_category"),
            ("ItemKind", "item_kind"),
        ],
    )
    def test_camel_to_snake(self, name, snake):
        assert camel_to_snake(name) == snake
