"""Tests for the semantic model builder."""

import logging

import pytest

from entigen.core import ir
from entigen.core.compiler import compile_source, compile_tokens, model_name_for
from entigen.core.errors import SemanticError
from entigen.core.lexer import tokenize


class TestCompile:
    def test_idempotent(self, stamps_source):
        first = compile_source(stamps_source, "Stamps")
        second = compile_source(stamps_source, "Stamps")
        assert first == second
        assert [e.name for e in first.entities] == [e.name for e in second.entities]

    def test_compile_tokens(self, stamps_source):
        model = compile_tokens(tokenize(stamps_source), "Stamps")
        assert model == compile_source(stamps_source, "Stamps")

    def test_declaration_order(self, stamps_model):
        assert [e.name for e in stamps_model.entities] == [
            "User", "Item", "Stamp", "Coin", "Profile",
        ]
        assert [e.name for e in stamps_model.enums] == ["Rarity", "ItemKind"]

    def test_model_name_for(self, tmp_path):
        assert model_name_for(tmp_path / "stamps.model") == "Stamps"


class TestInheritance:
    def test_discriminator_enum(self):
        model = compile_source("entity P { } entity C1 : P { } entity C2 : P { }")
        kind = model.get_enum("PKind")
        assert kind.values == ["C1", "C2"]
        assert [m.value for m in kind.members] == [0, 1]
        assert kind.discriminator_for == "P"
        assert model.get_entity("P").is_abstract
        assert model.get_entity("P").kind_enum == "PKind"

    def test_concrete_entities(self, stamps_model):
        assert [e.name for e in stamps_model.concrete_entities] == [
            "User", "Stamp", "Coin", "Profile",
        ]
        assert [e.name for e in stamps_model.abstract_entities] == ["Item"]

    def test_sub_entity_discriminator(self, stamps_model):
        coin = stamps_model.get_entity("Coin")
        assert coin.is_sub_entity
        assert coin.discriminator == "Coin"
        assert coin.discriminator_value == 1

    def test_synthetic_discriminator_field_first(self, stamps_model):
        item = stamps_model.get_entity("Item")
        first = item.fields[0]
        assert first.name == "ItemKind"
        assert first.synthetic
        assert first.is_internal
        assert first.is_enum
        assert item.discriminator_field is first
        assert [f.name for f in item.fields[1:]] == ["title", "user"]

    def test_declarations_left_untouched(self):
        from entigen.core.dsl_parser_impl import parse_dsl
        from entigen.core.linker import build_model

        decls = parse_dsl("entity P { x: String; } entity C : P { }")
        build_model("M", decls)
        assert [f.name for f in decls.entities["P"].fields] == ["x"]

    def test_all_fields_parent_first(self, stamps_model):
        stamp = stamps_model.get_entity("Stamp")
        names = [f.name for f in stamps_model.all_fields(stamp)]
        assert names == ["ItemKind", "title", "user", "rarity", "price", "views"]

    def test_stored_and_constructor_fields(self, stamps_model):
        stamp = stamps_model.get_entity("Stamp")
        stored = [f.decl.name for f in stamps_model.stored_fields(stamp)]
        assert stored == ["ItemKind", "title", "userID", "rarity", "price"]
        params = [f.decl.name for f in stamps_model.constructor_fields(stamp)]
        assert params == ["title", "userID", "rarity", "price"]

    def test_editable_fields_include_inherited(self, stamps_model):
        stamp = stamps_model.get_entity("Stamp")
        assert [f.name for f in stamps_model.editable_fields(stamp)] == [
            "title", "rarity", "price",
        ]

    def test_three_levels(self):
        model = compile_source(
            """
            entity A { a: String; }
            entity B : A { b: String; }
            entity C : B { c: String; }
            """
        )
        c = model.get_entity("C")
        assert [e.name for e in model.ancestors(c)] == ["B", "A"]
        assert model.root_of(c).name == "A"
        assert [f.name for f in model.all_fields(c)] == ["AKind", "a", "BKind", "b", "c"]
        assert model.get_entity("B").is_abstract
        assert model.get_entity("B").is_sub_entity

    def test_forward_parent(self):
        model = compile_source("entity Stamp : Item { } entity Item { }")
        assert model.get_entity("Item").sub_entities == ["Stamp"]


class TestReferences:
    def test_reference_field_decl(self):
        model = compile_source("entity Owner { } entity Car { owner: Owner; }")
        field = model.get_entity("Car").get_field("owner")
        assert field.is_reference
        assert field.decl == ir.FieldDecl(name="ownerID", type="UInt64")

    def test_reference_index(self):
        model = compile_source("entity Owner { } entity Car { owner: Owner; }")
        refs = model.get_entity("Owner").references
        assert [(r.source, r.field, r.decl_name) for r in refs] == [("Car", "owner", "ownerID")]
        assert refs[0].navigable
        assert model.aggregates_of(model.get_entity("Owner")) == refs

    def test_mismatched_name_is_not_navigable(self, caplog):
        with caplog.at_level(logging.WARNING, logger="entigen.core.linker"):
            model = compile_source("entity User { } entity X { owner: User; }")
        user = model.get_entity("User")
        field = model.get_entity("X").get_field("owner")
        assert field.decl == ir.FieldDecl(name="ownerID", type="UInt64")
        assert [r.source for r in user.references] == ["X"]
        assert not user.references[0].navigable
        assert model.aggregates_of(user) == []
        assert "owner references User" in caplog.text

    def test_dynamic_reference_not_indexed(self):
        model = compile_source(
            "entity User { } entity Post { user: User [Dynamic]; } entity Like { user: User; }"
        )
        user = model.get_entity("User")
        assert model.get_entity("Post").get_field("user").is_reference
        assert [r.source for r in model.references_to(user)] == ["Like"]
        assert [r.accessor for r in model.aggregates_of(user)] == ["GetLikesOfUser"]

    def test_unique_accessor_is_singular(self, stamps_model):
        user = stamps_model.get_entity("User")
        accessors = {r.source: r.accessor for r in user.references}
        assert accessors == {"Item": "GetItemsOfUser", "Profile": "GetProfileOfUser"}

    def test_plural_accessor(self):
        model = compile_source("entity Category { } entity Entry { category: Category; }")
        assert model.get_entity("Category").references[0].accessor == "GetEntriesOfCategory"

    def test_scalar_names_normalised(self):
        model = compile_source("entity A { flag: Bool; blob: Bytes; amount: Decimal; }")
        decls = [f.decl.type for f in model.get_entity("A").fields]
        assert decls == ["bool", "bytes", "Decimal"]

    def test_searchable_fields(self, stamps_model):
        assert stamps_model.get_entity("User").searchable_fields == ["ID", "name"]
        assert stamps_model.get_entity("Stamp").searchable_fields == ["ID", "rarity"]


class TestValidation:
    def test_cycle_rejected(self):
        with pytest.raises(SemanticError, match="cyclic inheritance"):
            compile_source("entity A : B {} entity B : A {}")

    def test_self_parent_rejected(self):
        with pytest.raises(SemanticError, match="cyclic inheritance"):
            compile_source("entity A : A {}")

    def test_long_cycle_rejected(self):
        with pytest.raises(SemanticError, match="cyclic inheritance"):
            compile_source("entity A : C {} entity B : A {} entity C : B {}")

    def test_unknown_parent(self):
        with pytest.raises(SemanticError, match="unknown parent entity Ghost"):
            compile_source("entity A : Ghost {}")

    def test_enum_parent(self):
        with pytest.raises(SemanticError, match="is not an entity"):
            compile_source("enum Color { Red } entity A : Color {}")

    def test_duplicate_field(self):
        with pytest.raises(SemanticError) as exc:
            compile_source("entity A {\n x: String;\n x: UInt32;\n}")
        assert str(exc.value) == "line 3: duplicate field x in entity A"

    def test_duplicate_inherited_field(self):
        with pytest.raises(SemanticError, match="duplicate field name in entity C"):
            compile_source("entity P { name: String; } entity C : P { name: String; }")

    def test_field_clashing_with_discriminator(self):
        with pytest.raises(SemanticError, match="duplicate field PKind"):
            compile_source("enum PKind { } entity P { PKind: PKind; } entity C : P { }")

    def test_output_name_clash(self):
        with pytest.raises(SemanticError, match="clashes with output field ownerID"):
            compile_source("entity Owner { } entity A { owner: Owner; ownerID: UInt64; }")

    def test_implicit_id_clash(self):
        with pytest.raises(SemanticError, match="clashes with output field ID"):
            compile_source("entity A { ID: UInt64; }")
