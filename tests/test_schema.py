"""Tests for field declaration, accessor generation and scopes."""

from __future__ import annotations

import pydantic
import pytest

from staticrecord import Record, ReservedFieldError
from staticrecord.core.schema import FieldAttribute, is_present


class TestFieldDeclaration:
    def test_declared_field_gets_getter_setter_and_interrogator(self, Empty):
        Empty.field("name")
        rec = Empty(name="Ada")
        assert rec.name == "Ada"
        rec.name = "Grace"
        assert rec["name"] == "Grace"
        assert rec.has_name() is True
        assert isinstance(vars(Empty)["name"], FieldAttribute)

    def test_default_used_when_attribute_missing_or_none(self, Empty):
        Empty.field("active", default=True)
        assert Empty().active is True
        assert Empty(active=None).active is True
        assert Empty(active=False).active is False

    def test_defaults_show_up_in_attributes(self, Empty):
        Empty.fields("name", "kind", default="unknown")
        assert dict(Empty(name="x").attributes) == {"name": "x", "kind": "unknown"}

    def test_field_names_keep_declaration_order(self, Empty):
        Empty.fields("b", "a")
        Empty.field("c")
        assert Empty.field_names() == ["b", "a", "c"]
        assert Empty.column_names() == ["id", "b", "a", "c"]

    def test_redeclaring_is_idempotent(self, Empty):
        Empty.field("name")
        Empty.field("name")
        assert Empty.field_names() == ["name"]

    def test_redeclaring_with_default_updates_default(self, Empty):
        Empty.field("size")
        Empty.field("size", default=3)
        assert Empty().size == 3

    def test_attributes_is_reserved(self, Empty):
        with pytest.raises(ReservedFieldError):
            Empty.field("attributes")
        assert Empty.field_names() == []

    def test_reserved_key_in_rows_fails_load(self, Empty):
        with pytest.raises(ReservedFieldError):
            Empty.load([{"id": 1, "attributes": {}}])

    def test_extra_reserved_fields_from_config(self):
        class Thing(Record, reserved_fields={"attributes", "type"}):
            pass

        with pytest.raises(ReservedFieldError):
            Thing.field("type")

    def test_unknown_config_keyword_is_rejected(self):
        with pytest.raises(pydantic.ValidationError):

            class Bad(Record, colour="red"):
                pass

    def test_primary_key_is_fixed(self, Country):
        assert Country.primary_key == "id"
        with pytest.raises(pydantic.ValidationError):

            class Code(Record, primary_key="code"):
                pass


class TestHandWrittenAccessors:
    def test_property_is_not_overridden(self):
        class Country(Record):
            @property
            def name(self):
                return self["name"].upper()

        Country.load([{"id": 1, "name": "france"}])
        assert Country.find(1).name == "FRANCE"
        assert Country.pluck("name") == ["FRANCE"]
        assert Country.find(1)["name"] == "france"

    def test_plain_method_is_not_overridden(self):
        class Country(Record):
            def code(self):
                return "XX"

        Country.load([{"id": 1, "code": "FR"}])
        assert Country.find(1).code() == "XX"
        assert Country.pluck("code") == ["XX"]

    def test_property_setter_runs_on_construction(self):
        class Temperature(Record):
            @property
            def celsius(self):
                return self._attributes.get("celsius")

            @celsius.setter
            def celsius(self, value):
                self._attributes["celsius"] = value
                self._attributes["fahrenheit"] = value * 9 / 5 + 32

        Temperature.field("fahrenheit")
        assert Temperature(celsius=100).fahrenheit == 212

    def test_interrogator_not_overridden(self, Empty):
        Empty.has_name = lambda self: "custom"
        Empty.field("name")
        assert Empty(name="").has_name() == "custom"


class TestAutoDetect:
    def test_load_declares_union_of_keys_in_first_seen_order(self, Empty):
        Empty.load([{"id": 1, "name": "a"}, {"code": "b", "name": "c"}, {"extra": 1}])
        assert Empty.field_names() == ["name", "code", "extra"]

    def test_missing_keys_read_as_none(self, Empty):
        Empty.load([{"id": 1, "name": "a"}, {"id": 2, "code": "b"}])
        assert Empty.find(1).code is None
        assert Empty.find(2).has_name() is False

    def test_undeclared_attribute_is_rejected(self, Country):
        with pytest.raises(AttributeError):
            Country(colour="blue")


class TestScopes:
    def test_scope_receives_relation_and_args(self, Country):
        Country.scope("on", lambda rel, continent: rel.where(continent=continent))
        assert Country.on("Europe").pluck("name") == ["France", "Germany"]

    def test_scope_returning_relation_is_chainable(self, Country):
        Country.scope("european", lambda rel: rel.where(continent="Europe"))
        assert Country.european().order("-name").first().name == "Germany"

    def test_scope_result_is_returned_unchanged(self, Country):
        Country.scope("names", lambda rel: [c.name for c in rel])
        assert Country.names() == ["United States", "Canada", "France", "Germany"]

    def test_scope_sharing_a_field_name(self, Country):
        Country.scope("code", lambda rel, code: rel.find_by(code=code))
        assert Country.code("FR").id == 3
        assert Country.find(3).code == "FR"

    def test_scope_body_must_be_callable(self, Country):
        with pytest.raises(TypeError):
            Country.scope("broken", "where active")

    @pytest.mark.parametrize("name", ["first", "where", "save", "transaction", "label"])
    def test_scope_cannot_shadow_existing_attribute(self, Country, name):
        Country.label = property(lambda self: self.code)
        with pytest.raises(ValueError):
            Country.scope(name, lambda rel: rel.where(continent="Europe"))
        assert name not in Country._context.schema.scopes
        assert Country.first().id == 1

    def test_scope_is_visible_to_reflection(self, Country):
        Country.scope("european", lambda rel: rel.where(continent="Europe"))
        assert Country.responds_to("european")
        assert "european" in dir(Country)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, False),
        (False, False),
        ("", False),
        ("   ", False),
        ([], False),
        ({}, False),
        (0, True),
        ("x", True),
        (True, True),
        ([0], True),
    ],
)
def test_is_present(value, expected):
    assert is_present(value) is expected
