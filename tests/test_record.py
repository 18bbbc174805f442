"""Tests for record identity, persistence state and cache keys."""

from __future__ import annotations

import datetime as dt

import pytest

from staticrecord import Record


class TestEquality:
    def test_same_type_same_id_is_equal_and_hashes_alike(self, Country):
        a = Country(id=1, name="a")
        b = Country(id=1, name="b")
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_ids_differ(self, Country):
        assert Country(id=1) != Country(id=2)

    def test_different_types_never_equal(self, Country, Empty):
        assert Country(id=1) != Empty(id=1)

    def test_null_id_is_never_equal(self, Country):
        a = Country(name="x")
        assert a != Country(name="x")
        assert not (a == a)

    def test_subclass_instance_is_not_equal(self, Country):
        class Province(Country):
            pass

        assert Country(id=1) != Province(id=1)


class TestAttributes:
    def test_item_access(self, Country):
        rec = Country.find(3)
        assert rec["code"] == "FR"
        rec["code"] = "FX"
        assert rec.code == "FX"
        assert rec.read_attribute("code") == "FX"

    def test_attributes_snapshot_is_read_only(self, Country):
        attrs = Country.find(1).attributes
        with pytest.raises(TypeError):
            attrs["name"] = "nope"

    def test_id_false_reads_as_none(self, Empty):
        assert Empty(id=False).id is None
        assert Empty(id=0).id == 0

    def test_to_param(self, Country):
        assert Country.find(2).to_param() == "2"
        assert Country(name="x").to_param() is None

    def test_always_valid_and_read_only(self, Country):
        rec = Country.find(1)
        assert rec.is_valid() is True
        assert rec.is_readonly() is True
        assert rec.is_destroyed() is False
        assert rec.is_marked_for_destruction() is False
        assert rec.errors["name"] == []
        assert rec.errors.full_messages() == []

    def test_repr(self, Country):
        assert repr(Country.find(3)).startswith("<Country id=3 name='France'")


class TestPersistenceState:
    def test_loaded_record(self, Country):
        rec = Country.find(1)
        assert rec.is_new_record() is False
        assert rec.is_persisted() is True

    def test_built_record(self, Country):
        rec = Country(name="Spain")
        assert rec.is_new_record() is True
        assert rec.is_persisted() is False
        assert rec.save() is True
        assert rec.is_new_record() is False
        assert rec.is_persisted() is True
        assert rec.id == 5

    def test_copy_with_stored_id_counts_as_stored(self, Country):
        twin = Country(id=1, name="Twin")
        assert twin.is_persisted() is True
        assert twin.is_new_record() is False

    def test_save_of_existing_id_does_not_insert(self, Country):
        assert Country(id=2, name="Other").save_or_raise() is True
        assert Country.count() == 4


class TestCacheKey:
    def test_new_record(self, Country):
        assert Country(name="x").cache_key() == "countries/new"

    def test_stored_record(self, Country):
        assert Country.find(1).cache_key() == "countries/1"

    def test_stored_record_with_timestamp(self, Country):
        assert Country.find(4).cache_key() == "countries/4-20240501123000"

    def test_custom_timestamp_attribute_and_format(self):
        class Document(Record, timestamp_attribute="modified_at", timestamp_format="%Y%m%d"):
            data = [{"id": 7, "modified_at": dt.date(2023, 1, 2)}]

        assert Document.find(7).cache_key() == "documents/7-20230102"

    def test_non_datetime_timestamp_is_used_verbatim(self, Empty):
        Empty.load([{"id": 1, "updated_at": "v3"}])
        assert Empty.find(1).cache_key() == "empties/1-v3"

    def test_type_cache_key_override(self):
        class Currency(Record, cache_key="money"):
            data = [{"id": 1, "code": "EUR"}]

        assert Currency.model_cache_key() == "money"
        assert Currency.find(1).cache_key() == "money/1"
