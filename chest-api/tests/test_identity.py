from __future__ import annotations

import uuid

import pytest

from chest_api.core.errors import InvalidReference, ItemNotFound
from chest_api.models import ChestEntry
from chest_api.services.identity import (
    CatalogKey,
    CatalogRef,
    DatabaseKey,
    DatabaseRef,
    NameRef,
    canonical_key,
    entry_key,
    find_entry,
    matches,
    parse_integer,
    parse_item_ref,
    resolve,
)


def test_parse_prefers_catalog_id_over_other_fields():
    ref = parse_item_ref(item_id=12, item_mongo_id=str(uuid.uuid4()), name="Sword")
    assert ref == CatalogRef(12)


def test_parse_accepts_numeric_strings_and_integral_floats():
    assert parse_item_ref(item_id="42") == CatalogRef(42)
    assert parse_item_ref(item_id=7.0) == CatalogRef(7)


def test_parse_integer_keeps_large_values_exact():
    assert parse_integer("9007199254740993") == 9007199254740993
    assert parse_integer(" +12 ") == 12
    assert parse_integer("4.0") == 4
    assert parse_integer(float("inf")) is None
    assert parse_integer("1e400") is None
    assert parse_item_ref(item_id="2147483647") == CatalogRef(2147483647)


def test_parse_database_id_then_name():
    oid = uuid.uuid4()
    assert parse_item_ref(item_mongo_id=str(oid), name="Sword") == DatabaseRef(oid)
    assert parse_item_ref(name="  Sword ") == NameRef("Sword")


@pytest.mark.parametrize("kwargs", [
    {},
    {"item_id": "", "item_mongo_id": " ", "name": ""},
    {"item_id": "abc"},
    {"item_id": 1.5},
    {"item_id": True},
    {"item_mongo_id": "not-a-uuid"},
    {"item_id": "9007199254740993"},
    {"item_id": 2**31},
])
def test_parse_rejects_missing_or_malformed(kwargs):
    with pytest.raises(InvalidReference):
        parse_item_ref(**kwargs)


def test_canonical_key_prefers_catalog_id(make_item):
    with_num = make_item("Knife", catalog_id=5)
    without_num = make_item("Rock")
    assert canonical_key(with_num) == CatalogKey(5)
    assert canonical_key(without_num) == DatabaseKey(without_num.id)


def test_every_reference_form_resolves_to_the_same_key(db, make_item):
    item = make_item("Plasteel Plate", catalog_id=300)

    keys = {
        resolve(db, CatalogRef(300))[1],
        resolve(db, DatabaseRef(item.id))[1],
        resolve(db, NameRef("plasteel plate"))[1],
    }
    assert keys == {CatalogKey(300)}


def test_resolve_unknown_item(db):
    with pytest.raises(ItemNotFound):
        resolve(db, CatalogRef(999))
    with pytest.raises(ItemNotFound):
        resolve(db, NameRef("Nothing"))


def test_find_entry_matches_on_key_only():
    oid = uuid.uuid4()
    entries = [
        ChestEntry(catalog_id=1, quantity=3),
        ChestEntry(item_id=oid, quantity=4),
    ]
    assert find_entry(entries, CatalogKey(1)).quantity == 3
    assert find_entry(entries, DatabaseKey(oid)).quantity == 4
    assert find_entry(entries, CatalogKey(2)) is None
    assert entry_key(entries[1]) == DatabaseKey(oid)
    assert str(CatalogKey(1)) == "1"
    assert matches(entries[0], CatalogKey(1))
    assert not matches(entries[0], DatabaseKey(oid))
