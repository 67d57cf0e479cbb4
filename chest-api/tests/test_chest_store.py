from __future__ import annotations

import uuid

import pytest

from chest_api.core.errors import ChestNotFound, DuplicateName, InvalidName
from chest_api.models import ActivityLog
from chest_api.services import chest_store


def test_create_trims_name(db):
    chest = chest_store.create(db, "  Base Alpha  ")
    assert chest.name == "Base Alpha"
    assert chest.entries == []


@pytest.mark.parametrize("raw", [None, "", "   ", "x" * 51, 12])
def test_create_rejects_bad_names(db, raw):
    with pytest.raises(InvalidName):
        chest_store.create(db, raw)


def test_name_of_fifty_characters_is_accepted(db):
    assert chest_store.create(db, "y" * 50).name == "y" * 50


def test_names_are_unique_case_insensitively(db):
    chest_store.create(db, "Depot")
    with pytest.raises(DuplicateName):
        chest_store.create(db, "depot")


def test_rename(db, user):
    chest = chest_store.create(db, "Old")
    other = chest_store.create(db, "Other")

    renamed = chest_store.rename(db, chest.id, " New ", actor=user)
    assert renamed.name == "New"

    # own name with another case is not a conflict
    assert chest_store.rename(db, chest.id, "NEW").name == "NEW"

    with pytest.raises(DuplicateName):
        chest_store.rename(db, chest.id, other.name.upper())
    db.expire_all()
    assert chest_store.get(db, chest.id).name == "NEW"
    assert chest_store.get(db, other.id).name == "Other"

    log = db.query(ActivityLog).filter(ActivityLog.action == "RENAME_CHEST").one()
    assert log.chest_name == "New"
    assert log.user_id == user.id


def test_rename_unknown_chest(db):
    with pytest.raises(ChestNotFound):
        chest_store.rename(db, uuid.uuid4(), "Whatever")


def test_summaries_count_entries_and_quantities(db, make_chest):
    oid = uuid.uuid4()
    make_chest("A", (1, None, 5), (None, oid, 2))
    make_chest("B")

    summaries = {s.name: s for s in chest_store.list_summaries(db)}
    assert summaries["A"].entries == 2
    assert summaries["A"].total_quantity == 7
    assert summaries["B"].entries == 0
    assert summaries["B"].total_quantity == 0


def test_get_items_joins_catalog_and_keeps_orphans(db, make_item, make_chest):
    sword = make_item("Sword", catalog_id=10)
    chest = make_chest("A", (10, None, 1), (None, uuid.uuid4(), 3))

    _, lines = chest_store.get_items(db, chest.id)
    assert len(lines) == 2
    assert lines[0].item.id == sword.id
    assert lines[1].item is None
    assert lines[1].quantity == 3
