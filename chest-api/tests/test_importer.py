from __future__ import annotations

import json

import pytest

from chest_api.core.errors import InvalidInput, NotFound
from chest_api.models import Item
from chest_api.services.importer import import_items, import_items_file

ITEMS = [
    {
        "id": 1,
        "nom": "Spice Melange",
        "categorie": "Resources",
        "sous_categorie": "Raw",
        "tier": 2.0,
        "unique": 0,
        "statistiques": None,
        "url_fiche": "https://example.org/spice",
    },
    {"nom": "Old Map", "categorie": "Misc"},
    {"description": "no id, no name"},
    "garbage",
]


def test_import_inserts_and_maps_fields(db):
    result = import_items(db, ITEMS)

    assert (result.inserted, result.updated, result.skipped) == (2, 0, 2)
    spice = db.query(Item).filter(Item.catalog_id == 1).one()
    assert spice.sub_category == "Raw"
    assert spice.tier == "2"
    assert spice.is_unique is False
    assert spice.stats == []
    assert spice.sheet_url == "https://example.org/spice"


def test_import_upserts_by_catalog_id_then_name(db):
    import_items(db, ITEMS)

    result = import_items(db, [
        {"id": 1, "nom": "Spice Melange", "quantite": 4},
        {"nom": "old map", "categorie": "Maps"},
    ])

    assert (result.inserted, result.updated) == (0, 2)
    assert db.query(Item).count() == 2
    assert db.query(Item).filter(Item.catalog_id == 1).one().quantity == 4
    assert db.query(Item).filter(Item.catalog_id.is_(None)).one().category == "Maps"


def test_import_file(db, tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps({"items": ITEMS}), encoding="utf-8")

    assert import_items_file(db, path).inserted == 2


def test_import_file_errors(db, tmp_path):
    with pytest.raises(NotFound):
        import_items_file(db, tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidInput):
        import_items_file(db, bad)


def test_import_route(client, tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps({"items": ITEMS[:2]}), encoding="utf-8")

    resp = client.post("/import", json={"path": str(path)})
    assert resp.status_code == 200
    assert resp.json() == {"inserted": 2, "updated": 0, "skipped": 0}

    assert client.post("/import", json={"path": str(tmp_path / "nope.json")}).status_code == 404
