from __future__ import annotations

import uuid


def _create(client, name):
    resp = client.post("/chests", json={"name": name})
    assert resp.status_code == 201
    return resp.json()


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/api/health").json() == {"ok": True, "api": True}


def test_create_and_list(client):
    created = _create(client, "  Base  ")
    assert created["name"] == "Base"
    assert created["items"] == []
    assert "_id" in created and "createdAt" in created

    listed = client.get("/chests").json()
    assert listed[0]["_id"] == created["_id"]
    assert listed[0]["totalQuantity"] == 0


def test_create_errors(client):
    assert client.post("/chests", json={"name": "   "}).status_code == 400
    assert client.post("/chests", json={"name": "x" * 51}).status_code == 400

    _create(client, "Depot")
    resp = client.post("/chests", json={"name": "DEPOT"})
    assert resp.status_code == 409
    assert resp.json() == {"error": "A chest with this name already exists"}


def test_routes_are_mounted_under_api_prefix(client):
    chest = _create(client, "Base")
    resp = client.get(f"/api/chests/{chest['_id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Base"


def test_bad_and_unknown_chest_ids(client):
    assert client.get("/chests/not-a-uuid").status_code == 400
    assert client.get("/chests/undefined").status_code == 400
    resp = client.get(f"/chests/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Chest not found"


def test_move_deposit_and_withdraw(client, make_item):
    make_item("Spice", catalog_id=1)
    chest = _create(client, "Base")
    url = f"/chests/{chest['_id']}/move"

    resp = client.post(url, json={"itemId": 1, "inc": 5})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "oldQuantity": 0, "newQuantity": 5}

    resp = client.post(url, json={"name": "spice", "inc": -2})
    assert resp.json()["newQuantity"] == 3

    items = client.get(f"/chests/{chest['_id']}/items").json()
    assert items["name"] == "Base"
    assert items["items"][0]["itemId"] == 1
    assert items["items"][0]["quantity"] == 3
    assert items["items"][0]["item"]["nom"] == "Spice"


def test_move_errors(client, make_item):
    make_item("Spice", catalog_id=1)
    chest = _create(client, "Base")
    url = f"/chests/{chest['_id']}/move"

    assert client.post(url, json={"inc": 1}).status_code == 400
    assert client.post(url, json={"itemId": 1, "inc": 0}).status_code == 400
    assert client.post(url, json={"itemId": 1, "inc": 1.5}).status_code == 400
    assert client.post(url, json={"itemId": 1}).status_code == 400

    # unknown item is a 400 here
    resp = client.post(url, json={"itemId": 99, "inc": 1})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Item not found"

    resp = client.post(url, json={"itemId": 1, "inc": -1})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Insufficient quantity"

    resp = client.post(f"/chests/{uuid.uuid4()}/move", json={"itemId": 1, "inc": 1})
    assert resp.status_code == 404


def test_move_out_of_range_values(client, make_item):
    make_item("Spice", catalog_id=1)
    chest = _create(client, "Base")
    url = f"/chests/{chest['_id']}/move"

    resp = client.post(url, json={"itemId": 1, "inc": 3000000000})
    assert resp.status_code == 400
    assert resp.json() == {"error": "inc out of range"}

    assert client.post(url, json={"itemId": 1, "inc": "9007199254740993"}).status_code == 400
    assert client.post(url, json={"itemId": "9007199254740993", "inc": 1}).status_code == 400

    assert client.post(url, json={"itemId": 1, "inc": 2147483647}).status_code == 200
    resp = client.post(url, json={"itemId": 1, "inc": 1})
    assert resp.status_code == 400
    assert client.get(f"/chests/{chest['_id']}/items").json()["items"][0]["quantity"] == 2147483647


def test_rename_routes(client):
    chest = _create(client, "Old")
    _create(client, "Taken")

    resp = client.patch(f"/chests/{chest['_id']}/rename", json={"newName": "New"})
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.json()["chest"]["name"] == "New"

    resp = client.patch(f"/chests/{chest['_id']}", json={"name": "Newer"})
    assert resp.json()["name"] == "Newer"

    assert client.patch(f"/chests/{chest['_id']}/rename", json={"newName": "taken"}).status_code == 409
    assert client.patch(f"/chests/{chest['_id']}/rename", json={"newName": ""}).status_code == 400


def test_delete_flow(client, make_item):
    make_item("Spice", catalog_id=1)
    source = _create(client, "Source")
    target = _create(client, "Target")
    client.post(f"/chests/{source['_id']}/move", json={"itemId": 1, "inc": 4})
    client.post(f"/chests/{target['_id']}/move", json={"itemId": 1, "inc": 1})

    resp = client.delete(f"/chests/{source['_id']}")
    assert resp.status_code == 400
    body = resp.json()
    assert body["requiresMigration"] is True
    assert body["itemCount"] == 1
    assert body["availableChests"] == [{"_id": target["_id"], "name": "Target"}]

    resp = client.request("DELETE", f"/chests/{source['_id']}", json={"migrateTo": target["_id"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["deleted"]["name"] == "Source"
    assert body["migratedTo"] == target["_id"]
    assert body["migration"]["itemCount"] == 4
    assert body["migration"]["targetChest"]["name"] == "Target"

    assert client.get(f"/chests/{source['_id']}").status_code == 404
    items = client.get(f"/chests/{target['_id']}/items").json()["items"]
    assert [(i["itemId"], i["quantity"]) for i in items] == [(1, 5)]


def test_delete_to_itself_or_missing_target(client):
    chest = _create(client, "Base")
    chest_id = chest["_id"]

    assert client.request("DELETE", f"/chests/{chest_id}", json={"migrateTo": chest_id}).status_code == 400
    assert client.request("DELETE", f"/chests/{chest_id}", json={"migrateTo": "bogus"}).status_code == 400

    # empty chest: deleted whatever the target
    resp = client.request("DELETE", f"/chests/{chest_id}", json={"confirmed": True})
    assert resp.status_code == 200
    assert resp.json()["migration"] is None


def test_aggregate(client, make_item):
    make_item("Spice", catalog_id=1)
    make_item("Water", catalog_id=2)
    a = _create(client, "A")
    b = _create(client, "B")
    client.post(f"/chests/{a['_id']}/move", json={"itemId": 1, "inc": 2})
    client.post(f"/chests/{b['_id']}/move", json={"itemId": 1, "inc": 2})
    client.post(f"/chests/{b['_id']}/move", json={"itemId": 2, "inc": 1})

    body = client.get("/chests/aggregate").json()
    assert body["totalItems"] == 2
    assert [(i["itemId"], i["quantity"]) for i in body["items"]] == [(1, 4), (2, 1)]
    assert body["items"][0]["item"]["nom"] == "Spice"


def test_chests_require_authentication(anon_client):
    resp = anon_client.get("/chests")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication required"}
