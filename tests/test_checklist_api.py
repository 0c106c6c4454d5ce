"""
Checklist endpoints: list by facility, create, update-field.
"""

import pytest

from cleaning_checklist.checklist.fields import STATUS_COLUMNS
from cleaning_checklist.db import Database


def _create(client, headers, **body):
    r = client.post("/api/checklist", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


class TestCreate:
    def test_defaults(self, client, auth_headers):
        item = _create(client, auth_headers, name="Room 204")
        assert item["name"] == "Room 204"
        assert item["facility"] == "galleria"
        assert isinstance(item["id"], int)
        for col in STATUS_COLUMNS:
            assert item[col] is False, col

    def test_explicit_facility(self, client, auth_headers):
        item = _create(client, auth_headers, name="Room 1", facility="terrace")
        assert item["facility"] == "terrace"

    def test_missing_name(self, client, auth_headers):
        r = client.post("/api/checklist", json={"facility": "terrace"}, headers=auth_headers)
        assert r.status_code == 400
        assert r.json() == {"message": "Name is required"}

    def test_requires_auth(self, client):
        r = client.post("/api/checklist", json={"name": "Room 1"})
        assert r.status_code == 401


class TestList:
    def test_round_trip(self, client, auth_headers):
        item = _create(client, auth_headers, name="Room 7", facility="terrace")
        r = client.get("/api/checklist", params={"facility": "terrace"}, headers=auth_headers)
        assert r.status_code == 200
        assert item in r.json()

    def test_defaults_to_galleria(self, client, auth_headers):
        g = _create(client, auth_headers, name="G1")
        t = _create(client, auth_headers, name="T1", facility="terrace")

        items = client.get("/api/checklist", headers=auth_headers).json()
        ids = [i["id"] for i in items]
        assert g["id"] in ids
        assert t["id"] not in ids

    def test_unknown_facility_is_empty(self, client, auth_headers):
        _create(client, auth_headers, name="G1")
        r = client.get("/api/checklist", params={"facility": "annex"}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json() == []

    def test_requires_auth(self, client):
        assert client.get("/api/checklist").status_code == 401


class TestUpdateField:
    def test_room_204_scenario(self, client, auth_headers):
        item = _create(client, auth_headers, name="Room 204")

        r = client.put(
            f"/api/checklist/update-field/{item['id']}",
            json={"field": "bussing", "value": True},
            headers=auth_headers,
        )
        assert r.status_code == 200
        assert r.content == b""

        items = client.get("/api/checklist", params={"facility": "galleria"}, headers=auth_headers).json()
        found = next(i for i in items if i["id"] == item["id"])
        assert found["bussing"] is True
        assert found["washing"] is False

    @pytest.mark.parametrize("field", ["sheets", "onsen_start", "onsen_stop", "today_used"])
    def test_fields_only_reachable_by_update(self, client, auth_headers, field):
        item = _create(client, auth_headers, name="Room 3")
        r = client.put(
            f"/api/checklist/update-field/{item['id']}",
            json={"field": field, "value": True},
            headers=auth_headers,
        )
        assert r.status_code == 200
        items = client.get("/api/checklist", headers=auth_headers).json()
        assert next(i for i in items if i["id"] == item["id"])[field] is True

    def test_set_back_to_false(self, client, auth_headers):
        item = _create(client, auth_headers, name="Room 5")
        url = f"/api/checklist/update-field/{item['id']}"
        client.put(url, json={"field": "vacuum", "value": True}, headers=auth_headers)
        client.put(url, json={"field": "vacuum", "value": False}, headers=auth_headers)
        items = client.get("/api/checklist", headers=auth_headers).json()
        assert next(i for i in items if i["id"] == item["id"])["vacuum"] is False

    @pytest.mark.parametrize("value", [True, False, "true", 1])
    def test_unknown_field_rejected_without_mutation(self, client, auth_headers, cfg, value):
        item = _create(client, auth_headers, name="Room 9")
        r = client.put(
            f"/api/checklist/update-field/{item['id']}",
            json={"field": "not_a_real_column", "value": value},
            headers=auth_headers,
        )
        assert r.status_code == 400
        assert r.json() == {"message": "Invalid field name"}

        items = client.get("/api/checklist", headers=auth_headers).json()
        assert next(i for i in items if i["id"] == item["id"]) == item

    def test_column_injection_rejected(self, client, auth_headers):
        item = _create(client, auth_headers, name="Room 9")
        r = client.put(
            f"/api/checklist/update-field/{item['id']}",
            json={"field": "name` = 'x', `bussing", "value": True},
            headers=auth_headers,
        )
        assert r.status_code == 400

    @pytest.mark.parametrize("value", ["true", 1, 0, None, "yes"])
    def test_non_boolean_value(self, client, auth_headers, value):
        item = _create(client, auth_headers, name="Room 10")
        r = client.put(
            f"/api/checklist/update-field/{item['id']}",
            json={"field": "washing", "value": value},
            headers=auth_headers,
        )
        assert r.status_code == 400
        assert r.json() == {"message": "Value must be a boolean"}

    def test_unknown_id_still_ok(self, client, auth_headers):
        r = client.put(
            "/api/checklist/update-field/424242",
            json={"field": "washing", "value": True},
            headers=auth_headers,
        )
        assert r.status_code == 200

    def test_id_beyond_64_bits_still_ok(self, client, auth_headers):
        r = client.put(
            "/api/checklist/update-field/99999999999999999999",
            json={"field": "washing", "value": True},
            headers=auth_headers,
        )
        assert r.status_code == 200

    def test_non_integer_id(self, client, auth_headers):
        r = client.put(
            "/api/checklist/update-field/abc",
            json={"field": "washing", "value": True},
            headers=auth_headers,
        )
        assert r.status_code == 400

    def test_requires_auth(self, client):
        r = client.put("/api/checklist/update-field/1", json={"field": "washing", "value": True})
        assert r.status_code == 401


class TestStoreFailures:
    def test_list_store_error_is_generic_500(self, client, auth_headers, monkeypatch):
        import cleaning_checklist.api.server as server

        def boom(conn, facility):
            raise RuntimeError("connection reset by peer")

        monkeypatch.setattr(server, "list_items", boom)
        r = client.get("/api/checklist", headers=auth_headers)
        assert r.status_code == 500
        assert r.json() == {"message": "Internal server error"}

    def test_create_rolls_back_on_store_error(self, client, auth_headers, cfg, monkeypatch):
        import cleaning_checklist.api.server as server

        def half_insert(conn, *, name, facility):
            conn.execute("INSERT INTO checklist_items (name, facility) VALUES (?, ?)", (name, facility))
            raise RuntimeError("disk full")

        monkeypatch.setattr(server, "create_item", half_insert)
        r = client.post("/api/checklist", json={"name": "Ghost"}, headers=auth_headers)
        assert r.status_code == 500

        with Database(cfg.DB_DSN).connect() as conn:
            n = conn.execute("SELECT COUNT(*) AS n FROM checklist_items WHERE name=?", ("Ghost",)).fetchone()["n"]
        assert n == 0
