from __future__ import annotations

import json
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from fastapi.testclient import TestClient

from foodchain.adapters.store.memory_store import MemoryStore
from foodchain.adapters.vision.mock_vision import TEMPLATES
from foodchain.services.api import create_app

TOMATOES = {
    "ownerId": "anon",
    "name": "tomatoes",
    "category": "produce",
    "estimatedExpiry": "2025-09-10T00:00:00Z",
}


def test_ping_returns_epoch_ms(client: TestClient) -> None:
    before = int(time.time() * 1000)
    resp = client.get("/api/ping")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["ok"] is True
    assert before <= payload["ts"] <= int(time.time() * 1000)


def test_recognize_returns_template_prediction(client: TestClient) -> None:
    resp = client.post("/api/recognize", json={"imageBase64": "data:image/jpeg;base64,aGVsbG8="})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["ok"] is True
    prediction = payload["prediction"]
    known = {(t.name, t.category, t.shelf_life_days) for t in TEMPLATES}
    assert (prediction["name"], prediction["category"], prediction["shelfLifeDays"]) in known
    assert prediction["confidence"] == 0.82
    expiry = datetime.fromisoformat(prediction["estimatedExpiry"].replace("Z", "+00:00"))
    delta = expiry - datetime.now(timezone.utc)
    assert abs(delta.total_seconds() - prediction["shelfLifeDays"] * 86400) < 60


def test_recognize_accepts_undecodable_image(client: TestClient) -> None:
    resp = client.post("/api/recognize", json={"imageBase64": "abc"})
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_recognize_without_image_is_400(client: TestClient) -> None:
    for kwargs in ({}, {"json": {}}, {"json": {"imageBase64": ""}}):
        resp = client.post("/api/recognize", **kwargs)
        assert resp.status_code == 400
        assert resp.json() == {"error": "no image"}


def test_create_item_scenario(client: TestClient) -> None:
    resp = client.post("/api/items", json=TOMATOES)
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["ok"] is True
    item = payload["item"]
    assert set(item) == {"id", "ownerId", "name", "category", "estimatedExpiry", "createdAt"}
    assert isinstance(item["id"], str) and item["id"]
    assert isinstance(item["createdAt"], str)
    assert {k: item[k] for k in TOMATOES} == TOMATOES

    listed = client.get("/api/items").json()
    assert listed["ok"] is True
    assert item in listed["items"]


def test_create_item_keeps_meta(client: TestClient) -> None:
    body = dict(TOMATOES, meta={"confidence": 0.82})
    item = client.post("/api/items", json=body).json()["item"]
    assert item["meta"] == {"confidence": 0.82}
    assert client.get("/api/items").json()["items"][-1]["meta"] == {"confidence": 0.82}


def test_items_listed_in_insertion_order(client: TestClient) -> None:
    ids = [client.post("/api/items", json=dict(TOMATOES, name=f"n{i}")).json()["item"]["id"] for i in range(5)]
    assert len(set(ids)) == 5
    assert [i["id"] for i in client.get("/api/items").json()["items"]] == ids
    assert [i["id"] for i in client.get("/api/items/nearby").json()["items"]] == ids


def test_create_item_validation(client: TestClient) -> None:
    missing = {k: v for k, v in TOMATOES.items() if k != "name"}
    resp = client.post("/api/items", json=missing)
    assert resp.status_code == 400
    payload = resp.json()
    assert payload["error"].startswith("name")
    assert payload["details"][0]["loc"] == ["body", "name"]

    resp = client.post("/api/items", json=dict(TOMATOES, estimatedExpiry="next tuesday"))
    assert resp.status_code == 400
    assert "estimatedExpiry" in resp.json()["error"]

    resp = client.post("/api/items", json=dict(TOMATOES, meta="not an object"))
    assert resp.status_code == 400

    resp = client.post("/api/items", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400

    assert client.get("/api/items").json()["items"] == []


def test_offer_on_existing_item(client: TestClient) -> None:
    item_id = client.post("/api/items", json=TOMATOES).json()["item"]["id"]
    resp = client.post("/api/offers", json={"itemId": item_id, "type": "claim", "actorId": "anon"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["ok"] is True
    offer = payload["offer"]
    assert set(offer) == {"id", "itemId", "type", "actorId", "ts"}
    assert (offer["itemId"], offer["type"], offer["actorId"]) == (item_id, "claim", "anon")
    assert isinstance(offer["id"], str) and isinstance(offer["ts"], str)

    assert client.get("/api/offers").json()["offers"] == [offer]


def test_offer_on_unknown_item_succeeds_by_default(client: TestClient) -> None:
    resp = client.post("/api/offers", json={"itemId": "does-not-exist", "type": "claim", "actorId": "anon"})
    assert resp.status_code == 200
    assert resp.json()["offer"]["itemId"] == "does-not-exist"


def test_offer_on_unknown_item_rejected_when_checked(settings) -> None:
    client = TestClient(create_app(replace(settings, check_offer_item=True)))
    resp = client.post("/api/offers", json={"itemId": "does-not-exist", "type": "claim", "actorId": "anon"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "item not found"}
    assert client.get("/api/offers").json()["offers"] == []

    item_id = client.post("/api/items", json=TOMATOES).json()["item"]["id"]
    resp = client.post("/api/offers", json={"itemId": item_id, "type": "purchase", "actorId": "anon"})
    assert resp.status_code == 200


def test_offer_type_is_a_closed_set(client: TestClient) -> None:
    for offer_type in ("claim", "donation", "purchase"):
        resp = client.post("/api/offers", json={"itemId": "x", "type": offer_type, "actorId": "anon"})
        assert resp.status_code == 200
    resp = client.post("/api/offers", json={"itemId": "x", "type": "steal", "actorId": "anon"})
    assert resp.status_code == 400
    assert resp.json()["details"][0]["loc"] == ["body", "type"]


def test_catalog_survives_restart(settings) -> None:
    first = TestClient(create_app(settings))
    item = first.post("/api/items", json=TOMATOES).json()["item"]
    offer = first.post("/api/offers", json={"itemId": item["id"], "type": "donation", "actorId": "bob"}).json()["offer"]

    second = TestClient(create_app(settings))
    assert second.get("/api/items").json()["items"] == [item]
    assert second.get("/api/offers").json()["offers"] == [offer]


def test_injected_store_and_status(settings, status) -> None:
    store = MemoryStore(status)
    client = TestClient(create_app(settings, store=store, status=status))
    client.post("/api/items", json=TOMATOES)

    assert len(store.list_items()) == 1
    health = client.get("/api/health").json()
    assert health == {"ok": True, "store": "MemoryStore", "vision": "MockVision", "items": 1, "offers": 0}
    logs = client.get("/api/status").json()["logs"]
    assert any(line.startswith("store: item ") for line in logs)


def test_memory_adapter_from_settings(settings) -> None:
    client = TestClient(create_app(replace(settings, store_adapter="memory")))
    assert client.get("/api/health").json()["store"] == "MemoryStore"


def test_cors_is_open(client: TestClient) -> None:
    resp = client.get("/api/ping", headers={"Origin": "http://example.com"})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_malformed_records_do_not_break_the_catalog(settings) -> None:
    path = Path(settings.db_path)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"items": [{"name": "apples"}, {"id": 1, "name": "pears", "ownerId": "anon"}]}),
                    encoding="utf-8")
    client = TestClient(create_app(settings))

    resp = client.get("/api/items")
    assert resp.status_code == 200
    assert resp.json()["items"] == [{"id": "1", "ownerId": "anon", "name": "pears", "category": None,
                                     "estimatedExpiry": None}]
    assert client.get("/api/health").json()["items"] == 1
    assert client.post("/api/items", json=TOMATOES).status_code == 200


def test_unknown_api_path_uses_error_shape(client: TestClient) -> None:
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "not found"}

    resp = client.delete("/api/items")
    assert resp.status_code == 405
    assert resp.json() == {"error": "method not allowed"}


def test_log_level_comes_from_settings(settings) -> None:
    app = create_app(replace(settings, log_level="WARNING", store_adapter="memory"))
    assert logging.getLogger("foodchain").level == logging.WARNING
    create_app(replace(settings, log_level="INFO", store_adapter="memory"))
    assert app.state.status.log_level == "WARNING"
    assert logging.getLogger("foodchain").level == logging.INFO
