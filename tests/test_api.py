"""End-to-end tests of the HTTP and websocket surface."""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from suds_hub.main import app
from suds_hub.models.domain import SUDS_TYPES
from suds_hub.routes.assist import get_text_client
from suds_hub.routes.changes import _stop_sender
from suds_hub.services.change_hub import hub
from suds_hub.services.read_model import ReadModel
from suds_hub.services.text_completion import TextCompletionClient
from suds_hub.store.factory import get_read_model, get_store


@pytest.fixture
def client(store):
    model = ReadModel(store)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_read_model] = lambda: model
    yield TestClient(app)
    app.dependency_overrides.clear()
    model.close()


@pytest.fixture
def token(client):
    resp = client.post("/auth/anonymous")
    assert resp.status_code == 200
    return resp.json()["access_token"]


@pytest.fixture
def auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_endpoints_require_token(client):
    assert client.get("/assets").status_code == 401
    assert client.get("/assets", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_anonymous_session_returns_actor(client):
    body = client.post("/auth/anonymous").json()
    assert body["actor_id"].startswith("anon-")
    assert body["token_type"] == "bearer"


def test_scenario_over_http(client, auth, store):
    assert client.post("/taxonomy/categories", json={"name": "Limpieza"}, headers=auth).status_code == 201
    resp = client.post("/taxonomy/categories/Limpieza/activities", json={"name": "barrido"}, headers=auth)
    assert resp.json()["activities"] == {"Limpieza": ["Barrido"]}

    asset = client.post(
        "/assets",
        json={"name": "Zanja de infiltración", "description": "Zanja rellena de grava", "locationTypes": ["acera"]},
        headers=auth,
    ).json()
    assert asset["order"] == 0

    record = client.put(
        "/activities/applies",
        json={"sudsTypeId": asset["id"], "category": "Limpieza", "activityName": "Barrido", "applies": True},
        headers=auth,
    ).json()
    assert record["status"] == "unset" and record["validationStatus"] == "pending"
    assert record["lastUpdatedBy"].startswith("anon-")

    updated = client.patch(f"/activities/{record['id']}", json={"field": "status", "value": "verde"}, headers=auth).json()
    assert updated["status"] == "verde" and updated["validationStatus"] == "pending"

    contract = client.post("/contracts", json={"name": "Conservación 2024"}, headers=auth).json()
    client.patch(
        f"/activities/{record['id']}",
        json={"field": "involvedContracts", "value": ["Conservación 2024"]},
        headers=auth,
    )

    view = client.get(f"/summary/contracts/{contract['id']}", headers=auth).json()
    assert [(r["assetName"], r["category"], r["activityName"], r["status"]) for r in view["rows"]] == [
        ("Zanja de infiltración", "Limpieza", "Barrido", "verde"),
    ]

    activities = client.get(f"/summary/assets/{asset['id']}/activities", headers=auth).json()
    assert [a["activityName"] for a in activities["activities"]] == ["Barrido"]

    pivot = client.get("/summary/pivot", params={"category": "Limpieza"}, headers=auth).json()
    assert pivot["total"] == 1


def test_error_mapping(client, auth):
    assert client.get("/assets/missing", headers=auth).status_code == 404
    assert client.post("/contracts", json={"name": "A"}, headers=auth).status_code == 201
    dup = client.post("/contracts", json={"name": "A"}, headers=auth)
    assert dup.status_code == 409
    assert dup.json()["error"] == "DuplicateError"
    blank = client.post("/assets", json={"name": " ", "description": "d"}, headers=auth)
    assert blank.status_code == 422
    assert client.post("/taxonomy/categories/Nope/activities", json={"name": "x"}, headers=auth).status_code == 404


def test_validation_endpoint_and_reset(zanja, client, auth):
    record = client.put(
        "/activities/applies",
        json={"sudsTypeId": zanja["id"], "category": "Limpieza", "activityName": "Barrido", "applies": True},
        headers=auth,
    ).json()
    validated = client.post(f"/activities/{record['id']}/validation", json={"status": "validated", "comment": "ok"}, headers=auth)
    assert validated.json()["validationStatus"] == "validated"
    reset = client.patch(f"/activities/{record['id']}", json={"field": "comment", "value": "x"}, headers=auth)
    assert reset.json()["validationStatus"] == "pending"
    assert client.patch(f"/activities/{record['id']}", json={"field": "applies", "value": False}, headers=auth).status_code == 422


def test_switching_off_unknown_activity_returns_no_content(zanja, client, auth):
    resp = client.put(
        "/activities/applies",
        json={"sudsTypeId": zanja["id"], "category": "Limpieza", "activityName": "Poda", "applies": False},
        headers=auth,
    )
    assert resp.status_code == 204


def test_applies_for_undefined_activity_is_not_found(zanja, client, auth):
    resp = client.put(
        "/activities/applies",
        json={"sudsTypeId": zanja["id"], "category": "Limpieza", "activityName": "Desbroce", "applies": True},
        headers=auth,
    )
    assert resp.status_code == 404


def test_asset_move_and_location_tags(client, auth):
    ids = [
        client.post("/assets", json={"name": n, "description": "d"}, headers=auth).json()["id"]
        for n in ("A", "B")
    ]
    moved = client.post(f"/assets/{ids[1]}/move", json={"direction": "up"}, headers=auth).json()
    assert [a["name"] for a in moved] == ["B", "A"]
    assert [a["name"] for a in client.get("/assets", headers=auth).json()] == ["B", "A"]
    assert client.post(f"/assets/{ids[1]}/move", json={"direction": "sideways"}, headers=auth).status_code == 422

    tags = client.get("/assets/location-tags", headers=auth).json()
    assert [t["id"] for t in tags] == ["acera", "zona_verde", "viario", "infraestructura"]


def test_taxonomy_rename_move_and_delete(zanja, client, auth):
    client.put(
        "/activities/applies",
        json={"sudsTypeId": zanja["id"], "category": "Limpieza", "activityName": "Poda", "applies": True},
        headers=auth,
    )
    renamed = client.patch("/taxonomy/categories/Limpieza/activities/Poda", json={"name": "desbroce"}, headers=auth)
    assert renamed.json() == {"records": 1}

    moved = client.post("/taxonomy/categories/Limpieza/activities/Desbroce/move", json={"direction": "up"}, headers=auth)
    assert moved.json()["activities"]["Limpieza"] == ["Desbroce", "Barrido"]

    moved = client.post("/taxonomy/categories/Limpieza/move", json={"direction": "down"}, headers=auth)
    assert moved.json()["categories"][-1] == "Limpieza"

    assert client.delete("/taxonomy/categories/Limpieza/activities/Barrido", headers=auth).json() == {"records": 0}
    assert client.delete("/taxonomy/categories/Limpieza", headers=auth).json() == {"records": 1}
    assert client.get("/taxonomy", headers=auth).json()["categories"] == ["Vegetación"]


def test_contract_crud(client, auth):
    created = client.post("/contracts", json={"name": "C", "startDate": "2024-01-01", "logoUrl": ""}, headers=auth).json()
    assert created["logoUrl"] is None
    assert created["startDate"] == "2024-01-01"
    patched = client.patch(f"/contracts/{created['id']}", json={"summary": "Resumen"}, headers=auth).json()
    assert patched["summary"] == "Resumen" and patched["name"] == "C"
    assert client.delete(f"/contracts/{created['id']}", headers=auth).status_code == 204
    assert client.get(f"/contracts/{created['id']}", headers=auth).status_code == 404


def test_assist_endpoints(zanja, client, auth):
    def handler(request):
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Texto"}]}}]})

    app.dependency_overrides[get_text_client] = lambda: TextCompletionClient(
        api_key="k", transport=httpx.MockTransport(handler)
    )
    resp = client.post("/assist/asset-description", json={"name": "Zanja", "locationTypes": ["acera"]}, headers=auth)
    assert resp.json() == {"text": "Texto"}
    resp = client.post(
        "/assist/activity-analysis",
        json={"sudsTypeId": zanja["id"], "category": "Limpieza", "activityName": "Barrido"},
        headers=auth,
    )
    assert resp.json() == {"text": "Texto"}


def test_assist_upstream_failure_maps_to_502(client, auth):
    app.dependency_overrides[get_text_client] = lambda: TextCompletionClient(
        api_key="k", transport=httpx.MockTransport(lambda request: httpx.Response(500))
    )
    resp = client.post("/assist/asset-description", json={"name": "Zanja"}, headers=auth)
    assert resp.status_code == 502
    assert resp.json()["upstream_status"] == 500


def test_backup_roundtrip_over_http(zanja, client, auth, store):
    exported = client.get("/backup/export", headers=auth).json()
    client.post("/assets", json={"name": "Extra", "description": "d"}, headers=auth)
    assert len(store.query(SUDS_TYPES)) == 2

    resp = client.post("/backup/import", json=exported, headers=auth)

    assert resp.json()["imported"]["sudsTypes"] == 1
    assert [a["name"] for a in store.query(SUDS_TYPES)] == ["Zanja de infiltración"]
    assert client.post("/backup/import", json={"sudsTypes": "x"}, headers=auth).status_code == 422


def test_change_feed_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws/changes?token=garbage") as ws:
            ws.receive_text()
    assert exc.value.code == 4401


def test_change_feed_pushes_store_changes(client, token, store):
    hub.watch(store, [SUDS_TYPES])
    try:
        with client.websocket_connect(f"/ws/changes?token={token}") as ws:
            ws.send_text("ping")
            assert ws.receive_text() == "pong"
            store.add(SUDS_TYPES, {"name": "Zanja", "description": "d", "order": 0})
            assert ws.receive_json() == {"event": SUDS_TYPES, "data": {"count": 1}}
    finally:
        hub.close()


def test_change_feed_sender_failure_is_reported():
    """A send error inside the forwarding task is surfaced when the feed closes."""

    async def scenario():
        async def failing_send():
            raise RuntimeError("socket closed")

        task = asyncio.create_task(failing_send())
        await asyncio.sleep(0)
        return await _stop_sender(task, "anon-test")

    error = asyncio.run(scenario())
    assert isinstance(error, RuntimeError)


def test_change_feed_idle_sender_stops_cleanly():
    async def scenario():
        task = asyncio.create_task(asyncio.sleep(60))
        await asyncio.sleep(0)
        error = await _stop_sender(task, "anon-test")
        return error, task.cancelled()

    assert asyncio.run(scenario()) == (None, True)


def test_contract_dates_over_http(client, auth):
    created = client.post(
        "/contracts", json={"name": "C", "startDate": "2024-09-01", "endDate": "2024-10-01"}, headers=auth
    )
    assert created.status_code == 201
    assert created.json()["endDate"] == "2024-10-01"
    assert client.post("/contracts", json={"name": "D", "startDate": "septiembre"}, headers=auth).status_code == 422
    assert client.patch(f"/contracts/{created.json()['id']}", json={"endDate": "2024-08-01"}, headers=auth).status_code == 422
