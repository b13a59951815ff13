import uuid

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.main import app


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail
        self.closed_with = None

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    async def close(self, code=1000):
        self.closed_with = code


async def current_user_id(client, headers):
    response = await client.get("/api/v1/users/me", headers=headers)
    assert response.status_code == 200
    return uuid.UUID(response.json()["id"])


async def test_default_applies_until_first_save(client, auth_headers):
    response = await client.get("/api/v1/settings", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["savings_percent"] == 20
    assert response.json()["is_default"] is True


async def test_update_then_read(client, auth_headers):
    response = await client.put("/api/v1/settings", json={"savings_percent": 35}, headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "✅ Savings preference updated to 35%"
    assert body["setting"]["savings_percent"] == 35

    response = await client.get("/api/v1/settings", headers=auth_headers)
    assert response.json()["savings_percent"] == 35
    assert response.json()["is_default"] is False
    assert response.json()["updated_at"] is not None


async def test_last_write_wins(client, auth_headers):
    for percent in (10, 45, 15):
        response = await client.put("/api/v1/settings", json={"savings_percent": percent}, headers=auth_headers)
        assert response.status_code == 200

    response = await client.get("/api/v1/settings", headers=auth_headers)
    assert response.json()["savings_percent"] == 15


@pytest.mark.parametrize("percent", [4, 51, 0, 100])
async def test_out_of_range_percent_is_rejected(client, auth_headers, percent):
    response = await client.put("/api/v1/settings", json={"savings_percent": percent}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Savings percentage must be between 5 and 50."

    response = await client.get("/api/v1/settings", headers=auth_headers)
    assert response.json()["is_default"] is True


async def test_update_pushes_insert_then_update_events(client, auth_headers, login):
    hub = app.state.settings_hub
    user_id = await current_user_id(client, auth_headers)
    other_headers = await login("bystander@example.com")
    other_id = await current_user_id(client, other_headers)

    mine, theirs = FakeWebSocket(), FakeWebSocket()
    hub.subscribe(mine, user_id)
    hub.subscribe(theirs, other_id)
    try:
        await client.put("/api/v1/settings", json={"savings_percent": 30}, headers=auth_headers)
        await client.put("/api/v1/settings", json={"savings_percent": 40}, headers=auth_headers)
    finally:
        hub.unsubscribe(mine, user_id)
        hub.unsubscribe(theirs, other_id)

    assert [e["event"] for e in mine.sent] == ["INSERT", "UPDATE"]
    assert [e["new"]["savings_percent"] for e in mine.sent] == [30, 40]
    assert mine.sent[0]["table"] == "user_settings"
    assert mine.sent[0]["new"]["user_id"] == str(user_id)
    assert theirs.sent == []


async def test_rejected_update_pushes_nothing(client, auth_headers):
    hub = app.state.settings_hub
    user_id = await current_user_id(client, auth_headers)
    socket = FakeWebSocket()
    hub.subscribe(socket, user_id)
    try:
        await client.put("/api/v1/settings", json={"savings_percent": 80}, headers=auth_headers)
    finally:
        hub.unsubscribe(socket, user_id)
    assert socket.sent == []


def test_settings_feed_rejects_bad_token():
    # No lifespan: the token is refused before any database access
    test_client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as exc:
        with test_client.websocket_connect("/api/v1/settings/ws?token=not-a-jwt"):
            pass
    assert exc.value.code == 4001


def test_settings_routes_are_mounted():
    paths = {route.path for route in app.routes}
    assert {"/api/v1/settings", "/api/v1/settings/ws"} <= paths
