from decimal import Decimal


async def test_read_own_profile(client, auth_headers):
    response = await client.get("/api/v1/users/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "saver@example.com"
    assert response.json()["full_name"] is None


async def test_update_full_name(client, auth_headers):
    response = await client.patch("/api/v1/users/me", json={"full_name": "Sam Saver"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["full_name"] == "Sam Saver"

    response = await client.patch("/api/v1/users/me", json={}, headers=auth_headers)
    assert response.status_code == 400


async def test_bad_token_is_rejected(client):
    response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


async def test_token_accepted_from_query_string(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    response = await client.get("/api/v1/savings", params={"token": token})
    assert response.status_code == 200


async def test_logout_works_with_or_without_session(client, auth_headers):
    response = await client.post("/api/v1/auth/jwt/logout", headers=auth_headers)
    assert response.status_code == 200
    response = await client.post("/api/v1/auth/jwt/logout")
    assert response.status_code == 200


async def test_deleting_account_removes_savings(client, auth_headers, login):
    await client.post("/api/v1/savings/allowance", json={"amount": "100"}, headers=auth_headers)
    await client.put("/api/v1/settings", json={"savings_percent": 30}, headers=auth_headers)

    response = await client.delete("/api/v1/users/me", headers=auth_headers)
    assert response.status_code == 204

    response = await client.get("/api/v1/users/me", headers=auth_headers)
    assert response.status_code == 401

    # Re-registering the same address starts from a clean slate
    headers = await login("saver@example.com")
    response = await client.get("/api/v1/savings", headers=headers)
    assert Decimal(response.json()["locked_amount"]) == Decimal("0")
    assert response.json()["savings_percent"] == 20


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
