from fastapi.testclient import TestClient


def _create(client: TestClient, headers, **overrides):
    payload = {
        "name": "Spring Cup",
        "event_date": "2026-09-12",
        "stake_price": "25.00",
        "location": "Joinville",
    }
    payload.update(overrides)
    return client.post("/api/tournaments", json=payload, headers=headers)


def test_create_tournament(client: TestClient, admin_headers):
    """Creating a tournament stores the price with two decimals"""
    response = _create(client, admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Spring Cup"
    assert data["event_date"] == "2026-09-12"
    assert data["stake_price"] == "25.00"
    assert data["is_active"] is False


def test_create_tournament_requires_admin(client: TestClient):
    response = _create(client, headers={})
    assert response.status_code == 401


def test_create_tournament_validation(client: TestClient, admin_headers):
    """Blank name and non-positive price are rejected"""
    assert _create(client, admin_headers, name="   ").status_code == 422
    assert _create(client, admin_headers, stake_price="0").status_code == 422
    assert _create(client, admin_headers, stake_price="10.555").status_code == 422


def test_get_tournament(client: TestClient, admin_headers):
    tournament_id = _create(client, admin_headers).json()["id"]

    response = client.get(f"/api/tournaments/{tournament_id}")
    assert response.status_code == 200
    assert response.json()["id"] == tournament_id

    assert client.get("/api/tournaments/9999").status_code == 404


def test_only_one_active_tournament(client: TestClient, admin_headers):
    """Activating a tournament deactivates the previously active one"""
    first = _create(client, admin_headers, name="Winter Cup", is_active=True).json()
    second = _create(client, admin_headers, name="Spring Cup").json()

    assert client.get("/api/tournaments/active").json()["id"] == first["id"]

    response = client.post(f"/api/tournaments/{second['id']}/activate", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is True

    tournaments = {t["id"]: t for t in client.get("/api/tournaments").json()}
    assert tournaments[first["id"]]["is_active"] is False
    assert tournaments[second["id"]]["is_active"] is True
    assert client.get("/api/tournaments/active").json()["id"] == second["id"]


def test_deactivate_leaves_no_active_tournament(client: TestClient, admin_headers):
    tournament = _create(client, admin_headers, is_active=True).json()

    response = client.post(f"/api/tournaments/{tournament['id']}/deactivate", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get("/api/tournaments/active").status_code == 404


def test_update_tournament(client: TestClient, admin_headers):
    tournament_id = _create(client, admin_headers).json()["id"]

    response = client.put(
        f"/api/tournaments/{tournament_id}",
        json={"name": "Spring Cup 2026", "stake_price": "30.00"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Spring Cup 2026"
    assert response.json()["stake_price"] == "30.00"


def test_tournament_locked_once_stakes_exist(client: TestClient, admin_headers):
    tournament_id = _create(client, admin_headers).json()["id"]
    client.post(
        f"/api/tournaments/{tournament_id}/bird-types",
        json={"name": "Coleiro", "color": "#2e7d32", "stake_count": 3},
        headers=admin_headers,
    )

    response = client.put(
        f"/api/tournaments/{tournament_id}", json={"stake_price": "30.00"}, headers=admin_headers
    )
    assert response.status_code == 409
    assert "TOURNAMENT_LOCKED" in response.json()["detail"]
    assert "stake_price" in response.json()["detail"]

    response = client.put(f"/api/tournaments/{tournament_id}", json={"location": "Blumenau"}, headers=admin_headers)
    assert response.status_code == 409

    # Resending unchanged values is a no-op, not a conflict
    response = client.put(
        f"/api/tournaments/{tournament_id}",
        json={"stake_price": "25.00", "location": "Joinville"},
        headers=admin_headers,
    )
    assert response.status_code == 200

    # Deactivation stays allowed
    response = client.post(f"/api/tournaments/{tournament_id}/deactivate", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/tournaments/{tournament_id}").json()["stake_price"] == "25.00"


def test_update_rejects_null_required_fields(client: TestClient, admin_headers):
    """Explicit null for name, event_date or stake_price is a validation error"""
    tournament_id = _create(client, admin_headers).json()["id"]

    for field in ("name", "event_date", "stake_price"):
        response = client.put(f"/api/tournaments/{tournament_id}", json={field: None}, headers=admin_headers)
        assert response.status_code == 422, field

    # Optional fields can still be cleared
    response = client.put(f"/api/tournaments/{tournament_id}", json={"location": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["location"] is None
    assert response.json()["name"] == "Spring Cup"
