from datetime import timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.models.admin_session import AdminSession
from app.services.admin_auth import hash_token
from app.utils.clock import utcnow


def _login(client: TestClient, username="admin", password="test-password"):
    return client.post("/api/admin/login", json={"username": username, "password": password})


def test_login_issues_bearer_token(client: TestClient, session: Session):
    response = _login(client)

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]

    # Only the hash is persisted
    stored = session.exec(select(AdminSession)).one()
    assert stored.token_hash == hash_token(data["access_token"])
    assert stored.token_hash != data["access_token"]


def test_wrong_password_rejected(client: TestClient, session: Session):
    response = _login(client, password="nope")
    assert response.status_code == 401
    assert session.exec(select(AdminSession)).first() is None


def test_wrong_username_rejected(client: TestClient):
    assert _login(client, username="root").status_code == 401


def test_login_disabled_without_password(client: TestClient, monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "")
    assert _login(client, password="").status_code == 401


def test_session_endpoint(client: TestClient, admin_headers):
    response = client.get("/api/admin/session", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["username"] == "admin"


def test_missing_or_invalid_token(client: TestClient):
    assert client.get("/api/admin/session").status_code == 401

    response = client.get("/api/admin/session", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_logout_revokes_token(client: TestClient, admin_headers):
    assert client.post("/api/admin/logout", headers=admin_headers).status_code == 204
    assert client.get("/api/admin/session", headers=admin_headers).status_code == 401


def test_expired_session_rejected(client: TestClient, session: Session, admin_headers):
    stored = session.exec(select(AdminSession)).one()
    stored.expires_at = utcnow() - timedelta(minutes=1)
    session.add(stored)
    session.commit()

    response = client.get("/api/admin/session", headers=admin_headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "Session has expired"
