from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlmodel import Session

from app.models.stake import Stake, StakeStatus
from app.services.reservation_service import reserve_stake
from tests.factories import make_tournament, stake_by_number


def test_create_bird_type_seeds_stakes(client: TestClient, session: Session, admin_headers):
    """Creating a bird type with stake_count generates stakes 1..N in order"""
    tournament, _ = make_tournament(session, stakes_per_type={})

    response = client.post(
        f"/api/tournaments/{tournament.id}/bird-types",
        json={"name": "Azulao", "color": "#1565c0", "stake_count": 12},
        headers=admin_headers,
    )
    assert response.status_code == 201
    bird_type_id = response.json()["id"]

    stakes = client.get(f"/api/bird-types/{bird_type_id}/stakes").json()
    assert [s["number"] for s in stakes] == list(range(1, 13))
    assert all(s["status"] == "available" for s in stakes)


def test_duplicate_bird_type_name_conflicts(client: TestClient, session: Session, admin_headers):
    tournament, _ = make_tournament(session, stakes_per_type={"Coleiro": 1})

    response = client.post(
        f"/api/tournaments/{tournament.id}/bird-types",
        json={"name": "Coleiro", "color": "#000000"},
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_create_bird_type_unknown_tournament(client: TestClient, admin_headers):
    response = client.post(
        "/api/tournaments/9999/bird-types", json={"name": "Coleiro", "color": "#000"}, headers=admin_headers
    )
    assert response.status_code == 404


def test_add_stakes_continues_numbering(client: TestClient, session: Session, admin_headers):
    _, bird_types = make_tournament(session, stakes_per_type={"Coleiro": 3})
    bird_type_id = bird_types["Coleiro"].id

    response = client.post(f"/api/bird-types/{bird_type_id}/stakes", json={"count": 2}, headers=admin_headers)

    assert response.status_code == 201
    assert [s["number"] for s in response.json()] == [4, 5]
    assert len(client.get(f"/api/bird-types/{bird_type_id}/stakes").json()) == 5


def test_list_bird_types_with_counts(client: TestClient, session: Session):
    tournament, bird_types = make_tournament(session, stakes_per_type={"Coleiro": 4, "Canario": 2})
    reserve_stake(session, stake_by_number(session, bird_types["Coleiro"].id, 1).id, "Ana", "+1555")

    rows = {r["name"]: r for r in client.get(f"/api/tournaments/{tournament.id}/bird-types").json()}

    assert rows["Coleiro"]["total_stakes"] == 4
    assert rows["Coleiro"]["available"] == 3
    assert rows["Canario"]["available"] == 2


def test_missing_bird_type_is_404(client: TestClient):
    response = client.get("/api/bird-types/9999/stakes")
    assert response.status_code == 404
    assert response.json()["detail"] == "Bird type not found"


def test_update_bird_type(client: TestClient, session: Session, admin_headers):
    _, bird_types = make_tournament(session)
    bird_type_id = bird_types["Coleiro"].id

    response = client.put(f"/api/bird-types/{bird_type_id}", json={"color": "#ff0000"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["color"] == "#ff0000"
    assert response.json()["name"] == "Coleiro"


class TestGrid:
    def test_public_grid(self, client: TestClient, session: Session):
        _, bird_types = make_tournament(session, price="25.00", stakes_per_type={"Coleiro": 3})
        bird_type_id = bird_types["Coleiro"].id
        reserve_stake(session, stake_by_number(session, bird_type_id, 2).id, "Ana", "+1555")

        response = client.get(f"/api/bird-types/{bird_type_id}/grid")

        assert response.status_code == 200
        data = response.json()
        assert data["is_admin"] is False
        assert data["tournament"]["price_display"] == "R$ 25.00"
        assert [entry["indicator"] for entry in data["legend"]] == ["success", "warning", "error"]

        cells = data["cells"]
        assert [c["number"] for c in cells] == [1, 2, 3]
        assert cells[0]["selectable"] is True
        assert cells[1]["status"] == "pending"
        assert cells[1]["selectable"] is False
        assert cells[1]["tooltip"] == {"name": "Ana", "phone": "+1555", "status_label": "Awaiting payment"}
        assert all(c["admin_actions"] == [] for c in cells)

    def test_admin_grid_has_actions(self, client: TestClient, session: Session, admin_headers):
        _, bird_types = make_tournament(session, stakes_per_type={"Coleiro": 2})
        bird_type_id = bird_types["Coleiro"].id
        reserve_stake(session, stake_by_number(session, bird_type_id, 1).id, "Ana", "+1555")

        cells = client.get(f"/api/bird-types/{bird_type_id}/grid", headers=admin_headers).json()["cells"]

        assert cells[0]["admin_actions"] == ["confirm", "cancel"]
        assert cells[1]["admin_actions"] == []

    def test_invalid_token_falls_back_to_public_grid(self, client: TestClient, session: Session):
        _, bird_types = make_tournament(session)
        response = client.get(
            f"/api/bird-types/{bird_types['Coleiro'].id}/grid", headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 200
        assert response.json()["is_admin"] is False


def test_add_stakes_number_collision_conflicts(client: TestClient, session: Session, admin_headers):
    """A concurrent append that already took the next numbers yields 409, not 500"""
    _, bird_types = make_tournament(session, stakes_per_type={"Coleiro": 3})
    bird_type_id = bird_types["Coleiro"].id

    def stale_generate(session, bird_type_id, count):
        # Numbering computed before another admin's append committed
        session.add(Stake(bird_type_id=bird_type_id, number=3, status=StakeStatus.available))
        return 3

    with patch("app.routes.bird_types.generate_stakes", side_effect=stale_generate):
        response = client.post(f"/api/bird-types/{bird_type_id}/stakes", json={"count": 1}, headers=admin_headers)

    assert response.status_code == 409
    assert "STAKE_NUMBER_CONFLICT" in response.json()["detail"]
    assert len(client.get(f"/api/bird-types/{bird_type_id}/stakes").json()) == 3
