"""Servizi e categorie."""
from alracare import services


def test_category_then_service_round_trip(client, admin_headers):
    r = client.post(
        "/api/services/categories",
        json={"id": "laser", "title": "Laser Treatment", "description": "Laser", "type": "multiple"},
        headers=admin_headers,
    )
    assert r.status_code == 201

    r = client.post(
        "/api/services",
        json={"category_id": "laser", "name": "Laser Rejuvenation", "price": "Rp 500.000"},
        headers=admin_headers,
    )
    assert r.status_code == 201
    created = r.json()["data"]
    assert created["id"].startswith("laser_")
    assert created["price_numeric"] == 500000

    listing = client.get("/api/services").json()["data"]
    assert listing["laser"]["title"] == "Laser Treatment"
    assert listing["laser"]["type"] == "multiple"
    assert listing["laser"]["options"] == [
        {"id": created["id"], "name": "Laser Rejuvenation", "price": "Rp 500.000", "image": None},
    ]


def test_explicit_price_numeric_is_kept(client, admin_headers, facial_service):
    r = client.post(
        "/api/services",
        json={"category_id": "facial", "name": "Promo", "price": "Rp 99rb", "price_numeric": 99000},
        headers=admin_headers,
    )
    assert r.json()["data"]["price_numeric"] == 99000


def test_create_service_missing_fields_is_400(client, admin_headers):
    r = client.post("/api/services", json={"name": "Facial"}, headers=admin_headers)
    assert r.status_code == 400


def test_create_service_unknown_category_is_400(client, admin_headers):
    r = client.post(
        "/api/services",
        json={"category_id": "nope", "name": "X", "price": "Rp 1"},
        headers=admin_headers,
    )
    assert r.status_code == 400


def test_create_service_requires_token(client):
    r = client.post("/api/services", json={"category_id": "facial", "name": "X", "price": "Rp 1"})
    assert r.status_code == 401


def test_services_grouped_and_ordered(client):
    services.create_category("b", "Second", display_order=2)
    services.create_category("a", "First", display_order=1)
    services.create_service("a", "Two", "Rp 2", display_order=2)
    services.create_service("a", "One", "Rp 1", display_order=1)

    data = client.get("/api/services").json()["data"]

    assert list(data.keys()) == ["a", "b"]
    assert [o["name"] for o in data["a"]["options"]] == ["One", "Two"]
    assert data["b"]["options"] == []


def test_inactive_services_hidden_from_public(client, admin_headers, facial_service):
    sid = facial_service["id"]
    r = client.put(f"/api/services/{sid}", json={"is_active": False}, headers=admin_headers)
    assert r.status_code == 200

    assert client.get("/api/services").json()["data"]["facial"]["options"] == []
    assert client.get(f"/api/services/{sid}").status_code == 404

    r = client.get(f"/api/services/{sid}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["is_active"] is False

    admin_view = client.get("/api/services", params={"include_inactive": "true"}, headers=admin_headers).json()["data"]
    assert admin_view["facial"]["options"][0]["id"] == sid

    # senza token include_inactive viene ignorato
    public_view = client.get("/api/services", params={"include_inactive": "true"}).json()["data"]
    assert public_view["facial"]["options"] == []


def test_inactive_category_hidden_from_public(client, admin_headers, facial_service):
    client.put("/api/services/categories/facial", json={"is_active": False}, headers=admin_headers)
    assert client.get("/api/services").json()["data"] == {}


def test_get_service_with_category(client, facial_service):
    r = client.get(f"/api/services/{facial_service['id']}")

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Facial Basic"
    assert data["category"]["id"] == "facial"
    assert data["category"]["title"] == "Facial Treatment"


def test_get_unknown_service_is_404(client):
    r = client.get("/api/services/missing")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_update_price_recomputes_numeric(client, admin_headers, facial_service):
    r = client.put(f"/api/services/{facial_service['id']}", json={"price": "Rp 175.000"}, headers=admin_headers)

    data = r.json()["data"]
    assert data["price"] == "Rp 175.000"
    assert data["price_numeric"] == 175000
    assert data["name"] == "Facial Basic"


def test_delete_service(client, admin_headers, facial_service):
    r = client.delete(f"/api/services/{facial_service['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"/api/services/{facial_service['id']}").status_code == 404


def test_delete_category_blocked_while_in_use(client, admin_headers, facial_service):
    r = client.delete("/api/services/categories/facial", headers=admin_headers)
    assert r.status_code == 409

    client.delete(f"/api/services/{facial_service['id']}", headers=admin_headers)
    r = client.delete("/api/services/categories/facial", headers=admin_headers)
    assert r.status_code == 200


def test_duplicate_category_is_409(client, admin_headers, facial_service):
    r = client.post("/api/services/categories", json={"id": "facial", "title": "Again"}, headers=admin_headers)
    assert r.status_code == 409


def test_update_service_null_name_is_400(client, admin_headers, facial_service):
    r = client.put(f"/api/services/{facial_service['id']}", json={"name": None}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["success"] is False

    assert client.get(f"/api/services/{facial_service['id']}").json()["data"]["name"] == "Facial Basic"


def test_update_service_null_category_is_400(client, admin_headers, facial_service):
    r = client.put(f"/api/services/{facial_service['id']}", json={"category_id": None}, headers=admin_headers)
    assert r.status_code == 400


def test_update_category_null_flag_is_400(client, admin_headers, facial_service):
    r = client.put("/api/services/categories/facial", json={"is_active": None}, headers=admin_headers)
    assert r.status_code == 400
    assert "facial" in client.get("/api/services").json()["data"]
