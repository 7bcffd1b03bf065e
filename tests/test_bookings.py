"""Prenotazioni: creazione pubblica, duplicati, stati, cancellazione, statistiche."""
from datetime import date, datetime

import pytest

from alracare import services


def test_create_booking_example(client, booking_payload):
    r = client.post("/api/bookings", json=booking_payload)

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["status"] == "pending"
    assert data["id"].startswith("BK")
    assert data["appointment_datetime"] == "2025-06-01T10:00:00"
    assert data["booking_services"][0]["price_numeric"] == 150000
    assert data["booking_services"][0]["service_price"] == "Rp 150.000"
    assert data["booking_services"][0]["quantity"] == 1


def test_line_item_prices_strip_non_digits(client, booking_payload):
    booking_payload["selected_services"] = [
        {"id": "a", "name": "Facial", "price": "Rp 150.000"},
        {"id": "b", "name": "Laser", "price": "IDR 1,250,000"},
        {"id": "c", "name": "Konsultasi", "price": "Gratis"},
    ]
    r = client.post("/api/bookings", json=booking_payload)

    assert r.status_code == 201
    prices = [line["price_numeric"] for line in r.json()["data"]["booking_services"]]
    assert prices == [150000, 1250000, 0]


def test_numeric_line_item_price_is_400(client, booking_payload, admin_headers):
    booking_payload["selected_services"] = [{"id": "a", "name": "Facial", "price": 150000.0}]
    r = client.post("/api/bookings", json=booking_payload)

    assert r.status_code == 400
    assert client.get("/api/bookings", headers=admin_headers).json()["data"] == []


@pytest.mark.parametrize("missing", [
    "patient_name", "patient_phone", "patient_address", "appointment_date", "appointment_time", "selected_services",
])
def test_create_booking_missing_field_is_400(client, booking_payload, missing):
    booking_payload.pop(missing)
    r = client.post("/api/bookings", json=booking_payload)

    assert r.status_code == 400
    assert r.json()["success"] is False


def test_create_booking_empty_services_is_400(client, booking_payload):
    booking_payload["selected_services"] = []
    r = client.post("/api/bookings", json=booking_payload)
    assert r.status_code == 400


def test_create_booking_bad_time_is_400(client, booking_payload):
    booking_payload["appointment_time"] = "pagi"
    r = client.post("/api/bookings", json=booking_payload)
    assert r.status_code == 400


def test_duplicate_booking_same_phone_same_day_is_409(client, booking_payload):
    assert client.post("/api/bookings", json=booking_payload).status_code == 201

    booking_payload["appointment_time"] = "14:00"
    r = client.post("/api/bookings", json=booking_payload)

    assert r.status_code == 409
    assert r.json()["success"] is False


def test_same_phone_other_day_is_allowed(client, booking_payload):
    assert client.post("/api/bookings", json=booking_payload).status_code == 201

    booking_payload["appointment_date"] = "2025-06-02"
    assert client.post("/api/bookings", json=booking_payload).status_code == 201


def test_cancelled_booking_does_not_block_rebooking(client, booking_payload, admin_headers):
    first = client.post("/api/bookings", json=booking_payload).json()["data"]
    client.put(f"/api/bookings/{first['id']}/status", json={"status": "cancelled"}, headers=admin_headers)

    assert client.post("/api/bookings", json=booking_payload).status_code == 201


def test_get_booking_by_id_and_404(client, booking_payload):
    created = client.post("/api/bookings", json=booking_payload).json()["data"]

    r = client.get(f"/api/bookings/{created['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["patient_name"] == "Siti Aminah"

    r = client.get("/api/bookings/BK000")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_list_bookings_requires_admin(client):
    assert client.get("/api/bookings").status_code == 401


def test_list_bookings_filters_and_order(client, booking_payload, admin_headers):
    first = client.post("/api/bookings", json=booking_payload).json()["data"]
    booking_payload.update(patient_phone="089999999999", appointment_date="2025-06-03")
    second = client.post("/api/bookings", json=booking_payload).json()["data"]
    client.put(f"/api/bookings/{second['id']}/status", json={"status": "confirmed"}, headers=admin_headers)

    r = client.get("/api/bookings", headers=admin_headers)
    ids = [b["id"] for b in r.json()["data"]]
    assert ids == [second["id"], first["id"]]
    assert r.json()["data"][0]["booking_services"]

    r = client.get("/api/bookings", params={"status": "pending"}, headers=admin_headers)
    assert [b["id"] for b in r.json()["data"]] == [first["id"]]

    r = client.get("/api/bookings", params={"date": "2025-06-03"}, headers=admin_headers)
    assert [b["id"] for b in r.json()["data"]] == [second["id"]]


def test_list_bookings_unknown_status_is_400(client, booking_payload, admin_headers):
    client.post("/api/bookings", json=booking_payload)

    r = client.get("/api/bookings", params={"status": "done"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Status tidak valid"


def test_update_status_sets_matching_timestamp(client, booking_payload, admin_headers):
    created = client.post("/api/bookings", json=booking_payload).json()["data"]

    r = client.put(f"/api/bookings/{created['id']}/status", json={"status": "confirmed"}, headers=admin_headers)

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "confirmed"
    assert datetime.fromisoformat(data["confirmed_at"])
    assert data["cancelled_at"] is None
    assert data["completed_at"] is None


def test_status_transitions_preserve_previous_timestamps(client, booking_payload, admin_headers):
    created = client.post("/api/bookings", json=booking_payload).json()["data"]
    url = f"/api/bookings/{created['id']}/status"

    confirmed = client.put(url, json={"status": "confirmed"}, headers=admin_headers).json()["data"]
    completed = client.put(url, json={"status": "completed"}, headers=admin_headers).json()["data"]

    assert completed["status"] == "completed"
    assert completed["confirmed_at"] == confirmed["confirmed_at"]
    assert completed["completed_at"] is not None
    assert completed["cancelled_at"] is None


def test_update_status_invalid_is_400(client, booking_payload, admin_headers):
    created = client.post("/api/bookings", json=booking_payload).json()["data"]
    r = client.put(f"/api/bookings/{created['id']}/status", json={"status": "done"}, headers=admin_headers)
    assert r.status_code == 400


def test_update_status_unknown_booking_is_404(client, admin_headers):
    r = client.put("/api/bookings/BK1/status", json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 404


def test_update_status_requires_token(client, booking_payload):
    created = client.post("/api/bookings", json=booking_payload).json()["data"]
    r = client.put(f"/api/bookings/{created['id']}/status", json={"status": "confirmed"})
    assert r.status_code == 401


def test_delete_booking_removes_line_items(client, booking_payload, admin_headers):
    created = client.post("/api/bookings", json=booking_payload).json()["data"]

    r = client.delete(f"/api/bookings/{created['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"/api/bookings/{created['id']}").status_code == 404

    from alracare.db import db_session
    from alracare.models import BookingService
    from sqlalchemy import func, select
    with db_session() as s:
        assert s.scalar(select(func.count(BookingService.id))) == 0


def test_dashboard_stats(client, booking_payload, admin_headers):
    today = date.today().isoformat()
    booking_payload["appointment_date"] = today
    first = client.post("/api/bookings", json=booking_payload).json()["data"]
    booking_payload.update(patient_phone="0811", appointment_date="2030-01-01")
    booking_payload["selected_services"].append({"id": "s2", "name": "Laser", "price": "Rp 500.000"})
    second = client.post("/api/bookings", json=booking_payload).json()["data"]
    client.put(f"/api/bookings/{second['id']}/status", json={"status": "completed"}, headers=admin_headers)

    r = client.get("/api/bookings/stats/dashboard", headers=admin_headers)

    assert r.status_code == 200
    stats = r.json()["data"]
    assert stats["total"] == 2
    assert stats["pending"] == 1
    assert stats["today_count"] == 1
    assert stats["total_revenue"] == 650000
    assert first["id"]


def test_dashboard_stats_requires_admin(client):
    assert client.get("/api/bookings/stats/dashboard").status_code == 401


def test_create_booking_rolls_back_on_line_item_failure(booking_payload, monkeypatch):
    """Riga booking e servizi nella stessa transazione: nessun booking orfano."""
    def boom(label):
        raise RuntimeError("parse failure")

    monkeypatch.setattr(services, "parse_price_label", boom)
    with pytest.raises(RuntimeError):
        services.create_booking(
            patient_name="Siti",
            patient_phone="0812",
            patient_address="Jl. B",
            appointment_date=date(2025, 6, 1),
            appointment_time="09:00",
            selected_services=[{"id": "s1", "name": "Facial", "price": "Rp 1"}],
        )

    assert services.list_bookings() == []
