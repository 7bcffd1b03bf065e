"""Fixture condivise: database SQLite in memoria ricreato a ogni test."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SERVICE_DATABASE_URL", None)
os.environ["JWT_SECRET"] = "test-secret"
os.environ["APP_ENV"] = "test"
os.environ.pop("ADMIN_PASSWORD", None)
os.environ.pop("ALLOWED_ORIGINS", None)

import pytest
from fastapi.testclient import TestClient

from alracare import db
from alracare.auth_service import create_user
from alracare.services import create_category, create_service

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "rahasia123"


@pytest.fixture(autouse=True)
def fresh_db():
    db.Base.metadata.drop_all(bind=db.get_engine())
    db.Base.metadata.create_all(bind=db.get_engine())
    yield
    db.Base.metadata.drop_all(bind=db.get_engine())


@pytest.fixture
def client():
    """Create FastAPI test client (senza lifespan: niente seed automatico)."""
    from alracare.api_main import app
    return TestClient(app)


@pytest.fixture
def admin_user():
    return create_user(ADMIN_USERNAME, ADMIN_PASSWORD, full_name="Admin Klinik")


@pytest.fixture
def admin_token(client, admin_user):
    r = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return r.json()["data"]["token"]


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def facial_service():
    create_category("facial", "Facial Treatment", description="Perawatan wajah", type="multiple")
    return create_service("facial", "Facial Basic", "Rp 150.000")


@pytest.fixture
def booking_payload():
    return {
        "patient_name": "Siti Aminah",
        "patient_phone": "081234567890",
        "patient_address": "Jl. A No.1",
        "appointment_date": "2025-06-01",
        "appointment_time": "10:00",
        "selected_services": [{"id": "s1", "name": "Facial", "price": "Rp 150.000"}],
    }
