"""
Client HTTP per l'API Alra Care, usato dal frontend Streamlit e dagli script.

Le letture riuscite vengono copiate in un LocalMirror (file JSON); se la rete
non risponde si ricade sull'ultima copia. Politica di riconciliazione:
last-write-wins, cioè ogni lettura riuscita dal server sovrascrive la copia locale.
Le scritture non vengono mai messe in coda: offline falliscono.
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import requests

logger = logging.getLogger(__name__)

API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8000/api")
DEFAULT_MIRROR_DIR = Path(os.getenv("ALRACARE_MIRROR_DIR", Path.home() / ".alracare" / "mirror"))

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class ApiClientError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class AuthError(ApiClientError, PermissionError):
    """401/403: token assente, non valido o scaduto."""


class LocalMirror:
    """Copia locale durevole dell'ultima lettura riuscita, una chiave per file."""

    def __init__(self, directory: str | Path = DEFAULT_MIRROR_DIR) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def read(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f).get("data")
        except (OSError, ValueError):
            logger.warning("Mirror '%s' illeggibile, ignorato", key)
            return None

    def saved_at(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f).get("saved_at")
        except (OSError, ValueError):
            logger.warning("Mirror '%s' illeggibile, ignorato", key)
            return None

    def write(self, key: str, data: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        payload = {"saved_at": datetime.now(timezone.utc).isoformat(), "data": data}
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
        tmp.replace(path)

    def clear(self, key: str | None = None) -> None:
        if key is not None:
            self._path(key).unlink(missing_ok=True)
            return
        if self.directory.exists():
            for path in self.directory.glob("*.json"):
                path.unlink()


@dataclass(frozen=True)
class Fetched:
    data: Any
    offline: bool = False


class ApiClient:
    def __init__(
        self,
        base_url: str = API_BASE,
        token: str | None = None,
        mirror: LocalMirror | None = None,
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.mirror = mirror
        self.timeout = timeout
        self.http = session or requests.Session()

    # HTTP

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, params: dict | None = None, payload: dict | None = None) -> Any:
        r = self.http.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            params=params,
            json=payload,
            timeout=self.timeout,
        )
        try:
            body = r.json()
        except ValueError:
            body = {}

        if r.status_code in (401, 403):
            raise AuthError(r.status_code, body.get("message") or "Sesi tidak valid")
        if r.status_code >= 400 or not body.get("success", False):
            raise ApiClientError(r.status_code, body.get("message") or getattr(r, "reason", None) or "Error")
        return body.get("data")

    def fetch(self, path: str, mirror_key: str | None = None, params: dict | None = None) -> Fetched:
        """GET con fallback sul mirror locale quando il server non è raggiungibile."""
        key = mirror_key or path
        try:
            data = self.request("GET", path, params=params)
        except (requests.ConnectionError, requests.Timeout):
            if self.mirror is None:
                raise
            cached = self.mirror.read(key)
            if cached is None:
                raise
            logger.warning("API non raggiungibile, uso mirror locale per '%s'", key)
            return Fetched(cached, offline=True)

        if self.mirror is not None:
            self.mirror.write(key, data)
        return Fetched(data)

    # Auth

    def login(self, username: str, password: str) -> dict:
        data = self.request("POST", "/auth/login", payload={"username": username, "password": password})
        self.token = data["token"]
        return data

    def verify(self) -> dict:
        return self.request("GET", "/auth/verify")["user"]

    def logout(self) -> None:
        # token stateless: basta dimenticarlo
        self.token = None

    # Servizi

    def services(self, include_inactive: bool = False) -> Fetched:
        params = {"include_inactive": "true"} if include_inactive else None
        return self.fetch("/services", "services_admin" if include_inactive else "services", params)

    def service(self, service_id: str) -> dict:
        return self.request("GET", f"/services/{service_id}")

    def create_service(self, payload: dict) -> dict:
        return self.request("POST", "/services", payload=payload)

    def update_service(self, service_id: str, fields: dict) -> dict:
        return self.request("PUT", f"/services/{service_id}", payload=fields)

    def delete_service(self, service_id: str) -> None:
        self.request("DELETE", f"/services/{service_id}")

    def create_category(self, payload: dict) -> dict:
        return self.request("POST", "/services/categories", payload=payload)

    def delete_category(self, category_id: str) -> None:
        self.request("DELETE", f"/services/categories/{category_id}")

    # Booking

    def create_booking(self, payload: dict) -> dict:
        return self.request("POST", "/bookings", payload=payload)

    def booking(self, booking_id: str) -> dict:
        return self.request("GET", f"/bookings/{booking_id}")

    def bookings(self, status: str | None = None, date: str | None = None) -> Fetched:
        params = {k: v for k, v in {"status": status, "date": date}.items() if v}
        key = f"bookings_{status or 'all'}_{date or 'all'}" if params else "bookings"
        return self.fetch("/bookings", key, params or None)

    def update_booking_status(self, booking_id: str, status: str) -> dict:
        return self.request("PUT", f"/bookings/{booking_id}/status", payload={"status": status})

    def delete_booking(self, booking_id: str) -> None:
        self.request("DELETE", f"/bookings/{booking_id}")

    def dashboard_stats(self) -> dict:
        return self.request("GET", "/bookings/stats/dashboard")

    # Galleria

    def gallery(self, include_inactive: bool = False) -> Fetched:
        params = {"include_inactive": "true"} if include_inactive else None
        return self.fetch("/gallery", "gallery_admin" if include_inactive else "gallery", params)

    def create_gallery_image(self, payload: dict) -> dict:
        return self.request("POST", "/gallery", payload=payload)

    def update_gallery_image(self, image_id: int, fields: dict) -> dict:
        return self.request("PUT", f"/gallery/{image_id}", payload=fields)

    def delete_gallery_image(self, image_id: int) -> None:
        self.request("DELETE", f"/gallery/{image_id}")

    # Impostazioni

    def settings(self, category: str | None = None) -> Fetched:
        params = {"category": category} if category else None
        return self.fetch("/settings", f"settings_{category}" if category else "settings", params)

    def update_settings(self, values: dict) -> dict:
        return self.request("PUT", "/settings", payload={"settings": values})

    def social_accounts(self) -> Fetched:
        return self.fetch("/settings/social/accounts", "social_accounts")
