from __future__ import annotations

from fastapi import Header

from ..auth_service import verify
from ..errors import ApiError, Forbidden


# Dipendenze auth

def get_current_user(authorization: str | None = Header(default=None)) -> dict:
    return verify(authorization)


def require_admin(authorization: str | None = Header(default=None)) -> dict:
    user = verify(authorization)
    if user.get("role") != "admin":
        raise Forbidden("Akses ditolak")
    return user


def optional_admin(authorization: str | None = Header(default=None)) -> dict | None:
    """Utente admin se il token è presente e valido, altrimenti None (accesso pubblico)."""
    if not authorization:
        return None
    try:
        user = verify(authorization)
    except ApiError:
        return None
    return user if user.get("role") == "admin" else None
