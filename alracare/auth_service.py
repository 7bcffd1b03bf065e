from __future__ import annotations

import logging

from sqlalchemy import select

from .auth_models import User
from .auth_security import TokenError, create_access_token, decode_token, hash_password
from .db import db_session
from .errors import BadRequest, Conflict, Forbidden, InvalidCredentials, Unauthorized
from .procedures import authenticate_user

logger = logging.getLogger(__name__)


def create_user(username: str, password: str, full_name: str | None = None, role: str = "admin") -> str:
    username = username.strip().lower()
    if not username or not password:
        raise BadRequest("Username dan password harus diisi")

    with db_session() as s:
        exists = s.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if exists:
            raise Conflict("Username sudah terdaftar")

        u = User(username=username, password_hash=hash_password(password), full_name=full_name, role=role)
        s.add(u)
        s.flush()
        return u.id


def login(username: str | None, password: str | None) -> dict:
    """Verifica credenziali tramite la procedura remota ed emette il token (24h)."""
    if not username or not password:
        raise BadRequest("Username dan password harus diisi")

    result = authenticate_user(username, password)
    if not result.success:
        logger.info("Login fallito per '%s'", username)
        raise InvalidCredentials(result.message)

    token = create_access_token({
        "user_id": result.user_id,
        "username": result.username,
        "role": result.role,
    })
    return {
        "token": token,
        "user": {
            "id": result.user_id,
            "username": result.username,
            "full_name": result.full_name,
            "role": result.role,
        },
    }


def extract_bearer(authorization: str | None) -> str | None:
    """'Bearer <token>' -> '<token>'; tollera spazi e virgolette accidentali."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip().strip('"').strip("'")
    return token or None


def verify(authorization: str | None) -> dict:
    """Claims del token: 401 se assente, 403 se firma non valida o scaduto."""
    token = extract_bearer(authorization)
    if not token:
        raise Unauthorized("Token tidak ditemukan")

    try:
        claims = decode_token(token)
    except TokenError:
        raise Forbidden("Token tidak valid atau sudah expired")

    return {
        "id": claims.get("user_id"),
        "username": claims.get("username"),
        "role": claims.get("role"),
    }
