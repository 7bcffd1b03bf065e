from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import settings

JWT_ALG = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
    """Token con firma non valida, malformato o scaduto."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(claims: dict[str, Any], expires_in: timedelta | None = None) -> str:
    """
    claims: user_id, username, role.
    Scadenza di default: JWT_EXPIRE_HOURS (24h). Nessuna sessione lato server,
    il logout è solo lato client; la rotazione avviene rifacendo il login.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_in or timedelta(hours=settings.jwt_expire_hours))

    payload: dict[str, Any] = dict(claims)
    payload.update({
        "sub": str(claims.get("user_id", "")),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    })
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG])
    except ExpiredSignatureError as e:
        raise TokenError("expired") from e
    except JWTError as e:
        raise TokenError("invalid") from e
