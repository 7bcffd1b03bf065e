from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Errore applicativo con status HTTP e messaggio già localizzato per il client."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    default_message = "Data tidak lengkap"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Token tidak ditemukan"


class InvalidCredentials(Unauthorized):
    default_message = "Username atau password salah"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Token tidak valid atau sudah expired"


class NotFound(ApiError):
    status_code = 404
    default_message = "Data tidak ditemukan"


class Conflict(ApiError):
    status_code = 409
    default_message = "Data sudah ada"


class UpstreamFailure(ApiError):
    status_code = 500
    default_message = "Error database"


class InternalError(ApiError):
    status_code = 500


def envelope(data: Any = None, message: str | None = None, success: bool = True) -> dict[str, Any]:
    """Busta di risposta comune: {success, message?, data?}."""
    body: dict[str, Any] = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


@contextmanager
def upstream(message: str) -> Iterator[None]:
    """Converte un errore del database in UpstreamFailure senza esporre il dettaglio."""
    try:
        yield
    except SQLAlchemyError:
        logger.exception("Upstream failure: %s", message)
        raise UpstreamFailure(message)
