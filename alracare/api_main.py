"""
Gateway HTTP dell'API Alra Care.

- CORS da ALLOWED_ORIGINS (lista o '*')
- log di ogni richiesta
- router per risorsa sotto il prefisso API
- 404 in busta comune per gli endpoint sconosciuti
- handler errori generico (traceback solo fuori produzione)
"""
from __future__ import annotations

import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import auth, bookings, catalog, gallery, settings as settings_router
from .config import Settings, configure_logging, settings
from .errors import ApiError, envelope
from .seed import seed_base
from .services import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Crea tabelle e seed base (idempotente)
    init_db()
    seed_base()
    logger.info("Alra Care API avviata (env=%s)", settings.environment)
    yield
    logger.info("Alra Care API in chiusura")


def create_app(cfg: Settings = settings) -> FastAPI:
    configure_logging(cfg.log_level)

    app = FastAPI(title="Alra Care API", version="1.0.0", lifespan=lifespan)

    # credenziali non ammesse con origine jolly
    wildcard = "*" in cfg.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if wildcard else cfg.allowed_origins,
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=envelope(message=exc.message, success=False))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=envelope(message="Data tidak valid", success=False),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and request.url.path.startswith(cfg.api_prefix + "/"):
            message = "API endpoint not found"
        else:
            message = str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=envelope(message=message, success=False))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unexpected error on %s: %s", request.url.path, exc, exc_info=True)
        body = envelope(message="Internal server error", success=False)
        if not cfg.is_production:
            body["error"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)

    @app.get(f"{cfg.api_prefix}/health", tags=["Health"])
    def health() -> dict:
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": cfg.environment,
        }

    for router in (auth.router, catalog.router, bookings.router, gallery.router, settings_router.router):
        app.include_router(router, prefix=cfg.api_prefix)

    return app


app = create_app()
