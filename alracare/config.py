from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATABASE_URL = f"sqlite:///{PROJECT_ROOT / 'alracare.sqlite'}"


def _split_origins(raw: str | None) -> list[str]:
    if not raw:
        return ["*"]
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    service_database_url: str | None = None
    jwt_secret: str = "CHANGE_ME_DEV_SECRET"
    jwt_expire_hours: int = 24
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    environment: str = "development"
    log_level: str = "INFO"
    api_prefix: str = "/api"
    admin_username: str = "admin"
    admin_password: str | None = None
    admin_full_name: str = "Administrator"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    """Legge l'ambiente una sola volta; il risultato è immutabile."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        service_database_url=os.getenv("SERVICE_DATABASE_URL") or None,
        # In produzione: mettila in variabile d'ambiente
        jwt_secret=os.getenv("JWT_SECRET", "CHANGE_ME_DEV_SECRET"),
        jwt_expire_hours=int(os.getenv("JWT_EXPIRE_HOURS", "24")),
        allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS")),
        environment=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        api_prefix=os.getenv("API_PREFIX", "/api").rstrip("/"),
        admin_username=os.getenv("ADMIN_USERNAME", "admin"),
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
        admin_full_name=os.getenv("ADMIN_FULL_NAME", "Administrator"),
    )


settings = load_settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
