from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings


def make_engine(url: str) -> Engine:
    kwargs: dict = {"echo": False, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # database in memoria: una sola connessione condivisa
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(settings.database_url)

# Client "elevated": bypassa le restrizioni di riga, usato per le scritture admin.
# Se SERVICE_DATABASE_URL non è impostata si ricade sull'engine standard.
admin_engine: Engine | None = (
    make_engine(settings.service_database_url) if settings.service_database_url else None
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
    expire_on_commit=False,
)
AdminSessionLocal = (
    sessionmaker(bind=admin_engine, autoflush=False, autocommit=False, future=True, expire_on_commit=False)
    if admin_engine is not None
    else SessionLocal
)


class Base(DeclarativeBase):
    """Base ORM per tutti i modelli."""
    pass


def get_engine() -> Engine:
    return engine


@contextmanager
def db_session(elevated: bool = False) -> Iterator[Session]:
    """
    Context manager per gestire correttamente la sessione:
    - commit se tutto ok
    - rollback su eccezioni
    - close sempre
    elevated=True usa il client privilegiato quando configurato.
    """
    factory = AdminSessionLocal if elevated else SessionLocal
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
