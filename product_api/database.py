# product_api/database.py
from __future__ import annotations

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from product_api.core.settings import Settings, mask_url

logger = logging.getLogger(__name__)

_SQLITE_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:", "sqlite+pysqlite:///:memory:"}

# -----------------------------
# Naming convention pentru Alembic/op.f()
# -----------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "%(table_name)s_pkey",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)
Base = declarative_base(metadata=metadata)


# -----------------------------
# Engine factory
# -----------------------------
def _build_engine_kwargs(settings: Settings, url: str) -> dict:
    kwargs: dict = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
    }

    if url.startswith("sqlite"):
        # SQLite: single-thread în driver → dezactivează check_same_thread
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory → StaticPool (altfel fiecare conexiune are DB separat)
        if url in _SQLITE_MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["poolclass"] = NullPool
        return kwargs

    kwargs.update(
        {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_use_lifo": True,
        }
    )
    # Postgres: statement_timeout prin libpq options (NU ca statement)
    if settings.DB_STATEMENT_TIMEOUT_MS:
        kwargs["connect_args"] = {"options": f"-c statement_timeout={int(settings.DB_STATEMENT_TIMEOUT_MS)}"}
    return kwargs


def _enable_case_sensitive_like(engine: Engine) -> None:
    # SQLite: LIKE e case-insensitive implicit; aliniem cu Postgres
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA case_sensitive_like = ON")
        finally:
            cur.close()


def build_engine(settings: Settings, url: str | None = None) -> Engine:
    url = (url or settings.database_url).strip()
    if not url:
        raise RuntimeError("Database URL is empty. Set DATABASE_URL or APP_DB_* variables.")
    engine = create_engine(url, **_build_engine_kwargs(settings, url))
    if engine.dialect.name == "sqlite":
        _enable_case_sensitive_like(engine)
    logger.info("DB engine created (url=%s, dialect=%s)", mask_url(url), engine.dialect.name)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False → obiectele rămân utilizabile după commit (evită re-load imediat)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """
    Creează tabelele din modele (SQLALCHEMY_CREATE_ALL=1).
    Util în dev/test; în producție folosește Alembic.
    """
    from product_api.models import product  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency pentru o sesiune SQLAlchemy închisă garantat.
    Factory-ul vine din app.state (setat de create_app), nu dintr-un singleton global.
    """
    db: Session = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "init_db",
    "get_db",
]
