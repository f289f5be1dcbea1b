# tests/conftest.py
from __future__ import annotations

from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from product_api.core.settings import Settings
from product_api.database import Base, build_engine, build_session_factory, init_db
from product_api.main import create_app
from product_api.models.product import Product


@pytest.fixture
def settings() -> Settings:
    """Settings izolate de .env / mediu: SQLite in-memory."""
    return Settings(_env_file=None, DATABASE_URL="sqlite://", LOG_LEVEL="WARNING")


@pytest.fixture
def engine(settings: Settings) -> Iterator[Engine]:
    """Engine nou per test → tabel gol, id-uri de la 1 (echivalent clearTable)."""
    eng = build_engine(settings)
    init_db(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def db(engine: Engine) -> Iterator[Session]:
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(settings: Settings, engine: Engine) -> Iterator[TestClient]:
    app = create_app(settings, engine=engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def add_products(engine: Engine):
    """Inserează "Product i" cu preț (i+1)*10."""
    def _add(count: int) -> None:
        count = max(count, 1)
        with build_session_factory(engine)() as s:
            s.add_all(
                Product(name=f"Product {i}", price=Decimal((i + 1) * 10)) for i in range(count)
            )
            s.commit()
    return _add
