# product_api/main.py
from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from product_api.core.logging import setup_logging
from product_api.core.settings import Settings, get_settings
from product_api.database import build_engine, build_session_factory, init_db
from product_api.responses import respond_with_error
from product_api.routers.health import router as health_router
from product_api.routers.product import router as products_router

logger = logging.getLogger("product-api")

tags_metadata = [
    {"name": "health", "description": "Liveness/Readiness checks"},
    {"name": "products", "description": "Product CRUD, name search & total price"},
]


# --- Utilitare ---
def _get_req_id_from_headers(request: Request) -> str:
    # Prefer X-Request-ID, apoi X-Correlation-ID; dacă lipsesc, generează unul.
    return (
        request.headers.get("x-request-id")
        or request.headers.get("x-correlation-id")
        or uuid.uuid4().hex[:12]
    )


def _error_headers(request: Request, extra: Optional[dict] = None) -> dict:
    headers = dict(extra or {})
    headers.setdefault("X-Request-ID", _get_req_id_from_headers(request))
    return headers


# --- Middleware ---
async def request_context_mw(request: Request, call_next):
    """
    - Generează/propagă X-Request-ID
    - X-Process-Time / X-App-Version
    """
    req_id = _get_req_id_from_headers(request)
    start = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    response.headers.setdefault("X-Request-ID", req_id)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("X-App-Version", request.app.state.settings.APP_VERSION)
    response.headers.setdefault("X-Process-Time", f"{duration_ms:.1f}ms")
    return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: fără conexiune la DB nu servim (nu există mod degradat)
    engine: Engine = app.state.engine
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("DB startup check FAILED")
        raise
    if app.state.settings.SQLALCHEMY_CREATE_ALL:
        init_db(engine)
        logger.info("Tables created from models (SQLALCHEMY_CREATE_ALL=1)")
    logger.info("DB startup check OK (dialect=%s)", engine.dialect.name)

    yield

    if app.state.owns_engine:
        engine.dispose()


# --- Exception handlers: envelope {"error": ...} peste tot ---
async def _validation_handler(request: Request, exc: RequestValidationError):
    logger.debug("Invalid payload on %s %s: %s", request.method, request.url.path, exc.errors())
    return respond_with_error(
        status.HTTP_400_BAD_REQUEST, "Invalid request payload", headers=_error_headers(request)
    )


# Prinde 404/405 Starlette (rute inexistente, id ne-numeric) și HTTPException din handlere
async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
    return respond_with_error(exc.status_code, str(exc.detail), headers=_error_headers(request, exc.headers))


async def _unhandled_exc_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return respond_with_error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", headers=_error_headers(request)
    )


# --- App factory ---
def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Construiește aplicația o singură dată: settings + engine + session factory
    stau pe app.state și ajung în handlere prin `get_db`. Testele pot injecta
    propriul engine (ex. SQLite in-memory).
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    owns_engine = engine is None
    if engine is None:
        engine = build_engine(settings)

    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.owns_engine = owns_engine
    app.state.session_factory = build_session_factory(engine)

    app.middleware("http")(request_context_mw)

    app.add_exception_handler(RequestValidationError, _validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exc_handler)
    app.add_exception_handler(HTTPException, _http_exc_handler)
    app.add_exception_handler(Exception, _unhandled_exc_handler)

    app.include_router(health_router)
    app.include_router(products_router)
    return app


def run() -> None:
    """Entry point: ascultă pe adresa fixă din settings (implicit 0.0.0.0:8010)."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "product_api.main:create_app",
        factory=True,
        host=settings.LISTEN_HOST,
        port=settings.LISTEN_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
