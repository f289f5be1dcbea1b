# product_api/core/settings.py
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


def mask_url(url: str) -> str:
    """Ascunde parola din URL-ul DB (pentru loguri)."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return url


class Settings(BaseSettings):
    # App
    APP_TITLE: str = "product-api"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Adresa de ascultare (fixă, citită o singură dată)
    LISTEN_HOST: str = "0.0.0.0"
    LISTEN_PORT: int = 8010

    # DB: cele trei credențiale; DATABASE_URL le suprascrie dacă e setat
    APP_DB_USERNAME: str = ""
    APP_DB_PASSWORD: str = ""
    APP_DB_NAME: str = ""
    APP_DB_HOST: str = "localhost"
    APP_DB_PORT: int = 5432
    DATABASE_URL: Optional[str] = Field(None, description="postgresql+psycopg://user:<PASS>@db:5432/appdb")

    # Engine / pool
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 1800  # sec (30 min)
    DB_POOL_TIMEOUT: int = 30    # sec
    DB_STATEMENT_TIMEOUT_MS: Optional[int] = None
    SQLALCHEMY_CREATE_ALL: bool = False

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL and self.DATABASE_URL.strip():
            return self.DATABASE_URL.strip()
        url = URL.create(
            drivername="postgresql+psycopg",
            username=self.APP_DB_USERNAME or None,
            password=self.APP_DB_PASSWORD or None,
            host=self.APP_DB_HOST,
            port=self.APP_DB_PORT,
            database=self.APP_DB_NAME or None,
        )
        return url.render_as_string(hide_password=False)


def get_settings() -> Settings:
    return Settings()
