"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy.engine import URL


DEFAULT_CAIXA_API_URL = "https://servicebus2.caixa.gov.br/portaldeloterias/api/lotofacil"


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) Build from PG* env vars (common Postgres convention)
      3) Fallback to local sqlite
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    host = os.getenv("PGHOST")
    user = os.getenv("PGUSER")
    database = os.getenv("PGDATABASE")
    port_raw = os.getenv("PGPORT")

    if host and user and database:
        password = os.getenv("PGPASSWORD")
        sslmode = os.getenv("PGSSLMODE", "require")

        try:
            port = int(port_raw) if port_raw else 5432
        except ValueError:
            port = 5432

        query = {"sslmode": sslmode} if sslmode else {}
        url = URL.create(
            drivername="postgresql+psycopg2",
            username=user,
            password=password,
            host=host,
            port=port,
            database=database,
            query=query,
        )
        return url.render_as_string(hide_password=False)

    return "sqlite:///./lotofacil.db"


def _int_from_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_from_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    TESTING: bool = False

    DATABASE_URL: str = resolve_database_url()

    # Upstream results API (CAIXA Portal de Loterias)
    CAIXA_API_URL: str = os.getenv("CAIXA_API_URL", DEFAULT_CAIXA_API_URL).rstrip("/")
    UPSTREAM_TIMEOUT_SECONDS: float = _float_from_env("UPSTREAM_TIMEOUT_SECONDS", 10.0)
    UPSTREAM_RETRIES: int = _int_from_env("UPSTREAM_RETRIES", 3)
    UPSTREAM_BACKOFF: float = _float_from_env("UPSTREAM_BACKOFF", 0.3)

    # Max draws fetched per sync run; 0 disables the cap.
    SYNC_MAX_BACKFILL: int = _int_from_env("SYNC_MAX_BACKFILL", 100)

    RESULTS_DEFAULT_LIMIT: int = _int_from_env("RESULTS_DEFAULT_LIMIT", 10)
    RESULTS_MAX_LIMIT: int = _int_from_env("RESULTS_MAX_LIMIT", 100)

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    """Test configuration: in-memory database, no retries."""

    DEBUG: bool = False
    TESTING: bool = True
    DATABASE_URL: str = "sqlite://"
    CAIXA_API_URL: str = "https://caixa.test/api/lotofacil"
    UPSTREAM_RETRIES: int = 0
    SYNC_MAX_BACKFILL: int = 100
    LOG_LEVEL: str = "WARNING"


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
