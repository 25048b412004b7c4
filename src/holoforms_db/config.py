"""Database configuration — reads connection parameters from environment.

Supports two modes:
1. A single ``DATABASE_URL`` env var (takes precedence).
2. Individual ``PG_HOST``, ``PG_PORT``, ``PG_USER``, ``PG_PASSWORD``,
   ``PG_DATABASE`` env vars (convenient for docker-compose).

``get_sync_url()`` feeds Alembic, ``get_async_url()`` and
``get_pool_settings()`` the asyncpg engine.
"""

import os


def _build_url_from_parts() -> str:
    host = os.getenv("PG_HOST", "localhost")
    port = os.getenv("PG_PORT", "5432")
    user = os.getenv("PG_USER", "holoforms")
    password = os.getenv("PG_PASSWORD", "holoforms")
    database = os.getenv("PG_DATABASE", "holoforms")
    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


def get_sync_url() -> str:
    """Return a synchronous connection URL for Alembic migrations."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url.replace("postgresql+asyncpg://", "postgresql://")
    return _build_url_from_parts()


def get_async_url() -> str:
    """Return an asyncpg connection URL for the async SQLAlchemy engine."""
    url = os.getenv("DATABASE_URL") or _build_url_from_parts()
    if url.startswith("postgres://"):
        # Hosted providers often hand out the short scheme
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def get_pool_settings() -> dict:
    """Keyword arguments for ``create_async_engine``.

    ``PG_POOL_SIZE`` / ``PG_MAX_OVERFLOW`` size the pool, ``PG_POOL_RECYCLE``
    (seconds) retires connections before hosted poolers drop them, and
    ``PG_ECHO=1`` logs every statement.
    """
    return {
        "pool_size": int(os.getenv("PG_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("PG_MAX_OVERFLOW", "10")),
        "pool_recycle": int(os.getenv("PG_POOL_RECYCLE", "1800")),
        "pool_pre_ping": True,
        "echo": os.getenv("PG_ECHO", "").lower() in ("1", "true", "yes"),
    }
