"""SQLAlchemy engine + session management.

The engine is created once per app in `init_db` and released in
`dispose_db`. Requests use a session-per-request pattern.
"""

from __future__ import annotations

from flask import Flask, g
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lotofacil_mirror import models  # noqa: F401  (registers tables on Base.metadata)
from lotofacil_mirror.models.base import Base


def create_app_engine(database_url: str) -> Engine:
    url = make_url(database_url)

    # In-memory SQLite must share one connection across sessions and threads.
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    return create_engine(database_url, pool_pre_ping=True, future=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(app: Flask) -> None:
    """Initialize database engine and per-request sessions."""

    engine = create_app_engine(str(app.config["DATABASE_URL"]))
    session_factory = create_session_factory(engine)

    # Production deployments run scripts/create_tables.py; this keeps dev and tests self-contained.
    Base.metadata.create_all(bind=engine)

    app.extensions["engine"] = engine
    app.extensions["session_factory"] = session_factory

    @app.before_request
    def _open_session() -> None:
        g.db = session_factory()  # type: ignore[attr-defined]

    @app.teardown_request
    def _close_session(exc: BaseException | None) -> None:
        session: Session | None = g.pop("db", None)
        if session is None:
            return

        try:
            if exc is None:
                session.commit()
            else:
                session.rollback()
        finally:
            session.close()


def dispose_db(app: Flask) -> None:
    """Release pooled connections held by the app's engine."""

    engine: Engine | None = app.extensions.pop("engine", None)
    app.extensions.pop("session_factory", None)
    if engine is not None:
        engine.dispose()


def get_session() -> Session:
    """Get the current request's SQLAlchemy session."""

    session: Session | None = getattr(g, "db", None)
    if session is None:
        raise RuntimeError("Database session not initialized")
    return session
