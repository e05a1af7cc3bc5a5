"""Health check routes."""

from __future__ import annotations

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lotofacil_mirror.db import get_session
from lotofacil_mirror.utils.responses import fail, ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Liveness plus a trivial database round-trip."""

    try:
        get_session().execute(text("SELECT 1"))
    except SQLAlchemyError:
        return fail("database_unavailable", "Database unavailable", 503)

    return ok({"status": "ok"})
