"""Root banner."""

from __future__ import annotations

from flask import Blueprint, Response


web_bp = Blueprint("web", __name__)


@web_bp.get("/")
def index() -> Response:
    return Response("API da Lotofácil está no ar.", mimetype="text/plain")
