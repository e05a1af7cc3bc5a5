"""Lotofácil results mirror (Flask application package)."""

from __future__ import annotations

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS


def create_app(config: type | None = None) -> Flask:
    """Application factory.

    Args:
        config: Config class to load; defaults to the one selected by APP_ENV.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from lotofacil_mirror.clients.caixa_client import init_upstream
    from lotofacil_mirror.config import get_config
    from lotofacil_mirror.db import init_db
    from lotofacil_mirror.error_handlers import register_error_handlers
    from lotofacil_mirror.logging_config import configure_logging
    from lotofacil_mirror.routes.health import health_bp
    from lotofacil_mirror.routes.resultados import resultados_bp
    from lotofacil_mirror.routes.web import web_bp
    from lotofacil_mirror.routes.worker import worker_bp

    app = Flask(__name__)
    app.config.from_object(config or get_config())

    configure_logging(app)
    init_db(app)
    init_upstream(app)
    register_error_handlers(app)

    origins = str(app.config.get("CORS_ORIGINS", "*"))
    CORS(app, origins=origins if origins == "*" else origins.split(","))

    app.register_blueprint(health_bp)
    app.register_blueprint(web_bp)
    app.register_blueprint(resultados_bp, url_prefix="/api")
    app.register_blueprint(worker_bp, url_prefix="/api")

    return app
