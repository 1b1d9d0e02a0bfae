"""Fabrique d'application Flask pour le Deal Analyzer."""

import logging
import os

from flask import Flask

from config import config_by_name
from deal_analyzer.extensions import cors, limiter
from deal_analyzer.logging_config import setup_logging
from deal_analyzer.services.analysis_service import build_analyzer

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """Cree et configure l'application Flask.

    Args:
        config_name: Un parmi 'development', 'testing', 'production'.
                     Par defaut, utilise la variable d'env FLASK_ENV ou 'development'.
    """
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    setup_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Initialisation des extensions
    cors.init_app(app, origins=app.config["CORS_ORIGINS"])
    limiter.init_app(app)

    # Headers de securite HTTP
    @app.after_request
    def add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return resp

    # Une seule instance du pipeline par application (caches partages entre requetes)
    app.extensions["deal_analyzer"] = build_analyzer(app.config)

    from deal_analyzer.api import api_bp, health_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(health_bp)

    logger.info("Deal Analyzer app created with config '%s'", config_name)
    return app
