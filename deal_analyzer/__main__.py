"""Lancement du serveur de developpement : ``python -m deal_analyzer``."""

import logging

from deal_analyzer import create_app

logger = logging.getLogger(__name__)


def run_server(host: str = "0.0.0.0", port: int | None = None) -> None:
    app = create_app()
    port = port or app.config["PORT"]
    logger.info("Car Deal Analyzer server listening on port %d", port)
    app.run(host=host, port=port, debug=app.config.get("DEBUG", False))


if __name__ == "__main__":
    run_server()
