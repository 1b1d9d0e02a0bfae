"""Configuration de la journalisation pour le Deal Analyzer.

Un seul handler console sur le logger racine. Les clients HTTP (httpx,
httpcore) loguent chaque requete sortante ; ils sont ramenes a WARNING pour
que les logs restent centres sur l'analyse.
"""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO") -> None:
    """Configure le logger racine de l'application (idempotent)."""
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
