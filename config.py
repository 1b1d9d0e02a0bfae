"""Classes de configuration pour l'application Deal Analyzer."""

import os


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    return int(raw) if raw else None


def _read_version() -> str:
    """Numero de version du fichier VERSION a cote de ce module."""
    try:
        with open(os.path.join(os.path.dirname(__file__), "VERSION")) as f:
            return f.read().strip()
    except FileNotFoundError:
        return "0.0.0"


class Config:
    """Configuration de base (production)."""

    APP_VERSION = _read_version()

    # CORS -- uniquement l'origine du front-end
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")

    # Serveur
    PORT = int(os.environ.get("PORT", "3001"))

    # Recuperation des pages d'annonces
    FETCH_TIMEOUT = float(os.environ.get("FETCH_TIMEOUT", "15"))
    FETCH_MAX_REDIRECTS = int(os.environ.get("FETCH_MAX_REDIRECTS", "5"))
    REQUIRE_LISTING_URL = _env_bool("REQUIRE_LISTING_URL", "true")
    ZYTE_API_KEY = os.environ.get("ZYTE_API_KEY", "")

    # Caches (secondes)
    ANALYSIS_CACHE_TTL = int(os.environ.get("ANALYSIS_CACHE_TTL", str(60 * 60)))
    MARKET_CACHE_TTL = int(os.environ.get("MARKET_CACHE_TTL", str(30 * 60)))
    CACHE_MAX_SIZE = int(os.environ.get("CACHE_MAX_SIZE", "1000"))

    # Graine du generateur aleatoire (None = non deterministe)
    RANDOM_SEED = _env_int("RANDOM_SEED")

    # API externes (optionnelles)
    MARKET_API_URL = os.environ.get("MARKET_API_URL", "")
    MARKET_API_KEY = os.environ.get("MARKET_API_KEY", "")
    MARKET_API_TIMEOUT = float(os.environ.get("MARKET_API_TIMEOUT", "5"))
    LLM_ENABLED = _env_bool("LLM_ENABLED", "false")
    OLLAMA_URL = os.environ.get("OLLAMA_URL", "http://localhost:11434")
    OLLAMA_MODEL = os.environ.get("OLLAMA_MODEL", "mistral")

    # Limitation de debit sur /api/analyze
    ANALYZE_RATE_LIMIT = os.environ.get("ANALYZE_RATE_LIMIT", "30/minute")

    # Journalisation
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevConfig(Config):
    """Configuration de developpement."""

    DEBUG = True
    LOG_LEVEL = "DEBUG"
    CORS_ORIGINS = ["*"]


class TestConfig(Config):
    """Configuration de test."""

    TESTING = True
    RATELIMIT_ENABLED = False
    RANDOM_SEED = 42
    LLM_ENABLED = False
    ZYTE_API_KEY = ""
    MARKET_API_URL = ""
    LOG_LEVEL = "DEBUG"


config_by_name = {
    "development": DevConfig,
    "testing": TestConfig,
    "production": Config,
}
