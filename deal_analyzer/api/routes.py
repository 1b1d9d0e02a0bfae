"""Definitions des routes API."""

import logging
import traceback
from datetime import datetime, timezone

import httpx
from flask import current_app, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from deal_analyzer.api import api_bp, health_bp
from deal_analyzer.api.errors import error_response
from deal_analyzer.errors import ValidationError
from deal_analyzer.extensions import limiter
from deal_analyzer.schemas.analyze import AnalyzeRequest

logger = logging.getLogger(__name__)


def _analyzer():
    return current_app.extensions["deal_analyzer"]


def _analyze_rate_limit() -> str:
    return current_app.config.get("ANALYZE_RATE_LIMIT", "30/minute")


@health_bp.route("/health", methods=["GET"])
def health():
    """Sonde de sante du service."""
    return jsonify(
        {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": current_app.config.get("APP_VERSION", "0.0.0"),
        }
    )


@api_bp.route("/analyze", methods=["POST"])
@limiter.limit(_analyze_rate_limit)
def analyze():
    """Analyse une annonce de vehicule et retourne le score d'affaire.

    Attend un corps JSON ``{"url": "..."}``. Les erreurs metier
    (NotACarListing, ExtractionFailed, InvalidMarketData) sont converties
    en JSON par les gestionnaires de deal_analyzer.api.errors.
    """
    json_data = request.get_json(silent=True)
    if not isinstance(json_data, dict) or not json_data.get("url"):
        raise ValidationError("URL is required")

    try:
        req = AnalyzeRequest.model_validate(json_data)
    except PydanticValidationError as exc:
        logger.warning("Validation error: %s", exc)
        raise ValidationError("URL must be a non-empty string") from exc

    try:
        analysis = _analyzer().analyze(req.url)
    except (KeyError, ValueError, AttributeError, TypeError, OSError, httpx.HTTPError) as exc:
        logger.error("Unhandled error in /analyze: %s\n%s", exc, traceback.format_exc())
        return error_response(500, "Failed to analyze car deal", str(exc))

    return jsonify({"success": True, "data": analysis.to_json_dict()})


@api_bp.route("/market-data/<make>/<model>", methods=["GET"])
def market_data(make: str, model: str):
    """Reference marche brute pour une marque/modele (debogage)."""
    market = _analyzer().market_data(make, model)
    return jsonify({"success": True, "data": market.to_json_dict()})


@api_bp.route("/cache", methods=["GET"])
def cache_stats():
    return jsonify({"success": True, "data": _analyzer().cache_stats()})


@api_bp.route("/cache", methods=["DELETE"])
def clear_cache():
    """Vide les caches analyse et marche."""
    _analyzer().clear_cache()
    logger.info("Caches cleared via API")
    return jsonify({"success": True, "message": "Cache cleared"})
