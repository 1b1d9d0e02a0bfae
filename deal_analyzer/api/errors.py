"""Gestionnaires d'erreurs API -- retournent du JSON, n'exposent jamais les stack traces."""

import logging

from flask import jsonify, request

from deal_analyzer.api import api_bp
from deal_analyzer.errors import (
    DealAnalyzerError,
    ExtractionFailed,
    InvalidMarketData,
    NotACarListing,
    ValidationError,
)
from deal_analyzer.schemas.common import APIResponse

logger = logging.getLogger(__name__)

NOT_A_LISTING_HINT = (
    "Please make sure the URL points to a specific car listing page, not a search "
    "results page or homepage."
)


def error_response(status: int, error: str, details: str | None = None, **extra):
    body = APIResponse(success=False, error=error, details=details).model_dump(exclude_none=True)
    body.update(extra)
    return jsonify(body), status


@api_bp.errorhandler(ValidationError)
def handle_validation_error(exc):
    logger.warning("Validation error: %s", exc)
    return error_response(400, str(exc))


@api_bp.errorhandler(NotACarListing)
@api_bp.errorhandler(ExtractionFailed)
def handle_listing_not_found(exc):
    url = (request.get_json(silent=True) or {}).get("url")
    logger.info("Listing not usable (%s): %s", type(exc).__name__, url)
    return error_response(404, str(exc), NOT_A_LISTING_HINT, url=url)


@api_bp.errorhandler(InvalidMarketData)
def handle_invalid_market_data(exc):
    logger.error("Invalid market data: %s", exc)
    return error_response(500, "Failed to analyze car deal", str(exc))


@api_bp.errorhandler(DealAnalyzerError)
def handle_deal_analyzer_error(exc):
    logger.error("Deal analyzer error: %s", exc)
    return error_response(500, "Failed to analyze car deal", str(exc))


@api_bp.errorhandler(404)
def handle_not_found(exc):
    return error_response(404, "Route not found")


@api_bp.errorhandler(429)
def handle_rate_limited(exc):
    logger.warning("Rate limit exceeded: %s", exc)
    return error_response(429, "Too many requests", str(exc.description))


@api_bp.errorhandler(500)
def handle_internal_error(exc):
    original = getattr(exc, "original_exception", None)
    logger.error("Unhandled error: %s", original or exc)
    details = "Unexpected server error"
    if original is not None:
        details = f"{type(original).__name__}: {original}"
    return error_response(500, "Internal server error", details)
