"""Service MarketData -- reference marche (prix moyen, fourchette, tendance) par marque/modele.

Cascade : cache (30 min) -> API de prix externe optionnelle -> table de fixtures.
"""

import logging
import math
import random
from typing import Any

import httpx
import numpy as np
from pydantic import ValidationError as PydanticValidationError

from deal_analyzer.errors import ExternalAPIError
from deal_analyzer.schemas.market import MarketComparison
from deal_analyzer.services.cache import TTLCache

logger = logging.getLogger(__name__)

MARKET_CACHE_TTL_SECONDS = 30 * 60
FIXTURE_PRICE_JITTER = 0.10
LISTING_PRICE_JITTER = 0.10
LISTING_MILEAGE_JITTER = 0.15
TREND_THRESHOLD = 0.05

DEFAULT_FIXTURE_KEY = "toyota-camry"

MARKET_FIXTURES: dict[str, dict[str, Any]] = {
    "toyota-camry": {
        "average_price": 25000,
        "price_range": {"min": 22000, "max": 28000},
        "market_trend": "stable",
        "similar_listings": [
            {"price": 24500, "mileage": 45000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/1"},
            {"price": 26000, "mileage": 38000, "location": "San Francisco, CA", "url": "https://cars.com/listing/2"},
            {"price": 23500, "mileage": 52000, "location": "San Diego, CA", "url": "https://cars.com/listing/3"},
        ],
    },
    "honda-civic": {
        "average_price": 22000,
        "price_range": {"min": 19000, "max": 25000},
        "market_trend": "increasing",
        "similar_listings": [
            {"price": 22500, "mileage": 42000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/4"},
            {"price": 21000, "mileage": 48000, "location": "San Francisco, CA", "url": "https://cars.com/listing/5"},
            {"price": 23500, "mileage": 35000, "location": "San Diego, CA", "url": "https://cars.com/listing/6"},
        ],
    },
    "ford-f-150": {
        "average_price": 45000,
        "price_range": {"min": 40000, "max": 50000},
        "market_trend": "decreasing",
        "similar_listings": [
            {"price": 44000, "mileage": 35000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/7"},
            {"price": 46000, "mileage": 28000, "location": "San Francisco, CA", "url": "https://cars.com/listing/8"},
            {"price": 42000, "mileage": 42000, "location": "San Diego, CA", "url": "https://cars.com/listing/9"},
        ],
    },
    "bmw-3-series": {
        "average_price": 35000,
        "price_range": {"min": 30000, "max": 40000},
        "market_trend": "stable",
        "similar_listings": [
            {"price": 34500, "mileage": 38000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/10"},
            {"price": 36000, "mileage": 32000, "location": "San Francisco, CA", "url": "https://cars.com/listing/11"},
            {"price": 33000, "mileage": 45000, "location": "San Diego, CA", "url": "https://cars.com/listing/12"},
        ],
    },
    "honda-accord": {
        "average_price": 24000,
        "price_range": {"min": 21000, "max": 27000},
        "market_trend": "stable",
        "similar_listings": [
            {"price": 23500, "mileage": 40000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/13"},
            {"price": 25000, "mileage": 35000, "location": "San Francisco, CA", "url": "https://cars.com/listing/14"},
            {"price": 23000, "mileage": 48000, "location": "San Diego, CA", "url": "https://cars.com/listing/15"},
        ],
    },
    "toyota-rav4": {
        "average_price": 28000,
        "price_range": {"min": 25000, "max": 32000},
        "market_trend": "increasing",
        "similar_listings": [
            {"price": 27500, "mileage": 42000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/16"},
            {"price": 28500, "mileage": 38000, "location": "San Francisco, CA", "url": "https://cars.com/listing/17"},
            {"price": 27000, "mileage": 45000, "location": "San Diego, CA", "url": "https://cars.com/listing/18"},
        ],
    },
}


def fixture_key(make: str, model: str) -> str:
    """Cle de fixture : 'BMW', '3 Series' -> 'bmw-3-series'."""
    return f"{make.strip().lower()}-{'-'.join(model.strip().lower().split())}"


def determine_market_trend(trend: Any) -> str:
    """Normalise une tendance libre (texte ou variation relative) en increasing/decreasing/stable."""
    if trend is None or isinstance(trend, bool):
        return "stable"
    if isinstance(trend, str):
        lowered = trend.lower()
        if any(word in lowered for word in ("up", "increas", "rising")):
            return "increasing"
        if any(word in lowered for word in ("down", "decreas", "falling")):
            return "decreasing"
        return "stable"
    if isinstance(trend, (int, float)):
        if trend > TREND_THRESHOLD:
            return "increasing"
        if trend < -TREND_THRESHOLD:
            return "decreasing"
    return "stable"


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number: {value!r}")
    return number


def _jitter(rng: random.Random, spread: float) -> float:
    return 1 + rng.uniform(-spread, spread)


class MarketDataProvider:
    """Fournit un MarketComparison pour une marque/modele.

    Usage:
        provider = MarketDataProvider(rng=random.Random(42))
        market = provider.get_market_comparison("Honda", "Civic")
    """

    def __init__(
        self,
        cache: TTLCache | None = None,
        rng: random.Random | None = None,
        api_url: str | None = None,
        api_key: str | None = None,
        api_timeout: float = 5.0,
    ):
        self.cache = cache or TTLCache(MARKET_CACHE_TTL_SECONDS, name="market")
        self.rng = rng or random.Random()
        self.api_url = api_url or None
        self.api_key = api_key or None
        self.api_timeout = api_timeout

    def get_market_comparison(self, make: str, model: str) -> MarketComparison:
        key = f"{make}-{model}".lower()
        return self.cache.get_or_compute(key, lambda: self._load_market(make, model))

    def _load_market(self, make: str, model: str) -> MarketComparison:
        if self.api_url:
            try:
                return self.fetch_external(make, model)
            except ExternalAPIError as exc:
                logger.info("Using fallback data for %s %s: %s", make, model, exc)
        return self.fallback_market_data(make, model)

    def fetch_external(self, make: str, model: str) -> MarketComparison:
        """Interroge l'API de prix configuree.

        Raises:
            ExternalAPIError: API injoignable, statut non-200 ou reponse inexploitable.
        """
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            resp = httpx.get(
                self.api_url,
                params={"make": make, "model": model},
                headers=headers,
                timeout=self.api_timeout,
            )
        except httpx.HTTPError as exc:
            raise ExternalAPIError(f"Market API unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise ExternalAPIError(f"Market API returned {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ExternalAPIError("Market API returned invalid JSON") from exc

        market = self._parse_external(payload)
        logger.info(
            "Market data for %s %s from API: avg=%d trend=%s",
            make,
            model,
            market.average_price,
            market.market_trend,
        )
        return market

    def _parse_external(self, payload: Any) -> MarketComparison:
        """Convertit la reponse de l'API en MarketComparison.

        Raises:
            ExternalAPIError: payload mal forme (types, nombres non finis, champs manquants).
        """
        if not isinstance(payload, dict):
            raise ExternalAPIError("Market API payload is not an object")

        pricing = payload.get("pricing") or {}
        if not isinstance(pricing, dict):
            raise ExternalAPIError("Market API pricing is not an object")
        raw_similar = payload.get("similar") or []
        if not isinstance(raw_similar, list):
            raise ExternalAPIError("Market API similar listings is not a list")

        try:
            similar = [
                {
                    "price": round(_finite(s["price"])),
                    "mileage": round(_finite(s["mileage"])),
                    "location": str(s.get("location") or ""),
                    "url": str(s.get("url") or ""),
                }
                for s in raw_similar
                if isinstance(s, dict) and s.get("price") is not None and s.get("mileage") is not None
            ]
            prices = np.array([s["price"] for s in similar], dtype=float) if similar else None

            average = pricing.get("average")
            low = pricing.get("low")
            high = pricing.get("high")
            if average is None and prices is not None:
                average = float(np.mean(prices))
            if average is None:
                raise ExternalAPIError("Market API payload has no pricing")
            if low is None:
                low = float(np.min(prices)) if prices is not None else average
            if high is None:
                high = float(np.max(prices)) if prices is not None else average

            average = round(_finite(average))
            return MarketComparison(
                average_price=average,
                price_range={
                    "min": min(round(_finite(low)), average),
                    "max": max(round(_finite(high)), average),
                },
                market_trend=determine_market_trend(pricing.get("trend")),
                similar_listings=similar,
            )
        except (PydanticValidationError, TypeError, ValueError, OverflowError) as exc:
            raise ExternalAPIError(f"Market API payload invalid: {exc}") from exc

    def fallback_market_data(self, make: str, model: str) -> MarketComparison:
        """Fixture de la marque/modele (Toyota Camry si inconnue) avec variation aleatoire.

        Un seul facteur +/-10 % est applique a la moyenne et aux bornes, ce qui
        preserve min <= moyenne <= max.
        """
        key = fixture_key(make, model)
        data = MARKET_FIXTURES.get(key)
        if data is None:
            logger.debug("No market fixture for %s, using %s", key, DEFAULT_FIXTURE_KEY)
            data = MARKET_FIXTURES[DEFAULT_FIXTURE_KEY]

        factor = _jitter(self.rng, FIXTURE_PRICE_JITTER)
        return MarketComparison(
            average_price=round(data["average_price"] * factor),
            price_range={
                "min": round(data["price_range"]["min"] * factor),
                "max": round(data["price_range"]["max"] * factor),
            },
            market_trend=data["market_trend"],
            similar_listings=[
                {
                    **listing,
                    "price": round(listing["price"] * _jitter(self.rng, LISTING_PRICE_JITTER)),
                    "mileage": round(listing["mileage"] * _jitter(self.rng, LISTING_MILEAGE_JITTER)),
                }
                for listing in data["similar_listings"]
            ],
        )

    def clear_cache(self) -> None:
        self.cache.clear()
