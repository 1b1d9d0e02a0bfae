"""Tests for market_service -- reference marche par marque/modele."""

import random
from unittest.mock import MagicMock, patch

import httpx
import pytest

from deal_analyzer.errors import ExternalAPIError
from deal_analyzer.services.cache import TTLCache
from deal_analyzer.services.market_service import (
    MARKET_FIXTURES,
    MarketDataProvider,
    determine_market_trend,
    fixture_key,
)


def _response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


class TestHelpers:
    def test_fixture_key(self):
        assert fixture_key("BMW", "3 Series") == "bmw-3-series"
        assert fixture_key("Ford", "F-150") == "ford-f-150"
        assert fixture_key(" Toyota ", "RAV4") == "toyota-rav4"

    @pytest.mark.parametrize(
        "trend, expected",
        [
            ("up", "increasing"),
            ("Increasing", "increasing"),
            ("prices rising", "increasing"),
            ("down", "decreasing"),
            ("falling", "decreasing"),
            ("flat", "stable"),
            (0.12, "increasing"),
            (-0.2, "decreasing"),
            (0.01, "stable"),
            (None, "stable"),
        ],
    )
    def test_determine_market_trend(self, trend, expected):
        assert determine_market_trend(trend) == expected


class TestFallbackMarketData:
    def test_known_fixture_with_jitter(self):
        provider = MarketDataProvider(rng=random.Random(42))
        market = provider.fallback_market_data("Honda", "Civic")
        assert 22000 * 0.9 <= market.average_price <= 22000 * 1.1
        assert market.price_range.min <= market.average_price <= market.price_range.max
        assert market.market_trend == "increasing"
        assert len(market.similar_listings) == 3
        for listing, base in zip(market.similar_listings, MARKET_FIXTURES["honda-civic"]["similar_listings"]):
            assert base["mileage"] * 0.85 <= listing.mileage <= base["mileage"] * 1.15
            assert listing.location == base["location"]

    def test_unknown_model_uses_camry(self):
        market = MarketDataProvider(rng=random.Random(1)).fallback_market_data("Rivian", "R1T")
        assert 25000 * 0.9 <= market.average_price <= 25000 * 1.1
        assert market.similar_listings[0].url == "https://cars.com/listing/1"

    def test_seeded_rng_is_reproducible(self):
        first = MarketDataProvider(rng=random.Random(5)).fallback_market_data("Ford", "F-150")
        second = MarketDataProvider(rng=random.Random(5)).fallback_market_data("Ford", "F-150")
        assert first == second
        assert first.market_trend == "decreasing"


class TestGetMarketComparison:
    def test_cached_per_make_model(self):
        provider = MarketDataProvider(rng=random.Random(3))
        first = provider.get_market_comparison("Toyota", "Camry")
        second = provider.get_market_comparison("TOYOTA", "camry")
        assert first is second
        assert provider.cache.stats()["keys"] == ["toyota-camry"]

    def test_clear_cache(self):
        provider = MarketDataProvider(rng=random.Random(3))
        provider.get_market_comparison("Toyota", "Camry")
        provider.clear_cache()
        assert len(provider.cache) == 0

    def test_expired_entry_is_recomputed(self):
        now = [0.0]
        cache = TTLCache(1800, clock=lambda: now[0], name="market")
        provider = MarketDataProvider(cache=cache, rng=random.Random(3))
        first = provider.get_market_comparison("Honda", "Accord")
        now[0] = 1800.0
        second = provider.get_market_comparison("Honda", "Accord")
        assert first is not second

    def test_without_api_url_does_not_call_network(self):
        provider = MarketDataProvider(rng=random.Random(3))
        with patch("deal_analyzer.services.market_service.httpx.get") as mock_get:
            provider.get_market_comparison("Honda", "Civic")
        mock_get.assert_not_called()


class TestExternalAPI:
    def _provider(self):
        return MarketDataProvider(
            rng=random.Random(3), api_url="https://pricing.test/v1/market", api_key="secret"
        )

    def test_uses_api_pricing(self):
        payload = {
            "pricing": {"average": 23900, "low": 21000, "high": 26500, "trend": "down"},
            "similar": [
                {"price": 23000, "mileage": 41000, "location": "Denver, CO", "url": "https://x/1"},
                {"price": 24800, "mileage": 39000},
            ],
        }
        with patch(
            "deal_analyzer.services.market_service.httpx.get", return_value=_response(200, payload)
        ) as mock_get:
            market = self._provider().get_market_comparison("Honda", "Civic")

        assert market.average_price == 23900
        assert (market.price_range.min, market.price_range.max) == (21000, 26500)
        assert market.market_trend == "decreasing"
        assert len(market.similar_listings) == 2
        assert market.similar_listings[1].location == ""
        kwargs = mock_get.call_args.kwargs
        assert kwargs["params"] == {"make": "Honda", "model": "Civic"}
        assert kwargs["headers"] == {"Authorization": "Bearer secret"}

    def test_derives_statistics_from_similar_listings(self):
        payload = {
            "similar": [
                {"price": 20000, "mileage": 50000},
                {"price": 22000, "mileage": 40000},
                {"price": 27000, "mileage": 30000},
            ]
        }
        with patch(
            "deal_analyzer.services.market_service.httpx.get", return_value=_response(200, payload)
        ):
            market = self._provider().fetch_external("Honda", "Accord")

        assert market.average_price == 23000
        assert (market.price_range.min, market.price_range.max) == (20000, 27000)
        assert market.market_trend == "stable"

    def test_error_status_raises(self):
        with patch(
            "deal_analyzer.services.market_service.httpx.get", return_value=_response(503)
        ):
            with pytest.raises(ExternalAPIError):
                self._provider().fetch_external("Honda", "Civic")

    def test_payload_without_prices_raises(self):
        with patch(
            "deal_analyzer.services.market_service.httpx.get",
            return_value=_response(200, {"pricing": {}, "similar": []}),
        ):
            with pytest.raises(ExternalAPIError):
                self._provider().fetch_external("Honda", "Civic")

    def test_falls_back_to_fixtures_on_api_failure(self):
        with patch(
            "deal_analyzer.services.market_service.httpx.get",
            side_effect=httpx.ConnectError("refused"),
        ):
            market = self._provider().get_market_comparison("Honda", "Civic")
        assert market.market_trend == "increasing"
        assert 22000 * 0.9 <= market.average_price <= 22000 * 1.1

    @pytest.mark.parametrize(
        "payload",
        [
            {"pricing": {}, "similar": [{"price": "call us", "mileage": 1000}]},
            {"pricing": "n/a", "similar": [{"price": 20000, "mileage": 1000}]},
            {"pricing": {"average": 21000}, "similar": [{"price": 20000, "mileage": {"km": 5}}]},
            {"pricing": {"average": float("nan")}},
            {"pricing": {"average": 21000}, "similar": "none"},
        ],
    )
    def test_malformed_payload_raises(self, payload):
        with patch(
            "deal_analyzer.services.market_service.httpx.get", return_value=_response(200, payload)
        ):
            with pytest.raises(ExternalAPIError):
                self._provider().fetch_external("Toyota", "Camry")

    def test_malformed_payload_falls_back_to_fixtures(self):
        payload = {"pricing": {}, "similar": [{"price": "call us", "mileage": 1000}]}
        with patch(
            "deal_analyzer.services.market_service.httpx.get", return_value=_response(200, payload)
        ):
            market = self._provider().get_market_comparison("Toyota", "Camry")
        assert market.market_trend == "stable"
        assert 25000 * 0.9 <= market.average_price <= 25000 * 1.1
        assert len(market.similar_listings) == 3
