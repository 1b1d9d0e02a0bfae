"""Shared pytest fixtures for Deal Analyzer tests."""

import random
from unittest.mock import patch

import httpx
import pytest

from deal_analyzer import create_app
from deal_analyzer.schemas.listing import CarListing
from deal_analyzer.schemas.market import MarketComparison


@pytest.fixture()
def app():
    """Create application for testing (caches neufs a chaque test)."""
    return create_app("testing")


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture(autouse=True)
def _block_network():
    """Empeche tout appel reseau reel dans les tests.

    Les tests qui mockent httpx localement ne sont pas affectes car leur
    patch local prend precedence.
    """
    error = httpx.ConnectError("network disabled in tests")
    with (
        patch("deal_analyzer.services.fetcher.httpx.Client.get", side_effect=error),
        patch("deal_analyzer.services.fetcher.httpx.post", side_effect=error),
        patch("deal_analyzer.services.market_service.httpx.get", side_effect=error),
        patch("deal_analyzer.services.llm_service.httpx.post", side_effect=error),
    ):
        yield


@pytest.fixture()
def rng():
    return random.Random(42)


@pytest.fixture()
def camry_listing():
    return CarListing(
        url="https://www.cars.com/vehicledetail/camry-123/",
        title="2023 Toyota Camry SE",
        price=22500,
        year=2023,
        make="Toyota",
        model="Camry",
        mileage=36000,
        location="Unknown Location",
    )


@pytest.fixture()
def stable_market():
    """Marche de reference : moyenne 25 000, kilometrage moyen 45 000."""
    return MarketComparison(
        average_price=25000,
        price_range={"min": 22000, "max": 28000},
        market_trend="stable",
        similar_listings=[
            {"price": 24500, "mileage": 45000, "location": "Los Angeles, CA", "url": "https://cars.com/listing/1"},
            {"price": 26000, "mileage": 40000, "location": "San Francisco, CA", "url": "https://cars.com/listing/2"},
            {"price": 24500, "mileage": 50000, "location": "San Diego, CA", "url": "https://cars.com/listing/3"},
        ],
    )
