"""Fixtures des tests de facteurs : contexte de scoring parametrable."""

import pytest

from deal_analyzer.schemas.listing import CarListing
from deal_analyzer.schemas.market import MarketComparison
from deal_analyzer.services.scoring import build_context

CURRENT_YEAR = 2024


@pytest.fixture()
def make_ctx():
    """Fabrique un ScoringContext neutre (0 sur chaque facteur) a surcharger."""

    def _make(
        price=25000,
        mileage=45000,
        year=2018,
        make="BMW",
        model="3 Series",
        location="Unknown Location",
        trend="stable",
        average_price=25000,
    ):
        listing = CarListing(
            url="https://www.cars.com/vehicledetail/test/",
            title=f"{year} {make} {model}",
            price=price,
            year=year,
            make=make,
            model=model,
            mileage=mileage,
            location=location,
        )
        market = MarketComparison(
            average_price=average_price,
            price_range={"min": int(average_price * 0.8), "max": int(average_price * 1.2)},
            market_trend=trend,
            similar_listings=[
                {"price": average_price, "mileage": 40000},
                {"price": average_price, "mileage": 50000},
            ],
        )
        return build_context(listing, market, current_year=CURRENT_YEAR)

    return _make
