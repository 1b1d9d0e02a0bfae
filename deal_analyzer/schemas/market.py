"""Schemas Pydantic des donnees de comparaison marche."""

from typing import Literal

from pydantic import Field, model_validator

from deal_analyzer.schemas.common import CamelModel

MarketTrend = Literal["increasing", "decreasing", "stable"]


class PriceRange(CamelModel):
    min: int
    max: int


class SimilarListing(CamelModel):
    price: int
    mileage: int
    location: str = ""
    url: str = ""


class MarketComparison(CamelModel):
    """Reference marche pour une marque/modele, base du scoring."""

    average_price: int
    price_range: PriceRange
    market_trend: MarketTrend = "stable"
    similar_listings: list[SimilarListing] = Field(default_factory=list)

    @model_validator(mode="after")
    def _average_within_range(self) -> "MarketComparison":
        if not self.price_range.min <= self.average_price <= self.price_range.max:
            raise ValueError(
                f"average_price {self.average_price} outside range "
                f"[{self.price_range.min}, {self.price_range.max}]"
            )
        return self

    @property
    def average_mileage(self) -> float | None:
        """Kilometrage moyen des annonces similaires, None si aucune."""
        if not self.similar_listings:
            return None
        return sum(s.mileage for s in self.similar_listings) / len(self.similar_listings)
