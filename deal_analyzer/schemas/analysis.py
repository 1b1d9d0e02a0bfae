"""Schemas Pydantic du resultat d'analyse d'une annonce."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field

from deal_analyzer.schemas.common import CamelModel
from deal_analyzer.schemas.listing import CarListing
from deal_analyzer.schemas.market import MarketComparison

Recommendation = Literal["excellent", "good", "fair", "poor"]


class PriceAnalysis(CamelModel):
    is_overpriced: bool
    price_difference: int
    percentage_difference: float


class DealAnalysis(CamelModel):
    """Resultat expose par POST /api/analyze."""

    listing: CarListing
    market_comparison: MarketComparison
    deal_score: int = Field(..., ge=0, le=100)
    recommendation: Recommendation
    reasoning: list[str]
    price_analysis: PriceAnalysis
    pros: list[str]
    cons: list[str]
    final_verdict: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
