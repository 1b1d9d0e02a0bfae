"""Facteurs du score d'affaire, executes dans l'ordre par ScoringEngine."""

from deal_analyzer.factors.age import AgeFactor
from deal_analyzer.factors.brand import BrandReliabilityFactor
from deal_analyzer.factors.location import LocationFactor
from deal_analyzer.factors.mileage import MileageFactor
from deal_analyzer.factors.price import PriceFactor
from deal_analyzer.factors.trend import MarketTrendFactor

__all__ = [
    "AgeFactor",
    "BrandReliabilityFactor",
    "LocationFactor",
    "MarketTrendFactor",
    "MileageFactor",
    "PriceFactor",
]
