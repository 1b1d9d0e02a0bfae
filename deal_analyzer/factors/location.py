"""Facteur localisation -- bonus pour les grandes villes recherchees."""

from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext
from deal_analyzer.services.vehicle_catalog import is_desirable_location

LOCATION_BONUS = 5


class LocationFactor(BaseFactor):
    factor_id = "location"

    def run(self, ctx: ScoringContext) -> FactorResult:
        if not is_desirable_location(ctx.listing.location):
            return self.neutral(details={"location": ctx.listing.location})
        return FactorResult(
            factor_id=self.factor_id,
            delta=LOCATION_BONUS,
            pros=["Desirable location"],
            details={"location": ctx.listing.location},
        )
