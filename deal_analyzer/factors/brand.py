"""Facteur fiabilite de marque -- (note - 5) x 2 points, note sur 10."""

from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext
from deal_analyzer.services.vehicle_catalog import NEUTRAL_RELIABILITY, reliability_score


class BrandReliabilityFactor(BaseFactor):
    factor_id = "brand"

    def run(self, ctx: ScoringContext) -> FactorResult:
        make = ctx.listing.make
        score = reliability_score(make)
        delta = (score - NEUTRAL_RELIABILITY) * 2
        result = FactorResult(
            factor_id=self.factor_id,
            delta=delta,
            details={"make": make, "reliability_score": score},
        )

        if delta > 0:
            result.reasoning.append(
                f"{make} is known for reliability (rated {score}/10), "
                "which adds value to this vehicle."
            )
            result.pros.append("Reliable brand")
        elif delta < 0:
            result.reasoning.append(
                f"{make} may have reliability concerns (rated {score}/10) "
                "that could affect long-term ownership costs."
            )
            result.cons.append("Brand reliability concerns")
        return result
