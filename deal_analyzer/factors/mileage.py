"""Facteur kilometrage -- compare le kilometrage aux annonces similaires."""

from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext

NOTABLE_MILEAGE_PCT = 20


def mileage_delta(pct: float) -> int:
    if pct <= -30:
        return 15
    if pct <= -20:
        return 10
    if pct <= -10:
        return 5
    if pct >= 30:
        return -15
    if pct >= 20:
        return -10
    if pct >= 10:
        return -5
    return 0


class MileageFactor(BaseFactor):
    """Ecart de kilometrage relatif a la moyenne des annonces similaires (+15 a -15)."""

    factor_id = "mileage"

    def run(self, ctx: ScoringContext) -> FactorResult:
        pct = ctx.mileage_difference
        miles = f"{ctx.listing.mileage:,} miles vs {round(ctx.average_mileage):,} average"

        reasoning: list[str] = []
        pros: list[str] = []
        cons: list[str] = []
        if pct <= -30:
            reasoning.append(
                f"With {abs(pct):.1f}% fewer miles than similar vehicles ({miles}), "
                "this car shows significantly less wear and tear."
            )
        elif pct <= -NOTABLE_MILEAGE_PCT:
            reasoning.append(
                f"With {abs(pct):.1f}% fewer miles than similar vehicles ({miles}), "
                "this car shows less wear and tear."
            )
        elif pct >= 30:
            reasoning.append(
                f"This vehicle has {pct:.1f}% more miles than similar listings ({miles}), "
                "which may affect its long-term reliability."
            )
        elif pct >= NOTABLE_MILEAGE_PCT:
            reasoning.append(
                f"This vehicle has {pct:.1f}% more miles than similar listings ({miles}), "
                "which may impact its value."
            )

        if pct <= -NOTABLE_MILEAGE_PCT:
            pros.append("Low mileage for its age")
        elif pct >= NOTABLE_MILEAGE_PCT:
            cons.append("High mileage for its age")

        return FactorResult(
            factor_id=self.factor_id,
            delta=mileage_delta(pct),
            reasoning=reasoning,
            pros=pros,
            cons=cons,
            details={
                "mileage": ctx.listing.mileage,
                "average_mileage": round(ctx.average_mileage),
                "mileage_difference": round(pct, 2),
            },
        )
