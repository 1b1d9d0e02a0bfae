"""Facteur prix -- compare le prix de l'annonce au prix moyen du marche."""

from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext

# (seuil superieur inclus sur l'ecart en %, delta), parcourus dans l'ordre
PRICE_TIERS: tuple[tuple[float, int], ...] = (
    (-15, 25),
    (-10, 20),
    (-5, 15),
    (0, 10),
    (10, -10),
    (20, -20),
)
OVERPRICED_DELTA = -30


def price_delta(pct: float) -> int:
    for threshold, delta in PRICE_TIERS:
        if pct <= threshold:
            return delta
    return OVERPRICED_DELTA


class PriceFactor(BaseFactor):
    """Ecart de prix relatif au marche, de +25 (bien en dessous) a -30 (bien au-dessus)."""

    factor_id = "price"

    def run(self, ctx: ScoringContext) -> FactorResult:
        pct = ctx.percentage_difference
        magnitude = f"{abs(pct):.1f}%"

        if pct <= -15:
            sentence = (
                f"This vehicle is priced {magnitude} below market average, "
                "representing an exceptional value opportunity."
            )
        elif pct <= -10:
            sentence = (
                f"This vehicle is priced {magnitude} below market average, "
                "making it an attractive deal."
            )
        elif pct <= -5:
            sentence = f"This vehicle is priced {magnitude} below market average, offering good value."
        elif pct >= 15:
            sentence = (
                f"This vehicle is priced {magnitude} above market average, "
                "which significantly reduces its value proposition."
            )
        elif pct >= 10:
            sentence = (
                f"This vehicle is priced {magnitude} above market average, "
                "making it less attractive than similar options."
            )
        elif pct >= 5:
            sentence = (
                f"This vehicle is priced {magnitude} above market average, "
                "which may not be the best value."
            )
        else:
            sentence = f"The price is within {magnitude} of market average, which is reasonable."

        pros: list[str] = []
        cons: list[str] = []
        if pct <= -10:
            pros.append("Significantly below market average")
        elif pct <= -5:
            pros.append("Below market average")
        elif pct >= 10:
            cons.append("Significantly above market average")
        elif pct >= 5:
            cons.append("Above market average")

        return FactorResult(
            factor_id=self.factor_id,
            delta=price_delta(pct),
            reasoning=[sentence],
            pros=pros,
            cons=cons,
            details={
                "price": ctx.listing.price,
                "average_price": ctx.market.average_price,
                "percentage_difference": round(pct, 2),
            },
        )
