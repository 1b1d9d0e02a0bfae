"""Facteur tendance -- un marche en baisse favorise l'acheteur."""

from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext

TREND_DELTA = 8


class MarketTrendFactor(BaseFactor):
    factor_id = "trend"

    def run(self, ctx: ScoringContext) -> FactorResult:
        trend = ctx.market.market_trend
        details = {"market_trend": trend}

        if trend == "decreasing":
            return FactorResult(
                factor_id=self.factor_id,
                delta=TREND_DELTA,
                reasoning=[
                    "Market prices for this model are trending downward, "
                    "making it a favorable time to purchase."
                ],
                pros=["Favorable market conditions"],
                details=details,
            )
        if trend == "increasing":
            return FactorResult(
                factor_id=self.factor_id,
                delta=-TREND_DELTA,
                reasoning=[
                    "Market prices for this model are increasing, "
                    "so waiting might result in higher prices."
                ],
                cons=["Rising market prices"],
                details=details,
            )
        return self.neutral(details=details)
