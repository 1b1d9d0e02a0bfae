"""Facteur age -- ecart entre l'annee de reference et l'annee du modele."""

from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext


def age_delta(age: int) -> int:
    if age <= 1:
        return 8
    if age <= 3:
        return 5
    if age <= 5:
        return 2
    if age >= 10:
        return -8
    if age >= 7:
        return -5
    return 0


class AgeFactor(BaseFactor):
    """Modele recent : jusqu'a +8 ; vehicule de 10 ans ou plus : -8."""

    factor_id = "age"

    def run(self, ctx: ScoringContext) -> FactorResult:
        age = ctx.age
        result = FactorResult(
            factor_id=self.factor_id,
            delta=age_delta(age),
            details={"year": ctx.listing.year, "age": age},
        )

        if age <= 2:
            plural = "" if age == 1 else "s"
            result.reasoning.append(
                f"This is a very recent model year ({age} year{plural} old), "
                "which typically commands a premium."
            )
        elif age >= 8:
            result.reasoning.append(
                f"This is an older model year ({age} years old), which may require "
                "more maintenance and have fewer modern features."
            )

        if age <= 3:
            result.pros.append("Recent model year")
        elif age >= 8:
            result.cons.append("Older model year")
        return result
