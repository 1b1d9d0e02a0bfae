"""Service de scoring -- calcule le score d'affaire 0-100 d'une annonce face au marche.

Fonction pure : pour une meme annonce, un meme marche et une meme annee de
reference, le resultat (hors horodatage) est identique.
"""

import logging
from datetime import datetime, timezone

from deal_analyzer.errors import InvalidMarketData
from deal_analyzer.factors import (
    AgeFactor,
    BrandReliabilityFactor,
    LocationFactor,
    MarketTrendFactor,
    MileageFactor,
    PriceFactor,
)
from deal_analyzer.factors.base import FactorResult, ScoringContext
from deal_analyzer.factors.engine import ScoringEngine
from deal_analyzer.schemas.analysis import DealAnalysis, PriceAnalysis
from deal_analyzer.schemas.listing import CarListing
from deal_analyzer.schemas.market import MarketComparison

logger = logging.getLogger(__name__)

BASE_SCORE = 50

# (score minimal inclus, recommandation), du plus exigeant au moins exigeant
RECOMMENDATION_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (85, "excellent"),
    (70, "good"),
    (50, "fair"),
)

FINAL_VERDICTS: dict[str, str] = {
    "excellent": (
        "This is an excellent deal! Strong value for the price with favorable "
        "market conditions and good vehicle characteristics."
    ),
    "good": "This is a good deal with fair pricing and reasonable value for your money.",
    "fair": "This is a fair deal, but you might want to negotiate or consider other options.",
    "poor": "This deal may not offer the best value. Consider negotiating or looking elsewhere.",
}

DEFAULT_PROS = ["Vehicle appears to be in good condition"]
DEFAULT_CONS = ["Limited information available"]

# Les pros/cons ne suivent pas l'ordre des raisonnements : l'age passe avant la tendance.
PROS_CONS_ORDER: tuple[str, ...] = ("price", "mileage", "age", "trend", "location", "brand")


def build_engine() -> ScoringEngine:
    """Construit le moteur avec les six facteurs, dans l'ordre des raisonnements."""
    engine = ScoringEngine()
    engine.register(PriceFactor())
    engine.register(MileageFactor())
    engine.register(MarketTrendFactor())
    engine.register(AgeFactor())
    engine.register(LocationFactor())
    engine.register(BrandReliabilityFactor())
    return engine


def build_context(
    listing: CarListing, market: MarketComparison, current_year: int | None = None
) -> ScoringContext:
    """Calcule les ecarts prix/kilometrage une fois pour tous les facteurs.

    Raises:
        InvalidMarketData: prix moyen nul/negatif, aucune annonce similaire
            ou kilometrage moyen nul (division impossible).
    """
    if market.average_price <= 0:
        raise InvalidMarketData(f"Market average price must be positive, got {market.average_price}")

    average_mileage = market.average_mileage
    if average_mileage is None:
        raise InvalidMarketData("Market data has no similar listings to compare mileage against")
    if average_mileage <= 0:
        raise InvalidMarketData("Average mileage of similar listings is zero")

    return ScoringContext(
        listing=listing,
        market=market,
        current_year=current_year or datetime.now(timezone.utc).year,
        percentage_difference=(listing.price - market.average_price) / market.average_price * 100,
        average_mileage=average_mileage,
        mileage_difference=(listing.mileage - average_mileage) / average_mileage * 100,
    )


def calculate_score(results: list[FactorResult]) -> int:
    """Score de base + somme des deltas, borne a [0, 100] et arrondi."""
    raw = BASE_SCORE + sum(r.delta for r in results)
    return max(0, min(100, round(raw)))


def _in_pros_cons_order(results: list[FactorResult]) -> list[FactorResult]:
    """Trie les resultats pour les pros/cons ; un facteur inconnu garde sa place en fin de liste."""
    rank = {factor_id: i for i, factor_id in enumerate(PROS_CONS_ORDER)}
    return sorted(results, key=lambda r: rank.get(r.factor_id, len(PROS_CONS_ORDER)))


def determine_recommendation(score: int) -> str:
    for threshold, recommendation in RECOMMENDATION_THRESHOLDS:
        if score >= threshold:
            return recommendation
    return "poor"


def final_verdict(recommendation: str) -> str:
    return FINAL_VERDICTS[recommendation]


def score_deal(
    listing: CarListing,
    market: MarketComparison,
    current_year: int | None = None,
    engine: ScoringEngine | None = None,
) -> DealAnalysis:
    """Evalue une annonce face a sa reference marche.

    Args:
        listing: Annonce normalisee.
        market: Reference marche de la marque/modele.
        current_year: Annee de reference pour l'age (par defaut l'annee courante UTC).
        engine: Moteur de facteurs (par defaut build_engine()).

    Returns:
        Le DealAnalysis complet.

    Raises:
        InvalidMarketData: Si le marche ne permet pas de calculer les ecarts.
    """
    ctx = build_context(listing, market, current_year)
    results = (engine or build_engine()).run_all(ctx)

    score = calculate_score(results)
    recommendation = determine_recommendation(score)

    reasoning = [sentence for r in results for sentence in r.reasoning]
    ordered = _in_pros_cons_order(results)
    pros = [p for r in ordered for p in r.pros] or list(DEFAULT_PROS)
    cons = [c for r in ordered for c in r.cons] or list(DEFAULT_CONS)

    price_difference = listing.price - market.average_price

    logger.info(
        "Score %s %s: %d/100 (%s) deltas=%s",
        listing.make,
        listing.model,
        score,
        recommendation,
        {r.factor_id: r.delta for r in results},
    )

    return DealAnalysis(
        listing=listing,
        market_comparison=market,
        deal_score=score,
        recommendation=recommendation,
        reasoning=reasoning,
        price_analysis=PriceAnalysis(
            is_overpriced=price_difference > 0,
            price_difference=price_difference,
            percentage_difference=ctx.percentage_difference,
        ),
        pros=pros,
        cons=cons,
        final_verdict=final_verdict(recommendation),
    )
