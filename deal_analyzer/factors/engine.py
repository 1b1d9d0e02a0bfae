"""ScoringEngine -- execute les facteurs enregistres et collecte les resultats."""

import logging

from deal_analyzer.errors import FactorError
from deal_analyzer.factors.base import BaseFactor, FactorResult, ScoringContext

logger = logging.getLogger(__name__)


class ScoringEngine:
    """Execute les facteurs dans leur ordre d'enregistrement.

    L'ordre est significatif : il fixe l'ordre des phrases de raisonnement
    dans l'analyse.

    Usage:
        engine = ScoringEngine()
        engine.register(PriceFactor())
        engine.register(MileageFactor())
        results = engine.run_all(ctx)
    """

    def __init__(self):
        self._factors: list[BaseFactor] = []

    def register(self, factor: BaseFactor) -> None:
        """Enregistre un facteur pour execution."""
        self._factors.append(factor)
        logger.debug("Registered factor %s", factor.factor_id)

    @property
    def factor_count(self) -> int:
        return len(self._factors)

    def _execute_factor(self, factor: BaseFactor, ctx: ScoringContext) -> FactorResult:
        """Execute un facteur ; une erreur le neutralise au lieu d'interrompre le scoring."""
        try:
            result = factor.run(ctx)
            logger.debug("Factor %s: delta=%+d", factor.factor_id, result.delta)
            return result
        except FactorError as exc:
            logger.warning("Factor %s raised FactorError: %s", factor.factor_id, exc)
            return factor.neutral(details={"error": str(exc)})
        except (KeyError, ValueError, AttributeError, TypeError) as exc:
            logger.error(
                "Factor %s raised unexpected %s: %s",
                factor.factor_id,
                type(exc).__name__,
                exc,
            )
            return factor.neutral(details={"error": type(exc).__name__, "detail": str(exc)})

    def run_all(self, ctx: ScoringContext) -> list[FactorResult]:
        """Execute tous les facteurs et retourne un FactorResult par facteur, dans l'ordre."""
        if not self._factors:
            logger.warning("No factors registered in engine")
            return []
        results = [self._execute_factor(factor, ctx) for factor in self._factors]
        logger.debug("Engine ran %d factors", len(results))
        return results
