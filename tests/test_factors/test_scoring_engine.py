"""Tests for ScoringEngine."""

from deal_analyzer.errors import FactorError
from deal_analyzer.factors.base import BaseFactor, FactorResult
from deal_analyzer.factors.engine import ScoringEngine


class PlusFactor(BaseFactor):
    factor_id = "T1"

    def run(self, ctx):
        return FactorResult(factor_id=self.factor_id, delta=5, reasoning=["plus"])


class MinusFactor(BaseFactor):
    factor_id = "T2"

    def run(self, ctx):
        return FactorResult(factor_id=self.factor_id, delta=-3, reasoning=["minus"])


class ErrorFactor(BaseFactor):
    """Factor that raises FactorError."""

    factor_id = "T3"

    def run(self, ctx):
        raise FactorError("Something went wrong")


class CrashFactor(BaseFactor):
    """Factor that crashes with an unexpected exception."""

    factor_id = "T4"

    def run(self, ctx):
        raise KeyError("missing")


class TestScoringEngine:
    def test_run_all_empty(self, make_ctx):
        assert ScoringEngine().run_all(make_ctx()) == []

    def test_register_and_count(self):
        engine = ScoringEngine()
        engine.register(PlusFactor())
        engine.register(MinusFactor())
        assert engine.factor_count == 2

    def test_results_follow_registration_order(self, make_ctx):
        engine = ScoringEngine()
        engine.register(MinusFactor())
        engine.register(PlusFactor())
        results = engine.run_all(make_ctx())
        assert [r.factor_id for r in results] == ["T2", "T1"]
        assert [r.reasoning[0] for r in results] == ["minus", "plus"]

    def test_factor_error_becomes_neutral(self, make_ctx):
        engine = ScoringEngine()
        engine.register(PlusFactor())
        engine.register(ErrorFactor())
        results = engine.run_all(make_ctx())
        assert len(results) == 2
        assert results[1].factor_id == "T3"
        assert results[1].delta == 0
        assert results[1].details == {"error": "Something went wrong"}

    def test_unexpected_exception_becomes_neutral(self, make_ctx):
        engine = ScoringEngine()
        engine.register(CrashFactor())
        engine.register(MinusFactor())
        results = engine.run_all(make_ctx())
        assert results[0].delta == 0
        assert results[0].details["error"] == "KeyError"
        assert results[1].delta == -3
