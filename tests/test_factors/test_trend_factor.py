"""Tests for MarketTrendFactor."""

from deal_analyzer.factors.trend import MarketTrendFactor


def test_decreasing_market_favors_buyer(make_ctx):
    result = MarketTrendFactor().run(make_ctx(trend="decreasing"))
    assert result.delta == 8
    assert result.pros == ["Favorable market conditions"]
    assert "trending downward" in result.reasoning[0]


def test_increasing_market(make_ctx):
    result = MarketTrendFactor().run(make_ctx(trend="increasing"))
    assert result.delta == -8
    assert result.cons == ["Rising market prices"]
    assert len(result.reasoning) == 1


def test_stable_market_is_neutral(make_ctx):
    result = MarketTrendFactor().run(make_ctx(trend="stable"))
    assert result.delta == 0
    assert result.reasoning == []
    assert result.details == {"market_trend": "stable"}
