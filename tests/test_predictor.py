"""Tests for stockpulse.services.predictor."""

from __future__ import annotations

import random
from typing import Iterable

import pytest

from stockpulse.models.stock import Quote, Recommendation
from stockpulse.services.predictor import Predictor, trend_label


class ScriptedRandom(random.Random):
    """Returns the given values from ``random()`` in order."""

    def __init__(self, values: Iterable[float]) -> None:
        super().__init__(0)
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


def _quote(change_percent: float, price: float = 100.0) -> Quote:
    return Quote(symbol="AAPL", name="AAPL", price=price, change_percent=change_percent)


def test_oversold_decline_is_buy() -> None:
    # rsi draw, confidence draw, target draw
    predictor = Predictor(ScriptedRandom([0.10, 0.5, 0.0]))
    result = predictor.predict(_quote(-3.0))

    assert result.prediction == Recommendation.BUY
    assert result.metrics.rsi == 10
    assert result.confidence == 82
    assert result.target_price == pytest.approx(105.0)
    assert "oversold" in result.reasoning
    assert "-3.00%" in result.reasoning
    assert result.metrics.macd == "Bullish"
    assert result.metrics.trend == "Downward"


def test_overbought_surge_is_sell() -> None:
    predictor = Predictor(ScriptedRandom([0.80, 0.0, 0.5]))
    result = predictor.predict(_quote(3.0))

    assert result.prediction == Recommendation.SELL
    assert result.metrics.rsi == 80
    assert result.confidence == 70
    assert result.target_price == pytest.approx(92.0)
    assert "overbought" in result.reasoning
    assert result.metrics.macd == "Bearish"
    assert result.metrics.trend == "Upward"


def test_flat_change_is_hold() -> None:
    predictor = Predictor(ScriptedRandom([0.50, 0.99, 0.5]))
    result = predictor.predict(_quote(0.5))

    assert result.prediction == Recommendation.HOLD
    assert result.confidence == 79
    assert result.target_price == pytest.approx(100.0)
    assert "0.50% change" in result.reasoning
    assert result.metrics.macd == "Neutral"
    assert result.metrics.trend == "Sideways"


def test_flat_change_wins_over_low_rsi() -> None:
    # rsi 10 but the decline is not steep enough for the BUY rule
    predictor = Predictor(ScriptedRandom([0.10, 0.0, 0.5]))
    assert predictor.predict(_quote(-0.5)).prediction == Recommendation.HOLD


def test_mixed_signals_coin_flip_buy() -> None:
    predictor = Predictor(ScriptedRandom([0.50, 0.9, 0.0]))
    result = predictor.predict(_quote(1.5))

    assert result.prediction == Recommendation.BUY
    assert result.confidence == 55
    assert result.target_price == pytest.approx(108.0)
    assert "Moderate buy" in result.reasoning


def test_mixed_signals_coin_flip_hold() -> None:
    predictor = Predictor(ScriptedRandom([0.10, 0.2, 0.99]))
    result = predictor.predict(_quote(-1.5))

    assert result.prediction == Recommendation.HOLD
    assert result.confidence == 74
    assert result.target_price == pytest.approx(102.0)
    assert result.metrics.trend == "Downward"


@pytest.mark.parametrize(
    "change, expected",
    [(1.01, "Upward"), (1.0, "Sideways"), (-1.0, "Sideways"), (-1.01, "Downward")],
)
def test_trend_thresholds(change: float, expected: str) -> None:
    assert trend_label(change) == expected


def test_seeded_predictor_is_reproducible() -> None:
    quote = _quote(-2.5)
    first = [Predictor(random.Random(7)).predict(quote) for _ in range(3)]
    second = [Predictor(random.Random(7)).predict(quote) for _ in range(3)]
    assert first == second


@pytest.mark.parametrize("change", [-8.0, -2.5, -1.5, 0.0, 0.9, 1.5, 2.5, 8.0])
def test_prediction_bounds_hold_for_any_draw(change: float) -> None:
    predictor = Predictor(random.Random(2024))
    for _ in range(200):
        result = predictor.predict(_quote(change, price=12.34))
        assert result.prediction in set(Recommendation)
        assert 0 <= result.confidence <= 100
        assert result.target_price > 0
        assert 0 <= result.metrics.rsi < 100
