"""
预测生成

根据报价快照给出 BUY / SELL / HOLD 建议。
RSI 为随机生成的占位信号，并非由历史价格计算；
同一报价多次调用结果可能不同
"""

import random
from typing import Optional

from stockpulse.models.stock import Prediction, PredictionMetrics, Quote, Recommendation

_MACD_LABELS = {
    Recommendation.BUY: "Bullish",
    Recommendation.SELL: "Bearish",
    Recommendation.HOLD: "Neutral",
}


def trend_label(change_percent: float) -> str:
    if change_percent > 1:
        return "Upward"
    if change_percent < -1:
        return "Downward"
    return "Sideways"


class Predictor:
    """随机启发式预测器，rng 可注入以便测试复现"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _draw(self, span: int) -> int:
        """[0, span) 内的随机整数"""
        return int(self.rng.random() * span)

    def predict(self, quote: Quote) -> Prediction:
        rsi = self._draw(100)
        change_pct = quote.change_percent
        price = quote.price

        if rsi < 30 and change_pct < -2:
            prediction = Recommendation.BUY
            confidence = 75 + self._draw(15)
            reasoning = (
                f"Strong buy signal detected. RSI indicates oversold conditions ({rsi}), "
                f"presenting a potential entry point. Recent price decline of {change_pct:.2f}% "
                f"suggests the stock may be undervalued relative to its fundamentals."
            )
            target_price = price * (1 + self.rng.random() * 0.15 + 0.05)
        elif rsi > 70 and change_pct > 2:
            prediction = Recommendation.SELL
            confidence = 70 + self._draw(15)
            reasoning = (
                f"Sell signal identified. RSI shows overbought territory ({rsi}), indicating "
                f"potential downward correction. The recent surge of {change_pct:.2f}% may have "
                f"pushed the stock above sustainable levels."
            )
            target_price = price * (1 - self.rng.random() * 0.10 - 0.03)
        elif abs(change_pct) < 1:
            prediction = Recommendation.HOLD
            confidence = 60 + self._draw(20)
            reasoning = (
                f"Neutral market conditions with RSI at {rsi}. The stock shows stable movement "
                f"with {change_pct:.2f}% change. Consider maintaining current position while "
                f"monitoring for clearer trend signals."
            )
            target_price = price * (1 + (self.rng.random() - 0.5) * 0.05)
        else:
            should_buy = self.rng.random() > 0.5
            prediction = Recommendation.BUY if should_buy else Recommendation.HOLD
            confidence = 55 + self._draw(20)
            if should_buy:
                reasoning = (
                    f"Moderate buy opportunity. Technical indicators show potential for growth "
                    f"with RSI at {rsi}. Market sentiment and price action suggest cautious "
                    f"optimism for upward movement."
                )
            else:
                reasoning = (
                    f"Hold recommended. Mixed signals with RSI at {rsi} and {change_pct:.2f}% "
                    f"change. Wait for stronger confirmation before increasing position."
                )
            target_price = price * (1.08 if should_buy else 1.02)

        return Prediction(
            symbol=quote.symbol,
            prediction=prediction,
            confidence=confidence,
            target_price=target_price,
            reasoning=reasoning,
            metrics=PredictionMetrics(
                rsi=rsi,
                macd=_MACD_LABELS[prediction],
                trend=trend_label(change_pct),
            ),
        )
