"""LLM commentary on top of the computed indicators.

The model receives a compact JSON context (latest RSI / MACD / Bollinger
readings plus the synthesized signals) and answers with either a full
analysis or a one-line quick signal. The indicator math never depends on
this module.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional, Sequence

from trendlab.llm.chat_agent import ChatAgent
from trendlab.types import IndicatorBundle, TradingSignal

ACTIONS = ("analyze", "signal")

_SYSTEM_PROMPT = (
    "You are a trading analyst for a {market} dashboard.\n"
    "You receive JSON with the latest technical indicator readings for one "
    "asset and the per-indicator BUY/SELL/NEUTRAL signals derived from them.\n"
    "Base every statement on the provided numbers. Be concise and specific, "
    "and state risk levels explicitly. This is not financial advice."
)

_PROMPTS = {
    "analyze": (
        "Analyze {symbol} using the context below. Provide:\n"
        "1. Market sentiment (bullish/bearish/neutral with confidence %)\n"
        "2. Recommended action (BUY/SELL/HOLD)\n"
        "3. Entry price zone\n"
        "4. Take profit target\n"
        "5. Stop loss level\n"
        "6. Risk/reward ratio\n"
        "7. Which indicators drive this view\n\n"
        "Context:\n{context}"
    ),
    "signal": (
        "Give a quick trading signal for {symbol}: direction, confidence "
        "level, and one sentence of reasoning.\n\nContext:\n{context}"
    ),
}


def build_context(
    symbol: str,
    bundle: IndicatorBundle,
    signals: Sequence[TradingSignal],
) -> Dict[str, Any]:
    """Return the JSON-serializable payload sent to the model."""
    latest: Dict[str, Any] = {}
    if bundle.rsi:
        latest["rsi"] = round(bundle.rsi[-1].value, 2)
    if bundle.macd:
        m = bundle.macd[-1]
        latest["macd"] = {"macd": m.macd, "signal": m.signal, "histogram": m.histogram}
    if bundle.bollinger:
        b = bundle.bollinger[-1]
        latest["bollinger"] = {"upper": b.upper, "middle": b.middle, "lower": b.lower}
        latest["price"] = b.price
        latest["date"] = b.date
    return {
        "symbol": symbol.upper(),
        "latest": latest,
        "signals": [s.as_dict() for s in signals],
    }


class AIAnalyst:
    """Ask a chat model to interpret indicator output.

    Args:
        agent: Chat agent to use; one is created from the environment
            (``OPENAI_API_KEY``) when omitted.
        market: "crypto" or "stocks"; only changes the framing prompt.
        model: Model name for an agent created here.
    """

    def __init__(
        self,
        agent: Optional[ChatAgent] = None,
        market: str = "crypto",
        model: str = "gpt-4o-mini",
    ) -> None:
        label = "cryptocurrency" if market == "crypto" else "stock market"
        self._agent = agent or ChatAgent(system_prompt=_SYSTEM_PROMPT.format(market=label), model=model)

    @property
    def agent(self) -> ChatAgent:
        return self._agent

    def analyze(
        self,
        symbol: str,
        bundle: IndicatorBundle,
        signals: Sequence[TradingSignal],
        action: str = "analyze",
    ) -> str:
        """Return the model's commentary for ``symbol``.

        Raises:
            ValueError: If ``action`` is not "analyze" or "signal".
            RuntimeError: If the chat API call fails.
        """
        if action not in _PROMPTS:
            raise ValueError(f"unknown action {action!r}; expected one of {ACTIONS}")
        context = json.dumps(build_context(symbol, bundle, signals), indent=2)
        prompt = _PROMPTS[action].format(symbol=symbol.upper(), context=context)
        return self._agent.send(prompt)
