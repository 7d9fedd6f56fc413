"""
Unit tests for signal normalization.
"""

import pytest

from perpsim.core.engine.signal_interpreter import DecisionPayload, normalize_signal
from perpsim.core.enums import SignalSide, Symbol
from perpsim.core.models.intent import TradeIntent


class TestNormalizeSignalShapes:
    """Test suite for the two accepted signal shapes."""

    def test_should_normalize_mapping_signal(self) -> None:
        """Test an object keyed by ticker, with lower-case keys."""
        intents = normalize_signal(
            {
                "btc": {"side": "long", "notional": 1000, "leverage": 20, "stop_loss": 95000},
                "ETH": {"side": "HOLD"},
            }
        )

        assert intents[Symbol.BTC] == TradeIntent(
            Symbol.BTC, SignalSide.LONG, notional=1000.0, leverage=20.0, stop_loss=95000.0
        )
        assert intents[Symbol.ETH] == TradeIntent.hold(Symbol.ETH)

    def test_should_normalize_list_signal(self) -> None:
        """Test a list of decisions identified by coin/asset/symbol fields."""
        intents = normalize_signal(
            [
                {"coin": "SOL", "action": "SHORT", "allocation_usd": 300, "take_profit": 150},
                {"asset": "xrp", "direction": "LONG", "size": "200"},
                {"symbol": "DOGEUSDT", "side": "HOLD"},
            ]
        )

        assert set(intents) == {Symbol.SOL, Symbol.XRP, Symbol.DOGE}
        assert intents[Symbol.SOL].side == SignalSide.SHORT
        assert intents[Symbol.SOL].notional == 300.0
        assert intents[Symbol.SOL].profit_target == 150.0
        assert intents[Symbol.XRP].notional == 200.0
        assert intents[Symbol.DOGE].side.is_hold

    def test_should_accept_bare_side_string(self) -> None:
        """Test {"BTC": "HOLD"} shorthand."""
        assert normalize_signal({"BTC": "hold"}) == {Symbol.BTC: TradeIntent.hold(Symbol.BTC)}


class TestNormalizeSignalDegradation:
    """Test suite for malformed input, which degrades instead of raising."""

    @pytest.mark.parametrize("signal", [None, "", [], {}, "LONG BTC", 42, [1, "x", None]])
    def test_should_return_no_intents_for_unusable_signal(self, signal) -> None:
        """Test whole-signal garbage yields an empty mapping."""
        assert normalize_signal(signal) == {}

    def test_should_drop_falsy_and_unknown_entries(self) -> None:
        """Test entries with missing payloads or unsupported symbols are dropped."""
        intents = normalize_signal(
            {
                "BTC": None,
                "ETH": {},
                "LUNA": {"side": "LONG", "notional": 100},
                "SOL": {"side": "LONG", "notional": 100},
            }
        )

        assert list(intents) == [Symbol.SOL]

    def test_should_drop_malformed_decisions(self) -> None:
        """Test invalid sides and non-positive or non-numeric notionals."""
        intents = normalize_signal(
            {
                "BTC": {"side": "BUY", "notional": 100},
                "ETH": {"side": "LONG", "notional": 0},
                "SOL": {"side": "SHORT", "notional": "lots"},
                "XRP": {"side": "LONG"},
                "BNB": {"side": "LONG", "notional": float("nan")},
            }
        )

        assert intents == {}

    def test_should_treat_blank_and_non_positive_levels_as_unset(self) -> None:
        """Test that "", "null" and 0 levels/leverage mean not set."""
        intents = normalize_signal(
            {
                "BTC": {
                    "side": "LONG",
                    "notional": 1000,
                    "leverage": 0,
                    "profit_target": "",
                    "stop_loss": "null",
                }
            }
        )

        intent = intents[Symbol.BTC]
        assert intent.leverage is None
        assert intent.profit_target is None
        assert intent.stop_loss is None
        assert intent.effective_leverage() == 10.0


class TestDecisionPayload:
    """Test suite for the decision payload model."""

    def test_should_ignore_unknown_fields(self) -> None:
        """Test extra LLM fields such as reasoning are ignored."""
        decision = DecisionPayload.model_validate(
            {"side": "short", "notional": 250, "reasoning": "momentum fading", "confidence": 0.7}
        )

        assert decision.side == SignalSide.SHORT
        assert decision.to_intent(Symbol.BNB) == TradeIntent(
            Symbol.BNB, SignalSide.SHORT, notional=250.0
        )
