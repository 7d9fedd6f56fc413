"""
Unit tests for market data resolution.
"""

import pytest

from perpsim.core.enums import Symbol
from perpsim.core.models.market import MarketSnapshot, Ticker


class TestMarketSnapshotPayloads:
    """Test suite for MarketSnapshot.from_payload."""

    def test_should_read_binance_section(self) -> None:
        """Test the nested binance shape with 24h stats."""
        snapshot = MarketSnapshot.from_payload(
            {
                "binance": {
                    "BTC": {
                        "price": 100000,
                        "volume24h": 1.5e9,
                        "change24h": -1.2,
                        "high24h": 102000,
                        "low24h": 98000,
                    }
                }
            }
        )

        assert snapshot.price(Symbol.BTC) == 100000.0
        assert snapshot.tickers[Symbol.BTC] == Ticker(
            price=100000.0, volume_24h=1.5e9, change_24h=-1.2, high_24h=102000.0, low_24h=98000.0
        )

    def test_should_read_flat_shapes(self) -> None:
        """Test {SYM: {price}} and {SYM: price} shapes with any key casing."""
        snapshot = MarketSnapshot.from_payload({"eth": {"price": "4000.5"}, "SOL": 150})

        assert snapshot.prices() == {Symbol.ETH: 4000.5, Symbol.SOL: 150.0}

    def test_should_read_coinmarketcap_section(self) -> None:
        """Test the coinmarketcap quote shape."""
        snapshot = MarketSnapshot.from_payload(
            {"coinmarketcap": {"XRP": {"quote": {"USD": {"price": 2.5, "percent_change_24h": 3.0}}}}}
        )

        assert snapshot.price(Symbol.XRP) == 2.5
        assert snapshot.tickers[Symbol.XRP].change_24h == 3.0

    def test_should_prefer_binance_over_other_sources(self) -> None:
        """Test per-symbol source priority."""
        snapshot = MarketSnapshot.from_payload(
            {
                "binance": {"BTC": {"price": 100000}},
                "BTC": {"price": 1},
                "ETH": {"price": 4000},
                "coinmarketcap": {
                    "ETH": {"quote": {"USD": {"price": 1}}},
                    "BNB": {"quote": {"USD": {"price": 600}}},
                },
            }
        )

        assert snapshot.prices() == {Symbol.BTC: 100000.0, Symbol.ETH: 4000.0, Symbol.BNB: 600.0}

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "prices",
            [],
            {"BTC": {"price": 0}},
            {"BTC": {"price": None}},
            {"BTC": {"last": 100}},
            {"binance": "down"},
            {"LUNA": {"price": 1}},
        ],
    )
    def test_should_leave_out_unpriced_symbols(self, payload) -> None:
        """Test malformed payloads give an empty snapshot."""
        snapshot = MarketSnapshot.from_payload(payload)

        assert len(snapshot) == 0
        assert Symbol.BTC not in snapshot
        assert snapshot.price(Symbol.BTC) is None

    def test_should_build_from_plain_prices(self) -> None:
        """Test the from_prices convenience constructor."""
        snapshot = MarketSnapshot.from_prices({Symbol.BTC: 100000.0, "doge": 0.12})

        assert snapshot.prices() == {Symbol.BTC: 100000.0, Symbol.DOGE: 0.12}
