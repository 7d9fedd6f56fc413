"""
Core enumerations for the paper-trading engine.

This module provides centralized enumerations for domain concepts
like trading symbols, position sides, trade record types and trading modes.
"""

from .position_types import PositionSide, SignalSide, TradeType
from .symbols import Symbol
from .trading_modes import TradingMode

__all__ = ["Symbol", "TradingMode", "PositionSide", "SignalSide", "TradeType"]
