"""
Core type definitions and utilities.
"""

from .financial import (
    FINANCIAL_DECIMALS,
    ZERO,
    average_entry_price,
    calculate_margin_needed,
    calculate_pnl,
    calculate_quantity,
    round_amount,
)

__all__ = [
    "round_amount",
    "calculate_quantity",
    "calculate_margin_needed",
    "calculate_pnl",
    "average_entry_price",
    "FINANCIAL_DECIMALS",
    "ZERO",
]
