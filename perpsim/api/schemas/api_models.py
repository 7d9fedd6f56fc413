"""
Pydantic schemas for API request/response models.
"""

from typing import Any

from pydantic import BaseModel, Field

from perpsim.core.constants import MAX_INITIAL_BALANCE


class ExecuteRequest(BaseModel):
    """Request model for one simulation cycle."""

    signal: list[dict[str, Any]] | dict[str, Any] = Field(
        ..., description="Per-asset decisions, as a list or keyed by ticker"
    )
    market_data: dict[str, Any] | None = Field(
        default=None, description="Market payload; live prices are fetched when omitted"
    )


class PricesRequest(BaseModel):
    """Request model for marking open positions to market."""

    market_data: dict[str, Any] | None = Field(
        default=None, description="Market payload; live prices are fetched when omitted"
    )


class ResetRequest(BaseModel):
    """Request model for portfolio reset."""

    initial_balance: float | None = Field(
        default=None, gt=0, le=MAX_INITIAL_BALANCE, description="Starting balance"
    )


class PortfolioResponse(BaseModel):
    """Response model wrapping a portfolio document."""

    portfolio: dict[str, Any]


class ExecuteResponse(BaseModel):
    """Response model for a simulation cycle."""

    executed: bool
    trades: list[dict[str, Any]]
    portfolio: dict[str, Any]
    total_pnl: float
    skipped: dict[str, str] = Field(default_factory=dict)


class StatusResponse(BaseModel):
    """Response model for engine status."""

    trading_mode: str
    is_test_mode: bool
    initial_balance: float
    default_leverage: float
    open_positions: int
    portfolio: dict[str, Any]


class TradesResponse(BaseModel):
    """Response model for trade history, newest first."""

    trades: list[dict[str, Any]]
    count: int
