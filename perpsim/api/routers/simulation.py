"""
Simulation API endpoints.

Handlers are plain functions: the engine does blocking file and network I/O,
so FastAPI runs them in its threadpool.
"""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from perpsim.core.constants import DEFAULT_TRADE_HISTORY_LIMIT, MAX_TRADE_HISTORY_LIMIT
from perpsim.core.engine.simulator import SimulationEngine
from perpsim.core.exceptions.simulation import (
    ConcurrentModificationError,
    MarketDataError,
    PersistenceError,
    SimulationException,
    ValidationError,
)

from ..dependencies import get_engine
from ..schemas.api_models import (
    ExecuteRequest,
    ExecuteResponse,
    PortfolioResponse,
    PricesRequest,
    ResetRequest,
    StatusResponse,
    TradesResponse,
)

router = APIRouter()


def _raise_http_error(error: SimulationException) -> NoReturn:
    """Translate an engine error into an HTTP error."""
    if isinstance(error, ValidationError):
        status_code = 400
    elif isinstance(error, ConcurrentModificationError):
        status_code = 409
    elif isinstance(error, MarketDataError | PersistenceError):
        status_code = 503
    else:
        status_code = 500
    logger.warning(f"Simulation request failed ({status_code}): {error}")
    raise HTTPException(status_code=status_code, detail=str(error)) from error


@router.get("/status", response_model=StatusResponse)
def get_status(engine: SimulationEngine = Depends(get_engine)) -> StatusResponse:
    """Get engine configuration and the current portfolio."""
    try:
        return StatusResponse(**engine.status())
    except SimulationException as e:
        _raise_http_error(e)


@router.get("/portfolio", response_model=PortfolioResponse)
def get_portfolio(engine: SimulationEngine = Depends(get_engine)) -> PortfolioResponse:
    """Get the current portfolio."""
    try:
        return PortfolioResponse(portfolio=engine.get_portfolio().to_dict())
    except SimulationException as e:
        _raise_http_error(e)


@router.post("/execute", response_model=ExecuteResponse)
def execute_signal(
    request: ExecuteRequest, engine: SimulationEngine = Depends(get_engine)
) -> ExecuteResponse:
    """Run one simulation cycle for a trading signal."""
    try:
        result = engine.execute_simulated_trade(request.signal, request.market_data)
    except SimulationException as e:
        _raise_http_error(e)
    return ExecuteResponse(**result.to_dict())


@router.post("/prices", response_model=PortfolioResponse)
def refresh_prices(
    request: PricesRequest, engine: SimulationEngine = Depends(get_engine)
) -> PortfolioResponse:
    """Mark open positions to market and persist the new valuation."""
    try:
        portfolio = engine.refresh_prices(request.market_data)
    except SimulationException as e:
        _raise_http_error(e)
    return PortfolioResponse(portfolio=portfolio.to_dict())


@router.post("/reset", response_model=PortfolioResponse)
def reset_portfolio(
    request: ResetRequest, engine: SimulationEngine = Depends(get_engine)
) -> PortfolioResponse:
    """Reset the portfolio to an empty one. Trade history is kept."""
    try:
        portfolio = engine.reset_portfolio(request.initial_balance)
    except SimulationException as e:
        _raise_http_error(e)
    return PortfolioResponse(portfolio=portfolio.to_dict())


@router.get("/trades", response_model=TradesResponse)
def get_trades(
    limit: int = Query(DEFAULT_TRADE_HISTORY_LIMIT, ge=1, le=MAX_TRADE_HISTORY_LIMIT),
    engine: SimulationEngine = Depends(get_engine),
) -> TradesResponse:
    """Get recent trades, newest first."""
    try:
        trades = engine.trade_history(limit)
    except SimulationException as e:
        _raise_http_error(e)
    return TradesResponse(trades=[trade.to_dict() for trade in trades], count=len(trades))
