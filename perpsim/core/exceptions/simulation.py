"""
Custom exception hierarchy for the paper-trading engine.

This module defines domain-specific exceptions for better error handling.
"""


class SimulationException(Exception):
    """Base exception for all simulation-related errors."""

    pass


class ValidationError(SimulationException):
    """Raised when input validation fails."""

    pass


class ConfigurationError(SimulationException):
    """Raised when configuration is invalid."""

    pass


class MarketDataError(SimulationException):
    """Raised when market data cannot be fetched or parsed."""

    pass


class NotificationError(SimulationException):
    """Raised when a trade notification cannot be delivered."""

    pass


class PortfolioError(SimulationException):
    """Raised when portfolio operations fail."""

    pass


class InsufficientFundsError(PortfolioError):
    """Raised when there are insufficient funds for an operation."""

    def __init__(self, required: float, available: float, operation: str = "operation"):
        self.required = required
        self.available = available
        self.operation = operation
        super().__init__(
            f"Insufficient funds for {operation}: required={required:.2f}, available={available:.2f}"
        )


class PositionNotFoundError(PortfolioError):
    """Raised when trying to operate on a non-existent position."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Position not found for symbol: {symbol}")


class PersistenceError(SimulationException):
    """Raised when a storage collaborator fails."""

    pass


class PortfolioStoreError(PersistenceError):
    """Raised when the portfolio document cannot be read or written."""

    pass


class ConcurrentModificationError(PortfolioStoreError):
    """Raised when the stored portfolio changed since it was read."""

    def __init__(self, mode: str, expected: int, actual: int):
        self.mode = mode
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Portfolio for {mode} mode was modified concurrently: "
            f"expected version {expected}, found {actual}"
        )


class TradeLedgerError(PersistenceError):
    """Raised when a trade record cannot be appended to the ledger."""

    pass
