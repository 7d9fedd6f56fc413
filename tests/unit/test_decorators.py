"""
Unit tests for utility decorators.
"""

from unittest.mock import Mock, patch

import pytest

from perpsim.core.enums import TradingMode
from perpsim.core.exceptions.simulation import ValidationError
from perpsim.core.utils.decorators import log_operation


class _Engine:
    mode = TradingMode.PAPER

    @log_operation
    def reset_portfolio(self, initial_balance: float | None = None) -> float:
        return initial_balance or 0.0

    @log_operation
    def trade_history(self, limit: int = 50) -> list:
        raise ValidationError(f"limit must be positive, got {limit}")


class TestLogOperationDecorator:
    """Test suite for @log_operation decorator."""

    @patch("perpsim.core.utils.decorators.logger")
    def test_should_log_operation_entry_and_success(self, mock_logger: Mock) -> None:
        """Test that decorator logs entry and successful completion."""
        # Arrange
        bound = mock_logger.bind.return_value

        # Act
        result = _Engine().reset_portfolio(2500.0)

        # Assert
        assert result == 2500.0
        entry_context = mock_logger.bind.call_args.kwargs
        assert len(entry_context["correlation_id"]) == 8
        assert entry_context["mode"] == "paper"
        assert entry_context["initial_balance"] == 2500.0
        assert "Engine operation started: reset_portfolio" in bound.info.call_args[0][0]

        success_context = bound.bind.call_args.kwargs
        assert success_context["success"] is True
        assert success_context["result_type"] == "float"
        assert "execution_time_ms" in success_context
        bound.bind.return_value.success.assert_called_once()

    @patch("perpsim.core.utils.decorators.logger")
    def test_should_log_failure_and_reraise(self, mock_logger: Mock) -> None:
        """Test that failures are logged with error context and propagated unchanged."""
        # Arrange
        bound = mock_logger.bind.return_value

        # Act / Assert
        with pytest.raises(ValidationError, match="limit must be positive"):
            _Engine().trade_history(limit=0)

        error_context = bound.bind.call_args.kwargs
        assert error_context["success"] is False
        assert error_context["error_type"] == "ValidationError"
        assert error_context["limit"] == 0
        assert "Engine operation failed: trade_history" in (
            bound.bind.return_value.error.call_args[0][0]
        )
        bound.bind.return_value.success.assert_not_called()

    @patch("perpsim.core.utils.decorators.logger")
    def test_should_count_trades_in_result(self, mock_logger: Mock) -> None:
        """Test trade_count is attached for results carrying trades."""

        @log_operation
        def execute() -> Mock:
            return Mock(trades=[1, 2])

        execute()

        assert mock_logger.bind.return_value.bind.call_args.kwargs["trade_count"] == 2

    def test_should_preserve_function_metadata(self) -> None:
        """Test functools.wraps is applied."""
        assert _Engine.reset_portfolio.__name__ == "reset_portfolio"
