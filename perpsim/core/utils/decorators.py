"""
Utility decorators for engine operations.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger

from perpsim.core.enums import TradingMode


def _extract_operation_context(bound_args: inspect.BoundArguments) -> dict[str, Any]:
    """Extract loggable context from function arguments."""
    context: dict[str, Any] = {}
    self_obj = bound_args.arguments.get("self")
    mode = getattr(self_obj, "mode", None)
    if isinstance(mode, TradingMode):
        context["mode"] = mode.value
    for param_name, value in bound_args.arguments.items():
        if param_name in ["initial_balance", "limit"] and value is not None:
            context[param_name] = value
    return context


def _create_success_context(
    base_context: dict[str, Any], execution_time_ms: float, result: Any
) -> dict[str, Any]:
    """Create success logging context."""
    success_context = {
        **base_context,
        "success": True,
        "execution_time_ms": round(execution_time_ms, 2),
        "result_type": type(result).__name__,
    }

    trades = getattr(result, "trades", None)
    if isinstance(trades, list):
        success_context["trade_count"] = len(trades)

    return success_context


def _create_error_context(
    base_context: dict[str, Any], execution_time_ms: float, error: Exception
) -> dict[str, Any]:
    """Create error logging context."""
    return {
        **base_context,
        "success": False,
        "execution_time_ms": round(execution_time_ms, 2),
        "error_type": type(error).__name__,
        "error_message": str(error),
    }


def _setup_logging_context(
    func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> dict[str, Any]:
    """Setup logging context for an engine operation."""
    sig = inspect.signature(func)
    bound_args = sig.bind(*args, **kwargs)
    bound_args.apply_defaults()

    return {
        "correlation_id": str(uuid.uuid4())[:8],
        **_extract_operation_context(bound_args),
    }


F = TypeVar("F", bound=Callable[..., Any])


def log_operation(func: F) -> F:
    """Decorator to log engine operations with correlation IDs and timing.

    Failures are logged and re-raised unchanged.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = _setup_logging_context(func, args, kwargs)
        func_name = func.__name__
        bound_logger = logger.bind(**context)

        bound_logger.info(f"Engine operation started: {func_name}")
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time_ms = (time.perf_counter() - start_time) * 1000
            bound_logger.bind(**_create_error_context(context, execution_time_ms, e)).error(
                f"Engine operation failed: {func_name}: {e}"
            )
            raise

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        bound_logger.bind(**_create_success_context(context, execution_time_ms, result)).success(
            f"Engine operation completed: {func_name}"
        )
        return result

    return wrapper  # type: ignore
