"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

import math
from typing import Any

from perpsim.core.exceptions.simulation import ValidationError


def validate_positive(value: float, param_name: str) -> float:
    """Validate that a numeric value is positive and finite.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated value

    Raises:
        ValidationError: If value is not positive
    """
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{param_name} must be positive, got {value}")
    return value


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a numeric value is zero or positive.

    Raises:
        ValidationError: If value is negative or not finite
    """
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{param_name} must be non-negative, got {value}")
    return value


def validate_optional_level(value: float | None, param_name: str) -> float | None:
    """Validate a stop-loss / profit-target level, which may be unset.

    Args:
        value: Trigger price or None
        param_name: Parameter name for error messages

    Returns:
        The validated level

    Raises:
        ValidationError: If a set level is not positive
    """
    if value is None:
        return None
    return validate_positive(value, param_name)


def coerce_price(value: Any) -> float | None:
    """Interpret a loosely-typed price value.

    Numbers and numeric strings are accepted; anything else, and any
    non-positive or non-finite number, means "no price".
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price
