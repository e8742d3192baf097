"""
Validation utilities for parameter and state checking.
Provides input validation with clear error messages.
"""

from typing import Any, Optional
import math
import numbers


class InvalidConfiguration(ValueError):
    """Raised when a parameter set cannot describe a valid furnace loop."""
    pass


class InvalidState(ValueError):
    """Raised when a runtime value would corrupt the simulation (NaN, inf, out of range)."""
    pass


def _require_real(value: Any, name: str, error: type) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise error(f"{name} must be a real number, got {type(value).__name__}")
    return float(value)


def validate_positive(value: float, name: str) -> float:
    """
    Validate that a configuration value is finite and strictly positive.

    Args:
        value: The value to validate
        name: Parameter name for error messages

    Returns:
        The validated value as float

    Raises:
        InvalidConfiguration: If value is not positive
    """
    value = _require_real(value, name, InvalidConfiguration)
    if not math.isfinite(value) or value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return value


def validate_non_negative(value: float, name: str) -> float:
    """
    Validate that a configuration value is finite and >= 0.

    Args:
        value: The value to validate
        name: Parameter name for error messages

    Returns:
        The validated value as float

    Raises:
        InvalidConfiguration: If value is negative
    """
    value = _require_real(value, name, InvalidConfiguration)
    if not math.isfinite(value) or value < 0:
        raise InvalidConfiguration(f"{name} must be non-negative, got {value}")
    return value


def validate_real(value: float, name: str) -> float:
    """Validate that a configuration value is a finite real number."""
    value = _require_real(value, name, InvalidConfiguration)
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value}")
    return value


def validate_finite(value: float, name: str) -> float:
    """
    Validate a runtime value (setpoint, temperature, error).

    Raises:
        InvalidState: If value is NaN or infinite
    """
    value = _require_real(value, name, InvalidState)
    if not math.isfinite(value):
        raise InvalidState(f"{name} must be finite, got {value}")
    return value


def validate_range(
    value: float,
    name: str,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None
) -> float:
    """
    Validate that a runtime value is finite and inside [min_val, max_val].

    Raises:
        InvalidState: If value is outside the range
    """
    value = validate_finite(value, name)

    if min_val is not None and value < min_val:
        raise InvalidState(f"{name} must be >= {min_val}, got {value}")
    if max_val is not None and value > max_val:
        raise InvalidState(f"{name} must be <= {max_val}, got {value}")

    return value
