"""Utility functions and helpers."""

from furnace_control.utils.validators import (
    InvalidConfiguration,
    InvalidState,
    validate_positive,
    validate_non_negative,
    validate_real,
    validate_finite,
    validate_range,
)
from furnace_control.utils.math_utils import clamp

__all__ = [
    "InvalidConfiguration",
    "InvalidState",
    "validate_positive",
    "validate_non_negative",
    "validate_real",
    "validate_finite",
    "validate_range",
    "clamp",
]
