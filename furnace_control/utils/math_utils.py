"""
Mathematical utility functions for the furnace loop.
Uses numpy for array operations.
"""

from typing import Optional
import numpy as np


def clamp(value: float, min_val: Optional[float], max_val: Optional[float]) -> float:
    """Clamp a value between minimum and maximum bounds."""
    if min_val is None and max_val is None:
        return value
    return float(np.clip(value, min_val, max_val))

