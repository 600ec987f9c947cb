"""
Numeric coercion and rounding utilities for load calculations
Provides tolerant conversion of upstream values and the rounding rules used in reports
"""

import math
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def safe_float(value: Any, default: float = 0.0, min_val: Optional[float] = None, max_val: Optional[float] = None) -> float:
    """
    Safely convert value to float with bounds checking

    Args:
        value: Value to convert
        default: Default value if conversion fails
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Float value within specified bounds
    """
    if is_missing(value):
        return default

    try:
        if isinstance(value, bool):
            raise TypeError("booleans are not numeric inputs")
        if isinstance(value, str):
            value = value.strip().replace(',', '')

        result = float(value)
        if not math.isfinite(result):
            raise ValueError(f"non-finite value {result}")

        if min_val is not None and result < min_val:
            logger.warning(f"Value {result} below minimum {min_val}, using minimum")
            result = min_val
        if max_val is not None and result > max_val:
            logger.warning(f"Value {result} above maximum {max_val}, using maximum")
            result = max_val

        return result

    except (ValueError, TypeError, AttributeError):
        logger.warning(f"Could not convert '{value}' to float, using default {default}")
        return default


def is_missing(value: Any) -> bool:
    """True for None, empty strings and NaN - the shapes an extractor uses for 'unknown'"""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero for positive values (0.5 -> 1, 2.5 -> 3)

    Python's built-in round() uses banker's rounding, which would make
    reported BTU/hr values disagree with hand calculations.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round to the nearest integer BTU/hr, CFM or FPM"""
    return int(round_half_up(value))


def ceil_to_increment(value: float, increment: float) -> float:
    """Round up to the next multiple of increment (e.g. 0.5 inch duct sizes)"""
    if increment <= 0:
        raise ValueError(f"increment must be positive, got {increment}")
    return math.ceil(value / increment) * increment
