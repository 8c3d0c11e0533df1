# File: utils/math_utils.py
"""Math and calculation utilities for Numu.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.

Functions:
    - round_rate: Consistent rounding to configured precision
    - safe_ratio: Division that returns a fallback instead of raising
    - calculate_percentage: Progress percentage calculations
    - clamp: Bound a value to a range
    - mean: Arithmetic mean of a possibly empty sequence
"""

from __future__ import annotations

from collections.abc import Iterable


# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default float precision for rates exposed to the UI
DATA_FLOAT_PRECISION = 4


def round_rate(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a rate to the configured precision.

    Prevents float drift such as 0.7499999999999999 leaking into sensor states.

    Examples:
        round_rate(0.7499999999999999) → 0.75
        round_rate(2 / 3) → 0.6667
    """
    return round(value, precision)


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return numerator / denominator, or `default` when denominator <= 0.

    Examples:
        safe_ratio(3, 4) → 0.75
        safe_ratio(5, 0) → 0.0  # Division by zero protection
        safe_ratio(5, 0, default=1.0) → 1.0
    """
    if denominator <= 0:
        return default
    return numerator / denominator


def calculate_percentage(
    current: float,
    target: float,
    precision: int = 2,
) -> float:
    """Calculate progress percentage with proper rounding.

    Returns:
        Percentage (0-100) with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(3, 4) → 75.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return round((current / target) * 100, precision)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(1.2, 0, 1) → 1
        clamp(-0.1, 0, 1) → 0
    """
    return max(min_val, min(value, max_val))


def mean(values: Iterable[float], default: float = 0.0) -> float:
    """Return the arithmetic mean of `values`, or `default` when empty."""
    items = list(values)
    if not items:
        return default
    return sum(items) / len(items)
