#!/usr/bin/env python3
"""
Statistical utilities for the Seedline engine.

Provides the small numeric helpers shared by the leaderboard and prediction
modules: null-safe field access, zero-safe division, a bounded logistic and
the probability floor/rounding rules used for outcome percentages.
"""

import math
from typing import Any, List, Mapping, Sequence

import numpy as np
import pandas as pd


def num(value: Any, default: float = 0.0) -> float:
    """
    Coerce a possibly-missing numeric value to float.

    None, NaN, pd.NA and non-numeric strings all map to ``default``.
    """
    if value is None:
        return default
    try:
        if pd.isna(value):
            return default
    except (TypeError, ValueError):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def field(record: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    """Null-safe numeric lookup on a team/game record (dict or pandas row)."""
    return num(record.get(key) if hasattr(record, 'get') else None, default)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` instead of NaN/inf when the denominator is 0."""
    if not denominator:
        return default
    return numerator / denominator


def safe_divide_series(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """
    Element-wise division that yields 0.0 where the denominator is 0.

    Args:
        numerator: Numerator series
        denominator: Denominator series (same index)

    Returns:
        Float series with no NaN/inf introduced by the division
    """
    num_arr = numerator.astype(float).to_numpy()
    den_arr = denominator.astype(float).to_numpy()
    out = np.zeros(len(num_arr), dtype=float)
    np.divide(num_arr, den_arr, out=out, where=den_arr != 0)
    return pd.Series(out, index=numerator.index)


def logistic(x: float) -> float:
    """Numerically stable logistic function."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 going up.

    Python's round() rounds .5 to the nearest even integer; integer outputs
    (percentages, predicted scores, colors) use this helper instead.
    """
    return int(math.floor(value + 0.5))


def apply_probability_floor(probs: Sequence[float], floor: float) -> List[float]:
    """
    Raise every probability to at least ``floor``.

    The deficit is taken from the largest probability, so the total is
    preserved. Assumes ``floor * len(probs) < 1``.

    Args:
        probs: Probabilities summing to 1
        floor: Minimum share per outcome

    Returns:
        Adjusted probabilities, same order
    """
    adjusted = [max(0.0, float(p)) for p in probs]
    total = sum(adjusted)
    if total <= 0:
        return [1.0 / len(adjusted)] * len(adjusted)
    adjusted = [p / total for p in adjusted]

    deficit = 0.0
    for i, p in enumerate(adjusted):
        if p < floor:
            deficit += floor - p
            adjusted[i] = floor

    if deficit > 0:
        largest = max(range(len(adjusted)), key=lambda i: adjusted[i])
        adjusted[largest] -= deficit

    return adjusted


def to_integer_percentages(probs: Sequence[float]) -> List[int]:
    """
    Convert probabilities to integer percentages that sum to exactly 100.

    Each value is rounded half-up independently; the remainder (100 minus the
    rounded sum, at most +/-1 per outcome) is added to the outcome with the
    largest unrounded probability. Ties go to the earliest outcome.

    Example:
        >>> to_integer_percentages([0.125, 0.125, 0.75])
        [13, 13, 74]
    """
    scaled = [p * 100.0 for p in probs]
    rounded = [round_half_up(p) for p in scaled]
    remainder = 100 - sum(rounded)
    if remainder:
        largest = max(range(len(scaled)), key=lambda i: (scaled[i], -i))
        rounded[largest] += remainder
    return rounded
