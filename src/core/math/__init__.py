"""
Core math modules

Сравнение number и decimal с учётом толерантности.
"""

from src.core.math.nearly_equal import (
    DBL_EPSILON,
    DEFAULT_EPSILON,
    bignumber_nearly_equal,
    exact_fraction,
    nearly_equal,
)

__all__ = [
    # Epsilon constants
    "DBL_EPSILON",
    "DEFAULT_EPSILON",
    # Comparisons
    "bignumber_nearly_equal",
    "exact_fraction",
    "nearly_equal",
]
