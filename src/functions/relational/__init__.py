"""Relational operations on scalars."""

from .equal_scalar import create_equal_scalar
from .unequal_scalar import create_unequal_scalar

__all__ = [
    "create_equal_scalar",
    "create_unequal_scalar",
]
