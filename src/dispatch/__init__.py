"""Typed dispatch — routing calls on the value types of all arguments."""

from .typed import (
    Signature,
    Typed,
    TypedFunction,
    build_typed,
    create_typed,
)

__all__ = [
    "Signature",
    "Typed",
    "TypedFunction",
    "build_typed",
    "create_typed",
]
