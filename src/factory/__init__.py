"""Factory registry — lazy, build-once construction of operations."""

from .registry import (
    OPTIONAL_MARKER,
    BuiltOperation,
    FactoryDescriptor,
    FactoryRegistry,
    factory,
)

__all__ = [
    "OPTIONAL_MARKER",
    "BuiltOperation",
    "FactoryDescriptor",
    "FactoryRegistry",
    "factory",
]
