"""
Unequal Scalar — negation of equal_scalar over the same signatures
"""

from typing import Final

from src.factory.registry import factory

NAME: Final[str] = "unequal_scalar"
DEPENDENCIES: Final[tuple[str, ...]] = ("typed", "equal_scalar")


@factory(NAME, DEPENDENCIES)
def create_unequal_scalar(*, typed, equal_scalar):
    def unequal(x, y):
        return not equal_scalar(x, y)

    return typed(NAME, {signature: unequal for signature in equal_scalar.signatures})
