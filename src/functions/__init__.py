"""Operation factories registered by default in every instance."""

from src.dispatch.typed import create_typed
from src.functions.relational import create_equal_scalar, create_unequal_scalar

DEFAULT_FACTORIES = (
    create_typed,
    create_equal_scalar,
    create_unequal_scalar,
)

__all__ = [
    "DEFAULT_FACTORIES",
    "create_equal_scalar",
    "create_unequal_scalar",
    "create_typed",
]
