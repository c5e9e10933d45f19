"""
Domain value types.

Содержит type tags и неявные конверсии диспетчера, а также value object Unit.
"""

from src.core.domain.types import (
    DEFAULT_CONVERSIONS,
    DEFAULT_TYPE_TESTS,
    MAX_IMPLICIT_DIGITS,
    ConversionEdge,
    ConversionPath,
    ConversionTable,
    TypeRegistry,
    TypeTag,
    digits,
    to_complex,
)
from src.core.domain.units import (
    BASE_DIMENSIONS,
    UNITS,
    Dimension,
    Unit,
    UnitDefinition,
    find_unit,
)

__all__ = [
    # Types module
    "TypeTag",
    "TypeRegistry",
    "DEFAULT_TYPE_TESTS",
    # Conversions
    "ConversionEdge",
    "ConversionPath",
    "ConversionTable",
    "DEFAULT_CONVERSIONS",
    "MAX_IMPLICIT_DIGITS",
    "digits",
    "to_complex",
    # Units module
    "BASE_DIMENSIONS",
    "UNITS",
    "Dimension",
    "Unit",
    "UnitDefinition",
    "find_unit",
]
