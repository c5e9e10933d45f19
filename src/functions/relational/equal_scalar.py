"""
Equal Scalar — tolerance-aware equality of two scalar values

Толерантность применяется только там, где представление несёт ошибку округления:
- boolean:   точно
- number:    точно или nearly_equal с config().epsilon / abs_epsilon
- BigNumber: точно или bignumber_nearly_equal с config().epsilon
- Fraction:  точно (дроби точны)
- Complex:   точно по вещественной и мнимой части
- Unit:      IncompatibleBase при разных базовых размерностях, иначе рекурсия
             на SI-нормализованных значениях

NaN никогда не равен ничему, включая самого себя.
"""

from typing import Final

from src.core.errors import IncompatibleBase
from src.core.math.nearly_equal import bignumber_nearly_equal, nearly_equal
from src.factory.registry import factory

NAME: Final[str] = "equal_scalar"
DEPENDENCIES: Final[tuple[str, ...]] = ("typed", "config")


@factory(NAME, DEPENDENCIES)
def create_equal_scalar(*, typed, config):
    def equal_units(x, y):
        if not x.equal_base(y):
            raise IncompatibleBase(
                f"Cannot compare units with different base: {x.name} ({x.dimension}) "
                f"and {y.name} ({y.dimension})"
            )
        return equal_scalar(x.value, y.value)

    def equal_numbers(x, y):
        current = config()
        return x == y or nearly_equal(x, y, current.epsilon, current.abs_epsilon)

    def equal_bignumbers(x, y):
        # Checked before ==, which raises on signaling NaN
        if x.is_nan() or y.is_nan():
            return False
        return x == y or bignumber_nearly_equal(x, y, config().epsilon)

    equal_scalar = typed(
        NAME,
        {
            "boolean, boolean": lambda x, y: x == y,
            "number, number": equal_numbers,
            "BigNumber, BigNumber": equal_bignumbers,
            "Fraction, Fraction": lambda x, y: x == y,
            "Complex, Complex": lambda x, y: x == y,
            "Unit, Unit": equal_units,
        },
    )

    return equal_scalar
