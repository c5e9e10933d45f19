"""
Nearly Equal — tolerance-aware comparison of floating and decimal numbers

Модуль определяет "почти равенство" для двух числовых видов, представление
которых несёт ошибку округления:
- number (int/float): относительная толерантность с абсолютным порогом
- BigNumber (decimal.Decimal): относительная толерантность в точной
  рациональной арифметике, проверка сама не добавляет float-ошибки

Целые числа сравниваются через Fraction: int может выходить за диапазон float.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. epsilon не задан или <= 0 → точное равенство
2. Точно равные значения всегда почти равны (нули, бесконечности одного знака)
3. NaN никогда не равен ничему, включая самого себя
4. Нефинитные значения равны только при точном равенстве
5. Корректный вход никогда не приводит к OverflowError
"""

import math
import sys
from decimal import Decimal
from fractions import Fraction
from typing import Final

# =============================================================================
# EPSILON PARAMETERS
# =============================================================================

# Machine epsilon of a double; absolute floor for number comparisons
DBL_EPSILON: Final[float] = sys.float_info.epsilon

# Default relative tolerance of the library configuration
DEFAULT_EPSILON: Final[float] = 1e-12


# =============================================================================
# HELPERS
# =============================================================================


def _is_nan(value: int | float) -> bool:
    # int has no NaN; avoids float() overflow on big ints
    return value != value


def _is_finite(value: int | float) -> bool:
    if isinstance(value, int):
        return True
    return math.isfinite(value)


def _tolerance_disabled(epsilon: float | Decimal | Fraction | None) -> bool:
    return epsilon is None or epsilon <= 0


def exact_fraction(value: float | Decimal | Fraction | int) -> Fraction:
    """
    Exact rational value of a tolerance or number.

    Floats are read through their shortest repr, so 1e-12 becomes exactly
    1/10**12 instead of the nearest binary double.

    Examples:
        >>> exact_fraction(1e-12)
        Fraction(1, 1000000000000)
        >>> exact_fraction(Decimal("0.5"))
        Fraction(1, 2)
    """
    if isinstance(value, float):
        return Fraction(repr(value))
    return Fraction(value)


def _exact_nearly_equal(x, y, epsilon, abs_epsilon=None) -> bool:
    # Finite, non-NaN operands only
    fx = exact_fraction(x)
    fy = exact_fraction(y)
    diff = abs(fx - fy)
    if abs_epsilon is not None and diff < exact_fraction(abs_epsilon):
        return True
    return diff <= max(abs(fx), abs(fy)) * exact_fraction(epsilon)


# =============================================================================
# NUMBER
# =============================================================================


def nearly_equal(
    x: int | float,
    y: int | float,
    epsilon: float | None = None,
    abs_epsilon: float | None = DBL_EPSILON,
) -> bool:
    """
    Test whether two numbers are equal within a relative tolerance.

    Algorithm:
        x == y                                   -> True
        |x - y| < abs_epsilon                    -> True
        |x - y| <= max(|x|, |y|) * epsilon       -> True

    Args:
        x: First value
        y: Second value
        epsilon: Relative tolerance; None or <= 0 means exact comparison
        abs_epsilon: Absolute floor below which any difference is ignored

    Returns:
        True if the values are nearly equal

    Examples:
        >>> nearly_equal(1.0, 1.0 + 1e-15, 1e-9)
        True
        >>> nearly_equal(1.0, 1.1, 1e-9)
        False
        >>> nearly_equal(float("nan"), float("nan"), 1e-9)
        False
    """
    if _tolerance_disabled(epsilon):
        return x == y

    if _is_nan(x) or _is_nan(y):
        return False

    if x == y:
        return True

    if _is_finite(x) and _is_finite(y):
        if isinstance(x, int) or isinstance(y, int):
            # Integers may exceed the float range
            return _exact_nearly_equal(x, y, epsilon, abs_epsilon)
        diff = abs(x - y)
        if abs_epsilon is not None and diff < abs_epsilon:
            return True
        return diff <= max(abs(x), abs(y)) * epsilon

    # Infinities that are not exactly equal
    return False


# =============================================================================
# BIGNUMBER
# =============================================================================


def bignumber_nearly_equal(
    x: Decimal,
    y: Decimal,
    epsilon: float | Decimal | Fraction | None = None,
) -> bool:
    """
    Test whether two decimals are equal within a relative tolerance.

    Same rule as nearly_equal without the absolute floor; the comparison
    |x - y| <= max(|x|, |y|) * epsilon is carried out on exact fractions.

    Args:
        x: First value
        y: Second value
        epsilon: Relative tolerance; None or <= 0 means exact comparison

    Returns:
        True if the values are nearly equal
    """
    # NaN first: comparing a signaling NaN raises InvalidOperation
    if x.is_nan() or y.is_nan():
        return False

    if _tolerance_disabled(epsilon):
        return x == y

    if x == y:
        return True

    if x.is_finite() and y.is_finite():
        return _exact_nearly_equal(x, y, epsilon)

    return False
