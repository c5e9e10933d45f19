"""
Types — value-type tags, classification and implicit conversions

Модуль задаёт:
- Закрытый набор type tags, распознаваемых диспетчером
- Классификатор: runtime-значение → ровно один tag
- Таблицу неявных расширений (conversion edges) с их стоимостью

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. bool классифицируется как boolean, никогда как number
2. Value objects (Unit, Decimal, Fraction, complex) классифицируются по типу,
   без попыток числового приведения
3. Конверсии никогда не теряют информацию молча: рёбер из Complex и Unit нет,
   значения с потерей точности отклоняются через ImplicitConversionError
"""

import heapq
import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Callable, Final, Iterable

from src.core.domain.units import Unit
from src.core.errors import ImplicitConversionError

# Significant digits a number may carry to be converted implicitly
MAX_IMPLICIT_DIGITS: Final[int] = 15


# =============================================================================
# TYPE TAGS
# =============================================================================


class TypeTag(str, Enum):
    """Recognised value kinds."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    BIGNUMBER = "BigNumber"
    FRACTION = "Fraction"
    COMPLEX = "Complex"
    UNIT = "Unit"

    def __str__(self) -> str:
        return self.value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Order matters: the first matching test wins
DEFAULT_TYPE_TESTS: Final[tuple[tuple[TypeTag, Callable[[Any], bool]], ...]] = (
    (TypeTag.BOOLEAN, lambda value: isinstance(value, bool)),
    (TypeTag.NUMBER, _is_number),
    (TypeTag.BIGNUMBER, lambda value: isinstance(value, Decimal)),
    (TypeTag.FRACTION, lambda value: isinstance(value, Fraction)),
    (TypeTag.COMPLEX, lambda value: isinstance(value, complex)),
    (TypeTag.UNIT, lambda value: isinstance(value, Unit)),
)


class TypeRegistry:
    """
    Ordered type tests mapping a runtime value to its TypeTag.

    The classifier is pluggable: pass other tests to recognise other Python
    representations of the same tags. Results are memoized per Python type,
    so a test must depend on the value's type only.
    """

    def __init__(
        self,
        tests: Iterable[tuple[TypeTag, Callable[[Any], bool]]] = DEFAULT_TYPE_TESTS,
    ):
        self._tests = tuple(tests)
        # Exact Python type -> tag; filled on first sight of each type
        self._by_type: dict[type, TypeTag | None] = {}

    @property
    def tags(self) -> tuple[TypeTag, ...]:
        return tuple(tag for tag, _ in self._tests)

    def classify(self, value: Any) -> TypeTag | None:
        """
        Tag of `value`, or None if no test recognises it.

        Args:
            value: Any runtime value

        Returns:
            The TypeTag of the first matching test
        """
        cls = type(value)
        try:
            return self._by_type[cls]
        except KeyError:
            pass
        tag = None
        for candidate, test in self._tests:
            if test(value):
                tag = candidate
                break
        self._by_type[cls] = tag
        return tag


# =============================================================================
# CONVERSIONS
# =============================================================================


@dataclass(frozen=True)
class ConversionEdge:
    """Declared implicit widening from one tag to another."""

    source: TypeTag
    target: TypeTag
    cost: int
    convert: Callable[[Any], Any] = field(compare=False)

    def __post_init__(self) -> None:
        if self.source == self.target:
            raise ValueError(f"Conversion edge must change type, got {self.source} -> {self.target}")
        if self.cost <= 0:
            raise ValueError(f"Conversion cost must be positive, got {self.cost}")


@dataclass(frozen=True)
class ConversionPath:
    """Chain of edges taking one tag to another; empty for identity."""

    source: TypeTag
    target: TypeTag
    edges: tuple[ConversionEdge, ...] = ()

    @property
    def cost(self) -> int:
        return sum(edge.cost for edge in self.edges)

    def apply(self, value: Any) -> Any:
        for edge in self.edges:
            value = edge.convert(value)
        return value

    def __str__(self) -> str:
        hops = [str(self.source)] + [str(edge.target) for edge in self.edges]
        return " -> ".join(hops)


class ConversionTable:
    """
    Immutable set of conversion edges with cheapest-path lookup.

    Paths may chain several edges; their cost is the sum of edge costs. Among
    paths of equal cost the one found first through edges in declaration
    order wins.
    """

    def __init__(self, edges: Iterable[ConversionEdge] = ()):
        self._edges = tuple(edges)
        seen: set[tuple[TypeTag, TypeTag]] = set()
        for edge in self._edges:
            key = (edge.source, edge.target)
            if key in seen:
                raise ValueError(f"Conversion {edge.source} -> {edge.target} declared twice")
            seen.add(key)
        self._paths: dict[tuple[TypeTag, TypeTag], ConversionPath | None] = {}

    @property
    def edges(self) -> tuple[ConversionEdge, ...]:
        return self._edges

    def with_edges(self, *edges: ConversionEdge) -> "ConversionTable":
        return ConversionTable(self._edges + edges)

    def path(self, source: TypeTag, target: TypeTag) -> ConversionPath | None:
        """
        Cheapest conversion path from `source` to `target`.

        Returns:
            ConversionPath (empty if source == target), or None if unreachable
        """
        key = (source, target)
        if key not in self._paths:
            self._paths[key] = self._search(source, target)
        return self._paths[key]

    def _search(self, source: TypeTag, target: TypeTag) -> ConversionPath | None:
        if source == target:
            return ConversionPath(source, target)

        # Dijkstra; the sequence number keeps equal-cost order deterministic
        counter = 0
        queue: list[tuple[int, int, TypeTag, tuple[ConversionEdge, ...]]] = [(0, counter, source, ())]
        settled: set[TypeTag] = set()
        while queue:
            cost, _, tag, edges = heapq.heappop(queue)
            if tag in settled:
                continue
            settled.add(tag)
            if tag == target:
                return ConversionPath(source, target, edges)
            for edge in self._edges:
                if edge.source == tag and edge.target not in settled:
                    counter += 1
                    heapq.heappush(queue, (cost + edge.cost, counter, edge.target, edges + (edge,)))
        return None


# =============================================================================
# DEFAULT CONVERSIONS
# =============================================================================


def digits(value: float) -> int:
    """
    Number of significant digits of a number's shortest representation.

    Examples:
        >>> digits(0.1)
        1
        >>> digits(123.45)
        5
        >>> digits(1 / 3)
        16
    """
    if value == 0:
        return 1
    return len(Decimal(repr(value)).normalize().as_tuple().digits)


def _check_digits(value: int | float, target: TypeTag) -> None:
    if digits(value) > MAX_IMPLICIT_DIGITS:
        raise ImplicitConversionError(
            f"Cannot implicitly convert a number with more than {MAX_IMPLICIT_DIGITS} "
            f"significant digits to {target}: {value!r}"
        )


def number_to_bignumber(value: int | float) -> Decimal:
    if isinstance(value, int):
        return Decimal(value)
    _check_digits(value, TypeTag.BIGNUMBER)
    return Decimal(repr(value))


def number_to_fraction(value: int | float) -> Fraction:
    if isinstance(value, int):
        return Fraction(value)
    if value != value or value in (float("inf"), float("-inf")):
        raise ImplicitConversionError(f"Cannot implicitly convert {value!r} to {TypeTag.FRACTION}")
    _check_digits(value, TypeTag.FRACTION)
    return Fraction(repr(value))


def _refuse_complex(value: Any, reason: str) -> ImplicitConversionError:
    return ImplicitConversionError(f"Cannot implicitly convert {value!r} to {TypeTag.COMPLEX}: {reason}")


def _round_trips(value: int | Decimal | Fraction, result: float) -> bool:
    """True if `result` reads back as exactly `value` (shortest repr)"""
    if isinstance(value, int):
        return int(result) == value
    if isinstance(value, Decimal):
        return Decimal(repr(result)) == value
    return Fraction(repr(result)) == value


def to_complex(value: int | float | Decimal | Fraction) -> complex:
    """
    Complex value carrying exactly the real `value`.

    Floats convert as they are. Integers, decimals and fractions must survive
    the trip through a double: out-of-range values and values the double would
    round are refused.

    Raises:
        ImplicitConversionError: If the conversion would lose information

    Examples:
        >>> to_complex(Decimal("0.5"))
        (0.5+0j)
        >>> to_complex(Fraction(1, 4))
        (0.25+0j)
    """
    if isinstance(value, float):
        return complex(value)
    if isinstance(value, Decimal) and not value.is_finite():
        # NaN (signaling included) and infinities keep their meaning
        return complex(math.nan if value.is_nan() else float(value))

    try:
        result = float(value)
    except OverflowError:
        raise _refuse_complex(value, "out of float range") from None
    if not math.isfinite(result):
        raise _refuse_complex(value, "out of float range")
    if not _round_trips(value, result):
        raise _refuse_complex(value, "not representable as a float")
    return complex(result)


DEFAULT_CONVERSIONS: Final[tuple[ConversionEdge, ...]] = (
    ConversionEdge(TypeTag.BOOLEAN, TypeTag.NUMBER, 1, int),
    ConversionEdge(TypeTag.NUMBER, TypeTag.BIGNUMBER, 1, number_to_bignumber),
    ConversionEdge(TypeTag.NUMBER, TypeTag.FRACTION, 2, number_to_fraction),
    ConversionEdge(TypeTag.NUMBER, TypeTag.COMPLEX, 2, to_complex),
    ConversionEdge(TypeTag.BIGNUMBER, TypeTag.COMPLEX, 2, to_complex),
    ConversionEdge(TypeTag.FRACTION, TypeTag.COMPLEX, 2, to_complex),
)
