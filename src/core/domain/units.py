"""
Units — physical-unit values with dimensional bookkeeping

Value object: числовое количество плюс именованная единица. Каждая единица
несёт базовую Dimension, точный масштаб к SI и смещение (температуры).

ЗАПРЕЩЕНО сравнивать или конвертировать значения с разными базовыми
размерностями: `equal_base` это проверка допуска, вызывающий код поднимает
IncompatibleBase.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Final, Union

from src.core.errors import IncompatibleBase, UnknownUnit

Quantity = Union[int, float, Decimal, Fraction, complex]


# =============================================================================
# DIMENSIONS
# =============================================================================

BASE_DIMENSIONS: Final[tuple[str, ...]] = (
    "mass",
    "length",
    "time",
    "current",
    "temperature",
    "luminous_intensity",
    "amount",
    "angle",
    "bit",
)


@dataclass(frozen=True)
class Dimension:
    """Exponents of the base dimensions, in BASE_DIMENSIONS order."""

    exponents: tuple[int, ...] = (0,) * len(BASE_DIMENSIONS)

    @classmethod
    def of(cls, **powers: int) -> "Dimension":
        """
        Build a dimension from named exponents.

        Examples:
            >>> Dimension.of(length=1, time=-1)
            Dimension(exponents=(0, 1, -1, 0, 0, 0, 0, 0, 0))
        """
        unknown = set(powers) - set(BASE_DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown base dimensions: {sorted(unknown)}")
        return cls(tuple(powers.get(name, 0) for name in BASE_DIMENSIONS))

    def __str__(self) -> str:
        parts = [
            name if power == 1 else f"{name}^{power}"
            for name, power in zip(BASE_DIMENSIONS, self.exponents)
            if power
        ]
        return " ".join(parts) or "dimensionless"


DIMENSIONLESS: Final[Dimension] = Dimension()
MASS: Final[Dimension] = Dimension.of(mass=1)
LENGTH: Final[Dimension] = Dimension.of(length=1)
TIME: Final[Dimension] = Dimension.of(time=1)
CURRENT: Final[Dimension] = Dimension.of(current=1)
TEMPERATURE: Final[Dimension] = Dimension.of(temperature=1)
LUMINOUS_INTENSITY: Final[Dimension] = Dimension.of(luminous_intensity=1)
AMOUNT: Final[Dimension] = Dimension.of(amount=1)
ANGLE: Final[Dimension] = Dimension.of(angle=1)
BIT: Final[Dimension] = Dimension.of(bit=1)
AREA: Final[Dimension] = Dimension.of(length=2)
VOLUME: Final[Dimension] = Dimension.of(length=3)
FREQUENCY: Final[Dimension] = Dimension.of(time=-1)
VELOCITY: Final[Dimension] = Dimension.of(length=1, time=-1)
FORCE: Final[Dimension] = Dimension.of(mass=1, length=1, time=-2)
ENERGY: Final[Dimension] = Dimension.of(mass=1, length=2, time=-2)
POWER: Final[Dimension] = Dimension.of(mass=1, length=2, time=-3)
PRESSURE: Final[Dimension] = Dimension.of(mass=1, length=-1, time=-2)
VOLTAGE: Final[Dimension] = Dimension.of(mass=1, length=2, time=-3, current=-1)


# =============================================================================
# PREFIXES
# =============================================================================

SHORT_PREFIXES: Final[dict[str, Fraction]] = {
    "da": Fraction(10),
    "h": Fraction(10**2),
    "k": Fraction(10**3),
    "M": Fraction(10**6),
    "G": Fraction(10**9),
    "T": Fraction(10**12),
    "P": Fraction(10**15),
    "d": Fraction(1, 10),
    "c": Fraction(1, 10**2),
    "m": Fraction(1, 10**3),
    "u": Fraction(1, 10**6),
    "n": Fraction(1, 10**9),
    "p": Fraction(1, 10**12),
    "f": Fraction(1, 10**15),
}

LONG_PREFIXES: Final[dict[str, Fraction]] = {
    "deca": Fraction(10),
    "hecto": Fraction(10**2),
    "kilo": Fraction(10**3),
    "mega": Fraction(10**6),
    "giga": Fraction(10**9),
    "tera": Fraction(10**12),
    "deci": Fraction(1, 10),
    "centi": Fraction(1, 10**2),
    "milli": Fraction(1, 10**3),
    "micro": Fraction(1, 10**6),
    "nano": Fraction(1, 10**9),
    "pico": Fraction(1, 10**12),
}

_PREFIX_GROUPS: Final[dict[str, dict[str, Fraction]]] = {
    "short": SHORT_PREFIXES,
    "long": LONG_PREFIXES,
}


# =============================================================================
# UNIT TABLE
# =============================================================================


@dataclass(frozen=True)
class UnitDefinition:
    """Named unit: value_SI = (quantity + offset) * scale."""

    name: str
    dimension: Dimension
    scale: Fraction
    offset: Fraction = Fraction(0)
    prefixes: str | None = None


def _define(*definitions: UnitDefinition) -> dict[str, UnitDefinition]:
    return {definition.name: definition for definition in definitions}


UNITS: Final[dict[str, UnitDefinition]] = _define(
    # Length
    UnitDefinition("m", LENGTH, Fraction(1), prefixes="short"),
    UnitDefinition("meter", LENGTH, Fraction(1), prefixes="long"),
    UnitDefinition("inch", LENGTH, Fraction("0.0254")),
    UnitDefinition("ft", LENGTH, Fraction("0.3048")),
    UnitDefinition("yd", LENGTH, Fraction("0.9144")),
    UnitDefinition("mi", LENGTH, Fraction("1609.344")),
    # Area / volume
    UnitDefinition("ha", AREA, Fraction(10**4)),
    UnitDefinition("L", VOLUME, Fraction(1, 10**3), prefixes="short"),
    UnitDefinition("liter", VOLUME, Fraction(1, 10**3), prefixes="long"),
    # Mass
    UnitDefinition("g", MASS, Fraction(1, 10**3), prefixes="short"),
    UnitDefinition("gram", MASS, Fraction(1, 10**3), prefixes="long"),
    UnitDefinition("t", MASS, Fraction(10**3)),
    UnitDefinition("lb", MASS, Fraction("0.45359237")),
    UnitDefinition("oz", MASS, Fraction("0.45359237") / 16),
    # Time
    UnitDefinition("s", TIME, Fraction(1), prefixes="short"),
    UnitDefinition("second", TIME, Fraction(1), prefixes="long"),
    UnitDefinition("min", TIME, Fraction(60)),
    UnitDefinition("h", TIME, Fraction(3600)),
    UnitDefinition("day", TIME, Fraction(86400)),
    UnitDefinition("Hz", FREQUENCY, Fraction(1), prefixes="short"),
    # Electric current / voltage
    UnitDefinition("A", CURRENT, Fraction(1), prefixes="short"),
    UnitDefinition("V", VOLTAGE, Fraction(1), prefixes="short"),
    # Temperature
    UnitDefinition("K", TEMPERATURE, Fraction(1), prefixes="short"),
    UnitDefinition("degC", TEMPERATURE, Fraction(1), offset=Fraction("273.15")),
    UnitDefinition("degF", TEMPERATURE, Fraction(5, 9), offset=Fraction("459.67")),
    # Luminous intensity / amount of substance
    UnitDefinition("cd", LUMINOUS_INTENSITY, Fraction(1)),
    UnitDefinition("mol", AMOUNT, Fraction(1), prefixes="short"),
    # Angle
    UnitDefinition("rad", ANGLE, Fraction(1), prefixes="short"),
    UnitDefinition("deg", ANGLE, Fraction(math.pi / 180)),
    # Force / energy / power / pressure
    UnitDefinition("N", FORCE, Fraction(1), prefixes="short"),
    UnitDefinition("J", ENERGY, Fraction(1), prefixes="short"),
    UnitDefinition("Wh", ENERGY, Fraction(3600), prefixes="short"),
    UnitDefinition("W", POWER, Fraction(1), prefixes="short"),
    UnitDefinition("Pa", PRESSURE, Fraction(1), prefixes="short"),
    UnitDefinition("bar", PRESSURE, Fraction(10**5), prefixes="short"),
    # Information
    UnitDefinition("b", BIT, Fraction(1), prefixes="short"),
    UnitDefinition("B", BIT, Fraction(8), prefixes="short"),
)


def find_unit(name: str) -> tuple[UnitDefinition, str, Fraction]:
    """
    Resolve a (possibly prefixed) unit name.

    Exact names win over prefixed readings, so "min" is minutes and "mm" is
    milli-meters.

    Args:
        name: Unit name such as "cm", "kilogram" or "degC"

    Returns:
        (definition, prefix, prefix_scale)

    Raises:
        UnknownUnit: If the name matches no unit
    """
    definition = UNITS.get(name)
    if definition is not None:
        return definition, "", Fraction(1)

    # Longest prefix first: "da" before "d"
    candidates = []
    for group_name, group in _PREFIX_GROUPS.items():
        for prefix, factor in group.items():
            if name.startswith(prefix):
                candidates.append((len(prefix), group_name, prefix, factor))
    for _, group_name, prefix, factor in sorted(candidates, key=lambda c: -c[0]):
        definition = UNITS.get(name[len(prefix):])
        if definition is not None and definition.prefixes == group_name:
            return definition, prefix, factor

    raise UnknownUnit(f"Unknown unit '{name}'")


# =============================================================================
# UNIT VALUE
# =============================================================================

_UNIT_PATTERN: Final = re.compile(
    r"^\s*(?P<quantity>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(?P<name>[A-Za-z]+)\s*$"
)


def _to_decimal(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)


def _scaled(quantity: Quantity, scale: Fraction, offset: Fraction) -> Quantity:
    """(quantity + offset) * scale, in the quantity's own numeric type"""
    if scale == 1 and offset == 0:
        return quantity
    if isinstance(quantity, Fraction):
        return (quantity + offset) * scale
    if isinstance(quantity, Decimal):
        return (quantity + _to_decimal(offset)) * _to_decimal(scale)
    return (quantity + float(offset)) * float(scale)


def _unscaled(value: Quantity, scale: Fraction, offset: Fraction) -> Quantity:
    """Inverse of _scaled: value / scale - offset"""
    if scale == 1 and offset == 0:
        return value
    if isinstance(value, Fraction):
        return value / scale - offset
    if isinstance(value, Decimal):
        return value / _to_decimal(scale) - _to_decimal(offset)
    return value / float(scale) - float(offset)


class Unit:
    """
    Quantity with a physical unit.

    `quantity` is the number as written, `value` the same amount expressed in
    SI base units, in the quantity's own numeric type.

    Examples:
        >>> Unit.parse("500 cm").value
        5.0
        >>> Unit(5, "m").equal_base(Unit(2, "kg"))
        False
    """

    __slots__ = ("quantity", "name", "prefix", "definition", "_prefix_scale")

    def __init__(self, quantity: Quantity, name: str):
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float, Decimal, Fraction, complex)):
            raise ValueError(f"Unit quantity must be numeric, got {type(quantity).__name__}")
        definition, prefix, prefix_scale = find_unit(name)
        self.quantity = quantity
        self.name = name
        self.prefix = prefix
        self.definition = definition
        self._prefix_scale = prefix_scale

    @classmethod
    def parse(cls, text: str) -> "Unit":
        """
        Parse "<number> <unit>", e.g. "5 m" or "2.5e3 kg".

        Raises:
            ValueError: If the text is not a number followed by a unit name
            UnknownUnit: If the unit name is not known
        """
        match = _UNIT_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Cannot parse unit from {text!r}")
        return cls(float(match.group("quantity")), match.group("name"))

    @property
    def dimension(self) -> Dimension:
        return self.definition.dimension

    @property
    def scale(self) -> Fraction:
        """Exact factor from the written unit (prefix included) to SI"""
        return self.definition.scale * self._prefix_scale

    @property
    def value(self) -> Quantity:
        return _scaled(self.quantity, self.scale, self.definition.offset)

    def equal_base(self, other: "Unit") -> bool:
        """True if both units measure the same physical base dimension"""
        return self.dimension == other.dimension

    def to(self, name: str) -> "Unit":
        """
        Same amount expressed in another unit.

        Raises:
            IncompatibleBase: If the target unit has a different base
        """
        target = Unit(1, name)
        if not self.equal_base(target):
            raise IncompatibleBase(
                f"Cannot convert {self.name} ({self.dimension}) to {name} ({target.dimension})"
            )
        return Unit(_unscaled(self.value, target.scale, target.definition.offset), name)

    def __repr__(self) -> str:
        return f"Unit({self.quantity!r}, {self.name!r})"

    def __str__(self) -> str:
        return f"{self.quantity} {self.name}"
