"""
Тесты для модуля Typed

Проверяет:
1. Разбор сигнатур и раскрытие union
2. Точное совпадение вызывает реализацию с исходными аргументами
3. Fallback через конверсии выбирает самую дешёвую сигнатуру, при равенстве первую объявленную
4. NoMatchingSignature для недостижимых или неподдерживаемых типов
5. Ошибки построения (дубликаты сигнатур, неизвестные типы)
"""

import logging
from decimal import Decimal
from fractions import Fraction

import pytest

from src.core.domain.types import DEFAULT_CONVERSIONS, ConversionEdge, ConversionTable, TypeTag
from src.core.domain.units import Unit
from src.core.errors import DuplicateSignature, ImplicitConversionError, NoMatchingSignature
from src.dispatch.typed import Signature, Typed, TypedFunction, build_typed, create_typed


def _tagged(label):
    """Implementation returning its label and received arguments"""
    return lambda *args: (label, args)


# =============================================================================
# SIGNATURES
# =============================================================================


class TestSignature:
    """Tests for Signature.expand"""

    def test_parse_text(self) -> None:
        """Comma-separated type names"""
        (signature,) = Signature.expand("number, BigNumber")
        assert signature.params == (TypeTag.NUMBER, TypeTag.BIGNUMBER)
        assert signature.arity == 2
        assert str(signature) == "number, BigNumber"

    def test_union_expands_in_order(self) -> None:
        """Unions expand into one signature per combination"""
        signatures = Signature.expand("number | Fraction, boolean | number")
        assert [str(s) for s in signatures] == [
            "number, boolean",
            "number, number",
            "Fraction, boolean",
            "Fraction, number",
        ]

    def test_tag_sequence(self) -> None:
        """Sequences of tags are accepted as well"""
        (signature,) = Signature.expand((TypeTag.UNIT, "Complex"))
        assert signature.params == (TypeTag.UNIT, TypeTag.COMPLEX)

    def test_zero_arity(self) -> None:
        """An empty declaration is the zero-argument signature"""
        assert Signature.expand("") == [Signature(())]

    def test_unknown_type(self) -> None:
        """Names outside the tag set are rejected at construction"""
        with pytest.raises(ValueError, match="Unknown type 'string'"):
            Signature.expand("number, string")


# =============================================================================
# DISPATCH
# =============================================================================


class TestExactDispatch:
    """Tests for exact signature matches"""

    def test_each_branch_selected_by_types(self) -> None:
        """Every argument's type takes part in the selection"""
        fn = build_typed(
            "pick",
            {
                "number, number": _tagged("nn"),
                "number, boolean": _tagged("nb"),
                "boolean, number": _tagged("bn"),
            },
        )
        assert fn(1, 2)[0] == "nn"
        assert fn(1, True)[0] == "nb"
        assert fn(False, 2)[0] == "bn"

    def test_arguments_passed_unchanged(self) -> None:
        """Exact matches receive the original objects"""
        value = Decimal("1.5")
        fn = build_typed("same", {"BigNumber": lambda x: x})
        assert fn(value) is value

    def test_different_arities(self) -> None:
        """Signatures of different arity coexist"""
        fn = build_typed("arity", {"number": _tagged("one"), "number, number": _tagged("two"), "": _tagged("zero")})
        assert fn(1)[0] == "one"
        assert fn(1, 2)[0] == "two"
        assert fn()[0] == "zero"


class TestConversionDispatch:
    """Tests for the conversion fallback"""

    def test_widening_converts_arguments(self) -> None:
        """number is widened to BigNumber before the call"""
        fn = build_typed("big", {"BigNumber, BigNumber": _tagged("bb")})
        label, args = fn(0.5, Decimal("2"))
        assert label == "bb"
        assert args == (Decimal("0.5"), Decimal("2"))
        assert all(isinstance(arg, Decimal) for arg in args)

    def test_multi_hop_conversion(self) -> None:
        """boolean reaches BigNumber through number"""
        fn = build_typed("big", {"BigNumber": lambda x: x})
        assert fn(True) == Decimal(1)

    def test_cheapest_signature_wins(self) -> None:
        """number -> BigNumber (1) is preferred to number -> Fraction (2)"""
        fn = build_typed(
            "cheap",
            {
                "Fraction, Fraction": _tagged("ff"),
                "BigNumber, BigNumber": _tagged("bb"),
            },
        )
        assert fn(1, 2)[0] == "bb"

    def test_cost_counts_every_argument(self) -> None:
        """Total cost over all arguments decides"""
        fn = build_typed(
            "total",
            {
                "Complex, Complex": _tagged("cc"),
                "Fraction, Fraction": _tagged("ff"),
            },
        )
        # Fraction: 0 + 2 ; Complex: 2 + 2
        assert fn(Fraction(1, 2), 0.5)[0] == "ff"

    def test_ties_resolve_to_first_declared(self) -> None:
        """Equal cost goes to the first registered signature, every time"""
        table = ConversionTable(DEFAULT_CONVERSIONS)
        for _ in range(5):
            fn = build_typed(
                "tie",
                {
                    "Fraction, number": _tagged("first"),
                    "number, Fraction": _tagged("second"),
                },
                conversions=table,
            )
            assert fn(1, 2)[0] == "first"
            swapped = build_typed(
                "tie",
                {
                    "number, Fraction": _tagged("second"),
                    "Fraction, number": _tagged("first"),
                },
                conversions=table,
            )
            assert swapped(1, 2)[0] == "second"

    def test_exact_match_preferred_over_conversion(self) -> None:
        """A declared exact signature always wins"""
        fn = build_typed("exact", {"BigNumber, BigNumber": _tagged("bb"), "number, number": _tagged("nn")})
        assert fn(1, 2)[0] == "nn"

    def test_conversion_failure_propagates(self) -> None:
        """A refused conversion is not replaced by another branch"""
        fn = build_typed("big", {"BigNumber, BigNumber": _tagged("bb"), "Complex, Complex": _tagged("cc")})
        with pytest.raises(ImplicitConversionError):
            fn(1 / 3, Decimal("1"))

    def test_plan_is_reused(self) -> None:
        """Repeated calls with the same types hit the memoized plan"""
        calls = []

        def convert(value):
            calls.append(value)
            return Decimal(value)

        table = ConversionTable([ConversionEdge(TypeTag.NUMBER, TypeTag.BIGNUMBER, 1, convert)])
        fn = build_typed("memo", {"BigNumber": lambda x: x}, conversions=table)
        assert fn(1) == Decimal(1)
        assert fn(2) == Decimal(2)
        assert calls == [1, 2]

    def test_plan_logged(self, caplog) -> None:
        """The chosen conversion plan is logged at debug level"""
        fn = build_typed("logged", {"BigNumber": lambda x: x})
        with caplog.at_level(logging.DEBUG, logger="src.dispatch.typed"):
            fn(True)
        assert "logged(boolean) dispatches to (BigNumber)" in caplog.text


class TestNoMatchingSignature:
    """Tests for dispatch failures"""

    def test_unreachable_types(self) -> None:
        """No conversion from Complex to number"""
        fn = build_typed("real", {"number, number": _tagged("nn")})
        with pytest.raises(NoMatchingSignature) as exc_info:
            fn(1 + 1j, 2)
        assert exc_info.value.arg_types == ("Complex", "number")
        assert "real" in str(exc_info.value)
        assert "Complex, number" in str(exc_info.value)

    def test_unit_never_converted(self) -> None:
        """Unit and number never meet"""
        fn = build_typed("units", {"Unit, Unit": _tagged("uu"), "number, number": _tagged("nn")})
        with pytest.raises(NoMatchingSignature):
            fn(Unit(5, "m"), 5)

    def test_wrong_arity(self) -> None:
        """Arity is part of the signature"""
        fn = build_typed("two", {"number, number": _tagged("nn")})
        with pytest.raises(NoMatchingSignature):
            fn(1)
        with pytest.raises(NoMatchingSignature):
            fn(1, 2, 3)

    def test_unsupported_value(self) -> None:
        """Unclassifiable values are named by their Python type"""
        fn = build_typed("num", {"number": _tagged("n")})
        with pytest.raises(NoMatchingSignature, match=r"\(str\).*unsupported value type"):
            fn("5")

    def test_is_type_error(self) -> None:
        """Callers may catch it as a TypeError"""
        fn = build_typed("num", {"number": _tagged("n")})
        with pytest.raises(TypeError):
            fn(None)


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestConstruction:
    """Tests for building typed functions"""

    def test_duplicate_signature(self) -> None:
        """Two declarations expanding to the same signature are rejected"""
        with pytest.raises(DuplicateSignature, match="number, number"):
            build_typed("dup", {"number, number": _tagged("a"), "number | BigNumber, number": _tagged("b")})

    def test_empty_table(self) -> None:
        """At least one signature is required"""
        with pytest.raises(ValueError, match="at least one signature"):
            build_typed("empty", {})

    def test_non_callable(self) -> None:
        """Implementations must be callable"""
        with pytest.raises(TypeError, match="not callable"):
            build_typed("bad", {"number": 42})

    def test_signatures_in_declaration_order(self) -> None:
        """signatures lists the table in declaration order"""
        fn = build_typed("order", {"Unit, Unit": _tagged("u"), "boolean, boolean": _tagged("b")})
        assert [str(s) for s in fn.signatures] == ["Unit, Unit", "boolean, boolean"]
        assert fn.name == "order"
        assert fn.__name__ == "order"
        assert repr(fn) == "<TypedFunction order: Unit, Unit; boolean, boolean>"

    def test_find(self) -> None:
        """find returns the exact implementation or fails"""
        impl = _tagged("n")
        fn = build_typed("find", {"number": impl})
        assert fn.find("number") is impl
        with pytest.raises(NoMatchingSignature):
            fn.find("BigNumber")


class TestTypedBuilder:
    """Tests for the injectable Typed builder"""

    def test_builds_typed_functions(self) -> None:
        """Calling the builder yields a TypedFunction"""
        typed = Typed()
        fn = typed("double", {"number": lambda x: 2 * x})
        assert isinstance(fn, TypedFunction)
        assert fn(2) == 4

    def test_with_conversions(self) -> None:
        """Extra edges open new paths on a new builder only"""
        typed = Typed()
        extended = typed.with_conversions(
            ConversionEdge(TypeTag.FRACTION, TypeTag.BIGNUMBER, 1, lambda f: Decimal(f.numerator) / f.denominator)
        )
        table = {"BigNumber": lambda x: x}
        assert extended("big", table)(Fraction(1, 4)) == Decimal("0.25")
        with pytest.raises(NoMatchingSignature):
            typed("big", table)(Fraction(1, 4))

    def test_factory(self) -> None:
        """The typed factory has no dependencies and builds a Typed"""
        assert create_typed.name == "typed"
        assert create_typed.dependencies == ()
        assert isinstance(create_typed(), Typed)
