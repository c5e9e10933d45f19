"""
Typed — multiple dispatch on value-type signatures

Typed function хранит одну реализацию на сигнатуру (упорядоченный кортеж
type tags) и маршрутизирует каждый вызов по runtime-тегам всех аргументов:

1. Точное совпадение сигнатуры → реализация вызывается напрямую
2. Иначе кандидаты: сигнатуры той же арности, достижимые через объявленные
   конверсии; выигрывает минимальная суммарная стоимость, при равенстве
   побеждает первая объявленная сигнатура
3. Нет кандидатов → NoMatchingSignature

Сигнатуры разбираются один раз при создании, таблица dispatch далее
read-only. Планы конверсий мемоизируются по конкретному кортежу тегов.
"""

import itertools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Union

from src.core.domain.types import (
    DEFAULT_CONVERSIONS,
    ConversionEdge,
    ConversionPath,
    ConversionTable,
    TypeRegistry,
    TypeTag,
)
from src.core.errors import DuplicateSignature, NoMatchingSignature
from src.factory.registry import factory

logger = logging.getLogger(__name__)


# =============================================================================
# SIGNATURE
# =============================================================================


def _parse_param(param: Union[str, TypeTag]) -> tuple[TypeTag, ...]:
    if isinstance(param, TypeTag):
        return (param,)
    alternatives = []
    for name in param.split("|"):
        name = name.strip()
        try:
            alternatives.append(TypeTag(name))
        except ValueError:
            raise ValueError(f"Unknown type '{name}' in signature") from None
    return tuple(alternatives)


@dataclass(frozen=True)
class Signature:
    """Ordered type tags of one overload."""

    params: tuple[TypeTag, ...]

    @property
    def arity(self) -> int:
        return len(self.params)

    @classmethod
    def expand(cls, declaration: Union[str, "Signature", Iterable[Union[str, TypeTag]]]) -> list["Signature"]:
        """
        Parse a signature declaration, expanding unions into separate signatures.

        Examples:
            >>> [str(s) for s in Signature.expand("number | BigNumber, number")]
            ['number, number', 'BigNumber, number']
        """
        if isinstance(declaration, Signature):
            return [declaration]
        if isinstance(declaration, str):
            params = [part for part in declaration.split(",")] if declaration.strip() else []
        else:
            params = list(declaration)
        alternatives = [_parse_param(param) for param in params]
        return [cls(combination) for combination in itertools.product(*alternatives)]

    def __str__(self) -> str:
        return ", ".join(str(tag) for tag in self.params)


@dataclass(frozen=True)
class _Plan:
    """Matched signature plus the conversion of each argument."""

    signature: Signature
    implementation: Callable[..., Any]
    paths: tuple[ConversionPath, ...]
    cost: int

    def invoke(self, args: tuple[Any, ...]) -> Any:
        converted = [path.apply(arg) for path, arg in zip(self.paths, args)]
        return self.implementation(*converted)


# =============================================================================
# TYPED FUNCTION
# =============================================================================


class TypedFunction:
    """Callable routing to per-signature implementations."""

    def __init__(
        self,
        name: str,
        signatures: Mapping[Any, Callable[..., Any]],
        types: TypeRegistry,
        conversions: ConversionTable,
    ):
        entries: dict[Signature, Callable[..., Any]] = {}
        for declaration, implementation in signatures.items():
            if not callable(implementation):
                raise TypeError(f"Implementation of '{name}' for '{declaration}' is not callable")
            for signature in Signature.expand(declaration):
                if signature in entries:
                    raise DuplicateSignature(f"Signature '{signature}' declared twice for '{name}'")
                entries[signature] = implementation
        if not entries:
            raise ValueError(f"Typed function '{name}' needs at least one signature")

        self.name = name
        self.__name__ = name
        self._types = types
        self._conversions = conversions
        self._table = MappingProxyType(entries)
        self._exact = {signature.params: implementation for signature, implementation in entries.items()}
        self._plans: dict[tuple[TypeTag, ...], _Plan] = {}

    @property
    def signatures(self) -> tuple[Signature, ...]:
        """Signatures in declaration order"""
        return tuple(self._table)

    def __call__(self, *args: Any) -> Any:
        tags = tuple(self._types.classify(arg) for arg in args)
        implementation = self._exact.get(tags)
        if implementation is not None:
            return implementation(*args)
        plan = self._plans.get(tags)
        if plan is None:
            plan = self._resolve(tags, args)
        return plan.invoke(args)

    def find(self, declaration: Union[str, Signature, Iterable[Union[str, TypeTag]]]) -> Callable[..., Any]:
        """
        Implementation registered for exactly `declaration`.

        Raises:
            NoMatchingSignature: If `declaration` is not declared
        """
        candidates = Signature.expand(declaration)
        if len(candidates) == 1 and candidates[0] in self._table:
            return self._table[candidates[0]]
        described = tuple(str(signature) for signature in candidates)
        raise NoMatchingSignature(self.name, described, "signature not declared")

    def _resolve(self, tags: tuple[TypeTag | None, ...], args: tuple[Any, ...]) -> _Plan:
        described = tuple(
            str(tag) if tag is not None else type(arg).__name__ for tag, arg in zip(tags, args)
        )
        if None in tags:
            raise NoMatchingSignature(self.name, described, "unsupported value type")

        best: _Plan | None = None
        for signature, implementation in self._table.items():
            if signature.arity != len(tags):
                continue
            paths = []
            for tag, param in zip(tags, signature.params):
                path = self._conversions.path(tag, param)
                if path is None:
                    break
                paths.append(path)
            else:
                cost = sum(path.cost for path in paths)
                # Strict comparison: first declared wins ties
                if best is None or cost < best.cost:
                    best = _Plan(signature, implementation, tuple(paths), cost)

        if best is None:
            raise NoMatchingSignature(self.name, described)

        logger.debug(
            "%s(%s) dispatches to (%s) via [%s], cost %d",
            self.name,
            ", ".join(described),
            best.signature,
            "; ".join(str(path) for path in best.paths),
            best.cost,
        )
        self._plans[tags] = best
        return best

    def __repr__(self) -> str:
        signatures = "; ".join(str(signature) for signature in self._table)
        return f"<TypedFunction {self.name}: {signatures}>"


# =============================================================================
# BUILDER
# =============================================================================


class Typed:
    """
    Builder of typed functions sharing one classifier and conversion table.

    Injected into operation factories under the name "typed":

        equal = typed("equal", {"number, number": lambda x, y: x == y})
    """

    def __init__(
        self,
        types: TypeRegistry | None = None,
        conversions: ConversionTable | None = None,
    ):
        self.types = types or TypeRegistry()
        self.conversions = conversions if conversions is not None else ConversionTable(DEFAULT_CONVERSIONS)

    def __call__(self, name: str, signatures: Mapping[Any, Callable[..., Any]]) -> TypedFunction:
        return TypedFunction(name, signatures, self.types, self.conversions)

    def with_conversions(self, *edges: ConversionEdge) -> "Typed":
        """New builder whose conversion table also holds `edges`"""
        return Typed(self.types, self.conversions.with_edges(*edges))


def build_typed(
    name: str,
    signatures: Mapping[Any, Callable[..., Any]],
    *,
    types: TypeRegistry | None = None,
    conversions: ConversionTable | None = None,
) -> TypedFunction:
    """
    Build a typed function from a signature → implementation mapping.

    Args:
        name: Name used in error messages
        signatures: Mapping of signature declarations ("number, number", tuples of
            TypeTag, or Signature) to implementations
        types: Classifier (default: TypeRegistry())
        conversions: Conversion table (default: DEFAULT_CONVERSIONS)

    Raises:
        DuplicateSignature: If two declarations expand to the same signature
        ValueError: If a declaration names an unknown type
    """
    return Typed(types, conversions)(name, signatures)


@factory("typed", ())
def create_typed() -> Typed:
    return Typed()
