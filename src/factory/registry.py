"""
Factory Registry — deferred, dependency-declaring construction of operations

Операция объявляется как factory: имя, имена зависимостей и builder,
получающий разрешённые зависимости как keyword arguments. Реестр строит
каждую операцию лениво, ровно один раз на реестр (scope), и далее отдаёт
тот же закэшированный объект.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. `define`/`register` только записывают дескрипторы, ничего не строится
2. Граф зависимостей проверяется до запуска любого builder:
   цикл → CyclicDependency, отсутствующее имя → UnknownDependency
3. Построенные объекты не мутируются и не перестраиваются на месте;
   новый scope конфигурации требует `reset()` или `fork()`
4. Разрешение сериализовано re-entrant lock
"""

import logging
from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Any, Callable, Final, Iterable, Mapping

from src.core.errors import CyclicDependency, UnknownDependency

logger = logging.getLogger(__name__)

# Dependency names starting with this marker resolve to None when missing
OPTIONAL_MARKER: Final[str] = "?"


def is_optional(dependency: str) -> bool:
    return dependency.startswith(OPTIONAL_MARKER)


def strip_optional(dependency: str) -> str:
    return dependency[len(OPTIONAL_MARKER):] if is_optional(dependency) else dependency


# =============================================================================
# DESCRIPTORS
# =============================================================================


@dataclass(frozen=True)
class FactoryDescriptor:
    """
    Deferred constructor of one operation.

    Calling the descriptor runs the builder directly with keyword
    dependencies, bypassing any registry.
    """

    name: str
    dependencies: tuple[str, ...]
    builder: Callable[..., Any] = field(compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Factory name must not be empty")

    def __call__(self, **dependencies: Any) -> Any:
        return self.builder(**dependencies)


def factory(
    name: str,
    dependencies: Iterable[str],
    builder: Callable[..., Any] | None = None,
):
    """
    Declare a factory; usable directly or as a decorator.

    Examples:
        >>> @factory("double", ["typed"])
        ... def create_double(*, typed):
        ...     return typed("double", {"number": lambda x: 2 * x})
        >>> create_double.dependencies
        ('typed',)
    """
    dependencies = tuple(dependencies)
    if builder is not None:
        return FactoryDescriptor(name, dependencies, builder)

    def decorate(fn: Callable[..., Any]) -> FactoryDescriptor:
        return FactoryDescriptor(name, dependencies, fn)

    return decorate


@dataclass(frozen=True)
class BuiltOperation:
    """Materialized operation plus the bindings it was built from."""

    name: str
    value: Any
    bindings: Mapping[str, Any]


# =============================================================================
# REGISTRY
# =============================================================================


class FactoryRegistry:
    """
    Process- or scope-wide table of factories and their built results.

    Pre-bound values (e.g. the config accessor) are provided with `provide`
    and satisfy dependencies like built operations do.
    """

    def __init__(
        self,
        factories: Iterable[FactoryDescriptor] = (),
        values: Mapping[str, Any] | None = None,
    ):
        self._factories: dict[str, FactoryDescriptor] = {}
        self._values: dict[str, Any] = dict(values or {})
        self._built: dict[str, BuiltOperation] = {}
        self._lock = RLock()
        for descriptor in factories:
            self.register(descriptor)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, descriptor: FactoryDescriptor, override: bool = False) -> FactoryDescriptor:
        """
        Record a factory. Nothing is built.

        Args:
            descriptor: Factory to record
            override: Replace an existing factory of the same name; drops all
                built operations so the next resolve rebuilds consistently

        Raises:
            ValueError: If the name is taken and override is False
        """
        with self._lock:
            name = descriptor.name
            if name in self._factories or name in self._values:
                if not override:
                    raise ValueError(f"Factory '{name}' already registered")
                self._values.pop(name, None)
                self.reset()
            self._factories[name] = descriptor
            return descriptor

    def define(
        self,
        name: str,
        dependencies: Iterable[str],
        builder: Callable[..., Any],
        override: bool = False,
    ) -> FactoryDescriptor:
        return self.register(factory(name, dependencies, builder), override=override)

    def provide(self, name: str, value: Any, override: bool = False) -> None:
        """Bind `name` to a ready-made value (config accessor, constants, ...)"""
        with self._lock:
            if name in self._factories or name in self._values:
                if not override:
                    raise ValueError(f"Name '{name}' already registered")
                self._factories.pop(name, None)
                self.reset()
            self._values[name] = value

    def names(self) -> tuple[str, ...]:
        return tuple(self._values) + tuple(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._values or name in self._factories

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def build_order(self, name: str) -> list[str]:
        """
        Factories that resolving `name` would build, dependencies first.

        Already-built factories and provided values are skipped.

        Raises:
            CyclicDependency: If the graph under `name` has a cycle
            UnknownDependency: If a required dependency is not registered
        """
        with self._lock:
            order: list[str] = []
            done: set[str] = set()
            self._visit(name, None, [], done, order)
            return order

    def _visit(
        self,
        name: str,
        required_by: str | None,
        path: list[str],
        done: set[str],
        order: list[str],
    ) -> None:
        if name in done or name in self._values or name in self._built:
            return
        if name in path:
            raise CyclicDependency(path[path.index(name):] + [name])
        descriptor = self._factories.get(name)
        if descriptor is None:
            raise UnknownDependency(name, required_by)

        path.append(name)
        for dependency in descriptor.dependencies:
            target = strip_optional(dependency)
            if is_optional(dependency) and target not in self:
                continue
            self._visit(target, name, path, done, order)
        path.pop()

        done.add(name)
        order.append(name)

    def resolve(self, name: str) -> Any:
        """
        Built operation (or provided value) registered under `name`.

        The first call builds it and every missing dependency; later calls
        return the identical object.
        """
        with self._lock:
            if name in self._values:
                return self._values[name]
            built = self._built.get(name)
            if built is not None:
                return built.value
            for target in self.build_order(name):
                self._build(target)
            return self._built[name].value

    def built(self, name: str) -> BuiltOperation:
        """BuiltOperation record of `name`, building it if needed"""
        with self._lock:
            self.resolve(name)
            return self._built[name]

    def is_built(self, name: str) -> bool:
        return name in self._built

    def _build(self, name: str) -> None:
        descriptor = self._factories[name]
        bindings = {}
        for dependency in descriptor.dependencies:
            target = strip_optional(dependency)
            if target in self:
                bindings[target] = self._lookup(target)
            else:
                bindings[target] = None
        value = descriptor.builder(**bindings)
        self._built[name] = BuiltOperation(name, value, MappingProxyType(bindings))
        logger.debug("Built '%s' with dependencies %s", name, list(bindings))

    def _lookup(self, name: str) -> Any:
        if name in self._values:
            return self._values[name]
        return self._built[name].value

    # -------------------------------------------------------------------------
    # Scopes
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Drop every built operation; factories and values are kept"""
        with self._lock:
            if self._built:
                logger.info("Dropping %d built operations", len(self._built))
            self._built.clear()

    def fork(self, **values: Any) -> "FactoryRegistry":
        """
        Fresh scope with the same factories and nothing built.

        Keyword arguments replace or add provided values; a value named like
        a factory replaces that factory in the fork.
        """
        with self._lock:
            factories = [d for name, d in self._factories.items() if name not in values]
            return FactoryRegistry(factories, {**self._values, **values})

    def __repr__(self) -> str:
        return (
            f"FactoryRegistry(factories={len(self._factories)}, "
            f"values={len(self._values)}, built={len(self._built)})"
        )
