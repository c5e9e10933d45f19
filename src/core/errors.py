"""
Errors — typed failure reasons raised by the dispatch core

Каждый отказ это жёсткая остановка с типизированной причиной:
- ошибки dispatch (нет достижимой сигнатуры, дубликат сигнатуры, конверсия)
- ошибки построения factory registry (циклы, неизвестные зависимости)
- доменные ошибки операций (несовместимые базы единиц, неизвестные единицы)
"""


class MathCoreError(Exception):
    """Base class of all errors raised by the dispatch core."""


# =============================================================================
# DISPATCH
# =============================================================================


class NoMatchingSignature(MathCoreError, TypeError):
    """
    No registered signature is reachable from the argument types.

    Raised synchronously at call time; never defaulted.
    """

    def __init__(self, name: str, arg_types: tuple[str, ...], detail: str = "") -> None:
        self.name = name
        self.arg_types = arg_types
        message = f"No signature of '{name}' matches argument types ({', '.join(arg_types)})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DuplicateSignature(MathCoreError, ValueError):
    """The same signature was declared twice for one operation."""


class ImplicitConversionError(MathCoreError, ValueError):
    """A declared conversion refused a value it could not convert losslessly."""


# =============================================================================
# FACTORY REGISTRY
# =============================================================================


class CyclicDependency(MathCoreError):
    """
    Building an operation transitively requires building it again.

    Fatal configuration error; the dependency graph does not change at runtime.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"Cyclic dependency: {' -> '.join(self.cycle)}")


class UnknownDependency(MathCoreError, LookupError):
    """A declared dependency name has no registration."""

    def __init__(self, name: str, required_by: str | None = None) -> None:
        self.name = name
        self.required_by = required_by
        if required_by is None:
            message = f"Unknown dependency '{name}'"
        else:
            message = f"Unknown dependency '{name}' (required by '{required_by}')"
        super().__init__(message)


# =============================================================================
# DOMAIN
# =============================================================================


class IncompatibleBase(MathCoreError, ValueError):
    """Units with different physical base dimensions were compared."""


class UnknownUnit(MathCoreError, ValueError):
    """A unit name could not be resolved against the unit table."""
