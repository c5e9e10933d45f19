"""
Create — assemble an instance from factories and a configuration

    math = create()
    math.equal_scalar(0.1 + 0.2, 0.3)        # True
    math.configure(epsilon=0)                # exact comparisons from now on

Каждый instance владеет собственным FactoryRegistry: операции строятся один
раз на instance и не разделяются между scope конфигурации.
"""

from typing import Any, Iterable

from src.core.config import ConfigStore, MathConfig
from src.core.errors import UnknownDependency
from src.factory.registry import FactoryDescriptor, FactoryRegistry
from src.functions import DEFAULT_FACTORIES


class MathNamespace:
    """
    Lazily built operations of one registry, exposed as attributes.

    Attribute access resolves the operation of the same name through the
    registry; the first access builds it.
    """

    def __init__(self, registry: FactoryRegistry, config: ConfigStore):
        self._registry = registry
        self._config = config

    @property
    def registry(self) -> FactoryRegistry:
        return self._registry

    @property
    def config(self) -> MathConfig:
        return self._config()

    def configure(self, **changes: Any) -> MathConfig:
        """Update the configuration seen by every operation of this instance"""
        return self._config.update(**changes)

    def fork(self, **changes: Any) -> "MathNamespace":
        """New instance with the same factories, its own config and nothing built"""
        config = ConfigStore(MathConfig(**{**self.config.model_dump(), **changes}))
        return MathNamespace(self._registry.fork(config=config), config)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._registry.resolve(name)
        except UnknownDependency as exc:
            if exc.name != name:
                raise
            raise AttributeError(f"'{type(self).__name__}' has no operation '{name}'") from None

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._registry.names()))

    def __repr__(self) -> str:
        return f"MathNamespace({self._registry!r})"


def create(
    config: MathConfig | dict | None = None,
    factories: Iterable[FactoryDescriptor] = DEFAULT_FACTORIES,
) -> MathNamespace:
    """
    Build a fresh instance.

    Args:
        config: MathConfig or mapping of its fields (default: MathConfig())
        factories: Factories to register (default: DEFAULT_FACTORIES)

    Returns:
        MathNamespace resolving operations lazily

    Raises:
        pydantic.ValidationError: If `config` is an invalid mapping
    """
    if isinstance(config, dict):
        config = MathConfig(**config)
    store = ConfigStore(config)
    registry = FactoryRegistry(factories, values={"config": store})
    return MathNamespace(registry, store)
