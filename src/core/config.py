"""
Config — process-wide numeric configuration

Immutable Pydantic модель с толерантностями сравнения и store, через который
операции её читают. Операции читают текущий config только через accessor
`config()` без аргументов; замена config это задача приложения.
"""

import math
from threading import Lock

from pydantic import BaseModel, Field, field_validator

from src.core.math.nearly_equal import DBL_EPSILON, DEFAULT_EPSILON


# =============================================================================
# MODEL
# =============================================================================


class MathConfig(BaseModel):
    """
    Numeric configuration read by tolerance-aware operations.

    Immutable model (frozen=True).
    """

    epsilon: float | None = Field(
        DEFAULT_EPSILON,
        description="Relative tolerance; None or <= 0 compares exactly",
    )
    abs_epsilon: float = Field(
        DBL_EPSILON,
        ge=0,
        description="Absolute floor for number comparisons",
    )

    model_config = {"frozen": True}

    @field_validator("epsilon")
    @classmethod
    def validate_epsilon_finite(cls, v: float | None) -> float | None:
        """NaN or infinite tolerances make every comparison meaningless"""
        if v is not None and not math.isfinite(v):
            raise ValueError(f"epsilon must be finite, got {v}")
        return v


# =============================================================================
# STORE
# =============================================================================


class ConfigStore:
    """
    Holder of the current MathConfig.

    Calling the store returns the current config. `update` swaps in a new,
    validated config; already-built operations see it on their next call.
    """

    def __init__(self, config: MathConfig | None = None):
        self._config = config or MathConfig()
        self._lock = Lock()

    def __call__(self) -> MathConfig:
        return self._config

    def update(self, **changes) -> MathConfig:
        """
        Replace the current config with a copy carrying `changes`.

        Raises:
            pydantic.ValidationError: If a changed field is invalid
        """
        with self._lock:
            self._config = MathConfig(**{**self._config.model_dump(), **changes})
            return self._config

    def __repr__(self) -> str:
        return f"ConfigStore({self._config!r})"
