"""
Тесты для MathConfig и ConfigStore
"""

import pytest
from pydantic import ValidationError

from src.core.config import ConfigStore, MathConfig
from src.core.math.nearly_equal import DBL_EPSILON, DEFAULT_EPSILON


class TestMathConfig:
    """Tests for the MathConfig model"""

    def test_defaults(self) -> None:
        """Defaults are 1e-12 relative and machine epsilon absolute"""
        config = MathConfig()
        assert config.epsilon == DEFAULT_EPSILON == 1e-12
        assert config.abs_epsilon == DBL_EPSILON

    def test_exact_comparison_allowed(self) -> None:
        """None and 0 both mean exact comparison"""
        assert MathConfig(epsilon=None).epsilon is None
        assert MathConfig(epsilon=0).epsilon == 0

    def test_frozen(self) -> None:
        """Config cannot be mutated in place"""
        config = MathConfig()
        with pytest.raises(ValidationError):
            config.epsilon = 1e-6

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_epsilon_rejected(self, value) -> None:
        """epsilon must be finite"""
        with pytest.raises(ValidationError, match="finite"):
            MathConfig(epsilon=value)

    def test_negative_abs_epsilon_rejected(self) -> None:
        """The absolute floor cannot be negative"""
        with pytest.raises(ValidationError):
            MathConfig(abs_epsilon=-1.0)


class TestConfigStore:
    """Tests for ConfigStore"""

    def test_accessor(self) -> None:
        """Calling the store returns the current config"""
        config = MathConfig(epsilon=1e-6)
        store = ConfigStore(config)
        assert store() is config
        assert ConfigStore()() == MathConfig()

    def test_update(self) -> None:
        """update swaps in a new config, keeping unchanged fields"""
        store = ConfigStore(MathConfig(abs_epsilon=0.0))
        before = store()
        after = store.update(epsilon=1e-3)
        assert store() is after
        assert after.epsilon == 1e-3
        assert after.abs_epsilon == 0.0
        assert before.epsilon == DEFAULT_EPSILON

    def test_invalid_update_keeps_config(self) -> None:
        """A rejected update leaves the current config in place"""
        store = ConfigStore()
        before = store()
        with pytest.raises(ValidationError):
            store.update(abs_epsilon=-1)
        assert store() is before
