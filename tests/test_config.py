"""Tests for the configuration singletons and ParamSpec."""

from dataclasses import FrozenInstanceError

import pytest

from colorops import CONFIG, GAMMA_CONFIG, LUT_CONFIG, OPTIMIZER_CONFIG, OpDataError, ParamSpec
from colorops.config import FIXED_FUNCTION_CONFIG, ColorOpsConfig
from colorops.types import OptimizationFlags


class TestConfigValues:
    """Test the default configuration."""

    def test_singletons(self):
        """Test the module-level shortcuts point into CONFIG."""
        assert GAMMA_CONFIG is CONFIG.gamma
        assert LUT_CONFIG is CONFIG.lut
        assert OPTIMIZER_CONFIG is CONFIG.optimizer
        assert FIXED_FUNCTION_CONFIG is CONFIG.fixed_function
        assert isinstance(CONFIG, ColorOpsConfig)

    def test_gamma_bounds(self):
        """Test the gamma parameter bounds."""
        assert (GAMMA_CONFIG.basic_gamma.min_value, GAMMA_CONFIG.basic_gamma.max_value) == (
            0.01,
            100.0,
        )
        assert GAMMA_CONFIG.moncurve_gamma.min_value == 1.0
        assert GAMMA_CONFIG.moncurve_gamma.max_value == 10.0
        assert GAMMA_CONFIG.moncurve_offset.max_value == 0.9
        assert GAMMA_CONFIG.snap_tolerance == 1e-6

    def test_lut_limits(self):
        """Test the LUT limits."""
        assert LUT_CONFIG.max_1d_dimension == 1048576
        assert LUT_CONFIG.compose_big_size == 65536
        assert LUT_CONFIG.min_3d_grid == 2
        assert LUT_CONFIG.max_3d_grid == 129
        assert LUT_CONFIG.fast_inverse_3d_grid == 48

    def test_optimizer_defaults(self):
        """Test the optimizer defaults."""
        assert OPTIMIZER_CONFIG.max_passes > 1
        assert OPTIMIZER_CONFIG.default_flags == OptimizationFlags.VERY_GOOD

    def test_frozen(self):
        """Test configuration cannot be changed at runtime."""
        with pytest.raises(FrozenInstanceError):
            CONFIG.lut.max_3d_grid = 65
        with pytest.raises(FrozenInstanceError):
            GAMMA_CONFIG.basic_gamma.min_value = 0.0

    def test_get_all_specs(self):
        """Test every gamma spec is listed."""
        specs = GAMMA_CONFIG.get_all_specs()
        assert set(specs) == {"basic_gamma", "moncurve_gamma", "moncurve_offset"}
        assert all(isinstance(spec, ParamSpec) for spec in specs.values())


class TestParamSpec:
    """Test ParamSpec methods."""

    @pytest.fixture
    def spec(self):
        return ParamSpec(name="gamma", min_value=0.5, max_value=2.0, identity=1.0)

    def test_check_inside(self, spec):
        """Test values inside the bounds pass through."""
        assert spec.check(0.5) == 0.5
        assert spec.check(2.0) == 2.0

    def test_check_below(self, spec):
        """Test the lower bound message."""
        with pytest.raises(OpDataError, match="Parameter 0.25 is less than lower bound 0.5"):
            spec.check(0.25)

    def test_check_above(self, spec):
        """Test the upper bound message."""
        with pytest.raises(OpDataError, match="Parameter 3 is greater than upper bound 2"):
            spec.check(3.0)

    def test_contains(self, spec):
        """Test contains is inclusive."""
        assert spec.contains(0.5)
        assert spec.contains(2.0)
        assert not spec.contains(2.5)

    def test_identity(self, spec):
        """Test identity comparison."""
        assert spec.is_identity(1.0)
        assert not spec.is_identity(1.0 + 1e-9)

    def test_combine(self, spec):
        """Test values of consecutive ops compose by product."""
        assert spec.combine(2.0, 0.5) == 1.0
        assert spec.combine(2.0, 3.0) == 6.0

    def test_no_composition_rule_field(self):
        """Test specs carry only bounds, identity and description."""
        offset = GAMMA_CONFIG.moncurve_offset
        assert not hasattr(offset, "composition")
        assert "additive" not in repr(offset)

    def test_error_is_value_error(self, spec):
        """Test OpDataError can be caught as ValueError."""
        with pytest.raises(ValueError):
            spec.check(-1.0)
