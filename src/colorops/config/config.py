"""Unified colorops configuration.

This module provides a top-level configuration dataclass holding the
gamma bounds, LUT limits and optimizer settings as sub-attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from colorops.config.specs import ParamSpec
from colorops.types import OptimizationFlags


@dataclass(frozen=True)
class GammaConfig:
    """Parameter bounds for the gamma styles.

    Basic styles take a single exponent, moncurve styles take an exponent
    and an offset.
    """

    basic_gamma: ParamSpec = ParamSpec(
        name="gamma",
        min_value=0.01,
        max_value=100.0,
        identity=1.0,
        description="Basic power exponent: 1.0=no change",
    )

    moncurve_gamma: ParamSpec = ParamSpec(
        name="gamma",
        min_value=1.0,
        max_value=10.0,
        identity=1.0,
        description="Moncurve exponent of the power segment",
    )

    moncurve_offset: ParamSpec = ParamSpec(
        name="offset",
        min_value=0.0,
        max_value=0.9,
        identity=0.0,
        description="Moncurve offset of the linear toe: 0.0=pure power",
    )

    # Composed exponents closer than this to 1.0 snap to exactly 1.0
    snap_tolerance: float = 1e-6

    def get_all_specs(self) -> dict[str, ParamSpec]:
        return {
            "basic_gamma": self.basic_gamma,
            "moncurve_gamma": self.moncurve_gamma,
            "moncurve_offset": self.moncurve_offset,
        }


@dataclass(frozen=True)
class FixedFunctionConfig:
    """Parameter bounds of the parameterized fixed functions."""

    surround_gamma: ParamSpec = ParamSpec(
        name="gamma",
        min_value=0.01,
        max_value=100.0,
        identity=1.0,
        description="Rec.2100 surround power applied to luminance: 1.0=no change",
    )


@dataclass(frozen=True)
class LutConfig:
    """Size limits and numeric settings of the 1D and 3D LUT engines.

    Attributes:
        max_1d_dimension: Largest accepted 1D LUT length
        compose_big_size: Minimum length used by RESAMPLE_BIG composition
        min_3d_grid: Smallest 3D grid size
        max_3d_grid: Largest 3D grid size
        fast_inverse_3d_grid: Grid size of fast 3D inverse approximations
        inverse_3d_iterations: Newton iterations of exact 3D inversion
        float_precision: Significant digits used in cache IDs
    """

    max_1d_dimension: int = 1024 * 1024
    compose_big_size: int = 65536
    min_3d_grid: int = 2
    max_3d_grid: int = 129
    fast_inverse_3d_grid: int = 48
    inverse_3d_iterations: int = 30
    float_precision: int = 7


@dataclass(frozen=True)
class OptimizerConfig:
    """Settings of the op list optimizer."""

    max_passes: int = 8
    default_flags: OptimizationFlags = OptimizationFlags.DEFAULT


@dataclass(frozen=True)
class ColorOpsConfig:
    """Top-level configuration containing all sub-configurations.

    Provides hierarchical access:
        CONFIG.gamma.basic_gamma
        CONFIG.lut.compose_big_size
        CONFIG.optimizer.max_passes
    """

    gamma: GammaConfig = field(default_factory=GammaConfig)
    fixed_function: FixedFunctionConfig = field(default_factory=FixedFunctionConfig)
    lut: LutConfig = field(default_factory=LutConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)


# Main singleton instance
CONFIG = ColorOpsConfig()

GAMMA_CONFIG = CONFIG.gamma
FIXED_FUNCTION_CONFIG = CONFIG.fixed_function
LUT_CONFIG = CONFIG.lut
OPTIMIZER_CONFIG = CONFIG.optimizer
