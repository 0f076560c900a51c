"""Configuration module for colorops.

Usage:
    from colorops.config import CONFIG
    CONFIG.gamma.basic_gamma.min_value  # 0.01
    CONFIG.lut.compose_big_size  # 65536

    from colorops.config import GAMMA_CONFIG
    GAMMA_CONFIG.moncurve_offset.max_value  # 0.9
"""

from colorops.config.config import (
    CONFIG,
    FIXED_FUNCTION_CONFIG,
    GAMMA_CONFIG,
    LUT_CONFIG,
    OPTIMIZER_CONFIG,
    ColorOpsConfig,
    FixedFunctionConfig,
    GammaConfig,
    LutConfig,
    OptimizerConfig,
)
from colorops.config.specs import ParamSpec

__all__ = [
    "ParamSpec",
    "ColorOpsConfig",
    "GammaConfig",
    "FixedFunctionConfig",
    "LutConfig",
    "OptimizerConfig",
    "CONFIG",
    "GAMMA_CONFIG",
    "FIXED_FUNCTION_CONFIG",
    "LUT_CONFIG",
    "OPTIMIZER_CONFIG",
]
