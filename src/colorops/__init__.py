"""
colorops - Color Operation Data

Typed data of the elementary operations of a color pipeline, with the
rules needed to simplify op lists before they are evaluated.

Features:
- Gamma (basic and moncurve styles) with product-rule composition
- Affine log encodings, replaced by a domain clamp when cancelled
- 1D LUTs with half-float domains, monotonic preparation and fast inverse
- 3D LUTs with trilinear/tetrahedral evaluation and composition
- Matrix, Range, Exposure/Contrast, ASC-CDL and fixed functions
- Optimizer driven by OptimizationFlags (LOSSLESS to DRAFT presets)
- Numba-compiled CPU evaluation of op lists on RGB/RGBA buffers

Example:
    >>> from colorops import GammaOpData, GammaStyle, optimize_ops
    >>> ops = optimize_ops([
    ...     GammaOpData(GammaStyle.BASIC_FWD, [2.0]),
    ...     GammaOpData(GammaStyle.BASIC_FWD, [3.0]),
    ... ])
    >>> ops[0].red_params
    (6.0,)

Example - Processing pixels:
    >>> from colorops import CPUProcessor, LogOpData, MatrixOpData
    >>> processor = CPUProcessor([MatrixOpData.from_scale_offset([2, 2, 2]), LogOpData()])
    >>> out = processor.apply(pixels)  # [N, 3] or [N, 4] float32
"""

__version__ = "0.1.0"

# Configuration
from colorops.config import CONFIG, GAMMA_CONFIG, LUT_CONFIG, OPTIMIZER_CONFIG, ParamSpec

# CPU evaluation
from colorops.cpu import CPUProcessor, apply_ops

# Errors
from colorops.exceptions import OpDataError

# Half-float codec
from colorops.half import bracket_half, float_to_half, half_domain, half_to_float

# Op data
from colorops.ops import (
    CDLOpData,
    CDLStyle,
    ExposureContrastOpData,
    ExposureContrastStyle,
    FixedFunctionOpData,
    FixedFunctionStyle,
    FormatMetadata,
    GammaOpData,
    GammaStyle,
    HalfFlags,
    LogOpData,
    Lut1DOpData,
    Lut3DOpData,
    MatrixOpData,
    OpData,
    OpType,
    RangeOpData,
    RangeStyle,
    compose_lut1d,
    compose_lut3d,
    make_fast_lut1d_from_inverse,
    make_fast_lut3d_from_inverse,
)

# Optimizer
from colorops.optimizer import finalize_ops, optimize_ops

# Enumerations
from colorops.types import (
    BitDepth,
    FinalizationFlags,
    Interpolation,
    Lut1DHueAdjust,
    LutInversionQuality,
    OptimizationFlags,
    TransformDirection,
)

__all__ = [
    # Config
    "CONFIG",
    "GAMMA_CONFIG",
    "LUT_CONFIG",
    "OPTIMIZER_CONFIG",
    "ParamSpec",
    # Errors
    "OpDataError",
    # Enumerations
    "BitDepth",
    "FinalizationFlags",
    "Interpolation",
    "Lut1DHueAdjust",
    "LutInversionQuality",
    "OptimizationFlags",
    "TransformDirection",
    # Half-float codec
    "bracket_half",
    "float_to_half",
    "half_domain",
    "half_to_float",
    # Op data
    "OpData",
    "OpType",
    "FormatMetadata",
    "HalfFlags",
    "MatrixOpData",
    "RangeOpData",
    "RangeStyle",
    "GammaOpData",
    "GammaStyle",
    "LogOpData",
    "Lut1DOpData",
    "Lut3DOpData",
    "ExposureContrastOpData",
    "ExposureContrastStyle",
    "CDLOpData",
    "CDLStyle",
    "FixedFunctionOpData",
    "FixedFunctionStyle",
    "compose_lut1d",
    "compose_lut3d",
    "make_fast_lut1d_from_inverse",
    "make_fast_lut3d_from_inverse",
    # Optimizer and evaluation
    "optimize_ops",
    "finalize_ops",
    "CPUProcessor",
    "apply_ops",
    "__version__",
]
