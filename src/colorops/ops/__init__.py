"""Operation data variants.

Each variant validates its parameters, derives its inverse and knows when
it is an identity. Variants that can merge with a neighbour implement
``may_compose`` / ``compose``.
"""

from colorops.ops.array import Array, HalfFlags, Lut3by1DArray
from colorops.ops.base import FormatMetadata, OpData, OpType
from colorops.ops.cdl import CDLOpData, CDLStyle
from colorops.ops.exposure_contrast import ExposureContrastOpData, ExposureContrastStyle
from colorops.ops.fixed_function import FixedFunctionOpData, FixedFunctionStyle
from colorops.ops.gamma import GammaOpData, GammaStyle
from colorops.ops.log import LogOpData
from colorops.ops.lut1d import (
    ComponentProperties,
    ComposeMethod,
    Lut1DOpData,
    compose_lut1d,
    compose_lut1d_vec,
    get_lut_ideal_size,
    make_fast_lut1d_from_inverse,
    make_lookup_domain,
)
from colorops.ops.lut3d import (
    Lut3DArray,
    Lut3DOpData,
    compose_lut3d,
    compose_lut3d_vec,
    make_fast_lut3d_from_inverse,
)
from colorops.ops.matrix import MatrixOpData
from colorops.ops.range import RangeOpData, RangeStyle

__all__ = [
    # Base
    "OpData",
    "OpType",
    "FormatMetadata",
    "Array",
    "HalfFlags",
    "Lut3by1DArray",
    "Lut3DArray",
    # Variants
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
    # 1D LUT engine
    "ComponentProperties",
    "ComposeMethod",
    "compose_lut1d",
    "compose_lut1d_vec",
    "get_lut_ideal_size",
    "make_fast_lut1d_from_inverse",
    "make_lookup_domain",
    # 3D LUT engine
    "compose_lut3d",
    "compose_lut3d_vec",
    "make_fast_lut3d_from_inverse",
]
