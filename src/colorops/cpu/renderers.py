"""
CPU evaluation of op data on RGBA pixel buffers.

Each renderer takes an op and a float32 array shaped [N, 4] and modifies
the array in place. :func:`apply_ops` runs a list of ops on a copy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from colorops.config import LUT_CONFIG
from colorops.cpu import fixed_function as ff
from colorops.cpu.kernels import (
    lut1d_inverse_half_numba,
    lut1d_inverse_numba,
    lut1d_linear_numba,
    lut1d_nearest_numba,
    lut3d_tetrahedral_numba,
    lut3d_trilinear_numba,
)
from colorops.exceptions import OpDataError
from colorops.half import bracket_half, half_domain
from colorops.ops.base import OpData, OpType
from colorops.ops.cdl import LUMA_WEIGHTS, CDLOpData
from colorops.ops.exposure_contrast import ExposureContrastOpData, ExposureContrastStyle
from colorops.ops.fixed_function import FixedFunctionOpData, FixedFunctionStyle
from colorops.ops.gamma import GammaOpData, GammaStyle
from colorops.ops.log import (
    LIN_SIDE_OFFSET,
    LIN_SIDE_SLOPE,
    LOG_SIDE_OFFSET,
    LOG_SIDE_SLOPE,
    LogOpData,
)
from colorops.ops.lut1d import Lut1DOpData
from colorops.ops.lut3d import Lut3DOpData
from colorops.ops.matrix import MatrixOpData
from colorops.ops.range import RangeOpData, RangeStyle
from colorops.types import Interpolation, Lut1DHueAdjust, TransformDirection

logger = logging.getLogger(__name__)

# Smallest positive float32, floor of the log argument
FLT_MIN = float(np.finfo(np.float32).tiny)

# Inverse of the Rec.709 OETF exponent, used by the video E/C styles
VIDEO_OETF_POWER = 0.54644808743169393

EC_MIN_PIVOT = 0.001
EC_MIN_CONTRAST = 1e-6


# ============================================================================
# Matrix and Range
# ============================================================================


def render_matrix(op: MatrixOpData, rgba: NDArray[np.float32]) -> None:
    result = rgba.astype(np.float64) @ op.matrix.T + op.offsets
    rgba[:] = result


def render_range(op: RangeOpData, rgba: NDArray[np.float32]) -> None:
    rgb = rgba[:, :3].astype(np.float64) * op.scale + op.offset
    if op.style is RangeStyle.CLAMP:
        if not op.min_is_empty():
            rgb = np.maximum(rgb, op.min_out)
        if not op.max_is_empty():
            rgb = np.minimum(rgb, op.max_out)
    rgba[:, :3] = rgb


# ============================================================================
# Gamma
# ============================================================================


def _basic(x: NDArray, gamma: float) -> NDArray:
    return np.power(np.maximum(x, 0.0), gamma)


def _moncurve_fwd(x: NDArray, gamma: float, offset: float) -> NDArray:
    if offset == 0.0:
        return _basic(x, gamma)
    if gamma == 1.0:
        return x / (1.0 + offset)
    break_pnt = offset / (gamma - 1.0)
    slope = ((gamma - 1.0) / offset) * np.power(
        offset * gamma / ((gamma - 1.0) * (1.0 + offset)), gamma
    )
    power = np.power(np.maximum((x + offset) / (1.0 + offset), 0.0), gamma)
    return np.where(x >= break_pnt, power, x * slope)


def _moncurve_rev(y: NDArray, gamma: float, offset: float) -> NDArray:
    if offset == 0.0:
        return _basic(y, 1.0 / gamma)
    if gamma == 1.0:
        return y * (1.0 + offset)
    break_pnt = np.power(offset * gamma / ((gamma - 1.0) * (1.0 + offset)), gamma)
    slope = np.power((gamma - 1.0) / offset, gamma - 1.0) * np.power(
        (1.0 + offset) / gamma, gamma
    )
    power = (1.0 + offset) * np.power(np.maximum(y, 0.0), 1.0 / gamma) - offset
    return np.where(y >= break_pnt, power, y * slope)


def render_gamma(op: GammaOpData, rgba: NDArray[np.float32]) -> None:
    style = op.style
    for channel, params in enumerate(op.channel_params()):
        x = rgba[:, channel].astype(np.float64)
        if style is GammaStyle.BASIC_FWD:
            y = _basic(x, params[0])
        elif style is GammaStyle.BASIC_REV:
            y = _basic(x, 1.0 / params[0])
        elif style is GammaStyle.MONCURVE_FWD:
            y = _moncurve_fwd(x, params[0], params[1])
        else:
            y = _moncurve_rev(x, params[0], params[1])
        rgba[:, channel] = y


# ============================================================================
# Log
# ============================================================================


def render_log(op: LogOpData, rgba: NDArray[np.float32]) -> None:
    log_base = np.log(op.base)
    forward = op.direction is TransformDirection.FORWARD
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        for channel, params in enumerate(op.channel_params()):
            x = rgba[:, channel].astype(np.float64)
            log_slope = params[LOG_SIDE_SLOPE]
            log_offset = params[LOG_SIDE_OFFSET]
            lin_slope = params[LIN_SIDE_SLOPE]
            lin_offset = params[LIN_SIDE_OFFSET]
            if forward:
                arg = np.maximum(lin_slope * x + lin_offset, FLT_MIN)
                y = log_slope * np.log(arg) / log_base + log_offset
            else:
                y = (np.power(op.base, (x - log_offset) / log_slope) - lin_offset) / lin_slope
            rgba[:, channel] = y


# ============================================================================
# 1D LUT
# ============================================================================


def _lookup_standard(values: NDArray[np.float32], table: NDArray[np.float32], nearest: bool):
    out = np.empty_like(values)
    if nearest:
        lut1d_nearest_numba(values, table, out)
    else:
        lut1d_linear_numba(values, table, out)
    return out


def _lookup_half(values: NDArray[np.float32], table: NDArray[np.float32], nearest: bool):
    lo, hi, frac = bracket_half(values)
    if nearest:
        return np.where(frac < 0.5, table[lo], table[hi]).astype(np.float32)
    t_lo = table[lo]
    # Codes with fraction 0 may hold infinities, so no blend
    with np.errstate(invalid="ignore"):
        blended = t_lo + frac * (table[hi] - t_lo)
    return np.where(frac > 0.0, blended, t_lo).astype(np.float32)


def _invert_channel(op: Lut1DOpData, values: NDArray[np.float32], channel: int):
    table = np.ascontiguousarray(op.values()[:, channel])
    props = op.component_properties[channel]
    out = np.empty_like(values)
    if op.is_input_half_domain():
        lut1d_inverse_half_numba(
            values,
            table,
            half_domain(),
            props.start_domain,
            props.end_domain,
            props.neg_start_domain,
            props.neg_end_domain,
            props.is_increasing,
            out,
        )
    else:
        domain = (np.arange(op.dimension, dtype=np.float64) / (op.dimension - 1)).astype(
            np.float32
        )
        lut1d_inverse_numba(
            values,
            table,
            domain,
            props.start_domain,
            props.end_domain,
            props.is_increasing,
            out,
        )
    return out


def _dw3_adjust(before: NDArray, after: NDArray) -> NDArray:
    """Restore the hue of ``before`` by recomputing the middle channel."""
    order = np.argsort(before, axis=1, kind="stable")
    rows = np.arange(before.shape[0])
    lo_i, mid_i, hi_i = order[:, 0], order[:, 1], order[:, 2]

    old_min = before[rows, lo_i]
    old_max = before[rows, hi_i]
    span = old_max - old_min
    safe = np.where(span > 0.0, span, 1.0)
    hue_factor = np.where(span > 0.0, (before[rows, mid_i] - old_min) / safe, 0.0)

    new_min = after[rows, lo_i]
    new_max = after[rows, hi_i]
    out = after.copy()
    out[rows, mid_i] = new_min + hue_factor * (new_max - new_min)
    return out


def render_lut1d(op: Lut1DOpData, rgba: NDArray[np.float32]) -> None:
    if op.direction is TransformDirection.INVERSE and not op.is_finalized:
        op = op.clone()
        op.finalize()

    before = rgba[:, :3].copy()
    nearest = op.get_concrete_interpolation() is Interpolation.NEAREST
    tables = op.values()
    result = np.empty_like(before)

    for channel in range(3):
        values = np.ascontiguousarray(before[:, channel], dtype=np.float32)
        if op.direction is TransformDirection.INVERSE:
            result[:, channel] = _invert_channel(op, values, channel)
        elif op.is_input_half_domain():
            result[:, channel] = _lookup_half(values, tables[:, channel], nearest)
        else:
            table = np.ascontiguousarray(tables[:, channel])
            result[:, channel] = _lookup_standard(values, table, nearest)

    if op.hue_adjust is Lut1DHueAdjust.DW3:
        result = _dw3_adjust(before.astype(np.float64), result.astype(np.float64))
    rgba[:, :3] = result


# ============================================================================
# 3D LUT
# ============================================================================


def _lut3d_forward(
    rgb: NDArray[np.float32], grid: NDArray[np.float32], interpolation: Interpolation
) -> NDArray[np.float32]:
    rgb = np.ascontiguousarray(rgb, dtype=np.float32)
    grid = np.ascontiguousarray(grid, dtype=np.float32)
    if interpolation is Interpolation.NEAREST:
        scale = grid.shape[0] - 1
        idx = np.rint(np.clip(np.nan_to_num(rgb, nan=0.0), 0.0, 1.0) * scale).astype(np.int64)
        return grid[idx[:, 0], idx[:, 1], idx[:, 2]].astype(np.float32)

    out = np.empty_like(rgb)
    if interpolation is Interpolation.TETRAHEDRAL:
        lut3d_tetrahedral_numba(rgb, grid, out)
    else:
        lut3d_trilinear_numba(rgb, grid, out)
    return out


def _lut3d_inverse(
    rgb: NDArray[np.float32], grid: NDArray[np.float32], interpolation: Interpolation
) -> NDArray[np.float32]:
    """Damped Newton search for the input that the forward LUT maps to ``rgb``."""
    target = rgb.astype(np.float64)
    x = np.clip(np.nan_to_num(target, nan=0.0), 0.0, 1.0)
    step = 1e-4
    eye = np.eye(3)

    for _ in range(LUT_CONFIG.inverse_3d_iterations):
        fx = _lut3d_forward(x.astype(np.float32), grid, interpolation).astype(np.float64)
        residual = target - fx
        jac = np.empty((x.shape[0], 3, 3))
        for axis in range(3):
            probe = x.copy()
            direction = np.where(probe[:, axis] + step > 1.0, -step, step)
            probe[:, axis] += direction
            f_probe = _lut3d_forward(probe.astype(np.float32), grid, interpolation)
            jac[:, :, axis] = (f_probe.astype(np.float64) - fx) / direction[:, None]

        jt = np.transpose(jac, (0, 2, 1))
        lhs = jt @ jac + 1e-8 * eye
        rhs = (jt @ residual[:, :, None])[:, :, 0]
        delta = np.linalg.solve(lhs, rhs[:, :, None])[:, :, 0]
        x = np.clip(x + delta, 0.0, 1.0)

    return x.astype(np.float32)


def render_lut3d(op: Lut3DOpData, rgba: NDArray[np.float32]) -> None:
    grid = op.grid()
    interpolation = op.get_concrete_interpolation()
    rgb = rgba[:, :3]
    if op.direction is TransformDirection.INVERSE:
        rgba[:, :3] = _lut3d_inverse(rgb, grid, interpolation)
    else:
        rgba[:, :3] = _lut3d_forward(rgb, grid, interpolation)


# ============================================================================
# Exposure / contrast
# ============================================================================


def render_exposure_contrast(op: ExposureContrastOpData, rgba: NDArray[np.float32]) -> None:
    style = op.style
    x = rgba[:, :3].astype(np.float64)
    contrast = max(op.contrast * op.gamma, EC_MIN_CONTRAST)

    if style in (ExposureContrastStyle.LOGARITHMIC, ExposureContrastStyle.LOGARITHMIC_REV):
        log_pivot = max(
            0.0,
            np.log2(max(op.pivot, EC_MIN_PIVOT) / 0.18) * op.log_exposure_step
            + op.log_mid_gray,
        )
        shift = op.exposure * op.log_exposure_step
        if style.is_forward:
            y = (x + shift - log_pivot) * contrast + log_pivot
        else:
            y = (x - log_pivot) / contrast + log_pivot - shift
        rgba[:, :3] = y
        return

    exposure = 2.0**op.exposure
    pivot = max(op.pivot, EC_MIN_PIVOT)
    if style in (ExposureContrastStyle.VIDEO, ExposureContrastStyle.VIDEO_REV):
        exposure = exposure**VIDEO_OETF_POWER
        pivot = pivot**VIDEO_OETF_POWER

    if style.is_forward:
        y = x * exposure
        if contrast != 1.0:
            y = pivot * np.power(np.maximum(y, 0.0) / pivot, contrast)
    else:
        y = x
        if contrast != 1.0:
            y = pivot * np.power(np.maximum(y, 0.0) / pivot, 1.0 / contrast)
        y = y / exposure
    rgba[:, :3] = y


# ============================================================================
# CDL
# ============================================================================


def _reciprocal(values: NDArray) -> NDArray:
    safe = np.where(values != 0.0, values, 1.0)
    return np.where(values != 0.0, 1.0 / safe, 0.0)


def _power(x: NDArray, power: NDArray, clamping: bool) -> NDArray:
    if clamping:
        return np.power(np.maximum(x, 0.0), power)
    # Negative values pass through unchanged
    return np.where(x >= 0.0, np.power(np.maximum(x, 0.0), power), x)


def _saturate(x: NDArray, saturation: float) -> NDArray:
    luma = (x @ np.asarray(LUMA_WEIGHTS))[:, None]
    return luma + saturation * (x - luma)


def render_cdl(op: CDLOpData, rgba: NDArray[np.float32]) -> None:
    slope = np.asarray(op.slope, dtype=np.float64)
    offset = np.asarray(op.offset, dtype=np.float64)
    power = np.asarray(op.power, dtype=np.float64)
    clamping = op.style.is_clamping
    x = rgba[:, :3].astype(np.float64)

    if op.style.is_forward:
        x = x * slope + offset
        if clamping:
            x = np.clip(x, 0.0, 1.0)
        x = _power(x, power, clamping)
        x = _saturate(x, op.saturation)
        if clamping:
            x = np.clip(x, 0.0, 1.0)
    else:
        if clamping:
            x = np.clip(x, 0.0, 1.0)
        x = _saturate(x, float(_reciprocal(np.asarray(op.saturation))))
        if clamping:
            x = np.clip(x, 0.0, 1.0)
        x = _power(x, _reciprocal(power), clamping)
        x = (x - offset) * _reciprocal(slope)
        if clamping:
            x = np.clip(x, 0.0, 1.0)
    rgba[:, :3] = x


# ============================================================================
# Fixed functions
# ============================================================================


def render_fixed_function(op: FixedFunctionOpData, rgba: NDArray[np.float32]) -> None:
    rgb = rgba[:, :3].astype(np.float64)
    style = op.style
    if style is FixedFunctionStyle.ACES_RED_MOD_03_FWD:
        out = ff.red_mod_fwd(rgb, ff.RED_MOD_03, restore_hue=True)
    elif style is FixedFunctionStyle.ACES_RED_MOD_03_INV:
        out = ff.red_mod_inv(rgb, ff.RED_MOD_03, restore_hue=True)
    elif style is FixedFunctionStyle.ACES_RED_MOD_10_FWD:
        out = ff.red_mod_fwd(rgb, ff.RED_MOD_10, restore_hue=False)
    elif style is FixedFunctionStyle.ACES_RED_MOD_10_INV:
        out = ff.red_mod_inv(rgb, ff.RED_MOD_10, restore_hue=False)
    elif style is FixedFunctionStyle.ACES_GLOW_03_FWD:
        out = ff.glow_fwd(rgb, ff.GLOW_03)
    elif style is FixedFunctionStyle.ACES_GLOW_03_INV:
        out = ff.glow_inv(rgb, ff.GLOW_03)
    elif style is FixedFunctionStyle.ACES_GLOW_10_FWD:
        out = ff.glow_fwd(rgb, ff.GLOW_10)
    elif style is FixedFunctionStyle.ACES_GLOW_10_INV:
        out = ff.glow_inv(rgb, ff.GLOW_10)
    elif style is FixedFunctionStyle.ACES_DARK_TO_DIM_10_FWD:
        out = ff.dark_to_dim(rgb, inverse=False)
    elif style is FixedFunctionStyle.ACES_DARK_TO_DIM_10_INV:
        out = ff.dark_to_dim(rgb, inverse=True)
    else:
        out = ff.rec2100_surround(rgb, op.params[0])
    rgba[:, :3] = out


# ============================================================================
# Dispatch
# ============================================================================

RENDERERS: dict[OpType, Callable[[OpData, NDArray[np.float32]], None]] = {
    OpType.MATRIX: render_matrix,
    OpType.RANGE: render_range,
    OpType.GAMMA: render_gamma,
    OpType.LOG: render_log,
    OpType.LUT1D: render_lut1d,
    OpType.LUT3D: render_lut3d,
    OpType.EXPOSURE_CONTRAST: render_exposure_contrast,
    OpType.CDL: render_cdl,
    OpType.FIXED_FUNCTION: render_fixed_function,
}


def apply_op(op: OpData, rgba: NDArray[np.float32]) -> None:
    """Apply one op to an RGBA float32 buffer in place."""
    renderer = RENDERERS.get(op.op_type)
    if renderer is None:
        raise OpDataError(f"No CPU renderer for op type {op.op_type.value}.")
    renderer(op, rgba)


def apply_ops(ops: Sequence[OpData], pixels: ArrayLike) -> NDArray[np.float32]:
    """
    Apply ops in order to a copy of ``pixels``.

    Args:
        ops: Ops to apply
        pixels: RGBA values [N, 4]

    Returns:
        New float32 array [N, 4]
    """
    rgba = np.array(pixels, dtype=np.float32, copy=True)
    if rgba.ndim != 2 or rgba.shape[1] != 4:
        raise ValueError(f"Expected RGBA pixels shaped [N, 4], got {rgba.shape}")
    for op in ops:
        apply_op(op, rgba)
    return rgba
