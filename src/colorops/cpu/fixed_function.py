"""CPU math of the fixed functions.

ACES red modifier and glow (0.3 and 1.0 variants), the ACES 1.0 dark to
dim surround and the Rec.2100 surround. Functions take and return RGB
arrays shaped [N, 3].
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

# ============================================================================
# Constants
# ============================================================================

RED_MOD_03 = {"scale": 0.85, "pivot": 0.03, "width": 135.0}
RED_MOD_10 = {"scale": 0.82, "pivot": 0.03, "width": 135.0}
GLOW_03 = {"gain": 0.075, "mid": 0.1}
GLOW_10 = {"gain": 0.05, "mid": 0.08}

DARK_TO_DIM_GAMMA = 0.9811
AP1_LUMA = np.array([0.27222872, 0.67408177, 0.05368952], dtype=np.float64)
REC2020_LUMA = np.array([0.2627, 0.6780, 0.0593], dtype=np.float64)
REC2100_MIN_LUM = 1e-4

YC_RADIUS_WEIGHT = 1.75
TINY = 1e-10

# Uniform cubic B-spline basis, one column per knot interval
_BASIS = np.array(
    [
        [-1.0 / 6.0, 3.0 / 6.0, -3.0 / 6.0, 1.0 / 6.0],
        [3.0 / 6.0, -6.0 / 6.0, 3.0 / 6.0, 0.0],
        [-3.0 / 6.0, 0.0, 3.0 / 6.0, 0.0],
        [1.0 / 6.0, 4.0 / 6.0, 1.0 / 6.0, 0.0],
    ]
)


# ============================================================================
# Shared helpers
# ============================================================================


def rgb_to_saturation(rgb: NDArray) -> NDArray:
    """ACES saturation: (max - min) / max with noise floors."""
    maxc = np.maximum(rgb.max(axis=1), TINY)
    minc = np.maximum(rgb.min(axis=1), TINY)
    return (maxc - minc) / np.maximum(rgb.max(axis=1), 1e-2)


def rgb_to_yc(rgb: NDArray) -> NDArray:
    """Luminance proxy with a chroma term, used by the glow."""
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    chroma = np.sqrt(np.maximum(b * (b - g) + g * (g - r) + r * (r - b), 0.0))
    return (b + g + r + YC_RADIUS_WEIGHT * chroma) / 3.0


def cubic_basis_shaper(x: NDArray, width: float) -> NDArray:
    """Bell curve of total ``width`` centered on 0, peak 1."""
    knot = (x + width / 2.0) / width * 4.0
    j = np.floor(knot).astype(np.int64)
    t = knot - j
    inside = (j >= 0) & (j < 4)
    col = np.clip(3 - j, 0, 3)
    mono = np.stack([t * t * t, t * t, t, np.ones_like(t)], axis=1)
    y = np.einsum("nk,nk->n", mono, _BASIS[:, col].T)
    return np.where(inside, y * 1.5, 0.0)


def hue_weight(rgb: NDArray, width_deg: float) -> NDArray:
    """Cubic weight of the hue distance from pure red."""
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    a = 2.0 * r - (g + b)
    bb = np.sqrt(3.0) * (g - b)
    hue = np.degrees(np.arctan2(bb, a))
    return cubic_basis_shaper(hue, width_deg)


def sigmoid_shaper(x: NDArray) -> NDArray:
    t = np.maximum(1.0 - np.abs(x / 2.0), 0.0)
    y = 1.0 + np.sign(x) * (1.0 - t * t)
    return y / 2.0


# ============================================================================
# Red modifier
# ============================================================================


def _restore_hue(rgb: NDArray, new_red: NDArray, mask: NDArray) -> None:
    r, g, b = rgb[:, 0].copy(), rgb[:, 1].copy(), rgb[:, 2].copy()
    g_mid = mask & (g >= b)
    b_mid = mask & (g < b)
    hue_fac = (g - b) / np.maximum(r - b, TINY)
    rgb[:, 1] = np.where(g_mid, hue_fac * (new_red - b) + b, g)
    hue_fac = (b - g) / np.maximum(r - g, TINY)
    rgb[:, 2] = np.where(b_mid, hue_fac * (new_red - g) + g, b)


def red_mod_fwd(rgb: NDArray, params: dict, restore_hue: bool) -> NDArray:
    out = rgb.astype(np.float64, copy=True)
    f_h = hue_weight(out, params["width"])
    f_s = rgb_to_saturation(out)
    mask = f_h > 0.0
    new_red = out[:, 0] + f_h * f_s * (params["pivot"] - out[:, 0]) * (1.0 - params["scale"])
    if restore_hue:
        _restore_hue(out, new_red, mask)
    out[:, 0] = np.where(mask, new_red, out[:, 0])
    return out


def red_mod_inv(rgb: NDArray, params: dict, restore_hue: bool) -> NDArray:
    out = rgb.astype(np.float64, copy=True)
    f_h = hue_weight(out, params["width"])
    mask = f_h > 0.0
    one_minus_scale = 1.0 - params["scale"]
    pivot = params["pivot"]
    min_chan = np.minimum(out[:, 1], out[:, 2])

    # Solve the forward equation (quadratic in the original red)
    a = f_h * one_minus_scale - 1.0
    b = out[:, 0] - f_h * (pivot + min_chan) * one_minus_scale
    c = f_h * pivot * min_chan * one_minus_scale
    safe_a = np.where(mask, a, -1.0)
    disc = np.maximum(b * b - 4.0 * safe_a * c, 0.0)
    new_red = (-b - np.sqrt(disc)) / (2.0 * safe_a)

    if restore_hue:
        _restore_hue(out, new_red, mask)
    out[:, 0] = np.where(mask, new_red, out[:, 0])
    return out


# ============================================================================
# Glow
# ============================================================================


def glow_fwd(rgb: NDArray, params: dict) -> NDArray:
    out = rgb.astype(np.float64, copy=True)
    gain_in = params["gain"] * sigmoid_shaper((rgb_to_saturation(out) - 0.4) / 0.2)
    mid = params["mid"]
    yc = rgb_to_yc(out)
    safe_yc = np.maximum(yc, TINY)
    gain = np.where(
        yc <= 2.0 / 3.0 * mid,
        gain_in,
        np.where(yc >= 2.0 * mid, 0.0, gain_in * (mid / safe_yc - 0.5)),
    )
    return out * (1.0 + gain)[:, None]


def glow_inv(rgb: NDArray, params: dict) -> NDArray:
    out = rgb.astype(np.float64, copy=True)
    gain_in = params["gain"] * sigmoid_shaper((rgb_to_saturation(out) - 0.4) / 0.2)
    mid = params["mid"]
    yc = rgb_to_yc(out)
    safe_yc = np.maximum(yc, TINY)
    gain = np.where(
        yc <= (1.0 + gain_in) * 2.0 / 3.0 * mid,
        -gain_in / (1.0 + gain_in),
        np.where(
            yc >= 2.0 * mid,
            0.0,
            gain_in * (mid / safe_yc - 0.5) / (gain_in / 2.0 - 1.0),
        ),
    )
    return out * (1.0 + gain)[:, None]


# ============================================================================
# Surround
# ============================================================================


def luminance_power(rgb: NDArray, weights: NDArray, gamma: float, min_lum: float) -> NDArray:
    """Scale RGB so that luminance Y becomes Y ** gamma."""
    out = rgb.astype(np.float64, copy=True)
    y = np.maximum(out @ weights, min_lum)
    return out * np.power(y, gamma - 1.0)[:, None]


def dark_to_dim(rgb: NDArray, inverse: bool) -> NDArray:
    gamma = 1.0 / DARK_TO_DIM_GAMMA if inverse else DARK_TO_DIM_GAMMA
    return luminance_power(rgb, AP1_LUMA, gamma, TINY)


def rec2100_surround(rgb: NDArray, gamma: float) -> NDArray:
    return luminance_power(rgb, REC2020_LUMA, gamma, REC2100_MIN_LUM)
