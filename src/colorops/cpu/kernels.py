"""
Numba-compiled kernels for LUT evaluation.

Provides JIT-compiled kernels for 1D lookup (forward and inverse search)
and 3D interpolation over flat sample buffers. Kernels write into
caller-allocated output arrays.
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

# NaN inputs must survive the comparisons below, so no fastmath here


@njit(parallel=True, cache=True, nogil=True)
def lut1d_linear_numba(
    values: NDArray[np.float32],
    table: NDArray[np.float32],
    out: NDArray[np.float32],
) -> None:
    """
    Linear interpolation in a standard-domain 1D table.

    Args:
        values: Input values [N], clamped to [0, 1]
        table: Table samples [M]
        out: Output [N] (modified in-place)
    """
    n = values.shape[0]
    m = table.shape[0]
    scale = m - 1

    for i in prange(n):
        x = values[i]
        if x != x:
            x = 0.0
        elif x < 0.0:
            x = 0.0
        elif x > 1.0:
            x = 1.0

        idx = x * scale
        lo = int(idx)
        if lo >= m - 1:
            lo = m - 2
        frac = idx - lo
        out[i] = table[lo] + frac * (table[lo + 1] - table[lo])


@njit(parallel=True, cache=True, nogil=True)
def lut1d_nearest_numba(
    values: NDArray[np.float32],
    table: NDArray[np.float32],
    out: NDArray[np.float32],
) -> None:
    """
    Nearest-entry lookup in a standard-domain 1D table.

    Args:
        values: Input values [N], clamped to [0, 1]
        table: Table samples [M]
        out: Output [N] (modified in-place)
    """
    n = values.shape[0]
    scale = table.shape[0] - 1

    for i in prange(n):
        x = values[i]
        if x != x:
            x = 0.0
        elif x < 0.0:
            x = 0.0
        elif x > 1.0:
            x = 1.0
        out[i] = table[int(x * scale + 0.5)]


@njit(cache=True, nogil=True)
def _search_monotonic(
    y: float,
    table: NDArray[np.float32],
    domain: NDArray[np.float32],
    start: int,
    end: int,
    increasing: bool,
) -> float:
    # Bisection over table[start:end + 1], which is monotonic (flat spots allowed)
    lo = start
    hi = end
    if lo == hi:
        return domain[lo]

    if increasing:
        if y <= table[lo]:
            return domain[lo]
        if y >= table[hi]:
            return domain[hi]
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if table[mid] <= y:
                lo = mid
            else:
                hi = mid
    else:
        if y >= table[lo]:
            return domain[lo]
        if y <= table[hi]:
            return domain[hi]
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if table[mid] >= y:
                lo = mid
            else:
                hi = mid

    t0 = table[lo]
    t1 = table[hi]
    if t1 == t0:
        return domain[lo]
    frac = (y - t0) / (t1 - t0)
    return domain[lo] + frac * (domain[hi] - domain[lo])


@njit(parallel=True, cache=True, nogil=True)
def lut1d_inverse_numba(
    values: NDArray[np.float32],
    table: NDArray[np.float32],
    domain: NDArray[np.float32],
    start: int,
    end: int,
    increasing: bool,
    out: NDArray[np.float32],
) -> None:
    """
    Exact inverse of a prepared standard-domain 1D table.

    Args:
        values: Output-side values to invert [N]
        table: Monotonic table samples [M]
        domain: Input value of each table entry [M]
        start: First index of the monotonic run
        end: Last index of the monotonic run
        increasing: Trend of the run
        out: Recovered input values [N] (modified in-place)
    """
    n = values.shape[0]

    for i in prange(n):
        out[i] = _search_monotonic(values[i], table, domain, start, end, increasing)


@njit(parallel=True, cache=True, nogil=True)
def lut1d_inverse_half_numba(
    values: NDArray[np.float32],
    table: NDArray[np.float32],
    domain: NDArray[np.float32],
    start: int,
    end: int,
    neg_start: int,
    neg_end: int,
    increasing: bool,
    out: NDArray[np.float32],
) -> None:
    """
    Exact inverse of a prepared half-domain 1D table.

    Values beyond the positive run on the side of 0.0 are searched in the
    negative-code run, whose trend is reversed.

    Args:
        values: Output-side values to invert [N]
        table: Prepared table samples [65536]
        domain: Half value of each code [65536]
        start, end: Positive-code run
        neg_start, neg_end: Negative-code run
        increasing: Trend of the positive run
        out: Recovered input values [N] (modified in-place)
    """
    n = values.shape[0]
    has_negative = neg_end > neg_start

    for i in prange(n):
        y = values[i]
        if increasing:
            below = y < table[start]
        else:
            below = y > table[start]

        if below and has_negative:
            out[i] = _search_monotonic(y, table, domain, neg_start, neg_end, not increasing)
        else:
            out[i] = _search_monotonic(y, table, domain, start, end, increasing)


@njit(parallel=True, cache=True, nogil=True)
def lut3d_trilinear_numba(
    rgb: NDArray[np.float32],
    grid: NDArray[np.float32],
    out: NDArray[np.float32],
) -> None:
    """
    Trilinear interpolation in a 3D LUT.

    Args:
        rgb: Input colors [N, 3], clamped to [0, 1]
        grid: LUT samples [S, S, S, 3] indexed [r, g, b]
        out: Output colors [N, 3] (modified in-place)
    """
    n = rgb.shape[0]
    size = grid.shape[0]
    scale = size - 1

    for i in prange(n):
        fr = min(max(rgb[i, 0], 0.0), 1.0) * scale
        fg = min(max(rgb[i, 1], 0.0), 1.0) * scale
        fb = min(max(rgb[i, 2], 0.0), 1.0) * scale
        if fr != fr:
            fr = 0.0
        if fg != fg:
            fg = 0.0
        if fb != fb:
            fb = 0.0

        r0 = min(int(fr), size - 2)
        g0 = min(int(fg), size - 2)
        b0 = min(int(fb), size - 2)
        dr = fr - r0
        dg = fg - g0
        db = fb - b0

        for c in range(3):
            c000 = grid[r0, g0, b0, c]
            c001 = grid[r0, g0, b0 + 1, c]
            c010 = grid[r0, g0 + 1, b0, c]
            c011 = grid[r0, g0 + 1, b0 + 1, c]
            c100 = grid[r0 + 1, g0, b0, c]
            c101 = grid[r0 + 1, g0, b0 + 1, c]
            c110 = grid[r0 + 1, g0 + 1, b0, c]
            c111 = grid[r0 + 1, g0 + 1, b0 + 1, c]

            c00 = c000 + db * (c001 - c000)
            c01 = c010 + db * (c011 - c010)
            c10 = c100 + db * (c101 - c100)
            c11 = c110 + db * (c111 - c110)
            c0 = c00 + dg * (c01 - c00)
            c1 = c10 + dg * (c11 - c10)
            out[i, c] = c0 + dr * (c1 - c0)


@njit(parallel=True, cache=True, nogil=True)
def lut3d_tetrahedral_numba(
    rgb: NDArray[np.float32],
    grid: NDArray[np.float32],
    out: NDArray[np.float32],
) -> None:
    """
    Tetrahedral interpolation in a 3D LUT.

    Args:
        rgb: Input colors [N, 3], clamped to [0, 1]
        grid: LUT samples [S, S, S, 3] indexed [r, g, b]
        out: Output colors [N, 3] (modified in-place)
    """
    n = rgb.shape[0]
    size = grid.shape[0]
    scale = size - 1

    for i in prange(n):
        fr = min(max(rgb[i, 0], 0.0), 1.0) * scale
        fg = min(max(rgb[i, 1], 0.0), 1.0) * scale
        fb = min(max(rgb[i, 2], 0.0), 1.0) * scale
        if fr != fr:
            fr = 0.0
        if fg != fg:
            fg = 0.0
        if fb != fb:
            fb = 0.0

        r0 = min(int(fr), size - 2)
        g0 = min(int(fg), size - 2)
        b0 = min(int(fb), size - 2)
        dr = fr - r0
        dg = fg - g0
        db = fb - b0
        r1 = r0 + 1
        g1 = g0 + 1
        b1 = b0 + 1

        for c in range(3):
            c000 = grid[r0, g0, b0, c]
            c111 = grid[r1, g1, b1, c]
            if dr > dg:
                if dg > db:
                    # r > g > b
                    out[i, c] = (
                        (1.0 - dr) * c000
                        + (dr - dg) * grid[r1, g0, b0, c]
                        + (dg - db) * grid[r1, g1, b0, c]
                        + db * c111
                    )
                elif dr > db:
                    # r > b >= g
                    out[i, c] = (
                        (1.0 - dr) * c000
                        + (dr - db) * grid[r1, g0, b0, c]
                        + (db - dg) * grid[r1, g0, b1, c]
                        + dg * c111
                    )
                else:
                    # b >= r > g
                    out[i, c] = (
                        (1.0 - db) * c000
                        + (db - dr) * grid[r0, g0, b1, c]
                        + (dr - dg) * grid[r1, g0, b1, c]
                        + dg * c111
                    )
            else:
                if db > dg:
                    # b > g >= r
                    out[i, c] = (
                        (1.0 - db) * c000
                        + (db - dg) * grid[r0, g0, b1, c]
                        + (dg - dr) * grid[r0, g1, b1, c]
                        + dr * c111
                    )
                elif db > dr:
                    # g >= b > r
                    out[i, c] = (
                        (1.0 - dg) * c000
                        + (dg - db) * grid[r0, g1, b0, c]
                        + (db - dr) * grid[r0, g1, b1, c]
                        + dr * c111
                    )
                else:
                    # g >= r >= b
                    out[i, c] = (
                        (1.0 - dg) * c000
                        + (dg - dr) * grid[r0, g1, b0, c]
                        + (dr - db) * grid[r1, g1, b0, c]
                        + db * c111
                    )
