"""Half-float codec for half-domain LUTs.

A half-domain table has one entry per 16-bit half bit pattern, so the entry
index *is* the half code of the input value. These helpers convert between
codes and floats and locate the two codes bracketing an arbitrary float.
"""

from __future__ import annotations

import functools

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Landmark codes
HALF_ZERO = 0
HALF_ONE = 15360
HALF_MAX_POS = 31743
HALF_POS_INF = 31744
HALF_NEG_ZERO = 32768
HALF_MAX_NEG = 64511
HALF_NEG_INF = 64512
HALF_DOMAIN_SIZE = 65536

HALF_MAX = 65504.0


def half_to_float(codes: ArrayLike) -> NDArray[np.float32]:
    """Decode half bit patterns to float32 values."""
    arr = np.asarray(codes, dtype=np.uint16)
    return arr.view(np.float16).astype(np.float32)


def float_to_half(values: ArrayLike) -> NDArray[np.uint16]:
    """Encode floats as half bit patterns (round to nearest)."""
    arr = np.asarray(values, dtype=np.float32)
    return arr.astype(np.float16).view(np.uint16)


def round_to_half(values: ArrayLike) -> NDArray[np.float32]:
    """Round floats to the nearest representable half value."""
    return np.asarray(values, dtype=np.float32).astype(np.float16).astype(np.float32)


@functools.lru_cache(maxsize=1)
def _half_domain() -> NDArray[np.float32]:
    values = half_to_float(np.arange(HALF_DOMAIN_SIZE, dtype=np.uint32).astype(np.uint16))
    values.setflags(write=False)
    return values


def half_domain() -> NDArray[np.float32]:
    """Values of all 65536 half codes, in code order (read-only, cached)."""
    return _half_domain()


def is_nan_code(code: int) -> bool:
    return (code & 0x7C00) == 0x7C00 and (code & 0x03FF) != 0


def is_inf_code(code: int) -> bool:
    return (code & 0x7FFF) == 0x7C00


def is_negative_code(code: int) -> bool:
    return code >= HALF_NEG_ZERO


def bracket_half(
    values: ArrayLike,
) -> tuple[NDArray[np.int64], NDArray[np.int64], NDArray[np.float32]]:
    """Find the half codes enclosing each value.

    :param values: Float values to locate
    :returns: (lower_codes, upper_codes, fraction) where each value equals
        ``half(lower) + fraction * (half(upper) - half(lower))``. Values
        that are infinite or NaN in half precision map to their own code
        with fraction 0.
    """
    x = np.asarray(values, dtype=np.float32)
    with np.errstate(over="ignore", invalid="ignore"):
        h = x.astype(np.float16)
    special = ~np.isfinite(h)

    finite_x = np.clip(np.where(special, np.float32(0.0), x), -HALF_MAX, HALF_MAX)
    finite_h = np.where(special, np.float16(0.0), h)
    lower = np.where(
        finite_h.astype(np.float32) > finite_x,
        np.nextafter(finite_h, np.float16(-np.inf)),
        finite_h,
    )
    # Finite values always stay on finite codes
    lower = np.where(np.isinf(lower), finite_h, lower)
    upper = np.nextafter(lower, np.float16(np.inf))
    upper = np.where(np.isinf(upper), lower, upper)

    lo_f = lower.astype(np.float32)
    width = upper.astype(np.float32) - lo_f
    safe = np.where(width > 0.0, width, 1.0)
    frac = np.where(width > 0.0, (finite_x - lo_f) / safe, 0.0).astype(np.float32)

    lower = np.where(special, h, lower)
    upper = np.where(special, h, upper)
    frac = np.where(special, np.float32(0.0), frac).astype(np.float32)

    lo_codes = lower.astype(np.float16).view(np.uint16).astype(np.int64)
    hi_codes = upper.astype(np.float16).view(np.uint16).astype(np.int64)
    return lo_codes, hi_codes, frac
