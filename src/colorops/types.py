"""Enumerations shared by all color operations.

Defines directions, bit depths, interpolation and LUT options, and the
optimization flag bitmask consumed by :mod:`colorops.optimizer`.
"""

from __future__ import annotations

from enum import Enum, IntFlag

from colorops.exceptions import OpDataError


class TransformDirection(Enum):
    """Direction in which an operation is applied."""

    UNKNOWN = "unknown"
    FORWARD = "forward"
    INVERSE = "inverse"

    @classmethod
    def from_string(cls, name: str) -> TransformDirection:
        key = name.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise OpDataError(f"Unrecognized transform direction: '{name}'.")


def inverse_direction(direction: TransformDirection) -> TransformDirection:
    """Return the opposite direction (UNKNOWN stays UNKNOWN)."""
    if direction is TransformDirection.FORWARD:
        return TransformDirection.INVERSE
    if direction is TransformDirection.INVERSE:
        return TransformDirection.FORWARD
    return TransformDirection.UNKNOWN


def combine_directions(d1: TransformDirection, d2: TransformDirection) -> TransformDirection:
    """Combine two directions: equal directions give FORWARD, opposite give INVERSE."""
    if TransformDirection.UNKNOWN in (d1, d2):
        return TransformDirection.UNKNOWN
    return TransformDirection.FORWARD if d1 is d2 else TransformDirection.INVERSE


class BitDepth(Enum):
    """Legal sample depths of LUT files and image buffers."""

    UNKNOWN = "unknown"
    UINT8 = "8ui"
    UINT10 = "10ui"
    UINT12 = "12ui"
    UINT14 = "14ui"
    UINT16 = "16ui"
    UINT32 = "32ui"
    F16 = "16f"
    F32 = "32f"

    @property
    def is_float(self) -> bool:
        return self in (BitDepth.F16, BitDepth.F32)

    @property
    def bits(self) -> int:
        """Number of bits per sample, 0 when unknown."""
        return _BIT_COUNT[self]

    @property
    def max_value(self) -> float:
        """Largest code value (1.0 for float depths)."""
        if self is BitDepth.UNKNOWN:
            raise OpDataError("Bit depth is not known.")
        if self.is_float:
            return 1.0
        return float((1 << self.bits) - 1)

    @classmethod
    def from_string(cls, name: str) -> BitDepth:
        key = name.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise OpDataError(f"Unsupported bit depth: '{name}'.")


_BIT_COUNT = {
    BitDepth.UNKNOWN: 0,
    BitDepth.UINT8: 8,
    BitDepth.UINT10: 10,
    BitDepth.UINT12: 12,
    BitDepth.UINT14: 14,
    BitDepth.UINT16: 16,
    BitDepth.UINT32: 32,
    BitDepth.F16: 16,
    BitDepth.F32: 32,
}


class Interpolation(Enum):
    """LUT interpolation. DEFAULT and BEST resolve per LUT kind."""

    UNKNOWN = "unknown"
    NEAREST = "nearest"
    LINEAR = "linear"
    TETRAHEDRAL = "tetrahedral"
    CUBIC = "cubic"
    DEFAULT = "default"
    BEST = "best"

    @classmethod
    def from_string(cls, name: str) -> Interpolation:
        key = name.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.UNKNOWN


class LutInversionQuality(Enum):
    """How an inverse LUT is evaluated: exact search or a fast forward table."""

    EXACT = "exact"
    FAST = "fast"
    DEFAULT = "default"
    BEST = "best"

    def concrete(self) -> LutInversionQuality:
        if self is LutInversionQuality.DEFAULT:
            return LutInversionQuality.FAST
        if self is LutInversionQuality.BEST:
            return LutInversionQuality.EXACT
        return self


class Lut1DHueAdjust(Enum):
    NONE = "none"
    DW3 = "dw3"


class OptimizationFlags(IntFlag):
    """Bitmask of rewrites an optimizer may apply to an op list.

    The presets are strictly nested: LOSSLESS < VERY_GOOD < GOOD < DRAFT.
    """

    NONE = 0x0000
    IDENTITY = 0x0001
    PAIR_IDENTITY_CLAMP = 0x0002
    PAIR_IDENTITY_LUT1D = 0x0004
    PAIR_IDENTITY_LUT3D = 0x0008
    PAIR_IDENTITY_GAMMA = 0x0010
    PAIR_IDENTITY_LOG = 0x0020
    COMP_MATRIX = 0x0040
    COMP_LUT1D = 0x0080
    COMP_LUT3D = 0x0100
    COMP_GAMMA = 0x0200
    COMP_SEPARABLE_PREFIX = 0x0400
    ALL = 0xFFFF

    PAIR_IDENTITIES = (
        PAIR_IDENTITY_CLAMP
        | PAIR_IDENTITY_LUT1D
        | PAIR_IDENTITY_LUT3D
        | PAIR_IDENTITY_GAMMA
        | PAIR_IDENTITY_LOG
    )
    LOSSLESS = IDENTITY | PAIR_IDENTITIES | COMP_MATRIX | COMP_GAMMA
    VERY_GOOD = LOSSLESS | COMP_LUT1D | COMP_SEPARABLE_PREFIX
    GOOD = VERY_GOOD | COMP_LUT3D
    DRAFT = ALL
    DEFAULT = VERY_GOOD


class FinalizationFlags(Enum):
    """EXACT keeps inverse LUTs exact; FAST swaps in forward approximations."""

    EXACT = "exact"
    FAST = "fast"
    DEFAULT = "fast"
