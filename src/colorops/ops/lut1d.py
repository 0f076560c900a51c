"""1D LUT op data and the 1D LUT numeric engine.

A :class:`Lut1DOpData` holds one curve per R, G and B channel. Inverse LUTs
are evaluated by searching the (prepared, monotonic) forward table; a fast
forward approximation of an inverse LUT can be built with
:func:`make_fast_lut1d_from_inverse`.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

from colorops.config import LUT_CONFIG
from colorops.exceptions import OpDataError
from colorops.half import (
    HALF_DOMAIN_SIZE,
    HALF_MAX_NEG,
    HALF_MAX_POS,
    HALF_NEG_ZERO,
    HALF_ONE,
)
from colorops.ops.array import (
    HalfFlags,
    Lut3by1DArray,
    is_input_half_domain,
    is_output_raw_halfs,
)
from colorops.ops.base import FormatMetadata, OpData, OpType
from colorops.ops.matrix import MatrixOpData
from colorops.ops.range import RangeOpData
from colorops.types import (
    BitDepth,
    Interpolation,
    Lut1DHueAdjust,
    LutInversionQuality,
    TransformDirection,
    inverse_direction,
)

logger = logging.getLogger(__name__)

_SUPPORTED_INTERPOLATIONS = (
    Interpolation.NEAREST,
    Interpolation.LINEAR,
    Interpolation.DEFAULT,
    Interpolation.BEST,
)


class ComposeMethod(Enum):
    """Resampling of the first LUT when composing."""

    RESAMPLE_NO = "no"
    RESAMPLE_BIG = "big"


@dataclass
class ComponentProperties:
    """Monotonic sub-domain of one channel, filled by ``prepare_array``.

    Attributes:
        is_increasing: Overall trend of the channel
        start_domain: First index of the non-flat monotonic run
        end_domain: Last index of the non-flat monotonic run
        neg_start_domain: Same as start_domain for negative half codes
        neg_end_domain: Same as end_domain for negative half codes
    """

    is_increasing: bool = False
    start_domain: int = 0
    end_domain: int = 0
    neg_start_domain: int = 0
    neg_end_domain: int = 0


def get_lut_ideal_size(depth: BitDepth, half_flags: int = HalfFlags.LUT_STANDARD) -> int:
    """Number of entries needed to look up every code value of ``depth``."""
    if is_input_half_domain(half_flags):
        return HALF_DOMAIN_SIZE
    if depth is BitDepth.UNKNOWN:
        raise OpDataError("Bit depth is not supported: unknown.")
    if depth in (BitDepth.UINT32, BitDepth.F16, BitDepth.F32):
        return HALF_DOMAIN_SIZE
    return int(depth.max_value) + 1


# ============================================================================
# Array preparation
# ============================================================================


def _trim_flat_ends(values: NDArray[np.float32]) -> tuple[int, int]:
    """First and last index of the non-flat part of a monotonic run."""
    changes = np.flatnonzero(values[1:] != values[:-1])
    if changes.size == 0:
        return 0, 0
    return int(changes[0]), int(changes[-1]) + 1


def _flatten(values: NDArray[np.float32], increasing: bool) -> NDArray[np.float32]:
    # Each sample reaching back past its predecessor is set to the running extreme
    if increasing:
        return np.fmax.accumulate(values)
    return np.fmin.accumulate(values)


def prepare_channel(
    values: NDArray[np.float32], half_domain: bool
) -> tuple[NDArray[np.float32], ComponentProperties]:
    """Make one channel monotonic and find its inversion sub-domain.

    The trend is taken from the first and last samples (for a half domain,
    from the samples of 0.0 and 1.0). Reversals are flattened so the earlier
    sample wins, then leading and trailing flat spots are excluded from the
    domain. Negative half codes form a second run that starts from the
    value of +0.

    :param values: Samples of one channel
    :param half_domain: True if indexed by half codes
    :returns: (monotonic samples, component properties)
    """
    out = np.array(values, dtype=np.float32, copy=True)
    props = ComponentProperties()

    if not half_domain:
        props.is_increasing = bool(out[0] < out[-1])
        out = _flatten(out, props.is_increasing)
        props.start_domain, props.end_domain = _trim_flat_ends(out)
        return out, props

    props.is_increasing = bool(out[0] < out[HALF_ONE])

    positive = _flatten(out[: HALF_MAX_POS + 1], props.is_increasing)
    out[: HALF_MAX_POS + 1] = positive
    props.start_domain, props.end_domain = _trim_flat_ends(positive)

    # Negative inputs grow in magnitude with the code, so the trend reverses
    negative = np.concatenate(([positive[0]], out[HALF_NEG_ZERO : HALF_MAX_NEG + 1]))
    negative = _flatten(negative, not props.is_increasing)[1:]
    out[HALF_NEG_ZERO : HALF_MAX_NEG + 1] = negative
    neg_start, neg_end = _trim_flat_ends(negative)
    props.neg_start_domain = HALF_NEG_ZERO + neg_start
    props.neg_end_domain = HALF_NEG_ZERO + neg_end
    return out, props


# ============================================================================
# Op data
# ============================================================================


class Lut1DOpData(OpData):
    """One-dimensional lookup table.

    :param dimension: Entries per channel (forced to 65536 for a half domain)
    :param direction: FORWARD to look up, INVERSE to invert the table
    :param half_flags: :class:`HalfFlags` bits
    :param interpolation: NEAREST, LINEAR, DEFAULT or BEST
    :raises OpDataError: If direction is UNKNOWN
    """

    op_type = OpType.LUT1D

    def __init__(
        self,
        dimension: int = 2,
        direction: TransformDirection = TransformDirection.FORWARD,
        half_flags: int = HalfFlags.LUT_STANDARD,
        interpolation: Interpolation = Interpolation.DEFAULT,
        hue_adjust: Lut1DHueAdjust = Lut1DHueAdjust.NONE,
        inversion_quality: LutInversionQuality = LutInversionQuality.DEFAULT,
        file_output_bit_depth: BitDepth = BitDepth.UNKNOWN,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        if direction is TransformDirection.UNKNOWN:
            raise OpDataError("Cannot create Lut1D op, unspecified transform direction.")
        self._direction = direction
        self._array = Lut3by1DArray(half_flags, dimension)
        self._interpolation = interpolation
        self._hue_adjust = hue_adjust
        self._inversion_quality = inversion_quality
        self._file_output_bit_depth = file_output_bit_depth
        self._component_properties = [ComponentProperties() for _ in range(3)]

    @classmethod
    def from_values(
        cls,
        values: ArrayLike,
        direction: TransformDirection = TransformDirection.FORWARD,
        half_flags: int = HalfFlags.LUT_STANDARD,
        interpolation: Interpolation = Interpolation.DEFAULT,
        metadata: FormatMetadata | None = None,
    ) -> Lut1DOpData:
        """Build from samples shaped (N,) (shared curve) or (N, 3)."""
        arr = np.asarray(values, dtype=np.float32)
        if arr.ndim == 1:
            arr = np.repeat(arr[:, None], 3, axis=1)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise OpDataError(f"Lut1D values must be shaped (N,) or (N, 3), got {arr.shape}.")
        lut = cls(
            arr.shape[0],
            direction,
            half_flags,
            interpolation,
            metadata=metadata,
        )
        lut.set_values(arr)
        return lut

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def array(self) -> Lut3by1DArray:
        return self._array

    @property
    def dimension(self) -> int:
        return self._array.length

    @property
    def direction(self) -> TransformDirection:
        return self._direction

    @property
    def half_flags(self) -> int:
        return self._array.half_flags

    @property
    def interpolation(self) -> Interpolation:
        return self._interpolation

    @property
    def hue_adjust(self) -> Lut1DHueAdjust:
        return self._hue_adjust

    @property
    def inversion_quality(self) -> LutInversionQuality:
        return self._inversion_quality

    @property
    def file_output_bit_depth(self) -> BitDepth:
        return self._file_output_bit_depth

    @property
    def component_properties(self) -> list[ComponentProperties]:
        return self._component_properties

    def values(self) -> NDArray[np.float32]:
        """Samples shaped (dimension, 3)."""
        return self._array.channels()

    def set_values(self, values: ArrayLike) -> None:
        self._array.set_values(values)
        self._invalidate()

    def set_direction(self, direction: TransformDirection) -> None:
        self._direction = direction
        self._invalidate()

    def set_interpolation(self, interpolation: Interpolation) -> None:
        self._interpolation = interpolation
        self._invalidate()

    def set_hue_adjust(self, hue_adjust: Lut1DHueAdjust) -> None:
        self._hue_adjust = hue_adjust
        self._invalidate()

    def set_inversion_quality(self, quality: LutInversionQuality) -> None:
        self._inversion_quality = quality
        self._invalidate()

    def set_file_output_bit_depth(self, depth: BitDepth) -> None:
        self._file_output_bit_depth = depth
        self._invalidate()

    def is_input_half_domain(self) -> bool:
        return is_input_half_domain(self.half_flags)

    def is_output_raw_halfs(self) -> bool:
        return is_output_raw_halfs(self.half_flags)

    def set_input_half_domain(self, enabled: bool) -> None:
        """Toggle half-code indexing; the table must already have 65536 entries."""
        if enabled:
            self._array.half_flags |= HalfFlags.LUT_INPUT_HALF_CODE
        else:
            self._array.half_flags &= ~HalfFlags.LUT_INPUT_HALF_CODE
        self._invalidate()

    def set_output_raw_halfs(self, enabled: bool) -> None:
        if enabled:
            self._array.half_flags |= HalfFlags.LUT_OUTPUT_HALF_CODE
        else:
            self._array.half_flags &= ~HalfFlags.LUT_OUTPUT_HALF_CODE
        self._invalidate()

    def has_single_lut(self) -> bool:
        """True if R, G and B share one curve (known after ``finalize``)."""
        return self._array.num_color_components == 1

    def get_concrete_interpolation(self) -> Interpolation:
        if self._interpolation is Interpolation.NEAREST:
            return Interpolation.NEAREST
        return Interpolation.LINEAR

    def get_concrete_inversion_quality(self) -> LutInversionQuality:
        return self._inversion_quality.concrete()

    def scale(self, factor: float) -> None:
        self._array.scale(factor)
        self._invalidate()

    # ========================================================================
    # Predicates
    # ========================================================================

    def validate(self) -> None:
        if self._direction is TransformDirection.UNKNOWN:
            raise OpDataError("Lut1D: unspecified transform direction.")
        if self._interpolation not in _SUPPORTED_INTERPOLATIONS:
            raise OpDataError(
                f"1D LUT does not support interpolation algorithm: "
                f"{self._interpolation.value}."
            )
        length = self._array.length
        if length < 2:
            raise OpDataError(f"LUT 1D length: {length} is below the minimum of 2.")
        if length > LUT_CONFIG.max_1d_dimension:
            raise OpDataError(
                f"LUT 1D length: {length} is above the maximum of "
                f"{LUT_CONFIG.max_1d_dimension}."
            )
        if self.is_input_half_domain() and length != HALF_DOMAIN_SIZE:
            raise OpDataError(
                f"65536 required for halfDomain 1D LUT, got {length} entries."
            )
        if self._array.num_values() != length * 3:
            raise OpDataError(
                f"Lut1D array contains {self._array.num_values()} values, "
                f"but {length * 3} are expected."
            )

    def is_identity(self) -> bool:
        return self._array.is_identity()

    def is_no_op(self) -> bool:
        # Standard-domain tables clamp to [0, 1]
        return self.is_input_half_domain() and self.is_identity()

    def has_channel_crosstalk(self) -> bool:
        return self._hue_adjust is not Lut1DHueAdjust.NONE

    def has_extended_domain(self) -> bool:
        """True if the samples leave [0, 1], i.e. the inverse needs a half domain."""
        values = self._array.values
        finite = values[np.isfinite(values)]
        if finite.size == 0:
            return False
        return bool(finite.min() < 0.0 or finite.max() > 1.0)

    def get_identity_replacement(self) -> OpData:
        if self.is_input_half_domain():
            return MatrixOpData(metadata=self.metadata.copy())
        return RangeOpData(0.0, 1.0, 0.0, 1.0, metadata=self.metadata.copy())

    def may_lookup(self, depth: BitDepth) -> bool:
        """True if inputs of ``depth`` can index the table without interpolating."""
        if self._direction is not TransformDirection.FORWARD:
            return False
        if depth is BitDepth.UNKNOWN or depth.is_float or self.is_input_half_domain():
            return False
        return self.dimension == get_lut_ideal_size(depth)

    # ========================================================================
    # Finalization
    # ========================================================================

    def prepare_array(self) -> None:
        """Make every channel monotonic and record its inversion sub-domain."""
        table = self._array.channels().copy()
        half = self.is_input_half_domain()
        for channel in range(3):
            table[:, channel], self._component_properties[channel] = prepare_channel(
                table[:, channel], half
            )
        self._array.values = table.reshape(-1)
        logger.debug(
            "[Lut1D] Prepared inverse array: %s",
            [(p.start_domain, p.end_domain) for p in self._component_properties],
        )

    def _finalize_content(self) -> None:
        if self._direction is TransformDirection.INVERSE:
            self.prepare_array()
        self._array.adjust_color_component_number()

    def _compute_cache_id(self) -> str:
        md5 = hashlib.md5(self._array.values.tobytes()).hexdigest()
        return (
            f"{self.id} {md5} {self.get_concrete_interpolation().value} "
            f"{self._direction.value} {self.half_flags} {self._hue_adjust.value} "
            f"{self.get_concrete_inversion_quality().value}"
        )

    # ========================================================================
    # Inversion and composition
    # ========================================================================

    def have_equal_basics(self, other: Lut1DOpData) -> bool:
        return (
            self.half_flags == other.half_flags
            and self._hue_adjust is other._hue_adjust
            and np.array_equal(self._array.values, other._array.values, equal_nan=True)
        )

    def inverse(self) -> Lut1DOpData:
        inv = self.clone()
        inv.set_direction(inverse_direction(self._direction))
        return inv

    def is_inverse(self, other: OpData) -> bool:
        if not isinstance(other, Lut1DOpData):
            return False
        return (
            self._direction is not TransformDirection.UNKNOWN
            and self._direction is inverse_direction(other._direction)
            and self.have_equal_basics(other)
        )

    def may_compose(self, other: OpData) -> bool:
        return (
            isinstance(other, Lut1DOpData)
            and self._hue_adjust is Lut1DHueAdjust.NONE
            and other._hue_adjust is Lut1DHueAdjust.NONE
        )

    def compose(self, other: OpData) -> Lut1DOpData:
        if not self.may_compose(other):
            return super().compose(other)
        return compose_lut1d(self, other, ComposeMethod.RESAMPLE_NO)

    def _equals(self, other: OpData) -> bool:
        return (
            self._direction is other._direction
            and self.get_concrete_interpolation() is other.get_concrete_interpolation()
            and self.get_concrete_inversion_quality() is other.get_concrete_inversion_quality()
            and self._file_output_bit_depth is other._file_output_bit_depth
            and self.have_equal_basics(other)
        )


# ============================================================================
# LUT construction helpers
# ============================================================================


def make_lookup_domain(depth: BitDepth) -> Lut1DOpData:
    """Identity LUT with one entry per code value of ``depth``.

    F16 gets a half domain. Every other depth, F32 included, gets a
    standard-domain ramp of ``get_lut_ideal_size(depth)`` entries.
    """
    if depth is BitDepth.F16:
        return Lut1DOpData(HALF_DOMAIN_SIZE, half_flags=HalfFlags.LUT_INPUT_HALF_CODE)
    return Lut1DOpData(get_lut_ideal_size(depth))


def compose_lut1d_vec(lut: Lut1DOpData, ops: Sequence[OpData]) -> Lut1DOpData:
    """Evaluate the samples of ``lut`` through ``ops``.

    :param lut: Forward LUT whose samples are used as the input
    :param ops: Ops applied, in order, to every sample
    :returns: New forward LUT on the same domain
    :raises OpDataError: If ``ops`` is empty
    """
    from colorops.cpu.renderers import apply_ops

    if not ops:
        raise OpDataError("There is nothing to compose the 1D LUT with.")

    finalized = []
    for op in ops:
        op = op.clone()
        op.finalize()
        finalized.append(op)

    table = lut.values()
    rgba = np.ones((table.shape[0], 4), dtype=np.float32)
    rgba[:, :3] = table
    result = apply_ops(finalized, rgba)

    composed = Lut1DOpData(
        lut.dimension,
        TransformDirection.FORWARD,
        lut.half_flags & HalfFlags.LUT_INPUT_HALF_CODE,
        lut.interpolation,
        file_output_bit_depth=lut.file_output_bit_depth,
        metadata=lut.metadata.copy(),
    )
    composed.set_values(result[:, :3])
    return composed


def compose_lut1d(a: Lut1DOpData, b: OpData, method: ComposeMethod) -> Lut1DOpData:
    """Forward LUT equivalent to ``a`` followed by ``b``.

    ``a`` is resampled onto an identity domain when it is an inverse LUT
    or when RESAMPLE_BIG asks for more entries than it has.
    """
    min_size = LUT_CONFIG.compose_big_size if method is ComposeMethod.RESAMPLE_BIG else 0

    if a.direction is TransformDirection.INVERSE:
        if a.has_extended_domain() or a.is_input_half_domain():
            domain = make_lookup_domain(BitDepth.F16)
        else:
            domain = Lut1DOpData(max(min_size, a.dimension))
        ops = [a, b]
    elif a.dimension < min_size and not a.is_input_half_domain():
        domain = Lut1DOpData(min_size)
        ops = [a, b]
    else:
        domain = a
        ops = [b]

    composed = compose_lut1d_vec(domain, ops)
    composed.metadata = a.metadata.combine(b.metadata)
    logger.debug(
        "[Lut1D] Composed %d-entry LUT with %s into %d entries",
        a.dimension,
        b.op_type.value,
        composed.dimension,
    )
    return composed


def make_fast_lut1d_from_inverse(lut: Lut1DOpData, for_gpu: bool = False) -> Lut1DOpData:
    """Forward LUT approximating an inverse LUT.

    The lookup domain depth follows the LUT's file output depth; tables whose
    values leave [0, 1] (and GPU targets beyond 10 bits) get a half domain.

    :param lut: LUT in the INVERSE direction
    :param for_gpu: Size the result for a GPU texture
    :raises OpDataError: If ``lut`` is not an inverse LUT
    """
    if lut.direction is not TransformDirection.INVERSE:
        raise OpDataError("MakeFastLut1DFromInverse expects an inverse LUT.")

    depth = lut.file_output_bit_depth
    if depth in (BitDepth.UNKNOWN, BitDepth.UINT14, BitDepth.UINT32):
        depth = BitDepth.UINT16
    if for_gpu and depth not in (BitDepth.UINT8, BitDepth.UINT10):
        depth = BitDepth.F16
    if lut.has_extended_domain():
        depth = BitDepth.F16

    domain = make_lookup_domain(depth)
    exact = lut.clone()
    exact.set_inversion_quality(LutInversionQuality.EXACT)
    fast = compose_lut1d_vec(domain, [exact])
    fast.set_file_output_bit_depth(lut.file_output_bit_depth)
    fast.metadata = lut.metadata.copy()
    logger.debug("[Lut1D] Built fast inverse with %d entries (%s)", fast.dimension, depth.value)
    return fast
