"""3D LUT op data.

Samples are stored red-slowest / blue-fastest, i.e. ``grid()[r, g, b]``
holds the output RGB of the input ``(r, g, b) / (N - 1)``.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from colorops.config import LUT_CONFIG
from colorops.exceptions import OpDataError
from colorops.ops.array import Array
from colorops.ops.base import FormatMetadata, OpData, OpType
from colorops.ops.range import RangeOpData
from colorops.types import (
    BitDepth,
    Interpolation,
    LutInversionQuality,
    TransformDirection,
    inverse_direction,
)
from colorops.validators import validate_range

logger = logging.getLogger(__name__)

_SUPPORTED_INTERPOLATIONS = (
    Interpolation.NEAREST,
    Interpolation.LINEAR,
    Interpolation.TETRAHEDRAL,
    Interpolation.DEFAULT,
    Interpolation.BEST,
)


def identity_grid(grid_size: int) -> NDArray[np.float32]:
    """Identity samples shaped (N, N, N, 3)."""
    ramp = (np.arange(grid_size, dtype=np.float64) / (grid_size - 1)).astype(np.float32)
    r, g, b = np.meshgrid(ramp, ramp, ramp, indexing="ij")
    return np.stack([r, g, b], axis=-1)


class Lut3DArray(Array):
    """Array of N^3 RGB entries."""

    def _expected_size(self, length: int) -> int:
        return length * length * length * self.max_color_components

    def fill(self) -> None:
        self.values = identity_grid(self.length).reshape(-1)

    def is_identity(self) -> bool:
        return np.array_equal(self.values, identity_grid(self.length).reshape(-1))

    def grid(self) -> NDArray[np.float32]:
        n = self.length
        return self.values.reshape(n, n, n, 3)


class Lut3DOpData(OpData):
    """Three-dimensional lookup table.

    :param grid_size: Entries per axis
    :param direction: FORWARD to look up, INVERSE to invert the table
    :param interpolation: NEAREST, LINEAR, TETRAHEDRAL, DEFAULT or BEST
    :raises OpDataError: If direction is UNKNOWN
    """

    op_type = OpType.LUT3D

    def __init__(
        self,
        grid_size: int = 2,
        direction: TransformDirection = TransformDirection.FORWARD,
        interpolation: Interpolation = Interpolation.DEFAULT,
        inversion_quality: LutInversionQuality = LutInversionQuality.DEFAULT,
        file_output_bit_depth: BitDepth = BitDepth.UNKNOWN,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        if direction is TransformDirection.UNKNOWN:
            raise OpDataError("Cannot create Lut3D op, unspecified transform direction.")
        if grid_size < LUT_CONFIG.min_3d_grid:
            raise OpDataError(f"LUT 3D grid size {grid_size} is below the minimum of 2.")
        self._direction = direction
        self._array = Lut3DArray(grid_size)
        self._interpolation = interpolation
        self._inversion_quality = inversion_quality
        self._file_output_bit_depth = file_output_bit_depth

    @classmethod
    def from_grid(
        cls,
        grid: ArrayLike,
        direction: TransformDirection = TransformDirection.FORWARD,
        interpolation: Interpolation = Interpolation.DEFAULT,
        metadata: FormatMetadata | None = None,
    ) -> Lut3DOpData:
        """Build from samples shaped (N, N, N, 3)."""
        arr = np.asarray(grid, dtype=np.float32)
        if arr.ndim != 4 or arr.shape[3] != 3 or len(set(arr.shape[:3])) != 1:
            raise OpDataError(f"Lut3D grid must be shaped (N, N, N, 3), got {arr.shape}.")
        lut = cls(arr.shape[0], direction, interpolation, metadata=metadata)
        lut.set_values(arr)
        return lut

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def array(self) -> Lut3DArray:
        return self._array

    @property
    def grid_size(self) -> int:
        return self._array.length

    @property
    def direction(self) -> TransformDirection:
        return self._direction

    @property
    def interpolation(self) -> Interpolation:
        return self._interpolation

    @property
    def inversion_quality(self) -> LutInversionQuality:
        return self._inversion_quality

    @property
    def file_output_bit_depth(self) -> BitDepth:
        return self._file_output_bit_depth

    def grid(self) -> NDArray[np.float32]:
        return self._array.grid()

    def set_values(self, values: ArrayLike) -> None:
        self._array.set_values(values)
        self._invalidate()

    def set_direction(self, direction: TransformDirection) -> None:
        self._direction = direction
        self._invalidate()

    def set_interpolation(self, interpolation: Interpolation) -> None:
        self._interpolation = interpolation
        self._invalidate()

    def set_inversion_quality(self, quality: LutInversionQuality) -> None:
        self._inversion_quality = quality
        self._invalidate()

    def set_file_output_bit_depth(self, depth: BitDepth) -> None:
        self._file_output_bit_depth = depth
        self._invalidate()

    def get_concrete_interpolation(self) -> Interpolation:
        if self._interpolation in (Interpolation.BEST, Interpolation.TETRAHEDRAL):
            return Interpolation.TETRAHEDRAL
        if self._interpolation is Interpolation.NEAREST:
            return Interpolation.NEAREST
        return Interpolation.LINEAR

    def get_concrete_inversion_quality(self) -> LutInversionQuality:
        return self._inversion_quality.concrete()

    # ========================================================================
    # OpData
    # ========================================================================

    def validate(self) -> None:
        if self._direction is TransformDirection.UNKNOWN:
            raise OpDataError("Lut3D: unspecified transform direction.")
        if self._interpolation not in _SUPPORTED_INTERPOLATIONS:
            raise OpDataError(
                f"3D LUT does not support interpolation algorithm: "
                f"{self._interpolation.value}."
            )
        size = self.grid_size
        if not LUT_CONFIG.min_3d_grid <= size <= LUT_CONFIG.max_3d_grid:
            raise OpDataError(
                f"LUT 3D grid size {size} is outside "
                f"[{LUT_CONFIG.min_3d_grid}, {LUT_CONFIG.max_3d_grid}]."
            )

    def is_identity(self) -> bool:
        return self._array.is_identity()

    def is_no_op(self) -> bool:
        # Always clamps to [0, 1]
        return False

    def has_channel_crosstalk(self) -> bool:
        return True

    def get_identity_replacement(self) -> OpData:
        return RangeOpData(0.0, 1.0, 0.0, 1.0, metadata=self.metadata.copy())

    def inverse(self) -> Lut3DOpData:
        inv = self.clone()
        inv.set_direction(inverse_direction(self._direction))
        return inv

    def is_inverse(self, other: OpData) -> bool:
        if not isinstance(other, Lut3DOpData):
            return False
        return self._direction is inverse_direction(other._direction) and (
            self._array == other._array
        )

    def may_compose(self, other: OpData) -> bool:
        return isinstance(other, Lut3DOpData)

    def compose(self, other: OpData) -> Lut3DOpData:
        if not self.may_compose(other):
            return super().compose(other)
        return compose_lut3d(self, other)

    def _compute_cache_id(self) -> str:
        md5 = hashlib.md5(self._array.values.tobytes()).hexdigest()
        return (
            f"{self.id} {md5} {self.get_concrete_interpolation().value} "
            f"{self._direction.value} {self.get_concrete_inversion_quality().value}"
        )

    def _equals(self, other: OpData) -> bool:
        return (
            self._direction is other._direction
            and self.get_concrete_interpolation() is other.get_concrete_interpolation()
            and self._file_output_bit_depth is other._file_output_bit_depth
            and self._array == other._array
        )


# ============================================================================
# Composition
# ============================================================================


def compose_lut3d_vec(lut: Lut3DOpData, ops: Sequence[OpData]) -> Lut3DOpData:
    """Evaluate the grid points of ``lut`` through ``ops``.

    :raises OpDataError: If ``ops`` is empty
    """
    from colorops.cpu.renderers import apply_ops

    if not ops:
        raise OpDataError("There is nothing to compose the 3D LUT with.")

    finalized = []
    for op in ops:
        op = op.clone()
        op.finalize()
        finalized.append(op)

    samples = lut.grid().reshape(-1, 3)
    rgba = np.ones((samples.shape[0], 4), dtype=np.float32)
    rgba[:, :3] = samples
    result = apply_ops(finalized, rgba)

    composed = Lut3DOpData(
        lut.grid_size,
        TransformDirection.FORWARD,
        lut.interpolation,
        file_output_bit_depth=lut.file_output_bit_depth,
        metadata=lut.metadata.copy(),
    )
    composed.set_values(result[:, :3])
    return composed


def compose_lut3d(a: Lut3DOpData, b: OpData) -> Lut3DOpData:
    """Forward 3D LUT equivalent to ``a`` followed by ``b``.

    The result grid is the larger of the two grids.
    """
    size = a.grid_size
    if isinstance(b, Lut3DOpData):
        size = max(size, b.grid_size)
    domain = Lut3DOpData(size, interpolation=a.interpolation)
    composed = compose_lut3d_vec(domain, [a, b])
    composed.metadata = a.metadata.combine(b.metadata)
    logger.debug("[Lut3D] Composed into a %d^3 grid", size)
    return composed


@validate_range(LUT_CONFIG.min_3d_grid, LUT_CONFIG.max_3d_grid, "grid_size", param_index=1)
def make_fast_lut3d_from_inverse(
    lut: Lut3DOpData, grid_size: int = LUT_CONFIG.fast_inverse_3d_grid
) -> Lut3DOpData:
    """Forward 3D LUT approximating an inverse 3D LUT.

    :param lut: LUT in the INVERSE direction
    :param grid_size: Grid of the result
    :raises OpDataError: If ``lut`` is not an inverse LUT
    """
    if lut.direction is not TransformDirection.INVERSE:
        raise OpDataError("MakeFastLut3DFromInverse expects an inverse LUT.")
    domain = Lut3DOpData(grid_size, interpolation=Interpolation.TETRAHEDRAL)
    exact = lut.clone()
    exact.set_inversion_quality(LutInversionQuality.EXACT)
    fast = compose_lut3d_vec(domain, [exact])
    fast.set_file_output_bit_depth(lut.file_output_bit_depth)
    fast.metadata = lut.metadata.copy()
    return fast
