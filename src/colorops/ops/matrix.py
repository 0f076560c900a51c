"""Matrix op data: 4x4 RGBA matrix plus offsets."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from colorops.exceptions import OpDataError
from colorops.ops.base import FormatMetadata, OpData, OpType, format_float

_IDENTITY = np.eye(4, dtype=np.float64)


class MatrixOpData(OpData):
    """Affine RGBA transform ``out = M @ in + offsets``.

    :param matrix: 4x4 (RGBA) or 3x3 (RGB, alpha untouched) matrix
    :param offsets: 4 or 3 offsets
    """

    op_type = OpType.MATRIX

    def __init__(
        self,
        matrix: ArrayLike | None = None,
        offsets: ArrayLike | None = None,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        self._matrix = _IDENTITY.copy()
        self._offsets = np.zeros(4, dtype=np.float64)
        if matrix is not None:
            self.set_matrix(matrix)
        if offsets is not None:
            self.set_offsets(offsets)

    @classmethod
    def from_scale_offset(
        cls,
        scale: ArrayLike,
        offset: ArrayLike = (0.0, 0.0, 0.0),
        metadata: FormatMetadata | None = None,
    ) -> MatrixOpData:
        """Diagonal matrix from per-channel RGB scale and offset."""
        scale = np.broadcast_to(np.asarray(scale, dtype=np.float64), (3,))
        offset = np.broadcast_to(np.asarray(offset, dtype=np.float64), (3,))
        return cls(np.diag(scale), offset, metadata)

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def matrix(self) -> NDArray[np.float64]:
        return self._matrix.copy()

    @property
    def offsets(self) -> NDArray[np.float64]:
        return self._offsets.copy()

    def set_matrix(self, matrix: ArrayLike) -> None:
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape == (3, 3):
            full = _IDENTITY.copy()
            full[:3, :3] = m
            m = full
        if m.shape != (4, 4):
            raise OpDataError(f"Matrix must be 3x3 or 4x4, got shape {m.shape}.")
        self._matrix = m.copy()
        self._invalidate()

    def set_offsets(self, offsets: ArrayLike) -> None:
        o = np.asarray(offsets, dtype=np.float64).reshape(-1)
        if o.size == 3:
            o = np.append(o, 0.0)
        if o.size != 4:
            raise OpDataError(f"Matrix offsets must have 3 or 4 values, got {o.size}.")
        self._offsets = o.copy()
        self._invalidate()

    # ========================================================================
    # OpData
    # ========================================================================

    def validate(self) -> None:
        if not (np.all(np.isfinite(self._matrix)) and np.all(np.isfinite(self._offsets))):
            raise OpDataError("Matrix: values must be finite.")

    def is_diagonal(self) -> bool:
        return np.array_equal(self._matrix, np.diag(np.diag(self._matrix)))

    def is_identity(self) -> bool:
        return np.array_equal(self._matrix, _IDENTITY) and not np.any(self._offsets)

    def is_no_op(self) -> bool:
        return self.is_identity()

    def has_channel_crosstalk(self) -> bool:
        return not self.is_diagonal()

    def has_alpha(self) -> bool:
        """True if the alpha channel is changed or feeds the color channels."""
        return (
            not np.array_equal(self._matrix[3], _IDENTITY[3])
            or np.any(self._matrix[:3, 3] != 0.0)
            or self._offsets[3] != 0.0
        )

    def get_identity_replacement(self) -> OpData:
        return MatrixOpData(metadata=self.metadata.copy())

    def inverse(self) -> MatrixOpData:
        """Inverse matrix; offsets are mapped through it.

        :raises OpDataError: If the matrix is singular
        """
        try:
            inv = np.linalg.inv(self._matrix)
        except np.linalg.LinAlgError as exc:
            raise OpDataError("Singular Matrix can't be inverted.") from exc
        return MatrixOpData(inv, -inv @ self._offsets, self.metadata.copy())

    def is_inverse(self, other: OpData) -> bool:
        if not isinstance(other, MatrixOpData):
            return False
        return self.compose(other).is_identity()

    def may_compose(self, other: OpData) -> bool:
        return isinstance(other, MatrixOpData)

    def compose(self, other: OpData) -> MatrixOpData:
        """Matrix applying ``self`` then ``other``."""
        if not isinstance(other, MatrixOpData):
            return super().compose(other)
        m = other._matrix @ self._matrix
        o = other._matrix @ self._offsets + other._offsets
        return MatrixOpData(m, o, self.metadata.combine(other.metadata))

    def _compute_cache_id(self) -> str:
        values = " ".join(format_float(v) for v in self._matrix.reshape(-1))
        offsets = " ".join(format_float(v) for v in self._offsets)
        return f"{self.id} {values} {offsets}"

    def _equals(self, other: OpData) -> bool:
        return np.array_equal(self._matrix, other._matrix) and np.array_equal(
            self._offsets, other._offsets
        )
