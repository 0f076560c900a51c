"""
CPU processor: optimized, finalized op list applied to pixel buffers.

Example:
    >>> processor = CPUProcessor([GammaOpData(params=[2.2])])
    >>> out = processor.apply(np.random.rand(100, 3).astype(np.float32))
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from colorops.config import OPTIMIZER_CONFIG
from colorops.cpu.renderers import apply_op
from colorops.ops.base import OpData
from colorops.optimizer import finalize_ops, optimize_ops
from colorops.types import FinalizationFlags, OptimizationFlags

logger = logging.getLogger(__name__)


class CPUProcessor:
    """
    Apply a list of ops to RGB or RGBA pixels.

    The ops are cloned on construction, so later changes to the caller's ops
    do not affect the processor.

    :param ops: Ops applied in order
    :param optimization: Rewrites allowed when building the processor
    :param finalization: EXACT or FAST evaluation of inverse LUTs
    """

    __slots__ = ("_ops", "_cache_id", "_optimization", "_finalization")

    def __init__(
        self,
        ops: Sequence[OpData],
        optimization: OptimizationFlags = OPTIMIZER_CONFIG.default_flags,
        finalization: FinalizationFlags = FinalizationFlags.DEFAULT,
    ):
        cloned = [op.clone() for op in ops]
        for op in cloned:
            op.validate()
        optimized = optimize_ops(cloned, optimization)
        self._ops = finalize_ops(optimized, finalization)
        self._optimization = optimization
        self._finalization = finalization

        md5 = hashlib.md5()
        for op in self._ops:
            md5.update(op.cache_id.encode("utf-8"))
        self._cache_id = md5.hexdigest()

        logger.info(
            "[Processor] Built from %d ops (%d after optimization)", len(cloned), len(self._ops)
        )

    @property
    def ops(self) -> list[OpData]:
        """Copy of the optimized op list."""
        return list(self._ops)

    @property
    def cache_id(self) -> str:
        return self._cache_id

    @property
    def optimization(self) -> OptimizationFlags:
        return self._optimization

    @property
    def finalization(self) -> FinalizationFlags:
        return self._finalization

    def is_no_op(self) -> bool:
        return not self._ops

    def apply(self, pixels: ArrayLike, inplace: bool = False) -> NDArray[np.float32]:
        """
        Apply the ops to pixels.

        :param pixels: RGB [N, 3] or RGBA [N, 4] values
        :param inplace: If True and ``pixels`` is a float32 array, modify it directly
        :return: Transformed pixels with the input's shape
        :raises ValueError: If ``pixels`` is not shaped [N, 3] or [N, 4]
        """
        arr = np.asarray(pixels)
        if arr.ndim != 2 or arr.shape[1] not in (3, 4):
            raise ValueError(f"Expected pixels shaped [N, 3] or [N, 4], got {arr.shape}")

        if arr.dtype != np.float32:
            arr = arr.astype(np.float32)
            inplace = False  # Already made a copy

        if arr.shape[1] == 4:
            rgba = arr if inplace else arr.copy()
        else:
            rgba = np.ones((arr.shape[0], 4), dtype=np.float32)
            rgba[:, :3] = arr

        for op in self._ops:
            apply_op(op, rgba)

        if arr.shape[1] == 4:
            return rgba
        if inplace:
            arr[:] = rgba[:, :3]
            return arr
        return rgba[:, :3].copy()

    def __call__(self, pixels: ArrayLike, inplace: bool = False) -> NDArray[np.float32]:
        return self.apply(pixels, inplace=inplace)

    def __len__(self) -> int:
        return len(self._ops)

    def __repr__(self) -> str:
        names = ", ".join(op.op_type.value for op in self._ops) or "no-op"
        return f"CPUProcessor({names}) [{len(self._ops)} ops]"
