"""Flat sample storage for lookup tables.

An :class:`Array` holds ``length`` entries of ``max_color_components``
interleaved float32 samples. ``num_color_components`` records how many of
those channels are distinct (1 when all channels share a curve).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import ArrayLike, NDArray

from colorops.exceptions import OpDataError
from colorops.half import HALF_DOMAIN_SIZE, half_domain, round_to_half


class Array(ABC):
    """Interleaved float32 table with identity fill and resize."""

    max_color_components: int = 3

    def __init__(self, length: int, num_color_components: int = 3):
        self._length = 0
        self._num_color_components = num_color_components
        self.values: NDArray[np.float32] = np.zeros(0, dtype=np.float32)
        self.resize(length, num_color_components)
        self.fill()

    @property
    def length(self) -> int:
        return self._length

    @property
    def num_color_components(self) -> int:
        return self._num_color_components

    def num_values(self) -> int:
        """Number of stored floats (``length`` entries per channel)."""
        return self.values.size

    def resize(self, length: int, num_color_components: int) -> None:
        """Resize the storage; existing samples are discarded."""
        if num_color_components not in (1, 3):
            raise OpDataError(
                f"Array: unsupported number of color components {num_color_components}."
            )
        if length < 0:
            raise OpDataError(f"Array: invalid length {length}.")
        self._length = length
        self._num_color_components = num_color_components
        self.values = np.zeros(self._expected_size(length), dtype=np.float32)

    def _expected_size(self, length: int) -> int:
        return length * self.max_color_components

    def set_values(self, values: ArrayLike) -> None:
        arr = np.asarray(values, dtype=np.float32).reshape(-1)
        if arr.size != self.values.size:
            raise OpDataError(
                f"Array contains: {arr.size} values, but {self.values.size} are expected."
            )
        self.values = arr.copy()

    def channels(self) -> NDArray[np.float32]:
        """View of the samples shaped ``(entries, max_color_components)``."""
        return self.values.reshape(-1, self.max_color_components)

    @abstractmethod
    def fill(self) -> None:
        """Fill with the identity mapping."""

    @abstractmethod
    def is_identity(self) -> bool:
        pass

    def scale(self, factor: float) -> None:
        self.values *= np.float32(factor)

    def adjust_color_component_number(self) -> None:
        """Set the channel count to 1 when all channels hold the same curve."""
        table = self.channels()
        if np.array_equal(table[:, 0], table[:, 1], equal_nan=True) and np.array_equal(
            table[:, 0], table[:, 2], equal_nan=True
        ):
            self._num_color_components = 1
        else:
            self._num_color_components = 3

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Array) or type(self) is not type(other):
            return False
        return (
            self._length == other._length
            and self._num_color_components == other._num_color_components
            and np.array_equal(self.values, other.values, equal_nan=True)
        )

    __hash__ = None  # type: ignore[assignment]


class HalfFlags:
    """Bit flags selecting half-float input and/or output encoding."""

    LUT_STANDARD = 0
    LUT_INPUT_HALF_CODE = 1
    LUT_OUTPUT_HALF_CODE = 2
    LUT_INPUT_OUTPUT_HALF_CODE = 3


def is_input_half_domain(half_flags: int) -> bool:
    return bool(half_flags & HalfFlags.LUT_INPUT_HALF_CODE)


def is_output_raw_halfs(half_flags: int) -> bool:
    return bool(half_flags & HalfFlags.LUT_OUTPUT_HALF_CODE)


class Lut3by1DArray(Array):
    """Array of a 1D LUT: one curve per R, G, B channel.

    With an input half domain the table has exactly 65536 entries and entry
    ``i`` is indexed by the half whose bit pattern is ``i``.
    """

    def __init__(self, half_flags: int, length: int, num_color_components: int = 3):
        self.half_flags = half_flags
        if is_input_half_domain(half_flags):
            length = HALF_DOMAIN_SIZE
        if length < 2:
            raise OpDataError(f"LUT 1D length: {length} is below the minimum of 2.")
        super().__init__(length, num_color_components)

    def _identity_curve(self) -> NDArray[np.float32]:
        if is_input_half_domain(self.half_flags):
            return half_domain().copy()
        ramp = np.arange(self.length, dtype=np.float64) / float(self.length - 1)
        curve = ramp.astype(np.float32)
        if is_output_raw_halfs(self.half_flags):
            curve = round_to_half(curve)
        return curve

    def fill(self) -> None:
        curve = self._identity_curve()
        self.values = np.repeat(curve, self.max_color_components).astype(np.float32)

    def is_identity(self) -> bool:
        curve = self._identity_curve()
        table = self.channels()
        for channel in range(self.max_color_components):
            col = table[:, channel]
            if is_input_half_domain(self.half_flags):
                # NaN codes map to NaN in the identity curve
                finite = ~np.isnan(curve)
                if not np.array_equal(col[finite], curve[finite]):
                    return False
            elif not np.array_equal(col, curve):
                return False
        return True
