"""Range op data: affine remap of an input interval with optional clamping."""

from __future__ import annotations

from enum import Enum

from colorops.exceptions import OpDataError
from colorops.ops.base import FormatMetadata, OpData, OpType, format_float
from colorops.ops.matrix import MatrixOpData


class RangeStyle(Enum):
    CLAMP = "clamp"
    NO_CLAMP = "noClamp"


def _fmt(value: float | None) -> str:
    return "empty" if value is None else format_float(value)


class RangeOpData(OpData):
    """Map ``[min_in, max_in]`` to ``[min_out, max_out]``.

    A bound of ``None`` is empty: with only a minimum (or only a maximum)
    the op is an offset plus a one-sided clamp, with neither it does nothing.
    """

    op_type = OpType.RANGE

    def __init__(
        self,
        min_in: float | None = None,
        max_in: float | None = None,
        min_out: float | None = None,
        max_out: float | None = None,
        style: RangeStyle = RangeStyle.CLAMP,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        self._min_in = min_in
        self._max_in = max_in
        self._min_out = min_out
        self._max_out = max_out
        self._style = style

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def min_in(self) -> float | None:
        return self._min_in

    @property
    def max_in(self) -> float | None:
        return self._max_in

    @property
    def min_out(self) -> float | None:
        return self._min_out

    @property
    def max_out(self) -> float | None:
        return self._max_out

    @property
    def style(self) -> RangeStyle:
        return self._style

    def set_min_in(self, value: float | None) -> None:
        self._min_in = value
        self._invalidate()

    def set_max_in(self, value: float | None) -> None:
        self._max_in = value
        self._invalidate()

    def set_min_out(self, value: float | None) -> None:
        self._min_out = value
        self._invalidate()

    def set_max_out(self, value: float | None) -> None:
        self._max_out = value
        self._invalidate()

    def set_style(self, style: RangeStyle) -> None:
        self._style = style
        self._invalidate()

    def min_is_empty(self) -> bool:
        return self._min_in is None

    def max_is_empty(self) -> bool:
        return self._max_in is None

    @property
    def scale(self) -> float:
        if self.min_is_empty() or self.max_is_empty():
            return 1.0
        return (self._max_out - self._min_out) / (self._max_in - self._min_in)

    @property
    def offset(self) -> float:
        if not self.min_is_empty():
            return self._min_out - self.scale * self._min_in
        if not self.max_is_empty():
            return self._max_out - self._max_in
        return 0.0

    # ========================================================================
    # OpData
    # ========================================================================

    def validate(self) -> None:
        if (self._min_in is None) != (self._min_out is None):
            raise OpDataError(
                "In and out minimum limits must be both set or both missing in Range."
            )
        if (self._max_in is None) != (self._max_out is None):
            raise OpDataError(
                "In and out maximum limits must be both set or both missing in Range."
            )
        if not self.min_is_empty() and not self.max_is_empty():
            if self._min_in >= self._max_in:
                raise OpDataError("Range maximum input value is less than minimum input value.")
            if self._min_out >= self._max_out:
                raise OpDataError("Range maximum output value is less than minimum output value.")

    def is_clamping(self) -> bool:
        return self._style is RangeStyle.CLAMP and not (self.min_is_empty() and self.max_is_empty())

    def is_clamp_negs(self) -> bool:
        """True for the ``[0, +inf)`` clamp."""
        return (
            self.is_clamping()
            and self._min_in == 0.0
            and self._min_out == 0.0
            and self.max_is_empty()
        )

    def is_pure_clamp(self) -> bool:
        return self.is_clamping() and self.is_identity()

    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.offset == 0.0

    def is_no_op(self) -> bool:
        return self.is_identity() and not self.is_clamping()

    def get_identity_replacement(self) -> OpData:
        if not self.is_clamping():
            return MatrixOpData(metadata=self.metadata.copy())
        return RangeOpData(
            self._min_in,
            self._max_in,
            self._min_in,
            self._max_in,
            RangeStyle.CLAMP,
            self.metadata.copy(),
        )

    def inverse(self) -> RangeOpData:
        return RangeOpData(
            self._min_out,
            self._max_out,
            self._min_in,
            self._max_in,
            self._style,
            self.metadata.copy(),
        )

    def is_inverse(self, other: OpData) -> bool:
        return isinstance(other, RangeOpData) and self.inverse() == other

    def to_matrix(self) -> MatrixOpData:
        """Scale and offset of this range as a matrix (no clamping)."""
        return MatrixOpData.from_scale_offset(self.scale, self.offset, self.metadata.copy())

    def _compose_bounds(
        self, other: RangeOpData
    ) -> tuple[float | None, float | None, float | None, float | None] | None:
        # Output interval of self mapped through other's scale and offset
        scale = self.scale * other.scale
        offset = other.scale * self.offset + other.offset

        def mapped(v: float | None) -> float | None:
            return None if v is None else other.scale * v + other.offset

        lows = [v for v in (mapped(self._min_out), other._min_out) if v is not None]
        highs = [v for v in (mapped(self._max_out), other._max_out) if v is not None]
        low = max(lows) if lows else None
        high = min(highs) if highs else None

        if low is not None and high is not None:
            if low >= high:
                return None
            return (low - offset) / scale, (high - offset) / scale, low, high
        if scale != 1.0:
            return None
        if low is not None:
            return low - offset, None, low, None
        if high is not None:
            return None, high - offset, None, high
        return None, None, None, None

    def may_compose(self, other: OpData) -> bool:
        if not isinstance(other, RangeOpData):
            return False
        if not (self.is_clamping() and other.is_clamping()):
            return False
        return self._compose_bounds(other) is not None

    def compose(self, other: OpData) -> RangeOpData:
        """Single clamping range equivalent to ``self`` followed by ``other``."""
        if not self.may_compose(other):
            raise OpDataError("Range can only be combined with another clamping Range.")
        min_in, max_in, min_out, max_out = self._compose_bounds(other)
        metadata = self.metadata.combine(other.metadata)
        return RangeOpData(min_in, max_in, min_out, max_out, RangeStyle.CLAMP, metadata)

    def _compute_cache_id(self) -> str:
        return (
            f"{self.id} {self._style.value} "
            f"{_fmt(self._min_in)} {_fmt(self._max_in)} "
            f"{_fmt(self._min_out)} {_fmt(self._max_out)}"
        )

    def _equals(self, other: OpData) -> bool:
        return (
            self._min_in == other._min_in
            and self._max_in == other._max_in
            and self._min_out == other._min_out
            and self._max_out == other._max_out
            and self._style is other._style
        )
