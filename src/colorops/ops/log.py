"""Log op data: per-channel affine logarithm.

Forward direction computes, per channel::

    y = log_side_slope * log(lin_side_slope * x + lin_side_offset, base) + log_side_offset

Inverse direction applies the corresponding antilog.
"""

from __future__ import annotations

from collections.abc import Sequence

from colorops.exceptions import OpDataError
from colorops.ops.base import FormatMetadata, OpData, OpType, format_float
from colorops.ops.matrix import MatrixOpData
from colorops.ops.range import RangeOpData
from colorops.types import TransformDirection, inverse_direction


# Parameter positions
LOG_SIDE_SLOPE = 0
LOG_SIDE_OFFSET = 1
LIN_SIDE_SLOPE = 2
LIN_SIDE_OFFSET = 3

_DEFAULT_PARAMS = (1.0, 0.0, 1.0, 0.0)

Params = tuple[float, ...]


class LogOpData(OpData):
    """Affine log with a shared base.

    :param base: Logarithm base, > 0 and != 1
    :param direction: FORWARD (log) or INVERSE (antilog)
    :param red_params: (log slope, log offset, lin slope, lin offset) for red
    :param green_params: Same for green (defaults to red)
    :param blue_params: Same for blue (defaults to red)
    :raises OpDataError: If direction is UNKNOWN
    """

    op_type = OpType.LOG

    def __init__(
        self,
        base: float = 2.0,
        direction: TransformDirection = TransformDirection.FORWARD,
        red_params: Sequence[float] | None = None,
        green_params: Sequence[float] | None = None,
        blue_params: Sequence[float] | None = None,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        if direction is TransformDirection.UNKNOWN:
            raise OpDataError("Cannot create Log op, unspecified transform direction.")
        self._base = float(base)
        self._direction = direction
        red = tuple(float(p) for p in red_params) if red_params is not None else _DEFAULT_PARAMS
        self._red = red
        self._green = tuple(float(p) for p in green_params) if green_params is not None else red
        self._blue = tuple(float(p) for p in blue_params) if blue_params is not None else red

    @classmethod
    def from_arrays(
        cls,
        base: float,
        log_slope: Sequence[float],
        log_offset: Sequence[float],
        lin_slope: Sequence[float],
        lin_offset: Sequence[float],
        direction: TransformDirection = TransformDirection.FORWARD,
        metadata: FormatMetadata | None = None,
    ) -> LogOpData:
        """Build from per-parameter RGB triples."""
        params = [
            (log_slope[c], log_offset[c], lin_slope[c], lin_offset[c]) for c in range(3)
        ]
        return cls(base, direction, params[0], params[1], params[2], metadata)

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def base(self) -> float:
        return self._base

    @property
    def direction(self) -> TransformDirection:
        return self._direction

    @property
    def red_params(self) -> Params:
        return self._red

    @property
    def green_params(self) -> Params:
        return self._green

    @property
    def blue_params(self) -> Params:
        return self._blue

    def channel_params(self) -> tuple[Params, Params, Params]:
        return self._red, self._green, self._blue

    def set_base(self, base: float) -> None:
        self._base = float(base)
        self._invalidate()

    def set_direction(self, direction: TransformDirection) -> None:
        self._direction = direction
        self._invalidate()

    def set_red_params(self, params: Sequence[float]) -> None:
        self._red = tuple(float(p) for p in params)
        self._invalidate()

    def set_green_params(self, params: Sequence[float]) -> None:
        self._green = tuple(float(p) for p in params)
        self._invalidate()

    def set_blue_params(self, params: Sequence[float]) -> None:
        self._blue = tuple(float(p) for p in params)
        self._invalidate()

    def get_param(self, index: int) -> tuple[float, float, float]:
        """RGB triple of one parameter (e.g. ``LIN_SIDE_SLOPE``)."""
        return self._red[index], self._green[index], self._blue[index]

    def set_param(self, index: int, values: Sequence[float]) -> None:
        channels = [list(self._red), list(self._green), list(self._blue)]
        for channel, value in zip(channels, values):
            channel[index] = float(value)
        self._red, self._green, self._blue = (tuple(c) for c in channels)
        self._invalidate()

    def _param_string(self, index: int) -> str:
        r, g, b = self.get_param(index)
        if r == g == b:
            return format_float(r)
        return f"{format_float(r)}, {format_float(g)}, {format_float(b)}"

    def get_log_slope_string(self) -> str:
        return self._param_string(LOG_SIDE_SLOPE)

    def get_log_offset_string(self) -> str:
        return self._param_string(LOG_SIDE_OFFSET)

    def get_lin_slope_string(self) -> str:
        return self._param_string(LIN_SIDE_SLOPE)

    def get_lin_offset_string(self) -> str:
        return self._param_string(LIN_SIDE_OFFSET)

    # ========================================================================
    # Predicates
    # ========================================================================

    def validate(self) -> None:
        if self._direction is TransformDirection.UNKNOWN:
            raise OpDataError("Log: Invalid direction.")
        for params in self.channel_params():
            if len(params) != 4:
                raise OpDataError("Log: expecting 4 parameters.")
        for params in self.channel_params():
            if params[LIN_SIDE_SLOPE] == 0.0:
                raise OpDataError(
                    f"Log: Invalid linear slope value '{params[LIN_SIDE_SLOPE]:g}', "
                    "linear slope cannot be 0."
                )
            if params[LOG_SIDE_SLOPE] == 0.0:
                raise OpDataError(
                    f"Log: Invalid log slope value '{params[LOG_SIDE_SLOPE]:g}', "
                    "log slope cannot be 0."
                )
        if self._base == 1.0:
            raise OpDataError(f"Log: Invalid base value '{self._base:g}', base cannot be 1.")
        if self._base <= 0.0:
            raise OpDataError(
                f"Log: Invalid base value '{self._base:g}', base must be greater than 0."
            )

    def all_components_equal(self) -> bool:
        return self._red == self._green == self._blue

    def is_log_base(self, base: float) -> bool:
        """True for a plain ``log(x, base)`` on every channel."""
        return (
            self.all_components_equal()
            and self._red == _DEFAULT_PARAMS
            and self._base == base
        )

    def is_log2(self) -> bool:
        return self.is_log_base(2.0)

    def is_log10(self) -> bool:
        return self.is_log_base(10.0)

    def is_identity(self) -> bool:
        return False

    def is_no_op(self) -> bool:
        return False

    def get_identity_replacement(self) -> OpData:
        """Clamp to the log's domain (forward) or a pass-through matrix (inverse)."""
        if self._direction is TransformDirection.INVERSE:
            return MatrixOpData(metadata=self.metadata.copy())
        if self.is_log2() or self.is_log10():
            min_value = 0.0
        else:
            min_value = -self._red[LIN_SIDE_OFFSET] / self._red[LIN_SIDE_SLOPE]
        if self._red[LIN_SIDE_SLOPE] < 0.0:
            # The log argument is positive below the bound for a negative slope
            return RangeOpData(max_in=min_value, max_out=min_value, metadata=self.metadata.copy())
        return RangeOpData(min_in=min_value, min_out=min_value, metadata=self.metadata.copy())

    # ========================================================================
    # Inversion
    # ========================================================================

    def inverse(self) -> LogOpData:
        inv = self.clone()
        inv.set_direction(inverse_direction(self._direction))
        inv.validate()
        return inv

    def is_inverse(self, other: OpData) -> bool:
        # Only the red channel is compared across ops, each op must be uniform
        if not isinstance(other, LogOpData):
            return False
        return (
            self._direction is inverse_direction(other._direction)
            and self.all_components_equal()
            and other.all_components_equal()
            and self._red == other._red
            and self._base == other._base
        )

    def _compute_cache_id(self) -> str:
        return (
            f"{self.id} {self._direction.value} "
            f"Base {format_float(self._base)} "
            f"LogSlope {self.get_log_slope_string()} "
            f"LogOffset {self.get_log_offset_string()} "
            f"LinearSlope {self.get_lin_slope_string()} "
            f"LinearOffset {self.get_lin_offset_string()}"
        )

    def _equals(self, other: OpData) -> bool:
        return (
            self._direction is other._direction
            and self._base == other._base
            and self.channel_params() == other.channel_params()
        )
