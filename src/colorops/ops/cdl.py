"""ASC CDL op data: slope, offset, power and saturation."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from colorops.exceptions import OpDataError
from colorops.ops.base import FormatMetadata, OpData, OpType, format_float
from colorops.ops.matrix import MatrixOpData
from colorops.ops.range import RangeOpData

# Rec.709 luma weights used by the saturation step
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)

Triple = tuple[float, float, float]


class CDLStyle(Enum):
    V1_2_FWD = "v1.2_Fwd"
    V1_2_REV = "v1.2_Rev"
    NO_CLAMP_FWD = "noClampFwd"
    NO_CLAMP_REV = "noClampRev"

    @property
    def is_clamping(self) -> bool:
        return self in (CDLStyle.V1_2_FWD, CDLStyle.V1_2_REV)

    @property
    def is_forward(self) -> bool:
        return self in (CDLStyle.V1_2_FWD, CDLStyle.NO_CLAMP_FWD)

    def inverse(self) -> CDLStyle:
        return _INVERSE_STYLE[self]


_INVERSE_STYLE = {
    CDLStyle.V1_2_FWD: CDLStyle.V1_2_REV,
    CDLStyle.V1_2_REV: CDLStyle.V1_2_FWD,
    CDLStyle.NO_CLAMP_FWD: CDLStyle.NO_CLAMP_REV,
    CDLStyle.NO_CLAMP_REV: CDLStyle.NO_CLAMP_FWD,
}


def _triple(values: Sequence[float] | float) -> Triple:
    if isinstance(values, int | float):
        return (float(values),) * 3
    if len(values) != 3:
        raise OpDataError(f"CDL: expecting 3 values, got {len(values)}.")
    return tuple(float(v) for v in values)


class CDLOpData(OpData):
    """ASC CDL: ``out = sat((in * slope + offset) ** power)``.

    The v1.2 styles clamp to [0, 1] between steps, the no-clamp styles pass
    negative values through the power step unchanged.
    """

    op_type = OpType.CDL

    def __init__(
        self,
        style: CDLStyle = CDLStyle.V1_2_FWD,
        slope: Sequence[float] | float = 1.0,
        offset: Sequence[float] | float = 0.0,
        power: Sequence[float] | float = 1.0,
        saturation: float = 1.0,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        self._style = style
        self._slope = _triple(slope)
        self._offset = _triple(offset)
        self._power = _triple(power)
        self._saturation = float(saturation)

    @property
    def style(self) -> CDLStyle:
        return self._style

    @property
    def slope(self) -> Triple:
        return self._slope

    @property
    def offset(self) -> Triple:
        return self._offset

    @property
    def power(self) -> Triple:
        return self._power

    @property
    def saturation(self) -> float:
        return self._saturation

    def set_style(self, style: CDLStyle) -> None:
        self._style = style
        self._invalidate()

    def set_slope(self, slope: Sequence[float] | float) -> None:
        self._slope = _triple(slope)
        self._invalidate()

    def set_offset(self, offset: Sequence[float] | float) -> None:
        self._offset = _triple(offset)
        self._invalidate()

    def set_power(self, power: Sequence[float] | float) -> None:
        self._power = _triple(power)
        self._invalidate()

    def set_saturation(self, saturation: float) -> None:
        self._saturation = float(saturation)
        self._invalidate()

    # ========================================================================
    # OpData
    # ========================================================================

    def validate(self) -> None:
        for value in self._slope:
            if value < 0.0:
                raise OpDataError(f"CDL: Invalid 'slope' {value:g} should be greater than 0.")
        for value in self._power:
            if value <= 0.0:
                raise OpDataError(f"CDL: Invalid 'power' {value:g} should be greater than 0.")
        if self._saturation < 0.0:
            raise OpDataError(
                f"CDL: Invalid 'saturation' {self._saturation:g} should be greater than 0."
            )

    def is_identity(self) -> bool:
        return (
            self._slope == (1.0, 1.0, 1.0)
            and self._offset == (0.0, 0.0, 0.0)
            and self._power == (1.0, 1.0, 1.0)
            and self._saturation == 1.0
        )

    def is_no_op(self) -> bool:
        return self.is_identity() and not self._style.is_clamping

    def has_channel_crosstalk(self) -> bool:
        return self._saturation != 1.0

    def get_identity_replacement(self) -> OpData:
        if self._style.is_clamping:
            return RangeOpData(0.0, 1.0, 0.0, 1.0, metadata=self.metadata.copy())
        return MatrixOpData(metadata=self.metadata.copy())

    def inverse(self) -> CDLOpData:
        inv = self.clone()
        inv.set_style(self._style.inverse())
        return inv

    def _same_params(self, other: CDLOpData) -> bool:
        return (
            self._slope == other._slope
            and self._offset == other._offset
            and self._power == other._power
            and self._saturation == other._saturation
        )

    def is_inverse(self, other: OpData) -> bool:
        return (
            isinstance(other, CDLOpData)
            and other._style is self._style.inverse()
            and self._same_params(other)
        )

    def _compute_cache_id(self) -> str:
        def fmt(values: Triple) -> str:
            return ", ".join(format_float(v) for v in values)

        return (
            f"{self.id} {self._style.value} "
            f"slope:{fmt(self._slope)} offset:{fmt(self._offset)} "
            f"power:{fmt(self._power)} sat:{format_float(self._saturation)}"
        )

    def _equals(self, other: OpData) -> bool:
        return self._style is other._style and self._same_params(other)
