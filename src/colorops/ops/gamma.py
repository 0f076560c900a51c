"""Gamma op data: basic power curves and monitor curves (moncurve).

Basic styles apply ``max(x, 0) ** g`` (or ``1/g`` in reverse) and so always
clamp negatives. Moncurve styles add a linear toe controlled by an offset
and are defined for negative inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from colorops.config import GAMMA_CONFIG
from colorops.exceptions import OpDataError
from colorops.ops.base import FormatMetadata, OpData, OpType, format_float
from colorops.ops.matrix import MatrixOpData
from colorops.ops.range import RangeOpData

logger = logging.getLogger(__name__)

Params = tuple[float, ...]


class GammaStyle(Enum):
    BASIC_FWD = "basicFwd"
    BASIC_REV = "basicRev"
    MONCURVE_FWD = "moncurveFwd"
    MONCURVE_REV = "moncurveRev"

    @classmethod
    def from_string(cls, name: str) -> GammaStyle:
        """Case-insensitive lookup by style name.

        :raises OpDataError: If the name is empty or unknown
        """
        if not name:
            raise OpDataError("Missing gamma style.")
        key = name.lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise OpDataError(f"Unknown gamma style: '{name}'.")

    @property
    def is_basic(self) -> bool:
        return self in (GammaStyle.BASIC_FWD, GammaStyle.BASIC_REV)

    @property
    def is_forward(self) -> bool:
        return self in (GammaStyle.BASIC_FWD, GammaStyle.MONCURVE_FWD)

    def inverse(self) -> GammaStyle:
        return _INVERSE_STYLE[self]


_INVERSE_STYLE = {
    GammaStyle.BASIC_FWD: GammaStyle.BASIC_REV,
    GammaStyle.BASIC_REV: GammaStyle.BASIC_FWD,
    GammaStyle.MONCURVE_FWD: GammaStyle.MONCURVE_REV,
    GammaStyle.MONCURVE_REV: GammaStyle.MONCURVE_FWD,
}


def get_identity_parameters(style: GammaStyle) -> Params:
    if style.is_basic:
        return (GAMMA_CONFIG.basic_gamma.identity,)
    return (GAMMA_CONFIG.moncurve_gamma.identity, GAMMA_CONFIG.moncurve_offset.identity)


def is_identity_parameters(params: Sequence[float], style: GammaStyle) -> bool:
    return tuple(params) == get_identity_parameters(style)


def _validate_params(params: Params, style: GammaStyle) -> None:
    if style.is_basic:
        specs = (GAMMA_CONFIG.basic_gamma,)
    else:
        specs = (GAMMA_CONFIG.moncurve_gamma, GAMMA_CONFIG.moncurve_offset)
    if len(params) != len(specs):
        raise OpDataError("GammaOp: Wrong number of parameters")
    for value, spec in zip(params, specs):
        spec.check(value)


class GammaOpData(OpData):
    """Per-channel gamma curve.

    :param style: Curve style
    :param params: Parameters shared by R, G and B (alpha gets the identity)
    :param red: Red parameters, overrides ``params``
    :param green: Green parameters, overrides ``params``
    :param blue: Blue parameters, overrides ``params``
    :param alpha: Alpha parameters

    Example:
        >>> g = GammaOpData(GammaStyle.MONCURVE_FWD, [2.4, 0.055])
        >>> g.validate()
    """

    op_type = OpType.GAMMA

    def __init__(
        self,
        style: GammaStyle = GammaStyle.BASIC_FWD,
        params: Sequence[float] | None = None,
        *,
        red: Sequence[float] | None = None,
        green: Sequence[float] | None = None,
        blue: Sequence[float] | None = None,
        alpha: Sequence[float] | None = None,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        self._style = style
        identity = get_identity_parameters(style)
        shared = tuple(float(p) for p in params) if params is not None else identity
        self._red = tuple(float(p) for p in red) if red is not None else shared
        self._green = tuple(float(p) for p in green) if green is not None else shared
        self._blue = tuple(float(p) for p in blue) if blue is not None else shared
        self._alpha = tuple(float(p) for p in alpha) if alpha is not None else identity

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def style(self) -> GammaStyle:
        return self._style

    @property
    def red_params(self) -> Params:
        return self._red

    @property
    def green_params(self) -> Params:
        return self._green

    @property
    def blue_params(self) -> Params:
        return self._blue

    @property
    def alpha_params(self) -> Params:
        return self._alpha

    def set_style(self, style: GammaStyle) -> None:
        self._style = style
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

    def set_alpha_params(self, params: Sequence[float]) -> None:
        self._alpha = tuple(float(p) for p in params)
        self._invalidate()

    def set_params(self, params: Sequence[float]) -> None:
        """Use ``params`` for R, G and B; alpha is reset to the identity."""
        shared = tuple(float(p) for p in params)
        self._red = self._green = self._blue = shared
        self._alpha = get_identity_parameters(self._style)
        self._invalidate()

    def channel_params(self) -> tuple[Params, Params, Params, Params]:
        return self._red, self._green, self._blue, self._alpha

    # ========================================================================
    # Predicates
    # ========================================================================

    def validate(self) -> None:
        for params in self.channel_params():
            _validate_params(params, self._style)

    def is_alpha_component_identity(self) -> bool:
        return is_identity_parameters(self._alpha, self._style)

    def are_all_components_equal(self) -> bool:
        return self._red == self._green == self._blue == self._alpha

    def is_non_channel_dependent(self) -> bool:
        """True if R, G and B share parameters and alpha is untouched."""
        return self._red == self._green == self._blue and self.is_alpha_component_identity()

    def is_clamping(self) -> bool:
        return self._style.is_basic

    def is_identity(self) -> bool:
        return self.are_all_components_equal() and is_identity_parameters(
            self._red, self._style
        )

    def is_no_op(self) -> bool:
        return self.is_identity() and not self.is_clamping()

    def get_identity_replacement(self) -> OpData:
        if self._style.is_basic:
            # Negative values are clamped by the basic styles
            return RangeOpData(min_in=0.0, min_out=0.0, metadata=self.metadata.copy())
        return MatrixOpData(metadata=self.metadata.copy())

    # ========================================================================
    # Inversion and composition
    # ========================================================================

    def inverse(self) -> GammaOpData:
        return GammaOpData(
            self._style.inverse(),
            red=self._red,
            green=self._green,
            blue=self._blue,
            alpha=self._alpha,
            metadata=self.metadata.copy(),
        )

    def is_inverse(self, other: OpData) -> bool:
        if not isinstance(other, GammaOpData):
            return False
        return other._style is self._style.inverse() and self.channel_params() == (
            other.channel_params()
        )

    def may_compose(self, other: OpData) -> bool:
        return (
            isinstance(other, GammaOpData)
            and self._style.is_basic
            and other._style.is_basic
            and self.is_non_channel_dependent()
            and other.is_non_channel_dependent()
        )

    def compose(self, other: OpData) -> GammaOpData:
        """Gamma equivalent to ``self`` followed by ``other`` (basic styles only).

        Reverse exponents count as reciprocals; the product is stored as a
        forward exponent when >= 1 and as a reverse exponent otherwise.
        """
        if not self.may_compose(other):
            raise OpDataError("GammaOp can only be combined with some GammaOps")

        g1 = self._red[0] if self._style.is_forward else 1.0 / self._red[0]
        g2 = other._red[0] if other._style.is_forward else 1.0 / other._red[0]
        gamma = GAMMA_CONFIG.basic_gamma.combine(g1, g2)

        style = GammaStyle.BASIC_FWD
        if gamma < 1.0:
            gamma = 1.0 / gamma
            style = GammaStyle.BASIC_REV
        if abs(gamma - 1.0) < GAMMA_CONFIG.snap_tolerance:
            gamma = 1.0

        logger.debug("[Gamma] Composed %g and %g into %s %g", g1, g2, style.value, gamma)
        return GammaOpData(
            style,
            [gamma],
            alpha=[1.0],
            metadata=self.metadata.combine(other.metadata),
        )

    # ========================================================================
    # Identity and comparison
    # ========================================================================

    def _compute_cache_id(self) -> str:
        def fmt(params: Params) -> str:
            return " ".join(format_float(p) for p in params)

        return (
            f"{self.id} {self._style.value} "
            f"r:{fmt(self._red)} g:{fmt(self._green)} "
            f"b:{fmt(self._blue)} a:{fmt(self._alpha)} "
        )

    def _equals(self, other: OpData) -> bool:
        return self._style is other._style and self.channel_params() == other.channel_params()
