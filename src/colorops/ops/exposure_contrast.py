"""Exposure/contrast op data (linear, video and logarithmic styles)."""

from __future__ import annotations

import math
from enum import Enum

from colorops.exceptions import OpDataError
from colorops.ops.base import FormatMetadata, OpData, OpType, format_float
from colorops.ops.matrix import MatrixOpData
from colorops.validators import validate_choices, validate_positive, validate_type


class ExposureContrastStyle(Enum):
    LINEAR = "linear"
    LINEAR_REV = "linearRev"
    VIDEO = "video"
    VIDEO_REV = "videoRev"
    LOGARITHMIC = "log"
    LOGARITHMIC_REV = "logRev"

    @property
    def is_forward(self) -> bool:
        return self in (
            ExposureContrastStyle.LINEAR,
            ExposureContrastStyle.VIDEO,
            ExposureContrastStyle.LOGARITHMIC,
        )

    def inverse(self) -> ExposureContrastStyle:
        return _INVERSE_STYLE[self]


_INVERSE_STYLE = {
    ExposureContrastStyle.LINEAR: ExposureContrastStyle.LINEAR_REV,
    ExposureContrastStyle.LINEAR_REV: ExposureContrastStyle.LINEAR,
    ExposureContrastStyle.VIDEO: ExposureContrastStyle.VIDEO_REV,
    ExposureContrastStyle.VIDEO_REV: ExposureContrastStyle.VIDEO,
    ExposureContrastStyle.LOGARITHMIC: ExposureContrastStyle.LOGARITHMIC_REV,
    ExposureContrastStyle.LOGARITHMIC_REV: ExposureContrastStyle.LOGARITHMIC,
}

_PROPERTIES = ("exposure", "contrast", "gamma")


class ExposureContrastOpData(OpData):
    """Exposure in stops, contrast and gamma around a pivot.

    Any of exposure, contrast and gamma may be flagged dynamic, meaning a
    processor may change it after the op is built; a dynamic op is never an
    identity.
    """

    op_type = OpType.EXPOSURE_CONTRAST

    def __init__(
        self,
        style: ExposureContrastStyle = ExposureContrastStyle.LINEAR,
        exposure: float = 0.0,
        contrast: float = 1.0,
        gamma: float = 1.0,
        pivot: float = 0.18,
        log_exposure_step: float = 0.088,
        log_mid_gray: float = 0.435,
        metadata: FormatMetadata | None = None,
    ):
        super().__init__(metadata)
        self._style = style
        self._exposure = float(exposure)
        self._contrast = float(contrast)
        self._gamma = float(gamma)
        self._pivot = float(pivot)
        self._log_exposure_step = float(log_exposure_step)
        self._log_mid_gray = float(log_mid_gray)
        self._dynamic: set[str] = set()

    @property
    def style(self) -> ExposureContrastStyle:
        return self._style

    @property
    def exposure(self) -> float:
        return self._exposure

    @property
    def contrast(self) -> float:
        return self._contrast

    @property
    def gamma(self) -> float:
        return self._gamma

    @property
    def pivot(self) -> float:
        return self._pivot

    @property
    def log_exposure_step(self) -> float:
        return self._log_exposure_step

    @property
    def log_mid_gray(self) -> float:
        return self._log_mid_gray

    def set_style(self, style: ExposureContrastStyle) -> None:
        self._style = style
        self._invalidate()

    @validate_type((int, float), "exposure")
    def set_exposure(self, exposure: float) -> None:
        self._exposure = float(exposure)
        self._invalidate()

    @validate_type((int, float), "contrast")
    def set_contrast(self, contrast: float) -> None:
        self._contrast = float(contrast)
        self._invalidate()

    @validate_type((int, float), "gamma")
    def set_gamma(self, gamma: float) -> None:
        self._gamma = float(gamma)
        self._invalidate()

    @validate_positive("pivot")
    def set_pivot(self, pivot: float) -> None:
        self._pivot = float(pivot)
        self._invalidate()

    @validate_positive("log_exposure_step")
    def set_log_exposure_step(self, step: float) -> None:
        self._log_exposure_step = float(step)
        self._invalidate()

    @validate_type((int, float), "log_mid_gray")
    def set_log_mid_gray(self, value: float) -> None:
        self._log_mid_gray = float(value)
        self._invalidate()

    @validate_choices(_PROPERTIES, "name")
    def set_dynamic(self, name: str, dynamic: bool = True) -> None:
        """Flag ``exposure``, ``contrast`` or ``gamma`` as dynamic."""
        if dynamic:
            self._dynamic.add(name)
        else:
            self._dynamic.discard(name)
        self._invalidate()

    def is_dynamic(self, name: str | None = None) -> bool:
        if name is None:
            return bool(self._dynamic)
        return name in self._dynamic

    # ========================================================================
    # OpData
    # ========================================================================

    def validate(self) -> None:
        for name in (
            "exposure",
            "contrast",
            "gamma",
            "pivot",
            "log_exposure_step",
            "log_mid_gray",
        ):
            if not math.isfinite(getattr(self, f"_{name}")):
                raise OpDataError(f"ExposureContrast: {name} must be finite.")
        if self._contrast < 0.0:
            raise OpDataError(f"ExposureContrast: contrast {self._contrast:g} must be >= 0.")
        if self._gamma < 0.0:
            raise OpDataError(f"ExposureContrast: gamma {self._gamma:g} must be >= 0.")
        if self._pivot < 0.0:
            raise OpDataError(f"ExposureContrast: pivot {self._pivot:g} must be >= 0.")
        if self._log_exposure_step == 0.0:
            raise OpDataError("ExposureContrast: log exposure step cannot be 0.")

    def is_identity(self) -> bool:
        return (
            not self._dynamic
            and self._exposure == 0.0
            and self._contrast == 1.0
            and self._gamma == 1.0
        )

    def is_no_op(self) -> bool:
        return self.is_identity()

    def get_identity_replacement(self) -> OpData:
        return MatrixOpData(metadata=self.metadata.copy())

    def inverse(self) -> ExposureContrastOpData:
        inv = self.clone()
        inv.set_style(self._style.inverse())
        return inv

    def _same_params(self, other: ExposureContrastOpData) -> bool:
        return (
            self._exposure == other._exposure
            and self._contrast == other._contrast
            and self._gamma == other._gamma
            and self._pivot == other._pivot
            and self._log_exposure_step == other._log_exposure_step
            and self._log_mid_gray == other._log_mid_gray
        )

    def is_inverse(self, other: OpData) -> bool:
        if not isinstance(other, ExposureContrastOpData):
            return False
        if self._dynamic or other._dynamic:
            return False
        return other._style is self._style.inverse() and self._same_params(other)

    def _compute_cache_id(self) -> str:
        dynamic = ",".join(sorted(self._dynamic)) or "none"
        return (
            f"{self.id} {self._style.value} "
            f"E:{format_float(self._exposure)} C:{format_float(self._contrast)} "
            f"G:{format_float(self._gamma)} P:{format_float(self._pivot)} "
            f"LES:{format_float(self._log_exposure_step)} "
            f"LMG:{format_float(self._log_mid_gray)} D:{dynamic}"
        )

    def _equals(self, other: OpData) -> bool:
        return (
            self._style is other._style
            and self._dynamic == other._dynamic
            and self._same_params(other)
        )
