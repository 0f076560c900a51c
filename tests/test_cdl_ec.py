"""Tests for the ASC CDL and exposure/contrast op data."""

import numpy as np
import pytest

from colorops import (
    CDLOpData,
    CDLStyle,
    ExposureContrastOpData,
    ExposureContrastStyle,
    MatrixOpData,
    OpDataError,
    RangeOpData,
    apply_ops,
)


def _rgba(rgb):
    rgb = np.asarray(rgb, dtype=np.float32)
    rgba = np.ones((rgb.shape[0], 4), dtype=np.float32)
    rgba[:, :3] = rgb
    return rgba


@pytest.fixture
def colors():
    """Positive RGB samples inside [0.2, 0.6]."""
    rng = np.random.default_rng(3)
    return rng.uniform(0.2, 0.6, (64, 3))


# ============================================================================
# CDL
# ============================================================================


class TestCDLValidation:
    """Test CDLOpData.validate()."""

    def test_default_is_valid(self):
        """Test the default CDL validates."""
        CDLOpData().validate()

    def test_negative_slope(self):
        """Test slope cannot be negative."""
        with pytest.raises(OpDataError, match="Invalid 'slope'"):
            CDLOpData(slope=[1.0, -0.5, 1.0]).validate()

    def test_zero_power(self):
        """Test power must be greater than 0."""
        with pytest.raises(OpDataError, match="Invalid 'power'"):
            CDLOpData(power=0.0).validate()

    def test_negative_saturation(self):
        """Test saturation cannot be negative."""
        with pytest.raises(OpDataError, match="Invalid 'saturation'"):
            CDLOpData(saturation=-1.0).validate()

    def test_triple_length(self):
        """Test per-channel values come in threes."""
        with pytest.raises(OpDataError, match="expecting 3 values"):
            CDLOpData(slope=[1.0, 2.0])


class TestCDLIdentity:
    """Test identity predicates."""

    def test_clamping_identity(self):
        """Test a v1.2 identity still clamps to [0, 1]."""
        op = CDLOpData(CDLStyle.V1_2_FWD)
        assert op.is_identity()
        assert not op.is_no_op()
        assert isinstance(op.get_identity_replacement(), RangeOpData)

    def test_no_clamp_identity(self):
        """Test a no-clamp identity does nothing."""
        op = CDLOpData(CDLStyle.NO_CLAMP_REV)
        assert op.is_no_op()
        assert isinstance(op.get_identity_replacement(), MatrixOpData)

    def test_saturation_is_crosstalk(self):
        """Test only saturation mixes channels."""
        assert not CDLOpData(slope=2.0).has_channel_crosstalk()
        assert CDLOpData(saturation=0.5).has_channel_crosstalk()


class TestCDLRender:
    """Test CPU evaluation."""

    def test_no_clamp_forward(self):
        """Test slope, offset and power, with negatives passing the power."""
        op = CDLOpData(CDLStyle.NO_CLAMP_FWD, slope=2.0, offset=0.1, power=2.0)
        out = apply_ops([op], _rgba([[0.2, 0.2, 0.2], [-0.5, -0.5, -0.5]]))
        np.testing.assert_allclose(out[0, :3], 0.25, atol=1e-6)
        np.testing.assert_allclose(out[1, :3], -0.9, atol=1e-6)

    def test_v12_clamps(self):
        """Test the v1.2 style clamps before the power."""
        op = CDLOpData(CDLStyle.V1_2_FWD, slope=2.0, power=2.0)
        out = apply_ops([op], _rgba([[0.8, -0.2, 0.25]]))
        np.testing.assert_allclose(out[0, :3], [1.0, 0.0, 0.25], atol=1e-6)

    def test_zero_saturation_gives_luma(self):
        """Test saturation 0 outputs Rec.709 luma."""
        op = CDLOpData(CDLStyle.NO_CLAMP_FWD, saturation=0.0)
        out = apply_ops([op], _rgba([[1.0, 0.0, 0.0]]))
        np.testing.assert_allclose(out[0, :3], 0.2126, atol=1e-6)

    def test_round_trip(self, colors):
        """Test the reverse style undoes the forward style."""
        op = CDLOpData(
            CDLStyle.NO_CLAMP_FWD,
            slope=[1.1, 1.0, 0.9],
            offset=0.05,
            power=[1.3, 1.2, 1.1],
            saturation=1.2,
        )
        out = apply_ops([op, op.inverse()], _rgba(colors))
        np.testing.assert_allclose(out[:, :3], colors, atol=1e-5)

    def test_is_inverse(self):
        """Test the opposite style with equal parameters forms a pair."""
        op = CDLOpData(CDLStyle.V1_2_FWD, slope=1.5, power=0.8)
        assert op.is_inverse(op.inverse())
        assert op.inverse().style is CDLStyle.V1_2_REV
        assert not op.is_inverse(CDLOpData(CDLStyle.NO_CLAMP_REV, slope=1.5, power=0.8))

    def test_cache_id(self):
        """Test the cache ID lists the parameters."""
        op = CDLOpData(slope=[2.0, 1.0, 0.5])
        assert "slope:2, 1, 0.5" in op.cache_id
        assert "v1.2_Fwd" in op.cache_id


# ============================================================================
# Exposure / contrast
# ============================================================================


class TestExposureContrastValidation:
    """Test ExposureContrastOpData.validate()."""

    def test_negative_contrast(self):
        """Test contrast cannot be negative."""
        with pytest.raises(OpDataError, match="contrast"):
            ExposureContrastOpData(contrast=-1.0).validate()

    def test_zero_log_step(self):
        """Test the log exposure step cannot be 0."""
        with pytest.raises(OpDataError, match="log exposure step cannot be 0"):
            ExposureContrastOpData(log_exposure_step=0.0).validate()

    def test_non_finite(self):
        """Test parameters must be finite."""
        with pytest.raises(OpDataError, match="exposure must be finite"):
            ExposureContrastOpData(exposure=float("nan")).validate()


class TestExposureContrastIdentity:
    """Test identity and dynamic properties."""

    def test_default_is_identity(self):
        """Test default parameters do nothing."""
        op = ExposureContrastOpData()
        assert op.is_identity()
        assert op.is_no_op()
        assert isinstance(op.get_identity_replacement(), MatrixOpData)

    def test_dynamic_is_never_identity(self):
        """Test a dynamic property prevents identity detection."""
        op = ExposureContrastOpData()
        first = op.cache_id
        op.set_dynamic("exposure")
        assert op.is_dynamic()
        assert op.is_dynamic("exposure")
        assert not op.is_dynamic("gamma")
        assert not op.is_identity()
        assert op.cache_id != first

        op.set_dynamic("exposure", False)
        assert op.is_identity()

    def test_dynamic_blocks_inverse_pair(self):
        """Test dynamic ops never cancel."""
        op = ExposureContrastOpData(exposure=1.0)
        assert op.is_inverse(op.inverse())
        op.set_dynamic("contrast")
        assert not op.is_inverse(op.inverse())

    def test_inverse_style(self):
        """Test every style maps to its reverse."""
        for style in ExposureContrastStyle:
            assert style.inverse().inverse() is style
            assert style.is_forward != style.inverse().is_forward


class TestExposureContrastRender:
    """Test CPU evaluation."""

    def test_linear_exposure(self):
        """Test one stop doubles linear values."""
        op = ExposureContrastOpData(exposure=1.0)
        out = apply_ops([op], _rgba([[0.1, 0.2, 0.3]]))
        np.testing.assert_allclose(out[0, :3], [0.2, 0.4, 0.6], atol=1e-6)

    def test_linear_contrast(self):
        """Test contrast is a power around the pivot."""
        op = ExposureContrastOpData(contrast=2.0, pivot=0.18)
        out = apply_ops([op], _rgba([[0.18, 0.36, 0.09]]))
        np.testing.assert_allclose(out[0, :3], [0.18, 0.72, 0.045], atol=1e-6)

    def test_gamma_multiplies_contrast(self):
        """Test gamma scales the contrast exponent."""
        a = ExposureContrastOpData(contrast=2.0, gamma=1.5)
        b = ExposureContrastOpData(contrast=3.0)
        pixels = _rgba([[0.05, 0.3, 0.9]])
        np.testing.assert_allclose(apply_ops([a], pixels), apply_ops([b], pixels), atol=1e-6)

    def test_log_contrast_pivot(self):
        """Test the log styles pivot around the mid-gray code value."""
        op = ExposureContrastOpData(ExposureContrastStyle.LOGARITHMIC, contrast=2.0)
        out = apply_ops([op], _rgba([[0.435, 0.535, 0.335]]))
        np.testing.assert_allclose(out[0, :3], [0.435, 0.635, 0.235], atol=1e-6)

    def test_log_exposure_shift(self):
        """Test log exposure adds one step per stop."""
        op = ExposureContrastOpData(ExposureContrastStyle.LOGARITHMIC, exposure=2.0)
        out = apply_ops([op], _rgba([[0.5, 0.5, 0.5]]))
        np.testing.assert_allclose(out[0, :3], 0.5 + 2 * 0.088, atol=1e-6)

    @pytest.mark.parametrize(
        "style",
        [
            ExposureContrastStyle.LINEAR,
            ExposureContrastStyle.VIDEO,
            ExposureContrastStyle.LOGARITHMIC,
        ],
    )
    def test_round_trip(self, colors, style):
        """Test the reverse style undoes the forward style."""
        op = ExposureContrastOpData(style, exposure=0.5, contrast=1.3, gamma=0.9, pivot=0.2)
        out = apply_ops([op, op.inverse()], _rgba(colors))
        np.testing.assert_allclose(out[:, :3], colors, atol=1e-5)
