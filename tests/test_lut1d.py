"""Tests for the 1D LUT op data and its numeric engine.

Tests cover:
- Identity fill for standard and half domains
- Array preparation (monotonic runs, flat ends, negative half codes)
- Exact and fast inversion
- Composition and lookup eligibility
"""

import numpy as np
import pytest

from colorops import (
    BitDepth,
    HalfFlags,
    Interpolation,
    Lut1DHueAdjust,
    Lut1DOpData,
    LutInversionQuality,
    MatrixOpData,
    OpDataError,
    RangeOpData,
    TransformDirection,
    apply_ops,
    half_domain,
    make_fast_lut1d_from_inverse,
)
from colorops.half import HALF_MAX_NEG, HALF_MAX_POS, HALF_NEG_ZERO, HALF_ONE
from colorops.ops.array import Array
from colorops.ops.lut1d import (
    ComposeMethod,
    compose_lut1d,
    compose_lut1d_vec,
    get_lut_ideal_size,
    make_lookup_domain,
    prepare_channel,
)


def _rgba(values):
    values = np.asarray(values, dtype=np.float32)
    rgba = np.ones((values.size, 4), dtype=np.float32)
    rgba[:, :3] = values[:, None]
    return rgba


@pytest.fixture
def square_lut():
    """Forward LUT of x**2 with 1024 entries."""
    ramp = np.linspace(0.0, 1.0, 1024)
    return Lut1DOpData.from_values(ramp**2)


class TestLut1DConstruction:
    """Test construction and identity fill."""

    def test_standard_identity_fill(self):
        """Test entry i maps to i / (dimension - 1)."""
        lut = Lut1DOpData(5)
        np.testing.assert_array_equal(lut.values()[:, 0], [0.0, 0.25, 0.5, 0.75, 1.0])
        np.testing.assert_array_equal(lut.values()[:, 2], [0.0, 0.25, 0.5, 0.75, 1.0])
        assert lut.is_identity()

    def test_base_array_is_abstract(self):
        """Test the sample storage base class needs a concrete identity fill."""
        with pytest.raises(TypeError):
            Array(4)
        assert isinstance(Lut1DOpData(4).array, Array)

    def test_half_domain_identity_fill(self):
        """Test a half-domain LUT has 65536 entries holding the decoded halfs."""
        lut = Lut1DOpData(10, half_flags=HalfFlags.LUT_INPUT_HALF_CODE)
        assert lut.dimension == 65536
        values = lut.values()
        assert values[0, 0] == 0.0
        assert values[HALF_ONE, 1] == 1.0
        assert values[HALF_MAX_POS, 2] == 65504.0
        assert values[HALF_MAX_NEG, 0] == -65504.0
        assert lut.is_identity()

    def test_output_half_identity_is_rounded(self):
        """Test output-half tables hold half-rounded identity values."""
        lut = Lut1DOpData(1000, half_flags=HalfFlags.LUT_OUTPUT_HALF_CODE)
        values = lut.values()[:, 0]
        np.testing.assert_array_equal(values, values.astype(np.float16).astype(np.float32))
        assert lut.is_identity()

    def test_length_below_two(self):
        """Test a 1-entry LUT is rejected."""
        with pytest.raises(OpDataError, match="below the minimum of 2"):
            Lut1DOpData(1)

    def test_unknown_direction(self):
        """Test UNKNOWN direction is rejected."""
        with pytest.raises(OpDataError, match="unspecified transform direction"):
            Lut1DOpData(4, TransformDirection.UNKNOWN)

    def test_unsupported_interpolation(self):
        """Test tetrahedral interpolation is not valid for 1D LUTs."""
        lut = Lut1DOpData(4, interpolation=Interpolation.TETRAHEDRAL)
        with pytest.raises(OpDataError, match="1D LUT does not support interpolation algorithm"):
            lut.validate()

    def test_from_values_shape(self):
        """Test values must be shaped (N,) or (N, 3)."""
        with pytest.raises(OpDataError, match="must be shaped"):
            Lut1DOpData.from_values(np.zeros((4, 2)))

    def test_set_values_size_checked(self):
        """Test setting the wrong number of values fails."""
        lut = Lut1DOpData(4)
        with pytest.raises(OpDataError, match="values, but 12 are expected"):
            lut.set_values(np.zeros(10))

    def test_concrete_interpolation(self):
        """Test DEFAULT and BEST resolve to LINEAR."""
        assert Lut1DOpData(4).get_concrete_interpolation() is Interpolation.LINEAR
        lut = Lut1DOpData(4, interpolation=Interpolation.BEST)
        assert lut.get_concrete_interpolation() is Interpolation.LINEAR
        lut = Lut1DOpData(4, interpolation=Interpolation.NEAREST)
        assert lut.get_concrete_interpolation() is Interpolation.NEAREST


class TestLut1DIdentity:
    """Test identity, no-op and replacement."""

    def test_standard_identity_is_not_no_op(self):
        """Test a standard-domain identity still clamps to [0, 1]."""
        lut = Lut1DOpData(16)
        assert lut.is_identity()
        assert not lut.is_no_op()
        replacement = lut.get_identity_replacement()
        assert isinstance(replacement, RangeOpData)
        assert (replacement.min_in, replacement.max_in) == (0.0, 1.0)

    def test_half_identity_is_no_op(self):
        """Test a half-domain identity does nothing."""
        lut = Lut1DOpData(2, half_flags=HalfFlags.LUT_INPUT_HALF_CODE)
        assert lut.is_no_op()
        assert isinstance(lut.get_identity_replacement(), MatrixOpData)

    def test_modified_entry_breaks_identity(self):
        """Test a single changed sample makes the LUT non-identity."""
        values = Lut1DOpData(8).values().copy()
        values[3, 1] += 0.01
        assert not Lut1DOpData.from_values(values).is_identity()

    def test_single_lut_after_finalize(self):
        """Test shared curves collapse to one channel on finalize."""
        shared = Lut1DOpData.from_values(np.linspace(0.0, 1.0, 8) ** 2)
        shared.finalize()
        assert shared.has_single_lut()

        values = np.stack([np.linspace(0.0, 1.0, 8)] * 3, axis=1)
        values[:, 2] **= 2
        separate = Lut1DOpData.from_values(values)
        separate.finalize()
        assert not separate.has_single_lut()

    def test_hue_adjust_has_crosstalk(self):
        """Test DW3 hue adjust mixes channels and blocks composition."""
        lut = Lut1DOpData(8)
        assert not lut.has_channel_crosstalk()
        lut.set_hue_adjust(Lut1DHueAdjust.DW3)
        assert lut.has_channel_crosstalk()
        assert not lut.may_compose(Lut1DOpData(8))


class TestLookupSize:
    """Test ideal sizes and lookup eligibility."""

    @pytest.mark.parametrize(
        "depth, size",
        [
            (BitDepth.UINT8, 256),
            (BitDepth.UINT10, 1024),
            (BitDepth.UINT12, 4096),
            (BitDepth.UINT16, 65536),
            (BitDepth.F16, 65536),
            (BitDepth.F32, 65536),
        ],
    )
    def test_ideal_size(self, depth, size):
        """Test one entry per code value."""
        assert get_lut_ideal_size(depth) == size

    def test_ideal_size_unknown(self):
        """Test an unknown depth has no ideal size."""
        with pytest.raises(OpDataError):
            get_lut_ideal_size(BitDepth.UNKNOWN)

    def test_may_lookup(self):
        """Test lookup needs an integer depth and a matching dimension."""
        lut = Lut1DOpData(256)
        assert lut.may_lookup(BitDepth.UINT8)
        assert not lut.may_lookup(BitDepth.UINT10)
        assert not lut.may_lookup(BitDepth.F32)
        assert not Lut1DOpData(255).may_lookup(BitDepth.UINT8)

    def test_inverse_may_not_lookup(self):
        """Test inverse LUTs always need a search."""
        lut = Lut1DOpData(256, TransformDirection.INVERSE)
        assert not lut.may_lookup(BitDepth.UINT8)

    def test_lookup_domain_float_depths(self):
        """Test only F16 gets a half domain, F32 gets a 65536-entry ramp."""
        half = make_lookup_domain(BitDepth.F16)
        assert half.is_input_half_domain()

        ramp = make_lookup_domain(BitDepth.F32)
        assert not ramp.is_input_half_domain()
        assert ramp.dimension == 65536
        assert ramp.is_identity()

    def test_lookup_domain_integer_depth(self):
        """Test integer depths get one entry per code value."""
        lut = make_lookup_domain(BitDepth.UINT10)
        assert lut.dimension == 1024
        assert lut.may_lookup(BitDepth.UINT10)


class TestPrepareChannel:
    """Test monotonic preparation of a single channel."""

    def test_increasing_with_flat_ends(self):
        """Test flat spots at both ends are excluded from the domain."""
        values, props = prepare_channel(np.array([0.0, 0.0, 0.2, 0.5, 1.0, 1.0]), False)
        assert props.is_increasing
        assert (props.start_domain, props.end_domain) == (1, 4)
        np.testing.assert_array_equal(values, [0.0, 0.0, 0.2, 0.5, 1.0, 1.0])

    def test_decreasing(self):
        """Test a decreasing channel is detected."""
        _, props = prepare_channel(np.array([1.0, 0.5, 0.0]), False)
        assert not props.is_increasing
        assert (props.start_domain, props.end_domain) == (0, 2)

    def test_reversal_is_flattened(self):
        """Test a sample going back is held at the previous value."""
        values, props = prepare_channel(np.array([0.0, 0.5, 0.3, 0.8, 1.0]), False)
        np.testing.assert_allclose(values, [0.0, 0.5, 0.5, 0.8, 1.0])
        assert (props.start_domain, props.end_domain) == (0, 4)

    def test_flat_channel(self):
        """Test a constant channel has an empty domain."""
        _, props = prepare_channel(np.full(6, 0.5), False)
        assert props.start_domain == props.end_domain == 0

    def test_half_domain_runs(self):
        """Test positive and negative half codes form two runs."""
        _, props = prepare_channel(half_domain().copy(), True)
        assert props.is_increasing
        assert (props.start_domain, props.end_domain) == (0, HALF_MAX_POS)
        assert (props.neg_start_domain, props.neg_end_domain) == (HALF_NEG_ZERO, HALF_MAX_NEG)

    def test_inverse_finalize_prepares_array(self):
        """Test finalizing an inverse LUT makes its channels monotonic."""
        lut = Lut1DOpData.from_values([0.0, 0.5, 0.3, 0.8, 1.0], TransformDirection.INVERSE)
        lut.finalize()
        np.testing.assert_allclose(lut.values()[:, 0], [0.0, 0.5, 0.5, 0.8, 1.0])
        assert lut.component_properties[1].end_domain == 4


class TestLut1DInversion:
    """Test exact and fast inversion."""

    def test_inverse_round_trip(self, square_lut):
        """Test the exact inverse recovers the input."""
        x = np.linspace(0.05, 1.0, 50)
        forward = apply_ops([square_lut], _rgba(x))
        back = apply_ops([square_lut.inverse()], forward)
        np.testing.assert_allclose(back[:, 0], x, atol=1e-4)
        np.testing.assert_array_equal(back[:, 3], 1.0)

    def test_inverse_decreasing(self):
        """Test inversion of a decreasing table."""
        lut = Lut1DOpData.from_values([1.0, 0.75, 0.5, 0.25, 0.0], TransformDirection.INVERSE)
        out = apply_ops([lut], _rgba([0.5, 0.25, 1.0]))
        np.testing.assert_allclose(out[:, 0], [0.5, 0.75, 0.0], atol=1e-6)

    def test_inverse_clamps_outside_range(self):
        """Test values beyond the table range clamp to the domain ends."""
        lut = Lut1DOpData.from_values([0.2, 0.4, 0.6], TransformDirection.INVERSE)
        out = apply_ops([lut], _rgba([0.0, 1.0]))
        np.testing.assert_allclose(out[:, 0], [0.0, 1.0])

    def test_half_domain_inverse_negative(self):
        """Test negative values are searched in the negative-code run."""
        lut = Lut1DOpData.from_values(
            half_domain() * 2.0,
            TransformDirection.INVERSE,
            half_flags=HalfFlags.LUT_INPUT_HALF_CODE,
        )
        out = apply_ops([lut], _rgba([1.0, -1.0, 4.0, -0.5]))
        np.testing.assert_allclose(out[:, 0], [0.5, -0.5, 2.0, -0.25], atol=1e-6)

    def test_is_inverse(self, square_lut):
        """Test a LUT and its inverse form an inverse pair."""
        assert square_lut.is_inverse(square_lut.inverse())
        assert not square_lut.is_inverse(square_lut.clone())

    def test_fast_inverse_matches_exact(self, square_lut):
        """Test the fast forward approximation matches the exact inverse."""
        inverse = square_lut.inverse()
        fast = make_fast_lut1d_from_inverse(inverse)
        assert fast.direction is TransformDirection.FORWARD
        assert fast.dimension == 65536
        assert not fast.is_input_half_domain()

        y = np.linspace(0.05, 1.0, 200)
        exact = apply_ops([inverse], _rgba(y))
        approx = apply_ops([fast], _rgba(y))
        np.testing.assert_allclose(approx[:, :3], exact[:, :3], atol=1e-4)

    def test_fast_inverse_keeps_file_depth(self, square_lut):
        """Test the file output depth selects the domain and is kept."""
        inverse = square_lut.inverse()
        inverse.set_file_output_bit_depth(BitDepth.UINT10)
        fast = make_fast_lut1d_from_inverse(inverse)
        assert fast.dimension == 1024
        assert fast.file_output_bit_depth is BitDepth.UINT10

    def test_fast_inverse_extended_range_uses_half_domain(self):
        """Test tables leaving [0, 1] get a half-domain fast inverse."""
        lut = Lut1DOpData.from_values(np.linspace(-0.5, 1.5, 64), TransformDirection.INVERSE)
        assert lut.has_extended_domain()
        fast = make_fast_lut1d_from_inverse(lut)
        assert fast.is_input_half_domain()

        out = apply_ops([fast], _rgba([0.5, -0.5, 1.5]))
        np.testing.assert_allclose(out[:, 0], [0.5, 0.0, 1.0], atol=1e-3)

    def test_fast_inverse_for_gpu(self, square_lut):
        """Test GPU targets beyond 10 bits use a half domain."""
        inverse = square_lut.inverse()
        inverse.set_file_output_bit_depth(BitDepth.UINT12)
        assert make_fast_lut1d_from_inverse(inverse, for_gpu=True).is_input_half_domain()

        inverse.set_file_output_bit_depth(BitDepth.UINT8)
        assert make_fast_lut1d_from_inverse(inverse, for_gpu=True).dimension == 256

    def test_fast_inverse_requires_inverse(self, square_lut):
        """Test a forward LUT is rejected."""
        with pytest.raises(OpDataError, match="expects an inverse LUT"):
            make_fast_lut1d_from_inverse(square_lut)

    def test_concrete_inversion_quality(self):
        """Test DEFAULT resolves to FAST and BEST to EXACT."""
        lut = Lut1DOpData(4)
        assert lut.get_concrete_inversion_quality() is LutInversionQuality.FAST
        lut.set_inversion_quality(LutInversionQuality.BEST)
        assert lut.get_concrete_inversion_quality() is LutInversionQuality.EXACT


class TestLut1DCompose:
    """Test composition."""

    def test_compose_with_matrix(self, square_lut):
        """Test downstream ops are evaluated on the LUT samples."""
        result = compose_lut1d(
            square_lut, MatrixOpData.from_scale_offset(0.5), ComposeMethod.RESAMPLE_NO
        )
        assert result.dimension == 1024
        np.testing.assert_allclose(result.values(), square_lut.values() * 0.5, rtol=1e-6)

    def test_compose_resample_big(self):
        """Test RESAMPLE_BIG grows small tables to 65536 entries."""
        lut = Lut1DOpData.from_values(np.linspace(0.0, 1.0, 5) ** 2)
        result = compose_lut1d(lut, MatrixOpData.from_scale_offset(0.5), ComposeMethod.RESAMPLE_BIG)
        assert result.dimension == 65536
        assert result.values()[-1, 0] == pytest.approx(0.5)
        assert result.values()[0, 0] == pytest.approx(0.0)

    def test_compose_two_luts(self, square_lut):
        """Test LUT-LUT composition through the compose method."""
        flip = Lut1DOpData.from_values([1.0, 0.0])
        assert square_lut.may_compose(flip)
        result = square_lut.compose(flip)
        np.testing.assert_allclose(result.values(), 1.0 - square_lut.values(), atol=1e-6)

    def test_compose_inverse_first(self):
        """Test an inverse first LUT is resampled onto an identity domain."""
        lut = Lut1DOpData.from_values(np.linspace(0.0, 1.0, 5) ** 2, TransformDirection.INVERSE)
        result = compose_lut1d(lut, MatrixOpData(), ComposeMethod.RESAMPLE_NO)
        assert result.direction is TransformDirection.FORWARD
        assert result.dimension == 5
        np.testing.assert_allclose(result.values()[[0, 1, 4], 0], [0.0, 0.5, 1.0], atol=1e-6)

    def test_compose_keeps_metadata(self, square_lut):
        """Test metadata of both ops is merged."""
        square_lut.metadata.name = "curve"
        other = MatrixOpData()
        other.metadata.name = "scale"
        result = compose_lut1d(square_lut, other, ComposeMethod.RESAMPLE_NO)
        assert result.metadata.name == "curve + scale"

    def test_compose_vec_empty(self):
        """Test composing with nothing fails."""
        with pytest.raises(OpDataError, match="nothing to compose"):
            compose_lut1d_vec(Lut1DOpData(4), [])


class TestLut1DRender:
    """Test forward evaluation."""

    def test_forward_linear(self, square_lut):
        """Test linear interpolation of the samples."""
        out = apply_ops([square_lut], _rgba([0.0, 0.5, 1.0]))
        np.testing.assert_allclose(out[:, 0], [0.0, 0.25, 1.0], atol=1e-6)

    def test_forward_clamps_standard_domain(self, square_lut):
        """Test inputs outside [0, 1] clamp to the table ends."""
        out = apply_ops([square_lut], _rgba([-1.0, 2.0]))
        np.testing.assert_allclose(out[:, 0], [0.0, 1.0])

    def test_half_domain_identity_passes_values(self):
        """Test a half-domain identity returns its input."""
        lut = Lut1DOpData(2, half_flags=HalfFlags.LUT_INPUT_HALF_CODE)
        x = np.array([-3.7, -0.001, 0.0, 0.12345, 1.0, 1000.25], dtype=np.float32)
        out = apply_ops([lut], _rgba(x))
        np.testing.assert_allclose(out[:, 0], x, rtol=1e-6)

    def test_half_domain_no_op_keeps_infinities(self):
        """Test a half-domain no-op does not clamp infinite or overflowing inputs."""
        lut = Lut1DOpData(65536, half_flags=HalfFlags.LUT_INPUT_HALF_CODE)
        assert lut.is_no_op()
        out = apply_ops([lut], _rgba([np.inf, -np.inf, 70000.0, 65504.0]))
        assert out[0, 0] == np.inf
        assert out[1, 0] == -np.inf
        assert out[2, 0] == np.inf
        assert out[3, 0] == 65504.0

    def test_half_domain_nearest_infinity(self):
        """Test nearest lookup also reaches the infinity entries."""
        lut = Lut1DOpData(
            65536,
            half_flags=HalfFlags.LUT_INPUT_HALF_CODE,
            interpolation=Interpolation.NEAREST,
        )
        out = apply_ops([lut], _rgba([np.inf, -np.inf]))
        np.testing.assert_array_equal(out[:, 0], [np.inf, -np.inf])

    def test_nearest(self):
        """Test nearest interpolation picks the closest sample."""
        lut = Lut1DOpData.from_values([0.0, 10.0, 20.0], interpolation=Interpolation.NEAREST)
        out = apply_ops([lut], _rgba([0.2, 0.3, 0.8]))
        np.testing.assert_allclose(out[:, 0], [0.0, 10.0, 20.0])

    def test_dw3_keeps_hue(self):
        """Test the middle channel keeps its relative position."""
        lut = Lut1DOpData.from_values(np.linspace(0.0, 1.0, 1024) ** 2)
        lut.set_hue_adjust(Lut1DHueAdjust.DW3)
        rgba = np.array([[0.8, 0.5, 0.2, 1.0]], dtype=np.float32)
        out = apply_ops([lut], rgba)
        r, g, b = out[0, :3]
        assert r == pytest.approx(0.64, abs=1e-4)
        assert b == pytest.approx(0.04, abs=1e-4)
        # (0.5 - 0.2) / (0.8 - 0.2) = 0.5 of the way between min and max
        assert g == pytest.approx(0.04 + 0.5 * (0.64 - 0.04), abs=1e-4)
