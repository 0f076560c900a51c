"""Tests for the gamma op data.

Tests cover:
- Parameter validation (arity and bounds per style)
- Identity, no-op and identity replacement
- Inversion and inverse-pair detection
- Composition of basic styles
"""

import re

import pytest

from colorops import GammaOpData, GammaStyle, MatrixOpData, OpDataError, RangeOpData


class TestGammaValidation:
    """Test GammaOpData.validate()."""

    def test_valid_basic(self):
        """Test basic style accepts values inside [0.01, 100]."""
        GammaOpData(GammaStyle.BASIC_FWD, [2.2]).validate()
        GammaOpData(GammaStyle.BASIC_REV, [0.01]).validate()
        GammaOpData(GammaStyle.BASIC_FWD, [100.0]).validate()

    def test_basic_below_bound(self):
        """Test basic gamma below 0.01 is rejected with the bound in the message."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [0.001])
        with pytest.raises(OpDataError, match=re.escape("0.001 is less than lower bound 0.01")):
            op.validate()

    def test_basic_above_bound(self):
        """Test basic gamma above 100 is rejected."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [100.5])
        with pytest.raises(OpDataError, match=re.escape("100.5 is greater than upper bound 100")):
            op.validate()

    def test_moncurve_bounds(self):
        """Test moncurve scale must be in [1, 10] and offset in [0, 0.9]."""
        GammaOpData(GammaStyle.MONCURVE_FWD, [2.4, 0.055]).validate()

        with pytest.raises(OpDataError, match="less than lower bound 1"):
            GammaOpData(GammaStyle.MONCURVE_FWD, [0.5, 0.1]).validate()
        with pytest.raises(OpDataError, match=re.escape("0.95 is greater than upper bound 0.9")):
            GammaOpData(GammaStyle.MONCURVE_REV, [2.0, 0.95]).validate()

    def test_wrong_arity(self):
        """Test parameter count must match the style."""
        with pytest.raises(OpDataError, match="Wrong number of parameters"):
            GammaOpData(GammaStyle.BASIC_FWD, [2.2, 0.1]).validate()
        with pytest.raises(OpDataError, match="Wrong number of parameters"):
            GammaOpData(GammaStyle.MONCURVE_FWD, [2.2]).validate()

    def test_alpha_is_validated(self):
        """Test alpha parameters go through the same checks."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [2.0], alpha=[200.0])
        with pytest.raises(OpDataError, match="greater than upper bound"):
            op.validate()

    def test_style_from_string(self):
        """Test case-insensitive style lookup."""
        assert GammaStyle.from_string("basicFwd") is GammaStyle.BASIC_FWD
        assert GammaStyle.from_string("MONCURVEREV") is GammaStyle.MONCURVE_REV

        with pytest.raises(OpDataError, match="Missing gamma style"):
            GammaStyle.from_string("")
        with pytest.raises(OpDataError, match="Unknown gamma style"):
            GammaStyle.from_string("sRGB")


class TestGammaIdentity:
    """Test identity and no-op predicates."""

    def test_default_is_identity(self):
        """Test default parameters are the identity of the style."""
        assert GammaOpData().is_identity()
        assert GammaOpData(GammaStyle.MONCURVE_FWD).is_identity()

    def test_basic_identity_is_not_no_op(self):
        """Test basic styles clamp negatives, so they are never a no-op."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [1.0])
        assert op.is_identity()
        assert not op.is_no_op()

    def test_moncurve_identity_is_no_op(self):
        """Test moncurve identity does not clamp."""
        op = GammaOpData(GammaStyle.MONCURVE_REV, [1.0, 0.0])
        assert op.is_identity()
        assert op.is_no_op()

    def test_alpha_breaks_identity(self):
        """Test a non-identity alpha channel makes the op non-identity."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [1.0], alpha=[2.0])
        assert not op.is_identity()

    def test_channel_mismatch_breaks_identity(self):
        """Test R=G=B=A is required."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [1.0], green=[1.5])
        assert not op.is_identity()

    def test_basic_replacement_is_clamp(self):
        """Test basic identity is replaced by a [0, +inf) clamp."""
        replacement = GammaOpData(GammaStyle.BASIC_REV, [1.0]).get_identity_replacement()
        assert isinstance(replacement, RangeOpData)
        assert replacement.is_clamp_negs()

    def test_moncurve_replacement_is_matrix(self):
        """Test moncurve identity is replaced by an identity matrix."""
        replacement = GammaOpData(GammaStyle.MONCURVE_FWD).get_identity_replacement()
        assert isinstance(replacement, MatrixOpData)
        assert replacement.is_identity()


class TestGammaInverse:
    """Test inversion."""

    def test_inverse_swaps_style(self):
        """Test FWD and REV swap with unchanged parameters."""
        op = GammaOpData(GammaStyle.MONCURVE_FWD, [2.4, 0.055])
        inv = op.inverse()
        assert inv.style is GammaStyle.MONCURVE_REV
        assert inv.red_params == (2.4, 0.055)
        assert inv.alpha_params == op.alpha_params

    def test_inverse_of_inverse(self):
        """Test double inversion returns an equal op."""
        op = GammaOpData(GammaStyle.BASIC_FWD, red=[2.0], green=[2.2], blue=[2.4])
        assert op.inverse().inverse() == op

    def test_is_inverse(self):
        """Test pair detection requires the paired style and equal parameters."""
        fwd = GammaOpData(GammaStyle.BASIC_FWD, [2.2])
        assert fwd.is_inverse(GammaOpData(GammaStyle.BASIC_REV, [2.2]))
        assert not fwd.is_inverse(GammaOpData(GammaStyle.BASIC_REV, [2.4]))
        assert not fwd.is_inverse(GammaOpData(GammaStyle.BASIC_FWD, [2.2]))
        assert not fwd.is_inverse(GammaOpData(GammaStyle.MONCURVE_REV, [2.2, 0.0]))

    def test_is_inverse_compares_alpha(self):
        """Test alpha parameters must match too."""
        fwd = GammaOpData(GammaStyle.BASIC_FWD, [2.2], alpha=[1.5])
        rev = GammaOpData(GammaStyle.BASIC_REV, [2.2])
        assert not fwd.is_inverse(rev)


class TestGammaCompose:
    """Test composition of basic gammas."""

    def test_forward_product(self):
        """Test two forward exponents multiply."""
        result = GammaOpData(GammaStyle.BASIC_FWD, [2.0]).compose(
            GammaOpData(GammaStyle.BASIC_FWD, [3.0])
        )
        assert result.style is GammaStyle.BASIC_FWD
        assert result.red_params == (6.0,)
        assert result.is_alpha_component_identity()

    def test_product_below_one_flips_to_reverse(self):
        """Test a product below 1 is stored as a reverse exponent."""
        result = GammaOpData(GammaStyle.BASIC_FWD, [2.0]).compose(
            GammaOpData(GammaStyle.BASIC_REV, [4.0])
        )
        assert result.style is GammaStyle.BASIC_REV
        assert result.red_params == (2.0,)

    def test_two_reverse(self):
        """Test reverse exponents count as reciprocals."""
        result = GammaOpData(GammaStyle.BASIC_REV, [2.0]).compose(
            GammaOpData(GammaStyle.BASIC_REV, [2.0])
        )
        assert result.style is GammaStyle.BASIC_REV
        assert result.red_params == (4.0,)

    def test_cancelling_pair_gives_identity(self):
        """Test forward then reverse of the same exponent gives gamma 1."""
        result = GammaOpData(GammaStyle.BASIC_FWD, [2.2]).compose(
            GammaOpData(GammaStyle.BASIC_REV, [2.2])
        )
        assert result.is_identity()

    def test_snap_to_one(self):
        """Test products within 1e-6 of 1.0 snap to exactly 1.0."""
        result = GammaOpData(GammaStyle.BASIC_FWD, [1.0000001]).compose(
            GammaOpData(GammaStyle.BASIC_FWD, [1.0])
        )
        assert result.red_params == (1.0,)

    def test_may_compose_requires_uniform_channels(self):
        """Test per-channel gammas do not compose."""
        a = GammaOpData(GammaStyle.BASIC_FWD, [2.0], green=[2.2])
        b = GammaOpData(GammaStyle.BASIC_FWD, [2.0])
        assert not a.may_compose(b)
        assert not b.may_compose(a)

    def test_may_compose_requires_identity_alpha(self):
        """Test a non-identity alpha blocks composition."""
        a = GammaOpData(GammaStyle.BASIC_FWD, [2.0], alpha=[2.0])
        b = GammaOpData(GammaStyle.BASIC_FWD, [2.0])
        assert not a.may_compose(b)

    def test_moncurve_compose_raises(self):
        """Test moncurve styles cannot be composed."""
        a = GammaOpData(GammaStyle.MONCURVE_FWD, [2.4, 0.055])
        b = GammaOpData(GammaStyle.BASIC_FWD, [2.0])
        assert not a.may_compose(b)
        with pytest.raises(OpDataError, match="GammaOp can only be combined with some GammaOps"):
            a.compose(b)

    def test_compose_merges_metadata(self):
        """Test metadata of both ops is kept."""
        a = GammaOpData(GammaStyle.BASIC_FWD, [2.0])
        a.metadata.name = "first"
        b = GammaOpData(GammaStyle.BASIC_FWD, [2.0])
        b.metadata.name = "second"
        assert a.compose(b).metadata.name == "first + second"


class TestGammaCacheID:
    """Test cache ID behaviour."""

    def test_cache_id_tracks_parameters(self):
        """Test setters invalidate the cache ID."""
        op = GammaOpData(GammaStyle.BASIC_FWD, [2.2])
        first = op.cache_id
        assert op.is_finalized

        op.set_params([2.4])
        assert not op.is_finalized
        assert op.cache_id != first

    def test_equal_ops_share_cache_id(self):
        """Test equal content gives equal cache IDs."""
        a = GammaOpData(GammaStyle.MONCURVE_FWD, [2.4, 0.055])
        b = GammaOpData(GammaStyle.MONCURVE_FWD, [2.4, 0.055])
        assert a.cache_id == b.cache_id
