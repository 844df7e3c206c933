"""Tests for the color pipeline."""
import itertools

import pytest

from cinelut.color import (
    Look,
    OETF_BREAKPOINT,
    apply_look,
    apply_teal_orange,
    apply_warm_vintage,
    log_to_linear,
    luminance,
    normalize_index,
    process_sample,
    rec2020_to_rec709,
    rec709_oetf,
    sample,
)
from cinelut.config import LUTConfig


UNIT_STEPS = [0.0, 0.25, 0.5, 0.75, 1.0]


class TestLogToLinear:
    """Tests for the log decode stage."""

    def test_decode_quarter(self):
        """Test 0.25 decodes to 0.125."""
        assert log_to_linear(0.25, 1.0) == pytest.approx(0.125)

    def test_decode_endpoints(self):
        """Test 0 and 1 are fixed points."""
        assert log_to_linear(0.0, 1.0) == 0.0
        assert log_to_linear(1.0, 1.0) == pytest.approx(1.0)

    def test_exposure_clips_at_one(self):
        """Test exposure-scaled input is clipped to 1 before decoding."""
        assert log_to_linear(0.8, 2.0) == 1.0
        assert log_to_linear(1.0, 5.0) == 1.0

    def test_exposure_scales_input(self):
        """Test exposure multiplies the input before decoding."""
        assert log_to_linear(0.125, 2.0) == pytest.approx(log_to_linear(0.25, 1.0))

    def test_monotonic(self):
        """Test decode is non-decreasing over [0, 1]."""
        values = [log_to_linear(i / 100, 1.0) for i in range(101)]
        assert values == sorted(values)

    def test_negative_input_raises(self):
        """Test a negative scaled input has no real decode."""
        with pytest.raises(ValueError):
            log_to_linear(-0.5, 1.0)


class TestGamutConversion:
    """Tests for the Rec.2020 to Rec.709 conversion."""

    def test_pure_red(self):
        """Test red row of the matrix with negative outputs clipped."""
        r, g, b = rec2020_to_rec709(0.5, 0.0, 0.0)
        assert r == pytest.approx(0.83)
        assert g == 0.0
        assert b == 0.0

    def test_mixed_input(self):
        """Test a mixed triple."""
        r, g, b = rec2020_to_rec709(0.6, 0.2, 0.0)
        assert r == pytest.approx(0.8786)
        assert g == pytest.approx(0.152)
        assert b == 0.0

    def test_clips_both_ends(self):
        """Test pure green clips red/blue to 0 and green to 1."""
        assert rec2020_to_rec709(0.0, 1.0, 0.0) == (0.0, 1.0, 0.0)

    def test_neutral_stays_neutral(self):
        """Test gray input maps to (nearly) the same gray."""
        r, g, b = rec2020_to_rec709(0.4, 0.4, 0.4)
        assert r == pytest.approx(0.4)
        assert g == pytest.approx(0.4)
        assert b == pytest.approx(0.4)

    def test_outputs_always_in_unit_range(self):
        """Test every output channel lies in [0, 1]."""
        for r, g, b in itertools.product(UNIT_STEPS, repeat=3):
            for value in rec2020_to_rec709(r, g, b):
                assert 0.0 <= value <= 1.0

    def test_clip_applied_after_full_matrix(self):
        """Test each channel uses the unclipped inputs of the others."""
        # Red overshoots, but green and blue are still computed from it.
        r, g, b = rec2020_to_rec709(1.0, 0.5, 0.0)
        assert r == 1.0
        assert g == pytest.approx(-0.124 + 1.132 * 0.5)
        assert b == 0.0


class TestRec709OETF:
    """Tests for the display transfer function."""

    def test_linear_segment(self):
        """Test values below the breakpoint are scaled by 4.5."""
        assert rec709_oetf(0.01) == pytest.approx(0.045)
        assert rec709_oetf(0.0) == 0.0

    def test_power_segment(self):
        """Test values at or above the breakpoint use the power curve."""
        assert rec709_oetf(1.0) == pytest.approx(1.0)
        assert rec709_oetf(0.5) == pytest.approx(1.099 * 0.5 ** 0.45 - 0.099)

    def test_breakpoint_uses_power_segment(self):
        """Test the breakpoint itself falls on the power curve."""
        assert rec709_oetf(OETF_BREAKPOINT) == pytest.approx(1.099 * 0.018 ** 0.45 - 0.099)

    def test_small_jump_at_breakpoint(self):
        """Test the two segments do not meet exactly at the breakpoint."""
        at = rec709_oetf(OETF_BREAKPOINT)
        below = rec709_oetf(OETF_BREAKPOINT - 1e-12)
        assert 0.0 < at - below < 1e-3

    def test_no_clipping(self):
        """Test out-of-range input passes through the curve unclipped."""
        assert rec709_oetf(-0.1) == pytest.approx(-0.45)
        assert rec709_oetf(2.0) > 1.0


class TestLooks:
    """Tests for the creative looks."""

    def test_luminance_weights(self):
        """Test Rec.709 luma of white is 1."""
        assert luminance(1.0, 1.0, 1.0) == pytest.approx(1.0)
        assert luminance(1.0, 0.0, 0.0) == pytest.approx(0.2126)

    def test_teal_orange_shadows(self):
        """Test dark samples lose red and gain blue."""
        r, g, b = apply_teal_orange(0.2, 0.2, 0.2)
        assert r == pytest.approx(0.197)
        assert g == pytest.approx(0.2)
        assert b == pytest.approx(0.206)

    def test_teal_orange_highlights(self):
        """Test bright samples gain red and lose blue."""
        r, g, b = apply_teal_orange(0.8, 0.8, 0.8)
        assert r == pytest.approx(0.824)
        assert g == pytest.approx(0.8)
        assert b == pytest.approx(0.788)

    def test_teal_orange_upper_clamp_only(self):
        """Test teal/orange clamps at 1 but not at 0."""
        assert apply_teal_orange(1.2, 1.2, 1.2) == (1.0, 1.0, 1.0)
        r, _, _ = apply_teal_orange(-0.5, 0.0, 0.0)
        assert r == pytest.approx(-0.4925)

    def test_warm_vintage_mid_gray(self):
        """Test warm vintage tints mid-gray warm."""
        r, g, b = apply_warm_vintage(0.5, 0.5, 0.5)
        assert r == pytest.approx(0.5225)
        assert g == pytest.approx(0.5)
        assert b == pytest.approx(0.4775)

    def test_warm_vintage_lifts_black(self):
        """Test black is faded toward mid-gray."""
        r, g, b = apply_warm_vintage(0.0, 0.0, 0.0)
        assert (r, g, b) == pytest.approx((0.05, 0.05, 0.05))

    def test_warm_vintage_upper_clamp_only(self):
        """Test warm vintage clamps at 1 but not at 0."""
        assert apply_warm_vintage(1.2, 1.2, 1.2) == (1.0, 1.0, 1.0)
        r, g, b = apply_warm_vintage(-1.0, 0.0, 0.0)
        assert r == pytest.approx(-0.895)
        assert g == pytest.approx(0.05)

    @pytest.mark.parametrize("grade", [apply_teal_orange, apply_warm_vintage])
    def test_grades_never_exceed_one(self, grade):
        """Test graded channels stay at or below 1 for unit-cube input."""
        for r, g, b in itertools.product(UNIT_STEPS, repeat=3):
            for value in grade(r, g, b):
                assert value <= 1.0

    def test_apply_look_none_passes_through(self):
        """Test Look.NONE leaves the triple untouched."""
        assert apply_look(Look.NONE, 0.3, 0.6, 0.9) == (0.3, 0.6, 0.9)

    def test_apply_look_dispatch(self):
        """Test apply_look routes to the named grade."""
        assert apply_look(Look.WARM_VINTAGE, 0.5, 0.5, 0.5) == apply_warm_vintage(0.5, 0.5, 0.5)
        assert apply_look(Look.TEAL_ORANGE, 0.8, 0.8, 0.8) == apply_teal_orange(0.8, 0.8, 0.8)


class TestLookNames:
    """Tests for look name resolution."""

    @pytest.mark.parametrize("name,expected", [
        ("tealorange", Look.TEAL_ORANGE),
        ("TealOrange", Look.TEAL_ORANGE),
        ("TEALORANGE", Look.TEAL_ORANGE),
        ("warmVintage", Look.WARM_VINTAGE),
        ("none", Look.NONE),
        ("None", Look.NONE),
    ])
    def test_case_insensitive(self, name, expected):
        """Test look names match regardless of case."""
        assert Look.from_name(name) is expected

    @pytest.mark.parametrize("name", ["sepia", "teal_orange", "", None])
    def test_unknown_names_resolve_to_none(self, name):
        """Test unrecognized names behave as no look."""
        assert Look.from_name(name) is Look.NONE


class TestPipeline:
    """Tests for the full per-sample pipeline."""

    def test_normalize_index(self):
        """Test grid indices map onto [0, 1]."""
        assert normalize_index(0, 17) == 0.0
        assert normalize_index(8, 17) == 0.5
        assert normalize_index(16, 17) == 1.0

    def test_black_and_white(self):
        """Test black and white survive the pipeline."""
        assert process_sample(0.0, 0.0, 0.0) == (0.0, 0.0, 0.0)
        assert process_sample(1.0, 1.0, 1.0) == pytest.approx((1.0, 1.0, 1.0))

    def test_gray_stays_neutral(self):
        """Test gray input produces a neutral output."""
        r, g, b = process_sample(0.5, 0.5, 0.5)
        assert g == pytest.approx(r)
        assert b == pytest.approx(r)

    def test_exposure_offset(self):
        """Test exposure pushes mid-gray to white."""
        assert process_sample(0.5, 0.5, 0.5, exposure_offset=2.0) == pytest.approx((1.0, 1.0, 1.0))

    def test_look_by_name(self):
        """Test a look can be given by name."""
        assert process_sample(0.5, 0.5, 0.5, look="WarmVintage") == \
            process_sample(0.5, 0.5, 0.5, look=Look.WARM_VINTAGE)

    def test_unknown_look_is_identity_grade(self):
        """Test an unknown look name matches no look."""
        assert process_sample(0.3, 0.6, 0.9, look="sepia") == process_sample(0.3, 0.6, 0.9)

    def test_samples_in_display_range(self):
        """Test outputs without a look stay within [0, 1]."""
        for r, g, b in itertools.product(UNIT_STEPS, repeat=3):
            for value in process_sample(r, g, b):
                assert -1e-12 <= value <= 1.0 + 1e-12

    def test_sample_from_config(self):
        """Test grid sampling uses the config size, exposure and look."""
        config = LUTConfig(size=3, look="warmvintage", exposure_offset=1.5)
        assert sample((1, 2, 0), config) == process_sample(
            0.5, 1.0, 0.0, exposure_offset=1.5, look=Look.WARM_VINTAGE
        )
