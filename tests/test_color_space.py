"""
Unit tests for color model conversions.

Covers HSL, XYZ, LAB, relative luminance, the hex codec and derived colors.
"""

import numpy as np
import pytest

from color_space import (
    Color, complementary, gradient_color, gradient_colors, hsl_to_color, lab_to_rgb,
    parse_hex, rgb_to_hsl, rgb_to_lab, round_half_away, round_up,
)
from palette_errors import ColorFormatError, ConfigurationError


RED = Color.from_rgb255(255, 0, 0)
GREEN = Color.from_rgb255(0, 255, 0)
BLUE = Color.from_rgb255(0, 0, 255)
BLACK = Color.from_rgb255(0, 0, 0)
WHITE = Color.from_rgb255(255, 255, 255)


class TestRounding:
    """Test rounding helpers"""

    def test_half_away_from_zero(self):
        assert round_half_away(2.5, 0) == 3
        assert round_half_away(-2.5, 0) == -3
        assert round_half_away(0.125, 2) == pytest.approx(0.13)

    def test_round_up(self):
        assert round_up(1 / 3, 2) == 0.34
        assert round_up(0.5, 2) == 0.5
        assert round_up(0.29, 2) == 0.29
        assert round_up(1.0, 2) == 1.0


class TestColor:
    """Test the Color value type"""

    def test_channels_must_be_normalized(self):
        with pytest.raises(ColorFormatError):
            Color(1.2, 0, 0)
        with pytest.raises(ValueError):
            Color(0, -0.1, 0)

    def test_rgb255_round_trip(self):
        assert Color.from_rgb255(12, 200, 255).rgb255 == (12, 200, 255)

    def test_equal_colors_hash_equal(self):
        assert Color.from_rgb255(1, 2, 3) == Color.from_rgb255(1, 2, 3)
        assert len({Color.from_rgb255(1, 2, 3), Color.from_rgb255(1, 2, 3)}) == 1

    def test_str_is_hex(self):
        assert str(RED) == '#ff0000'


class TestHSL:
    """Test RGB to HSL conversion"""

    @pytest.mark.parametrize('rgb, expected', [
        ((255, 0, 0), (0, 100, 50)),
        ((0, 255, 0), (120, 100, 50)),
        ((0, 0, 255), (240, 100, 50)),
        ((255, 255, 255), (0, 0, 100)),
        ((0, 0, 0), (0, 0, 0)),
    ])
    def test_primary_and_achromatic(self, rgb, expected):
        assert tuple(rgb_to_hsl(*rgb)) == pytest.approx(expected)

    def test_gray_has_no_saturation(self):
        hue, saturation, lightness = rgb_to_hsl(128, 128, 128)
        assert hue == 0
        assert saturation == 0
        assert lightness == pytest.approx(50.2)

    def test_hue_stays_below_360(self):
        hue, _, _ = rgb_to_hsl(255, 0, 1)
        assert 0 <= hue < 360

    def test_hsl_to_color_inverts(self):
        for color in (RED, GREEN, BLUE, Color.from_rgb255(90, 140, 30)):
            back = hsl_to_color(*color.hsl)
            assert np.allclose(back.rgb255, color.rgb255, atol=1)


class TestLab:
    """Test XYZ and LAB conversion"""

    def test_white_is_reference(self):
        assert tuple(WHITE.xyz) == pytest.approx((95.047, 100.0, 108.883), abs=1e-3)
        assert tuple(WHITE.lab) == pytest.approx((100.0, 0.0, 0.0), abs=1e-3)

    def test_black_is_origin(self):
        assert tuple(BLACK.lab) == pytest.approx((0.0, 0.0, 0.0), abs=1e-3)

    def test_red_reference_values(self):
        assert tuple(RED.lab) == pytest.approx((53.24, 80.09, 67.20), abs=0.05)

    def test_vectorized_matches_scalar(self):
        rgb = np.array([[255, 0, 0], [0, 255, 0], [31, 78, 121]], dtype=np.uint8)
        lab = rgb_to_lab(rgb)
        for row, values in zip(rgb, lab):
            expected = Color.from_rgb255(*(int(c) for c in row)).lab
            assert tuple(values) == pytest.approx(tuple(expected), abs=1e-3)

    def test_vectorized_round_trip(self):
        rgb = np.array([[255, 0, 0], [0, 255, 0], [211, 181, 143], [10, 42, 67]], dtype=np.uint8)
        back = lab_to_rgb(rgb_to_lab(rgb))
        assert np.abs(back.astype(int) - rgb.astype(int)).max() <= 1


class TestLuminance:
    """Test WCAG relative luminance"""

    def test_extremes(self):
        assert BLACK.relative_luminance == 0
        assert WHITE.relative_luminance == 1.0

    def test_channel_weights(self):
        assert RED.relative_luminance == pytest.approx(0.213)
        assert GREEN.relative_luminance == pytest.approx(0.715)
        assert BLUE.relative_luminance == pytest.approx(0.072)


class TestHex:
    """Test hex parsing and formatting"""

    def test_six_digits(self):
        assert parse_hex('#FF8000') == (255, 128, 0, 255)
        assert Color.from_hex('ff8000').rgb255 == (255, 128, 0)

    def test_three_digits_replicate(self):
        assert parse_hex('#abc') == (0xAA, 0xBB, 0xCC, 255)

    def test_eight_digits_carry_alpha(self):
        assert parse_hex('0x11223344') == (0x11, 0x22, 0x33, 0x44)

    @pytest.mark.parametrize('value', ['', '#12', '#12345', 'zzzzzz', '#1234567'])
    def test_invalid(self, value):
        with pytest.raises(ColorFormatError):
            parse_hex(value)

    def test_format_is_lowercase_without_alpha(self):
        assert Color.from_rgb255(255, 0, 16, 128).hex == '#ff0010'


class TestDerivedColors:
    """Test complementary and gradient colors"""

    def test_complementary(self):
        assert complementary(RED).rgb255 == (0, 255, 255)
        assert complementary(WHITE) == BLACK

    def test_gradient_endpoints(self):
        assert gradient_color([BLACK, WHITE], 0) == BLACK
        assert gradient_color([BLACK, WHITE], 100) == WHITE

    def test_gradient_midpoint(self):
        middle = gradient_color([BLACK, WHITE], 50)
        assert middle.red == pytest.approx(0.5)
        assert middle.green == pytest.approx(0.5)

    def test_gradient_colors_spacing(self):
        colors = gradient_colors([RED, GREEN, BLUE], 5)
        assert len(colors) == 5
        assert colors[0] == RED
        assert colors[2] == GREEN
        assert colors[4] == BLUE

    def test_gradient_requires_colors(self):
        with pytest.raises(ConfigurationError):
            gradient_color([], 50)
        with pytest.raises(ConfigurationError):
            gradient_colors([RED], 0)
