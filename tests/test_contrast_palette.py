"""
Unit tests for contrast ratios and contrast palettes.
"""

import pytest

from color_space import Color
from contrast_palette import ContrastLevel, ContrastPalette, contrast_ratio


BLACK = Color.from_rgb255(0, 0, 0)
WHITE = Color.from_rgb255(255, 255, 255)
GREEN = Color.from_rgb255(0, 255, 0)
BLUE = Color.from_rgb255(0, 0, 255)
DIM_BLUE = Color(0, 0, 0.8)


class TestContrastRatio:
    """Test WCAG contrast ratio"""

    def test_black_white(self):
        result = contrast_ratio(BLACK, WHITE)
        assert result.value == 21.0
        assert result.level is ContrastLevel.ACCEPTABLE

    def test_symmetric(self):
        assert contrast_ratio(WHITE, BLACK) == contrast_ratio(BLACK, WHITE)

    def test_green_blue(self):
        result = contrast_ratio(GREEN, BLUE)
        assert result.value == pytest.approx(6.27, abs=0.01)
        assert result.level is ContrastLevel.ACCEPTABLE

    def test_close_oranges(self):
        orange = Color.from_rgb255(255, 165, 0)
        darker = Color.from_rgb255(230, 126, 34)
        result = contrast_ratio(orange, darker)
        assert result.level is ContrastLevel.LOW
        assert not result.readable

    def test_large_text(self):
        gray = Color.from_rgb255(128, 128, 128)
        result = contrast_ratio(gray, WHITE)
        assert result.value == pytest.approx(3.95, abs=0.01)
        assert result.level is ContrastLevel.ACCEPTABLE_FOR_LARGE_TEXT

    def test_same_color(self):
        assert contrast_ratio(GREEN, GREEN).value == 1.0


class TestFromColors:
    """Test palettes from unordered colors"""

    def test_no_colors(self):
        assert ContrastPalette.from_colors([]) is None

    def test_one_color(self):
        assert ContrastPalette.from_colors([GREEN]) is None

    def test_same_colors(self):
        assert ContrastPalette.from_colors([GREEN, GREEN, GREEN, GREEN]) is None

    def test_black_white(self):
        palette = ContrastPalette.from_colors([BLACK, WHITE])
        assert palette.background == BLACK
        assert palette.primary == WHITE
        assert palette.secondary is None

    def test_black_white_bright(self):
        palette = ContrastPalette.from_colors([BLACK, WHITE], dark_background=False)
        assert palette.background == WHITE
        assert palette.primary == BLACK
        assert palette.secondary is None

    def test_close_colors(self):
        assert ContrastPalette.from_colors([BLUE, DIM_BLUE]) is None

    def test_ignoring_contrast(self):
        dark_blue = Color.from_rgb255(0, 120, 190)
        bright_blue = Color.from_rgb255(110, 178, 200)
        orange = Color.from_rgb255(203, 179, 121)
        palette = ContrastPalette.from_colors([dark_blue, bright_blue, orange], ignore_contrast_ratio=True)
        assert palette.background == dark_blue
        assert palette.primary == orange
        assert palette.secondary == bright_blue

    def test_light_background_with_secondary(self):
        red = Color.from_rgb255(255, 21, 13)
        dark_blue = Color.from_rgb255(76, 101, 122)
        palette = ContrastPalette.from_colors([red, dark_blue, WHITE], dark_background=False)
        assert palette.background == WHITE
        assert palette.primary == dark_blue
        assert palette.secondary == red

    def test_is_frozen(self):
        palette = ContrastPalette.from_colors([BLACK, WHITE])
        with pytest.raises(AttributeError):
            palette.primary = BLACK


class TestFromOrderedColors:
    """Test palettes from colors ordered by importance"""

    def test_no_colors(self):
        assert ContrastPalette.from_ordered_colors([]) is None

    def test_one_color(self):
        assert ContrastPalette.from_ordered_colors([GREEN]) is None

    def test_same_colors(self):
        assert ContrastPalette.from_ordered_colors([GREEN, GREEN, GREEN, GREEN]) is None

    def test_black_white(self):
        palette = ContrastPalette.from_ordered_colors([BLACK, WHITE])
        assert palette == ContrastPalette(BLACK, WHITE, None)

    def test_white_black_bright(self):
        palette = ContrastPalette.from_ordered_colors([WHITE, BLACK], dark_background=False)
        assert palette == ContrastPalette(WHITE, BLACK, None)

    def test_black_white_bright_takes_first(self):
        palette = ContrastPalette.from_ordered_colors([BLACK, WHITE], dark_background=False)
        assert palette == ContrastPalette(BLACK, WHITE, None)

    def test_close_colors(self):
        assert ContrastPalette.from_ordered_colors([BLUE, DIM_BLUE]) is None

    def test_no_dark_color(self):
        light = Color.from_rgb255(240, 240, 200)
        assert ContrastPalette.from_ordered_colors([WHITE, light]) is None

    def test_ignoring_contrast(self):
        dark_blue = Color.from_rgb255(0, 120, 190)
        bright_blue = Color.from_rgb255(110, 178, 200)
        orange = Color.from_rgb255(203, 179, 121)
        palette = ContrastPalette.from_ordered_colors([dark_blue, bright_blue, orange], ignore_contrast_ratio=True)
        assert palette == ContrastPalette(dark_blue, bright_blue, orange)

    def test_ignoring_contrast_takes_last_as_secondary(self):
        red = Color.from_rgb255(255, 0, 0)
        palette = ContrastPalette.from_ordered_colors([BLACK, red, GREEN, BLUE], ignore_contrast_ratio=True)
        assert palette == ContrastPalette(BLACK, red, BLUE)

    def test_ignoring_contrast_single_candidate(self):
        palette = ContrastPalette.from_ordered_colors([BLACK, BLUE, BLACK], ignore_contrast_ratio=True)
        assert palette == ContrastPalette(BLACK, BLUE, None)

    def test_first_readable_wins(self):
        red = Color.from_rgb255(255, 21, 13)
        dark_blue = Color.from_rgb255(76, 101, 122)
        palette = ContrastPalette.from_ordered_colors([red, dark_blue, WHITE], dark_background=False)
        assert palette == ContrastPalette(red, WHITE, None)

    def test_several_readable_have_no_secondary(self):
        palette = ContrastPalette.from_ordered_colors([BLACK, WHITE, GREEN])
        assert palette == ContrastPalette(BLACK, WHITE, None)
