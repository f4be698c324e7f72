"""
Extraction results shared by every extractor.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from color_shade import ColorShade, shade_of
from color_space import Color, round_half_away, round_up


PERCENT_PRECISION = 2
FACTOR_PRECISION = 2

# Normalcy peaks
NORMAL_LIGHTNESS = 50.0
NORMAL_SATURATION = 75.0


class Sort(Enum):
    DARKNESS = 'darkness'  # ascending relative luminance
    LIGHTNESS = 'lightness'  # descending relative luminance
    FREQUENCY = 'frequency'  # descending frequency


class Option(Enum):
    EXCLUDE_BLACK = 'exclude-black'
    EXCLUDE_WHITE = 'exclude-white'
    EXCLUDE_GRAY = 'exclude-gray'

    @property
    def shade(self) -> ColorShade:
        return _EXCLUDED_SHADES[self]


_EXCLUDED_SHADES = {
    Option.EXCLUDE_BLACK: ColorShade.BLACK,
    Option.EXCLUDE_WHITE: ColorShade.WHITE,
    Option.EXCLUDE_GRAY: ColorShade.GRAY,
}


def excluded_shades(options: Iterable[Option]) -> frozenset:
    return frozenset(option.shade for option in options)


def _peak_factor(value: float, peak: float) -> float:
    """1 at `peak`, falling linearly to 0 at 0 and at 100."""
    if value <= peak:
        factor = value / peak
    else:
        factor = (100.0 - value) / (100.0 - peak)
    return round_half_away(max(0.0, factor), FACTOR_PRECISION)


def normalcy(color: Color, frequency: float) -> float:
    """
    How representative a color is: its frequency scaled down for extreme
    lightness (glare, shadow) and extreme saturation.
    """
    _, saturation, lightness = color.hsl
    return (
        frequency
        * _peak_factor(lightness, NORMAL_LIGHTNESS)
        * _peak_factor(saturation, NORMAL_SATURATION)
    )


@dataclass
class ColorFrequency:
    """A color and how often it occurs: a pixel count during extraction, a share of 1 after."""
    color: Color
    frequency: float

    @property
    def shade(self) -> ColorShade:
        return shade_of(self.color)

    @property
    def normal(self) -> float:
        return normalcy(self.color, self.frequency)


def sort_frequencies(colors: list[ColorFrequency], sorting: Sort) -> list[ColorFrequency]:
    """Stable sort by the requested mode."""
    if sorting is Sort.DARKNESS:
        return sorted(colors, key=lambda cf: cf.color.relative_luminance)
    if sorting is Sort.LIGHTNESS:
        return sorted(colors, key=lambda cf: cf.color.relative_luminance, reverse=True)
    return sorted(colors, key=lambda cf: cf.frequency, reverse=True)


def to_percentages(colors: list[ColorFrequency]) -> list[ColorFrequency]:
    """Replace counts with shares of the total, rounded up to 1/100."""
    total = sum(cf.frequency for cf in colors)
    if total <= 0:
        return []
    return [
        ColorFrequency(cf.color, round_up(cf.frequency / total, PERCENT_PRECISION))
        for cf in colors
    ]
