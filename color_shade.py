"""
Classification of colors into named shades.

A shade is decided from HSL coordinates by a fixed rule table. Order matters:
lightness checks (white, black, dark), then the gray check, then brown and
pink (which overlap the red/orange hue range), then the hue wheel. Each hue
segment demotes to `dark` or `bright` inside its own saturation/lightness
sub-ranges.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from color_space import Color


class ColorShade(Enum):
    # by lightness
    WHITE = 'white'
    BLACK = 'black'
    DARK = 'dark'
    BRIGHT = 'bright'
    # by saturation
    GRAY = 'gray'
    # by hue
    RED = 'red'
    RED_ORANGE = 'red-orange'
    ORANGE = 'orange'
    YELLOW_ORANGE = 'yellow-orange'
    YELLOW = 'yellow'
    YELLOW_GREEN = 'yellow-green'
    GREEN = 'green'
    BLUE_GREEN = 'blue-green'
    BLUE = 'blue'
    BLUE_VIOLET = 'blue-violet'
    VIOLET = 'violet'
    RED_VIOLET = 'red-violet'
    # by hue, saturation and lightness
    BROWN = 'brown'
    PINK = 'pink'

    UNKNOWN = 'unknown'

    @property
    def super_shade(self) -> 'ColorShade':
        return _SUPER_SHADES.get(self, self)

    @property
    def title(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


_SUPER_SHADES = {
    ColorShade.RED_ORANGE: ColorShade.RED,
    ColorShade.YELLOW_ORANGE: ColorShade.ORANGE,
    ColorShade.YELLOW_GREEN: ColorShade.GREEN,
    ColorShade.BLUE_GREEN: ColorShade.GREEN,
    ColorShade.BLUE_VIOLET: ColorShade.VIOLET,
    ColorShade.RED_VIOLET: ColorShade.VIOLET,
}


@dataclass(frozen=True)
class Span:
    """A numeric range, closed [low, high] or half-open [low, high)."""
    low: float
    high: float
    closed: bool = True

    def __contains__(self, value: float) -> bool:
        if self.closed:
            return self.low <= value <= self.high
        return self.low <= value < self.high


def closed(low: float, high: float) -> Span:
    return Span(low, high, closed=True)


def half_open(low: float, high: float) -> Span:
    return Span(low, high, closed=False)


@dataclass(frozen=True)
class HueSegment:
    shade: ColorShade
    hues: tuple  # of Span
    dark_saturation: Span
    dark_lightness: Span
    bright_saturation: Span
    bright_lightness: Span


@dataclass(frozen=True)
class CompoundRule:
    shade: ColorShade
    hues: tuple  # of Span
    saturation: Span
    lightness: Span

    def matches(self, hue: float, saturation: float, lightness: float) -> bool:
        return (
            any(hue in span for span in self.hues)
            and saturation in self.saturation
            and lightness in self.lightness
        )


# =============================================================================
# Rule table
# =============================================================================

LIGHTNESS_RULES = (
    (ColorShade.WHITE, closed(90, 100)),
    (ColorShade.BLACK, closed(0, 10)),
    (ColorShade.DARK, closed(0, 20)),
)

GRAY_SATURATION = closed(0, 15)

COMPOUND_RULES = (
    CompoundRule(ColorShade.BROWN, (half_open(0, 40),), half_open(10, 100), half_open(10, 75)),
    CompoundRule(ColorShade.PINK, (closed(0, 15), closed(320, 360)), closed(10, 100), half_open(60, 80)),
)

#  shade, hue spans, dark S, dark L, bright S, bright L
HUE_SEGMENTS = (
    HueSegment(ColorShade.RED, (half_open(0, 11), closed(340, 360)),
               closed(0, 25), closed(0, 30), closed(0, 100), closed(80, 100)),
    HueSegment(ColorShade.RED_ORANGE, (half_open(11, 20),),
               closed(0, 25), closed(0, 30), closed(0, 100), closed(80, 100)),
    HueSegment(ColorShade.ORANGE, (half_open(20, 35),),
               closed(0, 25), closed(0, 30), closed(0, 100), closed(75, 100)),
    HueSegment(ColorShade.YELLOW_ORANGE, (half_open(35, 50),),
               closed(0, 35), closed(0, 30), closed(0, 35), closed(80, 100)),
    HueSegment(ColorShade.YELLOW, (half_open(50, 70),),
               closed(0, 20), closed(0, 25), closed(0, 35), closed(75, 100)),
    HueSegment(ColorShade.YELLOW_GREEN, (half_open(70, 90),),
               closed(0, 20), closed(0, 25), closed(0, 35), closed(75, 100)),
    HueSegment(ColorShade.GREEN, (half_open(90, 160),),
               closed(0, 15), closed(0, 20), closed(0, 35), closed(75, 100)),
    HueSegment(ColorShade.BLUE_GREEN, (half_open(160, 190),),
               closed(0, 20), closed(0, 20), closed(0, 30), closed(80, 100)),
    HueSegment(ColorShade.BLUE, (half_open(190, 251),),
               closed(0, 30), closed(0, 20), closed(0, 30), closed(75, 100)),
    HueSegment(ColorShade.BLUE_VIOLET, (half_open(251, 260),),
               closed(0, 30), closed(0, 20), closed(0, 30), closed(80, 100)),
    HueSegment(ColorShade.VIOLET, (half_open(260, 300),),
               closed(0, 25), closed(0, 20), closed(0, 30), closed(80, 100)),
    HueSegment(ColorShade.RED_VIOLET, (half_open(300, 340),),
               closed(0, 25), closed(0, 20), closed(0, 30), closed(80, 100)),
)


# =============================================================================
# Classification
# =============================================================================

def find_segment(hue: float) -> Optional[HueSegment]:
    for segment in HUE_SEGMENTS:
        if any(hue in span for span in segment.hues):
            return segment
    return None


def classify(hue: float, saturation: float, lightness: float) -> ColorShade:
    """Map HSL coordinates (degrees, percent, percent) to a shade."""
    for shade, span in LIGHTNESS_RULES:
        if lightness in span:
            return shade

    if saturation in GRAY_SATURATION:
        return ColorShade.GRAY

    for rule in COMPOUND_RULES:
        if rule.matches(hue, saturation, lightness):
            return rule.shade

    segment = find_segment(hue)
    if segment is None:
        return ColorShade.UNKNOWN
    if lightness in segment.dark_lightness and saturation in segment.dark_saturation:
        return ColorShade.DARK
    if lightness in segment.bright_lightness and saturation in segment.bright_saturation:
        return ColorShade.BRIGHT
    return segment.shade


def shade_of(color: Color) -> ColorShade:
    hue, saturation, lightness = color.hsl
    return classify(hue, saturation, lightness)
