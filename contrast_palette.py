"""
Readable color palettes: a background, a primary and an optional secondary
color picked from extracted colors by WCAG contrast ratio.

https://www.w3.org/TR/WCAG21/#contrast-minimum
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from color_difference import DeltaFormula, Severity, compare
from color_space import Color, round_half_away


CONTRAST_PRECISION = 2

# WCAG AA thresholds
ACCEPTABLE_RATIO = 4.5
LARGE_TEXT_RATIO = 3.0

# Backgrounds darker than this count as dark
DARK_LUMINANCE = 0.5

PALETTE_FORMULA = DeltaFormula.CIE94


class ContrastLevel(Enum):
    ACCEPTABLE = 'acceptable'
    ACCEPTABLE_FOR_LARGE_TEXT = 'acceptable-for-large-text'
    LOW = 'low'


@dataclass(frozen=True)
class ContrastRatioResult:
    value: float
    level: ContrastLevel

    @property
    def readable(self) -> bool:
        return self.level is not ContrastLevel.LOW


def contrast_ratio(lhs: Color, rhs: Color) -> ContrastRatioResult:
    """WCAG contrast ratio between two colors, from 1 to 21."""
    l1 = lhs.relative_luminance
    l2 = rhs.relative_luminance
    lighter, darker = max(l1, l2), min(l1, l2)
    value = round_half_away((lighter + 0.05) / (darker + 0.05), CONTRAST_PRECISION)

    if value >= ACCEPTABLE_RATIO:
        level = ContrastLevel.ACCEPTABLE
    elif value >= LARGE_TEXT_RATIO:
        level = ContrastLevel.ACCEPTABLE_FOR_LARGE_TEXT
    else:
        level = ContrastLevel.LOW
    return ContrastRatioResult(value, level)


def _distinct(colors: Sequence[Color]) -> list[Color]:
    return list(dict.fromkeys(colors))


@dataclass(frozen=True)
class ContrastPalette:
    background: Color
    primary: Color
    secondary: Optional[Color] = None

    @classmethod
    def from_colors(cls, colors: Sequence[Color], dark_background: bool = True,
                    ignore_contrast_ratio: bool = False) -> Optional['ContrastPalette']:
        """
        Build a palette from colors in any order.

        The darkest and brightest colors form the background and primary pair.
        The secondary is the first color that is readable on the background
        (unless contrast is ignored), clearly different from the background
        and at least near to the primary.

        Returns:
            ContrastPalette, or None if fewer than two distinct colors are
            given or the darkest and brightest colors don't contrast enough
        """
        if len(_distinct(colors)) < 2:
            return None

        darkest = min(colors, key=lambda c: c.relative_luminance)
        brightest = max(colors, key=lambda c: c.relative_luminance)
        if darkest.relative_luminance == brightest.relative_luminance:
            return None
        if not ignore_contrast_ratio and not contrast_ratio(darkest, brightest).readable:
            return None

        background = darkest if dark_background else brightest
        primary = brightest if dark_background else darkest

        secondary = None
        for color in colors:
            if not ignore_contrast_ratio and not contrast_ratio(color, background).readable:
                continue
            from_background = compare(color, background, PALETTE_FORMULA).severity
            from_primary = compare(color, primary, PALETTE_FORMULA).severity
            if (from_background in (Severity.DIFFERENT, Severity.FAR)
                    and from_primary in (Severity.NEAR, Severity.DIFFERENT, Severity.FAR)):
                secondary = color
                break

        return cls(background, primary, secondary)

    @classmethod
    def from_ordered_colors(cls, colors: Sequence[Color], dark_background: bool = True,
                            ignore_contrast_ratio: bool = False) -> Optional['ContrastPalette']:
        """
        Build a palette from colors ordered by importance, most important first.

        The background is the first dark color (or simply the first color when
        a dark background isn't required). The primary is the first following
        color readable on it. When more than one color is readable there is
        no secondary. With contrast ignored, the first non-background color
        is the primary and the last one the secondary.

        Returns:
            ContrastPalette, or None if no background or primary qualifies
        """
        if len(_distinct(colors)) < 2:
            return None

        if dark_background:
            background = next((c for c in colors if c.relative_luminance < DARK_LUMINANCE), None)
            if background is None:
                return None
        else:
            background = colors[0]

        candidates = [c for c in colors if c != background]
        if ignore_contrast_ratio:
            primary = candidates[0] if candidates else None
            secondary = candidates[-1] if len(candidates) > 1 else None
        else:
            readable = [c for c in candidates if contrast_ratio(background, c).readable]
            primary = readable[0] if readable else None
            secondary = None

        if primary is None:
            return None
        return cls(background, primary, secondary)
