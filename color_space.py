"""
Color model and color-space conversions.

Colors are sRGB with channels in [0, 1]. HSL, CIEXYZ, CIELAB and relative
luminance are derived on demand and rounded to a fixed precision so that
threshold comparisons downstream are reproducible.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence

import numpy as np

from palette_errors import ColorFormatError, ConfigurationError


# =============================================================================
# Constants
# =============================================================================

# D65 reference white, XYZ scaled to [0, 100]
REFERENCE_X = 95.047
REFERENCE_Y = 100.0
REFERENCE_Z = 108.883

LAB_EPSILON = (6 / 29) ** 3
LAB_KAPPA = (29 / 3) ** 3

HSL_PRECISION = 2
XYZ_PRECISION = 4
LAB_PRECISION = 4
LUMINANCE_PRECISION = 3


def round_half_away(value: float, digits: int) -> float:
    """Round to `digits` decimals, ties away from zero."""
    scale = 10 ** digits
    return math.copysign(math.floor(abs(value) * scale + 0.5) / scale, value)


def round_up(value: float, digits: int) -> float:
    """Round towards +inf at `digits` decimals, ignoring float noise below 1e-9."""
    scale = 10 ** digits
    return math.ceil(round(value * scale, 9)) / scale


class HSL(NamedTuple):
    hue: float  # degrees, [0, 360)
    saturation: float  # percent
    lightness: float  # percent


class XYZ(NamedTuple):
    X: float
    Y: float
    Z: float


class Lab(NamedTuple):
    L: float
    a: float
    b: float


# =============================================================================
# Color
# =============================================================================

@dataclass(frozen=True)
class Color:
    """An sRGB color with straight (non-premultiplied) alpha."""
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def __post_init__(self):
        for name in ('red', 'green', 'blue', 'alpha'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ColorFormatError(f"{name} channel {value!r} is outside [0, 1]")

    @classmethod
    def from_rgb255(cls, red: int, green: int, blue: int, alpha: int = 255) -> 'Color':
        return cls(red / 255.0, green / 255.0, blue / 255.0, alpha / 255.0)

    @classmethod
    def from_hex(cls, value: str) -> 'Color':
        return cls.from_rgb255(*parse_hex(value))

    @property
    def rgb255(self) -> tuple[int, int, int]:
        return (
            int(round_half_away(self.red * 255, 0)),
            int(round_half_away(self.green * 255, 0)),
            int(round_half_away(self.blue * 255, 0)),
        )

    @property
    def hex(self) -> str:
        r, g, b = self.rgb255
        return f"#{r:02x}{g:02x}{b:02x}"

    @property
    def hsl(self) -> HSL:
        return rgb_to_hsl(*self.rgb255)

    @property
    def xyz(self) -> XYZ:
        return rgb_to_xyz(self.red, self.green, self.blue)

    @property
    def lab(self) -> Lab:
        return xyz_to_lab(self.xyz)

    @property
    def relative_luminance(self) -> float:
        return relative_luminance(self)

    def __str__(self) -> str:
        return self.hex


# =============================================================================
# HSL
# =============================================================================

def rgb_to_hsl(red: int, green: int, blue: int) -> HSL:
    """Convert 0-255 RGB channels to HSL (hue in degrees, S and L in percent)."""
    r, g, b = float(red), float(green), float(blue)
    max_c = max(r, g, b)
    min_c = min(r, g, b)

    lightness = (max_c + min_c) / 2 / 255.0
    delta = (max_c - min_c) / 255.0

    if lightness in (0.0, 1.0) or delta == 0:
        saturation = 0.0
    else:
        saturation = delta / (1 - abs(2 * lightness - 1))

    if delta == 0:
        hue = 0.0
    elif max_c == r:
        hue = (g - b) / (delta * 255)
        if hue < 0:
            hue += 6
    elif max_c == g:
        hue = (b - r) / (delta * 255) + 2
    else:
        hue = (r - g) / (delta * 255) + 4

    hue = round_half_away(hue * 60, HSL_PRECISION) % 360
    return HSL(
        hue=hue,
        saturation=round_half_away(saturation * 100, HSL_PRECISION),
        lightness=round_half_away(lightness * 100, HSL_PRECISION),
    )


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_color(hue: float, saturation: float, lightness: float) -> Color:
    """Convert HSL (degrees, percent, percent) back to an opaque Color."""
    l = lightness / 100
    if saturation == 0:
        return Color(l, l, l)

    h = (hue % 360) / 360
    s = saturation / 100
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    channels = [_hue_to_channel(p, q, h + 1 / 3), _hue_to_channel(p, q, h), _hue_to_channel(p, q, h - 1 / 3)]
    return Color(*(min(1.0, max(0.0, c)) for c in channels))


# =============================================================================
# CIEXYZ / CIELAB
# =============================================================================

def _expand_gamma(value: float) -> float:
    if value > 0.04045:
        return ((value + 0.055) / 1.055) ** 2.4
    return value / 12.92


def rgb_to_xyz(red: float, green: float, blue: float) -> XYZ:
    """Convert normalized sRGB to CIEXYZ scaled to [0, 100]."""
    r = _expand_gamma(red) * 100.0
    g = _expand_gamma(green) * 100.0
    b = _expand_gamma(blue) * 100.0

    x = r * 0.4124564 + g * 0.3575761 + b * 0.1804375
    y = r * 0.2126729 + g * 0.7151522 + b * 0.0721750
    z = r * 0.0193339 + g * 0.1191920 + b * 0.9503041

    return XYZ(
        round_half_away(x, XYZ_PRECISION),
        round_half_away(y, XYZ_PRECISION),
        round_half_away(z, XYZ_PRECISION),
    )


def _lab_f(t: float) -> float:
    if t > LAB_EPSILON:
        return t ** (1 / 3)
    return (LAB_KAPPA * t + 16) / 116


def xyz_to_lab(xyz: XYZ) -> Lab:
    """Convert CIEXYZ (D65, [0, 100]) to CIELAB."""
    fx = _lab_f(xyz.X / REFERENCE_X)
    fy = _lab_f(xyz.Y / REFERENCE_Y)
    fz = _lab_f(xyz.Z / REFERENCE_Z)

    return Lab(
        round_half_away(116.0 * fy - 16.0, LAB_PRECISION),
        round_half_away(500.0 * (fx - fy), LAB_PRECISION),
        round_half_away(200.0 * (fy - fz), LAB_PRECISION),
    )


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB array (0-255) to LAB color space."""
    rgb_norm = rgb.astype(np.float64) / 255.0

    # Apply gamma correction
    mask = rgb_norm > 0.04045
    rgb_linear = np.where(mask, ((rgb_norm + 0.055) / 1.055) ** 2.4, rgb_norm / 12.92)

    r, g, b = rgb_linear[:, 0], rgb_linear[:, 1], rgb_linear[:, 2]
    x = r * 0.4124564 + g * 0.3575761 + b * 0.1804375
    y = r * 0.2126729 + g * 0.7151522 + b * 0.0721750
    z = r * 0.0193339 + g * 0.1191920 + b * 0.9503041

    x = x * 100 / REFERENCE_X
    y = y * 100 / REFERENCE_Y
    z = z * 100 / REFERENCE_Z

    fx = np.where(x > LAB_EPSILON, np.cbrt(x), (LAB_KAPPA * x + 16) / 116)
    fy = np.where(y > LAB_EPSILON, np.cbrt(y), (LAB_KAPPA * y + 16) / 116)
    fz = np.where(z > LAB_EPSILON, np.cbrt(z), (LAB_KAPPA * z + 16) / 116)

    return np.column_stack([116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)])


def lab_to_rgb(lab: np.ndarray) -> np.ndarray:
    """Convert LAB array to RGB (0-255)."""
    if lab.ndim == 1:
        lab = lab.reshape(1, -1)

    L, a, b = lab[:, 0], lab[:, 1], lab[:, 2]

    fy = (L + 16) / 116
    fx = a / 500 + fy
    fz = fy - b / 200

    x = np.where(fx ** 3 > LAB_EPSILON, fx ** 3, (116 * fx - 16) / LAB_KAPPA)
    y = np.where(L > LAB_KAPPA * LAB_EPSILON, ((L + 16) / 116) ** 3, L / LAB_KAPPA)
    z = np.where(fz ** 3 > LAB_EPSILON, fz ** 3, (116 * fz - 16) / LAB_KAPPA)

    x = x * REFERENCE_X / 100
    z = z * REFERENCE_Z / 100

    r = x * 3.2404542 - y * 1.5371385 - z * 0.4985314
    g = -x * 0.9692660 + y * 1.8760108 + z * 0.0415560
    b_out = x * 0.0556434 - y * 0.2040259 + z * 1.0572252

    rgb_linear = np.column_stack([r, g, b_out])
    mask = rgb_linear > 0.0031308
    rgb = np.where(mask, 1.055 * np.power(np.clip(rgb_linear, 0, None), 1 / 2.4) - 0.055, 12.92 * rgb_linear)

    return np.clip(np.round(rgb * 255), 0, 255).astype(np.uint8)


# =============================================================================
# Luminance
# =============================================================================

def _linearize(channel: float) -> float:
    if channel <= 0.03928:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    """WCAG relative luminance, 0 for black and 1 for white."""
    luminance = (
        0.2126 * _linearize(color.red)
        + 0.7152 * _linearize(color.green)
        + 0.0722 * _linearize(color.blue)
    )
    return round_half_away(luminance, LUMINANCE_PRECISION)


# =============================================================================
# Hex codec
# =============================================================================

def parse_hex(value: str) -> tuple[int, int, int, int]:
    """
    Parse a hex color string into (r, g, b, a) channels in 0-255.

    Accepts 3 (RGB), 6 (RRGGBB) and 8 (RRGGBBAA) digits, with an optional
    leading '#' or '0x'.

    Raises:
        ColorFormatError: If the string is not a supported hex color
    """
    digits = value.strip()
    if digits.startswith('#'):
        digits = digits[1:]
    elif digits[:2].lower() == '0x':
        digits = digits[2:]

    if len(digits) not in (3, 6, 8) or any(c not in '0123456789abcdefABCDEF' for c in digits):
        raise ColorFormatError(f"Invalid hex color: {value!r}")

    number = int(digits, 16)
    if len(digits) == 3:
        return ((number >> 8) * 17, (number >> 4 & 0xF) * 17, (number & 0xF) * 17, 255)
    if len(digits) == 6:
        return (number >> 16, number >> 8 & 0xFF, number & 0xFF, 255)
    return (number >> 24, number >> 16 & 0xFF, number >> 8 & 0xFF, number & 0xFF)


# =============================================================================
# Derived colors
# =============================================================================

def complementary(color: Color) -> Color:
    """The color opposite on the RGB cube, alpha unchanged."""
    r, g, b = color.rgb255
    return Color.from_rgb255(255 - r, 255 - g, 255 - b, int(round_half_away(color.alpha * 255, 0)))


def gradient_color(colors: Sequence[Color], percent: float) -> Color:
    """
    Color at `percent` (0-100) along a linear gradient through `colors`.

    Raises:
        ConfigurationError: If `colors` is empty
    """
    if not colors:
        raise ConfigurationError("A gradient needs at least one color")

    fraction = max(min(percent, 100.0), 0.0) / 100
    if fraction == 0 or len(colors) == 1:
        return colors[0]
    if fraction == 1:
        return colors[-1]

    position = fraction * (len(colors) - 1)
    first = int(math.floor(position))
    second = int(math.ceil(position))
    t = position - first

    c1, c2 = colors[first], colors[second]
    channels = (
        c1.red + (c2.red - c1.red) * t,
        c1.green + (c2.green - c1.green) * t,
        c1.blue + (c2.blue - c1.blue) * t,
        c1.alpha + (c2.alpha - c1.alpha) * t,
    )
    return Color(*(min(1.0, max(0.0, c)) for c in channels))


def gradient_colors(colors: Sequence[Color], size: int) -> list[Color]:
    """Sample `size` evenly spaced colors from the gradient through `colors`."""
    if size < 1:
        raise ConfigurationError(f"Gradient size must be positive, got {size}")
    if size == 1:
        return [gradient_color(colors, 0)]
    return [gradient_color(colors, 100 * i / (size - 1)) for i in range(size)]
