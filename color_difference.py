"""
Perceptual color difference (delta E).

Five interchangeable formulas. Every result is rounded to 3 decimals before
it is compared against a threshold, so clustering decisions are stable.

References:
    http://www.brucelindbloom.com/index.html?ColorDifferenceCalc.html
    https://en.wikipedia.org/wiki/Color_difference
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

from color_space import Color, Lab, round_half_away


DIFFERENCE_PRECISION = 3


class DeltaFormula(Enum):
    """The different algorithms for comparing colors."""
    EUCLIDEAN = 'euclidean'  # plain RGB distance, fast but not perceptual
    CIE76 = 'cie76'
    CIE94 = 'cie94'
    CIEDE2000 = 'ciede2000'
    CMC = 'cmc'


class Severity(Enum):
    """Human-readable bucket for a difference value."""
    IDENTICAL = 'identical'
    SIMILAR = 'similar'  # not perceptible
    CLOSE = 'close'  # perceptible through close observation
    NEAR = 'near'  # perceptible at a glance
    DIFFERENT = 'different'
    FAR = 'far'  # more opposite than similar

    @classmethod
    def of(cls, value: float) -> 'Severity':
        if value == 0:
            return cls.IDENTICAL
        if value <= 1.0:
            return cls.SIMILAR
        if value <= 2.0:
            return cls.CLOSE
        if value <= 10.0:
            return cls.NEAR
        if value <= 50.0:
            return cls.DIFFERENT
        return cls.FAR


@dataclass(frozen=True, order=True)
class DifferenceResult:
    value: float
    severity: Severity = field(compare=False)

    @classmethod
    def from_value(cls, value: float) -> 'DifferenceResult':
        return cls(value, Severity.of(value))


@lru_cache(maxsize=1 << 16)
def lab_of(color: Color) -> Lab:
    return color.lab


# =============================================================================
# Formulas
# =============================================================================

def delta_euclidean(lhs: Color, rhs: Color) -> float:
    """Distance in RGB 0-255 space."""
    return math.sqrt(
        ((lhs.red - rhs.red) * 255) ** 2
        + ((lhs.green - rhs.green) * 255) ** 2
        + ((lhs.blue - rhs.blue) * 255) ** 2
    )


def delta_cie76(lhs: Lab, rhs: Lab) -> float:
    return math.sqrt((rhs.L - lhs.L) ** 2 + (rhs.a - lhs.a) ** 2 + (rhs.b - lhs.b) ** 2)


def delta_cie94(lhs: Lab, rhs: Lab) -> float:
    """
    CIE94 (graphic arts weights).

    The chroma weighting uses the geometric mean of both chromas, which keeps
    the metric symmetric.
    """
    k1, k2 = 0.045, 0.015

    c1 = math.hypot(lhs.a, lhs.b)
    c2 = math.hypot(rhs.a, rhs.b)
    c_mean = math.sqrt(c1 * c2)
    s_c = 1 + k1 * c_mean
    s_h = 1 + k2 * c_mean

    delta_l = lhs.L - rhs.L
    delta_c = c1 - c2
    delta_h_sq = max(0.0, (lhs.a - rhs.a) ** 2 + (lhs.b - rhs.b) ** 2 - delta_c ** 2)

    return math.sqrt(delta_l ** 2 + (delta_c / s_c) ** 2 + delta_h_sq / s_h ** 2)


def delta_ciede2000(lhs: Lab, rhs: Lab) -> float:
    """CIEDE2000 with unit weighting factors (kL = kC = kH = 1)."""
    pow25_7 = 25.0 ** 7

    c1 = math.hypot(lhs.a, lhs.b)
    c2 = math.hypot(rhs.a, rhs.b)
    bar_c7 = ((c1 + c2) / 2) ** 7
    g = 0.5 * (1 - math.sqrt(bar_c7 / (bar_c7 + pow25_7)))

    a1p = (1 + g) * lhs.a
    a2p = (1 + g) * rhs.a
    c1p = math.hypot(a1p, lhs.b)
    c2p = math.hypot(a2p, rhs.b)

    def hue_prime(b: float, a_prime: float) -> float:
        if b == 0 and a_prime == 0:
            return 0.0
        h = math.atan2(b, a_prime)
        return h + 2 * math.pi if h < 0 else h

    h1p = hue_prime(lhs.b, a1p)
    h2p = hue_prime(rhs.b, a2p)

    delta_lp = rhs.L - lhs.L
    delta_cp = c2p - c1p

    c_product = c1p * c2p
    if c_product == 0:
        delta_hp = 0.0
    else:
        delta_hp = h2p - h1p
        if delta_hp < -math.pi:
            delta_hp += 2 * math.pi
        elif delta_hp > math.pi:
            delta_hp -= 2 * math.pi
    delta_Hp = 2 * math.sqrt(c_product) * math.sin(delta_hp / 2)

    bar_lp = (lhs.L + rhs.L) / 2
    bar_cp = (c1p + c2p) / 2

    h_sum = h1p + h2p
    if c_product == 0:
        bar_hp = h_sum
    elif abs(h1p - h2p) <= math.pi:
        bar_hp = h_sum / 2
    elif h_sum < 2 * math.pi:
        bar_hp = (h_sum + 2 * math.pi) / 2
    else:
        bar_hp = (h_sum - 2 * math.pi) / 2

    t = (1
         - 0.17 * math.cos(bar_hp - math.radians(30))
         + 0.24 * math.cos(2 * bar_hp)
         + 0.32 * math.cos(3 * bar_hp + math.radians(6))
         - 0.20 * math.cos(4 * bar_hp - math.radians(63)))
    delta_theta = math.radians(30) * math.exp(-(((bar_hp - math.radians(275)) / math.radians(25)) ** 2))
    bar_cp7 = bar_cp ** 7
    r_c = 2 * math.sqrt(bar_cp7 / (bar_cp7 + pow25_7))
    s_l = 1 + (0.015 * (bar_lp - 50) ** 2) / math.sqrt(20 + (bar_lp - 50) ** 2)
    s_c = 1 + 0.045 * bar_cp
    s_h = 1 + 0.015 * bar_cp * t
    r_t = -math.sin(2 * delta_theta) * r_c

    return math.sqrt(max(0.0,
        (delta_lp / s_l) ** 2
        + (delta_cp / s_c) ** 2
        + (delta_Hp / s_h) ** 2
        + r_t * (delta_cp / s_c) * (delta_Hp / s_h)
    ))


def _cmc_directional(lab1: Lab, lab2: Lab, l: float = 1.0, c: float = 1.0) -> float:
    c1 = math.hypot(lab1.a, lab1.b)
    c2 = math.hypot(lab2.a, lab2.b)
    delta_c = c1 - c2
    delta_l = lab1.L - lab2.L
    delta_h_sq = max(0.0, (lab1.a - lab2.a) ** 2 + (lab1.b - lab2.b) ** 2 - delta_c ** 2)

    if lab1.L < 16:
        s_l = 0.511
    else:
        s_l = (0.040975 * lab1.L) / (1 + 0.01765 * lab1.L)
    s_c = (0.0638 * c1) / (1 + 0.0131 * c1) + 0.638

    h1 = math.degrees(math.atan2(lab1.b, lab1.a)) % 360 if c1 else 0.0
    if 164 <= h1 <= 345:
        t = 0.56 + abs(0.2 * math.cos(math.radians(h1 + 168)))
    else:
        t = 0.36 + abs(0.4 * math.cos(math.radians(h1 + 35)))

    c1_4 = c1 ** 4
    f = math.sqrt(c1_4 / (c1_4 + 1900))
    s_h = s_c * (f * t + 1 - f)

    return math.sqrt((delta_l / (l * s_l)) ** 2 + (delta_c / (c * s_c)) ** 2 + delta_h_sq / s_h ** 2)


def delta_cmc(lhs: Lab, rhs: Lab) -> float:
    """CMC l:c (1:1), averaged over both reference directions."""
    return (_cmc_directional(lhs, rhs) + _cmc_directional(rhs, lhs)) / 2


_LAB_FORMULAS = {
    DeltaFormula.CIE76: delta_cie76,
    DeltaFormula.CIE94: delta_cie94,
    DeltaFormula.CIEDE2000: delta_ciede2000,
    DeltaFormula.CMC: delta_cmc,
}


# =============================================================================
# Public API
# =============================================================================

def difference(lhs: Color, rhs: Color, formula: DeltaFormula = DeltaFormula.CIE94) -> float:
    """Delta E between two colors, rounded to 3 decimals."""
    if formula is DeltaFormula.EUCLIDEAN:
        value = delta_euclidean(lhs, rhs)
    else:
        value = _LAB_FORMULAS[formula](lab_of(lhs), lab_of(rhs))
    return round_half_away(value, DIFFERENCE_PRECISION)


def compare(lhs: Color, rhs: Color, formula: DeltaFormula = DeltaFormula.CIE94) -> DifferenceResult:
    """Difference plus its severity bucket, for reporting."""
    return DifferenceResult.from_value(difference(lhs, rhs, formula))
