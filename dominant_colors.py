"""
Dominant color extraction.

Pipeline:
1. Bucket counted colors by shade, dropping excluded shades and noise
2. Rank each bucket by normalcy
3. Merge similar colors per shade until each bucket fits max_count
4. Merge across shades until the whole palette fits max_count
5. Refill from the per-shade pools when merging overshot
6. Sort and convert counts to shares

Merging is greedy and order sensitive: colors are visited in rank order and
each one joins its nearest accepted representative if that is closer than
the current threshold. The threshold grows by 1 per pass until the palette
is small enough.
"""

import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from loguru import logger
from PIL import Image

from alt_extractors import area_average_colors, kmeans_colors
from color_difference import DeltaFormula, difference
from color_frequency import (
    ColorFrequency, Option, Sort, excluded_shades, normalcy, sort_frequencies, to_percentages,
)
from color_shade import ColorShade, shade_of
from color_space import Color, round_half_away
from extract_pixels import DEFAULT_ALPHA_THRESHOLD, PixelBuffer, count_colors, load_image
from image_filter import Quality, prepare_image, prepare_pixellated
from palette_errors import ConfigurationError


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_MAX_COUNT = 8
DEFAULT_FORMULA = DeltaFormula.CIE76
DEFAULT_DELTA = 10.0
DEFAULT_SORT = Sort.FREQUENCY

# Near-black / near-white limits in HSL lightness percent
BLACK_LIGHTNESS = 5
WHITE_LIGHTNESS = 95


class Algorithm(Enum):
    ITERATIVE = 'iterative'
    KMEANS = 'kmeans'
    AREA_AVERAGE = 'area-average'


# =============================================================================
# Arena
# =============================================================================

@dataclass
class Slot:
    color: Color
    count: float
    shade: ColorShade
    parent: Optional[int] = None
    alive: bool = True

    @property
    def normal(self) -> float:
        return normalcy(self.color, self.count)


def rank(arena: list[Slot], indices: Iterable[int]) -> list[int]:
    """Order slots by normalcy, then count, highest first."""
    return sorted(indices, key=lambda i: (arena[i].normal, arena[i].count), reverse=True)


def union(arena: list[Slot], into: int, other: int) -> None:
    """Fold slot `other` into slot `into`. The representative keeps its color."""
    arena[into].count += arena[other].count
    arena[other].alive = False
    arena[other].parent = into


def merge_pass(arena: list[Slot], order: list[int], formula: DeltaFormula,
               threshold: float) -> list[int]:
    """
    One greedy merge over `order`.

    Returns:
        Indices of the representatives, in acceptance order
    """
    representatives = []
    for index in order:
        color = arena[index].color
        best = None
        best_score = None
        for rep in representatives:
            score = difference(color, arena[rep].color, formula)
            if best_score is None or score < best_score:
                best, best_score = rep, score

        if best is not None and best_score < threshold:
            union(arena, best, index)
        else:
            representatives.append(index)
    return representatives


def merge_until(arena: list[Slot], order: list[int], max_count: int,
                formula: DeltaFormula, delta: float) -> list[int]:
    """Repeat merge passes with a growing threshold until at most max_count remain."""
    threshold = delta
    passes = 0
    while len(order) > max_count:
        order = rank(arena, merge_pass(arena, order, formula, threshold))
        threshold += 1
        passes += 1
    if passes:
        logger.debug(f"Merged to {len(order)} colors in {passes} passes (threshold {threshold - 1:g})")
    return order


def fill_gaps(arena: list[Slot], selected: list[int], pools: dict[ColorShade, list[int]],
              max_count: int, formula: DeltaFormula, delta: float) -> list[int]:
    """
    Revive merged colors, shade by shade, until max_count is reached.

    A candidate closer than `delta` to any selected color is skipped. A
    revived slot's count is taken back from every slot it was merged into.
    """
    selected = list(selected)
    chosen = set(selected)
    for shade in ColorShade:
        for index in pools.get(shade, ()):
            if len(selected) >= max_count:
                return selected
            slot = arena[index]
            if index in chosen or slot.parent is None:
                continue
            if any(difference(slot.color, arena[s].color, formula) < delta for s in selected):
                continue

            ancestor = slot.parent
            while ancestor is not None:
                arena[ancestor].count -= slot.count
                ancestor = arena[ancestor].parent
            slot.parent = None
            slot.alive = True
            selected.append(index)
            chosen.add(index)
    return selected


# =============================================================================
# Engine
# =============================================================================

def validate_options(max_count: int, delta: float, min_count: int = 1,
                     shade_cap: Optional[int] = None) -> None:
    if max_count <= 0:
        raise ConfigurationError(f"max_count must be positive, got {max_count}")
    if delta < 0:
        raise ConfigurationError(f"delta must not be negative, got {delta}")
    if min_count < 1:
        raise ConfigurationError(f"min_count must be at least 1, got {min_count}")
    if shade_cap is not None and shade_cap < 1:
        raise ConfigurationError(f"shade_cap must be at least 1, got {shade_cap}")


def combine_counts(counts: Mapping[tuple[int, int, int], int],
                   max_count: int = DEFAULT_MAX_COUNT,
                   formula: DeltaFormula = DEFAULT_FORMULA,
                   delta: float = DEFAULT_DELTA,
                   sorting: Sort = DEFAULT_SORT,
                   options: Iterable[Option] = (),
                   min_count: int = 1,
                   shade_cap: Optional[int] = None) -> list[ColorFrequency]:
    """
    Reduce a color histogram to at most `max_count` dominant colors.

    Args:
        counts: (r, g, b) in 0-255 -> pixel count
        max_count: Maximum number of colors returned
        formula: Difference formula used for merging
        delta: Initial merge threshold
        sorting: Order of the result
        options: Shades to exclude
        min_count: Colors counted fewer times are dropped as noise
        shade_cap: Keep only this many top-ranked colors per shade

    Returns:
        list of ColorFrequency with frequency as a share of the kept pixels

    Raises:
        ConfigurationError: If max_count, delta, min_count or shade_cap is out of range
    """
    validate_options(max_count, delta, min_count, shade_cap)
    excluded = excluded_shades(options)
    start = time.perf_counter()

    # Step 1: bucket by shade
    arena: list[Slot] = []
    buckets: dict[ColorShade, list[int]] = {}
    for (r, g, b), count in counts.items():
        if count < min_count:
            continue
        color = Color.from_rgb255(r, g, b)
        shade = shade_of(color)
        if shade in excluded:
            continue
        buckets.setdefault(shade, []).append(len(arena))
        arena.append(Slot(color, float(count), shade))
    step = _log_step(start, f"Bucketed {len(arena)} colors into {len(buckets)} shades")

    if not arena:
        return []

    # Step 2: rank, optionally keeping only the top of each shade
    pools = {}
    for shade, indices in buckets.items():
        ranked = rank(arena, indices)
        if shade_cap is not None:
            for dropped in ranked[shade_cap:]:
                arena[dropped].alive = False
            ranked = ranked[:shade_cap]
        pools[shade] = ranked
    step = _log_step(step, "Ranked by normalcy")

    # Step 3: merge per shade
    survivors = []
    for shade, ranked in pools.items():
        survivors.extend(merge_until(arena, ranked, max_count, formula, delta))
    step = _log_step(step, f"Merged per shade to {len(survivors)} colors")

    # Step 4: merge across shades
    selected = merge_until(arena, rank(arena, survivors), max_count, formula, delta)
    step = _log_step(step, f"Merged across shades to {len(selected)} colors")

    # Step 5: refill
    if len(selected) < max_count:
        selected = fill_gaps(arena, selected, pools, max_count, formula, delta)
        step = _log_step(step, f"Filled gaps to {len(selected)} colors")

    # Step 6: sort and normalize
    result = sort_frequencies(
        [ColorFrequency(arena[i].color, arena[i].count) for i in selected], sorting
    )
    result = to_percentages(result)
    _log_step(step, "Sorted and normalized")

    logger.info(
        f"Extracted {len(result)} colors "
        f"[{', '.join(str(cf.shade) for cf in result)}] "
        f"in {time.perf_counter() - start:.3f}s"
    )
    return result


def _log_step(since: float, label: str) -> float:
    now = time.perf_counter()
    logger.debug(f"{label} ({now - since:.3f}s)")
    return now


def dominant_color_frequencies(buffer: PixelBuffer,
                               max_count: int = DEFAULT_MAX_COUNT,
                               formula: DeltaFormula = DEFAULT_FORMULA,
                               delta: float = DEFAULT_DELTA,
                               sorting: Sort = DEFAULT_SORT,
                               options: Iterable[Option] = (),
                               pixel_size: int = 1,
                               min_count: int = 1,
                               shade_cap: Optional[int] = None,
                               alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> list[ColorFrequency]:
    """
    Dominant colors of a pixel buffer with the iterative engine.

    Returns an empty list when no pixel is visible.
    """
    validate_options(max_count, delta, min_count, shade_cap)
    counts = count_colors(buffer, pixel_size=pixel_size, alpha_threshold=alpha_threshold)
    logger.debug(f"Counted {len(counts)} distinct colors in {buffer.width}x{buffer.height} buffer")
    return combine_counts(counts, max_count=max_count, formula=formula, delta=delta,
                          sorting=sorting, options=options, min_count=min_count,
                          shade_cap=shade_cap)


ImageSource = Union[PixelBuffer, Image.Image, str, Path]


def as_buffer(image: ImageSource) -> PixelBuffer:
    if isinstance(image, PixelBuffer):
        return image
    if isinstance(image, Image.Image):
        return PixelBuffer.from_image(image)
    return load_image(str(image))


def dominant_colors(image: ImageSource,
                    quality: Quality = Quality.FAIR,
                    algorithm: Algorithm = Algorithm.ITERATIVE,
                    max_count: int = DEFAULT_MAX_COUNT,
                    formula: DeltaFormula = DEFAULT_FORMULA,
                    delta: float = DEFAULT_DELTA,
                    sorting: Sort = DEFAULT_SORT,
                    options: Iterable[Option] = (),
                    pixel_size: Optional[int] = None) -> list[ColorFrequency]:
    """
    Extract dominant colors from an image.

    Args:
        image: Pixel buffer, Pillow image or image path
        quality: Preprocessing level
        algorithm: Extraction strategy
        max_count: Maximum number of colors (number of strips for area average)
        formula: Difference formula (iterative only)
        delta: Initial merge threshold (iterative only)
        sorting: Order of the result
        options: Shades to exclude
        pixel_size: Count one pixel per block of this size (iterative only).
            None pixellates by quality and samples one pixel per block.

    Returns:
        list of ColorFrequency, frequencies are shares in [0, 1]

    Raises:
        FileNotFoundError: If an image path doesn't exist
        PixelDataError: If the image can't be decoded or its buffer is invalid
        ConfigurationError: If an option is out of range
    """
    options = tuple(options)
    validate_options(max_count, delta)
    source = as_buffer(image)

    if algorithm is Algorithm.KMEANS:
        return kmeans_colors(prepare_image(source, quality), count=max_count, quality=quality,
                             sorting=sorting, options=options)
    if algorithm is Algorithm.AREA_AVERAGE:
        return area_average_colors(prepare_image(source, quality), count=max_count,
                                   sorting=sorting, options=options)

    if pixel_size is None:
        buffer, pixel_size = prepare_pixellated(source, quality)
    else:
        buffer = prepare_image(source, quality)
    return dominant_color_frequencies(buffer, max_count=max_count, formula=formula,
                                      delta=delta, sorting=sorting, options=options,
                                      pixel_size=pixel_size,
                                      min_count=quality.min_count,
                                      shade_cap=quality.shade_cap)


def dominant_color_list(image: ImageSource, **kwargs) -> list[Color]:
    """Same as dominant_colors, without the frequencies."""
    return [cf.color for cf in dominant_colors(image, **kwargs)]


# =============================================================================
# Post filters
# =============================================================================

def filter_black(colors: list[ColorFrequency], max_lightness: float = BLACK_LIGHTNESS) -> list[ColorFrequency]:
    """Drop colors whose HSL lightness (rounded) is at most max_lightness."""
    return [cf for cf in colors if round_half_away(cf.color.hsl.lightness, 0) > max_lightness]


def filter_white(colors: list[ColorFrequency], min_lightness: float = WHITE_LIGHTNESS) -> list[ColorFrequency]:
    """Drop colors whose HSL lightness (rounded) is at least min_lightness."""
    return [cf for cf in colors if round_half_away(cf.color.hsl.lightness, 0) < min_lightness]


def filter_near(colors: list[ColorFrequency], reference: Color, delta: float,
                formula: DeltaFormula = DEFAULT_FORMULA) -> list[ColorFrequency]:
    """Drop colors closer than delta to reference, e.g. near-black or near-white."""
    return [cf for cf in colors if difference(cf.color, reference, formula) >= delta]
