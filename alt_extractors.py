"""
Alternative extraction strategies.

Both return the same list of ColorFrequency as the iterative engine, so they
can be swapped in through `dominant_colors(algorithm=...)`.
"""

from typing import Iterable, Optional

import numpy as np
from loguru import logger
from sklearn.cluster import KMeans

from color_frequency import ColorFrequency, Option, Sort, excluded_shades, sort_frequencies, to_percentages
from color_shade import shade_of
from color_space import Color, lab_to_rgb, rgb_to_lab
from extract_pixels import DEFAULT_ALPHA_THRESHOLD, PixelBuffer, count_colors, visible_pixels
from image_filter import Quality
from palette_errors import ConfigurationError


KMEANS_RANDOM_STATE = 0


def _mean_color(pixels: np.ndarray) -> Color:
    r, g, b = np.clip(np.round(pixels.astype(np.float64).mean(axis=0)), 0, 255).astype(int)
    return Color.from_rgb255(int(r), int(g), int(b))


def _finish(colors: list[ColorFrequency], sorting: Sort, options: Iterable[Option]) -> list[ColorFrequency]:
    excluded = excluded_shades(options)
    kept = [cf for cf in colors if cf.shade not in excluded]
    return to_percentages(sort_frequencies(kept, sorting))


def area_average_colors(buffer: PixelBuffer, count: int = 8, sorting: Sort = Sort.FREQUENCY,
                        options: Iterable[Option] = (),
                        alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> list[ColorFrequency]:
    """
    Average color of `count` vertical strips of equal width.

    Each strip's frequency is its share of the visible pixels. Strips with no
    visible pixels are left out.

    Raises:
        ConfigurationError: If count is not within [1, buffer width]
    """
    if not 1 <= count <= buffer.width:
        raise ConfigurationError(
            f"Area average count must be within [1, {buffer.width}], got {count}"
        )

    strips = []
    for part in range(count):
        left = part * buffer.width // count
        right = (part + 1) * buffer.width // count
        pixels = visible_pixels(buffer, alpha_threshold, region=(slice(None), slice(left, right)))
        if len(pixels):
            strips.append(ColorFrequency(_mean_color(pixels), float(len(pixels))))

    logger.debug(f"Area average: {len(strips)} of {count} strips visible")
    return _finish(strips, sorting, options)


def kmeans_colors(buffer: PixelBuffer, count: int = 8, quality: Quality = Quality.FAIR,
                  sorting: Sort = Sort.FREQUENCY, options: Iterable[Option] = (),
                  alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> list[ColorFrequency]:
    """
    Cluster the distinct colors in LAB space, weighted by pixel count.

    Each cluster center becomes a color whose frequency is the cluster's
    share of the pixels. The number of iterations follows the quality.

    Raises:
        ConfigurationError: If count is less than 1
    """
    if count < 1:
        raise ConfigurationError(f"k-means count must be positive, got {count}")

    excluded = excluded_shades(options)
    counts = {
        rgb: n for rgb, n in count_colors(buffer, alpha_threshold=alpha_threshold).items()
        if shade_of(Color.from_rgb255(*rgb)) not in excluded
    }
    if not counts:
        return []

    rgb = np.array(list(counts.keys()), dtype=np.uint8)
    weights = np.array(list(counts.values()), dtype=np.float64)
    lab = rgb_to_lab(rgb)

    n_clusters = min(count, len(rgb))
    kmeans = KMeans(
        n_clusters=n_clusters,
        n_init=1,
        max_iter=quality.kmeans_passes,
        random_state=KMEANS_RANDOM_STATE,
    )
    labels = kmeans.fit_predict(lab, sample_weight=weights)
    totals = np.bincount(labels, weights=weights, minlength=n_clusters)
    centers = lab_to_rgb(kmeans.cluster_centers_)

    clusters = [
        ColorFrequency(Color.from_rgb255(*(int(c) for c in center)), float(total))
        for center, total in zip(centers, totals)
        if total > 0
    ]
    logger.debug(f"k-means: {len(rgb)} distinct colors -> {len(clusters)} clusters")
    return _finish(clusters, sorting, options)


def average_color(buffer: PixelBuffer, alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> Optional[Color]:
    """Mean of the visible pixels, or None if there are none."""
    pixels = visible_pixels(buffer, alpha_threshold)
    if len(pixels) == 0:
        return None
    return _mean_color(pixels)
