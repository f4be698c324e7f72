"""
Quality preprocessing applied before colors are counted.

Quality trades accuracy for speed: lower qualities shrink the image to a
preferred pixel area first. The same enum carries the k-means pass
count, the pixellate block size and the noise limits used by the engine.
"""

import math
from enum import Enum
from typing import Optional

import numpy as np
from loguru import logger
from PIL import Image

from extract_pixels import PixelBuffer
from palette_errors import ConfigurationError


class Quality(Enum):
    LOW = 'low'
    FAIR = 'fair'
    HIGH = 'high'
    BEST = 'best'

    @property
    def preferred_area(self) -> Optional[int]:
        return _QUALITY_PARAMS[self][0]

    @property
    def kmeans_passes(self) -> int:
        return _QUALITY_PARAMS[self][1]

    @property
    def pixellate_scale(self) -> int:
        return _QUALITY_PARAMS[self][2]

    @property
    def sample_block(self) -> int:
        """
        Pixellate block the iterative engine samples with, 1 for none.

        Low quality resizes first, so it pixellates at the finest scale.
        """
        if self is Quality.BEST:
            return 1
        if self is Quality.LOW:
            return Quality.BEST.pixellate_scale
        return self.pixellate_scale

    @property
    def min_count(self) -> int:
        """Colors seen fewer times than this are treated as noise."""
        return _QUALITY_PARAMS[self][3]

    @property
    def shade_cap(self) -> Optional[int]:
        """Maximum candidates kept per shade before clustering."""
        return _QUALITY_PARAMS[self][4]

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        """Size that fits the preferred area, keeping the aspect ratio."""
        area = self.preferred_area
        if area is None or width * height <= area:
            return width, height
        scale = math.sqrt(area / (width * height))
        return max(1, round(width * scale)), max(1, round(height * scale))


#  preferred area, k-means passes, pixellate block, min count, shade cap
_QUALITY_PARAMS = {
    Quality.LOW: (1_000, 1, 64, 1, None),
    Quality.FAIR: (10_000, 10, 32, 1, None),
    Quality.HIGH: (100_000, 15, 16, 1, None),
    Quality.BEST: (None, 20, 8, 4, 100),
}


# =============================================================================
# Filters
# =============================================================================

def to_image(buffer: PixelBuffer) -> Image.Image:
    return Image.fromarray(buffer.to_rgba(), 'RGBA')


def resize(buffer: PixelBuffer, quality: Quality = Quality.FAIR) -> PixelBuffer:
    """Shrink the buffer to the quality's preferred area (box filter)."""
    size = quality.target_size(buffer.width, buffer.height)
    if size == (buffer.width, buffer.height):
        return buffer
    img = to_image(buffer).resize(size, Image.Resampling.BOX)
    return PixelBuffer.from_image(img)


def pixellate(buffer: PixelBuffer, block: int) -> PixelBuffer:
    """
    Replace every `block` x `block` tile with its average color.

    Partial tiles at the right and bottom edges are averaged as well.

    Raises:
        ConfigurationError: If block is less than 1
    """
    if block < 1:
        raise ConfigurationError(f"Pixellate block must be at least 1, got {block}")
    if block == 1:
        return buffer

    img = to_image(buffer)
    small = (math.ceil(buffer.width / block), math.ceil(buffer.height / block))
    tiles = img.resize(small, Image.Resampling.BOX)
    scaled = tiles.resize((small[0] * block, small[1] * block), Image.Resampling.NEAREST)
    return PixelBuffer.from_image(scaled.crop((0, 0, buffer.width, buffer.height)))


def crop_alpha(buffer: PixelBuffer) -> PixelBuffer:
    """Crop fully transparent margins. A fully transparent buffer is returned as is."""
    alpha = buffer.to_rgba()[:, :, 3]
    rows = np.flatnonzero(alpha.any(axis=1))
    cols = np.flatnonzero(alpha.any(axis=0))
    if rows.size == 0:
        return buffer
    top, bottom = rows[0], rows[-1] + 1
    left, right = cols[0], cols[-1] + 1
    if (top, left, bottom, right) == (0, 0, buffer.height, buffer.width):
        return buffer
    return PixelBuffer.from_array(buffer.to_rgba()[top:bottom, left:right])


def prepare_image(buffer: PixelBuffer, quality: Quality = Quality.FAIR) -> PixelBuffer:
    """Crop transparent margins, then resize for the given quality (k-means, area average)."""
    prepared = resize(crop_alpha(buffer), quality)
    logger.debug(
        f"Prepared {buffer.width}x{buffer.height} -> {prepared.width}x{prepared.height} "
        f"({quality.value})"
    )
    return prepared


def fit_block(block: int, width: int, height: int) -> int:
    """Halve `block` until it fits at least twice along each side."""
    while block > 1 and min(width, height) < 2 * block:
        block //= 2
    return block


def prepare_pixellated(buffer: PixelBuffer, quality: Quality = Quality.FAIR) -> tuple[PixelBuffer, int]:
    """
    Crop transparent margins and pixellate for the iterative engine.

    Only low quality resizes; fair and high rely on the pixellate block to
    bound the number of sampled pixels, best keeps every pixel.

    Returns:
        (prepared buffer, block size to sample it with)
    """
    prepared = crop_alpha(buffer)
    if quality is Quality.LOW:
        prepared = resize(prepared, quality)
    block = fit_block(quality.sample_block, prepared.width, prepared.height)
    prepared = pixellate(prepared, block)
    logger.debug(
        f"Pixellated {buffer.width}x{buffer.height} -> {prepared.width}x{prepared.height} "
        f"with block {block} ({quality.value})"
    )
    return prepared, block
