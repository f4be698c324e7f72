"""
Count the colors of a decoded pixel buffer.

The buffer is row-major uint8 with 2 (gray + alpha), 3 (RGB) or 4 (RGBA)
channels. Pixels at or below the alpha threshold are skipped, not blended.
The result maps each 24-bit RGB color to its pixel count.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image

from palette_errors import ConfigurationError, PixelDataError


# =============================================================================
# Constants
# =============================================================================

# 150 / 255 ~ 59% opaque
DEFAULT_ALPHA_THRESHOLD = 150

SUPPORTED_CHANNELS = (2, 3, 4)
SUPPORTED_COLOR_SPACES = ('sRGB',)

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side

SAMPLE_OFFSETS = ('origin', 'center')


# =============================================================================
# Pixel buffer
# =============================================================================

@dataclass
class PixelBuffer:
    """A decoded image: `height` rows of `width` pixels, `channels` bytes each."""
    width: int
    height: int
    data: np.ndarray
    channels: int = 4
    premultiplied: bool = False
    color_space: str = 'sRGB'

    def __post_init__(self):
        if self.data is None:
            raise PixelDataError("Pixel buffer has no backing data")
        if self.width <= 0 or self.height <= 0:
            raise PixelDataError(f"Invalid image size {self.width}x{self.height}")
        if self.channels not in SUPPORTED_CHANNELS:
            raise PixelDataError(f"Unsupported channel count: {self.channels}")
        if self.color_space not in SUPPORTED_COLOR_SPACES:
            raise PixelDataError(f"Unsupported color space: {self.color_space}")

        data = np.asarray(self.data)
        if data.dtype != np.uint8:
            raise PixelDataError(f"Expected uint8 pixel data, got {data.dtype}")
        expected = self.width * self.height * self.channels
        if data.size != expected:
            raise PixelDataError(
                f"Pixel buffer holds {data.size} bytes, expected {expected} "
                f"for {self.width}x{self.height}x{self.channels}"
            )
        self.data = data.reshape(self.height, self.width, self.channels)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def has_alpha(self) -> bool:
        return self.channels != 3

    @classmethod
    def from_array(cls, pixels: np.ndarray, premultiplied: bool = False) -> 'PixelBuffer':
        """Wrap an (h, w, c) or (h, w) uint8 array."""
        pixels = np.asarray(pixels)
        if pixels.ndim == 2:
            # Opaque gray
            pixels = np.stack([pixels, np.full_like(pixels, 255)], axis=-1)
        if pixels.ndim != 3:
            raise PixelDataError(f"Expected a 2D or 3D pixel array, got shape {pixels.shape}")
        h, w, c = pixels.shape
        return cls(width=w, height=h, data=np.ascontiguousarray(pixels), channels=c,
                   premultiplied=premultiplied)

    @classmethod
    def from_image(cls, img: Image.Image) -> 'PixelBuffer':
        """Convert a Pillow image, keeping gray images as gray + alpha."""
        if img.mode in ('1', 'L', 'LA', 'I', 'I;16', 'F'):
            img = img.convert('LA')
        elif img.mode != 'RGBA':
            img = img.convert('RGBA')
        return cls.from_array(np.array(img))

    def to_rgba(self) -> np.ndarray:
        """(h, w, 4) straight-alpha RGBA copy of the buffer."""
        if self.channels == 4:
            rgba = self.data.copy()
        elif self.channels == 3:
            alpha = np.full(self.data.shape[:2] + (1,), 255, dtype=np.uint8)
            rgba = np.concatenate([self.data, alpha], axis=2)
        else:
            gray = self.data[:, :, 0:1]
            rgba = np.concatenate([gray, gray, gray, self.data[:, :, 1:2]], axis=2)

        if self.premultiplied and self.has_alpha:
            alpha = rgba[:, :, 3:4].astype(np.float64)
            rgb = rgba[:, :, :3].astype(np.float64)
            with np.errstate(divide='ignore', invalid='ignore'):
                straight = np.where(alpha > 0, np.round(rgb * 255.0 / alpha), 0)
            rgba[:, :, :3] = np.clip(straight, 0, 255).astype(np.uint8)

        return rgba


def load_image(image_path: str) -> PixelBuffer:
    """
    Decode an image file into a pixel buffer.

    Raises:
        FileNotFoundError: If image file doesn't exist
        PixelDataError: If file is not a valid image or exceeds size limits
    """
    try:
        img = Image.open(image_path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {image_path}")
    except Exception as e:
        raise PixelDataError(f"Could not open image: {e}")

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise PixelDataError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise PixelDataError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    return PixelBuffer.from_image(img)


# =============================================================================
# Counting
# =============================================================================

def sample_pixels(rgba: np.ndarray, pixel_size: int = 1, offset: str = 'origin') -> np.ndarray:
    """
    Pick one pixel per `pixel_size` x `pixel_size` block.

    Only full blocks are visited. `offset` selects the block origin or the
    block center as the representative pixel.
    """
    if pixel_size == 1:
        return rgba
    if offset not in SAMPLE_OFFSETS:
        raise ConfigurationError(f"Unknown sample offset {offset!r}, expected one of {SAMPLE_OFFSETS}")

    h, w = rgba.shape[:2]
    start = pixel_size // 2 if offset == 'center' else 0
    rows = (h // pixel_size) * pixel_size
    cols = (w // pixel_size) * pixel_size
    return rgba[start:rows:pixel_size, start:cols:pixel_size]


def count_colors(buffer: PixelBuffer, pixel_size: int = 1,
                 alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
                 offset: str = 'origin') -> dict[tuple[int, int, int], int]:
    """
    Count visible pixels per RGB color.

    Args:
        buffer: Decoded pixels
        pixel_size: Visit one pixel per block of this size (1 = every pixel)
        alpha_threshold: A pixel is counted only if its alpha is above this
        offset: 'origin' or 'center' of each block when pixel_size > 1

    Returns:
        dict mapping (r, g, b) -> pixel count, ordered by packed RGB value

    Raises:
        ConfigurationError: If pixel_size or alpha_threshold is out of range
    """
    if pixel_size < 1:
        raise ConfigurationError(f"pixel_size must be at least 1, got {pixel_size}")
    if pixel_size > min(buffer.width, buffer.height):
        raise ConfigurationError(
            f"pixel_size {pixel_size} exceeds image size {buffer.width}x{buffer.height}"
        )
    if not 0 <= alpha_threshold <= 255:
        raise ConfigurationError(f"alpha_threshold must be within 0-255, got {alpha_threshold}")

    pixels = sample_pixels(buffer.to_rgba(), pixel_size, offset).reshape(-1, 4)
    visible = pixels[pixels[:, 3] > alpha_threshold]
    if visible.size == 0:
        return {}

    rgb = visible[:, :3].astype(np.uint32)
    packed = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
    unique, counts = np.unique(packed, return_counts=True)

    return {
        (int(key >> 16) & 0xFF, int(key >> 8) & 0xFF, int(key) & 0xFF): int(count)
        for key, count in zip(unique, counts)
    }


def visible_pixels(buffer: PixelBuffer, alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
                   region: Optional[tuple[slice, slice]] = None) -> np.ndarray:
    """(n, 3) uint8 RGB of the visible pixels, optionally inside `region`."""
    rgba = buffer.to_rgba()
    if region is not None:
        rgba = rgba[region]
    flat = rgba.reshape(-1, 4)
    return flat[flat[:, 3] > alpha_threshold][:, :3]
