"""Shared fixtures: small synthetic pixel buffers."""

import numpy as np
import pytest

from extract_pixels import PixelBuffer


def solid(rgb, width=8, height=8, alpha=255) -> PixelBuffer:
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, :3] = rgb
    pixels[:, :, 3] = alpha
    return PixelBuffer.from_array(pixels)


def columns(*rgbs, width_each=4, height=8) -> PixelBuffer:
    """Opaque image made of equal-width vertical bands."""
    pixels = np.zeros((height, width_each * len(rgbs), 4), dtype=np.uint8)
    for i, rgb in enumerate(rgbs):
        pixels[:, i * width_each:(i + 1) * width_each, :3] = rgb
    pixels[:, :, 3] = 255
    return PixelBuffer.from_array(pixels)


@pytest.fixture
def green_image():
    return solid((0, 255, 0))


@pytest.fixture
def black_white_image():
    return columns((0, 0, 0), (255, 255, 255))


@pytest.fixture
def primaries_image():
    return columns((255, 0, 0), (0, 255, 0), (0, 0, 255))


@pytest.fixture
def transparent_image():
    return solid((200, 10, 10), alpha=0)


@pytest.fixture
def gradient_image():
    """32x8 red-to-blue ramp with many distinct colors."""
    pixels = np.zeros((8, 32, 4), dtype=np.uint8)
    for x in range(32):
        t = x / 31
        pixels[:, x, :3] = (round(255 * (1 - t)), 0, round(255 * t))
    pixels[:, :, 3] = 255
    return PixelBuffer.from_array(pixels)
