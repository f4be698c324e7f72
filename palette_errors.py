"""
Exceptions raised by the palette extraction pipeline.

Degenerate inputs (no visible pixels, no palette with enough contrast) are
not errors: extractors return an empty list and palette builders return None.
"""


class PaletteError(Exception):
    """Base class for all palette extraction errors."""


class PixelDataError(PaletteError, ValueError):
    """The pixel buffer is missing data or violates its declared layout."""


class ConfigurationError(PaletteError, ValueError):
    """An extraction option is outside its valid range."""


class ColorFormatError(PaletteError, ValueError):
    """A color string could not be parsed."""
