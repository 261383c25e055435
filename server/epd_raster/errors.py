from __future__ import annotations


class ConversionError(Exception):
    """Base class for every failure raised by a conversion."""


class InvalidOptions(ConversionError, ValueError):
    pass


class InvalidBitDepth(InvalidOptions):
    def __init__(self, bit_depth: object):
        super().__init__(f"bit depth must be one of 1, 2, 4, 8 (got {bit_depth!r})")
        self.bit_depth = bit_depth


class FontLoadError(ConversionError):
    pass


class GlyphNotFound(ConversionError, LookupError):
    def __init__(self, code_point: int):
        super().__init__(f"font has no glyph for U+{code_point:04X}")
        self.code_point = code_point


class EmptyImage(ConversionError):
    pass


class ImageDecodeError(ConversionError):
    pass


class ImageTooLarge(InvalidOptions):
    pass
