"""Text and image to packed pixel buffers for small displays.

The conversions return a :class:`PackedBuffer` whose ``as_tuple()`` gives
``(width, height, bytes)`` laid out MSB-first with byte-aligned rows.
"""

from .bitmap import CoverageBitmap, GlyphMetrics, PixelGrid
from .errors import (
    ConversionError,
    EmptyImage,
    FontLoadError,
    GlyphNotFound,
    ImageDecodeError,
    ImageTooLarge,
    InvalidBitDepth,
    InvalidOptions,
)
from .fonts import FontFace, load_font
from .layout import layout
from .packing import pack, unpack
from .pipeline import (
    convert_image,
    grayscale_image,
    monochrome_image,
    palette_image,
    palette_plane,
    quadcolor_image,
    text_image,
)
from .quantize import luminance, quantize
from .rasterizer import rasterize
from .schemas import (
    BWR,
    BWRY,
    FourColor,
    GrayscaleN,
    LayoutOptions,
    Monochrome,
    PackedBuffer,
    Palette,
)

__all__ = [
    "BWR",
    "BWRY",
    "ConversionError",
    "CoverageBitmap",
    "EmptyImage",
    "FontFace",
    "FontLoadError",
    "FourColor",
    "GlyphMetrics",
    "GlyphNotFound",
    "GrayscaleN",
    "ImageDecodeError",
    "ImageTooLarge",
    "InvalidBitDepth",
    "InvalidOptions",
    "LayoutOptions",
    "Monochrome",
    "PackedBuffer",
    "Palette",
    "PixelGrid",
    "convert_image",
    "grayscale_image",
    "layout",
    "load_font",
    "luminance",
    "monochrome_image",
    "pack",
    "palette_image",
    "palette_plane",
    "quadcolor_image",
    "quantize",
    "rasterize",
    "text_image",
    "unpack",
]
