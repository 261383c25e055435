from __future__ import annotations
from .bitmap import CoverageBitmap, GlyphMetrics
from .errors import GlyphNotFound, InvalidOptions
from .fonts import FontFace


def is_scalar_value(code_point: int) -> bool:
    return 0 <= code_point <= 0x10FFFF and not 0xD800 <= code_point <= 0xDFFF


def rasterize(
    font: FontFace, code_point: int, pixel_size: float
) -> tuple[CoverageBitmap, GlyphMetrics]:
    if pixel_size <= 0:
        raise InvalidOptions(f"pixel size must be positive (got {pixel_size})")
    if not is_scalar_value(code_point):
        raise InvalidOptions(f"not a Unicode scalar value: {code_point:#x}")
    outline = font.outline_for(code_point, pixel_size)
    if outline is None:
        raise GlyphNotFound(code_point)
    glyph = outline.render()
    bitmap = CoverageBitmap(glyph.width, glyph.rows, glyph.pixels)
    metrics = GlyphMetrics(
        advance=outline.advance,
        bearing_x=glyph.left,
        bearing_y=glyph.top,
        width=glyph.width,
        height=glyph.rows,
    )
    return bitmap, metrics


def blank_glyph(pixel_size: float) -> tuple[CoverageBitmap, GlyphMetrics]:
    """Empty stand-in for a missing glyph, half an em wide."""
    return (
        CoverageBitmap(0, 0, b""),
        GlyphMetrics(advance=pixel_size / 2, bearing_x=0, bearing_y=0, width=0, height=0),
    )
