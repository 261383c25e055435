"""Compose rasterized glyphs into a single coverage bitmap for a text block.

Lines are split with :meth:`str.splitlines` and each line is walked code point
by code point. A line's height is the larger of the font's own ascender and
descender and the extents of the glyphs actually drawn on it, so blank lines
keep their height and tall glyphs are never clipped. Where glyph boxes
overlap, coverage is merged by maximum.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Optional
from .bitmap import CoverageBitmap, GlyphMetrics
from .errors import GlyphNotFound, InvalidOptions
from .fonts import FontFace, load_font
from .rasterizer import blank_glyph, rasterize
from .schemas import LayoutOptions

logger = logging.getLogger(__name__)


@dataclass
class _Line:
    ascent: int
    descent: int
    left: int = 0
    right: int = 0
    # (x relative to the line origin, bearing above baseline, bitmap)
    glyphs: list[tuple[int, int, CoverageBitmap]] = field(default_factory=list)

    @property
    def height(self) -> int:
        return self.ascent + self.descent


class _GlyphSource:
    def __init__(self, font: FontFace, size: float, fallback: Optional[str]):
        self.font = font
        self.size = size
        self.fallback = fallback
        self._seen: dict[int, tuple[CoverageBitmap, GlyphMetrics]] = {}

    def get(self, code_point: int) -> tuple[CoverageBitmap, GlyphMetrics]:
        if code_point not in self._seen:
            self._seen[code_point] = self._load(code_point)
        return self._seen[code_point]

    def _load(self, code_point: int) -> tuple[CoverageBitmap, GlyphMetrics]:
        try:
            return rasterize(self.font, code_point, self.size)
        except GlyphNotFound:
            if self.fallback is None:
                logger.warning("no glyph for U+%04X, using blank", code_point)
                return blank_glyph(self.size)
            logger.warning(
                "no glyph for U+%04X, using fallback %r", code_point, self.fallback
            )
            return rasterize(self.font, ord(self.fallback), self.size)


def _measure_line(line: str, glyphs: _GlyphSource, ascent: int, descent: int) -> _Line:
    out = _Line(ascent=ascent, descent=descent)
    pen = 0.0
    prev: Optional[int] = None
    for ch in line:
        cp = ord(ch)
        if prev is not None:
            pen += glyphs.font.kerning(prev, cp, glyphs.size)
        bitmap, metrics = glyphs.get(cp)
        if metrics.width and metrics.height:
            x = int(round(pen)) + metrics.bearing_x
            out.glyphs.append((x, metrics.bearing_y, bitmap))
            out.left = min(out.left, x)
            out.right = max(out.right, x + metrics.width)
            out.ascent = max(out.ascent, metrics.bearing_y)
            out.descent = max(out.descent, metrics.height - metrics.bearing_y)
        pen += metrics.advance
        prev = cp
    out.right = max(out.right, int(math.ceil(pen)))
    return out


def _blit_max(
    canvas: bytearray, width: int, height: int, bitmap: CoverageBitmap, ox: int, oy: int
) -> None:
    for gy in range(bitmap.height):
        y = oy + gy
        if not 0 <= y < height:
            continue
        src = bitmap.row(gy)
        for gx, v in enumerate(src):
            x = ox + gx
            if v and 0 <= x < width:
                i = y * width + x
                if v > canvas[i]:
                    canvas[i] = v


def layout(options: LayoutOptions, font: Optional[FontFace] = None) -> CoverageBitmap:
    if not options.text:
        return CoverageBitmap.blank()
    if font is None:
        if not options.font:
            raise InvalidOptions("a font source is required to lay out text")
        font = load_font(options.font)

    size = options.font_size
    glyphs = _GlyphSource(font, size, options.fallback)
    ascent = int(math.ceil(font.ascender(size)))
    descent = int(math.ceil(font.descender(size)))
    lines = [_measure_line(line, glyphs, ascent, descent) for line in options.text.splitlines()]

    origin_x = min(line.left for line in lines)
    width = max(1, max(line.right for line in lines) - origin_x)
    tops = []
    cursor = 0.0
    for line in lines:
        tops.append(int(round(cursor)))
        cursor += line.height + options.line_spacing
    height = max(1, max(top + line.height for top, line in zip(tops, lines)))
    logger.debug(
        "laid out %d line(s) into %dx%d at %.1fpx", len(lines), width, height, size
    )

    canvas = bytearray(width * height)
    for top, line in zip(tops, lines):
        baseline = top + line.ascent
        for x, bearing_y, bitmap in line.glyphs:
            _blit_max(canvas, width, height, bitmap, x - origin_x, baseline - bearing_y)

    result = CoverageBitmap(width, height, bytes(canvas))
    if options.inverse:
        result = result.inverted()
    return result
