from __future__ import annotations
import io
import logging
from pathlib import Path
from typing import NamedTuple, Optional, Union
import freetype
from .errors import FontLoadError

logger = logging.getLogger(__name__)

FontSource = Union[bytes, Path, str]


def _from_26_6(value: int) -> float:
    return value / 64.0


class RenderedGlyph(NamedTuple):
    width: int
    rows: int
    left: int
    top: int
    pixels: bytes


class GlyphOutline:
    """A glyph the face can draw, scaled to one pixel size."""

    def __init__(self, face: "FontFace", index: int, size: float, advance: float):
        self._face = face
        self.index = index
        self.size = size
        self.advance = advance

    def render(self) -> RenderedGlyph:
        return self._face._render(self.index, self.size)


class FontFace:
    def __init__(self, face: freetype.Face, name: str = "<memory>"):
        self._face = face
        self._size: Optional[float] = None
        self.name = name

    def _set_size(self, size: float) -> None:
        if size != self._size:
            # 26.6 char size at 72 dpi equals the pixel size
            self._face.set_char_size(max(1, int(round(size * 64))))
            self._size = size

    def glyph_index(self, code_point: int) -> int:
        return self._face.get_char_index(code_point)

    def outline_for(self, code_point: int, size: float) -> Optional[GlyphOutline]:
        index = self.glyph_index(code_point)
        if index == 0:
            return None
        self._set_size(size)
        self._face.load_glyph(index, freetype.FT_LOAD_DEFAULT)
        advance = _from_26_6(self._face.glyph.advance.x)
        return GlyphOutline(self, index, size, advance)

    def _render(self, index: int, size: float) -> RenderedGlyph:
        self._set_size(size)
        self._face.load_glyph(index, freetype.FT_LOAD_RENDER)
        slot = self._face.glyph
        bitmap = slot.bitmap
        width, rows, pitch = bitmap.width, bitmap.rows, abs(bitmap.pitch)
        buf = bitmap.buffer
        pixels = bytearray(width * rows)
        mono = bitmap.pixel_mode == freetype.FT_PIXEL_MODE_MONO
        for y in range(rows):
            base = y * pitch
            for x in range(width):
                if mono:
                    bit = buf[base + x // 8] & (0x80 >> (x % 8))
                    pixels[y * width + x] = 255 if bit else 0
                else:
                    pixels[y * width + x] = buf[base + x]
        return RenderedGlyph(width, rows, slot.bitmap_left, slot.bitmap_top, bytes(pixels))

    def ascender(self, size: float) -> float:
        self._set_size(size)
        return _from_26_6(self._face.size.ascender)

    def descender(self, size: float) -> float:
        # FreeType reports the descender as negative; callers want the depth
        self._set_size(size)
        return -_from_26_6(self._face.size.descender)

    def kerning(self, left: int, right: int, size: float) -> float:
        if not self._face.has_kerning:
            return 0.0
        li, ri = self.glyph_index(left), self.glyph_index(right)
        if li == 0 or ri == 0:
            return 0.0
        self._set_size(size)
        return _from_26_6(self._face.get_kerning(li, ri).x)


def load_font(source: FontSource) -> FontFace:
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise FontLoadError("font data is empty")
        stream, name = io.BytesIO(bytes(source)), "<memory>"
    else:
        path = Path(source)
        if not path.is_file():
            raise FontLoadError(f"font file not found: {path}")
        stream, name = open(path, "rb"), str(path)
    try:
        with stream:
            face = freetype.Face(stream)
    except freetype.FT_Exception as e:
        raise FontLoadError(f"cannot load font {name}: {e}") from e
    logger.debug("loaded font %s (%s)", name, face.family_name)
    return FontFace(face, name)
