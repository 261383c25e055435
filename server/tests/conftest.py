import os
from io import BytesIO
from pathlib import Path
from typing import AsyncIterator, Optional
import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from epd_raster.fonts import RenderedGlyph

# Fixed-size glyph table: (width, rows, left, top, advance, coverage)
GLYPHS = {
    "H": (6, 10, 1, 10, 8.0, 255),
    "i": (2, 10, 1, 10, 4.0, 200),
    "j": (3, 12, -1, 9, 3.0, 150),
    " ": (0, 0, 0, 0, 4.0, 0),
    "A": (8, 10, 0, 10, 8.0, 100),
    "B": (8, 10, 0, 10, 8.0, 180),
    "\u00e9": (5, 12, 0, 12, 6.0, 90),
}

FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/Library/Fonts/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


class FakeOutline:
    def __init__(self, ch: str):
        self.ch = ch
        self.advance = GLYPHS[ch][4]

    def render(self) -> RenderedGlyph:
        width, rows, left, top, _, value = GLYPHS[self.ch]
        return RenderedGlyph(width, rows, left, top, bytes([value]) * (width * rows))


class FakeFont:
    """Stands in for a FreeType face with a handful of block glyphs."""

    def __init__(self, ascender: float = 12.0, descender: float = 4.0):
        self._ascender = ascender
        self._descender = descender
        self.kerning_pairs: dict[tuple[str, str], float] = {}
        self.requests: list[int] = []

    def outline_for(self, code_point: int, size: float) -> Optional[FakeOutline]:
        self.requests.append(code_point)
        ch = chr(code_point)
        if ch not in GLYPHS:
            return None
        return FakeOutline(ch)

    def ascender(self, size: float) -> float:
        return self._ascender

    def descender(self, size: float) -> float:
        return self._descender

    def kerning(self, left: int, right: int, size: float) -> float:
        return self.kerning_pairs.get((chr(left), chr(right)), 0.0)


@pytest.fixture()
def fake_font() -> FakeFont:
    return FakeFont()


@pytest.fixture()
def system_font() -> Path:
    env = os.environ.get("EPD_RASTER_TEST_FONT")
    for candidate in ([env] if env else []) + FONT_CANDIDATES:
        if Path(candidate).is_file():
            return Path(candidate)
    pytest.skip("no TrueType font available on this system")


def image_bytes(
    w: int = 16, h: int = 8, color=(128, 128, 128), mode: str = "RGB", fmt: str = "PNG"
) -> bytes:
    img = Image.new(mode, (w, h), color=color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
async def client() -> AsyncIterator[AsyncClient]:
    from epd_raster.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as ac:
        yield ac
