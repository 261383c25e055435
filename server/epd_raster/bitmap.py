from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class CoverageBitmap:
    """Row-major grid of 8-bit coverage values."""

    width: int
    height: int
    pixels: bytes

    @classmethod
    def blank(cls, width: int = 1, height: int = 1) -> "CoverageBitmap":
        return cls(width, height, bytes(width * height))

    def row(self, y: int) -> bytes:
        start = y * self.width
        return self.pixels[start : start + self.width]

    def inverted(self) -> "CoverageBitmap":
        return CoverageBitmap(
            self.width, self.height, bytes(255 - v for v in self.pixels)
        )


@dataclass(frozen=True)
class GlyphMetrics:
    # bearing_y is measured up from the baseline to the top bitmap row
    advance: float
    bearing_x: int
    bearing_y: int
    width: int
    height: int


@dataclass(frozen=True)
class PixelGrid:
    """Decoded image pixels, RGB or RGBA tuples in row-major order."""

    width: int
    height: int
    channels: int
    pixels: tuple[tuple[int, ...], ...]

    @classmethod
    def from_bytes(
        cls, width: int, height: int, channels: int, raw: bytes
    ) -> "PixelGrid":
        pixels = tuple(
            tuple(raw[i : i + channels]) for i in range(0, len(raw), channels)
        )
        return cls(width, height, channels, pixels)

    @classmethod
    def filled(
        cls, width: int, height: int, color: tuple[int, ...]
    ) -> "PixelGrid":
        return cls(width, height, len(color), (tuple(color),) * (width * height))
