"""Reduce decoded pixels to N-bit levels or palette indices.

Every mode returns one value per pixel, row-major, as ``bytes``; packing into
display rows is left to :mod:`epd_raster.packing`.
"""

from __future__ import annotations
import logging
from typing import Callable, Sequence
from .bitmap import PixelGrid
from .errors import EmptyImage, InvalidOptions
from .packing import check_bit_depth
from .schemas import FourColor, GrayscaleN, Monochrome, Palette, QuantizationMode

logger = logging.getLogger(__name__)

# Floyd-Steinberg error weights as (dx, dy, numerator) over 16
_DIFFUSION = ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1))


def luminance(pixel: Sequence[int]) -> int:
    r, g, b = pixel[0], pixel[1], pixel[2]
    return min(255, int(0.299 * r + 0.587 * g + 0.114 * b + 0.5))


def _intensity_plane(grid: PixelGrid, channel: int | None) -> list[int]:
    if channel is None:
        return [luminance(p) for p in grid.pixels]
    if channel >= grid.channels:
        raise InvalidOptions(
            f"channel {channel} out of range for {grid.channels}-channel image"
        )
    return [p[channel] for p in grid.pixels]


def _diffuse(
    plane: list[int], width: int, height: int, level_of: Callable[[float], int],
    value_of: Callable[[int], float],
) -> bytes:
    work = [float(v) for v in plane]
    out = bytearray(width * height)
    for y in range(height):
        for x in range(width):
            i = y * width + x
            old = min(255.0, max(0.0, work[i]))
            level = level_of(old)
            out[i] = level
            err = old - value_of(level)
            if not err:
                continue
            for dx, dy, weight in _DIFFUSION:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and ny < height:
                    work[ny * width + nx] += err * weight / 16
    return bytes(out)


def _levels(plane: list[int], grid: PixelGrid, bits: int, dither: bool) -> bytes:
    count = 1 << bits
    top = count - 1

    def level_of(v: float) -> int:
        return min(int(v) * count // 256, top)

    if not dither:
        return bytes(level_of(v) for v in plane)
    # Reconstruct each level at its bucket centre so error stays unbiased
    return _diffuse(
        plane, grid.width, grid.height, level_of,
        lambda level: level * 255 / top if top else 0.0,
    )


def _monochrome(grid: PixelGrid, mode: Monochrome) -> bytes:
    plane = _intensity_plane(grid, mode.channel)
    threshold = mode.threshold
    if not mode.dither:
        return bytes(1 if v >= threshold else 0 for v in plane)
    return _diffuse(
        plane, grid.width, grid.height,
        lambda v: 1 if v >= threshold else 0,
        lambda level: 255.0 if level else 0.0,
    )


def _split_rgb(color: int) -> tuple[int, int, int]:
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def nearest_color(pixel: Sequence[float], colors: Sequence[tuple[int, int, int]]) -> int:
    best, best_dist = 0, None
    for i, (r, g, b) in enumerate(colors):
        dist = (pixel[0] - r) ** 2 + (pixel[1] - g) ** 2 + (pixel[2] - b) ** 2
        if best_dist is None or dist < best_dist:
            best, best_dist = i, dist
    return best


def _palette(grid: PixelGrid, mode: Palette) -> bytes:
    colors = [_split_rgb(c) for c in mode.colors]
    if not mode.dither:
        return bytes(nearest_color(p, colors) for p in grid.pixels)

    width, height = grid.width, grid.height
    work = [[float(c) for c in p[:3]] for p in grid.pixels]
    out = bytearray(width * height)
    for y in range(height):
        for x in range(width):
            i = y * width + x
            old = [min(255.0, max(0.0, c)) for c in work[i]]
            idx = nearest_color(old, colors)
            out[i] = idx
            err = [o - c for o, c in zip(old, colors[idx])]
            for dx, dy, weight in _DIFFUSION:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and ny < height:
                    target = work[ny * width + nx]
                    for c in range(3):
                        target[c] += err[c] * weight / 16
    return bytes(out)


def quantize(grid: PixelGrid, mode: QuantizationMode) -> bytes:
    if grid.width <= 0 or grid.height <= 0 or not grid.pixels:
        raise EmptyImage(f"image has no pixels ({grid.width}x{grid.height})")
    logger.debug("quantizing %dx%d image with %s", grid.width, grid.height, mode.kind)
    if isinstance(mode, Monochrome):
        return _monochrome(grid, mode)
    if isinstance(mode, FourColor):
        return _levels(_intensity_plane(grid, None), grid, 2, mode.dither)
    if isinstance(mode, GrayscaleN):
        bits = check_bit_depth(mode.depth)
        return _levels(_intensity_plane(grid, None), grid, bits, mode.dither)
    if isinstance(mode, Palette):
        return _palette(grid, mode)
    raise InvalidOptions(f"unsupported quantization mode: {mode!r}")
