"""Conversion entry points.

Each function validates its options, runs the stages in order and returns a
:class:`~epd_raster.schemas.PackedBuffer`. Any stage failure propagates as a
:class:`~epd_raster.errors.ConversionError`; no partial buffer is returned.
"""

from __future__ import annotations
import logging
from typing import Any, Optional, Sequence, TypeVar, Union
from PIL import Image
from pydantic import BaseModel, ValidationError
from .bitmap import PixelGrid
from .decoder import (
    DEFAULT_MAX_PIXELS,
    ImageSource,
    check_pixels,
    decode,
    fit_to_panel,
    to_pixel_grid,
)
from .errors import InvalidOptions
from .fonts import FontFace, load_font
from .layout import layout
from .packing import check_bit_depth, pack, requantize_coverage
from .quantize import quantize
from .schemas import (
    BWR,
    BWRY,
    FourColor,
    GrayscaleN,
    LayoutOptions,
    Monochrome,
    PackedBuffer,
    Palette,
    QuantizationMode,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Source = Union[ImageSource, PixelGrid, Image.Image]


def _build(model: type[M], **values: Any) -> M:
    try:
        return model(**values)
    except ValidationError as e:
        raise InvalidOptions(str(e)) from e


def text_image(
    options: Optional[LayoutOptions] = None,
    font: Optional[FontFace] = None,
    **values: Any,
) -> PackedBuffer:
    """Render text into a packed grayscale buffer.

    Options come either as a ready :class:`LayoutOptions` or as keyword
    arguments for one. ``font`` may carry an already loaded face, in which
    case ``options.font`` is not read.
    """
    if options is None:
        options = _build(LayoutOptions, **values)
    if not options.text:
        raise InvalidOptions("required option `text` is missing")
    if font is None and not options.font:
        raise InvalidOptions("required option `font` is missing")
    bit_depth = check_bit_depth(options.bit_depth)
    if font is None:
        font = load_font(options.font)  # type: ignore[arg-type]

    bitmap = layout(options, font)
    logger.debug(
        "text image %dx%d packed at %d bpp", bitmap.width, bitmap.height, bit_depth
    )
    values_n = requantize_coverage(bitmap.pixels, bit_depth)
    return pack(values_n, bitmap.width, bitmap.height, bit_depth)


def _grid(
    source: Source, size: Optional[tuple[int, int]], max_pixels: Optional[int]
) -> PixelGrid:
    if isinstance(source, PixelGrid):
        if size is not None:
            raise InvalidOptions("panel fitting needs an encoded image, not a PixelGrid")
        return source
    if isinstance(source, Image.Image):
        check_pixels(source.width, source.height, max_pixels)
        if size is not None and source.width and source.height:
            source = fit_to_panel(source, *size)
        return to_pixel_grid(source)
    if not source:
        raise InvalidOptions("required image source is missing")
    return decode(source, size, max_pixels)


def convert_image(
    source: Source,
    mode: QuantizationMode,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PackedBuffer:
    if isinstance(mode, GrayscaleN):
        check_bit_depth(mode.depth)
    grid = _grid(source, size, max_pixels)
    values = quantize(grid, mode)
    logger.debug(
        "image %dx%d quantized as %s at %d bpp",
        grid.width, grid.height, mode.kind, mode.bit_depth,
    )
    return pack(values, grid.width, grid.height, mode.bit_depth)


def monochrome_image(
    source: Source,
    channel: Optional[int] = None,
    threshold: int = 128,
    dither: bool = False,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PackedBuffer:
    mode = _build(Monochrome, channel=channel, threshold=threshold, dither=dither)
    return convert_image(source, mode, size, max_pixels)


def quadcolor_image(
    source: Source,
    dither: bool = False,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PackedBuffer:
    return convert_image(source, FourColor(dither=dither), size, max_pixels)


def grayscale_image(
    source: Source,
    depth: int = 4,
    dither: bool = False,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PackedBuffer:
    check_bit_depth(depth)
    mode = _build(GrayscaleN, depth=depth, dither=dither)
    return convert_image(source, mode, size, max_pixels)


def palette_image(
    source: Source,
    colors: Sequence[int] = BWRY,
    dither: bool = False,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PackedBuffer:
    mode = _build(Palette, colors=list(colors), dither=dither)
    return convert_image(source, mode, size, max_pixels)


def palette_plane(
    source: Source,
    colors: Sequence[int] = BWR,
    index: int = 0,
    dither: bool = False,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PackedBuffer:
    """1-bit plane that is set where a pixel maps to ``colors[index]``.

    Tri-colour panels take one such plane per ink (black, red).
    """
    mode = _build(Palette, colors=list(colors), dither=dither)
    if not 0 <= index < len(mode.colors):
        raise InvalidOptions(f"palette index {index} out of range")
    grid = _grid(source, size, max_pixels)
    indices = quantize(grid, mode)
    plane = bytes(1 if i == index else 0 for i in indices)
    return pack(plane, grid.width, grid.height, 1)
