from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
from PIL import Image, UnidentifiedImageError
from .bitmap import PixelGrid
from .errors import ImageDecodeError, ImageTooLarge, InvalidOptions

ImageSource = Union[bytes, Path, str]

# Each decoded pixel becomes a Python tuple, so cap the grid size
DEFAULT_MAX_PIXELS = 40_000_000


def fit_to_panel(img: Image.Image, width: int, height: int) -> Image.Image:
    if width <= 0 or height <= 0:
        raise InvalidOptions(f"panel size must be positive (got {width}x{height})")
    # Center-crop to aspect ratio, then resize with high-quality filter
    src_w, src_h = img.size
    target_ratio = width / height
    src_ratio = src_w / src_h
    if src_ratio > target_ratio:
        # Wider than target: crop left/right
        new_w = max(1, int(src_h * target_ratio))
        offset = (src_w - new_w) // 2
        img = img.crop((offset, 0, offset + new_w, src_h))
    elif src_ratio < target_ratio:
        # Taller than target: crop top/bottom
        new_h = max(1, int(src_w / target_ratio))
        offset = (src_h - new_h) // 2
        img = img.crop((0, offset, src_w, offset + new_h))
    return img.resize((width, height), Image.Resampling.LANCZOS)


def check_pixels(width: int, height: int, max_pixels: Optional[int]) -> None:
    if max_pixels is not None and width * height > max_pixels:
        raise ImageTooLarge(
            f"image is {width}x{height} ({width * height} px), limit is {max_pixels} px"
        )


def open_image(
    source: ImageSource, max_pixels: Optional[int] = DEFAULT_MAX_PIXELS
) -> Image.Image:
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(BytesIO(source))
        else:
            img = Image.open(source)
    except Image.DecompressionBombError as e:
        raise ImageTooLarge(f"image too large to decode: {e}") from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"cannot decode image: {e}") from e
    # Header is parsed lazily; reject oversized images before decoding pixels
    check_pixels(img.width, img.height, max_pixels)
    try:
        img.load()
    except (OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"cannot decode image: {e}") from e
    return img


def to_pixel_grid(img: Image.Image) -> PixelGrid:
    has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
    mode = "RGBA" if has_alpha else "RGB"
    if img.mode != mode:
        img = img.convert(mode)
    width, height = img.size
    return PixelGrid.from_bytes(width, height, len(mode), img.tobytes())


def decode(
    source: ImageSource,
    size: Optional[tuple[int, int]] = None,
    max_pixels: Optional[int] = DEFAULT_MAX_PIXELS,
) -> PixelGrid:
    img = open_image(source, max_pixels)
    if size is not None and img.width and img.height:
        img = fit_to_panel(img, *size)
    return to_pixel_grid(img)
