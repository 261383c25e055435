from __future__ import annotations
import logging
from pathlib import Path
from typing import Literal, Optional
from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from ..config import settings
from ..errors import (
    ConversionError,
    EmptyImage,
    FontLoadError,
    GlyphNotFound,
    ImageDecodeError,
    ImageTooLarge,
    InvalidOptions,
)
from ..pipeline import (
    grayscale_image,
    monochrome_image,
    palette_image,
    palette_plane,
    quadcolor_image,
    text_image,
)
from ..schemas import BWR, BWRY, LayoutOptions, PackedBuffer, TextImageIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/convert", tags=["convert"])

ImageMode = Literal["monochrome", "four_color", "grayscale", "bwr", "bwry", "red_plane"]


def resolve_font(name: Optional[str]) -> Path:
    name = name or settings.default_font
    if not name:
        raise HTTPException(status_code=422, detail="font is required")
    root = settings.font_dir.resolve()
    path = (root / name).resolve()
    if root not in path.parents:
        raise HTTPException(status_code=400, detail="invalid font name")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="font not found")
    return path


def _status_for(exc: ConversionError) -> int:
    if isinstance(exc, ImageTooLarge):
        return 413
    if isinstance(exc, ImageDecodeError):
        return 415
    if isinstance(exc, (InvalidOptions, FontLoadError, EmptyImage, GlyphNotFound)):
        return 422
    return 500


def packed_response(request: Request, packed: PackedBuffer) -> Response:
    # Implement Range support (bytes= start-end)
    range_header: Optional[str] = request.headers.get("range")
    data = packed.data
    total_size = len(data)
    start = 0
    end = total_size - 1
    status_code = 200
    headers = {
        "Accept-Ranges": "bytes",
        "X-Image-Width": str(packed.width),
        "X-Image-Height": str(packed.height),
        "X-Bit-Depth": str(packed.bit_depth),
    }
    if range_header and range_header.startswith("bytes="):
        try:
            range_spec = range_header.split("=", 1)[1]
            s, e = range_spec.split("-")
            if s:
                start = int(s)
                end = int(e) if e else total_size - 1
            else:
                # Suffix form: the last N bytes
                suffix = int(e)
                if suffix <= 0:
                    raise ValueError("bad range")
                start = max(0, total_size - suffix)
                end = total_size - 1
            if start < 0 or end < start or end >= total_size:
                raise ValueError("bad range")
        except ValueError:
            raise HTTPException(status_code=416, detail="invalid range")
        status_code = 206
        headers["Content-Range"] = f"bytes {start}-{end}/{total_size}"

    chunk = memoryview(data)[start : end + 1]
    return Response(
        content=chunk.tobytes(),
        media_type="application/octet-stream",
        status_code=status_code,
        headers=headers,
    )


@router.post("/text")
async def convert_text(request: Request, payload: TextImageIn):
    font_path = resolve_font(payload.font)
    try:
        options = LayoutOptions(
            text=payload.text,
            font=font_path,
            font_size=payload.font_size,
            inverse=payload.inverse,
            line_spacing=payload.line_spacing,
            bit_depth=payload.bit_depth,
            fallback=payload.fallback,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    try:
        packed = await run_in_threadpool(text_image, options)
    except ConversionError as e:
        logger.info("text conversion failed: %s", e)
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    return packed_response(request, packed)


@router.post("/image")
async def convert_image(
    request: Request,
    mode: ImageMode = "monochrome",
    channel: Optional[int] = None,
    depth: int = 4,
    dither: bool = False,
    width: Optional[int] = None,
    height: Optional[int] = None,
):
    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="empty request body")
    if len(body) > settings.max_image_bytes:
        raise HTTPException(status_code=413, detail="image too large")
    if (width is None) != (height is None):
        raise HTTPException(status_code=422, detail="width and height go together")
    size = (width, height) if width is not None and height is not None else None
    common = dict(dither=dither, size=size, max_pixels=settings.max_image_pixels)

    try:
        if mode == "monochrome":
            packed = await run_in_threadpool(monochrome_image, body, channel=channel, **common)
        elif mode == "four_color":
            packed = await run_in_threadpool(quadcolor_image, body, **common)
        elif mode == "grayscale":
            packed = await run_in_threadpool(grayscale_image, body, depth=depth, **common)
        elif mode == "bwr":
            packed = await run_in_threadpool(palette_image, body, BWR, **common)
        elif mode == "bwry":
            packed = await run_in_threadpool(palette_image, body, BWRY, **common)
        else:
            packed = await run_in_threadpool(palette_plane, body, BWR, index=2, **common)
    except ConversionError as e:
        logger.info("image conversion (%s) failed: %s", mode, e)
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    return packed_response(request, packed)
