from __future__ import annotations
from pathlib import Path
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

BIT_DEPTHS = (1, 2, 4, 8)

# Nearest-colour palettes used by tri-colour and quad-colour e-paper panels
BWR = [0x000000, 0xFFFFFF, 0xFF0000]
BWRY = [0x000000, 0xFFFFFF, 0xFF0000, 0xFFFF00]


def row_stride(width: int, bit_depth: int) -> int:
    return (width * bit_depth + 7) // 8


class PackedBuffer(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    bit_depth: int
    data: bytes

    @property
    def row_stride(self) -> int:
        return row_stride(self.width, self.bit_depth)

    def as_tuple(self) -> tuple[int, int, bytes]:
        return self.width, self.height, self.data


class LayoutOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    font: Optional[Union[bytes, Path, str]] = None
    font_size: float = Field(16.0, gt=0)
    inverse: bool = False
    line_spacing: float = Field(0.0, ge=0)
    bit_depth: int = 1
    # Character drawn in place of code points the font lacks; blank when unset
    fallback: Optional[str] = Field(None, min_length=1, max_length=1)


class Monochrome(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["monochrome"] = "monochrome"
    # None selects luminance, otherwise an index into the pixel tuple
    channel: Optional[int] = Field(None, ge=0, le=3)
    threshold: int = Field(128, ge=0, le=256)
    dither: bool = False

    @property
    def bit_depth(self) -> int:
        return 1


class FourColor(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["four_color"] = "four_color"
    dither: bool = False

    @property
    def bit_depth(self) -> int:
        return 2


class GrayscaleN(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["grayscale"] = "grayscale"
    depth: int = 4
    dither: bool = False

    @property
    def bit_depth(self) -> int:
        return self.depth


class Palette(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["palette"] = "palette"
    colors: list[int] = Field(default_factory=lambda: list(BWR), min_length=1, max_length=256)
    dither: bool = False

    @property
    def bit_depth(self) -> int:
        for depth in BIT_DEPTHS:
            if len(self.colors) <= 1 << depth:
                return depth
        return 8


QuantizationMode = Annotated[
    Union[Monochrome, FourColor, GrayscaleN, Palette], Field(discriminator="kind")
]


class TextImageIn(BaseModel):
    text: str
    font: Optional[str] = None
    font_size: float = 16.0
    inverse: bool = False
    line_spacing: float = 0.0
    bit_depth: int = 1
    fallback: Optional[str] = None
