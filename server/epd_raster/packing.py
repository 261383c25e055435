from __future__ import annotations
from typing import Sequence
from .errors import InvalidBitDepth, InvalidOptions
from .schemas import BIT_DEPTHS, PackedBuffer, row_stride


def check_bit_depth(bit_depth: object) -> int:
    if isinstance(bit_depth, bool) or bit_depth not in BIT_DEPTHS:
        raise InvalidBitDepth(bit_depth)
    return int(bit_depth)  # type: ignore[call-overload]


def pack(
    values: Sequence[int], width: int, height: int, bit_depth: int
) -> PackedBuffer:
    # Values are row-major, one per pixel; rows start on a byte boundary and
    # the last byte of a row is zero-padded in its low bits.
    bit_depth = check_bit_depth(bit_depth)
    if len(values) != width * height:
        raise InvalidOptions(
            f"expected {width * height} values for {width}x{height}, got {len(values)}"
        )
    mask = (1 << bit_depth) - 1
    if values and (min(values) < 0 or max(values) > mask):
        raise InvalidOptions(
            f"values must lie in 0..{mask} at {bit_depth} bpp, "
            f"got {min(values)}..{max(values)}"
        )
    per_byte = 8 // bit_depth
    buf = bytearray()
    for y in range(height):
        row = values[y * width : (y + 1) * width]
        for i in range(0, width, per_byte):
            chunk = row[i : i + per_byte]
            n = 0
            for v in chunk:
                n = (n << bit_depth) | v
            n <<= (per_byte - len(chunk)) * bit_depth
            buf.append(n)
    return PackedBuffer(width=width, height=height, bit_depth=bit_depth, data=bytes(buf))


def unpack(packed: PackedBuffer) -> bytes:
    bit_depth = check_bit_depth(packed.bit_depth)
    stride = row_stride(packed.width, bit_depth)
    if len(packed.data) != stride * packed.height:
        raise InvalidOptions(
            f"buffer holds {len(packed.data)} bytes, expected {stride * packed.height}"
        )
    mask = (1 << bit_depth) - 1
    out = bytearray()
    for y in range(packed.height):
        row = packed.data[y * stride : (y + 1) * stride]
        for x in range(packed.width):
            bit = x * bit_depth
            shift = 8 - bit_depth - (bit % 8)
            out.append((row[bit // 8] >> shift) & mask)
    return bytes(out)


def requantize_coverage(pixels: bytes, bit_depth: int) -> bytes:
    """Keep the top ``bit_depth`` bits of each 8-bit coverage value."""
    bit_depth = check_bit_depth(bit_depth)
    shift = 8 - bit_depth
    if shift == 0:
        return bytes(pixels)
    return bytes(v >> shift for v in pixels)
