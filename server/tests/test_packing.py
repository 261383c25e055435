import pytest
from epd_raster.errors import InvalidBitDepth, InvalidOptions
from epd_raster.packing import pack, requantize_coverage, unpack
from epd_raster.schemas import PackedBuffer


@pytest.mark.parametrize("bit_depth", [1, 2, 4, 8])
def test_output_length_matches_row_stride(bit_depth):
    for width in range(1, 18):
        for height in (1, 2, 5):
            packed = pack(bytes(width * height), width, height, bit_depth)
            assert len(packed.data) == height * ((width * bit_depth + 7) // 8)
            assert packed.row_stride * height == len(packed.data)


def test_one_bit_rows_pad_low_bits_with_zero():
    # 5 pixels per row fit one byte, leaving 3 zero pad bits
    values = bytes([1, 0, 1, 1, 1]) * 3
    packed = pack(values, 5, 3, 1)
    assert packed.data == bytes([0b10111000] * 3)


def test_rows_start_on_byte_boundary():
    values = bytes([1] * 9 + [0] * 8 + [1])
    packed = pack(values, 9, 2, 1)
    assert packed.data == bytes([0xFF, 0x80, 0x00, 0x80])


def test_two_bit_msb_first():
    packed = pack(bytes([3, 2, 1, 0, 3]), 5, 1, 2)
    assert packed.data == bytes([0b11100100, 0b11000000])


def test_four_bit_nibbles():
    packed = pack(bytes([0xA, 0xB, 0xC]), 3, 1, 4)
    assert packed.data == bytes([0xAB, 0xC0])
    assert packed.as_tuple() == (3, 1, bytes([0xAB, 0xC0]))


def test_eight_bit_is_passthrough():
    values = bytes(range(12))
    assert pack(values, 4, 3, 8).data == values


def test_values_wider_than_depth_are_rejected():
    with pytest.raises(InvalidOptions):
        pack(bytes([5, 1]), 2, 1, 2)
    with pytest.raises(InvalidOptions):
        pack(bytes([0xFF, 0x01]), 2, 1, 1)
    with pytest.raises(InvalidOptions):
        pack([0, -1], 2, 1, 4)
    assert pack(bytes([3, 1]), 2, 1, 2).data == bytes([0b11010000])


@pytest.mark.parametrize("bit_depth", [0, 3, 5, 16, True, "4"])
def test_invalid_bit_depth(bit_depth):
    with pytest.raises(InvalidBitDepth):
        pack(bytes(4), 2, 2, bit_depth)


def test_value_count_must_match_size():
    with pytest.raises(InvalidOptions):
        pack(bytes(5), 2, 2, 1)


@pytest.mark.parametrize(
    "width,bit_depth,data",
    [
        (5, 1, bytes([0b10111000, 0b01010000])),
        (3, 2, bytes([0b11011000, 0b00100100])),
        (3, 4, bytes([0x12, 0x30, 0xFE, 0xD0])),
        (2, 8, bytes([1, 2, 3, 4])),
    ],
)
def test_pack_after_unpack_is_identity(width, bit_depth, data):
    packed = PackedBuffer(width=width, height=2, bit_depth=bit_depth, data=data)
    values = unpack(packed)
    assert len(values) == width * 2
    assert pack(values, width, 2, bit_depth).data == data


def test_unpack_rejects_short_buffer():
    packed = PackedBuffer(width=9, height=2, bit_depth=1, data=bytes(3))
    with pytest.raises(InvalidOptions):
        unpack(packed)


def test_requantize_coverage_keeps_high_bits():
    assert requantize_coverage(bytes([0, 127, 128, 255]), 1) == bytes([0, 0, 1, 1])
    assert requantize_coverage(bytes([0x3F, 0x40, 0xFF]), 2) == bytes([0, 1, 3])
    assert requantize_coverage(bytes([0x1F, 0xF0]), 4) == bytes([1, 15])
    assert requantize_coverage(bytes([7, 200]), 8) == bytes([7, 200])
