import pytest

from apkdecompiler.reader import (
    ByteReader,
    EndOfDataError,
    ParseError,
    TruncatedDataError,
    ULEB128OverflowError,
)


@pytest.mark.parametrize(
    "data, expected",
    [
        (bytes([0x00]), 0),
        (bytes([0x2A]), 42),
        (bytes([0xE5, 0x8E, 0x26]), 624485),
        (bytes([0x7F]), 127),
    ],
)
def test_read_uleb128(data, expected):
    assert ByteReader(data).read_uleb128() == expected


@pytest.mark.parametrize(
    "data",
    [
        bytes([0x80] * 9 + [0x02]),
        bytes([0x80]),
    ],
)
def test_read_uleb128_errors(data):
    with pytest.raises(ParseError):
        ByteReader(data).read_uleb128()


def test_read_uleb128_overflow_kind():
    with pytest.raises(ULEB128OverflowError):
        ByteReader(bytes([0x80] * 9 + [0x02])).read_uleb128()


@pytest.mark.parametrize(
    "data, expected",
    [
        (bytes([0x00]), 0),
        (bytes([0x2A]), 42),
        (bytes([0x7E]), -2),
        (bytes([0xE5, 0x00]), 101),
        (bytes([0x9B, 0x7F]), -101),
        (bytes([0x3F]), 63),
        (bytes([0x40]), -64),
    ],
)
def test_read_sleb128(data, expected):
    assert ByteReader(data).read_sleb128() == expected


@pytest.mark.parametrize(
    "data",
    [
        bytes([0x80]),
        bytes([0x80] * 9 + [0x02]),
    ],
)
def test_read_sleb128_errors(data):
    with pytest.raises(ParseError):
        ByteReader(data).read_sleb128()


def test_leb128_consumes_exact_bytes():
    reader = ByteReader(bytes([0xE5, 0x8E, 0x26, 0x2A]))
    assert reader.read_uleb128() == 624485
    assert reader.pos == 3
    assert reader.read_uleb128() == 42


def test_fixed_width_little_endian():
    reader = ByteReader(bytes(range(1, 15)))
    assert reader.read_u16() == 0x0201
    assert reader.read_u32() == 0x06050403
    assert reader.read_u64() == 0x0E0D0C0B0A090807
    assert not reader.has_more()


def test_short_read_is_zero_padded():
    reader = ByteReader(b"\x01\x02")
    assert reader.read_u32() == 0x0201
    assert reader.pos == 2


def test_read_at_end_raises():
    reader = ByteReader(b"\x01")
    reader.read_byte()
    with pytest.raises(EndOfDataError):
        reader.read_byte()
    with pytest.raises(EndOfDataError):
        reader.read_u16()


def test_read_bytes_returns_requested_length():
    reader = ByteReader(b"abcdef")
    assert reader.read_bytes(3) == b"abc"
    assert reader.read_bytes(5) == b"def\x00\x00"


def test_unpack_record():
    reader = ByteReader(b"\x01\x00\x02\x00\x00\x00\xff")
    assert reader.unpack("HI") == (1, 2)
    assert reader.pos == 6


def test_unpack_truncated():
    reader = ByteReader(b"\x01\x00\x02")
    with pytest.raises(TruncatedDataError):
        reader.unpack("HI")


def test_unpack_at_end():
    reader = ByteReader(b"")
    with pytest.raises(EndOfDataError):
        reader.unpack("I")


def test_unpack_empty_format_at_end():
    assert ByteReader(b"").unpack("") == ()


def test_seek_and_skip():
    reader = ByteReader(b"\x00\x01\x02\x03\x04")
    reader.seek(3)
    assert reader.read_byte() == 3
    reader.seek(0)
    reader.skip(2)
    assert reader.read_byte() == 2
    assert reader.has_more()


def test_seek_past_end_then_read_fails():
    reader = ByteReader(b"\x00")
    reader.seek(10)
    assert not reader.has_more()
    with pytest.raises(EndOfDataError):
        reader.read_byte()


def test_negative_seek_rejected():
    reader = ByteReader(b"\x00\x01")
    with pytest.raises(ParseError):
        reader.seek(-1)
    reader.seek(1)
    with pytest.raises(ParseError):
        reader.skip(-2)