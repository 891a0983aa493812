"""Little-endian cursor over an in-memory byte buffer."""

from __future__ import annotations

import struct

_MASK64 = (1 << 64) - 1
_MAX_LEB_BYTES = 10


def to_int64(value: int) -> int:
    """Wrap an integer to a signed 64-bit value."""
    value &= _MASK64
    return value - (1 << 64) if value >> 63 else value


class ParseError(ValueError):
    """Raised when binary data cannot be decoded."""


class EndOfDataError(ParseError, EOFError):
    """Raised when a read starts at the end of the data."""


class TruncatedDataError(ParseError):
    """Raised when a fixed-size record is cut short by the end of the data."""


class ULEB128OverflowError(ParseError):
    """Raised when a LEB128 value does not fit in 64 bits."""


class ULEB128TooLongError(ParseError):
    """Raised when a LEB128 value is longer than ten bytes."""


class ByteReader:
    """A seekable reader of little-endian integers, LEB128 values and records.

    Plain reads (``read_bytes`` and the fixed-width integer reads) that run
    past the end of the data are padded with zero bytes; a read that starts at
    the end raises :class:`EndOfDataError`. Records read with :meth:`unpack`
    must be complete.
    """

    def __init__(self, data):
        self._data = bytes(data)
        self._pos = 0

    @property
    def size(self) -> int:
        return len(self._data)

    @property
    def pos(self) -> int:
        return self._pos

    def has_more(self) -> bool:
        return self._pos < len(self._data)

    def _check_not_at_end(self) -> None:
        if self._pos >= len(self._data):
            raise EndOfDataError(f"unexpected end of data at offset {self._pos}")

    def read_byte(self) -> int:
        self._check_not_at_end()
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ParseError(f"negative read length {n}")
        self._check_not_at_end()
        chunk = self._data[self._pos:self._pos + n]
        self._pos += len(chunk)
        return chunk + bytes(n - len(chunk))

    def read_u16(self) -> int:
        return int.from_bytes(self.read_bytes(2), "little")

    def read_u32(self) -> int:
        return int.from_bytes(self.read_bytes(4), "little")

    def read_u64(self) -> int:
        return int.from_bytes(self.read_bytes(8), "little")

    def unpack(self, fmt: str) -> tuple:
        """Read a complete record laid out by a :mod:`struct` format.

        Little-endian byte order is used unless the format names another.
        """
        if not fmt or fmt[0] not in "@=<>!":
            fmt = "<" + fmt
        size = struct.calcsize(fmt)
        if size == 0:
            return ()
        available = len(self._data) - self._pos
        if available <= 0:
            raise EndOfDataError(f"unexpected end of data at offset {self._pos}")
        if available < size:
            self._pos = len(self._data)
            raise TruncatedDataError(
                f"record of {size} bytes truncated to {available} bytes"
            )
        values = struct.unpack_from(fmt, self._data, self._pos)
        self._pos += size
        return values

    def seek(self, offset: int) -> None:
        if offset < 0:
            raise ParseError(f"negative position {offset}")
        self._pos = offset

    def skip(self, n: int) -> None:
        self.seek(self._pos + n)

    def read_uleb128(self) -> int:
        result = 0
        shift = 0
        for _ in range(_MAX_LEB_BYTES):
            b = self.read_byte()
            if shift == 63 and b > 1:
                raise ULEB128OverflowError("ULEB128 overflow")
            result |= (b & 0x7F) << shift
            if not b & 0x80:
                return result
            shift += 7
        raise ULEB128TooLongError("ULEB128 too long")

    def read_sleb128(self) -> int:
        result = 0
        shift = 0
        last = 0
        for _ in range(_MAX_LEB_BYTES):
            b = self.read_byte()
            if shift == 63 and b > 1:
                raise ULEB128OverflowError("SLEB128 overflow")
            last = b
            result |= (b & 0x7F) << shift
            shift += 7
            if not b & 0x80:
                break
        if shift < 64 and last & 0x40:
            result |= -1 << shift
        return to_int64(result)