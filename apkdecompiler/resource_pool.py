"""Chunk headers and string pools of the binary resource table format."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .reader import ByteReader

CHUNK_HEADER_SIZE = 8
UTF8_FLAG = 1 << 8
_LONG_STRING_FLAG = 0x8000


class ResChunkType(IntEnum):
    NULL = 0x0000
    STRING_POOL = 0x0001
    TABLE = 0x0002
    XML = 0x0003

    XML_FIRST_CHUNK = 0x0100
    XML_START_NAMESPACE = 0x0100
    XML_END_NAMESPACE = 0x0101
    XML_START_ELEMENT = 0x0102
    XML_END_ELEMENT = 0x0103
    XML_CDATA = 0x0104

    XML_LAST_CHUNK = 0x017F
    XML_RESOURCE_MAP = 0x0180

    TABLE_PACKAGE = 0x0200
    TABLE_TYPE = 0x0201
    TABLE_TYPE_SPEC = 0x0202
    TABLE_LIBRARY = 0x0203
    TABLE_OVERLAY = 0x0204
    TABLE_OVERLAY_POLICY = 0x0205
    TABLE_STAGED_ALIAS = 0x0206


def _chunk_type(code: int) -> ResChunkType | int:
    try:
        return ResChunkType(code)
    except ValueError:
        return code


@dataclass(frozen=True)
class ChunkHeader:
    """The common header that starts every chunk."""

    type: ResChunkType | int
    header_size: int
    size: int

    @classmethod
    def read(cls, reader: ByteReader) -> ChunkHeader:
        chunk_type, header_size, size = reader.unpack("<HHI")
        return cls(_chunk_type(chunk_type), header_size, size)


@dataclass(frozen=True)
class StringPoolHeader:
    string_count: int = 0
    style_count: int = 0
    flags: int = 0
    strings_offset: int = 0
    styles_offset: int = 0

    @property
    def is_utf8(self) -> bool:
        return bool(self.flags & UTF8_FLAG)

    @classmethod
    def read(cls, reader: ByteReader) -> StringPoolHeader:
        return cls(*reader.unpack("<5I"))


@dataclass(frozen=True)
class PackageHeader:
    """The fixed part of a package chunk, following its chunk header."""

    package_id: int
    package_name: bytes
    type_string_offset: int
    last_public_type: int
    key_string_offset: int
    last_public_key: int
    type_id_offset: int

    @property
    def name(self) -> str:
        text = self.package_name.decode("utf-16-le", errors="replace")
        return text.split("\0", 1)[0]

    @classmethod
    def read(cls, reader: ByteReader) -> PackageHeader:
        return cls(*reader.unpack("<I256s5I"))


@dataclass
class StringPool:
    """A string pool chunk; strings are read lazily from the underlying data."""

    header: StringPoolHeader = field(default_factory=StringPoolHeader)
    string_offset: int = 0
    offsets: list[int] = field(default_factory=list)

    @classmethod
    def read(cls, reader: ByteReader) -> StringPool:
        """Read a pool whose chunk header has just been consumed."""
        pool_start = reader.pos - CHUNK_HEADER_SIZE
        header = StringPoolHeader.read(reader)
        offsets = list(reader.unpack(f"<{header.string_count}I"))
        return cls(header, pool_start + header.strings_offset, offsets)

    def get_string(self, reader: ByteReader, index: int) -> str:
        """Return string ``index``; missing and long strings come back empty."""
        if index >= self.header.string_count:
            return ""
        reader.seek(self.string_offset + self.offsets[index])
        length_field = reader.read_u16()
        length = length_field & 0xFF
        if length_field & _LONG_STRING_FLAG:
            return ""

        if not self.header.is_utf8:
            chars = bytearray()
            for _ in range(length):
                chars.append(reader.read_byte())
                reader.read_byte()
            return chars.decode("utf-8", errors="replace")

        return reader.read_bytes(length).decode("utf-8", errors="replace")