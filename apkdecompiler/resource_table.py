"""String resources of a compiled resource table."""

from __future__ import annotations

from dataclasses import dataclass, field

from .reader import ByteReader, EndOfDataError, ParseError
from .resource_pool import (
    CHUNK_HEADER_SIZE,
    ChunkHeader,
    PackageHeader,
    ResChunkType,
    StringPool,
)

FLAG_SPARSE = 0x01
FLAG_OFFSET16 = 0x02
FLAG_COMPLEX = 0x0001
FLAG_COMPACT = 0x0008

_STRING_TYPE_NAME = "string"


class ResourceFormatError(ParseError):
    """Raised when a resource table is malformed."""


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _next_chunk(reader: ByteReader) -> tuple[int, ChunkHeader] | None:
    offset = reader.pos
    try:
        header = ChunkHeader.read(reader)
    except EndOfDataError:
        return None
    if header.size == 0:
        raise ResourceFormatError(f"chunk of size 0 at offset {offset}")
    return offset, header


@dataclass(frozen=True)
class TypeEntryOffset:
    id: int
    offset: int


@dataclass
class TypeEntry:
    """A decoded entry of a type chunk; ``key`` is -1 when the entry is absent."""

    size: int = 0
    flags: int = 0
    data_type: int = 0
    data: int = 0
    key: int = -1

    @property
    def is_complex(self) -> bool:
        return bool(self.flags & FLAG_COMPLEX)

    @property
    def is_compact(self) -> bool:
        return bool(self.flags & FLAG_COMPACT)


@dataclass
class ResTypeChunk:
    """A type chunk: the offsets of its entries within the chunk."""

    id: int
    flags: int
    reserved: int
    entry_count: int
    entries_offset: int
    config_size: int
    entries_start: int
    entries: list[TypeEntryOffset] = field(default_factory=list)

    @property
    def is_sparse(self) -> bool:
        return bool(self.flags & FLAG_SPARSE)

    @property
    def is_offset16(self) -> bool:
        return bool(self.flags & FLAG_OFFSET16)

    @classmethod
    def read(cls, reader: ByteReader, chunk_end: int) -> ResTypeChunk:
        """Read a type chunk whose chunk header has just been consumed."""
        chunk_start = reader.pos - CHUNK_HEADER_SIZE
        type_id, flags, reserved, count, entries_offset, config_size = reader.unpack("<BBHIII")
        reader.seek(reader.pos + ((config_size - 4) & 0xFFFFFFFF))

        chunk = cls(
            id=type_id,
            flags=flags,
            reserved=reserved,
            entry_count=count,
            entries_offset=entries_offset,
            config_size=config_size,
            entries_start=chunk_start + entries_offset,
        )
        if count and (
            count & 0x80000000
            or reader.pos >= chunk_end - 2
            or count > chunk_end - reader.pos
        ):
            raise ResourceFormatError("invalid offset, probability of obfuscation")

        entries = [TypeEntryOffset(0, 0) for _ in range(count)]
        for i in range(count):
            if reader.pos >= chunk_end - 2:
                raise ResourceFormatError("invalid offset, probability of obfuscation")
            index = i
            if chunk.is_offset16:
                offset = reader.read_u16()
            elif chunk.is_sparse:
                index = reader.read_u16()
                offset = (reader.read_u16() * 4) & 0xFFFF
            else:
                offset = _to_int32(reader.read_u32())
            if index >= count:
                raise ResourceFormatError(f"sparse entry index {index} out of range")
            entries[index] = TypeEntryOffset(index, offset)
        chunk.entries = entries
        return chunk

    def get_entry(self, reader: ByteReader, index: int, chunk_end: int) -> TypeEntry:
        """Decode entry ``index``; an entry cut off by ``chunk_end`` has key -1."""
        entry_offset = self.entries[index]
        reader.seek(entry_offset.offset + self.entries_start)
        size, flags = reader.unpack("<HH")
        entry = TypeEntry(size=size, flags=flags)
        if reader.pos >= chunk_end:
            return entry

        key = size if entry.is_compact else reader.read_u32()

        if entry.is_complex:
            entry.key = key
        elif entry.is_compact:
            entry.data_type = flags >> 8
            entry.data = reader.read_u32()
            entry.key = key
        else:
            reader.read_u16()
            reader.read_byte()
            entry.data_type = reader.read_byte()
            entry.data = reader.read_u32()
            entry.key = key
        return entry


@dataclass
class ResourceTable:
    """String resources of a resource table, by name and by resource id."""

    strings: StringPool = field(default_factory=StringPool)
    strings_by_id: dict[int, str] = field(default_factory=dict)
    strings_by_name: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, reader: ByteReader) -> ResourceTable:
        header = ChunkHeader.read(reader)
        if header.type != ResChunkType.TABLE:
            raise ResourceFormatError("invalid type")
        reader.unpack("<I")  # package count

        table = cls()
        while (chunk := _next_chunk(reader)) is not None:
            chunk_offset, header = chunk
            if header.type == ResChunkType.STRING_POOL:
                table.strings = StringPool.read(reader)
            elif header.type == ResChunkType.TABLE_PACKAGE:
                package = PackageHeader.read(reader)
                table._parse_package(reader, chunk_offset, package)
            reader.seek(chunk_offset + header.size)
        return table

    @staticmethod
    def _read_pool_at(reader: ByteReader, offset: int) -> StringPool:
        reader.seek(offset)
        header = ChunkHeader.read(reader)
        pool = StringPool.read(reader)
        reader.seek(offset + header.size)
        return pool

    def _parse_package(self, reader: ByteReader, chunk_offset: int, package: PackageHeader) -> None:
        type_strings = StringPool()
        key_strings = StringPool()
        if package.type_string_offset != 0:
            type_strings = self._read_pool_at(reader, chunk_offset + package.type_string_offset)
        if package.key_string_offset != 0:
            key_strings = self._read_pool_at(reader, chunk_offset + package.key_string_offset)

        while (chunk := _next_chunk(reader)) is not None:
            offset, header = chunk
            chunk_end = offset + header.size
            if header.type == ResChunkType.TABLE_TYPE:
                type_chunk = ResTypeChunk.read(reader, chunk_end)
                self._parse_type_chunk(
                    reader, package, type_strings, key_strings, type_chunk, chunk_end
                )
            reader.seek(chunk_end)

    def _parse_type_chunk(
        self,
        reader: ByteReader,
        package: PackageHeader,
        type_strings: StringPool,
        key_strings: StringPool,
        chunk: ResTypeChunk,
        chunk_end: int,
    ) -> None:
        if type_strings.get_string(reader, (chunk.id - 1) & 0xFF) != _STRING_TYPE_NAME:
            return

        for i, entry_offset in enumerate(chunk.entries):
            entry = chunk.get_entry(reader, i, chunk_end)
            if entry.key == -1:
                continue
            name = key_strings.get_string(reader, entry.key & 0xFFFFFFFF)
            if not name:
                continue
            value = self.strings.get_string(reader, entry.data)
            resource_id = (package.package_id << 24 | chunk.id << 16 | entry_offset.id) & 0xFFFFFFFF
            self.strings_by_name[name] = value
            self.strings_by_id[resource_id] = value