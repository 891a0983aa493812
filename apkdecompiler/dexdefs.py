"""Fixed-layout records of the dex file format."""

from __future__ import annotations

from dataclasses import dataclass, field

from .reader import ByteReader

LE_CONSTANT = 0x12345678
BE_CONSTANT = 0x78563412
DEX_HEADER_SIZE = 0x70
MAGIC = 0x0000000A786564
NO_INDEX = 0xFFFFFFFF


@dataclass(frozen=True)
class Table:
    """Size and file offset of a section of the dex file."""

    size: int
    offset: int


@dataclass(frozen=True)
class DexHeader:
    magic: int
    checksum: int
    signature: bytes
    file_size: int
    header_size: int
    endian_tag: int
    links: Table
    map_off: int
    string_ids: Table
    type_ids: Table
    proto_ids: Table
    field_ids: Table
    method_ids: Table
    class_defs: Table
    data: Table

    @classmethod
    def read(cls, reader: ByteReader) -> DexHeader:
        values = reader.unpack("<QI20sIII" + "II" + "I" + "II" * 7)
        magic, checksum, signature, file_size, header_size, endian_tag = values[:6]
        links = Table(values[6], values[7])
        pairs = iter(values[9:])
        tables = [Table(size, offset) for size, offset in zip(pairs, pairs)]
        return cls(
            magic, checksum, signature, file_size, header_size, endian_tag,
            links, values[8], *tables,
        )


@dataclass(frozen=True)
class ClassDef:
    class_idx: int
    access_flags: int
    superclass_idx: int
    interfaces_offset: int
    source_file_idx: int
    annotations_offset: int
    class_data_offset: int
    static_values_offset: int

    @classmethod
    def read(cls, reader: ByteReader) -> ClassDef:
        return cls(*reader.unpack("<8I"))


@dataclass(frozen=True)
class CodeItem:
    """A method's code header and its raw instruction words."""

    register_size: int = 0
    ins_size: int = 0
    outs_size: int = 0
    tries_size: int = 0
    debug_info_off: int = 0
    insns_size: int = 0
    payload: bytes = b""

    @classmethod
    def read(cls, reader: ByteReader) -> CodeItem:
        header = reader.unpack("<HHHHII")
        insns_size = header[5]
        payload = reader.read_bytes((insns_size * 2) & 0xFFFFFFFF)
        return cls(*header, payload=payload)


@dataclass(frozen=True)
class FieldDef:
    class_idx: int
    type_idx: int
    name_idx: int

    @classmethod
    def read(cls, reader: ByteReader) -> FieldDef:
        return cls(*reader.unpack("<HHI"))


@dataclass(frozen=True)
class MethodDef:
    class_idx: int
    proto_idx: int
    name_idx: int

    @classmethod
    def read(cls, reader: ByteReader) -> MethodDef:
        return cls(*reader.unpack("<HHI"))


@dataclass(frozen=True)
class ProtoDef:
    shorty_idx: int
    return_type_idx: int
    params_offset: int

    @classmethod
    def read(cls, reader: ByteReader) -> ProtoDef:
        return cls(*reader.unpack("<III"))


@dataclass
class MethodProtoDef:
    """A method prototype with its parameter type indices resolved."""

    shorty_idx: int = 0
    return_type_idx: int = 0
    params: list[int] = field(default_factory=list)
    params_string: str = ""

    @classmethod
    def read(cls, reader: ByteReader) -> MethodProtoDef:
        count = reader.read_u32()
        return cls(params=[reader.read_u16() for _ in range(count)])


@dataclass(frozen=True)
class StringDef:
    data: bytes

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    @classmethod
    def read(cls, reader: ByteReader) -> StringDef:
        size = reader.read_uleb128()
        return cls(reader.read_bytes(size))


def read_string_offset(reader: ByteReader) -> int:
    """Read one entry of the string id table."""
    return reader.read_u32()


@dataclass(frozen=True)
class AnnotationsDirectory:
    class_annotations: int
    fields_size: int
    methods_size: int
    parameters_size: int


@dataclass(frozen=True)
class AnnotationTable:
    index: int
    offset: int


def _read_tables(reader: ByteReader, count: int) -> list[AnnotationTable]:
    values = iter(reader.unpack(f"<{2 * count}I"))
    return [AnnotationTable(index, offset) for index, offset in zip(values, values)]


@dataclass(frozen=True)
class AnnotationDef:
    directory: AnnotationsDirectory
    fields: list[AnnotationTable]
    methods: list[AnnotationTable]
    parameters: list[AnnotationTable]

    @classmethod
    def read(cls, reader: ByteReader) -> AnnotationDef:
        directory = AnnotationsDirectory(*reader.unpack("<4I"))
        fields = _read_tables(reader, directory.fields_size)
        methods = _read_tables(reader, directory.methods_size)
        parameters = _read_tables(reader, directory.parameters_size)
        return cls(directory, fields, methods, parameters)


@dataclass(frozen=True)
class AnnotationSetDef:
    size: int
    offsets: list[int]

    @classmethod
    def read(cls, reader: ByteReader) -> AnnotationSetDef:
        (size,) = reader.unpack("<I")
        offsets = list(reader.unpack(f"<{size}I"))
        return cls(size, offsets)