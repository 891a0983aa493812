import struct

import pytest

from apkdecompiler.dexdefs import (
    DEX_HEADER_SIZE,
    LE_CONSTANT,
    MAGIC,
    AnnotationDef,
    AnnotationSetDef,
    AnnotationTable,
    ClassDef,
    CodeItem,
    DexHeader,
    FieldDef,
    MethodDef,
    MethodProtoDef,
    ProtoDef,
    StringDef,
    read_string_offset,
)
from apkdecompiler.reader import ByteReader, EndOfDataError, TruncatedDataError

HEADER_HEX = "".join(
    [
        "6465780A30333500A5712C260F97ACA2",
        "8F7EF7539794E4F31065394C97FC957F",
        "00A58600700000007856341200000000",
        "0000000024A486002FE1000070000000",
        "812500002C85030003380000301B0400",
        "8C7C000054BB0600C2FF0000B49F0A00",
        "DA1E0000C49D1200FC2B700004791600",
    ]
)


def test_dex_header_from_source_sample():
    reader = ByteReader(bytes.fromhex(HEADER_HEX))
    header = DexHeader.read(reader)
    assert header.magic & MAGIC == MAGIC
    assert header.endian_tag == LE_CONSTANT
    assert header.header_size == DEX_HEADER_SIZE
    assert header.string_ids.offset == 0x70
    assert header.string_ids.size == 0xE12F
    assert reader.pos == DEX_HEADER_SIZE


def test_dex_header_truncated():
    with pytest.raises(TruncatedDataError):
        DexHeader.read(ByteReader(bytes.fromhex(HEADER_HEX)[:50]))


def test_class_def_round_trip():
    values = (3, 1, 7, 0, 0xFFFFFFFF, 0x100, 0x200, 0)
    reader = ByteReader(struct.pack("<8I", *values))
    class_def = ClassDef.read(reader)
    assert (
        class_def.class_idx,
        class_def.access_flags,
        class_def.superclass_idx,
        class_def.interfaces_offset,
        class_def.source_file_idx,
        class_def.annotations_offset,
        class_def.class_data_offset,
        class_def.static_values_offset,
    ) == values
    assert reader.pos == 32


def test_class_def_at_end():
    with pytest.raises(EndOfDataError):
        ClassDef.read(ByteReader(b""))


def test_field_and_method_defs():
    data = struct.pack("<HHI", 4, 9, 1234) + struct.pack("<HHI", 5, 2, 77)
    reader = ByteReader(data)
    assert FieldDef.read(reader) == FieldDef(4, 9, 1234)
    assert MethodDef.read(reader) == MethodDef(5, 2, 77)


def test_proto_def():
    reader = ByteReader(struct.pack("<III", 10, 11, 0x40))
    proto = ProtoDef.read(reader)
    assert (proto.shorty_idx, proto.return_type_idx, proto.params_offset) == (10, 11, 0x40)


def test_method_proto_def_params():
    reader = ByteReader(struct.pack("<I3H", 3, 8, 1, 6))
    proto = MethodProtoDef.read(reader)
    assert proto.params == [8, 1, 6]
    assert proto.params_string == ""
    assert proto.return_type_idx == 0


def test_code_item_payload():
    payload = b"\x12\x01\x0f\x01"
    reader = ByteReader(struct.pack("<HHHHII", 2, 1, 0, 0, 0, 2) + payload + b"\xaa")
    code = CodeItem.read(reader)
    assert code.payload == payload
    assert code.register_size == 2
    assert code.insns_size == 2
    assert reader.read_byte() == 0xAA


def test_code_item_default_is_empty():
    assert CodeItem().payload == b""


def test_string_def():
    reader = ByteReader(b"\x05hello\x00")
    string_def = StringDef.read(reader)
    assert string_def.data == b"hello"
    assert string_def.text == "hello"


def test_read_string_offset():
    reader = ByteReader(struct.pack("<II", 0x70, 0x99))
    assert read_string_offset(reader) == 0x70
    assert read_string_offset(reader) == 0x99


def test_annotation_def():
    data = struct.pack("<4I", 0x300, 1, 2, 0)
    data += struct.pack("<2I", 5, 0x400)
    data += struct.pack("<4I", 6, 0x410, 7, 0)
    annotation_def = AnnotationDef.read(ByteReader(data))
    assert annotation_def.directory.class_annotations == 0x300
    assert annotation_def.fields == [AnnotationTable(5, 0x400)]
    assert annotation_def.methods == [AnnotationTable(6, 0x410), AnnotationTable(7, 0)]
    assert annotation_def.parameters == []


def test_annotation_def_truncated_tables():
    data = struct.pack("<4I", 0, 2, 0, 0) + struct.pack("<2I", 1, 2)
    with pytest.raises(TruncatedDataError):
        AnnotationDef.read(ByteReader(data))


def test_annotation_set_def():
    reader = ByteReader(struct.pack("<3I", 2, 0x500, 0x600))
    annotation_set = AnnotationSetDef.read(reader)
    assert annotation_set.size == 2
    assert annotation_set.offsets == [0x500, 0x600]