import struct

import pytest

from apkdecompiler.dexdefs import ClassDef, CodeItem
from apkdecompiler.rawclass import (
    RawClass,
    RawField,
    RawMethod,
    read_raw_class,
    read_raw_field,
    read_raw_method,
)
from apkdecompiler.rawvalue import ValueType
from apkdecompiler.reader import ByteReader, ParseError

CLASS_DATA_AT = 16
CODE_AT = 48
STATIC_VALUES_AT = 80
PAYLOAD = bytes([0x0E, 0x00, 0x00, 0x00])


def _class_def(class_data_offset, static_values_offset=0):
    return ClassDef(
        class_idx=1,
        access_flags=1,
        superclass_idx=2,
        interfaces_offset=0,
        source_file_idx=0xFFFFFFFF,
        annotations_offset=0,
        class_data_offset=class_data_offset,
        static_values_offset=static_values_offset,
    )


def _image(virtual=False):
    data = bytearray(96)
    counts = bytes([1, 1, 0, 1]) if virtual else bytes([1, 1, 1, 0])
    class_data = (
        counts
        + bytes([2, 0x08])  # static field
        + bytes([3, 0x02])  # instance field
        + bytes([1, 0x01, CODE_AT])  # method with code
    )
    data[CLASS_DATA_AT:CLASS_DATA_AT + len(class_data)] = class_data
    code = struct.pack("<HHHHII", 1, 0, 0, 0, 0, len(PAYLOAD) // 2) + PAYLOAD
    data[CODE_AT:CODE_AT + len(code)] = code
    values = bytes([1, ValueType.INT, 42])
    data[STATIC_VALUES_AT:STATIC_VALUES_AT + len(values)] = values
    return bytes(data)


def test_read_raw_field():
    reader = ByteReader(bytes([0x05, 0x81, 0x01]))
    assert read_raw_field(reader) == RawField(5, 0x81)
    assert not reader.has_more()


def test_read_raw_method():
    reader = ByteReader(bytes([0x01, 0x02, 0xE5, 0x8E, 0x26]))
    method = read_raw_method(reader)
    assert (method.index_diff, method.access_flags, method.code_offset) == (1, 2, 624485)
    assert method.code_item == CodeItem()


def test_parse_code_without_offset_keeps_empty_code():
    method = RawMethod(1, 0, 0)
    reader = ByteReader(b"\x01\x02\x03")
    method.parse_code(reader)
    assert method.code_item.payload == b""
    assert reader.pos == 0


def test_parse_code_reads_payload():
    method = RawMethod(0, 0, CODE_AT)
    method.parse_code(ByteReader(_image()))
    assert method.code_item.payload == PAYLOAD
    assert method.code_item.insns_size == len(PAYLOAD) // 2
    assert method.code_item.register_size == 1


def test_class_without_data_is_empty():
    cls = read_raw_class(ByteReader(_image()), _class_def(0))
    assert cls == RawClass()
    assert cls.static_values.values == []


def test_read_full_class():
    class_def = _class_def(CLASS_DATA_AT, STATIC_VALUES_AT)
    cls = read_raw_class(ByteReader(_image()), class_def)
    assert cls.raw_class == class_def
    assert cls.static_fields == [RawField(2, 0x08)]
    assert cls.instance_fields == [RawField(3, 0x02)]
    assert len(cls.methods) == 1
    assert cls.virtual_methods == []
    assert cls.methods[0].code_offset == CODE_AT
    assert cls.methods[0].code_item.payload == PAYLOAD
    assert cls.static_values.size == 1
    assert cls.static_values.values[0].type == ValueType.INT
    assert cls.static_values.values[0].value == 42


def test_virtual_method_code_is_parsed():
    cls = read_raw_class(ByteReader(_image(virtual=True)), _class_def(CLASS_DATA_AT))
    assert cls.methods == []
    assert len(cls.virtual_methods) == 1
    assert cls.virtual_methods[0].code_item.payload == PAYLOAD
    assert cls.static_values.size == 0


def test_truncated_class_data_raises():
    data = bytes(CLASS_DATA_AT) + bytes([2, 0, 0, 0, 1])
    with pytest.raises(ParseError):
        read_raw_class(ByteReader(data), _class_def(CLASS_DATA_AT))