"""Encoded values, arrays and annotations of the dex format."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .reader import ByteReader, to_int64


class ValueType(IntEnum):
    BYTE = 0x00
    SHORT = 0x02
    CHAR = 0x03
    INT = 0x04
    LONG = 0x06
    FLOAT = 0x10
    DOUBLE = 0x11
    METHOD_TYPE = 0x15
    METHOD_HANDLE = 0x16
    STRING = 0x17
    TYPE = 0x18
    FIELD = 0x19
    METHOD = 0x1A
    ENUM = 0x1B
    ARRAY = 0x1C
    ANNOTATION = 0x1D
    NULL = 0x1E
    BOOLEAN = 0x1F


_SIZED_TYPES = frozenset(
    {
        ValueType.SHORT,
        ValueType.CHAR,
        ValueType.INT,
        ValueType.LONG,
        ValueType.FLOAT,
        ValueType.DOUBLE,
        ValueType.METHOD_TYPE,
        ValueType.METHOD_HANDLE,
        ValueType.STRING,
        ValueType.TYPE,
        ValueType.FIELD,
        ValueType.METHOD,
        ValueType.ENUM,
    }
)


@dataclass
class Value:
    """One encoded value; ``type`` is a plain int for unknown type codes."""

    type: ValueType | int
    size: int
    value: int = 0
    array: Array | None = None
    annotation: AnnotationValue | None = None


@dataclass
class Array:
    size: int
    values: list[Value] = field(default_factory=list)


@dataclass
class AnnotationElement:
    name_id: int
    value: Value


@dataclass
class AnnotationValue:
    type_id: int
    size: int
    elements: list[AnnotationElement] = field(default_factory=list)


@dataclass
class Annotation:
    visibility: int
    value: AnnotationValue


def _value_type(code: int) -> ValueType | int:
    try:
        return ValueType(code)
    except ValueError:
        return code


def read_value(reader: ByteReader) -> Value:
    header = reader.read_byte()
    value_type = _value_type(header & 0x1F)
    size = (header >> 5) & 0x7
    value = Value(type=value_type, size=size)

    if value_type == ValueType.BYTE:
        value.value = reader.read_byte()
    elif value_type in _SIZED_TYPES:
        raw = bytes(reader.read_byte() for _ in range(size + 1))
        value.value = to_int64(int.from_bytes(raw, "little"))
    elif value_type == ValueType.BOOLEAN:
        value.value = size & 0x1
    elif value_type == ValueType.ARRAY:
        value.array = read_array(reader)
    elif value_type == ValueType.ANNOTATION:
        value.annotation = read_annotation_value(reader)
    return value


def read_array(reader: ByteReader) -> Array:
    size = reader.read_uleb128()
    return Array(size, [read_value(reader) for _ in range(size)])


def read_annotation_value(reader: ByteReader) -> AnnotationValue:
    type_id = reader.read_uleb128()
    size = reader.read_uleb128()
    elements = []
    for _ in range(size):
        name_id = reader.read_uleb128()
        elements.append(AnnotationElement(name_id, read_value(reader)))
    return AnnotationValue(type_id, size, elements)


def read_annotation(reader: ByteReader) -> Annotation:
    visibility = reader.read_byte()
    return Annotation(visibility, read_annotation_value(reader))