"""Index tables and string sets of a dex file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeVar

from .dexdefs import (
    DEX_HEADER_SIZE,
    NO_INDEX,
    AnnotationDef,
    AnnotationSetDef,
    AnnotationTable,
    ClassDef,
    DexHeader,
    FieldDef,
    MethodDef,
    MethodProtoDef,
    ProtoDef,
    StringDef,
    Table,
    read_string_offset,
)
from .rawvalue import Array, AnnotationValue, Value, ValueType, read_annotation
from .reader import ByteReader, ParseError

T = TypeVar("T")


class InvalidHeaderSizeError(ParseError):
    """Raised when the dex header does not have the expected size."""


def _read_table(reader: ByteReader, read: Callable[[ByteReader], T], table: Table) -> list[T]:
    reader.seek(table.offset)
    return [read(reader) for _ in range(table.size)]


@dataclass
class RawDex:
    """The decoded id tables of a dex file.

    ``auxiliary_strings`` holds the indices of strings used as type names,
    member names, shorties and, after :meth:`sanitize_annotations`, by
    annotations and source file names.
    """

    header: DexHeader
    string_defs: list[StringDef] = field(default_factory=list)
    method_proto_defs: list[MethodProtoDef] = field(default_factory=list)
    method_defs: list[MethodDef] = field(default_factory=list)
    class_defs: list[ClassDef] = field(default_factory=list)
    field_defs: list[FieldDef] = field(default_factory=list)
    type_ids: list[int] = field(default_factory=list)
    auxiliary_strings: set[int] = field(default_factory=set)
    _reader: ByteReader = field(init=False, repr=False, compare=False)

    @classmethod
    def parse(cls, reader: ByteReader) -> RawDex:
        header = DexHeader.read(reader)
        if header.header_size != DEX_HEADER_SIZE:
            raise InvalidHeaderSizeError(f"invalid header size {header.header_size:#x}")
        dex = cls(header=header)
        dex._reader = reader
        dex._parse_strings()
        dex._parse_type_ids()
        dex._parse_method_proto_defs()
        dex._parse_method_defs()
        dex._parse_class_defs()
        dex._parse_field_defs()
        return dex

    def _parse_strings(self) -> None:
        offsets = _read_table(self._reader, read_string_offset, self.header.string_ids)
        strings = []
        for offset in offsets:
            self._reader.seek(offset)
            strings.append(StringDef.read(self._reader))
        self.string_defs = strings

    def _parse_type_ids(self) -> None:
        self._reader.seek(self.header.type_ids.offset)
        self.type_ids = [self._reader.read_u32() for _ in range(self.header.type_ids.size)]
        self.auxiliary_strings.update(self.type_ids)

    def _parse_method_proto_defs(self) -> None:
        protos = _read_table(self._reader, ProtoDef.read, self.header.proto_ids)
        result = []
        for proto in protos:
            method_proto = MethodProtoDef()
            if proto.params_offset != 0:
                self._reader.seek(proto.params_offset)
                method_proto = MethodProtoDef.read(self._reader)
            method_proto.return_type_idx = proto.return_type_idx
            method_proto.shorty_idx = proto.shorty_idx
            self.auxiliary_strings.add(proto.shorty_idx)
            try:
                raw = b"".join(self.string_defs[self.type_ids[p]].data for p in method_proto.params)
            except IndexError:
                raise ParseError("prototype parameter refers to a missing type") from None
            method_proto.params_string = raw.decode("utf-8", errors="replace")
            result.append(method_proto)
        self.method_proto_defs = result

    def _parse_method_defs(self) -> None:
        self.method_defs = _read_table(self._reader, MethodDef.read, self.header.method_ids)
        self.auxiliary_strings.update(m.name_idx for m in self.method_defs)

    def _parse_class_defs(self) -> None:
        self.class_defs = _read_table(self._reader, ClassDef.read, self.header.class_defs)

    def _parse_field_defs(self) -> None:
        self.field_defs = _read_table(self._reader, FieldDef.read, self.header.field_ids)
        self.auxiliary_strings.update(f.name_idx for f in self.field_defs)

    def sanitize_annotations(self) -> None:
        """Add strings referenced by annotations and source files to ``auxiliary_strings``."""
        for class_def in self.class_defs:
            if class_def.source_file_idx != NO_INDEX:
                self.auxiliary_strings.add(class_def.source_file_idx)
            self._parse_annotations(class_def)

    def _visit_value(self, value: Value) -> None:
        if value.type == ValueType.ARRAY and value.array is not None:
            self._visit_array(value.array)
        elif value.type == ValueType.STRING:
            self.auxiliary_strings.add(value.value)
        elif value.type == ValueType.ANNOTATION and value.annotation is not None:
            self._visit_annotation_value(value.annotation)

    def _visit_array(self, array: Array) -> None:
        for value in array.values:
            self._visit_value(value)

    def _visit_annotation_value(self, annotation: AnnotationValue) -> None:
        for element in annotation.elements:
            self.auxiliary_strings.add(element.name_id)
            self._visit_value(element.value)

    def _parse_annotation_set(self, annotation_set: AnnotationSetDef) -> None:
        for offset in annotation_set.offsets:
            if offset == 0:
                continue
            self._reader.seek(offset)
            self._visit_annotation_value(read_annotation(self._reader).value)

    def _parse_annotation_tables(self, tables: list[AnnotationTable]) -> None:
        for table in tables:
            if table.offset == 0:
                continue
            self._reader.seek(table.offset)
            annotation_set = AnnotationSetDef.read(self._reader)
            if any(annotation_set.offsets):
                self._parse_annotation_set(annotation_set)

    def _parse_annotations(self, class_def: ClassDef) -> None:
        if class_def.annotations_offset == 0:
            return
        self._reader.seek(class_def.annotations_offset)
        directory = AnnotationDef.read(self._reader)
        self._parse_annotation_tables(directory.methods)
        self._parse_annotation_tables(directory.fields)
        self._parse_annotation_tables(directory.parameters)

        class_annotations = directory.directory.class_annotations
        if class_annotations == 0:
            return
        self._reader.seek(class_annotations)
        self._parse_annotation_set(AnnotationSetDef.read(self._reader))