"""Class data items: encoded fields, methods and their code."""

from __future__ import annotations

from dataclasses import dataclass, field

from .dexdefs import ClassDef, CodeItem
from .rawvalue import Array, read_array
from .reader import ByteReader


@dataclass(frozen=True)
class RawField:
    """An encoded field: index delta from the previous field and access flags."""

    index_diff: int
    access_flags: int


@dataclass
class RawMethod:
    """An encoded method; ``code_item`` is filled in by :meth:`parse_code`."""

    index_diff: int = 0
    access_flags: int = 0
    code_offset: int = 0
    code_item: CodeItem = field(default_factory=CodeItem)

    def parse_code(self, reader: ByteReader) -> None:
        """Read the method's code item, if it has one."""
        if self.code_offset == 0:
            return
        reader.seek(self.code_offset)
        self.code_item = CodeItem.read(reader)


@dataclass
class RawClass:
    """The decoded class data item of one class definition."""

    static_fields: list[RawField] = field(default_factory=list)
    instance_fields: list[RawField] = field(default_factory=list)
    methods: list[RawMethod] = field(default_factory=list)
    virtual_methods: list[RawMethod] = field(default_factory=list)
    static_values: Array = field(default_factory=lambda: Array(0))
    raw_class: ClassDef | None = None


def read_raw_field(reader: ByteReader) -> RawField:
    index_diff = reader.read_uleb128()
    access_flags = reader.read_uleb128()
    return RawField(index_diff, access_flags)


def read_raw_method(reader: ByteReader) -> RawMethod:
    index_diff = reader.read_uleb128()
    access_flags = reader.read_uleb128()
    code_offset = reader.read_uleb128()
    return RawMethod(index_diff, access_flags, code_offset)


def read_raw_class(reader: ByteReader, class_def: ClassDef) -> RawClass:
    """Decode the class data of ``class_def``, including method code and static values."""
    if class_def.class_data_offset == 0:
        return RawClass()

    reader.seek(class_def.class_data_offset)
    static_count = reader.read_uleb128()
    instance_count = reader.read_uleb128()
    direct_count = reader.read_uleb128()
    virtual_count = reader.read_uleb128()

    cls = RawClass(raw_class=class_def)
    cls.static_fields = [read_raw_field(reader) for _ in range(static_count)]
    cls.instance_fields = [read_raw_field(reader) for _ in range(instance_count)]
    cls.methods = [read_raw_method(reader) for _ in range(direct_count)]
    cls.virtual_methods = [read_raw_method(reader) for _ in range(virtual_count)]

    for method in (*cls.methods, *cls.virtual_methods):
        method.parse_code(reader)

    if class_def.static_values_offset == 0:
        return cls

    reader.seek(class_def.static_values_offset)
    cls.static_values = read_array(reader)
    return cls