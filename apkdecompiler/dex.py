"""A dex file decoded into classes, methods and fields."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from .model import Config, Field, Method, SmaliClass
from .rawclass import RawField, RawMethod, read_raw_class
from .rawdex import RawDex
from .rawvalue import Value
from .reader import ByteReader, ParseError

RESOLVE_RESOURCE = "{{resolve_from_resource}}"

T = TypeVar("T")


def _lookup(items: Sequence[T], index: int, what: str) -> T:
    try:
        return items[index]
    except IndexError:
        raise ParseError(f"{what} index {index} out of range") from None


@dataclass
class Dex:
    """Classes, methods and fields of one dex file, keyed by descriptor."""

    raw: RawDex = field(repr=False)
    filename: str = ""
    classes: dict[str, SmaliClass] = field(default_factory=dict)
    methods: dict[str, Method] = field(default_factory=dict)
    fields: dict[str, Field] = field(default_factory=dict)
    methods_by_index: dict[int, str] = field(default_factory=dict)
    fields_by_index: dict[int, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, data, config: Config | None = None) -> Dex:
        """Decode a dex file from its bytes."""
        config = config or Config()
        reader = ByteReader(data)
        raw = RawDex.parse(reader)
        dex = cls(raw=raw)

        for class_def in raw.class_defs:
            raw_class = read_raw_class(reader, class_def)
            class_name = dex._type_name(class_def.class_idx)
            super_name = ""
            if 0 < class_def.superclass_idx < len(raw.type_ids):
                super_name = dex._type_name(class_def.superclass_idx)

            smali_class = SmaliClass(class_name, super_class=super_name)
            smali_class.methods = [
                *dex._add_methods(raw_class.methods, class_name),
                *dex._add_methods(raw_class.virtual_methods, class_name),
            ]
            static_values = raw_class.static_values.values
            smali_class.static_fields = dex._add_fields(
                raw_class.static_fields, class_name, static_values
            )
            smali_class.instance_fields = dex._add_fields(
                raw_class.instance_fields, class_name, static_values
            )
            dex.classes[class_name] = smali_class

        for index, method_def in enumerate(raw.method_defs):
            if index in dex.methods_by_index:
                continue
            class_name = dex._type_name(method_def.class_idx)
            method = dex._new_method(class_name, index, RawMethod())
            signature = dex._signature(class_name, index)
            dex.methods[signature] = method
            dex.methods_by_index[index] = signature

        if config.sanitize_annotations:
            raw.sanitize_annotations()
        return dex

    def _string(self, index: int) -> str:
        return _lookup(self.raw.string_defs, index, "string").text

    def _type_name(self, type_idx: int) -> str:
        return self._string(_lookup(self.raw.type_ids, type_idx, "type"))

    def _new_method(self, class_name: str, index: int, raw_method: RawMethod) -> Method:
        method_def = _lookup(self.raw.method_defs, index, "method")
        proto = _lookup(self.raw.method_proto_defs, method_def.proto_idx, "prototype")
        return Method(
            class_name=class_name,
            name=self._string(method_def.name_idx),
            return_type=self._type_name(proto.return_type_idx),
            arguments_signature=proto.params_string,
            raw_method=raw_method,
        )

    def _signature(self, class_name: str, index: int) -> str:
        method_def = _lookup(self.raw.method_defs, index, "method")
        proto = _lookup(self.raw.method_proto_defs, method_def.proto_idx, "prototype")
        name = self._string(method_def.name_idx)
        return_type = self._type_name(proto.return_type_idx)
        return f"{class_name}->{name}({proto.params_string}){return_type}"

    def _add_methods(self, raw_methods: list[RawMethod], class_name: str) -> list[Method]:
        methods = []
        method_idx = 0
        for raw_method in raw_methods:
            method_idx += raw_method.index_diff
            method = self._new_method(class_name, method_idx, raw_method)
            signature = self._signature(class_name, method_idx)
            methods.append(method)
            self.methods[signature] = method
            self.methods_by_index[method_idx] = signature
        return methods

    def _add_fields(
        self, raw_fields: list[RawField], class_name: str, static_values: list[Value]
    ) -> list[Field]:
        fields = []
        field_idx = 0
        for i, raw_field in enumerate(raw_fields):
            field_idx += raw_field.index_diff
            field_def = _lookup(self.raw.field_defs, field_idx, "field")
            name = self._string(field_def.name_idx)
            field_type = self._type_name(field_def.type_idx)
            value = static_values[i].value if i < len(static_values) else 0
            descriptor = f"{class_name}->{name}:{field_type}"
            result = Field(
                def_idx=field_idx,
                name=name,
                type=field_type,
                class_name=class_name,
                descriptor=descriptor,
                value=value,
            )
            self.fields[descriptor] = result
            self.fields_by_index[field_idx] = descriptor
            fields.append(result)
        return fields