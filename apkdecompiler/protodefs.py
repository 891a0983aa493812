"""Protocol buffer definitions recovered from generated message classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

PROTOBUF_PACKAGE = "Lcom/google/protobuf/"
PROTOBUF_FIELD_NUMBER = "_FIELD_NUMBER"

JAVA_DEFAULT_TYPES: dict[str, str] = {
    "I": "int32",
    "J": "int64",
    "F": "float",
    "D": "double",
    "B": "byte",
    "Z": "bool",
    "Ljava/lang/String;": "string",
}


@dataclass
class ProtoField:
    """A message field; ``type`` is a proto type or a raw type descriptor."""

    name: str
    index: int = 0
    type: str = ""
    qualifier: str = ""


@dataclass
class ProtoOneof:
    name: str
    fields: list[ProtoField] = field(default_factory=list)


@dataclass
class ProtoEnum:
    """An enum definition; enums are not recovered yet, so it carries no values."""


@dataclass
class ProtoMessage:
    name: str = ""
    is_global: bool = False
    fields: list[ProtoField] = field(default_factory=list)
    one_ofs: list[ProtoOneof] = field(default_factory=list)
    sub_messages: list[ProtoMessage] = field(default_factory=list)
    enums: list[ProtoEnum] = field(default_factory=list)


@dataclass
class ProtoPackage:
    """The messages that go into one ``.proto`` file."""

    file_name: str
    package_name: str
    go_package_name: str
    messages: dict[str, ProtoMessage] = field(default_factory=dict)
    enums: list[ProtoEnum] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)


MutatorFunc = Callable[[ProtoField], bool]


@dataclass(frozen=True)
class Mutator:
    """Rewrites a field whose runtime class defines ``method_name``."""

    method_name: str
    mutator: MutatorFunc


def bytes_mutator(field: ProtoField) -> bool:
    field.type = "bytes"
    return True


def list_mutator(field: ProtoField) -> bool:
    field.qualifier = "repeated"
    # Most untyped lists hold strings.
    field.type = "string"
    return True


def int_list_mutator(field: ProtoField) -> bool:
    list_mutator(field)
    field.type = "int32"
    return True


def default_mutators() -> list[Mutator]:
    """Return the mutators in the order they are tried: bytes before lists."""
    return [
        Mutator("byteAt", bytes_mutator),
        Mutator("addInt", int_list_mutator),
        Mutator("isModifiable", list_mutator),
    ]