"""Recovery of protocol buffer message definitions from the classes of an APK."""

from __future__ import annotations

import logging
from typing import Protocol

from .apk import Apk
from .model import SmaliClass
from .opcodes import InstructionType
from .protodefs import (
    JAVA_DEFAULT_TYPES,
    PROTOBUF_FIELD_NUMBER,
    PROTOBUF_PACKAGE,
    MutatorFunc,
    ProtoField,
    ProtoMessage,
    ProtoOneof,
    ProtoPackage,
    default_mutators,
)
from .reader import ParseError

logger = logging.getLogger(__name__)

_PROTOBUF_INTERNAL_PREFIX = "Lcom/google/protobuf/"


class ProtoGenError(Exception):
    """Raised when an APK or a class cannot be turned into proto definitions."""


class PackageWriter(Protocol):
    """Something that writes a recovered package, typically as a ``.proto`` file."""

    def write_package(self, package: ProtoPackage) -> None:
        """Write one package."""


def message_package_name(typename: str) -> str:
    """Return the dotted package of a message type, its outer class included."""
    parts = typename.split("/")
    parts[-1] = parts[-1].split("$")[0]
    return ".".join(parts)[1:]


def message_name(typename: str) -> str:
    """Return a message's name relative to its package file, as ``Outer.Inner``."""
    package_name = message_package_name(typename)
    last_part = package_name.split(".")[-1]
    prefix = "L" + package_name.replace(".", "/") + "$"
    sanitized = typename.removeprefix(prefix)
    return (last_part + "." + sanitized.replace("$", ".")).removesuffix(";")


def make_snake_case(name: str) -> str:
    """Convert a camel-case field name to snake case, stopping at the first ``_``."""
    out: list[str] = []
    for char in name:
        if char == "_":
            break
        if "A" <= char <= "Z":
            if out:
                out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out)


def _proto_type(java_type: str) -> str:
    return JAVA_DEFAULT_TYPES.get(java_type, java_type)


class ProtoParser:
    """Collects message classes generated by protobuf-lite into packages."""

    def __init__(self, apk: Apk, generator: PackageWriter):
        self.apk = apk
        self.generator = generator
        self.packages: dict[str, ProtoPackage] = {}
        self._internal_types: dict[str, MutatorFunc] = {}
        self._mutators = default_mutators()

    @classmethod
    def from_file(cls, path, generator: PackageWriter) -> ProtoParser:
        if not path:
            raise ProtoGenError("invalid APK file")
        return cls(Apk.open(path), generator)

    def parse(self) -> None:
        """Find the message classes of every dex file and arrange them by package."""
        for dex in self.apk.dexes:
            for smali_class in dex.classes.values():
                try:
                    message = self._parse_class(smali_class)
                except (ProtoGenError, ParseError):
                    continue

                package_name = message_package_name(message.name)
                package = self.packages.get(package_name)
                if package is None:
                    package = ProtoPackage(
                        file_name=package_name.split(".")[-1],
                        package_name=package_name,
                        go_package_name=package_name.replace(".", "/"),
                    )
                    self.packages[package_name] = package
                package.messages[message.name] = message

        self._reorganize_and_fix_packages()
        self._reorganize_fields()

    def generate_proto_defs(self) -> None:
        for package in self.packages.values():
            self.generator.write_package(package)

    def _parse_class(self, smali_class: SmaliClass) -> ProtoMessage:
        if smali_class.name.startswith(PROTOBUF_PACKAGE):
            raise ProtoGenError("predefined message class provided")
        if not smali_class.super_class.startswith(PROTOBUF_PACKAGE):
            raise ProtoGenError("invalid superclass provided")
        if len(smali_class.static_fields) < 2:
            raise ProtoGenError("empty message class provided")

        message = ProtoMessage(name=smali_class.name, is_global=True)
        for static_field in smali_class.static_fields:
            if not static_field.name.endswith(PROTOBUF_FIELD_NUMBER):
                continue
            name = static_field.name.removesuffix(PROTOBUF_FIELD_NUMBER)
            message.fields.append(ProtoField(name=name.lower(), index=static_field.value))

        for instance_field in smali_class.instance_fields:
            member_name = instance_field.name.lower()
            for proto_field in message.fields:
                if proto_field.name.replace("_", "") + "_" == member_name:
                    proto_field.type = _proto_type(instance_field.type)
                    break

        self._fix_oneof_typed_fields(smali_class, message)
        return message

    def _fix_oneof_typed_fields(self, smali_class: SmaliClass, message: ProtoMessage) -> None:
        setters = {}
        for method in smali_class.methods:
            if not method.name.startswith("set"):
                continue
            target = method.name[3:].lower()
            index = next(
                (
                    i
                    for i, proto_field in enumerate(message.fields)
                    if proto_field.type == "" and proto_field.name.replace("_", "") == target
                ),
                None,
            )
            if index is not None:
                setters[index] = method

        if not setters:
            return

        new_fields = [f for i, f in enumerate(message.fields) if i not in setters]
        one_ofs: dict[int, ProtoOneof] = {}

        for field_index, setter in setters.items():
            setter.parse_code()
            proto_field = message.fields[field_index]
            for instruction in setter.body:
                if instruction.type != InstructionType.INSTANCE_OP:
                    continue
                def_idx = instruction.operands[-1]
                member_index = next(
                    (
                        i
                        for i, member in enumerate(smali_class.instance_fields)
                        if member.def_idx == def_idx
                    ),
                    None,
                )
                if member_index is None:
                    continue
                member = smali_class.instance_fields[member_index]
                if member.name.endswith("Case_"):
                    continue

                one_of = one_ofs.setdefault(
                    member_index, ProtoOneof(name=make_snake_case(member.name))
                )
                proto_field.type = _proto_type(setter.arguments_signature)
                one_of.fields.append(proto_field)

        message.one_ofs = [one_of for one_of in one_ofs.values() if one_of.fields]
        message.fields = new_fields

    def _guess_internal_proto_type(self, message_name_: str, proto_field: ProtoField) -> bool:
        if not proto_field.type.startswith(_PROTOBUF_INTERNAL_PREFIX):
            return True

        cached = self._internal_types.get(proto_field.type)
        if cached is not None:
            return cached(proto_field)

        for dex in self.apk.dexes:
            runtime_class = dex.classes.get(proto_field.type)
            if runtime_class is None:
                continue
            method_names = {method.name for method in runtime_class.methods}
            for mutator in self._mutators:
                if mutator.method_name in method_names:
                    self._internal_types[proto_field.type] = mutator.mutator
                    return mutator.mutator(proto_field)

        logger.warning(
            "Field %s of message %s has no type, probably because of oneof or any abuse",
            proto_field.name,
            message_name_,
        )
        return False

    def _fix_field_types(
        self, package: ProtoPackage, message: ProtoMessage, fields: list[ProtoField]
    ) -> None:
        for proto_field in fields:
            if not proto_field.type:
                continue
            if not self._guess_internal_proto_type(message.name, proto_field):
                continue
            if not (proto_field.type.startswith("L") and proto_field.type.endswith(";")):
                continue
            package_name = message_package_name(proto_field.type)
            proto_field.type = message_name(proto_field.type)
            if package_name != package.package_name:
                package.imports.append(package_name.split(".")[-1])

    def _reorganize_fields(self) -> None:
        for package in self.packages.values():
            for message in package.messages.values():
                message.fields.sort(key=lambda f: f.index)
                for one_of in message.one_ofs:
                    one_of.fields.sort(key=lambda f: f.index)
                    self._fix_field_types(package, message, one_of.fields)
                self._fix_field_types(package, message, message.fields)

    def _reorganize_and_fix_packages(self) -> None:
        for package in self.packages.values():
            new_messages: dict[str, ProtoMessage] = {}
            for message in package.messages.values():
                if "/" in message.name:
                    message.name = message.name.removeprefix(
                        "L" + package.go_package_name + "$"
                    )
                if "$" in message.name:
                    message.is_global = False

                hierarchy = message.name.removesuffix(";").split("$")
                previous: ProtoMessage | None = None
                for depth in range(len(hierarchy), 0, -1):
                    key = package.file_name + "." + ".".join(hierarchy[:depth])
                    existing = new_messages.get(key)
                    if existing is not None:
                        if previous is not None:
                            existing.sub_messages.append(previous)
                        break
                    created = ProtoMessage(name=hierarchy[depth - 1], is_global=depth == 1)
                    if previous is not None:
                        created.sub_messages.append(previous)
                    new_messages[key] = created
                    previous = created

                current = new_messages[package.file_name + "." + ".".join(hierarchy)]
                current.fields = message.fields
                current.enums = message.enums
                current.one_ofs = message.one_ofs
            package.messages = new_messages