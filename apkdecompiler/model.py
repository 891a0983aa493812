"""Classes, fields and methods of a decoded dex file."""

from __future__ import annotations

from dataclasses import dataclass, field

from .instructions import Instruction, parse_instruction
from .opcodes import Opcode
from .rawclass import RawMethod
from .reader import ByteReader, ParseError

_PAYLOAD_OPCODES = frozenset(
    {Opcode.FILL_ARRAY_DATA, Opcode.PACKED_SWITCH, Opcode.SPARSE_SWITCH}
)


@dataclass(frozen=True)
class Config:
    """Options for decoding a dex file."""

    sanitize_annotations: bool = False


@dataclass(frozen=True)
class Field:
    """A field of a class; ``value`` is its static initial value, if any."""

    def_idx: int
    name: str
    type: str
    class_name: str
    descriptor: str
    value: int = 0


@dataclass
class Method:
    """A method; ``body`` is filled in by :meth:`parse_code`."""

    class_name: str
    name: str
    return_type: str
    arguments_signature: str
    raw_method: RawMethod = field(default_factory=RawMethod, repr=False)
    body: list[Instruction] = field(default_factory=list)

    def parse_code(self) -> None:
        """Decode the method's instructions into ``body``.

        Data payloads of array fills and switches are skipped, and decoding
        stops at a payload pseudo-instruction left at the end of the code.
        """
        payload = self.raw_method.code_item.payload
        reader = ByteReader(payload)
        body: list[Instruction] = []
        end = len(payload)
        base = 0
        while reader.has_more():
            instruction = parse_instruction(reader)
            if instruction.opcode == Opcode.NOP and instruction.operands[0] != 0:
                break

            if instruction.opcode in _PAYLOAD_OPCODES:
                offset = base + reader.pos
                base = offset
                payload_offset = instruction.operands[-1] * 2 - 6
                if end > offset + payload_offset:
                    end = offset + payload_offset
                if offset > end:
                    raise ParseError(
                        f"payload at {end} precedes its instruction at {offset}"
                    )
                reader = ByteReader(payload[offset:end])

            body.append(instruction)
        self.body = body


@dataclass
class SmaliClass:
    """A class defined in a dex file."""

    name: str
    super_class: str = ""
    static_fields: list[Field] = field(default_factory=list)
    instance_fields: list[Field] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)