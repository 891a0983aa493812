"""Decoding of single Dalvik instructions from a code stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .opcodes import (
    InstructionType,
    Opcode,
    OperandType,
    instruction_type_of,
    operand_type_of,
)
from .reader import ByteReader, ParseError, to_int64

_SIGN_MASK_16 = 0x7F00
_SIGN_EXTENSION_MASK = 0xFFFFFFFFFF0000


class UnknownOperandTypeError(ParseError):
    """Raised when an operand layout has no decoder."""


@dataclass
class Instruction:
    """A decoded instruction; ``opcode`` is a plain int for unassigned codes."""

    opcode: Opcode | int
    type: InstructionType
    operand_type: OperandType
    operands: list[int] = field(default_factory=list)


def _opcode(code: int) -> Opcode | int:
    try:
        return Opcode(code)
    except ValueError:
        return code


def _nibbles(reader: ByteReader) -> list[int]:
    b = reader.read_byte()
    return [b & 0x0F, b >> 4]


def _read_reg(reader: ByteReader) -> list[int]:
    return [reader.read_byte()]


def _read_two_regs(reader: ByteReader) -> list[int]:
    return _nibbles(reader)


def _read_reg_imm16(reader: ByteReader) -> list[int]:
    reg = reader.read_byte()
    return [reg, reader.read_u16()]


def _read_reg_imm32(reader: ByteReader) -> list[int]:
    reg = reader.read_byte()
    return [reg, reader.read_u32()]


def _read_reg_imm64(reader: ByteReader) -> list[int]:
    reg = reader.read_byte()
    return [reg, to_int64(reader.read_u64())]


def _read_two_short(reader: ByteReader) -> list[int]:
    reader.read_byte()
    first = reader.read_u16()
    return [first, reader.read_u16()]


def _read_two_regs_imm(reader: ByteReader) -> list[int]:
    regs = _nibbles(reader)
    return [*regs, reader.read_u16()]


def _read_three_regs(reader: ByteReader) -> list[int]:
    return [reader.read_byte() for _ in range(3)]


def _read_short(reader: ByteReader) -> list[int]:
    reader.read_byte()
    return [reader.read_u16()]


def _read_uint(reader: ByteReader) -> list[int]:
    reader.read_byte()
    return [reader.read_u32()]


def _read_register_array(reader: ByteReader) -> list[int]:
    head = reader.read_byte()
    last_reg = head & 0x0F
    count = head >> 4
    type_id = reader.read_u16()
    packed = reader.read_u16()
    regs = [0] * count
    for i in range(count):
        if i == 4:
            # The fifth register lives in the low nibble of the first byte.
            regs[i] = last_reg
            break
        regs[i] = packed & 0x0F
        packed >>= 4
    return [*regs, type_id]


def _read_register_range(reader: ByteReader) -> list[int]:
    count = reader.read_byte()
    type_id = reader.read_u16()
    first = reader.read_u16()
    return [*range(first, first + count), type_id]


def _read_const_high(size: int) -> Callable[[ByteReader], list[int]]:
    def read(reader: ByteReader) -> list[int]:
        reg = reader.read_byte()
        imm = reader.read_u16()
        return [reg, to_int64(imm << (size - 16))]

    return read


def _read_const_wide(size: int) -> Callable[[ByteReader], list[int]]:
    def read(reader: ByteReader) -> list[int]:
        reg = reader.read_byte()
        sign_mask = _SIGN_MASK_16
        if size == 32:
            sign_mask <<= 16
            imm = reader.read_u32()
        else:
            imm = reader.read_u16()
        sign = (imm & sign_mask) >> (size - 1)
        return [reg, (_SIGN_EXTENSION_MASK & ~(sign - 1)) | imm]

    return read


_DECODERS: dict[OperandType, Callable[[ByteReader], list[int]]] = {
    OperandType.NONE: _read_reg,
    OperandType.REG: _read_reg,
    OperandType.TWO_REG: _read_two_regs,
    OperandType.REG_SHORT: _read_reg_imm16,
    OperandType.TWO_SHORT: _read_two_short,
    OperandType.REG_UINT: _read_reg_imm32,
    OperandType.TWO_REG_SHORT: _read_two_regs_imm,
    OperandType.THREE_REG: _read_three_regs,
    OperandType.SHORT: _read_short,
    OperandType.UINT: _read_uint,
    OperandType.REG_ULONG: _read_reg_imm64,
    OperandType.REGISTER_ARRAY: _read_register_array,
    OperandType.REGISTER_ARRAY_RANGE: _read_register_range,
    OperandType.REG_HIGH32: _read_const_high(32),
    OperandType.REG_HIGH64: _read_const_high(64),
    OperandType.REG_WIDE16: _read_const_wide(16),
    OperandType.REG_WIDE32: _read_const_wide(32),
}


def parse_instruction(reader: ByteReader) -> Instruction:
    """Read one instruction at the reader's position."""
    code = reader.read_byte()
    operand_type = operand_type_of(code)
    try:
        decoder = _DECODERS[operand_type]
    except KeyError:
        raise UnknownOperandTypeError(f"unknown operand type {operand_type!r}") from None
    operands = decoder(reader)
    return Instruction(
        opcode=_opcode(code),
        type=instruction_type_of(code),
        operand_type=operand_type,
        operands=operands,
    )