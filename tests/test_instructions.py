import pytest

from apkdecompiler.instructions import Instruction, parse_instruction
from apkdecompiler.opcodes import InstructionType, Opcode, OperandType
from apkdecompiler.reader import ByteReader, ParseError


def parse(data: bytes) -> Instruction:
    return parse_instruction(ByteReader(data))


@pytest.mark.parametrize(
    "data, opcode, operands",
    [
        (b"\x00\x00", Opcode.NOP, [0]),
        (b"\x0e\x00", Opcode.RETURN_VOID, [0]),
        (b"\x12\x21", Opcode.CONST_4, [1, 2]),
        (b"\x1a\x00\x05\x00", Opcode.CONST_STRING, [0, 5]),
        (b"\x03\x00\x01\x00\x02\x00", Opcode.MOVE_16, [1, 2]),
        (b"\x32\x21\x05\x00", Opcode.IF_EQ, [1, 2, 5]),
        (b"\x90\x00\x01\x02", Opcode.ADD_INT, [0, 1, 2]),
        (b"\x29\x00\xfe\xff", Opcode.GOTO_16, [0xFFFE]),
        (b"\x2a\x00\x78\x56\x34\x12", Opcode.GOTO_32, [0x12345678]),
        (b"\x14\x03\x78\x56\x34\x12", Opcode.CONST, [3, 0x12345678]),
        (b"\x16\x02\xff\xff", Opcode.CONST_WIDE_16, [2, 0xFFFF]),
        (b"\x17\x02\x78\x56\x34\x12", Opcode.CONST_WIDE_32, [2, 0x12345678]),
        (b"\x0a\x04", Opcode.MOVE_RESULT, [4]),
    ],
)
def test_operand_layouts(data, opcode, operands):
    instr = parse(data)
    assert instr.opcode == opcode
    assert instr.operands == operands


def test_instruction_categories():
    instr = parse(b"\x1a\x00\x05\x00")
    assert instr.type == InstructionType.CONST
    assert instr.operand_type == OperandType.REG_SHORT


def test_invoke_with_register_list():
    instr = parse(b"\x6e\x20\x10\x00\x21\x00")
    assert instr.opcode == Opcode.INVOKE_VIRTUAL
    assert instr.type == InstructionType.INVOCATION
    assert instr.operands == [1, 2, 0x10]


def test_invoke_with_five_registers_uses_low_nibble_for_last():
    instr = parse(b"\x71\x59\x07\x00\x21\x43")
    assert instr.operands == [1, 2, 3, 4, 9, 7]


def test_invoke_range_lists_consecutive_registers():
    instr = parse(b"\x77\x03\x07\x00\x03\x00")
    assert instr.opcode == Opcode.INVOKE_STATIC_RANGE
    assert instr.operands == [3, 4, 5, 7]


def test_const_wide_is_signed():
    instr = parse(b"\x18\x00" + b"\xff" * 8)
    assert instr.operands == [0, -1]


def test_const_high16_shifts_into_upper_half():
    instr = parse(b"\x15\x00\x34\x12")
    assert instr.operands == [0, 0x1234 << 16]


def test_const_wide_high16_wraps_to_signed():
    instr = parse(b"\x19\x00\x00\x80")
    assert instr.operands == [0, -(1 << 63)]


def test_unassigned_opcode_is_kept_as_int():
    instr = parse(b"\x3e\x07")
    assert instr.opcode == 0x3E
    assert not isinstance(instr.opcode, Opcode)
    assert instr.type == InstructionType.UNKNOWN
    assert instr.operands == [7]


def test_sequential_parsing_consumes_stream():
    reader = ByteReader(b"\x12\x21\x0e\x00")
    first = parse_instruction(reader)
    second = parse_instruction(reader)
    assert first.opcode == Opcode.CONST_4
    assert second.opcode == Opcode.RETURN_VOID
    assert not reader.has_more()


def test_empty_stream_raises():
    with pytest.raises(ParseError):
        parse(b"")


def test_missing_operands_raise():
    with pytest.raises(ParseError):
        parse(b"\x90\x00")