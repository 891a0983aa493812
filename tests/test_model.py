import pytest

from apkdecompiler.dexdefs import CodeItem
from apkdecompiler.model import Config, Method, SmaliClass
from apkdecompiler.opcodes import Opcode
from apkdecompiler.rawclass import RawMethod
from apkdecompiler.reader import ParseError


def _method(payload: bytes) -> Method:
    raw = RawMethod(code_item=CodeItem(insns_size=len(payload) // 2, payload=payload))
    return Method("LFoo;", "run", "V", "", raw)


def test_config_defaults_to_no_sanitizing():
    assert Config().sanitize_annotations is False


def test_parse_simple_body():
    method = _method(bytes([0x12, 0x10, 0x0E, 0x00]))
    method.parse_code()
    assert [i.opcode for i in method.body] == [Opcode.CONST_4, Opcode.RETURN_VOID]
    assert method.body[0].operands == [0, 1]


def test_method_without_code_has_empty_body():
    method = Method("LBar;", "ext", "V", "")
    method.parse_code()
    assert method.body == []


def test_payload_pseudo_instruction_stops_decoding():
    method = _method(bytes([0x0E, 0x00, 0x00, 0x01, 0x02, 0x00, 0x00, 0x00]))
    method.parse_code()
    assert [i.opcode for i in method.body] == [Opcode.RETURN_VOID]


def test_fill_array_data_payload_is_skipped():
    code = bytes(
        [0x26, 0x00, 0x04, 0x00, 0x00, 0x00, 0x0E, 0x00]
        + [0x00, 0x03, 0x01, 0x00, 0x01, 0x00, 0x00, 0x00, 0x07, 0x00]
    )
    method = _method(code)
    method.parse_code()
    assert [i.opcode for i in method.body] == [Opcode.FILL_ARRAY_DATA, Opcode.RETURN_VOID]
    assert method.body[0].operands == [0, 4]


def test_payload_before_instruction_raises():
    method = _method(bytes([0x2B, 0x00, 0x00, 0x00, 0x00, 0x00]))
    with pytest.raises(ParseError):
        method.parse_code()


def test_truncated_instruction_raises():
    method = _method(bytes([0x13]))
    with pytest.raises(ParseError):
        method.parse_code()


def test_parse_code_twice_gives_same_body():
    method = _method(bytes([0x12, 0x10, 0x0E, 0x00]))
    method.parse_code()
    first = list(method.body)
    method.parse_code()
    assert method.body == first


def test_class_starts_without_members():
    cls = SmaliClass("LFoo;", "Ljava/lang/Object;")
    assert (cls.static_fields, cls.instance_fields, cls.methods) == ([], [], [])
    assert cls.super_class == "Ljava/lang/Object;"