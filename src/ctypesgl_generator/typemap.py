"""Mapping from parsed registry types to ctypes names."""

import re
from enum import Enum

from .types import BaseType, TypeDescriptor, TypeModifier

# Base type to ctypes mapping
BASE_TO_CTYPES = {
    BaseType.BOOLEAN: "c_bool",
    BaseType.UINT32: "c_uint32",
    BaseType.INT32: "c_int32",
    BaseType.FLOAT32: "c_float",
    BaseType.FLOAT64: "c_double",
    BaseType.UINT8: "c_uint8",
    BaseType.INT8: "c_int8",
    BaseType.UINT16: "c_uint16",
    BaseType.INT16: "c_int16",
    BaseType.UINT64: "c_uint64",
    BaseType.INT64: "c_int64",
    BaseType.CHAR: "c_char",
    BaseType.ADDRESS: "c_void_p",
    BaseType.VOID: "None",
}

POINTER_CTYPE = "c_void_p"

UINT32_MAX = 0xFFFFFFFF
MAX_NARROW_HEX_DIGITS = 8

_HEX_DIGITS_RE = re.compile(r"[0-9A-Fa-f]+")
_DEC_DIGITS_RE = re.compile(r"[0-9]+")


class LiteralWidth(Enum):
    """Storage width needed by an enum constant."""

    NARROW = 32
    WIDE = 64


def to_ctypes(descriptor: TypeDescriptor) -> str:
    """Convert a parsed type to the ctypes name used in generated code."""
    if descriptor.modifier is not TypeModifier.NONE:
        return POINTER_CTYPE
    if descriptor.base_type is BaseType.UNRECOGNIZED:
        return descriptor.raw
    return BASE_TO_CTYPES[descriptor.base_type]


def is_void(descriptor: TypeDescriptor) -> bool:
    return to_ctypes(descriptor) == "None"


def classify_literal(value: str) -> LiteralWidth:
    """Decide whether an enum literal fits in an unsigned 32-bit integer.

    Hex literals with more than eight digits are always wide; anything that
    does not parse as an unsigned 32-bit number is wide as well.
    """
    is_hex = value.startswith("0x")
    digits = value[2:] if is_hex else value

    if is_hex:
        if len(digits) > MAX_NARROW_HEX_DIGITS:
            return LiteralWidth.WIDE
        if not _HEX_DIGITS_RE.fullmatch(digits):
            return LiteralWidth.WIDE
        return LiteralWidth.NARROW

    if not _DEC_DIGITS_RE.fullmatch(digits):
        return LiteralWidth.WIDE
    if int(digits) > UINT32_MAX:
        return LiteralWidth.WIDE
    return LiteralWidth.NARROW
