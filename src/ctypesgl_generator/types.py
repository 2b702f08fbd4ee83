"""Data types for OpenGL registry parsing."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BaseType(Enum):
    """Scalar type named by a declaration, after the modifiers are removed."""

    BOOLEAN = "boolean"
    UINT32 = "uint32"
    INT32 = "int32"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT64 = "uint64"
    INT64 = "int64"
    CHAR = "char"
    ADDRESS = "address"  # pointers, sync handles, callbacks
    VOID = "void"
    UNRECOGNIZED = "unrecognized"


class TypeModifier(Enum):
    """Pointer/const shape wrapped around a base type."""

    NONE = "none"
    POINTER_TO = "pointer_to"
    POINTER_TO_CONST = "pointer_to_const"
    POINTER_TO_POINTER = "pointer_to_pointer"
    POINTER_TO_CONST_POINTER = "pointer_to_const_pointer"
    POINTER_TO_CONST_POINTER_TO_CONST = "pointer_to_const_pointer_to_const"


@dataclass(frozen=True)
class TypeDescriptor:
    """Parsed type of a parameter or return value."""

    base_type: BaseType
    modifier: TypeModifier = TypeModifier.NONE
    raw: str = ""  # "GLenum", kept for UNRECOGNIZED pass-through


@dataclass(frozen=True)
class Parameter:
    """Represents a function parameter."""

    type: TypeDescriptor
    name: str  # "target"
    group: Optional[str] = None  # "TextureTarget"


@dataclass(frozen=True)
class Command:
    """Represents an OpenGL function/command."""

    name: str  # "glClear"
    return_type: TypeDescriptor
    params: tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class EnumConstant:
    """Represents an OpenGL enum constant."""

    name: str  # "GL_COLOR_BUFFER_BIT"
    value: str  # "0x00004000", kept as the registry literal


@dataclass(frozen=True)
class Version:
    """All enums and commands available in one API version."""

    api_family: str  # "GL" or "GLES"
    name: str  # "GL46"
    number: str  # "4.6"
    enums: tuple[EnumConstant, ...] = ()
    commands: tuple[Command, ...] = ()


@dataclass(frozen=True)
class GLSpec:
    """Every version parsed out of one registry."""

    versions: tuple[Version, ...] = ()
    header_comment: str = ""
