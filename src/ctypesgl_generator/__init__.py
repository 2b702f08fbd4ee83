"""ctypesgl generator - OpenGL ctypes binding generator."""

__version__ = "0.1.0"

from .config import GeneratorConfig, StorageMode
from .generator import BindingGenerator
from .interop import collect_interop_commands
from .registry import GLRegistry, load_spec
from .types import (
    BaseType,
    Command,
    EnumConstant,
    GLSpec,
    Parameter,
    TypeDescriptor,
    TypeModifier,
    Version,
)

__all__ = [
    "BindingGenerator",
    "GeneratorConfig",
    "StorageMode",
    "GLRegistry",
    "load_spec",
    "collect_interop_commands",
    "BaseType",
    "TypeModifier",
    "TypeDescriptor",
    "Parameter",
    "Command",
    "EnumConstant",
    "Version",
    "GLSpec",
]
