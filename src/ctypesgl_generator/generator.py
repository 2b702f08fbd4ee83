"""Python ctypes code generation for parsed OpenGL versions."""

import keyword
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import GeneratorConfig
from .interop import collect_interop_commands, family_names
from .typemap import BASE_TO_CTYPES, POINTER_CTYPE, LiteralWidth, classify_literal, is_void, to_ctypes
from .types import BaseType, Command, GLSpec, Parameter, TypeDescriptor, Version

GENERATOR_NAME = "ctypesgl-generator"

FAMILY_TITLES = {
    "GL": "OpenGL",
    "GLES": "OpenGL ES",
}

KNOWN_CTYPES = set(BASE_TO_CTYPES.values()) - {"None"}

INDENT = "    "

_NON_IDENTIFIER_RE = re.compile(r"\W+")


def module_name(version: Version) -> str:
    return version.name.lower()


def interop_class_name(api_family: str) -> str:
    return f"{api_family}Interop"


def param_name(param: Parameter) -> str:
    """Parameter names that are Python keywords get a trailing underscore."""
    if keyword.iskeyword(param.name):
        return param.name + "_"
    return param.name


def alias_name(raw: str) -> str:
    """Module-level name standing in for an unrecognized type keyword."""
    name = _NON_IDENTIFIER_RE.sub("_", raw)
    if keyword.iskeyword(name):
        name += "_"
    return name


def ctype_name(descriptor: TypeDescriptor) -> str:
    name = to_ctypes(descriptor)
    if name in KNOWN_CTYPES or name == "None":
        return name
    return alias_name(name)


def descriptors(commands: list[Command]) -> list[TypeDescriptor]:
    found = []
    for command in commands:
        found.append(command.return_type)
        found.extend(p.type for p in command.params)
    return found


def type_aliases(commands: list[Command]) -> list[str]:
    """Opaque stand-ins for type keywords the base-type table does not know.

    Each one is declared as ``c_void_p`` so the prototypes and annotations
    that mention it still resolve when the module is imported.
    """
    raw = sorted(
        {to_ctypes(d) for d in descriptors(commands) if d.base_type is BaseType.UNRECOGNIZED}
        - KNOWN_CTYPES
    )
    if not raw:
        return []

    content = ["", "", "# Opaque types"]
    for keyword_text in raw:
        line = f"{alias_name(keyword_text)} = {POINTER_CTYPE}"
        if alias_name(keyword_text) != keyword_text:
            line += f"  # {keyword_text}"
        content.append(line)
    return content


def prototype_expr(command: Command) -> str:
    types = [ctype_name(command.return_type)] + [ctype_name(p.type) for p in command.params]
    return f"CFUNCTYPE({', '.join(types)})"


def ctypes_imports(commands: list[Command], prototypes: bool) -> list[str]:
    used = {to_ctypes(d) for d in descriptors(commands)}

    names = set(used & KNOWN_CTYPES)
    if type_aliases(commands):
        names.add(POINTER_CTYPE)
    names = sorted(names)
    if prototypes:
        names.insert(0, "CFUNCTYPE")
    if not names:
        return []
    return [f"from ctypes import {', '.join(names)}"]


class BindingGenerator:
    """Writes one ctypes package per API family from a parsed spec."""

    def __init__(
        self,
        spec: GLSpec,
        config: Optional[GeneratorConfig] = None,
        generated_at: Optional[datetime] = None,
    ) -> None:
        self.spec = spec
        self.config = config or GeneratorConfig()
        self.generated_at = generated_at

    def unrecognized_types(self) -> list[str]:
        """Type keywords that the generated modules alias to ``c_void_p``."""
        raw = set()
        for version in self.spec.versions:
            for descriptor in descriptors(list(version.commands)):
                if descriptor.base_type is BaseType.UNRECOGNIZED:
                    raw.add(to_ctypes(descriptor))
        return sorted(raw)

    def file_header(self) -> list[str]:
        stamp = ""
        if self.generated_at is not None:
            stamp = f" on {self.generated_at:%Y-%m-%d %H:%M:%S} UTC"

        content = [
            "# AUTOGENERATED. DO NOT EDIT.",
            f"# This file was autogenerated by {GENERATOR_NAME}{stamp}",
        ]
        if self.spec.header_comment:
            content.append("# Original copyright from gl.xml:")
            for line in self.spec.header_comment.splitlines():
                content.append(f"# {line}".rstrip())
        content.append("")
        return content

    def storage_helpers(self) -> list[str]:
        """``LoadError`` and ``FunctionSlot``, shared by every interop table."""
        content = []
        if self.config.error_check:
            content += [
                "",
                "",
                "class LoadError(RuntimeError):",
                '    """An entry point could not be resolved."""',
                "",
                "    def __init__(self, name, message):",
                "        super().__init__(message)",
                "        self.name = name",
            ]
        content += [
            "",
            "",
            "class FunctionSlot:",
            '    """Assignable storage for one resolved entry point."""',
            "",
            '    __slots__ = ("name", "prototype", "pointer")',
            "",
            "    def __init__(self, name, prototype):",
            "        self.name = name",
            "        self.prototype = prototype",
            "        self.pointer = None",
        ]
        return content

    def interop_table(self, class_name: str, commands: list[Command], owner: str) -> list[str]:
        """Prototypes plus the table class mapping command names to slots."""
        content = ["", "", "PROTOTYPES = {"]
        for command in commands:
            content.append(f'{INDENT}"{command.name}": {prototype_expr(command)},')
        content += [
            "}",
            "",
            "",
            f"class {class_name}:",
            f'    """Function pointer storage for {owner}."""',
            "",
            "    def __init__(self):",
            "        self.slots = {",
            "            name: FunctionSlot(name, prototype)",
            "            for name, prototype in PROTOTYPES.items()",
            "        }",
            "",
            "    def close(self):",
            "        for slot in self.slots.values():",
            "            slot.pointer = None",
            "        self.slots.clear()",
        ]
        return content

    def enum_constants(self, version: Version) -> list[str]:
        if not version.enums:
            return []

        content = ["", "", "# Enums"]
        for enum in version.enums:
            line = f"{enum.name} = {enum.value}"
            if classify_literal(enum.value) is LiteralWidth.WIDE:
                line += "  # 64-bit"
            content.append(line)
        return content

    def wrapper(self, command: Command) -> list[str]:
        """A method forwarding its arguments, in order, to the loaded pointer."""
        signature = ["self"] + [f"{param_name(p)}: {ctype_name(p.type)}" for p in command.params]
        arguments = ", ".join(param_name(p) for p in command.params)

        call = f'self._slots["{command.name}"].pointer({arguments})'
        if not is_void(command.return_type):
            call = "return " + call

        return [
            "",
            f"    def {command.name}({', '.join(signature)}) -> {ctype_name(command.return_type)}:",
            f"        {call}",
        ]

    def load_all_function(self, version: Version) -> list[str]:
        content = [
            "",
            "    def load_all_functions(self, get_proc_address=None):",
            f'        """Resolve every {version.name} command through *get_proc_address*."""',
            "        if get_proc_address is not None:",
            "            self.get_proc_address = get_proc_address",
            "        for name in COMMANDS:",
            "            slot = self._slots[name]",
        ]
        if self.config.error_check:
            content += [
                "            try:",
                "                address = self.get_proc_address(name)",
                "            except Exception as error:",
                "                raise LoadError(",
                "                    name, f\"Failed to get function pointer for '{name}'.\"",
                "                ) from error",
                "            if not address:",
                "                raise LoadError(name, f\"Failed to get function pointer for '{name}'.\")",
                "            try:",
                "                slot.pointer = slot.prototype(address)",
                "            except (TypeError, ValueError) as error:",
                "                raise LoadError(",
                "                    name, f\"Failed to convert function address to a callable for '{name}'.\"",
                "                ) from error",
            ]
        else:
            content.append("            slot.pointer = slot.prototype(self.get_proc_address(name))")
        return content

    def load_one_function(self) -> list[str]:
        content = [
            "",
            "    def load_function(self, name):",
            '        """Resolve, or re-resolve, a single command by name."""',
        ]
        if self.config.error_check:
            content += [
                "        slot = self._slots.get(name)",
                "        if slot is None:",
                "            raise LoadError(",
                "                name,",
                "                f\"Failed to find function slot. Ensure '{name}' is a valid OpenGL function.\",",
                "            )",
                "        try:",
                "            address = self.get_proc_address(name)",
                "        except Exception as error:",
                "            raise LoadError(name, f\"Failed to load function '{name}'.\") from error",
                "        if not address:",
                "            raise LoadError(",
                "                name,",
                "                f\"Failed to find function address. Ensure '{name}' is a valid OpenGL function.\",",
                "            )",
                "        try:",
                "            pointer = slot.prototype(address)",
                "        except (TypeError, ValueError) as error:",
                "            raise LoadError(",
                "                name, f\"Failed to convert function address to a callable for '{name}'.\"",
                "            ) from error",
                "        slot.pointer = pointer",
            ]
        else:
            content += [
                "        slot = self._slots[name]",
                "        slot.pointer = slot.prototype(self.get_proc_address(name))",
            ]
        return content

    def render_version_module(self, version: Version) -> str:
        """Generate the module for one version.

        In isolated mode the module carries its own interop table; in shared
        mode it imports the family table from ``interop.py``.
        """
        commands = list(version.commands)
        isolated = self.config.isolated
        title = f"{FAMILY_TITLES.get(version.api_family, version.api_family)} {version.number}"

        content = self.file_header()
        content += ctypes_imports(commands, prototypes=isolated)

        if isolated:
            table_class = interop_class_name(version.name)
        else:
            table_class = interop_class_name(version.api_family)
            imported = [table_class]
            if self.config.error_check:
                imported.append("LoadError")
            content += ["", f"from .interop import {', '.join(imported)}"]

        content += type_aliases(commands)
        content += self.enum_constants(version)

        if isolated:
            content += self.storage_helpers()
            content += self.interop_table(table_class, commands, version.name)

        content += ["", "", "COMMANDS = ("]
        content += [f'{INDENT}"{command.name}",' for command in commands]
        content += [
            ")",
            "",
            "",
            f"class {version.name}:",
            f'    """{title} entry points."""',
            "",
            "    def __init__(self, interop=None, get_proc_address=None):",
            "        self._owns_interop = interop is None",
            f"        self.interop = {table_class}() if interop is None else interop",
            "        self.get_proc_address = get_proc_address",
            "        self._slots = self.interop.slots",
            "",
            "    def __enter__(self):",
            "        return self",
            "",
            "    def __exit__(self, *exc_info):",
            "        self.close()",
            "",
            "    def close(self):",
            '        """Drop the function pointers; a shared table passed in is left alone."""',
            "        if self._owns_interop:",
            "            self.interop.close()",
            "        self.interop = None",
            "        self._slots = {}",
        ]

        for command in commands:
            content += self.wrapper(command)

        content += self.load_all_function(version)
        content += self.load_one_function()

        return "\n".join(content) + "\n"

    def render_interop_module(self, api_family: str, commands: list[Command]) -> str:
        """Generate the family-wide interop table used in shared mode."""
        content = self.file_header()
        content += ctypes_imports(commands, prototypes=True)
        content += type_aliases(commands)
        content += self.storage_helpers()
        content += self.interop_table(
            interop_class_name(api_family), commands, f"every {api_family} version"
        )
        return "\n".join(content) + "\n"

    def render_package_init(self, api_family: str, versions: list[Version]) -> str:
        content = self.file_header()
        exported = []

        if not self.config.isolated:
            table_class = interop_class_name(api_family)
            content.append(f"from .interop import {table_class}")
            exported.append(table_class)

        for version in versions:
            content.append(f"from .{module_name(version)} import {version.name}")
            exported.append(version.name)

        content += ["", "__all__ = ["]
        content += [f'{INDENT}"{name}",' for name in exported]
        content.append("]")
        return "\n".join(content) + "\n"

    def generate(self, output_dir: Path) -> list[Path]:
        """Write every family package under *output_dir*."""
        written = []

        for api_family in family_names(self.spec):
            package_dir = output_dir / api_family.lower()
            package_dir.mkdir(parents=True, exist_ok=True)
            versions = [v for v in self.spec.versions if v.api_family == api_family]

            if not self.config.isolated:
                commands = collect_interop_commands(self.spec.versions, api_family)
                path = package_dir / "interop.py"
                path.write_text(self.render_interop_module(api_family, commands))
                written.append(path)

            for version in versions:
                path = package_dir / f"{module_name(version)}.py"
                path.write_text(self.render_version_module(version))
                written.append(path)

            path = package_dir / "__init__.py"
            path.write_text(self.render_package_init(api_family, versions))
            written.append(path)

        return written
