"""OpenGL registry parsing."""

import xml.etree.ElementTree as ET
from typing import Optional

from .grammar import parse_declaration
from .types import Command, EnumConstant, GLSpec, Parameter, Version

# Registry api attribute -> generated family
API_FAMILIES = {
    "gl": "GL",
    "gles1": "GLES",
    "gles2": "GLES",
}


class RegistryError(ValueError):
    """The registry references something it never declares."""


def version_name(api_family: str, number: str) -> str:
    """``("GL", "4.6")`` -> ``"GL46"``."""
    return api_family + number.replace(".", "")


class GLRegistry:
    """Parser for the OpenGL registry XML."""

    def __init__(self) -> None:
        self.header_comment = ""
        self.enums: dict[str, dict[Optional[str], EnumConstant]] = {}  # name -> api -> enum
        self.commands: dict[str, Command] = {}
        self.versions: list[Version] = []

    def load_gl_registry(self, xml_path: str) -> ET.Element:
        """Load and parse the OpenGL registry XML."""
        tree = ET.parse(xml_path)
        return tree.getroot()

    def parse_header(self, root: ET.Element) -> None:
        """Read the registry's top-level comment (its copyright notice)."""
        comment = root.find("comment")
        if comment is not None and comment.text:
            self.header_comment = comment.text.strip()

    def parse_enums(self, root: ET.Element) -> None:
        """Parse enum definitions from the registry."""
        for enums_group in root.findall("enums"):
            for enum_elem in enums_group.findall("enum"):
                name = enum_elem.get("name")
                value = enum_elem.get("value")

                if not name or not value:
                    continue

                # The same name may be declared once per api with different values
                by_api = self.enums.setdefault(name, {})
                by_api.setdefault(enum_elem.get("api"), EnumConstant(name=name, value=value))

    def parse_param(self, param_elem: ET.Element) -> Parameter:
        """Parse a function parameter."""
        param_type, param_name = parse_declaration(param_elem)
        return Parameter(type=param_type, name=param_name, group=param_elem.get("group"))

    def parse_command(self, command_elem: ET.Element) -> Command:
        """Parse one ``<command>``: its prototype and ordered parameters."""
        proto_elem = command_elem.find("proto")
        if proto_elem is None:
            raise RegistryError("Command is missing its <proto> element")

        return_type, cmd_name = parse_declaration(proto_elem)
        params = tuple(self.parse_param(p) for p in command_elem.findall("param"))

        return Command(name=cmd_name, return_type=return_type, params=params)

    def parse_commands(self, root: ET.Element) -> None:
        """Parse command definitions from the registry."""
        for commands_group in root.findall("commands"):
            for command_elem in commands_group.findall("command"):
                command = self.parse_command(command_elem)
                self.commands[command.name] = command

    def lookup_enum(self, name: str, api: str) -> EnumConstant:
        by_api = self.enums.get(name)
        if not by_api:
            raise RegistryError(f"Feature requires undeclared enum {name}")
        if api in by_api:
            return by_api[api]
        if None in by_api:
            return by_api[None]
        return next(iter(by_api.values()))

    def lookup_command(self, name: str) -> Command:
        try:
            return self.commands[name]
        except KeyError:
            raise RegistryError(f"Feature requires undeclared command {name}") from None

    def parse_features(self, root: ET.Element, profile: str = "core") -> None:
        """Parse feature definitions (versions) from the registry.

        Each version is cumulative: it carries everything earlier versions of
        the same api required, minus what the selected profile removes.
        """
        # api -> ordered names (dicts keep first-insertion order)
        enum_names: dict[str, dict[str, None]] = {}
        command_names: dict[str, dict[str, None]] = {}

        for feature_elem in root.findall("feature"):
            api = feature_elem.get("api")
            number = feature_elem.get("number")

            if api not in API_FAMILIES or not number:
                continue

            enums = enum_names.setdefault(api, {})
            commands = command_names.setdefault(api, {})

            # Process <require> blocks
            for require_elem in feature_elem.findall("require"):
                if not self._applies(require_elem, api, profile):
                    continue
                for enum_elem in require_elem.findall("enum"):
                    enums.setdefault(enum_elem.get("name"), None)
                for command_elem in require_elem.findall("command"):
                    commands.setdefault(command_elem.get("name"), None)

            # Process <remove> blocks (remove from previous versions)
            for remove_elem in feature_elem.findall("remove"):
                if not self._applies(remove_elem, api, profile):
                    continue
                for enum_elem in remove_elem.findall("enum"):
                    enums.pop(enum_elem.get("name"), None)
                for command_elem in remove_elem.findall("command"):
                    commands.pop(command_elem.get("name"), None)

            family = API_FAMILIES[api]
            self.versions.append(
                Version(
                    api_family=family,
                    name=version_name(family, number),
                    number=number,
                    enums=tuple(self.lookup_enum(n, api) for n in enums),
                    commands=tuple(self.lookup_command(n) for n in commands),
                )
            )

    @staticmethod
    def _applies(block: ET.Element, api: str, profile: str) -> bool:
        block_profile = block.get("profile")
        block_api = block.get("api")
        if block_profile is not None and block_profile != profile:
            return False
        if block_api is not None and block_api != api:
            return False
        return True

    def build_spec(self) -> GLSpec:
        return GLSpec(versions=tuple(self.versions), header_comment=self.header_comment)


def load_spec(xml_path: str, profile: str = "core") -> GLSpec:
    """Parse a registry file into a read-only :class:`GLSpec`."""
    registry = GLRegistry()
    root = registry.load_gl_registry(xml_path)

    registry.parse_header(root)
    registry.parse_enums(root)
    registry.parse_commands(root)
    registry.parse_features(root, profile)

    return registry.build_spec()
