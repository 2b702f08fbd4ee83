"""Cross-version command deduplication for shared interop tables."""

from collections.abc import Iterable

from .types import Command, GLSpec, Version


def family_names(spec: GLSpec) -> list[str]:
    """API families present in *spec*, in document order."""
    families: list[str] = []
    for version in spec.versions:
        if version.api_family not in families:
            families.append(version.api_family)
    return families


def collect_interop_commands(versions: Iterable[Version], api_family: str) -> list[Command]:
    """Get the unique commands of every version in *api_family*, sorted by name.

    Versions and their commands are walked in document order and the first
    declaration of a name wins, even if a later version declares it
    differently.
    """
    commands: dict[str, Command] = {}
    for version in versions:
        if version.api_family != api_family:
            continue
        for command in version.commands:
            commands.setdefault(command.name, command)

    return sorted(commands.values(), key=lambda c: c.name)
