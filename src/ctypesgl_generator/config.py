"""Run configuration for the generator."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

VALID_PROFILES = {"core", "compatibility"}

VALID_ERROR_CODES = {
    "INVALID_PROFILE",
}


class StorageMode(Enum):
    """Where generated modules keep their function pointers."""

    ISOLATED = "isolated"  # one private table per version module
    SHARED = "shared"  # one table per API family, referenced by every version


@dataclass(frozen=True)
class GeneratorConfig:
    mode: StorageMode = StorageMode.SHARED
    error_check: bool = True
    profile: str = "core"

    @property
    def isolated(self) -> bool:
        return self.mode is StorageMode.ISOLATED


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: Optional[str] = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def validate_profile(profile: str) -> str:
    if profile in VALID_PROFILES:
        return profile
    raise ConfigError(
        "INVALID_PROFILE",
        f"Unsupported profile: {profile}",
        "Use one of: core, compatibility.",
    )
