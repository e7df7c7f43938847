"""Platform/target/variant matrix and the configuration names derived from it."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Iterator, List, Sequence
import itertools

if TYPE_CHECKING:
    from .metadata import MetadataResolver


CONFIG_PREFIX = "vs_"
DEBUG_CONFIG = "Debug"
RELEASE_CONFIG = "Release"


class Platform(str, Enum):
    WINDOWS = "Windows"
    IOS = "iOS"
    ANDROID = "Android"

    @classmethod
    def from_name(cls, name: str) -> "Platform":
        for platform in cls:
            if platform.value.lower() == name.strip().lower():
                return platform
        allowed = ", ".join(platform.value for platform in cls)
        raise ValueError(f"Unknown platform '{name}' (allowed: {allowed})")


class Target(str, Enum):
    EDITOR = "Editor"
    PLAYER = "Player"


class Variant(str, Enum):
    CLEAN = "Clean"
    CUSTOM = "Custom"


@dataclass(frozen=True, slots=True)
class Triple:
    platform: Platform
    target: Target
    variant: Variant

    @property
    def config_name(self) -> str:
        return config_name(self)

    @property
    def is_editor(self) -> bool:
        return self.target is Target.EDITOR


def config_name(triple: Triple) -> str:
    return f"{CONFIG_PREFIX}{triple.platform.value}_{triple.target.value}_{triple.variant.value}"


def parse_config_name(name: str) -> Triple | None:
    """Return the triple that ``name`` was generated from, or ``None``."""

    if not name.startswith(CONFIG_PREFIX):
        return None
    parts = name[len(CONFIG_PREFIX):].split("_")
    if len(parts) != 3:
        return None
    try:
        return Triple(Platform(parts[0]), Target(parts[1]), Variant(parts[2]))
    except ValueError:
        return None


def is_reserved_name(text: str) -> bool:
    """Whether an activation condition refers to a generated configuration."""

    return f"'{CONFIG_PREFIX}" in text


def enumerate_triples(platforms: Iterable[Platform] | None = None) -> List[Triple]:
    """Cross product ordered platform-major, then target, then variant."""

    selected = set(platforms) if platforms is not None else set(Platform)
    ordered = [platform for platform in Platform if platform in selected]
    return [
        Triple(platform, target, variant)
        for platform, target, variant in itertools.product(ordered, Target, Variant)
    ]


class ConfigurationMatrix:
    """Answers which generated configurations apply to which projects."""

    def __init__(
        self,
        resolver: "MetadataResolver",
        platforms: Sequence[Platform] | None = None,
    ) -> None:
        self._resolver = resolver
        self._triples = tuple(enumerate_triples(platforms))

    @property
    def triples(self) -> tuple[Triple, ...]:
        return self._triples

    @property
    def resolver(self) -> "MetadataResolver":
        return self._resolver

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._triples)

    def names(self) -> List[str]:
        return [triple.config_name for triple in self._triples]

    def is_valid(self, project: str, triple: Triple) -> bool:
        if self._resolver.is_package_project(project):
            return False
        if self._resolver.is_editor_project(project) and not triple.is_editor:
            return False
        definition = self._resolver.definition(project)
        if definition is not None and not definition.is_valid_platform(triple.platform, triple.target):
            return False
        return True

    def valid_triples(self, project: str) -> List[Triple]:
        return [triple for triple in self._triples if self.is_valid(project, triple)]


__all__ = [
    "CONFIG_PREFIX",
    "DEBUG_CONFIG",
    "RELEASE_CONFIG",
    "ConfigurationMatrix",
    "Platform",
    "Target",
    "Triple",
    "Variant",
    "config_name",
    "enumerate_triples",
    "is_reserved_name",
    "parse_config_name",
]
