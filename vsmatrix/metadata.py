"""Per-project compatibility metadata with a build-once lookup cache."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Protocol
import threading

from core.config_loader import normalize_string_list

from .errors import MetadataError
from .matrix import Platform, Target


PACKAGE_ROOT = "Packages/"
EDITOR_NAME_MARKER = ".Editor"


class ProjectKind(str, Enum):
    NORMAL = "normal"
    EDITOR = "editor"
    PACKAGE = "package"


@dataclass(slots=True)
class AssemblyDefinition:
    name: str
    include_platforms: List[str] | None = None
    exclude_platforms: List[str] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AssemblyDefinition":
        # An empty list means "no restriction", the same as an absent one.
        include = normalize_string_list(data.get("includePlatforms"), field_name="includePlatforms")
        exclude = normalize_string_list(data.get("excludePlatforms"), field_name="excludePlatforms")
        return cls(
            name=str(data.get("name", "")),
            include_platforms=include or None,
            exclude_platforms=exclude or None,
        )

    @staticmethod
    def _matches(entry: str, platform: Platform, target: Target) -> bool:
        return platform.value in entry or entry == target.value

    def is_valid_platform(self, platform: Platform, target: Target) -> bool:
        if self.include_platforms is not None:
            return any(self._matches(entry, platform, target) for entry in self.include_platforms)
        if self.exclude_platforms is not None:
            return not any(self._matches(entry, platform, target) for entry in self.exclude_platforms)
        return True


@dataclass(slots=True)
class AssemblyInfo:
    name: str
    editor: bool = False
    source_files: List[str] = field(default_factory=list)

    @property
    def is_package(self) -> bool:
        if not self.source_files:
            return False
        return self.source_files[0].replace("\\", "/").startswith(PACKAGE_ROOT)


@dataclass(slots=True)
class AssemblyRecord:
    assembly: AssemblyInfo
    definition: AssemblyDefinition | None = None


class AssemblySource(Protocol):
    def load_assemblies(self) -> Iterable[AssemblyRecord]:
        ...


class MetadataResolver:
    """Classifies projects by name.

    The underlying source is read on the first lookup and cached for the
    lifetime of the resolver; concurrent first lookups load it only once.
    """

    def __init__(self, source: AssemblySource) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._assemblies: Dict[str, AssemblyInfo] | None = None
        self._definitions: Dict[str, AssemblyDefinition] = {}

    def _ensure_loaded(self) -> Dict[str, AssemblyInfo]:
        assemblies = self._assemblies
        if assemblies is not None:
            return assemblies
        with self._lock:
            assemblies = self._assemblies
            if assemblies is None:
                assemblies = self._populate()
            return assemblies

    def _populate(self) -> Dict[str, AssemblyInfo]:
        assemblies: Dict[str, AssemblyInfo] = {}
        definitions: Dict[str, AssemblyDefinition] = {}
        try:
            records = list(self._source.load_assemblies())
        except MetadataError:
            raise
        except Exception as exc:
            raise MetadataError(f"Unable to load assembly metadata: {exc}") from exc
        for record in records:
            name = record.assembly.name
            assemblies[name] = record.assembly
            if record.definition is not None:
                definitions[name] = record.definition
        self._definitions = definitions
        self._assemblies = assemblies
        return assemblies

    @property
    def loaded(self) -> bool:
        return self._assemblies is not None

    def assembly(self, name: str) -> AssemblyInfo | None:
        return self._ensure_loaded().get(name)

    def definition(self, name: str) -> AssemblyDefinition | None:
        self._ensure_loaded()
        return self._definitions.get(name)

    def is_editor_project(self, name: str) -> bool:
        assembly = self.assembly(name)
        if assembly is not None and assembly.editor:
            return True
        return EDITOR_NAME_MARKER in name

    def is_package_project(self, name: str) -> bool:
        assembly = self.assembly(name)
        return assembly is not None and assembly.is_package

    def classify(self, name: str) -> ProjectKind:
        if self.is_package_project(name):
            return ProjectKind.PACKAGE
        if self.is_editor_project(name):
            return ProjectKind.EDITOR
        return ProjectKind.NORMAL


__all__ = [
    "AssemblyDefinition",
    "AssemblyInfo",
    "AssemblyRecord",
    "AssemblySource",
    "MetadataResolver",
    "ProjectKind",
]
