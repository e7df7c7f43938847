"""Settings for the solution/project post-processor."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from core.config_loader import load_config_file, normalize_string_list

from .matrix import Platform


DEFAULT_CONFIG_NAMES = ("vsmatrix.toml", "vsmatrix.json", "vsmatrix.yaml", "vsmatrix.yml")


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"[{name}] must be a table")
    return value


@dataclass(slots=True)
class GlobalConfig:
    log_level: str = "error"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GlobalConfig":
        global_section = _section(data, "global")
        return cls(log_level=str(global_section.get("log_level", "error")).lower())


@dataclass(slots=True)
class MatrixSettings:
    platforms: tuple[Platform, ...] = tuple(Platform)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MatrixSettings":
        matrix_section = _section(data, "matrix")
        raw_platforms = matrix_section.get("platforms")
        if raw_platforms is None:
            return cls()
        names = normalize_string_list(raw_platforms, field_name="matrix.platforms")
        if not names:
            raise ValueError("matrix.platforms must name at least one platform")
        selected = {Platform.from_name(name) for name in names}
        return cls(platforms=tuple(platform for platform in Platform if platform in selected))


@dataclass(slots=True)
class WarningSettings:
    level: int = 4
    as_errors: bool = False
    response_files: List[str] = field(default_factory=lambda: ["mcs.rsp", "csc.rsp"])

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WarningSettings":
        warnings_section = _section(data, "warnings")
        level = warnings_section.get("level", 4)
        if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 4:
            raise ValueError("warnings.level must be an integer between 0 and 4")
        as_errors = warnings_section.get("as_errors", False)
        if not isinstance(as_errors, bool):
            raise TypeError("warnings.as_errors must be a boolean")
        response_files = warnings_section.get("response_files")
        settings = cls(level=level, as_errors=as_errors)
        if response_files is not None:
            settings.response_files = normalize_string_list(
                response_files,
                field_name="warnings.response_files",
            )
        return settings


@dataclass(slots=True)
class AssemblyEntry:
    name: str
    editor: bool = False
    source_files: List[str] = field(default_factory=list)
    definition: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AssemblyEntry":
        name = data.get("name")
        if not name or not str(name).strip():
            raise ValueError("Assembly entries must include a non-empty 'name'")
        definition = data.get("definition")
        return cls(
            name=str(name).strip(),
            editor=bool(data.get("editor", False)),
            source_files=normalize_string_list(data.get("source_files"), field_name="source_files"),
            definition=str(definition) if definition else None,
        )


@dataclass(slots=True)
class Settings:
    project_root: Path = field(default_factory=Path.cwd)
    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    matrix: MatrixSettings = field(default_factory=MatrixSettings)
    warnings: WarningSettings = field(default_factory=WarningSettings)
    defines: Dict[Platform, List[str]] = field(default_factory=dict)
    assemblies: List[AssemblyEntry] = field(default_factory=list)
    source: Path | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base_dir: Path | None = None) -> "Settings":
        base = base_dir or Path.cwd()
        paths_section = _section(data, "paths")
        raw_root = paths_section.get("project_root")
        project_root = Path(str(raw_root)) if raw_root else Path(".")
        if not project_root.is_absolute():
            project_root = (base / project_root).resolve()

        defines: Dict[Platform, List[str]] = {}
        for key, value in _section(data, "defines").items():
            platform = Platform.from_name(str(key))
            defines[platform] = normalize_string_list(
                value,
                field_name=f"defines.{key}",
                separator=";",
            )

        assemblies: List[AssemblyEntry] = []
        raw_assemblies = data.get("assemblies", [])
        if raw_assemblies:
            if not isinstance(raw_assemblies, Sequence) or isinstance(raw_assemblies, (str, bytes)):
                raise TypeError("[[assemblies]] must be an array of tables")
            for entry in raw_assemblies:
                if not isinstance(entry, Mapping):
                    raise TypeError("[[assemblies]] entries must be tables")
                assemblies.append(AssemblyEntry.from_mapping(entry))

        return cls(
            project_root=project_root,
            global_config=GlobalConfig.from_mapping(data),
            matrix=MatrixSettings.from_mapping(data),
            warnings=WarningSettings.from_mapping(data),
            defines=defines,
            assemblies=assemblies,
        )

    @classmethod
    def from_file(cls, path: Path) -> "Settings":
        data = load_config_file(path)
        settings = cls.from_mapping(data, base_dir=path.resolve().parent)
        settings.source = path
        return settings

    @classmethod
    def discover(cls, directory: Path) -> "Settings":
        """Load the first default settings file in ``directory``, or defaults."""

        for name in DEFAULT_CONFIG_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return cls.from_file(candidate)
        return cls(project_root=directory.resolve())


__all__ = [
    "AssemblyEntry",
    "DEFAULT_CONFIG_NAMES",
    "GlobalConfig",
    "MatrixSettings",
    "Settings",
    "WarningSettings",
]
