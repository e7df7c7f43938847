"""File-backed collaborators supplying metadata to the rewriters."""
from __future__ import annotations

from pathlib import Path
import re
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Protocol, Sequence

import yaml

from core.config_loader import load_config_file, register_loader

from .config_loader import AssemblyEntry
from .errors import MetadataError
from .matrix import Platform, Target
from .metadata import AssemblyDefinition, AssemblyInfo, AssemblyRecord


ASSETS_DIR = "Assets"
NOWARN_PREFIX = "-nowarn:"

Exclusion = Platform | Target

# Unity writes the "Any" platform entry with an empty key (`      : Any`).
_EMPTY_KEY = re.compile(r"^([ \t]*):(?=\s|$)", re.MULTILINE)


def load_unity_meta(text: str) -> Any:
    """Decode a Unity `.meta` sidecar, quoting the empty keys PyYAML rejects."""

    return yaml.safe_load(_EMPTY_KEY.sub(r"\1'':", text))


register_loader(".meta", load_unity_meta)


class DefineSource(Protocol):
    def custom_defines(self, platform: Platform) -> FrozenSet[str]:
        ...


class PluginSource(Protocol):
    def excluded(self, path: str) -> FrozenSet[Exclusion]:
        ...


class IgnoreListSource(Protocol):
    def warning_codes(self) -> FrozenSet[str]:
        ...


class ManifestAssemblySource:
    """Assemblies declared in the settings file, with optional asmdef files."""

    def __init__(self, entries: Sequence[AssemblyEntry], project_root: Path) -> None:
        self._entries = list(entries)
        self._root = project_root

    def load_assemblies(self) -> Iterator[AssemblyRecord]:
        for entry in self._entries:
            definition: AssemblyDefinition | None = None
            if entry.definition:
                path = Path(entry.definition)
                if not path.is_absolute():
                    path = self._root / path
                if not path.is_file():
                    raise MetadataError(
                        f"Assembly definition for '{entry.name}' not found: {path}",
                        path=str(path),
                    )
                definition = AssemblyDefinition.from_mapping(load_config_file(path))
            yield AssemblyRecord(
                assembly=AssemblyInfo(
                    name=entry.name,
                    editor=entry.editor,
                    source_files=list(entry.source_files),
                ),
                definition=definition,
            )


class ConfiguredDefineSource:
    def __init__(self, defines: Mapping[Platform, Iterable[str]]) -> None:
        self._defines = {platform: frozenset(values) for platform, values in defines.items()}

    def custom_defines(self, platform: Platform) -> FrozenSet[str]:
        return self._defines.get(platform, frozenset())


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true"}
    return bool(value)


class PluginMetaSource:
    """Reads plugin compatibility from Unity ``.meta`` sidecar files.

    Plugins marked compatible with any platform report the platforms they
    explicitly exclude; otherwise every platform without an enabled entry
    counts as excluded.
    """

    _ANY_EXCLUDES: Dict[str, Exclusion] = {
        "Exclude Editor": Target.EDITOR,
        "Exclude Win": Platform.WINDOWS,
        "Exclude iOS": Platform.IOS,
        "Exclude Android": Platform.ANDROID,
    }
    _PLATFORM_ENTRIES: Dict[Exclusion, tuple[str, str]] = {
        Target.EDITOR: ("Editor", "Editor"),
        Platform.WINDOWS: ("Standalone", "Win"),
        Platform.IOS: ("iPhone", "iOS"),
        Platform.ANDROID: ("Android", "Android"),
    }

    def __init__(self, project_root: Path) -> None:
        self._root = project_root

    @staticmethod
    def asset_path(path: str) -> str:
        normalized = path.replace("\\", "/")
        if normalized.startswith(f"{ASSETS_DIR}/"):
            return normalized
        index = normalized.find(f"/{ASSETS_DIR}/")
        if index < 0:
            return normalized
        return normalized[index + 1:]

    @staticmethod
    def _platform_entries(importer: Mapping[str, Any]) -> List[tuple[str, str, Mapping[str, Any]]]:
        raw = importer.get("platformData")
        entries: List[tuple[str, str, Mapping[str, Any]]] = []
        if isinstance(raw, Mapping):
            # Pre-2017 layout keys entries directly by platform name.
            for key, data in raw.items():
                if isinstance(data, Mapping):
                    entries.append((str(key), str(key), data))
            return entries
        if not isinstance(raw, list):
            return entries
        for item in raw:
            if not isinstance(item, Mapping):
                continue
            first = item.get("first")
            second = item.get("second")
            if not isinstance(first, Mapping) or not isinstance(second, Mapping):
                continue
            for category, name in first.items():
                entries.append(("" if category is None else str(category), "" if name is None else str(name), second))
        return entries

    def excluded(self, path: str) -> FrozenSet[Exclusion]:
        meta_path = self._root / f"{self.asset_path(path)}.meta"
        if not meta_path.is_file():
            return frozenset()
        try:
            document = load_config_file(meta_path)
        except Exception as exc:
            raise MetadataError(f"Unable to read plugin settings {meta_path}: {exc}", path=str(meta_path)) from exc

        importer = document.get("PluginImporter")
        if not isinstance(importer, Mapping):
            return frozenset()

        entries = self._platform_entries(importer)
        any_enabled = False
        any_settings: Dict[str, Any] = {}
        enabled: set[tuple[str, str]] = set()
        for category, name, data in entries:
            is_enabled = _flag(data.get("enabled", 0))
            if "Any" in (category, name):
                any_enabled = any_enabled or is_enabled
                settings = data.get("settings")
                if isinstance(settings, Mapping):
                    any_settings.update({str(key): value for key, value in settings.items()})
            elif is_enabled:
                enabled.add((category, name))

        excluded: set[Exclusion] = set()
        if any_enabled:
            for setting, exclusion in self._ANY_EXCLUDES.items():
                if _flag(any_settings.get(setting, 0)):
                    excluded.add(exclusion)
        else:
            for exclusion, entry in self._PLATFORM_ENTRIES.items():
                if entry not in enabled:
                    excluded.add(exclusion)
        return frozenset(excluded)


class ResponseFileIgnoreList:
    """Warning codes disabled through ``-nowarn:`` compiler response files."""

    def __init__(self, project_root: Path, names: Iterable[str]) -> None:
        self._root = project_root
        self._names = list(names)

    def warning_codes(self) -> FrozenSet[str]:
        codes: set[str] = set()
        for name in self._names:
            path = self._root / ASSETS_DIR / name
            if not path.is_file():
                continue
            for line in path.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if not line.startswith(NOWARN_PREFIX):
                    continue
                payload = line[len(NOWARN_PREFIX):]
                codes.update(code.strip() for code in payload.split(",") if code.strip())
        return frozenset(codes)


__all__ = [
    "ConfiguredDefineSource",
    "DefineSource",
    "Exclusion",
    "IgnoreListSource",
    "ManifestAssemblySource",
    "PluginMetaSource",
    "PluginSource",
    "ResponseFileIgnoreList",
    "load_unity_meta",
]
