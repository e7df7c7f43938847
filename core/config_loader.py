"""Shared helpers for loading settings files and Unity metadata documents."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping

import json
import tomllib

import yaml


ConfigLoader = Callable[[str], Any]

_BOM = "\ufeff"


def _load_yaml(text: str) -> Any:
    return yaml.safe_load(text)


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": tomllib.loads,
    ".json": json.loads,
    ".asmdef": json.loads,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
}
"""Document loaders keyed by lower-case file suffix."""


def register_loader(suffix: str, loader: ConfigLoader) -> None:
    key = suffix.lower()
    if not key.startswith("."):
        raise ValueError(f"Loader suffix must start with '.': {suffix!r}")
    FILE_LOADERS[key] = loader


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Decode the mapping stored in ``path``.

    The loader is picked by suffix. Unity writes some files with a UTF-8 byte
    order mark, which is dropped before decoding. An empty document yields an
    empty mapping.
    """

    loader = FILE_LOADERS.get(path.suffix.lower())
    if loader is None:
        known = ", ".join(sorted(FILE_LOADERS))
        raise ValueError(f"Cannot load '{path.name}': unsupported extension (known: {known})")

    text = path.read_text(encoding="utf-8")
    data = loader(text.lstrip(_BOM))
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"'{path}' must hold a mapping at the top level, not {type(data).__name__}")
    return data


def normalize_string_list(
    value: Any,
    *,
    field_name: str | None = None,
    separator: str | None = None,
) -> List[str]:
    """Return ``value`` as a list of stripped, non-empty strings.

    Accepts None, a single string (split on ``separator`` when given) or a
    sequence of strings.
    """

    where = f"{field_name}: " if field_name else ""
    if value is None:
        return []
    if isinstance(value, str):
        pieces: Iterable[Any] = value.split(separator) if separator else (value,)
    elif isinstance(value, (list, tuple)):
        pieces = value
    else:
        raise TypeError(f"{where}expected a string or a list of strings, got {type(value).__name__}")

    result: List[str] = []
    for piece in pieces:
        if not isinstance(piece, str):
            raise TypeError(f"{where}list entries must be strings, got {piece!r}")
        if piece.strip():
            result.append(piece.strip())
    return result


__all__ = [
    "ConfigLoader",
    "FILE_LOADERS",
    "load_config_file",
    "normalize_string_list",
    "register_loader",
]
