"""Preprocessor symbol calculation for generated configurations."""
from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Tuple

from .matrix import Platform, Target, Triple, Variant


DefineTag = Platform | Target

_PLATFORM_MARKERS: Dict[Platform, Tuple[str, ...]] = {
    Platform.WINDOWS: ("_WIN", "_STANDALONE"),
    Platform.IOS: ("_IOS", "_IPHONE", "_OSX"),
    Platform.ANDROID: ("_ANDROID",),
}
_EDITOR_MARKER = "_EDITOR"

_PLATFORM_SYMBOLS: Dict[Platform, Tuple[str, ...]] = {
    Platform.WINDOWS: ("UNITY_STANDALONE", "UNITY_STANDALONE_WIN"),
    Platform.IOS: ("UNITY_IOS", "UNITY_IPHONE", "UNITY_IPHONE_API"),
    Platform.ANDROID: ("UNITY_ANDROID", "UNITY_ANDROID_API"),
}
_EDITOR_SYMBOLS: Tuple[str, ...] = ("UNITY_EDITOR", "UNITY_EDITOR_64")


def classify_define(symbol: str) -> FrozenSet[DefineTag]:
    """Return the platforms and targets a symbol is specific to.

    An empty result means the symbol applies everywhere.
    """

    tags: set[DefineTag] = {
        platform
        for platform, markers in _PLATFORM_MARKERS.items()
        if any(marker in symbol for marker in markers)
    }
    if _EDITOR_MARKER in symbol:
        tags.add(Target.EDITOR)
    return frozenset(tags)


def applies_to(symbol: str, triple: Triple) -> bool:
    tags = classify_define(symbol)
    if any(isinstance(tag, Platform) and tag is not triple.platform for tag in tags):
        return False
    if Target.EDITOR in tags and not triple.is_editor:
        return False
    return True


def editor_host_symbol(platform: Platform) -> str:
    return "UNITY_EDITOR_OSX" if platform is Platform.IOS else "UNITY_EDITOR_WIN"


def mandatory_defines(triple: Triple) -> FrozenSet[str]:
    symbols = set(_PLATFORM_SYMBOLS[triple.platform])
    if triple.is_editor:
        symbols.update(_EDITOR_SYMBOLS)
        symbols.add(editor_host_symbol(triple.platform))
    return frozenset(symbols)


def compute_defines(
    triple: Triple,
    template_defines: Iterable[str],
    custom_defines: Iterable[str],
) -> FrozenSet[str]:
    """Derive the symbol set for ``triple`` from the template block's symbols.

    Symbols tagged for other platforms (or for the editor, on player
    triples) are dropped. The custom symbols are merged in for
    :attr:`Variant.CUSTOM` and stripped for :attr:`Variant.CLEAN`; the
    platform and editor symbols are always added last.
    """

    symbols = {symbol for symbol in template_defines if symbol and applies_to(symbol, triple)}
    custom = {symbol for symbol in custom_defines if symbol}
    if triple.variant is Variant.CUSTOM:
        symbols |= custom
    else:
        symbols -= custom
    symbols |= mandatory_defines(triple)
    return frozenset(symbols)


def split_defines(text: str | None) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(";") if part.strip()]


def join_defines(symbols: Iterable[str]) -> str:
    return ";".join(sorted(set(symbols)))


__all__ = [
    "applies_to",
    "classify_define",
    "compute_defines",
    "editor_host_symbol",
    "join_defines",
    "mandatory_defines",
    "split_defines",
]
