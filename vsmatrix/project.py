"""Rewrites MSBuild project files to carry one configuration per valid triple."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Callable, Iterable, List, Sequence
import copy
import re
import xml.etree.ElementTree as ET

from .config_loader import WarningSettings
from .defines import compute_defines, join_defines, split_defines
from .errors import StructureError
from .matrix import DEBUG_CONFIG, RELEASE_CONFIG, ConfigurationMatrix, Platform, Triple, is_reserved_name
from .sources import DefineSource, IgnoreListSource, PluginSource


XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
DEBUG_CONDITION = f"'{DEBUG_CONFIG}|AnyCPU'"
RELEASE_CONDITION = f"'{RELEASE_CONFIG}|AnyCPU'"
IOS_SUPPORT_MARKER = "/iOSSupport/"

_WARNING_CODE_SEPARATORS = re.compile(r"[;,]")


class ReferenceKind(str, Enum):
    TOOLING = "tooling"
    EDITOR = "editor"
    PLUGIN = "plugin"
    OTHER = "other"


def classify_reference(path: str) -> ReferenceKind:
    """Classify an assembly reference by its (forward-slash) hint path."""

    if "VisualStudio" in path or "NetStandard" in path:
        return ReferenceKind.TOOLING
    if "UnityEditor" in path or ".Editor" in path:
        return ReferenceKind.EDITOR
    if "/Assets/" in path or path.startswith("Assets/"):
        return ReferenceKind.PLUGIN
    return ReferenceKind.OTHER


def block_condition(name: str) -> str:
    return f" '$(Configuration)|$(Platform)' == '{name}|AnyCPU' "


def output_path(name: str) -> str:
    return f"Temp\\bin\\{name}\\"


def activation_condition(triples: Iterable[Triple]) -> str:
    """Active under Debug plus every listed configuration."""

    parts = [f"'$(Configuration)' == '{DEBUG_CONFIG}'"]
    parts.extend(f"'$(Configuration)' == '{triple.config_name}'" for triple in triples)
    return " Or ".join(parts)


def split_warning_codes(text: str | None) -> set[str]:
    if not text:
        return set()
    return {code.strip() for code in _WARNING_CODE_SEPARATORS.split(text) if code.strip()}


@dataclass(slots=True)
class _Document:
    root: ET.Element
    namespace: str

    def tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}" if self.namespace else name

    def child(self, parent: ET.Element, name: str) -> ET.Element | None:
        return parent.find(self.tag(name))

    def ensure_child(self, parent: ET.Element, name: str) -> ET.Element:
        element = self.child(parent, name)
        if element is None:
            element = ET.SubElement(parent, self.tag(name))
        return element

    def remove_child(self, parent: ET.Element, name: str) -> ET.Element | None:
        element = self.child(parent, name)
        if element is not None:
            parent.remove(element)
        return element

    def property_groups(self) -> List[ET.Element]:
        return self.root.findall(self.tag("PropertyGroup"))


@dataclass(slots=True)
class _Anchors:
    template: ET.Element
    debug: ET.Element
    release: ET.Element | None
    generated: List[ET.Element]


def parse_document(text: str) -> _Document:
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        parser.feed(text.lstrip("\ufeff"))
        root = parser.close()
    except ET.ParseError as exc:
        raise StructureError(f"Project is not well-formed XML: {exc}") from exc
    namespace = ""
    if isinstance(root.tag, str) and root.tag.startswith("{"):
        namespace = root.tag[1:].partition("}")[0]
        ET.register_namespace("", namespace)
    return _Document(root=root, namespace=namespace)


def serialize_document(document: _Document, *, newline: str = "\n") -> str:
    ET.indent(document.root, space="  ")
    body = ET.tostring(document.root, encoding="unicode")
    text = f"{XML_DECLARATION}\n{body}"
    if newline != "\n":
        text = text.replace("\n", newline)
    return text


def _first(groups: Sequence[ET.Element], predicate: Callable[[ET.Element], bool]) -> ET.Element | None:
    for group in groups:
        if predicate(group):
            return group
    return None


def find_anchors(document: _Document, *, needs_insertion_point: bool = True) -> _Anchors:
    """Locate the blocks the rewrite works from.

    Release|AnyCPU only marks where generated blocks go, so it may be absent
    when a previous run left generated blocks behind, or when nothing will be
    inserted.
    """

    groups = document.property_groups()
    template = _first(groups, lambda g: len(g) > 0 and document.child(g, "Configuration") is not None)
    debug = _first(groups, lambda g: DEBUG_CONDITION in g.get("Condition", ""))
    release = _first(groups, lambda g: RELEASE_CONDITION in g.get("Condition", ""))
    generated = [group for group in groups if is_reserved_name(group.get("Condition", ""))]

    if template is None:
        raise StructureError("Project has no Debug template PropertyGroup")
    if debug is None:
        raise StructureError("Project has no Debug|AnyCPU PropertyGroup")
    if release is None and not generated and needs_insertion_point:
        raise StructureError("Project has no Release|AnyCPU PropertyGroup")
    return _Anchors(template=template, debug=debug, release=release, generated=generated)


class ProjectDocumentRewriter:
    """Expands the Debug|AnyCPU block of a project into the configuration matrix.

    The Release|AnyCPU block marks where generated blocks go and is removed
    afterwards. Blocks generated by a previous run are replaced, and when the
    Release block is already gone their position is reused, so rewriting an
    already rewritten project reproduces it.
    """

    def __init__(
        self,
        matrix: ConfigurationMatrix,
        *,
        defines: DefineSource,
        plugins: PluginSource,
        ignore_list: IgnoreListSource,
        warnings: WarningSettings | None = None,
    ) -> None:
        self._matrix = matrix
        self._defines = defines
        self._plugins = plugins
        self._ignore_list = ignore_list
        self._warnings = warnings or WarningSettings()

    @staticmethod
    def project_name(document: _Document, path: str | None = None) -> str:
        """The file stem of ``path``, else the document's AssemblyName."""

        if path:
            return PurePath(path.replace("\\", "/")).stem
        for group in document.property_groups():
            element = document.child(group, "AssemblyName")
            if element is not None and element.text and element.text.strip():
                return element.text.strip()
        raise StructureError("Project has no AssemblyName and no path to derive one from")

    def rewrite(self, text: str, path: str | None = None) -> str:
        newline = "\r\n" if "\r\n" in text else "\n"
        document = parse_document(text)
        name = self.project_name(document, path)
        valid = self._matrix.valid_triples(name)
        anchors = find_anchors(document, needs_insertion_point=bool(valid))

        insert_at = self._remove_generated(document, anchors)
        self._apply_warning_policy(document, anchors)

        blocks = [self._create_block(document, anchors.debug, triple) for triple in valid]
        for offset, block in enumerate(blocks):
            document.root.insert(insert_at + offset, block)

        if not self._matrix.resolver.is_editor_project(name):
            self._condition_references(document)
        self._condition_project_references(document)

        if anchors.release is not None:
            document.root.remove(anchors.release)

        return serialize_document(document, newline=newline)

    def _remove_generated(self, document: _Document, anchors: _Anchors) -> int:
        """Drop blocks from a previous run; return where new blocks belong."""

        root = document.root
        anchor_index = list(root).index(anchors.generated[0]) if anchors.generated else -1
        for group in anchors.generated:
            root.remove(group)
        if anchors.release is not None:
            return list(root).index(anchors.release)
        return anchor_index

    def _apply_warning_policy(self, document: _Document, anchors: _Anchors) -> None:
        template, debug = anchors.template, anchors.debug

        document.ensure_child(template, "WarningLevel").text = str(self._warnings.level)
        document.remove_child(debug, "WarningLevel")

        document.ensure_child(template, "TreatWarningsAsErrors").text = "True" if self._warnings.as_errors else "False"
        document.remove_child(debug, "TreatWarningsAsErrors")

        codes = set(self._ignore_list.warning_codes())
        moved = document.remove_child(debug, "NoWarn")
        if moved is not None:
            codes |= split_warning_codes(moved.text)
        existing = document.child(template, "NoWarn")
        if existing is not None:
            codes |= split_warning_codes(existing.text)
        if codes:
            document.ensure_child(template, "NoWarn").text = ",".join(sorted(codes))

    def _create_block(self, document: _Document, donor: ET.Element, triple: Triple) -> ET.Element:
        block = copy.deepcopy(donor)
        name = triple.config_name
        block.set("Condition", block_condition(name))
        document.ensure_child(block, "OutputPath").text = output_path(name)

        defines_element = document.ensure_child(block, "DefineConstants")
        symbols = compute_defines(
            triple,
            split_defines(defines_element.text),
            self._defines.custom_defines(triple.platform),
        )
        defines_element.text = join_defines(symbols)
        return block

    def _editor_triples(self, path: str) -> List[Triple]:
        ios_only = IOS_SUPPORT_MARKER in path
        return [
            triple
            for triple in self._matrix
            if triple.is_editor and (not ios_only or triple.platform is Platform.IOS)
        ]

    def _plugin_triples(self, path: str) -> List[Triple] | None:
        excluded = self._plugins.excluded(path)
        if not excluded:
            return None
        return [
            triple
            for triple in self._matrix
            if triple.target not in excluded and (triple.is_editor or triple.platform not in excluded)
        ]

    def _condition_references(self, document: _Document) -> None:
        for reference in document.root.iter(document.tag("Reference")):
            hint = document.child(reference, "HintPath")
            if hint is None or not hint.text:
                continue
            path = hint.text.strip().replace("\\", "/")
            kind = classify_reference(path)
            if kind is ReferenceKind.EDITOR:
                reference.set("Condition", activation_condition(self._editor_triples(path)))
            elif kind is ReferenceKind.PLUGIN:
                triples = self._plugin_triples(path)
                if triples is not None:
                    reference.set("Condition", activation_condition(triples))

    def _condition_project_references(self, document: _Document) -> None:
        for reference in document.root.iter(document.tag("ProjectReference")):
            name_element = document.child(reference, "Name")
            if name_element is not None and name_element.text and name_element.text.strip():
                name = name_element.text.strip()
            elif reference.get("Include"):
                name = PurePath(reference.get("Include", "").replace("\\", "/")).stem
            else:
                raise StructureError("ProjectReference has neither a Name nor an Include path")
            valid = self._matrix.valid_triples(name)
            if len(valid) < len(self._matrix.triples):
                reference.set("Condition", activation_condition(valid))


__all__ = [
    "ProjectDocumentRewriter",
    "ReferenceKind",
    "activation_condition",
    "block_condition",
    "classify_reference",
    "find_anchors",
    "output_path",
    "parse_document",
    "serialize_document",
]
