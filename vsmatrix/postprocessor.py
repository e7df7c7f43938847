"""Entry points that rewrite solution and project text without ever raising."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List
import traceback

from core.console import Console, Reporter

from .config_loader import Settings, WarningSettings
from .errors import MetadataError, StructureError
from .matrix import ConfigurationMatrix
from .metadata import MetadataResolver
from .project import ProjectDocumentRewriter
from .solution import SolutionRewriter
from .sources import (
    ConfiguredDefineSource,
    DefineSource,
    IgnoreListSource,
    ManifestAssemblySource,
    PluginMetaSource,
    PluginSource,
    ResponseFileIgnoreList,
)


@dataclass(slots=True)
class RewriteFailure:
    path: str
    kind: str
    error: BaseException
    details: str

    @property
    def category(self) -> str:
        if isinstance(self.error, StructureError):
            return "structure"
        if isinstance(self.error, MetadataError):
            return "metadata"
        return "unexpected"


@dataclass(slots=True)
class Postprocessor:
    matrix: ConfigurationMatrix
    defines: DefineSource
    plugins: PluginSource
    ignore_list: IgnoreListSource
    warnings: WarningSettings = field(default_factory=WarningSettings)
    console: Reporter = field(default_factory=Console)
    failures: List[RewriteFailure] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings, console: Reporter | None = None) -> "Postprocessor":
        """Wire the file-backed metadata sources described by ``settings``."""

        resolver = MetadataResolver(ManifestAssemblySource(settings.assemblies, settings.project_root))
        return cls(
            matrix=ConfigurationMatrix(resolver, settings.matrix.platforms),
            defines=ConfiguredDefineSource(settings.defines),
            plugins=PluginMetaSource(settings.project_root),
            ignore_list=ResponseFileIgnoreList(settings.project_root, settings.warnings.response_files),
            warnings=settings.warnings,
            console=console or Console(level=settings.global_config.log_level),
        )

    def _guarded(self, kind: str, path: str, content: str, action: Callable[[], str]) -> str:
        try:
            result = action()
        except Exception as exc:
            details = traceback.format_exc()
            self.failures.append(RewriteFailure(path=path, kind=kind, error=exc, details=details))
            self.console.error(f"failed to process {kind} file: {path}\n{details}")
            return content
        self.console.debug(f"processed {kind} file: {path}")
        return result

    def rewrite_solution(self, path: str, content: str) -> str:
        rewriter = SolutionRewriter(self.matrix)
        return self._guarded("solution", path, content, lambda: rewriter.rewrite(content))

    def rewrite_project(self, path: str, content: str) -> str:
        rewriter = ProjectDocumentRewriter(
            self.matrix,
            defines=self.defines,
            plugins=self.plugins,
            ignore_list=self.ignore_list,
            warnings=self.warnings,
        )
        return self._guarded("project", path, content, lambda: rewriter.rewrite(content, path))


__all__ = ["Postprocessor", "RewriteFailure"]
