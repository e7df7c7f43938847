"""Exception types raised while rewriting solution and project files."""
from __future__ import annotations


class RewriteError(RuntimeError):
    """Base class for failures that abort a document rewrite."""


class StructureError(RewriteError):
    """Raised when a document lacks a section or block the rewrite relies on."""


class MetadataError(RewriteError):
    """Raised when project, plugin, or symbol metadata cannot be resolved."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


__all__ = ["MetadataError", "RewriteError", "StructureError"]
