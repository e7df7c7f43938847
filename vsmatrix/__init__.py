"""Visual Studio solution/project post-processor for per-platform configurations."""

from .errors import MetadataError, RewriteError, StructureError
from .matrix import ConfigurationMatrix, Platform, Target, Triple, Variant, config_name, enumerate_triples
from .metadata import MetadataResolver
from .postprocessor import Postprocessor, RewriteFailure
from .cli import main

__all__ = [
    "ConfigurationMatrix",
    "MetadataError",
    "MetadataResolver",
    "Platform",
    "Postprocessor",
    "RewriteError",
    "RewriteFailure",
    "StructureError",
    "Target",
    "Triple",
    "Variant",
    "config_name",
    "enumerate_triples",
    "main",
]
