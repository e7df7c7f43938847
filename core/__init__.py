"""Shared core utilities for configuration loading and console output."""

from .config_loader import (
    ConfigLoader,
    FILE_LOADERS,
    load_config_file,
    normalize_string_list,
    register_loader,
)
from .console import Console, Reporter

__all__ = [
    "ConfigLoader",
    "Console",
    "FILE_LOADERS",
    "Reporter",
    "load_config_file",
    "normalize_string_list",
    "register_loader",
]
