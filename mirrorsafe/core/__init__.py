"""Core functionality for MirrorSafe."""

from mirrorsafe.core.config import (
    Config,
    ExportConfig,
    LoadConfig,
    LoggingConfig,
    MirrorConfig,
    get_default_config,
    load_config,
)
from mirrorsafe.core.exceptions import (
    ConfigurationError,
    EmptyMeshError,
    ExportError,
    FormatError,
    InvalidAxisError,
    MirrorSafeError,
    STLLoadError,
)

__all__ = [
    # Config classes
    "Config",
    "MirrorConfig",
    "LoadConfig",
    "ExportConfig",
    "LoggingConfig",
    # Config functions
    "get_default_config",
    "load_config",
    # Exceptions
    "MirrorSafeError",
    "ConfigurationError",
    "FormatError",
    "InvalidAxisError",
    "EmptyMeshError",
    "STLLoadError",
    "ExportError",
]
