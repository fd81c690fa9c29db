"""Custom exceptions for MirrorSafe."""

from pathlib import Path
from typing import Any, Optional


class MirrorSafeError(Exception):
    """Base exception for MirrorSafe."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(MirrorSafeError):
    """Raised when configuration is invalid."""

    pass


class FormatError(MirrorSafeError):
    """Raised when a byte stream is neither a valid binary nor ASCII STL."""

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(f"Invalid STL data: {reason}", details)
        self.reason = reason


class InvalidAxisError(MirrorSafeError):
    """Raised when a mirror axis is not one of X, Y or Z."""

    def __init__(self, axis: Any):
        super().__init__(f"Invalid mirror axis {axis!r}, expected one of X, Y, Z")
        self.axis = axis


class EmptyMeshError(MirrorSafeError):
    """Raised when a mesh has no triangles to mirror."""

    def __init__(self) -> None:
        super().__init__("Mesh contains no triangles")


class STLLoadError(MirrorSafeError):
    """Raised when STL file cannot be loaded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to load STL file '{path}': {reason}")
        self.path = path
        self.reason = reason


class ExportError(MirrorSafeError):
    """Raised when STL export fails."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to export STL file '{path}': {reason}")
        self.path = path
        self.reason = reason
