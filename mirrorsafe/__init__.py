"""MirrorSafe - Mirror STL meshes while keeping small text decals legible."""

__version__ = "0.1.0"

from mirrorsafe.core.engine import MirrorEngine, MirrorResult, mirror, run
from mirrorsafe.processing import Axis, TriangleBuffer, decode, encode, encode_ascii

__all__ = [
    "__version__",
    "MirrorEngine",
    "MirrorResult",
    "mirror",
    "run",
    "Axis",
    "TriangleBuffer",
    "decode",
    "encode",
    "encode_ascii",
]
