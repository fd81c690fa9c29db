"""Mesh processing functionality for MirrorSafe."""

from mirrorsafe.processing.buffer import STRIDE, TriangleBuffer
from mirrorsafe.processing.classifier import DEFAULT_THRESHOLD, Classification, classify
from mirrorsafe.processing.mirror import Axis, compute_normals, mirror_triangles
from mirrorsafe.processing.stl_codec import decode, encode, encode_ascii, is_binary_stl
from mirrorsafe.processing.stl_file import MeshLoader, load_stl, save_stl
from mirrorsafe.processing.topology import DEFAULT_EPSILON, TopologyIndex, build_topology

__all__ = [
    "STRIDE",
    "TriangleBuffer",
    "DEFAULT_THRESHOLD",
    "Classification",
    "classify",
    "Axis",
    "compute_normals",
    "mirror_triangles",
    "decode",
    "encode",
    "encode_ascii",
    "is_binary_stl",
    "MeshLoader",
    "load_stl",
    "save_stl",
    "DEFAULT_EPSILON",
    "TopologyIndex",
    "build_topology",
]
