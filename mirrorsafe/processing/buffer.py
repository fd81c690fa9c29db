"""Flat triangle buffer shared by every processing stage."""

from typing import Any

import numpy as np
import trimesh

# Floats per triangle: three vertices, xyz each
STRIDE = 9


class TriangleBuffer:
    """Immutable, fixed-stride buffer of triangles.

    Triangles are stored as a read-only float32 array of shape (n, 9). The
    row index is the triangle's identity. Vertices are not shared between
    triangles, as in the STL format itself.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Any):
        """Initialize buffer from any array-like of triangle coordinates.

        Args:
            data: Array-like reshapeable to (n, 9); always copied

        Raises:
            ValueError: If the size is not a multiple of 9
        """
        array = np.array(data, dtype=np.float32, copy=True)
        if array.size % STRIDE != 0:
            raise ValueError(
                f"Triangle buffer needs a multiple of {STRIDE} floats, got {array.size}"
            )
        array = array.reshape((-1, STRIDE))
        array.setflags(write=False)
        self._data = array

    @classmethod
    def empty(cls) -> "TriangleBuffer":
        """Create a buffer with no triangles."""
        return cls(np.zeros((0, STRIDE), dtype=np.float32))

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> "TriangleBuffer":
        """Create a buffer from a trimesh object, one row per face."""
        return cls(np.asarray(mesh.triangles, dtype=np.float32))

    @property
    def data(self) -> np.ndarray:
        """Read-only (n, 9) float32 view."""
        return self._data

    @property
    def triangles(self) -> np.ndarray:
        """Read-only (n, 3, 3) view: triangle, corner, coordinate."""
        return self._data.reshape((-1, 3, 3))

    @property
    def vertices(self) -> np.ndarray:
        """Read-only (3n, 3) view of every triangle corner."""
        return self._data.reshape((-1, 3))

    def __len__(self) -> int:
        return self._data.shape[0]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TriangleBuffer):
            return NotImplemented
        return np.array_equal(self._data, other._data)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TriangleBuffer(triangles={len(self)})"

    def subset(self, indices: Any) -> "TriangleBuffer":
        """Return a new buffer holding only the given triangles, in order."""
        return TriangleBuffer(self._data[np.asarray(indices, dtype=np.int64)])

    def bounds(self) -> np.ndarray:
        """Axis-aligned bounds as a (2, 3) array of min and max corners.

        Raises:
            ValueError: If the buffer is empty
        """
        if len(self) == 0:
            raise ValueError("Empty buffer has no bounds")
        vertices = self.vertices
        return np.vstack([vertices.min(axis=0), vertices.max(axis=0)])

    def to_trimesh(self) -> trimesh.Trimesh:
        """Build a trimesh object with coincident vertices merged.

        Used by analysis and display collaborators; the engine itself works
        on the flat buffer.
        """
        faces = np.arange(len(self) * 3, dtype=np.int64).reshape((-1, 3))
        return trimesh.Trimesh(
            vertices=np.array(self.vertices, dtype=np.float64),
            faces=faces,
            process=True,
        )
