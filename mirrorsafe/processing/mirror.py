"""Axis mirroring with winding and normal repair."""

from enum import Enum
from typing import Any, Iterable, Union

import numpy as np

from mirrorsafe.core.exceptions import InvalidAxisError
from mirrorsafe.processing.buffer import TriangleBuffer

# Triangles whose doubled area falls below this get a zero normal
DEGENERATE_AREA = 1e-12


class Axis(str, Enum):
    """Mirror axes."""

    X = "X"
    Y = "Y"
    Z = "Z"

    @property
    def index(self) -> int:
        """Coordinate index of the axis (0, 1 or 2)."""
        return "XYZ".index(self.value)

    @classmethod
    def parse(cls, value: Union["Axis", str, Any]) -> "Axis":
        """Parse an axis name case-insensitively.

        Args:
            value: Axis member or name such as "x" or "Z"

        Returns:
            Axis member

        Raises:
            InvalidAxisError: If value does not name X, Y or Z
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise InvalidAxisError(value)


def compute_normals(buffer: TriangleBuffer) -> np.ndarray:
    """Compute unit face normals from vertex order.

    The normal of triangle (v1, v2, v3) is (v2 - v1) x (v3 - v1), normalized.
    Degenerate triangles get a zero normal.

    Args:
        buffer: Triangles to compute normals for

    Returns:
        (n, 3) float32 array of normals
    """
    triangles = buffer.triangles.astype(np.float64)
    normals = np.cross(
        triangles[:, 1] - triangles[:, 0],
        triangles[:, 2] - triangles[:, 0],
    )
    lengths = np.linalg.norm(normals, axis=1)
    valid = np.isfinite(lengths) & (lengths > DEGENERATE_AREA)

    result = np.zeros_like(normals)
    result[valid] = normals[valid] / lengths[valid, np.newaxis]
    return result.astype(np.float32)


def mirror_triangles(
    buffer: TriangleBuffer,
    axis: Union[Axis, str],
    excluded: Iterable[int] = (),
) -> TriangleBuffer:
    """Mirror every triangle not in `excluded` across a coordinate plane.

    The chosen coordinate of each included vertex is negated. A single-axis
    reflection flips handedness, so the vertex order of each included triangle
    is reversed (v1, v2, v3 -> v3, v2, v1) to keep faces pointing outward.
    Excluded triangles are copied unchanged.

    Args:
        buffer: Source triangles, left untouched
        axis: Axis to mirror across
        excluded: Indices of triangles to leave as they are

    Returns:
        New triangle buffer in the same triangle order

    Raises:
        InvalidAxisError: If axis is not X, Y or Z
        IndexError: If an excluded index is out of range
    """
    axis = Axis.parse(axis)
    triangles = np.array(buffer.triangles, copy=True)

    include = np.ones(len(buffer), dtype=bool)
    excluded = np.fromiter(excluded, dtype=np.int64)
    if excluded.size and excluded.min() < 0:
        raise IndexError(f"excluded triangle index {int(excluded.min())} is negative")
    include[excluded] = False

    flipped = triangles[include]
    flipped[:, :, axis.index] *= -1
    triangles[include] = flipped[:, ::-1, :]

    return TriangleBuffer(triangles)
