"""Triangle adjacency by spatial coincidence of vertices."""

import numpy as np
from scipy import sparse

from mirrorsafe.core.exceptions import ConfigurationError
from mirrorsafe.processing.buffer import TriangleBuffer

DEFAULT_EPSILON = 1e-6

# Largest grid key magnitude that still fits an int64 after rounding
MAX_GRID_KEY = 2**62


class TopologyIndex:
    """Lookup from triangles to the triangles they touch.

    STL corners carry no shared indices, so every corner is snapped to an
    integer grid key ``round(coord / epsilon)``; corners with equal keys are
    the same vertex. Two triangles are adjacent when they share a vertex.
    """

    def __init__(self, vertex_ids: np.ndarray, vertex_count: int, epsilon: float):
        """Initialize from precomputed vertex ids.

        Args:
            vertex_ids: (n, 3) vertex id of every triangle corner
            vertex_count: Number of distinct vertex ids
            epsilon: Grid size used to build the ids
        """
        self.vertex_ids = vertex_ids
        self.vertex_count = vertex_count
        self.epsilon = epsilon

        triangle_count = vertex_ids.shape[0]
        rows = np.repeat(np.arange(triangle_count, dtype=np.int64), 3)
        data = np.ones(rows.shape[0], dtype=np.int8)
        incidence = sparse.coo_matrix(
            (data, (rows, vertex_ids.reshape(-1))),
            shape=(triangle_count, vertex_count),
        ).tocsr()
        # Degenerate triangles may repeat a vertex; keep the relation boolean
        incidence.data[:] = 1
        self.incidence = incidence
        self._by_vertex = incidence.T.tocsr()

    @property
    def triangle_count(self) -> int:
        return self.vertex_ids.shape[0]

    def triangles_at(self, vertex_id: int) -> np.ndarray:
        """Ascending indices of the triangles using a vertex."""
        by_vertex = self._by_vertex
        return by_vertex.indices[by_vertex.indptr[vertex_id] : by_vertex.indptr[vertex_id + 1]]

    def neighbors(self, triangle: int) -> np.ndarray:
        """Ascending indices of triangles sharing a vertex with `triangle`.

        Args:
            triangle: Triangle index

        Returns:
            Sorted unique neighbor indices, excluding `triangle` itself

        Raises:
            IndexError: If the triangle index is out of range
        """
        if not 0 <= triangle < self.triangle_count:
            raise IndexError(f"triangle index {triangle} out of range")
        touching = np.concatenate(
            [self.triangles_at(v) for v in np.unique(self.vertex_ids[triangle])]
        )
        touching = np.unique(touching)
        return touching[touching != triangle]

    def adjacency(self) -> sparse.csr_matrix:
        """Sparse boolean triangle x triangle adjacency, without self loops."""
        shared = (self.incidence @ self._by_vertex).tocoo()
        keep = shared.row != shared.col
        return sparse.csr_matrix(
            (np.ones(keep.sum(), dtype=bool), (shared.row[keep], shared.col[keep])),
            shape=shared.shape,
        )

    def graph(self) -> sparse.csr_matrix:
        """Bipartite triangle/vertex graph for connected-component traversal.

        Nodes 0..n-1 are triangles and n..n+k-1 are vertex ids. The graph has
        3n edges, unlike the triangle adjacency which grows with vertex valence.
        """
        return sparse.bmat(
            [[None, self.incidence], [self._by_vertex, None]],
            format="csr",
        )


def build_topology(buffer: TriangleBuffer, epsilon: float = DEFAULT_EPSILON) -> TopologyIndex:
    """Build the topology index of a triangle buffer.

    Args:
        buffer: Triangles to index
        epsilon: Grid size for vertex coincidence, in model units

    Returns:
        Topology index for the buffer

    Raises:
        ConfigurationError: If epsilon is not a positive finite number, or is so small
            that grid keys would overflow
    """
    if not np.isfinite(epsilon) or epsilon <= 0:
        raise ConfigurationError(
            f"Vertex coincidence epsilon must be positive, got {epsilon}",
            {"epsilon": epsilon},
        )

    if len(buffer) == 0:
        return TopologyIndex(np.zeros((0, 3), dtype=np.int64), 0, epsilon)

    vertices = buffer.vertices.astype(np.float64)
    finite = np.abs(vertices[np.isfinite(vertices)])
    extent = float(finite.max()) if finite.size else 0.0
    if extent > MAX_GRID_KEY * epsilon:
        raise ConfigurationError(
            f"Vertex coincidence epsilon {epsilon} is too small for coordinates up to {extent}",
            {"epsilon": epsilon, "extent": extent},
        )

    keys = np.round(vertices / epsilon).astype(np.int64)
    _, inverse = np.unique(keys, axis=0, return_inverse=True)
    vertex_ids = inverse.reshape((-1, 3))
    return TopologyIndex(vertex_ids, int(vertex_ids.max()) + 1, epsilon)
