"""Connected-component clustering and decal classification."""

from dataclasses import dataclass
from typing import Iterator

import numpy as np
from scipy.sparse.csgraph import connected_components

from mirrorsafe.core.exceptions import ConfigurationError
from mirrorsafe.processing.topology import TopologyIndex

DEFAULT_THRESHOLD = 3


@dataclass(frozen=True)
class Classification:
    """Partition of a mesh's triangles into components.

    Attributes:
        component_of: Component id of every triangle
        component_sizes: Triangle count of every component
        excluded: Ascending indices of triangles in small components
        threshold: Inclusive size bound used for exclusion
    """

    component_of: np.ndarray
    component_sizes: np.ndarray
    excluded: np.ndarray
    threshold: int

    @property
    def component_count(self) -> int:
        return len(self.component_sizes)

    @property
    def excluded_mask(self) -> np.ndarray:
        mask = np.zeros(len(self.component_of), dtype=bool)
        mask[self.excluded] = True
        return mask

    @property
    def excluded_components(self) -> np.ndarray:
        """Ids of components whose triangles are excluded."""
        return np.flatnonzero(self.component_sizes <= self.threshold)

    def components(self) -> Iterator[np.ndarray]:
        """Yield the ascending triangle indices of each component, by id."""
        if self.component_count == 0:
            return
        order = np.argsort(self.component_of, kind="stable")
        bounds = np.cumsum(self.component_sizes)[:-1]
        yield from np.split(order, bounds)


def classify(
    triangle_count: int,
    topology: TopologyIndex,
    threshold: int = DEFAULT_THRESHOLD,
) -> Classification:
    """Label connected components and exclude the small ones.

    Components are found by a single traversal of the triangle/vertex graph,
    so every triangle is visited once; a triangle sharing no vertex forms a
    component of its own. Ids follow each component's lowest triangle index.
    A component is excluded when its size is at most `threshold`.

    Args:
        triangle_count: Number of triangles in the mesh
        topology: Topology index of the same mesh
        threshold: Inclusive size bound for exclusion

    Returns:
        Classification of the mesh's triangles

    Raises:
        ConfigurationError: If threshold is negative
        ValueError: If triangle_count does not match the topology index
    """
    if threshold < 0:
        raise ConfigurationError(
            f"Cluster threshold must be non-negative, got {threshold}",
            {"threshold": threshold},
        )
    if triangle_count != topology.triangle_count:
        raise ValueError(
            f"Topology indexes {topology.triangle_count} triangles, expected {triangle_count}"
        )

    if triangle_count == 0:
        empty = np.zeros(0, dtype=np.int64)
        return Classification(empty, empty, empty, threshold)

    _, labels = connected_components(topology.graph(), directed=False)
    labels = labels[:triangle_count]

    # Renumber by first appearance so ids do not depend on the traversal
    _, first, component_of = np.unique(labels, return_index=True, return_inverse=True)
    order = np.argsort(first)
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))
    component_of = rank[component_of.reshape(-1)].astype(np.int64)

    component_sizes = np.bincount(component_of)
    excluded = np.flatnonzero(component_sizes[component_of] <= threshold)

    return Classification(
        component_of=component_of,
        component_sizes=component_sizes,
        excluded=excluded.astype(np.int64),
        threshold=threshold,
    )
