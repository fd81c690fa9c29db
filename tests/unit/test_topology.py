"""Unit tests for the mesh topology index."""

import numpy as np
import pytest

from mirrorsafe.core.exceptions import ConfigurationError
from mirrorsafe.processing import TriangleBuffer, build_topology


class TestBuildTopology:
    """Test vertex grouping by spatial coincidence."""

    def test_quad_shares_two_vertices(self, quad_buffer: TriangleBuffer):
        """Test the two quad triangles collapse onto 4 vertices."""
        topology = build_topology(quad_buffer)

        assert topology.triangle_count == 2
        assert topology.vertex_count == 4
        assert topology.vertex_ids[0, 0] == topology.vertex_ids[1, 0]
        assert topology.vertex_ids[0, 2] == topology.vertex_ids[1, 1]

    def test_box_vertices(self, box_with_decal: TriangleBuffer):
        """Test a box and a separate quad give 8 + 4 vertices."""
        topology = build_topology(box_with_decal)

        assert topology.vertex_count == 12

    def test_near_coincident_vertices_merge(self):
        """Test corners closer than epsilon share a vertex."""
        buffer = TriangleBuffer(
            [
                [[0, 0, 0], [0.5, 0, 0], [0, 1, 0]],
                [[0.5000001, 0, 0], [2, 0, 0], [2, 1, 0]],
            ]
        )
        topology = build_topology(buffer, epsilon=1e-6)

        np.testing.assert_array_equal(topology.neighbors(0), [1])

    def test_distant_vertices_stay_apart(self):
        """Test corners farther apart than epsilon are separate vertices."""
        buffer = TriangleBuffer(
            [
                [[0, 0, 0], [0.5, 0, 0], [0, 1, 0]],
                [[0.51, 0, 0], [2, 0, 0], [2, 1, 0]],
            ]
        )
        topology = build_topology(buffer, epsilon=1e-6)

        assert topology.vertex_count == 6
        assert len(topology.neighbors(0)) == 0

    def test_coarse_epsilon_merges_more(self):
        """Test a larger epsilon groups the same corners together."""
        buffer = TriangleBuffer(
            [
                [[0, 0, 0], [0.5, 0, 0], [0, 1, 0]],
                [[0.51, 0, 0], [2, 0, 0], [2, 1, 0]],
            ]
        )
        topology = build_topology(buffer, epsilon=0.1)

        np.testing.assert_array_equal(topology.neighbors(1), [0])

    @pytest.mark.parametrize("epsilon", [0.0, -1e-6, float("nan"), float("inf")])
    def test_invalid_epsilon(self, quad_buffer: TriangleBuffer, epsilon: float):
        """Test epsilon must be a positive finite number."""
        with pytest.raises(ConfigurationError):
            build_topology(quad_buffer, epsilon=epsilon)

    def test_epsilon_too_small_for_coordinates(self, box_with_decal: TriangleBuffer):
        """Test an epsilon whose grid keys would overflow is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_topology(box_with_decal, epsilon=1e-20)

        assert exc_info.value.details["epsilon"] == 1e-20

    def test_small_epsilon_keeps_components(self, box_with_decal: TriangleBuffer):
        """Test a fine but representable epsilon still separates the decal."""
        topology = build_topology(box_with_decal, epsilon=1e-12)

        assert 12 not in topology.neighbors(0)
        np.testing.assert_array_equal(topology.neighbors(12), [13])

    def test_empty_buffer(self):
        """Test an empty buffer gives an empty index."""
        topology = build_topology(TriangleBuffer.empty())

        assert topology.triangle_count == 0
        assert topology.vertex_count == 0
        assert topology.adjacency().shape == (0, 0)


class TestNeighbors:
    """Test adjacency lookups."""

    def test_strip_neighbors(self, strip_buffer: TriangleBuffer):
        """Test strip triangles touch the two before and after them."""
        topology = build_topology(strip_buffer)

        np.testing.assert_array_equal(topology.neighbors(0), [1, 2])
        np.testing.assert_array_equal(topology.neighbors(5), [3, 4, 6, 7])
        np.testing.assert_array_equal(topology.neighbors(9), [7, 8])

    def test_neighbors_out_of_range(self, quad_buffer: TriangleBuffer):
        """Test invalid triangle indices raise."""
        topology = build_topology(quad_buffer)

        with pytest.raises(IndexError):
            topology.neighbors(2)
        with pytest.raises(IndexError):
            topology.neighbors(-1)

    def test_degenerate_triangle_has_neighbors(self, degenerate_buffer: TriangleBuffer):
        """Test zero-area triangles still connect through shared vertices."""
        topology = build_topology(degenerate_buffer)

        np.testing.assert_array_equal(topology.neighbors(1), [0])

    def test_adjacency_matches_neighbors(self, box_with_decal: TriangleBuffer):
        """Test the sparse adjacency is symmetric and agrees with neighbors."""
        topology = build_topology(box_with_decal)
        adjacency = topology.adjacency()

        assert (adjacency != adjacency.T).nnz == 0
        assert adjacency.diagonal().sum() == 0
        for triangle in range(topology.triangle_count):
            np.testing.assert_array_equal(
                np.sort(adjacency[triangle].indices), topology.neighbors(triangle)
            )

    def test_graph_shape(self, box_with_decal: TriangleBuffer):
        """Test the bipartite graph has a node per triangle and per vertex."""
        topology = build_topology(box_with_decal)
        graph = topology.graph()

        size = topology.triangle_count + topology.vertex_count
        assert graph.shape == (size, size)
        assert graph.nnz == 2 * 3 * topology.triangle_count
