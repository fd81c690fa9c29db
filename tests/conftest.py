"""Shared test fixtures and configuration."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import numpy as np
import pytest
import trimesh

from mirrorsafe.core import Config
from mirrorsafe.processing import TriangleBuffer, encode


def strip_triangles(count: int, offset=(1.0, 0.0, 0.0)) -> np.ndarray:
    """Triangle strip where consecutive triangles share an edge."""
    points = np.array(
        [[0.5 * k, float(k % 2), 0.1 * k] for k in range(count + 2)],
        dtype=np.float32,
    ) + np.asarray(offset, dtype=np.float32)
    return np.stack([points[:-2], points[1:-1], points[2:]], axis=1)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration."""
    return Config(
        mirror={"threshold": 3},
        logging={"level": "DEBUG", "colorize": False},
    )


@pytest.fixture
def quad_buffer() -> TriangleBuffer:
    """Two triangles sharing an edge: an isolated quad with 4 unique vertices."""
    return TriangleBuffer(
        [
            [[0, 0, 0], [1, 0, 0], [1, 1, 0]],
            [[0, 0, 0], [1, 1, 0], [0, 1, 0]],
        ]
    )


@pytest.fixture
def strip_buffer() -> TriangleBuffer:
    """Ten connected triangles."""
    return TriangleBuffer(strip_triangles(10))


@pytest.fixture
def box_mesh() -> trimesh.Trimesh:
    """Closed box with outward facing normals."""
    return trimesh.creation.box(extents=[10, 8, 2])


@pytest.fixture
def box_with_decal(box_mesh: trimesh.Trimesh) -> TriangleBuffer:
    """Box (12 triangles) followed by a floating two-triangle decal."""
    decal = np.array(
        [
            [[2, 1, 1.5], [3, 1, 1.5], [3, 2, 1.5]],
            [[2, 1, 1.5], [3, 2, 1.5], [2, 2, 1.5]],
        ],
        dtype=np.float32,
    )
    box = np.asarray(box_mesh.triangles, dtype=np.float32)
    return TriangleBuffer(np.concatenate([box, decal]))


@pytest.fixture
def degenerate_buffer() -> TriangleBuffer:
    """One proper triangle sharing a vertex with a zero-area one."""
    return TriangleBuffer(
        [
            [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
            [[1, 0, 0], [2, 0, 0], [3, 0, 0]],
        ]
    )


@pytest.fixture
def sample_stl_path(temp_dir: Path, box_with_decal: TriangleBuffer) -> Path:
    """Create a sample binary STL file."""
    stl_path = temp_dir / "box_with_decal.stl"
    stl_path.write_bytes(encode(box_with_decal))
    return stl_path


# Markers for different test categories
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 1 second"
    )
