"""Unit tests for STL file loading and saving."""

from pathlib import Path

import pytest

from mirrorsafe.core.exceptions import ExportError, STLLoadError
from mirrorsafe.processing import MeshLoader, TriangleBuffer, encode, load_stl, save_stl


class TestMeshLoader:
    """Test mesh loading functionality."""

    def test_load_simple_mesh(self, sample_stl_path: Path, box_with_decal: TriangleBuffer):
        """Test loading a simple STL file."""
        buffer = MeshLoader().load(sample_stl_path)

        assert buffer == box_with_decal

    def test_load_nonexistent_file(self):
        """Test loading a non-existent file."""
        with pytest.raises(STLLoadError) as exc_info:
            MeshLoader().load(Path("nonexistent.stl"))

        assert "does not exist" in str(exc_info.value)

    def test_load_directory(self, temp_dir: Path):
        """Test loading a directory."""
        with pytest.raises(STLLoadError) as exc_info:
            MeshLoader().load(temp_dir)

        assert "not a file" in str(exc_info.value)

    def test_load_empty_file(self, temp_dir: Path):
        """Test loading an empty file."""
        empty_file = temp_dir / "empty.stl"
        empty_file.touch()

        with pytest.raises(STLLoadError) as exc_info:
            MeshLoader().load(empty_file)

        assert "empty" in str(exc_info.value).lower()

    def test_load_short_ascii_file(self, temp_dir: Path):
        """Test ASCII files shorter than a binary header are accepted."""
        short_file = temp_dir / "short.stl"
        short_file.write_bytes(b"solid s\nendsolid s\n")

        buffer = MeshLoader().load(short_file)

        assert len(buffer) == 0

    def test_load_corrupt_file(self, temp_dir: Path):
        """Test loading a corrupt STL file."""
        corrupt_file = temp_dir / "corrupt.stl"
        corrupt_file.write_bytes(b"This is not a valid STL file content")

        with pytest.raises(STLLoadError) as exc_info:
            MeshLoader().load(corrupt_file)

        assert exc_info.value.path == corrupt_file
        assert exc_info.value.details["size"] == 36

    def test_wrong_extension(self, temp_dir: Path, quad_buffer: TriangleBuffer):
        """Test files without an .stl extension are rejected."""
        obj_file = temp_dir / "mesh.obj"
        obj_file.write_bytes(encode(quad_buffer))

        with pytest.raises(STLLoadError) as exc_info:
            MeshLoader().load(obj_file)

        assert "extension" in str(exc_info.value)

    def test_uppercase_extension(self, temp_dir: Path, quad_buffer: TriangleBuffer):
        """Test the extension check ignores case."""
        stl_file = temp_dir / "MESH.STL"
        stl_file.write_bytes(encode(quad_buffer))

        assert MeshLoader().load(stl_file) == quad_buffer

    def test_file_size_limit(self, sample_stl_path: Path):
        """Test files above the size limit are rejected."""
        with pytest.raises(STLLoadError) as exc_info:
            MeshLoader(max_file_size=100).load(sample_stl_path)

        assert "too large" in str(exc_info.value).lower()

    def test_convenience_function(self, sample_stl_path: Path):
        """Test the convenience load_stl function."""
        assert len(load_stl(sample_stl_path)) == 14


class TestSaveStl:
    """Test writing STL files."""

    def test_save(self, temp_dir: Path, quad_buffer: TriangleBuffer):
        """Test bytes are written and parent directories created."""
        path = save_stl(temp_dir / "nested" / "quad.stl", encode(quad_buffer))

        assert path.read_bytes() == encode(quad_buffer)
        assert [p.name for p in path.parent.iterdir()] == ["quad.stl"]

    def test_overwrite(self, temp_dir: Path, quad_buffer: TriangleBuffer):
        """Test an existing file is replaced."""
        path = temp_dir / "quad.stl"
        path.write_bytes(b"old")

        save_stl(path, encode(quad_buffer))

        assert path.read_bytes() == encode(quad_buffer)

    def test_unwritable_destination(self, temp_dir: Path, quad_buffer: TriangleBuffer):
        """Test a parent that is a file raises ExportError."""
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(ExportError) as exc_info:
            save_stl(blocker / "quad.stl", encode(quad_buffer))

        assert exc_info.value.path == blocker / "quad.stl"
