"""Reading and writing STL files on disk."""

import os
import tempfile
from pathlib import Path
from typing import Union

from mirrorsafe.core.exceptions import ExportError, FormatError, STLLoadError
from mirrorsafe.processing.buffer import TriangleBuffer
from mirrorsafe.processing.stl_codec import decode


class MeshLoader:
    """Loads STL files into triangle buffers."""

    # Maximum file size in bytes (1GB)
    MAX_FILE_SIZE = 1_000_000_000

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        """Initialize mesh loader.

        Args:
            max_file_size: Largest accepted file size in bytes
        """
        self.max_file_size = max_file_size

    def load(self, file_path: Union[str, Path]) -> TriangleBuffer:
        """Load STL file into a triangle buffer.

        Args:
            file_path: Path to STL file

        Returns:
            Decoded triangle buffer

        Raises:
            STLLoadError: If the file cannot be read or decoded
        """
        file_path = Path(file_path)
        self._validate_file(file_path)

        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise STLLoadError(file_path, str(e)) from e

        try:
            return decode(data)
        except FormatError as e:
            error = STLLoadError(file_path, e.reason)
            error.details.update(e.details)
            raise error from e

    def _validate_file(self, file_path: Path) -> None:
        """Validate file before loading.

        Args:
            file_path: Path to validate

        Raises:
            STLLoadError: If file validation fails
        """
        if not file_path.exists():
            raise STLLoadError(file_path, "File does not exist")

        if not file_path.is_file():
            raise STLLoadError(file_path, "Path is not a file")

        file_size = file_path.stat().st_size

        if file_size == 0:
            raise STLLoadError(file_path, "File is empty")

        if file_size > self.max_file_size:
            raise STLLoadError(
                file_path,
                f"File too large ({file_size / 1e9:.1f}GB > "
                f"{self.max_file_size / 1e9:.1f}GB limit)",
            )

        if file_path.suffix.lower() not in [".stl"]:
            raise STLLoadError(
                file_path,
                f"Unsupported file extension: {file_path.suffix}",
            )


def load_stl(
    file_path: Union[str, Path],
    max_file_size: int = MeshLoader.MAX_FILE_SIZE,
) -> TriangleBuffer:
    """Convenience function to load an STL file.

    Args:
        file_path: Path to STL file
        max_file_size: Largest accepted file size in bytes

    Returns:
        Decoded triangle buffer

    Raises:
        STLLoadError: If file cannot be loaded
    """
    return MeshLoader(max_file_size=max_file_size).load(file_path)


def save_stl(file_path: Union[str, Path], data: bytes) -> Path:
    """Write encoded STL bytes to disk.

    The bytes go to a temporary file in the target directory which is then
    renamed over the destination, so a failed write leaves no partial file.

    Args:
        file_path: Destination path
        data: Encoded STL bytes

    Returns:
        The destination path

    Raises:
        ExportError: If the file cannot be written
    """
    file_path = Path(file_path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{file_path.name}.", suffix=".tmp", dir=file_path.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise ExportError(file_path, str(e)) from e
    return file_path
