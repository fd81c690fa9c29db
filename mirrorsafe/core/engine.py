"""Mirror engine: decode, cluster, mirror and encode STL meshes."""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from mirrorsafe.core.config import Config
from mirrorsafe.core.exceptions import EmptyMeshError
from mirrorsafe.processing import (
    DEFAULT_EPSILON,
    DEFAULT_THRESHOLD,
    Axis,
    Classification,
    TriangleBuffer,
    build_topology,
    classify,
    compute_normals,
    decode,
    encode,
    encode_ascii,
    load_stl,
    mirror_triangles,
    save_stl,
)
from mirrorsafe.utils.logging import (
    StructuredLogger,
    get_logger,
    log_mirror_result,
    log_performance,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class MirrorResult:
    """Result of a mirror operation.

    Attributes:
        buffer: Mirrored triangles, in the source triangle order
        normals: Unit normal of every mirrored triangle (zero if degenerate)
        excluded_indices: Ascending indices of triangles left unmirrored
        classification: Component partition the exclusion was derived from
        axis: Axis the mesh was mirrored across
    """

    buffer: TriangleBuffer
    normals: np.ndarray
    excluded_indices: np.ndarray
    classification: Classification
    axis: Axis


def mirror(
    buffer: TriangleBuffer,
    axis: Union[Axis, str],
    threshold: int = DEFAULT_THRESHOLD,
    epsilon: float = DEFAULT_EPSILON,
) -> MirrorResult:
    """Mirror a mesh across an axis, leaving small components untouched.

    Args:
        buffer: Source triangles, never modified
        axis: X, Y or Z (case-insensitive)
        threshold: Components with at most this many triangles are excluded
        epsilon: Grid size for vertex coincidence

    Returns:
        MirrorResult with the new buffer and the excluded triangle indices

    Raises:
        InvalidAxisError: If axis is not X, Y or Z
        EmptyMeshError: If the buffer has no triangles
        ConfigurationError: If threshold or epsilon is out of range
    """
    axis = Axis.parse(axis)
    if len(buffer) == 0:
        raise EmptyMeshError()

    topology = build_topology(buffer, epsilon)
    classification = classify(len(buffer), topology, threshold)
    mirrored = mirror_triangles(buffer, axis, classification.excluded)

    return MirrorResult(
        buffer=mirrored,
        normals=compute_normals(mirrored),
        excluded_indices=classification.excluded,
        classification=classification,
        axis=axis,
    )


def run(
    source: bytes,
    axis: Union[Axis, str],
    threshold: int = DEFAULT_THRESHOLD,
    epsilon: float = DEFAULT_EPSILON,
) -> tuple[bytes, list[int]]:
    """Mirror STL bytes end to end.

    Args:
        source: Binary or ASCII STL bytes
        axis: X, Y or Z (case-insensitive)
        threshold: Components with at most this many triangles are excluded
        epsilon: Grid size for vertex coincidence

    Returns:
        Binary STL bytes of the mirrored mesh and the excluded triangle indices

    Raises:
        FormatError: If source is not valid STL
        InvalidAxisError: If axis is not X, Y or Z
        EmptyMeshError: If the mesh has no triangles
    """
    result = mirror(decode(source), axis, threshold, epsilon)
    return encode(result.buffer), result.excluded_indices.tolist()


class MirrorEngine:
    """Configured entry point for mirroring STL meshes."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize engine.

        Args:
            config: Configuration object, defaults if omitted
        """
        self.config = config or Config()

    def decode(self, data: bytes) -> TriangleBuffer:
        """Decode STL bytes."""
        with StructuredLogger(logger, "decode", size=len(data)) as ctx:
            buffer = decode(data)
            ctx.update_context(triangles=len(buffer))
        return buffer

    def mirror(
        self,
        buffer: TriangleBuffer,
        axis: Union[Axis, str],
        threshold: Optional[int] = None,
        epsilon: Optional[float] = None,
    ) -> MirrorResult:
        """Mirror a buffer; threshold and epsilon default to the config.

        Raises:
            InvalidAxisError: If axis is not X, Y or Z
            EmptyMeshError: If the buffer has no triangles
            ConfigurationError: If threshold or epsilon is out of range
        """
        axis = Axis.parse(axis)
        if threshold is None:
            threshold = self.config.mirror.threshold
        if epsilon is None:
            epsilon = self.config.mirror.epsilon

        with StructuredLogger(
            logger, "mirror", axis=axis.value, threshold=threshold, triangles=len(buffer)
        ):
            result = mirror(buffer, axis, threshold, epsilon)
        log_mirror_result(logger, result)
        return result

    def encode(self, buffer: TriangleBuffer) -> bytes:
        """Encode a buffer in the configured STL flavour."""
        export = self.config.export
        if export.format == "ascii":
            return encode_ascii(buffer, name=export.solid_name)
        return encode(buffer, header=export.header)

    def load(self, path: Union[str, Path]) -> TriangleBuffer:
        """Load an STL file.

        Raises:
            STLLoadError: If the file cannot be read or decoded
        """
        with StructuredLogger(logger, "load", path=str(path)) as ctx:
            buffer = load_stl(path, max_file_size=self.config.load.max_file_size)
            ctx.update_context(triangles=len(buffer))
        return buffer

    def save(self, path: Union[str, Path], buffer: TriangleBuffer) -> Path:
        """Encode and write a buffer to disk.

        Raises:
            ExportError: If the file cannot be written
        """
        with StructuredLogger(logger, "save", path=str(path), triangles=len(buffer)):
            return save_stl(path, self.encode(buffer))

    def process_file(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        axis: Union[Axis, str],
        threshold: Optional[int] = None,
        epsilon: Optional[float] = None,
    ) -> MirrorResult:
        """Load, mirror and save an STL file.

        Nothing is written unless mirroring succeeds.

        Returns:
            The mirror result that was saved
        """
        start = time.perf_counter()
        buffer = self.load(source)
        result = self.mirror(buffer, axis, threshold, epsilon)
        self.save(destination, result.buffer)
        log_performance(
            logger,
            "process_file",
            time.perf_counter() - start,
            source=str(source),
            destination=str(destination),
        )
        return result
