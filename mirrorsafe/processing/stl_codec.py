"""Binary and ASCII STL decoding and encoding."""

import struct
from typing import Iterator, Union

import numpy as np

from mirrorsafe.core.exceptions import FormatError
from mirrorsafe.processing.buffer import TriangleBuffer
from mirrorsafe.processing.mirror import compute_normals

HEADER_SIZE = 80
COUNT_SIZE = 4
RECORD_SIZE = 50
UTF8_BOM = b"\xef\xbb\xbf"

# Binary record layout; numpy packs structured dtypes without padding
STL_RECORD_DTYPE = np.dtype(
    [
        ("normal", "<f4", (3,)),
        ("vertices", "<f4", (3, 3)),
        ("attributes", "<u2"),
    ]
)

BytesLike = Union[bytes, bytearray, memoryview]


def decode(data: BytesLike) -> TriangleBuffer:
    """Decode a binary or ASCII STL byte stream.

    The format is detected from the declared binary triangle count: when the
    stream length equals 84 + 50 * count it is binary, otherwise it is parsed
    as ASCII. Normals stored in the file are ignored.

    Args:
        data: Raw STL bytes

    Returns:
        Decoded triangle buffer

    Raises:
        FormatError: If the data is neither binary nor ASCII STL
    """
    data = bytes(data)
    size = len(data)

    if size >= HEADER_SIZE + COUNT_SIZE:
        count = struct.unpack_from("<I", data, HEADER_SIZE)[0]
        expected = HEADER_SIZE + COUNT_SIZE + RECORD_SIZE * count
        if size == expected:
            return _decode_binary(data, count)
        binary_reason = (
            f"binary header declares {count} triangles ({expected} bytes) "
            f"but stream has {size} bytes"
        )
    else:
        binary_reason = f"stream has {size} bytes, shorter than a binary STL header"

    # Text editors may prepend a UTF-8 byte order mark
    text = data[len(UTF8_BOM):] if data.startswith(UTF8_BOM) else data
    if not _looks_ascii(text):
        raise FormatError(binary_reason, {"size": size})

    try:
        return _decode_ascii(text)
    except FormatError as e:
        raise FormatError(
            f"{binary_reason}; not valid ASCII STL either: {e.reason}",
            {"size": size},
        ) from e


def encode(buffer: TriangleBuffer, header: Union[str, bytes] = b"") -> bytes:
    """Encode a triangle buffer as binary STL.

    Args:
        buffer: Triangles to write
        header: Header text, zero padded or truncated to 80 bytes

    Returns:
        Binary STL bytes with recomputed normals and zero attributes
    """
    if isinstance(header, str):
        header = header.encode("ascii")
    header = header[:HEADER_SIZE].ljust(HEADER_SIZE, b"\x00")

    records = np.zeros(len(buffer), dtype=STL_RECORD_DTYPE)
    records["normal"] = compute_normals(buffer)
    records["vertices"] = buffer.triangles

    return header + struct.pack("<I", len(buffer)) + records.tobytes()


def encode_ascii(buffer: TriangleBuffer, name: str = "mirrorsafe") -> bytes:
    """Encode a triangle buffer as ASCII STL.

    Args:
        buffer: Triangles to write
        name: Solid name written after 'solid' and 'endsolid'

    Returns:
        ASCII STL bytes with recomputed normals
    """
    normals = compute_normals(buffer)
    lines = [f"solid {name}".rstrip()]
    for normal, triangle in zip(normals, buffer.triangles):
        lines.append("  facet normal {:e} {:e} {:e}".format(*normal))
        lines.append("    outer loop")
        for vertex in triangle:
            lines.append("      vertex {:.9e} {:.9e} {:.9e}".format(*vertex))
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}".rstrip())
    return ("\n".join(lines) + "\n").encode("ascii")


def is_binary_stl(data: BytesLike) -> bool:
    """Check whether a byte stream has a consistent binary STL layout."""
    if len(data) < HEADER_SIZE + COUNT_SIZE:
        return False
    count = struct.unpack_from("<I", bytes(data[: HEADER_SIZE + COUNT_SIZE]), HEADER_SIZE)[0]
    return len(data) == HEADER_SIZE + COUNT_SIZE + RECORD_SIZE * count


def _decode_binary(data: bytes, count: int) -> TriangleBuffer:
    records = np.frombuffer(
        data, dtype=STL_RECORD_DTYPE, count=count, offset=HEADER_SIZE + COUNT_SIZE
    )
    return TriangleBuffer(records["vertices"].reshape((-1, 9)))


def _looks_ascii(data: bytes) -> bool:
    return data.lstrip()[:5].lower() == b"solid"


def _tokens(text: str) -> Iterator[tuple[int, str]]:
    for line_no, line in enumerate(text.splitlines(), start=1):
        for token in line.split():
            yield line_no, token


class _AsciiReader:
    """Token reader for a single 'solid ... endsolid' block."""

    def __init__(self, text: str):
        self._tokens = _tokens(text)
        self.line = 0

    def next(self, expected: str) -> str:
        item = next(self._tokens, None)
        if item is None:
            raise FormatError(f"unexpected end of data, expected {expected}")
        self.line, token = item
        return token

    def keyword(self, keyword: str) -> None:
        token = self.next(f"'{keyword}'")
        if token.lower() != keyword:
            raise FormatError(f"line {self.line}: expected '{keyword}', found '{token}'")

    def numbers(self, n: int) -> list[float]:
        values = []
        for _ in range(n):
            token = self.next("a number")
            try:
                values.append(float(token))
            except ValueError as e:
                raise FormatError(f"line {self.line}: invalid number '{token}'") from e
        return values

    def rest(self) -> Iterator[tuple[int, str]]:
        return self._tokens


def _decode_ascii(data: bytes) -> TriangleBuffer:
    try:
        text = data.decode("ascii")
    except UnicodeDecodeError as e:
        raise FormatError(f"non-ASCII byte at offset {e.start}") from e

    reader = _AsciiReader(text)
    if reader.next("'solid'").lower() != "solid":
        raise FormatError("missing 'solid' keyword")
    header_line = reader.line

    vertices: list[float] = []
    facets = 0
    while True:
        token = reader.next("'facet' or 'endsolid'")
        keyword = token.lower()
        # The solid's name may contain spaces, skip the rest of its line
        if reader.line == header_line:
            continue
        if keyword == "endsolid":
            break
        if keyword == "solid":
            raise FormatError(f"line {reader.line}: multiple solids are not supported")
        if keyword != "facet":
            raise FormatError(
                f"line {reader.line}: expected 'facet' or 'endsolid', found '{token}'"
            )

        reader.keyword("normal")
        reader.numbers(3)
        reader.keyword("outer")
        reader.keyword("loop")
        corners = 0
        while True:
            token = reader.next("'vertex' or 'endloop'")
            if token.lower() == "endloop":
                break
            if token.lower() != "vertex":
                raise FormatError(
                    f"line {reader.line}: expected 'vertex' or 'endloop', found '{token}'"
                )
            vertices.extend(reader.numbers(3))
            corners += 1
        if corners != 3:
            raise FormatError(f"facet {facets} has {corners} vertices, expected 3")
        reader.keyword("endfacet")
        facets += 1

    # Only the solid's name may follow 'endsolid', on the same line
    end_line = reader.line
    for line_no, token in reader.rest():
        if line_no == end_line:
            continue
        if token.lower() == "solid":
            raise FormatError(f"line {line_no}: multiple solids are not supported")
        raise FormatError(f"line {line_no}: unexpected data after 'endsolid'")

    return TriangleBuffer(np.array(vertices, dtype=np.float32))
