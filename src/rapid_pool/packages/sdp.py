"""SDP archive codec: gzip-compressed list of rapid package file records."""
import gzip
import logging
import struct
import zlib
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List

from pydantic import ValidationError

from rapid_pool.core.errors import CorruptArchiveError
from rapid_pool.packages.schemas import ManifestEntry

logger = logging.getLogger(__name__)

MD5_LENGTH = 16
MAX_NAME_LENGTH = 255

# crc32 and size, both big-endian
_TRAILER = struct.Struct(">II")

# Errors gzip may raise while inflating a damaged or non-gzip stream
_GZIP_ERRORS = (OSError, EOFError, zlib.error)

GZIP_MAGIC = b"\x1f\x8b"


def has_gzip_header(path: Path) -> bool:
    """Return True if the file starts with a gzip member header.

    gzip reads an empty file as an empty stream, so the header is checked
    up front.

    Raises:
        OSError: If the file cannot be read
    """
    with open(path, "rb") as f:
        return f.read(len(GZIP_MAGIC)) == GZIP_MAGIC


def _decode_name(raw: bytes) -> str:
    return raw.decode("utf-8", errors="surrogateescape")


def _encode_name(name: str) -> bytes:
    return name.encode("utf-8", errors="surrogateescape")


def _read_exact(stream: BinaryIO, length: int, sdp_path: Path) -> bytes:
    """Read exactly `length` bytes or raise CorruptArchiveError."""
    try:
        data = stream.read(length)
    except _GZIP_ERRORS as e:
        raise CorruptArchiveError(f"Failed to read ({e})", sdp_path) from e
    if len(data) < length:
        raise CorruptArchiveError("Unexpected EOF or I/O error", sdp_path)
    return data


def iter_sdp_entries(sdp_path: Path) -> Iterator[ManifestEntry]:
    """Stream file records out of an SDP archive, in archive order.

    Record framing:
        u8 name length | name | 16 byte md5 | u32 crc32 | u32 size

    The archive ends when no byte is left for the next name length. A zero
    name length or any other short read is corruption.

    Args:
        sdp_path: Path to a gzip-compressed .sdp file

    Yields:
        ManifestEntry for each file record

    Raises:
        CorruptArchiveError: If the archive cannot be opened or decoded
    """
    sdp_path = Path(sdp_path)

    try:
        if not has_gzip_header(sdp_path):
            raise CorruptArchiveError("Failed to open (not a gzip stream)", sdp_path)
        stream = gzip.open(sdp_path, "rb")
    except OSError as e:
        raise CorruptArchiveError(f"Failed to open ({e})", sdp_path) from e

    with stream:
        while True:
            try:
                length_byte = stream.read(1)
            except _GZIP_ERRORS as e:
                raise CorruptArchiveError(f"Failed to read ({e})", sdp_path) from e
            if not length_byte:
                return

            name_length = length_byte[0]
            if not name_length:
                raise CorruptArchiveError("Empty file name", sdp_path)

            raw_name = _read_exact(stream, name_length, sdp_path)
            digest = _read_exact(stream, MD5_LENGTH, sdp_path)
            crc32, size = _TRAILER.unpack(_read_exact(stream, _TRAILER.size, sdp_path))

            try:
                entry = ManifestEntry(
                    name=_decode_name(raw_name),
                    md5=digest.hex(),
                    crc32=crc32,
                    size=size,
                )
            except ValidationError as e:
                raise CorruptArchiveError(f"Invalid file record ({e})", sdp_path) from e
            yield entry


def read_sdp(sdp_path: Path) -> List[ManifestEntry]:
    """Read every file record of an SDP archive."""
    entries = list(iter_sdp_entries(sdp_path))
    logger.debug(f"Read {len(entries)} file records from {sdp_path}")
    return entries


def encode_sdp_entries(entries: Iterable[ManifestEntry]) -> bytes:
    """Serialize file records to the uncompressed SDP byte layout.

    Raises:
        ValueError: If a file name does not fit the one-byte length field
    """
    chunks = []
    for entry in entries:
        raw_name = _encode_name(entry.name)
        if len(raw_name) > MAX_NAME_LENGTH:
            raise ValueError(
                f"File name too long for SDP record ({len(raw_name)} bytes): {entry.name}"
            )
        chunks.append(bytes([len(raw_name)]))
        chunks.append(raw_name)
        chunks.append(entry.digest)
        chunks.append(_TRAILER.pack(entry.crc32, entry.size))
    return b"".join(chunks)


def write_sdp(sdp_path: Path, entries: Iterable[ManifestEntry]) -> None:
    """Write file records as a gzip-compressed SDP archive."""
    sdp_path = Path(sdp_path)
    sdp_path.parent.mkdir(parents=True, exist_ok=True)
    with gzip.open(sdp_path, "wb") as f:
        f.write(encode_sdp_entries(entries))
