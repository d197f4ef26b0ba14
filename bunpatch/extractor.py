"""Recover the bundled JavaScript embedded in a Bun standalone executable.

Bun appends the module graph to the runtime binary.  The entry module's
contents follow its virtual path (``B:/~BUN/root/<name>`` on Windows,
``/$bunfs/root/<name>`` elsewhere), a NUL byte and the ``// @bun`` pragma, and
end right before the ``//# debugId=`` comment that precedes the source map
metadata.  Stripping everything outside those two markers yields the original
bundle.

Both searches are best effort: a missing marker is an expected outcome when the
input is already unwrapped or the bundler changed its layout, so it is reported
through :class:`ExtractionResult` rather than raised.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from . import utils

LOG = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

# B:/~BUN/root/droid.exe\0// @bun\n
HEADER_MARKER = bytes(
    [
        0x42, 0x3A, 0x2F, 0x7E, 0x42, 0x55, 0x4E, 0x2F,
        0x72, 0x6F, 0x6F, 0x74, 0x2F, 0x64, 0x72, 0x6F,
        0x69, 0x64, 0x2E, 0x65, 0x78, 0x65, 0x00, 0x2F,
        0x2F, 0x20, 0x40, 0x62, 0x75, 0x6E, 0x0A,
    ]
)

# //# debugId=
TAIL_MARKER = bytes([0x2F, 0x2F, 0x23, 0x20, 0x64, 0x65, 0x62, 0x75, 0x67, 0x49, 0x64, 0x3D])

_WINDOWS_ROOT = b"B:/~BUN/root/"
_POSIX_ROOT = b"/$bunfs/root/"
_BUN_PRAGMA = b"\x00// @bun\n"

STATUS_STRIPPED = "stripped"
STATUS_HEADER_MISSING = "header_missing"
STATUS_TAIL_MISSING = "tail_missing"


def bun_header_marker(binary_name: str = "droid.exe", platform: str = "windows") -> bytes:
    """Return the header marker preceding the entry module of ``binary_name``."""

    root = _WINDOWS_ROOT if platform == "windows" else _POSIX_ROOT
    return root + binary_name.encode("utf-8") + _BUN_PRAGMA


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of a marker scan.

    ``header_offset`` is relative to the input buffer, ``tail_offset`` to the
    buffer left after the header was stripped.
    """

    payload: bytes
    status: str
    header_offset: Optional[int] = None
    tail_offset: Optional[int] = None

    @property
    def header_found(self) -> bool:
        return self.header_offset is not None

    @property
    def tail_found(self) -> bool:
        return self.tail_offset is not None

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "header_offset": self.header_offset,
            "tail_offset": self.tail_offset,
            "payload_length": len(self.payload),
        }


def find_first(buffer: bytes, pattern: bytes) -> int:
    """Return the offset of the first exact occurrence of ``pattern`` or ``-1``."""

    if not pattern:
        return -1
    return buffer.find(pattern)


def find_last(buffer: bytes, pattern: bytes) -> int:
    """Return the offset of the last exact occurrence of ``pattern`` or ``-1``."""

    if not pattern:
        return -1
    return buffer.rfind(pattern)


def extract_payload(
    buffer: BytesLike,
    header_marker: bytes = HEADER_MARKER,
    tail_marker: bytes = TAIL_MARKER,
) -> ExtractionResult:
    """Strip the framing around the embedded payload of ``buffer``."""

    data = bytes(buffer)

    header_index = find_first(data, header_marker)
    if header_index == -1:
        LOG.warning("header marker not found, passing %d bytes through unchanged", len(data))
        return ExtractionResult(payload=data, status=STATUS_HEADER_MISSING)

    header_end = header_index + len(header_marker)
    LOG.info("header marker found at offset %d", header_index)
    data = data[header_end:]
    LOG.info("removed header (0..%d), %d bytes remain", header_end, len(data))

    tail_index = find_last(data, tail_marker)
    if tail_index == -1:
        LOG.info("tail marker not found, keeping all %d remaining bytes", len(data))
        return ExtractionResult(payload=data, status=STATUS_TAIL_MISSING, header_offset=header_index)

    if tail_index >= 2:
        LOG.debug("bytes before tail marker: %s", data[tail_index - 2 : tail_index].hex(" "))
    LOG.info("tail marker found at offset %d (last occurrence)", tail_index)
    data = data[:tail_index]
    return ExtractionResult(
        payload=data,
        status=STATUS_STRIPPED,
        header_offset=header_index,
        tail_offset=tail_index,
    )


def extract(
    buffer: BytesLike,
    header_marker: bytes = HEADER_MARKER,
    tail_marker: bytes = TAIL_MARKER,
) -> bytes:
    """Return the payload enclosed by ``header_marker`` and ``tail_marker``."""

    return extract_payload(buffer, header_marker, tail_marker).payload


def extract_file(
    input_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str],
    header_marker: bytes = HEADER_MARKER,
    tail_marker: bytes = TAIL_MARKER,
) -> ExtractionResult:
    """Read ``input_path``, strip its framing and write the payload to ``output_path``."""

    LOG.info("extracting bundled source from %s", input_path)
    with open(input_path, "rb") as handle:
        raw = handle.read()
    result = extract_payload(raw, header_marker, tail_marker)
    utils.write_bytes(output_path, result.payload)
    LOG.info("wrote %d bytes to %s", len(result.payload), output_path)
    return result


__all__ = [
    "HEADER_MARKER",
    "TAIL_MARKER",
    "STATUS_STRIPPED",
    "STATUS_HEADER_MISSING",
    "STATUS_TAIL_MISSING",
    "ExtractionResult",
    "bun_header_marker",
    "find_first",
    "find_last",
    "extract",
    "extract_payload",
    "extract_file",
]
