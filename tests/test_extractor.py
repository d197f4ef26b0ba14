from __future__ import annotations

import logging

from bunpatch.extractor import (
    HEADER_MARKER,
    STATUS_HEADER_MISSING,
    STATUS_STRIPPED,
    STATUS_TAIL_MISSING,
    TAIL_MARKER,
    bun_header_marker,
    extract,
    extract_file,
    extract_payload,
)

PAYLOAD = b'console.log("hello");\n'
BINARY = b"MZ\x90\x00runtime" + HEADER_MARKER + PAYLOAD + TAIL_MARKER + b"abc123\n{sourcemap}"


def test_markers_match_windows_layout() -> None:
    assert HEADER_MARKER == b"B:/~BUN/root/droid.exe\x00// @bun\n"
    assert TAIL_MARKER == b"//# debugId="
    assert bun_header_marker() == HEADER_MARKER


def test_posix_header_marker() -> None:
    assert bun_header_marker("droid", "linux") == b"/$bunfs/root/droid\x00// @bun\n"


def test_extract_strips_header_and_tail() -> None:
    result = extract_payload(BINARY)
    assert result.payload == PAYLOAD
    assert result.status == STATUS_STRIPPED
    assert result.header_offset == BINARY.index(HEADER_MARKER)
    assert result.tail_offset == len(PAYLOAD)
    assert result.header_found and result.tail_found


def test_missing_header_passes_input_through(caplog) -> None:
    caplog.set_level(logging.WARNING)
    data = b"plain javascript;" + TAIL_MARKER + b"x"
    result = extract_payload(data)
    assert result.payload == data
    assert result.status == STATUS_HEADER_MISSING
    assert not result.header_found
    assert "header marker not found" in caplog.text


def test_missing_tail_keeps_remainder() -> None:
    data = b"junk" + HEADER_MARKER + PAYLOAD
    result = extract_payload(data)
    assert result.payload == PAYLOAD
    assert result.status == STATUS_TAIL_MISSING
    assert result.tail_offset is None


def test_first_header_and_last_tail_win() -> None:
    inner = b"a();\n//# debugId=inner\nb();\n" + HEADER_MARKER + b"c();\n"
    data = b"x" + HEADER_MARKER + inner + TAIL_MARKER + b"outer"
    assert extract(data) == inner


def test_header_at_end_leaves_empty_payload() -> None:
    assert extract(b"prefix" + HEADER_MARKER) == b""


def test_input_buffer_is_not_mutated() -> None:
    buffer = bytearray(BINARY)
    payload = extract(buffer)
    assert payload == PAYLOAD
    assert bytes(buffer) == BINARY
    assert isinstance(payload, bytes)


def test_custom_markers() -> None:
    data = b"<<HEAD>>body<<TAIL>>rest"
    assert extract(data, b"<<HEAD>>", b"<<TAIL>>") == b"body"


def test_extract_file(tmp_path) -> None:
    source = tmp_path / "droid.exe"
    target = tmp_path / "out" / "droid_processed.js"
    source.write_bytes(BINARY)
    result = extract_file(source, target)
    assert target.read_bytes() == PAYLOAD
    assert result.as_dict()["payload_length"] == len(PAYLOAD)
