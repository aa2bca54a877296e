"""Tests for streaming .als decompression."""

import gzip
import tempfile
import threading
import zlib
from pathlib import Path

import pytest

from alstools.core.decompress import decompress_to_file
from alstools.core.errors import (
    CacheWriteError,
    MalformedStreamError,
    ParseCancelledError,
    SourceReadError,
)

PAYLOAD = b"<Ableton><LiveSet/></Ableton>" * 500


def _write(directory: Path, name: str, content: bytes) -> Path:
    path = directory / name
    path.write_bytes(content)
    return path


def test_decompress_gzip_in_small_chunks():
    """Should reassemble the payload when fed a few bytes at a time."""
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", gzip.compress(PAYLOAD))
        dst = p / "set.xml"

        written = decompress_to_file(src, dst, chunk_size=17)
        assert written == len(PAYLOAD)
        assert dst.read_bytes() == PAYLOAD


def test_decompress_zlib_header():
    """Should accept zlib-wrapped data as well as gzip."""
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", zlib.compress(PAYLOAD))
        dst = p / "set.xml"

        decompress_to_file(src, dst)
        assert dst.read_bytes() == PAYLOAD


def test_decompress_concatenated_members():
    """Should decode every member of a multi-member gzip file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", gzip.compress(b"first-") + gzip.compress(b"second"))
        dst = p / "set.xml"

        decompress_to_file(src, dst, chunk_size=8)
        assert dst.read_bytes() == b"first-second"


def test_decompress_overwrites_destination():
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", gzip.compress(b"new"))
        dst = _write(p, "set.xml", b"old content that is longer")

        decompress_to_file(src, dst)
        assert dst.read_bytes() == b"new"


def test_plain_file_is_malformed():
    """Uncompressed data should raise MalformedStreamError and leave no output."""
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", b"<Ableton/> not compressed")
        dst = p / "set.xml"

        with pytest.raises(MalformedStreamError) as exc:
            decompress_to_file(src, dst)
        assert exc.value.path == src
        assert not dst.exists()


def test_truncated_stream_is_malformed():
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", gzip.compress(PAYLOAD)[:-12])
        dst = p / "set.xml"

        with pytest.raises(MalformedStreamError):
            decompress_to_file(src, dst)
        assert not dst.exists()


def test_empty_file_is_malformed():
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", b"")

        with pytest.raises(MalformedStreamError):
            decompress_to_file(src, p / "set.xml")


def test_missing_source():
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        with pytest.raises(SourceReadError):
            decompress_to_file(p / "missing.als", p / "set.xml")


def test_unwritable_destination():
    """A destination in a missing folder is a write failure, not a read failure."""
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", gzip.compress(PAYLOAD))

        with pytest.raises(CacheWriteError):
            decompress_to_file(src, p / "no_such_dir" / "set.xml")


def test_cancelled_decompression_removes_partial_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        p = Path(tmpdir)
        src = _write(p, "set.als", gzip.compress(PAYLOAD))
        dst = p / "set.xml"
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ParseCancelledError):
            decompress_to_file(src, dst, cancel_event=cancel)
        assert not dst.exists()
