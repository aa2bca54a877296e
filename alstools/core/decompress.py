"""Streaming decompression of .als files into the on-disk XML cache."""

from __future__ import annotations

import threading
import zlib
from pathlib import Path

from alstools.core.errors import (
    CacheWriteError,
    MalformedStreamError,
    ParseCancelledError,
    SourceReadError,
)

CHUNK_SIZE = 64 * 1024

# 32 + MAX_WBITS: accept both gzip and zlib headers
_AUTO_DETECT_WBITS = 32 + zlib.MAX_WBITS


def decompress_to_file(
    source: Path,
    destination: Path,
    cancel_event: threading.Event | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Decompress ``source`` into ``destination`` chunk by chunk.

    The destination's parent directory must already exist. The destination is
    created or overwritten, and removed again if anything goes wrong.
    Returns the number of bytes written.
    """
    try:
        src = open(source, "rb")
    except OSError as e:
        raise SourceReadError(source, f"Cannot open project file ({e})") from e

    try:
        try:
            dst = open(destination, "wb")
        except OSError as e:
            raise CacheWriteError(destination, f"Cannot create cache file ({e})") from e

        try:
            with dst:
                written = _pump(source, destination, src, dst, cancel_event, chunk_size)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise
    finally:
        src.close()

    return written


def _pump(source, destination, src, dst, cancel_event, chunk_size) -> int:
    decomp = zlib.decompressobj(_AUTO_DETECT_WBITS)
    written = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise ParseCancelledError(source, "Decompression cancelled")

        try:
            chunk = src.read(chunk_size)
        except OSError as e:
            raise SourceReadError(source, f"Error reading project file ({e})") from e
        if not chunk:
            break

        # Concatenated gzip members: restart on the leftover bytes
        while chunk:
            try:
                data = decomp.decompress(chunk)
            except zlib.error as e:
                raise MalformedStreamError(source, f"Invalid compressed data ({e})") from e
            written += _write(destination, dst, data)
            if decomp.eof:
                chunk = decomp.unused_data
                if chunk:
                    decomp = zlib.decompressobj(_AUTO_DETECT_WBITS)
            else:
                chunk = b""

    if not decomp.eof:
        raise MalformedStreamError(source, "Unexpected end of compressed data")

    written += _write(destination, dst, decomp.flush())
    return written


def _write(destination, dst, data: bytes) -> int:
    if not data:
        return 0
    try:
        dst.write(data)
    except OSError as e:
        raise CacheWriteError(destination, f"Error writing cache file ({e})") from e
    return len(data)
