"""Exceptions raised while loading Live Sets and scanning directories.

Every failure tied to a single project file derives from ``ProjectLoadError``
and carries the offending path; the scanner catches these and skips the file.
``DirectoryScanError`` is reserved for a scan root that cannot be listed.
"""

from __future__ import annotations

from pathlib import Path


class ProjectLoadError(Exception):
    """A single project file could not be turned into a ProjectInfo."""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {self.path}")


class ProjectNotFoundError(ProjectLoadError):
    """The project file is missing or cannot be stat'ed."""


class SourceReadError(ProjectLoadError):
    """Reading the compressed project file failed."""


class MalformedStreamError(ProjectLoadError):
    """The project file is not a valid gzip/zlib stream."""


class CacheWriteError(ProjectLoadError):
    """The cache folder or the decompressed XML could not be written."""


class CacheReadError(ProjectLoadError):
    """The decompressed XML could not be read back as UTF-8 text."""


class MalformedXmlError(ProjectLoadError):
    """The decompressed content is not well-formed XML."""


class ParseCancelledError(ProjectLoadError):
    """The parse was abandoned by its caller, usually after a timeout."""


class ProjectTimeoutError(ProjectLoadError):
    def __init__(self, path: Path, timeout: float):
        self.timeout = timeout
        super().__init__(path, f"Timeout: parsing took longer than {timeout:g}s")


class DirectoryScanError(Exception):
    """The scan root itself could not be enumerated."""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {self.path}")
