"""Recursive scanner for Ableton projects in a directory tree.

The scan runs on an asyncio event loop so a host UI stays responsive:
blocking file work happens in worker threads, every parse is raced against a
deadline, and the loop is yielded after each file. A file that fails or
times out is logged and skipped; only an unreadable scan root fails the scan.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from alstools.core.als_parser import cache_path_for, parse_als
from alstools.core.constants import (
    BACKUP_PATH_MARKER,
    EXCLUDED_FOLDERS,
    PROJECT_EXTENSION,
)
from alstools.core.errors import DirectoryScanError, ProjectLoadError, ProjectTimeoutError
from alstools.core.models import ProjectDirectory, ProjectInfo
from alstools.utils.config import DEFAULT_MAX_DEPTH, ScanConfig

logger = logging.getLogger(__name__)

ProjectCallback = Callable[[ProjectInfo], None]
ProjectParseFn = Callable[[Path, threading.Event], ProjectInfo]


async def parse_with_timeout(
    als_path: Path,
    timeout: float,
    parser: ProjectParseFn = parse_als,
    executor: Executor | None = None,
) -> ProjectInfo:
    """Run ``parser`` in a worker thread, giving up after ``timeout`` seconds.

    ``executor`` defaults to the loop's default executor. The thread cannot be
    interrupted; on timeout its cancel event is set so a running decompression
    stops at its next chunk and removes its partial cache file. A thread stuck
    inside a blocking open() or read() never sees the event.
    """
    loop = asyncio.get_running_loop()
    cancel = threading.Event()
    try:
        return await asyncio.wait_for(
            loop.run_in_executor(executor, parser, als_path, cancel), timeout
        )
    except asyncio.TimeoutError as e:
        cancel.set()
        raise ProjectTimeoutError(als_path, timeout) from e


class _ParsePool:
    """Worker threads owned by one scan.

    Shutdown never waits, so a thread stuck on a hanging file cannot hold up
    the caller's event loop teardown. After a timeout the executor is retired
    and replaced, so the stuck thread stops occupying a worker slot.
    """

    def __init__(self, max_workers: int):
        self.max_workers = max_workers
        self.executor = self._new_executor()

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="alstools-parse"
        )

    async def run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, fn, *args)

    def abandon_stuck(self):
        retired = self.executor
        self.executor = self._new_executor()
        retired.shutdown(wait=False)

    def close(self):
        self.executor.shutdown(wait=False, cancel_futures=True)


class ProjectSink:
    """Collects scanned projects and streams each one to an optional callback."""

    def __init__(self, on_project_found: ProjectCallback | None = None):
        self.projects: list[ProjectInfo] = []
        self._callback = on_project_found
        self._lock = asyncio.Lock()

    async def add(self, project: ProjectInfo):
        async with self._lock:
            self.projects.append(project)
            if self._callback is None:
                return
            try:
                self._callback(project)
            except Exception:
                logger.exception("Project callback failed for %s", project.file_path)


@dataclass
class _ScanState:
    sink: ProjectSink
    max_depth: int
    semaphore: asyncio.Semaphore
    pool: _ParsePool
    claims: dict[Path, asyncio.Lock] = field(default_factory=dict)
    visited: set[str] = field(default_factory=set)

    def claim(self, cache_path: Path) -> asyncio.Lock:
        return self.claims.setdefault(cache_path, asyncio.Lock())


@dataclass
class _Entry:
    path: Path
    is_dir: bool


def _list_entries(directory: Path, follow_symlinks: bool) -> list[_Entry]:
    with os.scandir(directory) as it:
        entries = [
            _Entry(
                path=Path(e.path),
                is_dir=e.is_dir(follow_symlinks=follow_symlinks),
            )
            for e in it
        ]
    entries.sort(key=lambda e: e.path.name)
    return entries


def is_project_file(entry_path: Path) -> bool:
    return entry_path.suffix == PROJECT_EXTENSION


def is_excluded_path(path: Path) -> bool:
    """Files anywhere below a Backup folder are never harvested."""
    return BACKUP_PATH_MARKER in str(path)


class ProjectScanner:
    """Walks directory trees and parses every Live Set it finds."""

    def __init__(
        self,
        config: ScanConfig | None = None,
        parser: ProjectParseFn = parse_als,
    ):
        self.config = config or ScanConfig()
        self.parser = parser

    async def scan(
        self,
        root: Path,
        max_depth: int = DEFAULT_MAX_DEPTH,
        on_project_found: ProjectCallback | None = None,
    ) -> list[ProjectInfo]:
        """Scan ``root`` and up to ``max_depth`` levels of subfolders.

        Raises DirectoryScanError if ``root`` cannot be listed.
        """
        self._check_depth(max_depth)
        pool = _ParsePool(self.config.max_workers)
        try:
            state = self._new_state(ProjectSink(on_project_found), max_depth, pool)
            await self._scan_root(Path(root), state)
        finally:
            pool.close()
        return state.sink.projects

    async def scan_many(
        self,
        directories: Iterable[ProjectDirectory],
        on_project_found: ProjectCallback | None = None,
    ) -> list[ProjectInfo]:
        """Scan every enabled directory; an unreadable root is logged and skipped."""
        sink = ProjectSink(on_project_found)
        pool = _ParsePool(self.config.max_workers)
        try:
            for directory in directories:
                if not directory.enabled:
                    continue
                depth = (
                    self.config.recursive_max_depth
                    if directory.recursive
                    else DEFAULT_MAX_DEPTH
                )
                state = self._new_state(sink, depth, pool)
                try:
                    await self._scan_root(Path(directory.path), state)
                except DirectoryScanError as e:
                    logger.warning("Skipping scan root: %s", e)
        finally:
            pool.close()
        return sink.projects

    @staticmethod
    def _check_depth(max_depth: int):
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    def _new_state(self, sink: ProjectSink, max_depth: int, pool: _ParsePool) -> _ScanState:
        self._check_depth(max_depth)
        return _ScanState(
            sink=sink,
            max_depth=max_depth,
            semaphore=asyncio.Semaphore(self.config.max_workers),
            pool=pool,
        )

    async def _scan_root(self, root: Path, state: _ScanState):
        try:
            entries = await state.pool.run(
                _list_entries, root, self.config.follow_symlinks
            )
        except OSError as e:
            raise DirectoryScanError(root, f"Cannot read scan root ({e})") from e
        self._mark_visited(root, state)
        await self._scan_level(entries, 0, state)

    async def _scan_dir(self, directory: Path, depth: int, state: _ScanState):
        if not self._mark_visited(directory, state):
            logger.debug("Already scanned %s, skipping", directory)
            return
        try:
            entries = await state.pool.run(
                _list_entries, directory, self.config.follow_symlinks
            )
        except OSError as e:
            logger.warning("Error accessing %s: %s", directory, e)
            return
        await self._scan_level(entries, depth, state)

    async def _scan_level(self, entries: list[_Entry], depth: int, state: _ScanState):
        project_files = [
            e.path for e in entries
            if is_project_file(e.path) and not e.is_dir and not is_excluded_path(e.path)
        ]
        if project_files:
            await asyncio.gather(*(self._ingest(p, state) for p in project_files))

        if depth >= state.max_depth:
            return
        for entry in entries:
            if entry.is_dir and entry.path.name not in EXCLUDED_FOLDERS:
                await self._scan_dir(entry.path, depth + 1, state)

    async def _ingest(self, als_path: Path, state: _ScanState):
        async with state.semaphore:
            async with state.claim(cache_path_for(als_path)):
                try:
                    project = await parse_with_timeout(
                        als_path, self.config.parse_timeout, self.parser,
                        state.pool.executor,
                    )
                except ProjectTimeoutError as e:
                    logger.warning("Skipping %s", e)
                    state.pool.abandon_stuck()
                except ProjectLoadError as e:
                    logger.warning("Failed to parse %s: %s", als_path, e)
                except Exception:
                    logger.exception("Unexpected error parsing %s", als_path)
                else:
                    await state.sink.add(project)
            # Give the event loop a turn before the next file
            await asyncio.sleep(0)

    def _mark_visited(self, directory: Path, state: _ScanState) -> bool:
        """Record a directory's real path; False if it was seen before."""
        if not self.config.follow_symlinks:
            return True
        real = os.path.realpath(directory)
        if real in state.visited:
            return False
        state.visited.add(real)
        return True


async def scan_directory(
    root: Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    on_project_found: ProjectCallback | None = None,
    config: ScanConfig | None = None,
    parser: ProjectParseFn = parse_als,
) -> list[ProjectInfo]:
    """Find and parse all .als files below ``root``."""
    return await ProjectScanner(config, parser).scan(root, max_depth, on_project_found)


async def scan_directories(
    directories: Iterable[ProjectDirectory],
    on_project_found: ProjectCallback | None = None,
    config: ScanConfig | None = None,
) -> list[ProjectInfo]:
    return await ProjectScanner(config).scan_many(directories, on_project_found)


def load_projects(
    root: Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    on_project_found: ProjectCallback | None = None,
    config: ScanConfig | None = None,
    parser: ProjectParseFn = parse_als,
) -> list[ProjectInfo]:
    """Blocking variant of scan_directory for use from a background thread.

    on_project_found is called on that thread. Returns once the tree is
    exhausted, even if a parse that timed out is still stuck in its thread.
    """
    return asyncio.run(
        scan_directory(root, max_depth, on_project_found, config, parser)
    )
