"""Ableton .als project parser.

An .als file is gzip-compressed XML. The parser decompresses it into the
``Ableton Project Info`` folder next to the set, reads the XML back into a
generic attribute tree and extracts the track list from
``Ableton > LiveSet > Tracks``.
"""

from __future__ import annotations

import logging
import re
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from alstools.core.constants import (
    ATTRIBUTE_PREFIX,
    CACHE_EXTENSION,
    CACHE_FOLDER_NAME,
    TRACK_GROUPS,
    TRACKS_PATH,
    UNNAMED_TRACK,
)
from alstools.core.decompress import decompress_to_file
from alstools.core.errors import (
    CacheReadError,
    CacheWriteError,
    MalformedXmlError,
    ParseCancelledError,
    ProjectNotFoundError,
)
from alstools.core.models import ProjectInfo, TrackInfo, TrackType

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# --- Attribute tree -------------------------------------------------------

def parse_attribute_tree(text: str) -> dict[str, Any]:
    """Parse XML text into nested dicts.

    Attributes become ``"@Name"`` keys. A child tag seen once maps to a dict,
    a repeated child tag maps to a list of dicts. Text content is ignored,
    Live stores everything in attributes. Raises ``ET.ParseError`` on
    malformed XML.
    """
    root = ET.fromstring(text)
    return {root.tag: _element_to_node(root)}


def _element_to_node(elem: ET.Element) -> dict[str, Any]:
    node: dict[str, Any] = {
        f"{ATTRIBUTE_PREFIX}{key}": value for key, value in elem.attrib.items()
    }
    for child in elem:
        value = _element_to_node(child)
        existing = node.get(child.tag)
        if existing is None:
            node[child.tag] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            node[child.tag] = [existing, value]
    return node


def _lookup(tree: Any, *keys: str) -> Any:
    node = tree
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _attribute(node: Any, *path: str, name: str = "Value") -> str | None:
    target = _lookup(node, *path)
    if not isinstance(target, dict):
        return None
    value = target.get(f"{ATTRIBUTE_PREFIX}{name}")
    return value if isinstance(value, str) else None


# --- Structure extraction -------------------------------------------------

@dataclass(frozen=True)
class TrackNode:
    """The fields of one track element the catalog cares about."""

    effective_name: str | None = None
    user_name: str | None = None
    color: str | None = None

    @classmethod
    def from_tree(cls, entry: Any) -> TrackNode | None:
        """Build from an attribute-tree entry; None if it has no Name."""
        if not isinstance(entry, dict) or not entry.get("Name"):
            return None
        return cls(
            effective_name=_attribute(entry, "Name", "EffectiveName"),
            user_name=_attribute(entry, "Name", "UserName"),
            color=_attribute(entry, "Color"),
        )

    @property
    def display_name(self) -> str:
        return self.effective_name or self.user_name or UNNAMED_TRACK

    @property
    def color_id(self) -> int:
        return _parse_int(self.color)


def _parse_int(value: str | None) -> int:
    if not value:
        return 0
    m = _LEADING_INT.match(value)
    return int(m.group(1)) if m else 0


def extract_tracks(tree: dict[str, Any]) -> list[TrackInfo]:
    """Collect tracks group by group: audio, MIDI, return, then master."""
    tracks_node = _lookup(tree, *TRACKS_PATH)
    if not isinstance(tracks_node, dict):
        return []

    tracks: list[TrackInfo] = []
    for group_key in TRACK_GROUPS:
        track_type = TRACK_GROUPS.get(group_key, TrackType.UNKNOWN)
        for entry in _as_list(tracks_node.get(group_key)):
            node = TrackNode.from_tree(entry)
            if node is None:
                continue
            tracks.append(TrackInfo(
                name=node.display_name,
                track_type=track_type,
                color_id=node.color_id,
            ))
    return tracks


def extract_live_version(tree: dict[str, Any]) -> str:
    return _attribute(tree, "Ableton", name="Creator") or ""


# --- Single project -------------------------------------------------------

def cache_path_for(als_path: Path) -> Path:
    """Where the decompressed XML of ``als_path`` is written."""
    return als_path.parent / CACHE_FOLDER_NAME / f"{als_path.stem}{CACHE_EXTENSION}"


class AlsParser:
    """Parser for a single Ableton .als project file."""

    def __init__(self, als_path: Path, cancel_event: threading.Event | None = None):
        self.path = Path(als_path)
        self.cancel_event = cancel_event

    def parse(self) -> ProjectInfo:
        """Decompress, parse and extract. Raises a ProjectLoadError on failure."""
        try:
            stat = self.path.stat()
        except OSError as e:
            raise ProjectNotFoundError(self.path, f"Project file not accessible ({e})") from e

        xml_path = cache_path_for(self.path)
        try:
            xml_path.parent.mkdir(exist_ok=True)
        except OSError as e:
            raise CacheWriteError(xml_path.parent, f"Cannot create cache folder ({e})") from e

        decompress_to_file(self.path, xml_path, cancel_event=self.cancel_event)
        self._check_cancelled()

        try:
            text = xml_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CacheReadError(xml_path, f"Cannot read decompressed XML ({e})") from e

        try:
            tree = parse_attribute_tree(text)
        except ET.ParseError as e:
            raise MalformedXmlError(self.path, f"Invalid XML ({e})") from e

        tracks = extract_tracks(tree)
        project = ProjectInfo(
            name=self.path.stem,
            file_path=self.path,
            tracks=tuple(tracks),
            last_modified=datetime.fromtimestamp(stat.st_mtime),
            live_version=extract_live_version(tree),
            file_size=stat.st_size,
        )
        logger.info("Parsed project: %s with %d tracks", project.name, project.track_count)
        return project

    def _check_cancelled(self):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ParseCancelledError(self.path, "Parse cancelled")


def parse_als(als_path: Path, cancel_event: threading.Event | None = None) -> ProjectInfo:
    """Convenience function to parse an .als file."""
    parser = AlsParser(als_path, cancel_event)
    return parser.parse()
