"""Dataclasses for all AlsTools data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class TrackType(Enum):
    AUDIO = "Audio"
    MIDI = "MIDI"
    RETURN = "Return"
    MASTER = "Master"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class TrackInfo:
    name: str = ""
    track_type: TrackType = TrackType.UNKNOWN
    color_id: int = 0


@dataclass(frozen=True)
class ProjectInfo:
    """One parsed Live Set.

    ``track_count`` is derived from ``tracks`` and can never disagree with it.
    """

    name: str = ""
    file_path: Path = field(default_factory=Path)
    tracks: tuple[TrackInfo, ...] = ()
    last_modified: datetime = field(default_factory=datetime.now)
    longest_track_length: float | None = None  # seconds
    live_version: str = ""
    file_size: int = 0

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def directory(self) -> Path:
        return self.file_path.parent

    def tracks_by_type(self) -> dict[TrackType, list[TrackInfo]]:
        by_type: dict[TrackType, list[TrackInfo]] = {}
        for track in self.tracks:
            by_type.setdefault(track.track_type, []).append(track)
        return by_type

    def visible_tracks(
        self, hide_return: bool = False, hide_master: bool = False
    ) -> list[TrackInfo]:
        """Tracks left after applying the return/master display preferences."""
        hidden: set[TrackType] = set()
        if hide_return:
            hidden.add(TrackType.RETURN)
        if hide_master:
            hidden.add(TrackType.MASTER)
        return [t for t in self.tracks if t.track_type not in hidden]


@dataclass
class ProjectGroup:
    """Saved versions of the same project living in one directory."""

    directory_path: Path = field(default_factory=Path)
    project_name: str = ""
    versions: list[ProjectInfo] = field(default_factory=list)
    selected_version_index: int = 0

    def __post_init__(self):
        self._check_index(self.selected_version_index)

    @property
    def selected_version(self) -> ProjectInfo:
        return self.versions[self.selected_version_index]

    def select(self, index: int) -> ProjectInfo:
        self._check_index(index)
        self.selected_version_index = index
        return self.selected_version

    def _check_index(self, index: int):
        if not 0 <= index < len(self.versions):
            raise ValueError(
                f"Version index {index} out of range for "
                f"{len(self.versions)} version(s) of {self.project_name!r}"
            )


@dataclass
class ProjectDirectory:
    """A configured scan root. Non-recursive roots scan one level of subfolders."""

    path: Path = field(default_factory=Path)
    enabled: bool = True
    recursive: bool = False
