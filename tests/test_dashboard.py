"""Tests for grouping, track filtering and cross-project stats."""

from datetime import datetime
from pathlib import Path

import pytest

from alstools.core.models import ProjectGroup, ProjectInfo, TrackInfo, TrackType
from alstools.dashboard.cross_project import compute_cross_project_stats
from alstools.dashboard.grouping import group_by_directory


def _project(path: str, day: int, *types: TrackType, version: str = "") -> ProjectInfo:
    return ProjectInfo(
        name=Path(path).stem,
        file_path=Path(path),
        tracks=tuple(TrackInfo(name=f"T{i}", track_type=t) for i, t in enumerate(types)),
        last_modified=datetime(2024, 1, day),
        live_version=version,
        file_size=100,
    )


def test_group_by_directory_newest_first():
    projects = [
        _project("/music/Song Project/Song.als", 1),
        _project("/music/Other Project/Other.als", 5),
        _project("/music/Song Project/Song v2.als", 3),
    ]
    groups = group_by_directory(projects)

    assert [g.project_name for g in groups] == ["Other Project", "Song Project"]
    song = groups[1]
    assert [v.name for v in song.versions] == ["Song v2", "Song"]
    assert song.selected_version_index == 0
    assert song.selected_version.name == "Song v2"


def test_group_select_version():
    group = group_by_directory([
        _project("/m/P/a.als", 1),
        _project("/m/P/b.als", 2),
    ])[0]
    assert group.select(1).name == "a"
    with pytest.raises(ValueError):
        group.select(2)


def test_group_rejects_bad_index():
    with pytest.raises(ValueError):
        ProjectGroup(project_name="Empty", versions=[])
    with pytest.raises(ValueError):
        ProjectGroup(versions=[_project("/m/P/a.als", 1)], selected_version_index=-1)


def test_visible_tracks():
    project = _project(
        "/m/P/a.als", 1,
        TrackType.AUDIO, TrackType.MIDI, TrackType.RETURN, TrackType.MASTER,
    )
    assert len(project.visible_tracks()) == 4
    assert [t.track_type for t in project.visible_tracks(hide_return=True, hide_master=True)] == [
        TrackType.AUDIO, TrackType.MIDI,
    ]
    assert project.track_count == 4


def test_tracks_by_type():
    project = _project("/m/P/a.als", 1, TrackType.AUDIO, TrackType.AUDIO, TrackType.MIDI)
    by_type = project.tracks_by_type()
    assert len(by_type[TrackType.AUDIO]) == 2
    assert len(by_type[TrackType.MIDI]) == 1


def test_cross_project_stats():
    projects = [
        _project("/m/A/a.als", 1, TrackType.AUDIO, TrackType.AUDIO, version="Ableton Live 11"),
        _project("/m/B/b.als", 2, TrackType.MIDI, TrackType.AUDIO, version="Ableton Live 11"),
        _project("/m/C/c.als", 3),
    ]
    stats = compute_cross_project_stats(projects)

    assert stats.total_projects == 3
    assert stats.total_tracks == 4
    assert stats.total_file_size == 300
    assert stats.avg_tracks_per_project == pytest.approx(4 / 3)
    assert stats.track_type_distribution == {"Audio": 3, "MIDI": 1}
    assert stats.live_versions == {"Ableton Live 11": 2, "Unknown": 1}


def test_cross_project_stats_empty():
    stats = compute_cross_project_stats([])
    assert stats.total_projects == 0
    assert stats.avg_tracks_per_project == 0.0
