"""Export scanned projects to JSON for a UI layer."""

from __future__ import annotations

import json
from pathlib import Path

from alstools.core.models import ProjectGroup, ProjectInfo, TrackInfo


def project_to_dict(project: ProjectInfo) -> dict:
    """Convert a ProjectInfo to a serializable dict."""
    return {
        "name": project.name,
        "file_path": str(project.file_path),
        "track_count": project.track_count,
        "tracks": [_track_to_dict(t) for t in project.tracks],
        "last_modified": project.last_modified.isoformat(),
        "longest_track_length": project.longest_track_length,
        "live_version": project.live_version,
        "file_size": project.file_size,
    }


def _track_to_dict(track: TrackInfo) -> dict:
    return {
        "name": track.name,
        "type": track.track_type.value,
        "color_id": track.color_id,
    }


def group_to_dict(group: ProjectGroup) -> dict:
    return {
        "directory_path": str(group.directory_path),
        "project_name": group.project_name,
        "selected_version_index": group.selected_version_index,
        "versions": [project_to_dict(p) for p in group.versions],
    }


def export_projects_json(projects: list[ProjectInfo], output_path: Path):
    """Export multiple projects to a single JSON file."""
    data = {
        "export_version": "1.0",
        "project_count": len(projects),
        "projects": [project_to_dict(p) for p in projects],
    }
    _write_json(data, output_path)


def export_groups_json(groups: list[ProjectGroup], output_path: Path):
    data = {
        "export_version": "1.0",
        "group_count": len(groups),
        "groups": [group_to_dict(g) for g in groups],
    }
    _write_json(data, output_path)


def _write_json(data: dict, output_path: Path):
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
