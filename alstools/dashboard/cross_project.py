"""Cross-project aggregation and analysis."""

from __future__ import annotations

from dataclasses import dataclass, field

from alstools.core.models import ProjectInfo


@dataclass
class CrossProjectStats:
    total_projects: int = 0
    total_tracks: int = 0
    total_file_size: int = 0
    avg_tracks_per_project: float = 0.0
    track_type_distribution: dict[str, int] = field(default_factory=dict)
    live_versions: dict[str, int] = field(default_factory=dict)


def compute_cross_project_stats(projects: list[ProjectInfo]) -> CrossProjectStats:
    """Aggregate statistics across all projects."""
    stats = CrossProjectStats()
    stats.total_projects = len(projects)

    track_types: dict[str, int] = {}
    versions: dict[str, int] = {}

    for project in projects:
        stats.total_tracks += project.track_count
        stats.total_file_size += project.file_size

        version = project.live_version or "Unknown"
        versions[version] = versions.get(version, 0) + 1

        for track in project.tracks:
            tt = track.track_type.value
            track_types[tt] = track_types.get(tt, 0) + 1

    if projects:
        stats.avg_tracks_per_project = stats.total_tracks / len(projects)

    stats.track_type_distribution = dict(
        sorted(track_types.items(), key=lambda x: x[1], reverse=True)
    )
    stats.live_versions = dict(
        sorted(versions.items(), key=lambda x: x[1], reverse=True)
    )

    return stats
