"""Group scanned projects into per-directory version lists."""

from __future__ import annotations

from pathlib import Path

from alstools.core.models import ProjectGroup, ProjectInfo


def group_by_directory(projects: list[ProjectInfo]) -> list[ProjectGroup]:
    """One group per directory, newest version first, groups sorted by path."""
    by_dir: dict[Path, list[ProjectInfo]] = {}
    for project in projects:
        by_dir.setdefault(project.directory, []).append(project)

    groups: list[ProjectGroup] = []
    for directory in sorted(by_dir):
        versions = sorted(by_dir[directory], key=lambda p: p.last_modified, reverse=True)
        groups.append(ProjectGroup(
            directory_path=directory,
            project_name=directory.name or versions[0].name,
            versions=versions,
        ))
    return groups
