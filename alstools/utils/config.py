"""Default paths and scan settings."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SCAN_PATH = Path.home() / "Music" / "Ableton" / "Projects"
APP_NAME = "AlsTools"
APP_VERSION = "1.0.0"

PARSE_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_DEPTH = 1  # root + one level of subfolders
RECURSIVE_MAX_DEPTH = 16
MAX_WORKERS = 1


@dataclass
class ScanConfig:
    parse_timeout: float = PARSE_TIMEOUT_SECONDS
    max_workers: int = MAX_WORKERS
    recursive_max_depth: int = RECURSIVE_MAX_DEPTH
    follow_symlinks: bool = False

    def __post_init__(self):
        if self.parse_timeout <= 0:
            raise ValueError(f"parse_timeout must be positive, got {self.parse_timeout}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.recursive_max_depth < 0:
            raise ValueError(
                f"recursive_max_depth must be >= 0, got {self.recursive_max_depth}"
            )
