"""File Discovery Module - Walks a repository honoring directory exclusions."""

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set

from ..utils.fs import relative_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredFile:
    """Represents a discovered file with its metadata."""
    path: Path
    size: int
    relative_path: str

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class DiscoveryResult:
    """Result of file discovery operation."""
    root_path: Path
    files: List[DiscoveredFile] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    def files_within(self, max_size: int) -> List[DiscoveredFile]:
        """Get files no larger than ``max_size`` bytes."""
        return [f for f in self.files if f.size <= max_size]

    def files_larger_than(self, size: int) -> List[DiscoveredFile]:
        return [f for f in self.files if f.size > size]

    def files_named(self, names: Iterable[str]) -> List[DiscoveredFile]:
        """Get files whose name matches one of ``names`` (case-insensitive)."""
        wanted = {name.lower() for name in names}
        return [f for f in self.files if f.name.lower() in wanted]


class FileDiscovery:
    """Discovers files in a repository for the check modules.

    Directories are excluded by name (case-insensitive, glob patterns
    allowed). File size limits are applied by the consumers, so the same walk
    serves both secret scanning and the large-file check.
    """

    def __init__(self, exclude_dirs: Optional[Iterable[str]] = None):
        """Initialize the file discovery.

        Args:
            exclude_dirs: Directory names or glob patterns to skip
        """
        self.exclude_dirs: Set[str] = {d.lower() for d in (exclude_dirs or [])}

    def discover(self, root_path: str | Path) -> DiscoveryResult:
        """Discover all files under the given path.

        Args:
            root_path: Root directory to walk

        Returns:
            DiscoveryResult with files in a stable (sorted) walk order
        """
        root_path = Path(root_path)
        result = DiscoveryResult(root_path=root_path)

        for current_path in self._walk_directory(root_path, result):
            try:
                size = current_path.stat().st_size
            except OSError as e:
                result.errors.append(f"Error processing {current_path}: {e}")
                continue

            result.files.append(DiscoveredFile(
                path=current_path,
                size=size,
                relative_path=relative_path(root_path, current_path),
            ))

        logger.debug(
            "discovered %d files under %s (%d errors)",
            result.total_files, root_path, len(result.errors),
        )
        return result

    def _is_excluded(self, dirname: str) -> bool:
        name = dirname.lower()
        return name in self.exclude_dirs or any(
            fnmatch.fnmatch(name, pattern) for pattern in self.exclude_dirs
        )

    def _walk_directory(self, root_path: Path, result: DiscoveryResult):
        """Walk through directory tree, yielding file paths.

        Args:
            root_path: Root directory to walk
            result: Discovery result collecting walk errors

        Yields:
            Path objects for each regular file found
        """
        def on_error(error: OSError) -> None:
            result.errors.append(f"Error walking {error.filename}: {error.strerror}")

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_error):
            dirnames[:] = sorted(d for d in dirnames if not self._is_excluded(d))

            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if file_path.is_file():
                    yield file_path
