"""Git helpers - Thin wrapper over the git command line."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from ..errors import GitError

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 30


def git_available() -> bool:
    """Check if the git executable is on PATH."""
    return shutil.which("git") is not None


class GitRepo:
    """A git working tree discovered from a path inside it."""

    def __init__(self, workdir: Path, timeout: int = GIT_TIMEOUT_SECONDS):
        """Initialize the repository wrapper.

        Args:
            workdir: Top-level directory of the working tree
            timeout: Timeout in seconds for each git invocation
        """
        self.workdir = workdir
        self.timeout = timeout

    @classmethod
    def discover(cls, path: Path) -> Optional["GitRepo"]:
        """Find the repository containing ``path``.

        Args:
            path: Any directory inside a working tree

        Returns:
            GitRepo, or None if git is missing or path is not in a repository
        """
        if not git_available():
            logger.debug("git executable not found; git checks degrade to 'not a git repo'")
            return None
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=path,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("git discovery failed for %s: %s", path, e)
            return None
        if result.returncode != 0:
            return None
        return cls(Path(result.stdout.strip()).resolve())

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        command = ["git", *args]
        try:
            result = subprocess.run(
                command,
                cwd=self.workdir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(f"`{' '.join(command)}` timed out after {self.timeout}s") from e
        except OSError as e:
            raise GitError(f"`{' '.join(command)}` could not be run: {e}") from e
        if check and result.returncode != 0:
            raise GitError(f"`{' '.join(command)}` failed: {result.stderr.strip()}")
        return result

    def is_dirty(self) -> bool:
        """Check for modified, staged or untracked (non-ignored) files."""
        result = self._run("status", "--porcelain", "--untracked-files=all")
        return bool(result.stdout.strip())

    def current_branch(self) -> Optional[str]:
        """Get the branch HEAD points at, or None when HEAD is detached.

        Raises:
            GitError: If HEAD cannot be resolved (e.g. no commits yet)
        """
        self._run("rev-parse", "--verify", "--quiet", "HEAD")
        result = self._run("symbolic-ref", "--quiet", "--short", "HEAD", check=False)
        if result.returncode == 0:
            return result.stdout.strip()
        return None

    def _relative(self, path: Path) -> Optional[str]:
        absolute = path if path.is_absolute() else self.workdir / path
        try:
            return absolute.resolve().relative_to(self.workdir).as_posix()
        except ValueError:
            return None

    def is_tracked(self, path: Path) -> bool:
        """Check whether a file is in the git index."""
        rel = self._relative(path)
        if rel is None:
            return False
        result = self._run("ls-files", "--error-unmatch", "--", rel, check=False)
        return result.returncode == 0

    def tracked_files(self, path: Path) -> List[str]:
        """List indexed paths equal to or under ``path``, relative to the work tree.

        Relative paths are taken from the work tree root; paths outside the
        work tree have no tracked files.
        """
        rel = self._relative(path)
        if rel is None:
            return []
        result = self._run("ls-files", "--", rel)
        return [line for line in result.stdout.splitlines() if line]

    def has_tracked_prefix(self, path: Path) -> bool:
        return bool(self.tracked_files(path))
