"""Repository Context Module - Collects everything checks need about a repository."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Tuple

from ..errors import GitError, ScanError
from ..utils.envfile import parse_dotenv
from ..utils.fs import read_text, relative_path
from ..utils.git import GitRepo
from .file_discovery import DiscoveryResult, FileDiscovery

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DotenvVar:
    """A variable assignment read from one of the configured dotenv files."""
    key: str
    value: str
    file: str
    line: int


@dataclass
class RepoContext:
    """Scanner output consumed by check modules and providers.

    Built once per run; stages read it and never modify it.
    """
    repo_root: Path
    discovery: DiscoveryResult
    package_json: Optional[str] = None
    dotenv_vars: Tuple[DotenvVar, ...] = ()
    dotenv_keys: FrozenSet[str] = frozenset()
    git_repo: Optional[GitRepo] = None
    has_supabase_dir: bool = False
    has_vercel_dir: bool = False
    read_errors: List[str] = field(default_factory=list)

    @classmethod
    def build(cls, repo_root: str | Path, config: "Config") -> "RepoContext":
        """Scan a repository root.

        Args:
            repo_root: Repository directory
            config: Resolved configuration

        Returns:
            RepoContext for the run

        Raises:
            ScanError: If the root does not exist, is not a directory or cannot be read
        """
        root = Path(repo_root)
        if not root.exists():
            raise ScanError(f"path does not exist: {root}")
        if not root.is_dir():
            raise ScanError(f"path is not a directory: {root}")
        try:
            root = root.resolve(strict=True)
            os.listdir(root)
        except OSError as e:
            raise ScanError(f"cannot read repository root {root}: {e}") from e

        logger.debug("scanning repository at %s", root)
        read_errors: List[str] = []

        package_json = None
        package_path = root / "package.json"
        if package_path.is_file():
            try:
                package_json = read_text(package_path)
            except OSError as e:
                read_errors.append(f"package.json: {e}")

        dotenv_vars: List[DotenvVar] = []
        for rel_path in config.env.dotenv_files:
            path = root / rel_path
            if not path.is_file():
                continue
            try:
                content = read_text(path)
            except OSError as e:
                read_errors.append(f"{rel_path}: {e}")
                continue
            for entry in parse_dotenv(content):
                dotenv_vars.append(DotenvVar(
                    key=entry.key,
                    value=entry.value,
                    file=relative_path(root, path),
                    line=entry.line,
                ))

        discovery = FileDiscovery(exclude_dirs=config.scan.exclude).discover(root)

        return cls(
            repo_root=root,
            discovery=discovery,
            package_json=package_json,
            dotenv_vars=tuple(dotenv_vars),
            dotenv_keys=frozenset(var.key for var in dotenv_vars),
            git_repo=GitRepo.discover(root),
            has_supabase_dir=(root / "supabase").is_dir(),
            has_vercel_dir=(root / ".vercel").is_dir(),
            read_errors=read_errors,
        )

    def package_json_contains(self, needle: str) -> bool:
        return self.package_json is not None and needle in self.package_json

    def has_env_key(self, key: str) -> bool:
        """Check dotenv files first, then the process environment."""
        return key in self.dotenv_keys or key in os.environ

    def tracked_status(self, path: Path) -> Optional[bool]:
        """Get whether a file is tracked by git.

        Returns:
            True/False, or None when there is no repository or git failed
        """
        if self.git_repo is None:
            return None
        try:
            return self.git_repo.is_tracked(path)
        except GitError as e:
            logger.debug("could not determine tracking status of %s: %s", path, e)
            return None
