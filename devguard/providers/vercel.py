"""Vercel provider - committed env config and tracked .vercel metadata."""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional

from ..core.scanner import Category, Issue, Severity
from ..errors import GitError
from ..utils.fs import read_text, relative_path
from .base import DetectionResult, Provider

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

logger = logging.getLogger(__name__)


def contains_key_recursive(value: Any, key: str) -> bool:
    """Check whether ``key`` appears in any object nested inside ``value``."""
    if isinstance(value, dict):
        if key in value:
            return True
        return any(contains_key_recursive(child, key) for child in value.values())
    if isinstance(value, list):
        return any(contains_key_recursive(child, key) for child in value)
    return False


def parse_vercel_json(path: Path) -> Optional[Any]:
    """Parse vercel.json; missing or invalid files yield None."""
    if not path.is_file():
        return None
    try:
        return json.loads(read_text(path))
    except json.JSONDecodeError as e:
        logger.debug("vercel.json is not valid JSON: %s", e)
        return None


class VercelProvider(Provider):
    """Checks for Vercel deployments."""

    name = "vercel"
    category = Category.VERCEL

    def probe(self, ctx: "RepoContext") -> DetectionResult:
        if (ctx.repo_root / "vercel.json").is_file():
            return DetectionResult.found("vercel.json")
        if ctx.has_vercel_dir:
            return DetectionResult.found(".vercel/ directory")
        if ctx.package_json_contains('"vercel"'):
            return DetectionResult.found("vercel in package.json")
        return DetectionResult.not_found()

    async def run_checks(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        issues: List[Issue] = []

        vercel_json = ctx.repo_root / "vercel.json"
        value = parse_vercel_json(vercel_json)
        if value is not None and contains_key_recursive(value, "env"):
            issues.append(Issue(
                severity=Severity.INFO,
                category=self.category,
                title="vercel.json contains env keys",
                hint="prefer Vercel dashboard environment variables instead of committed env fields",
                file_path=relative_path(ctx.repo_root, vercel_json),
            ))

        dot_vercel = ctx.repo_root / ".vercel"
        if dot_vercel.exists():
            tracked = None
            if ctx.git_repo is not None:
                try:
                    tracked = ctx.git_repo.has_tracked_prefix(dot_vercel)
                except GitError as e:
                    logger.debug("could not list tracked .vercel files: %s", e)

            if tracked is True:
                issues.append(Issue(
                    severity=Severity.WARNING,
                    category=self.category,
                    title=".vercel directory appears tracked",
                    hint="remove .vercel from git and add it to .gitignore",
                    file_path=relative_path(ctx.repo_root, dot_vercel),
                ))
            elif tracked is None:
                issues.append(Issue(
                    severity=Severity.INFO,
                    category=self.category,
                    title=".vercel directory exists locally",
                    hint="confirm .vercel is gitignored to avoid leaking local metadata",
                    file_path=relative_path(ctx.repo_root, dot_vercel),
                ))

        return issues
