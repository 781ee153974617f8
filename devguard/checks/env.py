"""Env Check - Required variables, example-file drift and committed env files."""

import logging
from typing import TYPE_CHECKING, List, Set, Tuple

from ..core.scanner import BaseCheck, Category, Issue, Severity
from ..utils.envfile import parse_dotenv
from ..utils.fs import read_text

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

logger = logging.getLogger(__name__)


class EnvCheck(BaseCheck):
    """Validates environment configuration against the [env] settings."""

    def __init__(self):
        super().__init__(name="env", category=Category.ENV)

    async def run(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        issues: List[Issue] = []
        issues.extend(self._check_required(ctx, config))
        issues.extend(self._check_example_drift(ctx, config))
        issues.extend(self._check_forbidden_files(ctx, config))
        return issues

    def _check_required(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        issues = []
        for key in config.env.required:
            if ctx.has_env_key(key):
                continue
            issues.append(Issue(
                severity=Severity.WARNING,
                category=self.category,
                title=f"missing required env var {key}",
                hint=f"add {key} to local dotenv files and CI environment settings",
            ))
        return issues

    def _collect_example_keys(self, ctx: "RepoContext", config: "Config") -> Tuple[Set[str], bool]:
        """Read keys from the configured example files.

        Returns:
            (keys, whether any example file exists)
        """
        keys: Set[str] = set()
        found_any = False
        for rel_path in config.env.example_files:
            path = ctx.repo_root / rel_path
            if not path.is_file():
                continue
            found_any = True
            try:
                content = read_text(path)
            except OSError as e:
                logger.debug("could not read example file %s: %s", rel_path, e)
                continue
            keys.update(entry.key for entry in parse_dotenv(content))
        return keys, found_any

    def _check_example_drift(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        example_keys, has_example_files = self._collect_example_keys(ctx, config)
        if not has_example_files:
            return []

        env_keys = set(ctx.dotenv_keys)
        issues = []
        for key in sorted(env_keys - example_keys):
            issues.append(Issue(
                severity=Severity.WARNING,
                category=self.category,
                title=f"env example missing key {key}",
                hint="add this key to .env.example or .env.template",
                detail="the key exists in dotenv files but not in example files",
            ))
        for key in sorted(example_keys - env_keys):
            issues.append(Issue(
                severity=Severity.WARNING,
                category=self.category,
                title=f"example file contains key {key} not found in dotenv files",
                hint="either add this key to active dotenv files or remove stale example entries",
                detail="keeping example files aligned avoids onboarding and CI drift",
            ))
        return issues

    def _check_forbidden_files(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        """Flag forbidden files that are tracked, or whose tracking is unknown."""
        issues = []
        for discovered in ctx.discovery.files_named(config.env.forbid_commit):
            tracked = ctx.tracked_status(discovered.path)
            if tracked is True:
                issues.append(Issue(
                    severity=Severity.CRITICAL,
                    category=self.category,
                    title="forbidden env file appears tracked",
                    hint="remove it from git index and add the path to .gitignore",
                    file_path=discovered.relative_path,
                ))
            elif tracked is None:
                issues.append(Issue(
                    severity=Severity.CRITICAL,
                    category=self.category,
                    title="forbidden env file exists",
                    hint="remove this file or secure it before sharing the repository",
                    detail="git tracking status could not be verified",
                    file_path=discovered.relative_path,
                ))
        return issues
