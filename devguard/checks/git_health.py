"""Git Health Check - Working tree state, HEAD and large files."""

from typing import TYPE_CHECKING, List

from ..core.scanner import BaseCheck, Category, Issue, Severity
from ..errors import GitError

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

LARGE_FILE_THRESHOLD = 5 * 1024 * 1024


class GitHealthCheck(BaseCheck):
    """Repository hygiene checks.

    Git command failures are reported as Info issues rather than failing
    the check, so one unreadable status does not hide the HEAD or large-file
    results.
    """

    def __init__(self, large_file_threshold: int = LARGE_FILE_THRESHOLD):
        super().__init__(name="git", category=Category.GIT)
        self.large_file_threshold = large_file_threshold

    async def run(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        repo = ctx.git_repo
        if repo is None:
            return [Issue(
                severity=Severity.INFO,
                category=self.category,
                title="not a git repo",
                hint="initialize git to enable repository hygiene checks",
            )]

        issues: List[Issue] = []

        try:
            dirty = repo.is_dirty()
        except GitError as e:
            issues.append(Issue(
                severity=Severity.INFO,
                category=self.category,
                title="unable to read git status",
                hint="run `git status` manually to inspect repository state",
                detail=str(e),
            ))
        else:
            if dirty:
                issues.append(Issue(
                    severity=Severity.INFO,
                    category=self.category,
                    title="working tree has changes",
                    hint="commit or stash changes before running release checks",
                    detail="modified or untracked files were detected",
                ))
            else:
                issues.append(Issue(
                    severity=Severity.PASS,
                    category=self.category,
                    title="working tree is clean",
                    hint="no action needed",
                ))

        try:
            branch = repo.current_branch()
        except GitError as e:
            issues.append(Issue(
                severity=Severity.INFO,
                category=self.category,
                title="unable to resolve HEAD",
                hint="run `git rev-parse --abbrev-ref HEAD` manually",
                detail=str(e),
            ))
        else:
            if branch is None:
                issues.append(Issue(
                    severity=Severity.WARNING,
                    category=self.category,
                    title="detached HEAD state",
                    hint="check out a branch before regular development or release work",
                ))
            else:
                issues.append(Issue(
                    severity=Severity.PASS,
                    category=self.category,
                    title=f"current branch: {branch}",
                    hint="no action needed",
                    detail="head points to a named branch",
                ))

        for discovered in ctx.discovery.files_larger_than(self.large_file_threshold):
            issues.append(Issue(
                severity=Severity.WARNING,
                category=self.category,
                title="large file detected (>5MB)",
                hint="consider git-lfs or artifact storage for large files",
                detail=f"size: {discovered.size / (1024 * 1024):.2f} MB",
                file_path=discovered.relative_path,
            ))

        return issues
