"""Supabase provider - migration hygiene, service-role exposure and env keys."""

import re
from typing import TYPE_CHECKING, List, Set, Tuple

from ..core.scanner import Category, Issue, Severity
from ..errors import CheckFailure
from ..utils.fs import is_likely_binary, line_number, relative_path
from .base import DetectionResult, Provider

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

SERVICE_ROLE_RE = re.compile(
    r"\b(service_role|SUPABASE_SERVICE_ROLE_KEY|SUPABASE_SERVICE_ROLE)\b",
    re.IGNORECASE,
)

# Directories that usually end up in client bundles
CLIENT_ROOTS = ("src", "app", "pages")

REQUIRED_SUPABASE_KEYS = ("SUPABASE_URL", "SUPABASE_ANON_KEY")


class SupabaseProvider(Provider):
    """Checks for Supabase projects."""

    name = "supabase"
    category = Category.SUPABASE

    def probe(self, ctx: "RepoContext") -> DetectionResult:
        if (ctx.repo_root / "supabase" / "config.toml").exists():
            return DetectionResult.found("supabase/config.toml")
        if ctx.has_supabase_dir:
            return DetectionResult.found("supabase/ directory")
        if ctx.package_json_contains("@supabase/supabase-js"):
            return DetectionResult.found("@supabase/supabase-js in package.json")
        return DetectionResult.not_found()

    async def run_checks(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        settings = config.providers.supabase
        issues: List[Issue] = []

        if settings.require_migrations:
            issues.extend(self._check_migrations(ctx, settings.migrations_dir))

        if settings.forbid_service_role_in_client:
            issues.extend(self._scan_client_for_service_role(ctx, config))

        for key in REQUIRED_SUPABASE_KEYS:
            if key in config.env.required and not ctx.has_env_key(key):
                issues.append(Issue(
                    severity=Severity.WARNING,
                    category=self.category,
                    title=f"missing required Supabase env var {key}",
                    hint=f"add {key} to local env files and CI",
                    detail="provider check expected this key because it is listed in env.required",
                ))

        return issues

    def _check_migrations(self, ctx: "RepoContext", migrations_dir: str) -> List[Issue]:
        path = ctx.repo_root / migrations_dir
        if not path.is_dir():
            return [Issue(
                severity=Severity.WARNING,
                category=self.category,
                title="missing migrations directory",
                hint=f"create {migrations_dir} and commit SQL migration files",
                detail="this helps keep schema changes reproducible",
            )]

        has_sql_file = any(
            p.is_file() and p.suffix.lower() == ".sql" for p in path.rglob("*")
        )
        if has_sql_file:
            return []
        return [Issue(
            severity=Severity.WARNING,
            category=self.category,
            title="no SQL migration files found",
            hint="add at least one .sql migration file",
            file_path=relative_path(ctx.repo_root, path),
        )]

    def _scan_client_for_service_role(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        """Report each file:line in client code that references the service role."""
        issues = []
        seen: Set[Tuple[str, int]] = set()
        client_prefixes = tuple(f"{root}/" for root in CLIENT_ROOTS)

        for discovered in ctx.discovery.files_within(config.scan.max_file_size_bytes):
            if not discovered.relative_path.startswith(client_prefixes):
                continue

            try:
                data = discovered.path.read_bytes()
            except OSError as e:
                raise CheckFailure(f"cannot read {discovered.relative_path}: {e}") from e
            if is_likely_binary(data):
                continue

            content = data.decode("utf-8", errors="replace")
            for match in SERVICE_ROLE_RE.finditer(content):
                line = line_number(content, match.start())
                key = (discovered.relative_path, line)
                if key in seen:
                    continue
                seen.add(key)
                issues.append(Issue(
                    severity=Severity.CRITICAL,
                    category=self.category,
                    title="service role reference found in client code",
                    hint="remove service role access from client bundles and use a secure backend endpoint",
                    file_path=discovered.relative_path,
                    line_number=line,
                ))

        return issues
