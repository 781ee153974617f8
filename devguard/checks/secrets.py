"""Secrets Check - Detects committed credentials without external tools."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Set, Tuple

from ..core.file_discovery import DiscoveredFile
from ..core.parallel_executor import ParallelExecutor
from ..core.scanner import BaseCheck, Category, Issue, Severity
from ..utils.fs import is_likely_binary, line_number

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

logger = logging.getLogger(__name__)


class SecretKind(Enum):
    """Kinds of secrets the check recognizes."""
    STRIPE_LIVE = "stripe-live"
    STRIPE_TEST = "stripe-test"
    AWS_ACCESS_KEY = "aws-access-key"
    PRIVATE_KEY_BLOCK = "private-key"
    VERCEL_TOKEN = "vercel-token"
    SUPABASE_JWT = "supabase-jwt"


STRIPE_LIVE_RE = re.compile(r"sk_live_[0-9A-Za-z]{16,}")
STRIPE_TEST_RE = re.compile(r"sk_test_[0-9A-Za-z]{16,}")
AWS_ACCESS_KEY_RE = re.compile(r"\bAKIA[0-9A-Z]{16}\b")
PRIVATE_KEY_RE = re.compile(r"-----BEGIN (?:(?:RSA|EC|DSA|OPENSSH) )?PRIVATE KEY-----")
VERCEL_ASSIGNMENT_RE = re.compile(r"\bvercel_token\b\s*[:=]\s*[\"']?[A-Za-z0-9._-]{10,}", re.IGNORECASE)
VERCEL_TOKEN_RE = re.compile(r"\bv1\.[A-Za-z0-9._-]{20,}\b")
VERCEL_MARKER_RE = re.compile(r"\bvercel[_-]?token\b", re.IGNORECASE)
JWT_RE = re.compile(r"\beyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\b")

SUPABASE_KEY_WORDS = ("anon", "service", "jwt", "key", "token", "url", "secret")
SERVICE_ROLE_MARKERS = ("service_role", "supabase_service_role_key", "supabase_service_role")


@dataclass(frozen=True)
class SecretHit:
    """A single pattern match inside a file."""
    kind: SecretKind
    line: int
    value: str


def _is_supabase_keyish_line(line: str) -> bool:
    # strip JWT bodies first so payload bytes cannot supply a keyword
    lowered = JWT_RE.sub(" ", line).lower()
    if "supabase" not in lowered:
        return False
    return any(word in lowered for word in SUPABASE_KEY_WORDS)


def scan_text(content: str) -> List[SecretHit]:
    """Find secret-looking values in text.

    Each (kind, line) pair is reported once. Vercel ``v1.`` tokens count
    only when the text mentions a vercel token; JWTs count only on a
    Supabase key-ish line.

    Args:
        content: File content

    Returns:
        Hits ordered by line, then by pattern order
    """
    hits: List[Tuple[int, int, SecretHit]] = []
    seen: Set[Tuple[SecretKind, int]] = set()

    def add(order: int, kind: SecretKind, match: re.Match) -> None:
        line = line_number(content, match.start())
        if (kind, line) in seen:
            return
        seen.add((kind, line))
        hits.append((line, order, SecretHit(kind=kind, line=line, value=match.group(0))))

    patterns = [
        (STRIPE_LIVE_RE, SecretKind.STRIPE_LIVE),
        (STRIPE_TEST_RE, SecretKind.STRIPE_TEST),
        (AWS_ACCESS_KEY_RE, SecretKind.AWS_ACCESS_KEY),
        (PRIVATE_KEY_RE, SecretKind.PRIVATE_KEY_BLOCK),
        (VERCEL_ASSIGNMENT_RE, SecretKind.VERCEL_TOKEN),
    ]
    for order, (pattern, kind) in enumerate(patterns):
        for match in pattern.finditer(content):
            add(order, kind, match)

    if VERCEL_MARKER_RE.search(content):
        for match in VERCEL_TOKEN_RE.finditer(content):
            add(len(patterns), SecretKind.VERCEL_TOKEN, match)

    if "supabase" in content.lower():
        lines = content.split("\n")
        for match in JWT_RE.finditer(content):
            line = line_number(content, match.start())
            if _is_supabase_keyish_line(lines[line - 1]):
                add(len(patterns) + 1, SecretKind.SUPABASE_JWT, match)

    hits.sort(key=lambda entry: (entry[0], entry[1]))
    return [hit for _, _, hit in hits]


def mask_secret(value: str) -> str:
    """Mask a secret for display, keeping a short prefix and suffix."""
    if len(value) > 12:
        return value[:6] + "*" * (len(value) - 10) + value[-4:]
    return "*" * len(value)


class SecretsCheck(BaseCheck):
    """Built-in secret check over every discovered text file.

    Detects:
    - Stripe live and test secret keys
    - AWS access key IDs
    - Private key blocks
    - Vercel tokens
    - Supabase JWTs on key-like lines
    """

    def __init__(self):
        """Initialize the secrets check."""
        super().__init__(name="secrets", category=Category.SECRETS)

    async def run(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        """Scan discovered files for secrets.

        Args:
            ctx: Repository context
            config: Resolved configuration

        Returns:
            Issues ordered by file path, then line
        """
        files = ctx.discovery.files_within(config.scan.max_file_size_bytes)
        executor = ParallelExecutor(max_concurrent=config.scan.max_workers)

        def scan_one(discovered: DiscoveredFile) -> List[Issue]:
            return self._scan_file(discovered, config)

        if config.scan.parallel:
            execution = await executor.execute(files, scan_one)
        else:
            execution = executor.execute_sequential(files, scan_one)

        for index, error in sorted(execution.errors.items()):
            logger.debug("skipped %s: %s", files[index].relative_path, error)

        issues: List[Issue] = []
        for file_issues in execution.results:
            if file_issues:
                issues.extend(file_issues)

        logger.debug(
            "secrets: scanned %d files in %dms, %d hits",
            len(files), execution.total_duration_ms, len(issues),
        )
        return issues

    def _scan_file(self, discovered: DiscoveredFile, config: "Config") -> List[Issue]:
        """Scan a single file for secrets.

        Args:
            discovered: File to scan
            config: Resolved configuration

        Returns:
            List of issues found
        """
        data = discovered.path.read_bytes()
        if is_likely_binary(data):
            return []

        content = data.decode("utf-8", errors="replace")
        lowered = content.lower()
        service_role_file = any(marker in lowered for marker in SERVICE_ROLE_MARKERS)

        return [
            self._create_secret_issue(hit, discovered.relative_path, service_role_file, config)
            for hit in scan_text(content)
        ]

    def _create_secret_issue(
        self,
        hit: SecretHit,
        relative_file: str,
        service_role_file: bool,
        config: "Config",
    ) -> Issue:
        """Create an issue for a detected secret.

        Args:
            hit: Pattern match
            relative_file: File path relative to the repository root
            service_role_file: Whether the file mentions the Supabase service role
            config: Resolved configuration

        Returns:
            Issue object
        """
        kind = hit.kind
        if kind is SecretKind.STRIPE_LIVE:
            stripe = config.providers.stripe
            severity = Severity.CRITICAL if stripe.enabled and stripe.warn_live_keys else Severity.WARNING
            title = "Stripe live key pattern detected"
            hint = "rotate the key and move it to a secret manager or deployment env"
        elif kind is SecretKind.STRIPE_TEST:
            severity = Severity.WARNING
            title = "Stripe test key pattern detected"
            hint = "keep test keys in local env files and out of tracked files"
        elif kind is SecretKind.VERCEL_TOKEN:
            severity = Severity.WARNING
            title = "Vercel token-like value detected"
            hint = "prefer Vercel dashboard env configuration instead of committed tokens"
        elif kind is SecretKind.AWS_ACCESS_KEY:
            severity = Severity.CRITICAL
            title = "AWS access key pattern detected"
            hint = "revoke and rotate the key, then remove it from git history"
        elif kind is SecretKind.PRIVATE_KEY_BLOCK:
            severity = Severity.CRITICAL
            title = "Private key block detected"
            hint = "remove private key material from source and rotate credentials"
        else:
            severity = Severity.CRITICAL if service_role_file else Severity.WARNING
            title = "Supabase JWT-like key detected"
            hint = "store Supabase JWT secrets in server-side env only"

        issue = Issue(
            severity=severity,
            category=self.category,
            title=title,
            hint=hint,
            file_path=relative_file,
            line_number=hit.line,
        )
        if kind is not SecretKind.PRIVATE_KEY_BLOCK:
            issue = issue.with_detail(f"value (masked): {mask_secret(hit.value)}")
        return issue
