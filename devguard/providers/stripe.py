"""Stripe provider - live/test key placement in dotenv files."""

from typing import TYPE_CHECKING, List, Set

from ..checks.secrets import STRIPE_LIVE_RE, STRIPE_TEST_RE
from ..core.scanner import Category, Issue, Severity
from .base import DetectionResult, Provider

if TYPE_CHECKING:
    from ..config import Config
    from ..core.context import RepoContext

STRIPE_ENV_KEYS = ("STRIPE_SECRET_KEY", "STRIPE_PUBLISHABLE_KEY")


class StripeProvider(Provider):
    """Checks for Stripe integrations."""

    name = "stripe"
    category = Category.STRIPE

    def probe(self, ctx: "RepoContext") -> DetectionResult:
        if ctx.package_json_contains('"stripe"'):
            return DetectionResult.found("stripe in package.json")
        for key in STRIPE_ENV_KEYS:
            if ctx.has_env_key(key):
                return DetectionResult.found(f"{key} in environment")
        return DetectionResult.not_found()

    async def run_checks(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        warn_live_keys = config.providers.stripe.warn_live_keys
        issues: List[Issue] = []
        live_files: Set[str] = set()
        test_files: Set[str] = set()

        for variable in ctx.dotenv_vars:
            if STRIPE_LIVE_RE.search(variable.value):
                live_files.add(variable.file)
                if warn_live_keys:
                    issues.append(Issue(
                        severity=Severity.CRITICAL,
                        category=self.category,
                        title="live Stripe key found in dotenv file",
                        hint="move live keys to deployment secrets and rotate exposed values",
                        file_path=variable.file,
                        line_number=variable.line,
                    ))

            if STRIPE_TEST_RE.search(variable.value):
                test_files.add(variable.file)
                issues.append(Issue(
                    severity=Severity.WARNING,
                    category=self.category,
                    title="test Stripe key found in dotenv file",
                    hint="keep test keys in local-only env files and out of source control",
                    file_path=variable.file,
                    line_number=variable.line,
                ))

        if live_files and test_files:
            issues.append(Issue(
                severity=Severity.WARNING,
                category=self.category,
                title="mixed Stripe modes detected",
                hint="separate test and live credentials by environment",
                detail="both sk_live_* and sk_test_* were found across dotenv files",
            ))

        return issues
