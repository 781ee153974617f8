"""Runner Module - Drives a run from repository scan to policy verdict."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple

from ..checks import EnvCheck, GitHealthCheck, SecretsCheck
from ..config import Config, FailOn
from ..providers import Provider, all_providers
from .aggregator import aggregate
from .context import RepoContext
from .policy import Disposition, evaluate_policy
from .scanner import BaseCheck, Category, Issue, Severity, failure_issue
from .scorer import ScoreResult, ScoringWeights, Scorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunProfile:
    """Which check modules and providers a command runs."""
    name: str
    checks: Tuple[str, ...]
    providers: Tuple[str, ...] = ()


FULL = RunProfile("check", ("secrets", "env", "git"), ("supabase", "vercel", "stripe"))
SECRETS_ONLY = RunProfile("scan secrets", ("secrets",))
ENV_ONLY = RunProfile("env validate", ("env",))
GIT_ONLY = RunProfile("git health", ("git",))
SUPABASE_VERIFY = RunProfile("supabase verify", ("secrets", "env"), ("supabase",))


@dataclass(frozen=True)
class RunReport:
    """Everything a reporter needs to render one run."""
    score: ScoreResult
    issues: Tuple[Issue, ...]
    fail_on: FailOn
    min_score: int
    disposition: Disposition

    @property
    def passed(self) -> bool:
        return self.disposition.passed

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON report structure."""
        data = self.score.to_dict()
        data["issues"] = [issue.to_dict() for issue in self.issues]
        data["config"] = {
            "fail_on": self.fail_on.value,
            "min_score": self.min_score,
        }
        return data


def default_checks() -> List[BaseCheck]:
    return [SecretsCheck(), EnvCheck(), GitHealthCheck()]


async def run_guarded(source: str, category: Category, work: Awaitable[List[Issue]]) -> List[Issue]:
    """Await a check or provider, converting any failure into one Warning issue."""
    try:
        issues = list(await work)
    except Exception as e:
        logger.warning("%s failed: %s", source, e)
        logger.debug("%s traceback", source, exc_info=True)
        return [failure_issue(category, source, e)]
    logger.debug("%s produced %d issues", source, len(issues))
    return issues


async def dispatch_provider(
    provider: Provider,
    ctx: RepoContext,
    config: Config,
    force: bool = False,
) -> List[Issue]:
    """Apply the enable/detect/force gate to one provider.

    Args:
        provider: Provider to dispatch
        ctx: Repository context
        config: Resolved configuration
        force: Run checks even when the provider is not detected

    Returns:
        The provider's issues, a single Info when it is skipped, or a single
        Warning when it fails
    """
    async def gated() -> List[Issue]:
        if not provider.is_enabled(config):
            logger.debug("%s disabled", provider.name)
            return [Issue(
                severity=Severity.INFO,
                category=provider.category,
                title=f"{provider.name} disabled; enable to run checks",
                hint=f"set providers.{provider.name}.enabled = true in devguard.toml",
            )]

        detection = provider.detect(ctx)
        if not detection.detected and not force:
            logger.debug("%s not detected", provider.name)
            return [Issue(
                severity=Severity.INFO,
                category=provider.category,
                title=f"{provider.name} enabled but not detected",
                hint=f"use --force to run {provider.name} checks anyway",
            )]

        logger.debug(
            "running %s checks (detected=%s, evidence=%s, force=%s)",
            provider.name, detection.detected, detection.evidence, force,
        )
        return await provider.run_checks(ctx, config)

    return await run_guarded(provider.name, provider.category, gated())


def build_report(issue_groups: Sequence[Sequence[Issue]], config: Config) -> RunReport:
    """Aggregate, score and evaluate policy for already-collected issues."""
    issues = aggregate(issue_groups)
    score = Scorer(ScoringWeights.from_config(config.scoring)).score(issues)
    disposition = evaluate_policy(score, issues, config.general)
    return RunReport(
        score=score,
        issues=issues,
        fail_on=config.general.fail_on,
        min_score=config.general.min_score,
        disposition=disposition,
    )


async def run_checks(
    repo_root: str | Path,
    config: Config,
    profile: RunProfile = FULL,
    force: bool = False,
    checks: Optional[Sequence[BaseCheck]] = None,
    providers: Optional[Sequence[Provider]] = None,
) -> RunReport:
    """Run a profile against a repository.

    Args:
        repo_root: Repository directory
        config: Resolved configuration
        profile: Checks and providers to run
        force: Run provider checks even when not detected
        checks: Check modules to choose from (defaults to the built-in set)
        providers: Providers to choose from (defaults to all providers)

    Returns:
        RunReport with score, issues and policy disposition

    Raises:
        ScanError: If the repository root cannot be scanned
    """
    ctx = RepoContext.build(repo_root, config)
    for error in [*ctx.read_errors, *ctx.discovery.errors]:
        logger.warning("%s", error)
    checks = default_checks() if checks is None else checks
    providers = all_providers() if providers is None else providers

    groups: List[List[Issue]] = []
    for check in checks:
        if check.name in profile.checks:
            groups.append(await run_guarded(check.name, check.category, check.run(ctx, config)))

    for provider in providers:
        if provider.name in profile.providers:
            groups.append(await dispatch_provider(provider, ctx, config, force=force))

    report = build_report(groups, config)
    logger.debug(
        "%s finished: score %d (%s), %d issues, %s",
        profile.name, report.score.score, report.score.label,
        len(report.issues), report.disposition.reason,
    )
    return report
