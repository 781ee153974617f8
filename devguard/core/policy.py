"""Policy Module - Turns a score and issue set into a pass/fail verdict."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..config import FailOn, GeneralConfig
from .scanner import Issue, Severity
from .scorer import ScoreResult

# Lowest severity that trips each fail_on setting
FAIL_ON_THRESHOLDS = {
    FailOn.WARNING: Severity.WARNING,
    FailOn.ERROR: Severity.CRITICAL,
    FailOn.NONE: None,
}


def fail_on_threshold(fail_on: FailOn) -> Optional[Severity]:
    return FAIL_ON_THRESHOLDS[fail_on]


def meets_fail_on(severity: Severity, fail_on: FailOn) -> bool:
    """Check whether an issue of this severity fails the policy."""
    threshold = fail_on_threshold(fail_on)
    return threshold is not None and severity >= threshold


@dataclass(frozen=True)
class Disposition:
    """Final policy verdict driving the exit status."""
    passed: bool
    reasons: Tuple[str, ...] = ()

    @property
    def reason(self) -> str:
        if self.passed:
            return "policy passed"
        return "; ".join(self.reasons)


def evaluate_policy(
    score: ScoreResult,
    issues: Iterable[Issue],
    general: GeneralConfig,
) -> Disposition:
    """Evaluate min_score and fail_on against a run's results.

    Args:
        score: Computed score
        issues: Aggregated issues
        general: Policy settings

    Returns:
        Disposition that passes only if both conditions hold
    """
    reasons = []

    if score.score < general.min_score:
        reasons.append(f"score {score.score} is below min_score {general.min_score}")

    qualifying = [i for i in issues if meets_fail_on(i.severity, general.fail_on)]
    if qualifying:
        if general.fail_on is FailOn.WARNING:
            reasons.append(f"found warning-or-higher issues ({len(qualifying)})")
        else:
            reasons.append(f"found critical issues ({len(qualifying)})")

    return Disposition(passed=not reasons, reasons=tuple(reasons))
