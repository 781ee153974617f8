"""Scorer Module - Reduces aggregated issues to a health score."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from .scanner import Issue, Severity


@dataclass(frozen=True)
class Counts:
    """Issue tally per severity."""
    critical: int = 0
    warning: int = 0
    info: int = 0
    passed: int = 0
    total: int = 0

    @classmethod
    def from_issues(cls, issues: Iterable[Issue]) -> "Counts":
        tally = {severity: 0 for severity in Severity}
        total = 0
        for issue in issues:
            tally[issue.severity] += 1
            total += 1
        return cls(
            critical=tally[Severity.CRITICAL],
            warning=tally[Severity.WARNING],
            info=tally[Severity.INFO],
            passed=tally[Severity.PASS],
            total=total,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "critical": self.critical,
            "warning": self.warning,
            "info": self.info,
            "pass": self.passed,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "Counts":
        return cls(
            critical=data["critical"],
            warning=data["warning"],
            info=data["info"],
            passed=data["pass"],
            total=data["total"],
        )


@dataclass(frozen=True)
class ScoreResult:
    """Health score for a run."""
    score: int  # 0-100
    label: str
    counts: Counts = field(default_factory=Counts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "label": self.label,
            "counts": self.counts.to_dict(),
        }


@dataclass(frozen=True)
class ScoringWeights:
    """Per-severity penalties and label bands.

    Bands are (minimum score, label) pairs, highest first; the last band
    must start at 0 so every score gets a label.
    """
    penalties: Tuple[Tuple[Severity, int], ...] = (
        (Severity.CRITICAL, 30),
        (Severity.WARNING, 15),
        (Severity.INFO, 5),
        (Severity.PASS, 0),
    )
    bands: Tuple[Tuple[int, str], ...] = (
        (90, "Excellent"),
        (75, "Good"),
        (50, "Fair"),
        (0, "Poor"),
    )

    def __post_init__(self):
        penalties = dict(self.penalties)
        if set(penalties) != set(Severity):
            raise ValueError("a penalty is required for every severity")
        ordered = sorted(Severity, reverse=True)
        values = [penalties[s] for s in ordered]
        if values[-1] != 0 or any(a < b for a, b in zip(values, values[1:])):
            raise ValueError(
                "penalties must satisfy critical >= warning >= info >= pass == 0"
            )
        thresholds = [minimum for minimum, _ in self.bands]
        if not thresholds or thresholds[-1] != 0 or thresholds[0] > 100:
            raise ValueError("bands must start at or below 100 and end at 0")
        if any(a <= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("band thresholds must be strictly descending")

    def penalty(self, severity: Severity) -> int:
        return dict(self.penalties)[severity]

    def label_for(self, score: int) -> str:
        for minimum, label in self.bands:
            if score >= minimum:
                return label
        return self.bands[-1][1]

    @classmethod
    def from_config(cls, scoring) -> "ScoringWeights":
        """Build weights from a ``[scoring]`` config section."""
        return cls(
            penalties=(
                (Severity.CRITICAL, scoring.critical),
                (Severity.WARNING, scoring.warning),
                (Severity.INFO, scoring.info),
                (Severity.PASS, 0),
            ),
            bands=(
                (scoring.excellent, "Excellent"),
                (scoring.good, "Good"),
                (scoring.fair, "Fair"),
                (0, "Poor"),
            ),
        )


class Scorer:
    """Calculates the repository health score from aggregated issues."""

    MAX_SCORE = 100

    def __init__(self, weights: Optional[ScoringWeights] = None):
        """Initialize the scorer.

        Args:
            weights: Penalties and label bands (defaults if omitted)
        """
        self.weights = weights or ScoringWeights()

    def score(self, issues: Iterable[Issue]) -> ScoreResult:
        """Calculate the score for a set of issues.

        Starts at 100, subtracts the penalty for each issue's severity and
        clamps the result to [0, 100].

        Args:
            issues: Aggregated issues

        Returns:
            ScoreResult with score, label and severity counts
        """
        issues = list(issues)
        penalty = sum(self.weights.penalty(issue.severity) for issue in issues)
        score = max(0, min(self.MAX_SCORE, self.MAX_SCORE - penalty))

        return ScoreResult(
            score=score,
            label=self.weights.label_for(score),
            counts=Counts.from_issues(issues),
        )


def score_issues(issues: Iterable[Issue], weights: Optional[ScoringWeights] = None) -> ScoreResult:
    """Pure scoring entry point: same issues and weights always give the same result."""
    return Scorer(weights).score(issues)
