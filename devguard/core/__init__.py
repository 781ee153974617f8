"""Core modules for devguard: issue model, scanning, scoring and policy.

The run driver lives in ``devguard.core.runner`` and is imported from there
directly, since it depends on the check and provider packages.
"""

from .aggregator import aggregate, sort_for_display
from .file_discovery import FileDiscovery
from .parallel_executor import ParallelExecutor
from .policy import Disposition, evaluate_policy
from .scanner import BaseCheck, Category, Issue, Severity
from .scorer import Counts, Scorer, ScoreResult, ScoringWeights

__all__ = [
    "aggregate",
    "sort_for_display",
    "FileDiscovery",
    "ParallelExecutor",
    "Disposition",
    "evaluate_policy",
    "BaseCheck",
    "Category",
    "Issue",
    "Severity",
    "Counts",
    "Scorer",
    "ScoreResult",
    "ScoringWeights",
]
