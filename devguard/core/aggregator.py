"""Issue Aggregator Module - Merges issue sequences from checks and providers."""

from typing import Iterable, Sequence, Tuple

from .scanner import Issue


def aggregate(groups: Iterable[Sequence[Issue]]) -> Tuple[Issue, ...]:
    """Concatenate issue sequences in invocation order.

    Every issue is retained, including Pass issues and duplicates.

    Args:
        groups: Issue sequences, one per check module or provider

    Returns:
        Immutable aggregate in discovery order
    """
    return tuple(issue for group in groups for issue in group)


def sort_for_display(issues: Sequence[Issue]) -> Tuple[Issue, ...]:
    """Order issues by severity (most severe first), then discovery order."""
    indexed = sorted(
        enumerate(issues),
        key=lambda pair: (-pair[1].severity.rank, pair[0]),
    )
    return tuple(issue for _, issue in indexed)
