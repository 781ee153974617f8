"""Base Check Module - Defines the issue model and base class for check modules."""

import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from ..config import Config
    from .context import RepoContext


@functools.total_ordering
class Severity(Enum):
    """Severity levels for issues, ordered Critical > Warning > Info > Pass."""
    CRITICAL = "Critical"
    WARNING = "Warning"
    INFO = "Info"
    PASS = "Pass"

    @property
    def rank(self) -> int:
        """Get numeric rank for severity (higher is more severe)."""
        ranks = {
            Severity.CRITICAL: 3,
            Severity.WARNING: 2,
            Severity.INFO: 1,
            Severity.PASS: 0,
        }
        return ranks[self]

    @property
    def label(self) -> str:
        """Get the upper-case label used in text output."""
        return self.value.upper()

    @property
    def color(self) -> str:
        """Get color for severity."""
        colors = {
            Severity.CRITICAL: "red",
            Severity.WARNING: "yellow",
            Severity.INFO: "blue",
            Severity.PASS: "green",
        }
        return colors[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


class Category(Enum):
    """Categories of issues, one per check module or provider."""
    SECRETS = "Secrets"
    ENV = "Env"
    GIT = "Git"
    SUPABASE = "Supabase"
    VERCEL = "Vercel"
    STRIPE = "Stripe"


@dataclass(frozen=True)
class Issue:
    """Represents a single finding from a check module or provider."""
    severity: Severity
    category: Category
    title: str
    hint: str
    detail: Optional[str] = None
    file_path: Optional[str] = None
    line_number: Optional[int] = None

    @property
    def location(self) -> Optional[Tuple[str, Optional[int]]]:
        """Get (path, line) if the issue points at a file."""
        if self.file_path is None:
            return None
        return (self.file_path, self.line_number)

    def with_detail(self, detail: str) -> "Issue":
        return replace(self, detail=detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert issue to dictionary, omitting empty optional fields."""
        data: Dict[str, Any] = {
            "severity": self.severity.value,
            "category": self.category.value,
            "title": self.title,
        }
        if self.detail is not None:
            data["detail"] = self.detail
        if self.file_path is not None:
            data["file"] = self.file_path
        if self.line_number is not None:
            data["line"] = self.line_number
        data["hint"] = self.hint
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        """Create issue from dictionary."""
        return cls(
            severity=Severity(data["severity"]),
            category=Category(data["category"]),
            title=data["title"],
            hint=data["hint"],
            detail=data.get("detail"),
            file_path=data.get("file"),
            line_number=data.get("line"),
        )


def failure_issue(category: Category, source: str, error: BaseException) -> Issue:
    """Build the Warning issue that stands in for a failed check or provider.

    Args:
        category: Category of the failing module
        source: Name of the failing module
        error: The exception that was raised

    Returns:
        Warning issue describing the failure
    """
    return Issue(
        severity=Severity.WARNING,
        category=category,
        title=f"{source} check failed",
        hint="re-run with --verbose for details; remaining checks were not affected",
        detail=f"{type(error).__name__}: {error}",
    )


class BaseCheck(ABC):
    """Abstract base class for core check modules.

    Core checks are not gated by enable/detect; they always run and are
    parameterized only by the config.
    """

    def __init__(self, name: str, category: Category):
        """Initialize the check.

        Args:
            name: Name of the check module
            category: Category assigned to the issues it produces
        """
        self.name = name
        self.category = category

    @abstractmethod
    async def run(self, ctx: "RepoContext", config: "Config") -> List[Issue]:
        """Run the check against a repository.

        Args:
            ctx: Repository context built by the scanner
            config: Resolved configuration

        Returns:
            Issues found, in discovery order
        """
        pass
