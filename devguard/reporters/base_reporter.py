"""Base Reporter Module - Abstract base class for report renderers."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from rich.console import Console

if TYPE_CHECKING:
    from ..core.runner import RunReport


class BaseReporter(ABC):
    """Abstract base class for report renderers."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the reporter.

        Args:
            console: Console the report is written to (default: stdout)
        """
        self.console = console or Console()

    @abstractmethod
    def render(self, report: "RunReport") -> str:
        """Render the report as plain text.

        Args:
            report: Result of a run

        Returns:
            Report content
        """
        pass

    def emit(self, report: "RunReport") -> None:
        """Write the rendered report to the console."""
        self.console.print(
            self.render(report), markup=False, highlight=False, emoji=False, soft_wrap=True
        )
