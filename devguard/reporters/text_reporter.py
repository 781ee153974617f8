"""Text Reporter Module - Human-readable terminal output."""

from typing import List

from rich.text import Text

from ..core.aggregator import sort_for_display
from ..core.runner import RunReport
from ..core.scanner import Issue, Severity
from .base_reporter import BaseReporter

# Severities shown in the grouped listing; Pass issues only count toward totals
DISPLAYED_SEVERITIES = (Severity.CRITICAL, Severity.WARNING, Severity.INFO)


def get_score_color(score: int) -> str:
    """Get color for score value."""
    if score >= 90:
        return "green"
    elif score >= 75:
        return "green"
    elif score >= 50:
        return "yellow"
    else:
        return "red"


class TextReporter(BaseReporter):
    """Generate the grouped, colorized report for terminals."""

    def render(self, report: RunReport) -> str:
        return "\n".join(line.plain for line in self.build_lines(report))

    def emit(self, report: RunReport) -> None:
        for line in self.build_lines(report):
            self.console.print(line, soft_wrap=True)

    def build_lines(self, report: RunReport) -> List[Text]:
        """Build the report as styled lines.

        Layout: score header, then Critical/Warning/Info groups with hints
        and details, then the exit summary.
        """
        score = report.score
        lines = [
            Text.assemble(
                ("Repo Health Score: ", "bold"),
                (f"{score.score}/100", f"bold {get_score_color(score.score)}"),
                f" ({score.label})",
            ),
            Text(
                f"issues: {score.counts.critical} critical, {score.counts.warning} warning, "
                f"{score.counts.info} info, {score.counts.passed} pass",
                style="dim",
            ),
        ]

        ordered = sort_for_display(report.issues)
        for severity in DISPLAYED_SEVERITIES:
            group = [issue for issue in ordered if issue.severity is severity]
            if not group:
                continue
            lines.append(Text(""))
            lines.append(Text(f"{severity.value} ({len(group)})", style=f"bold {severity.color}"))
            for issue in group:
                lines.extend(self._issue_lines(issue))

        lines.append(Text(""))
        if report.passed:
            lines.append(Text("exit: OK", style="bold green"))
        else:
            lines.append(Text(f"exit: FAILED ({report.disposition.reason})", style="bold red"))
        return lines

    def _issue_lines(self, issue: Issue) -> List[Text]:
        headline = Text.assemble(
            (f"[{issue.severity.label}]", f"bold {issue.severity.color}"),
            f" ({issue.category.value}) {issue.title}",
        )
        if issue.file_path is not None:
            location = issue.file_path
            if issue.line_number is not None:
                location = f"{location}:{issue.line_number}"
            headline.append(f" - {location}", style="cyan")

        lines = [headline, Text(f"  -> hint: {issue.hint}")]
        if issue.detail:
            lines.append(Text(f"  details: {issue.detail}", style="dim"))
        return lines
