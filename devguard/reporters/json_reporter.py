"""JSON Reporter Module - Machine-readable report output."""

import json
from typing import Any, Dict

from ..config import FailOn, GeneralConfig
from ..core.policy import evaluate_policy
from ..core.runner import RunReport
from ..core.scanner import Issue
from ..core.scorer import Counts, ScoreResult
from .base_reporter import BaseReporter


class JSONReporter(BaseReporter):
    """Generate reports in JSON format.

    Issues are written in discovery order. The schema is::

        {
          "score": 72,
          "label": "Fair",
          "counts": {"critical": 0, "warning": 1, "info": 2, "pass": 1, "total": 4},
          "issues": [{"severity", "category", "title", "detail"?, "file"?, "line"?, "hint"}],
          "config": {"fail_on": "warning", "min_score": 80}
        }
    """

    def __init__(self, console=None, indent: int = 2):
        """Initialize the JSON reporter.

        Args:
            console: Console the report is written to
            indent: JSON indentation level
        """
        super().__init__(console)
        self.indent = indent

    def render(self, report: RunReport) -> str:
        return json.dumps(report.to_dict(), indent=self.indent, ensure_ascii=False)


def parse_json_report(text: str) -> RunReport:
    """Read a JSON report back into a RunReport.

    The disposition is not part of the schema; it is re-evaluated from the
    score, issues and policy settings, which gives the same verdict.

    Args:
        text: JSON produced by JSONReporter

    Returns:
        RunReport equal to the one that was rendered

    Raises:
        ValueError: If the document does not match the report schema
    """
    try:
        data: Dict[str, Any] = json.loads(text)
        score = ScoreResult(
            score=data["score"],
            label=data["label"],
            counts=Counts.from_dict(data["counts"]),
        )
        issues = tuple(Issue.from_dict(item) for item in data["issues"])
        fail_on = FailOn(data["config"]["fail_on"])
        min_score = data["config"]["min_score"]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"invalid devguard report: {e}") from e

    general = GeneralConfig(fail_on=fail_on, min_score=min_score)
    return RunReport(
        score=score,
        issues=issues,
        fail_on=fail_on,
        min_score=min_score,
        disposition=evaluate_policy(score, issues, general),
    )
