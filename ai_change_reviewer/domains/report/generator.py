from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List

import markdown

from ai_change_reviewer.domains.diff.models import DiffPayload


logger = logging.getLogger(__name__)

REPORT_TITLE = "AI Code Review Report"

_MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]

_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


@dataclass(frozen=True)
class ReviewReport:
    title: str
    summary: str
    content: str
    created_at: datetime


class ReviewReportGenerator:
    """Renders a successful review as a markdown report and persists it.

    Commit message, repository line and review text are copied into the
    report as given. Blank optional values are left out.
    """

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def generate_report(
        self,
        *,
        ai_review: str,
        diff_payload: DiffPayload,
        commit_message: str | None = None,
        repository_info: str | None = None,
    ) -> ReviewReport:
        created_at = self._clock()
        summary = (
            f"{len(diff_payload.modified_files)} files, "
            f"+{diff_payload.lines_added}/-{diff_payload.lines_deleted} lines"
        )

        sections: List[str] = [
            f"# {REPORT_TITLE}",
            "",
            f"**Generated:** {created_at.strftime('%Y-%m-%d %H:%M:%S')}",
        ]
        if repository_info:
            sections.append(f"**{repository_info}**")
        sections.append("")

        if commit_message and commit_message.strip():
            sections.extend(["## Commit Message", "", commit_message, ""])

        sections.extend(["## Changes Overview", "", diff_payload.summary.rstrip(), ""])

        if diff_payload.modified_files:
            sections.extend(["## Modified Files", ""])
            sections.extend(f"- `{path}`" for path in diff_payload.modified_files)
            sections.append("")

        sections.extend(["## AI Review", "", ai_review, ""])

        return ReviewReport(
            title=REPORT_TITLE,
            summary=summary,
            content="\n".join(sections),
            created_at=created_at,
        )

    @staticmethod
    def report_file_name(report: ReviewReport, suffix: str = ".md") -> str:
        return f"ai-code-review-{report.created_at.strftime('%Y%m%d-%H%M%S')}{suffix}"

    @staticmethod
    def render_html(report: ReviewReport) -> str:
        body = markdown.markdown(report.content, extensions=_MARKDOWN_EXTENSIONS)
        return _HTML_TEMPLATE.format(title=report.title, body=body)

    def _write(self, directory: str | os.PathLike[str], file_name: str, text: str) -> Path:
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)

        path = target_dir / file_name
        path.write_text(text, encoding="utf-8")
        logger.info("Saved review report: %s", path)
        return path

    def save_report(self, report: ReviewReport, directory: str | os.PathLike[str]) -> Path:
        return self._write(directory, self.report_file_name(report), report.content)

    def save_html_report(self, report: ReviewReport, directory: str | os.PathLike[str]) -> Path:
        return self._write(directory, self.report_file_name(report, ".html"), self.render_html(report))
