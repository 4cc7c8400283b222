from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from ai_change_reviewer.app.config import ReviewSettingsStore
from ai_change_reviewer.domains.diff.builder import ChangeDiffBuilder
from ai_change_reviewer.domains.diff.models import ChangedFile
from ai_change_reviewer.domains.report.generator import ReviewReportGenerator
from ai_change_reviewer.domains.review.models import ReviewRequest, ReviewSuccess
from ai_change_reviewer.domains.review.orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No changes found in the current changelist."
UNEXPECTED_ERROR_PREFIX = "An unexpected error occurred during the review: "

ProgressCallback = Callable[[str, float], None]


@dataclass(frozen=True)
class ReviewOutcome:
    success: bool
    message: str
    summary: str | None = None
    review: str | None = None
    report_path: Path | None = None
    html_report_path: Path | None = None


def _ignore_progress(text: str, fraction: float) -> None:
    return None


class CodeReviewAction:
    """Runs one review end to end: diff, AI call, markdown and HTML reports."""

    def __init__(
        self,
        *,
        diff_builder: ChangeDiffBuilder,
        orchestrator: ReviewOrchestrator,
        report_generator: ReviewReportGenerator,
        settings_store: ReviewSettingsStore,
        report_dir: str | os.PathLike[str],
    ) -> None:
        self._diff_builder = diff_builder
        self._orchestrator = orchestrator
        self._report_generator = report_generator
        self._settings_store = settings_store
        self._report_dir = report_dir

    def run(
        self,
        changes: Sequence[ChangedFile],
        *,
        commit_message: str | None = None,
        repository_info: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> ReviewOutcome:
        report_progress = progress or _ignore_progress

        if not changes:
            logger.info("No changes found in current changelist")
            return ReviewOutcome(success=False, message=NO_CHANGES_MESSAGE)

        config = self._settings_store.snapshot()

        report_progress("Analyzing code changes...", 0.1)
        diff_payload = self._diff_builder.build(changes)

        report_progress("Preparing review request...", 0.3)
        request = ReviewRequest.from_diff(diff_payload, commit_message)

        report_progress("Calling AI service...", 0.5)
        result = self._orchestrator.submit(request, config).result()

        if not isinstance(result, ReviewSuccess):
            logger.warning("AI review failed: %s", result.error_message)
            return ReviewOutcome(
                success=False,
                message=f"Failed to generate AI review: {result.error_message}",
                summary=diff_payload.summary,
            )

        report_progress("Generating report...", 0.8)
        try:
            report = self._report_generator.generate_report(
                ai_review=result.review_text,
                diff_payload=diff_payload,
                commit_message=commit_message,
                repository_info=repository_info,
            )

            report_progress("Saving report...", 0.9)
            report_path = self._report_generator.save_report(report, self._report_dir)
            html_report_path = self._report_generator.save_html_report(report, self._report_dir)
        except OSError as exc:
            logger.exception("Error saving review report to %s", self._report_dir)
            return ReviewOutcome(
                success=False,
                message=f"{UNEXPECTED_ERROR_PREFIX}{exc}",
                summary=diff_payload.summary,
                review=result.review_text,
            )

        report_progress("Done", 1.0)
        return ReviewOutcome(
            success=True,
            message="AI code review completed successfully!",
            summary=report.summary,
            review=result.review_text,
            report_path=report_path,
            html_report_path=html_report_path,
        )
