from __future__ import annotations

import logging

from flask import Flask

from ai_change_reviewer.app.config import AppSettings, ReviewSettingsStore
from ai_change_reviewer.app.review_action import CodeReviewAction
from ai_change_reviewer.app.routes import register_review_routes
from ai_change_reviewer.domains.diff.builder import ChangeDiffBuilder
from ai_change_reviewer.domains.report.generator import ReviewReportGenerator
from ai_change_reviewer.domains.review.orchestrator import ReviewOrchestrator
from ai_change_reviewer.infra.clients.chat_completions import ChatCompletionsClient


def setup_logging(log_level_name: str) -> None:
    level = getattr(logging, log_level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
        logging.basicConfig(level=level)
        logging.getLogger(__name__).warning(
            "Invalid LOG_LEVEL '%s', defaulting to INFO",
            log_level_name,
        )
        return

    logging.basicConfig(level=level)


def build_review_action(
    settings: AppSettings,
    *,
    client: ChatCompletionsClient | None = None,
) -> tuple[CodeReviewAction, ReviewSettingsStore, ReviewOrchestrator]:
    """Wire the review action. Callers own the returned orchestrator and the client."""
    settings_store = ReviewSettingsStore(settings.review_config())
    orchestrator = ReviewOrchestrator(
        client=client or ChatCompletionsClient(),
        max_workers=settings.worker_concurrency,
    )
    action = CodeReviewAction(
        diff_builder=ChangeDiffBuilder(),
        orchestrator=orchestrator,
        report_generator=ReviewReportGenerator(),
        settings_store=settings_store,
        report_dir=settings.report_dir,
    )
    return action, settings_store, orchestrator


def create_app(settings: AppSettings | None = None) -> Flask:
    settings = settings or AppSettings.from_env()
    setup_logging(settings.log_level)

    action, settings_store, _ = build_review_action(settings)

    app = Flask(__name__)
    register_review_routes(app, action=action, settings_store=settings_store)
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=9655)
