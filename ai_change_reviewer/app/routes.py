from __future__ import annotations

import logging
from typing import Any, List

from flask import Flask, jsonify, request

from ai_change_reviewer.app.config import ReviewSettingsStore
from ai_change_reviewer.app.review_action import CodeReviewAction
from ai_change_reviewer.domains.diff.models import ChangedFile
from ai_change_reviewer.shared.types import ReviewResponseDict


logger = logging.getLogger(__name__)


def _optional_text(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{field_name}' must be a string")
    return value


def _parse_changes(payload: dict[str, Any]) -> List[ChangedFile]:
    raw_changes = payload.get("changes")
    if not isinstance(raw_changes, list):
        raise ValueError("'changes' must be a list")

    changes: List[ChangedFile] = []
    for raw in raw_changes:
        if not isinstance(raw, dict):
            raise ValueError("each change must be an object")
        path = raw.get("path")
        if not isinstance(path, str) or not path.strip():
            raise ValueError("each change needs a non-empty 'path'")
        changes.append(
            ChangedFile(
                path=path,
                before_text=_optional_text(raw.get("before_text"), "before_text"),
                after_text=_optional_text(raw.get("after_text"), "after_text"),
            )
        )
    return changes


def register_review_routes(
    app: Flask,
    *,
    action: CodeReviewAction,
    settings_store: ReviewSettingsStore,
) -> None:
    @app.route("/health", methods=["GET"])
    def health() -> tuple[Any, int]:
        config = settings_store.snapshot()
        return jsonify({"status": "ok", "enabled": config.enabled}), 200

    @app.route("/review", methods=["POST"])
    def review() -> tuple[Any, int]:
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"status": "error", "error": "Request body must be a JSON object"}), 400

        try:
            changes = _parse_changes(payload)
            commit_message = _optional_text(payload.get("commit_message"), "commit_message")
            repository_info = _optional_text(payload.get("repository_info"), "repository_info")
        except ValueError as exc:
            return jsonify({"status": "error", "error": str(exc)}), 400

        if not changes:
            return jsonify({"status": "error", "error": "No changes found in the current changelist."}), 400

        logger.info("Handling review request: files=%s", len(changes))
        outcome = action.run(
            changes,
            commit_message=commit_message,
            repository_info=repository_info,
        )

        if not outcome.success:
            body: ReviewResponseDict = {
                "status": "error",
                "summary": outcome.summary or "",
                "error": outcome.message,
            }
            if outcome.review:
                body["review"] = outcome.review
            return jsonify(body), 502

        body = {
            "status": "success",
            "summary": outcome.summary or "",
            "review": outcome.review or "",
            "report_path": str(outcome.report_path) if outcome.report_path else "",
            "html_report_path": str(outcome.html_report_path) if outcome.html_report_path else "",
        }
        return jsonify(body), 200
