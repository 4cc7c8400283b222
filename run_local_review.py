"""현재 git 작업 트리의 변경사항으로 AI 코드 리뷰를 실행하는 스크립트.

프로젝트 루트의 .env(또는 환경 변수)에서 다음 값을 읽어 사용한다.
- REVIEW_API_URL, REVIEW_API_KEY, REVIEW_MODEL
- REVIEW_TEMPERATURE_PERCENT, REVIEW_REPORT_LANGUAGE, REVIEW_ENABLED
- REVIEW_REPOSITORY_PATH (기본값: 현재 디렉터리, git 저장소 루트여야 한다)
- REVIEW_COMMIT_MESSAGE (선택)

사용 예:

    python run_local_review.py
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from ai_change_reviewer.app.config import AppSettings
from ai_change_reviewer.app.main import build_review_action, setup_logging
from ai_change_reviewer.infra.clients.chat_completions import ChatCompletionsClient
from ai_change_reviewer.infra.clients.git_workspace import GitWorkspaceClient


PROJECT_ROOT = Path(__file__).resolve().parent
ENV_PATH = PROJECT_ROOT / ".env"

if ENV_PATH.exists():
    load_dotenv(dotenv_path=ENV_PATH, override=False)


def _print_progress(text: str, fraction: float) -> None:
    print(f"[{int(fraction * 100):3d}%] {text}")


def main() -> None:
    """작업 트리 변경사항을 리뷰하고 결과와 리포트 경로를 콘솔에 출력한다."""

    settings = AppSettings.from_env()
    setup_logging(settings.log_level)
    logger = logging.getLogger("local_review")

    workspace = GitWorkspaceClient(os.environ.get("REVIEW_REPOSITORY_PATH") or ".")
    changes = workspace.get_changed_files()
    if not changes:
        logger.warning("No changes found in the working tree; nothing to review.")
        return

    commit_message = (os.environ.get("REVIEW_COMMIT_MESSAGE") or "").strip() or None
    repository_info = workspace.get_repository_info()

    logger.info("Running review with %s changed files", len(changes))

    client = ChatCompletionsClient()
    action, _, orchestrator = build_review_action(settings, client=client)
    try:
        outcome = action.run(
            changes,
            commit_message=commit_message,
            repository_info=repository_info,
            progress=_print_progress,
        )
    finally:
        orchestrator.shutdown()
        client.close()

    if not outcome.success:
        print(f"\n[error] {outcome.message}")
        raise SystemExit(1)

    print("\n===== AI REVIEW START =====\n")
    print(outcome.review)
    print("\n===== AI REVIEW END =====\n")

    if outcome.summary:
        print(f"summary={outcome.summary}")
    if outcome.report_path is not None:
        print(f"report_path={outcome.report_path}")
    if outcome.html_report_path is not None:
        print(f"html_report_path={outcome.html_report_path}")


if __name__ == "__main__":
    main()
