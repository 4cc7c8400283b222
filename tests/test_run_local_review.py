from types import SimpleNamespace
from typing import Any

import pytest

import run_local_review
from ai_change_reviewer.app.review_action import ReviewOutcome
from ai_change_reviewer.domains.diff.models import ChangedFile


class _FakeWorkspace:
    def __init__(self, repository_path: str) -> None:
        self.repository_path = repository_path

    def get_changed_files(self) -> list[ChangedFile]:
        return [ChangedFile(path="a.py", after_text="x\n")]

    def get_repository_info(self) -> str:
        return "Repository: demo, Branch: main"


class _FakeClient:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class _FakeOrchestrator:
    def __init__(self) -> None:
        self.shut_down = False

    def shutdown(self) -> None:
        self.shut_down = True


class _FakeAction:
    def __init__(self, outcome: ReviewOutcome | None = None, error: Exception | None = None) -> None:
        self.outcome = outcome
        self.error = error

    def run(self, changes: Any, **kwargs: Any) -> ReviewOutcome:
        if self.error is not None:
            raise self.error
        assert self.outcome is not None
        return self.outcome


def _install(monkeypatch: pytest.MonkeyPatch, action: _FakeAction) -> tuple[_FakeClient, _FakeOrchestrator]:
    client = _FakeClient()
    orchestrator = _FakeOrchestrator()
    settings = SimpleNamespace(log_level="INFO")

    monkeypatch.setattr(run_local_review.AppSettings, "from_env", staticmethod(lambda: settings))
    monkeypatch.setattr(run_local_review, "GitWorkspaceClient", _FakeWorkspace)
    monkeypatch.setattr(run_local_review, "ChatCompletionsClient", lambda: client)
    monkeypatch.setattr(
        run_local_review,
        "build_review_action",
        lambda settings, *, client: (action, None, orchestrator),
    )
    return client, orchestrator


def test_main_releases_client_and_workers_after_review(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    outcome = ReviewOutcome(success=True, message="done", summary="1 files, +1/-0 lines", review="LGTM")
    client, orchestrator = _install(monkeypatch, _FakeAction(outcome))

    run_local_review.main()

    assert client.closed is True
    assert orchestrator.shut_down is True
    assert "LGTM" in capsys.readouterr().out


def test_main_releases_client_and_workers_when_review_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    client, orchestrator = _install(monkeypatch, _FakeAction(error=RuntimeError("boom")))

    with pytest.raises(RuntimeError, match="boom"):
        run_local_review.main()

    assert client.closed is True
    assert orchestrator.shut_down is True
