from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from typing import List, Protocol

from ai_change_reviewer.domains.review.models import (
    ReviewConfig,
    ReviewFailure,
    ReviewRequest,
    ReviewResult,
    ReviewSuccess,
)
from ai_change_reviewer.domains.review.prompt import generate_review_messages
from ai_change_reviewer.shared.errors import ParseError, ProtocolError, TransportError
from ai_change_reviewer.shared.types import ChatMessageDict


logger = logging.getLogger(__name__)

DISABLED_MESSAGE = "AI Code Review is disabled"
MISSING_API_KEY_MESSAGE = "API key is not configured"


class CompletionClient(Protocol):
    def send(self, config: ReviewConfig, messages: List[ChatMessageDict]) -> bytes: ...

    def parse(self, body: bytes) -> str: ...


class SubmissionState(str, Enum):
    CREATED = "created"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    TRANSMITTED = "transmitted"
    PARSING = "parsing"
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"


class ReviewOrchestrator:
    """Submits review requests to the completion endpoint without blocking the caller.

    Every submission resolves its future exactly once, with either a
    ``ReviewSuccess`` or a ``ReviewFailure``. The configuration snapshot is
    captured when ``submit`` is called.
    """

    def __init__(
        self,
        *,
        client: CompletionClient,
        executor: Executor | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._client = client
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="review-worker",
        )

    def submit(self, request: ReviewRequest, config: ReviewConfig) -> Future[ReviewResult]:
        self._transition(SubmissionState.CREATED)
        self._transition(SubmissionState.VALIDATING)

        rejection = self._preflight(config)
        if rejection is not None:
            self._transition(SubmissionState.REJECTED, rejection.error_message)
            future: Future[ReviewResult] = Future()
            future.set_result(rejection)
            return future

        self._transition(SubmissionState.DISPATCHING)
        return self._executor.submit(self._run, request, config)

    def shutdown(self, *, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    @staticmethod
    def _preflight(config: ReviewConfig) -> ReviewFailure | None:
        if not config.enabled:
            return ReviewFailure(DISABLED_MESSAGE)
        if not config.api_key.strip():
            return ReviewFailure(MISSING_API_KEY_MESSAGE)
        return None

    @staticmethod
    def _transition(state: SubmissionState, detail: str | None = None) -> None:
        if detail:
            logger.debug("Review submission -> %s (%s)", state.value, detail)
        else:
            logger.debug("Review submission -> %s", state.value)

    def _run(self, request: ReviewRequest, config: ReviewConfig) -> ReviewResult:
        try:
            messages = generate_review_messages(request, config)
            logger.info(
                "Requesting AI review: model=%s, files=%s, diff_chars=%s",
                config.model,
                len(request.file_paths),
                len(request.code_changes),
            )
            response_body = self._client.send(config, messages)
            self._transition(SubmissionState.TRANSMITTED)

            self._transition(SubmissionState.PARSING)
            review_text = self._client.parse(response_body)
        except (TransportError, ProtocolError, ParseError) as error:
            self._transition(SubmissionState.REJECTED, str(error))
            return ReviewFailure(str(error))
        except Exception as error:  # noqa: BLE001 - the future must always resolve
            logger.exception("Error generating AI review")
            self._transition(SubmissionState.REJECTED, str(error))
            return ReviewFailure(f"Failed to generate review: {error}")

        self._transition(SubmissionState.SUCCEEDED)
        return ReviewSuccess(review_text)
