import json
import os
from typing import Any

import pytest
import requests

from ai_change_reviewer.domains.review.models import ReviewConfig
from ai_change_reviewer.infra.clients.chat_completions import (
    ChatCompletionsClient,
    build_request_body,
    parse_completion_content,
)
from ai_change_reviewer.shared.errors import ParseError, ProtocolError, TransportError


_MESSAGES = [
    {"role": "system", "content": "be strict"},
    {"role": "user", "content": "review this"},
]


class _FakeResponse:
    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.content = body.encode("utf-8")
        self.text = body


class _FakeSession:
    def __init__(self, *, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    def close(self) -> None:
        pass


def _config(**overrides: Any) -> ReviewConfig:
    values: dict[str, Any] = {
        "api_url": "https://llm.example.com/v1/chat/completions",
        "api_key": "secret-key",
        "model": "gpt-test",
        "temperature": 0.25,
    }
    values.update(overrides)
    return ReviewConfig(**values)


def test_build_request_body_is_utf8_json_with_two_messages() -> None:
    body = build_request_body(_config(), [{"role": "system", "content": "简体中文"}])

    data = json.loads(body.decode("utf-8"))
    assert data == {
        "model": "gpt-test",
        "temperature": 0.25,
        "messages": [{"role": "system", "content": "简体中文"}],
    }
    assert "简体中文".encode("utf-8") in body


def test_complete_posts_with_bearer_auth_and_no_timeout() -> None:
    session = _FakeSession(
        response=_FakeResponse(200, '{"choices":[{"message":{"content":"LGTM"}}]}')
    )
    client = ChatCompletionsClient(session=session)  # type: ignore[arg-type]

    content = client.complete(_config(), _MESSAGES)

    assert content == "LGTM"
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://llm.example.com/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer secret-key"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["timeout"] is None
    sent = json.loads(call["data"])
    assert [m["role"] for m in sent["messages"]] == ["system", "user"]


def test_complete_non_2xx_raises_protocol_error_with_status() -> None:
    session = _FakeSession(response=_FakeResponse(500, "internal details"))
    client = ChatCompletionsClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(ProtocolError) as exc_info:
        client.complete(_config(), _MESSAGES)

    assert exc_info.value.status_code == 500
    assert str(exc_info.value) == "API request failed: 500"
    assert "internal details" not in str(exc_info.value)


def test_complete_empty_body_raises_protocol_error() -> None:
    session = _FakeSession(response=_FakeResponse(200, ""))
    client = ChatCompletionsClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(ProtocolError, match="Empty response from API"):
        client.complete(_config(), _MESSAGES)


def test_complete_transport_fault_raises_transport_error() -> None:
    session = _FakeSession(error=requests.ConnectionError("name resolution failed"))
    client = ChatCompletionsClient(session=session)  # type: ignore[arg-type]

    with pytest.raises(TransportError, match="Network error: name resolution failed"):
        client.complete(_config(), _MESSAGES)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('{"choices":[]}', "No response choices found"),
        ('{"id":"x"}', "No response choices found"),
        ('{"choices":[{"message":{"content":"   "}}]}', "Empty response content"),
        ('{"choices":[{"message":{}}]}', "Empty response content"),
        ('{"choices":[{"text":"legacy"}]}', "Failed to parse response"),
        ("not json", "Failed to parse response"),
        ("[1, 2]", "Failed to parse response"),
    ],
)
def test_parse_completion_content_rejects_bad_shapes(body: str, message: str) -> None:
    with pytest.raises(ParseError, match=message):
        parse_completion_content(body)


def test_parse_completion_content_keeps_text_untrimmed() -> None:
    body = json.dumps({"choices": [{"message": {"content": "  ## Review\n"}}]})

    assert parse_completion_content(body) == "  ## Review\n"


@pytest.mark.integration
def test_complete_with_real_endpoint() -> None:
    """실제 chat-completions 엔드포인트를 호출하는 통합 테스트.

    REVIEW_API_KEY 환경변수가 설정된 경우에만 실행된다.
    """
    api_key = os.getenv("REVIEW_API_KEY")
    if not api_key:
        pytest.skip("REVIEW_API_KEY is not set; skipping completion endpoint integration tests.")

    config = ReviewConfig(
        api_url=os.getenv("REVIEW_API_URL") or ReviewConfig().api_url,
        api_key=api_key,
        model=os.getenv("REVIEW_MODEL") or ReviewConfig().model,
    )

    content = ChatCompletionsClient().complete(
        config,
        [
            {"role": "system", "content": "Answer with a single word."},
            {"role": "user", "content": "Say OK."},
        ],
    )

    assert content.strip()
