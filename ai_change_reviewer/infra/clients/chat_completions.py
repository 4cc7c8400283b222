from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

import requests

from ai_change_reviewer.domains.review.models import ReviewConfig
from ai_change_reviewer.shared.errors import ParseError, ProtocolError, TransportError
from ai_change_reviewer.shared.types import ChatCompletionPayload, ChatMessageDict


logger = logging.getLogger(__name__)


def build_request_body(config: ReviewConfig, messages: List[ChatMessageDict]) -> bytes:
    payload: ChatCompletionPayload = {
        "model": config.model,
        "temperature": config.temperature,
        "messages": messages,
    }
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def parse_completion_content(body: str | bytes) -> str:
    """Extract ``choices[0].message.content`` from a chat-completions response body."""
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ParseError(f"Failed to parse response: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError("Failed to parse response: expected a JSON object")

    choices = data.get("choices")
    if choices is None or (isinstance(choices, list) and not choices):
        raise ParseError("No response choices found")
    if not isinstance(choices, list):
        raise ParseError("Failed to parse response: 'choices' must be a list")

    first_choice = choices[0]
    message = first_choice.get("message") if isinstance(first_choice, dict) else None
    if not isinstance(message, dict):
        raise ParseError("Failed to parse response: missing 'message' in first choice")

    content = message.get("content")
    if content is None or (isinstance(content, str) and not content.strip()):
        raise ParseError("Empty response content")
    if not isinstance(content, str):
        raise ParseError("Failed to parse response: 'content' must be a string")

    return content


class ChatCompletionsClient:
    """Long-lived HTTP transport for OpenAI-compatible chat-completions endpoints.

    The underlying ``requests.Session`` is shared by every submission. No
    timeout is applied, long generations are allowed to run to completion.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, *, url: str, api_key: str, body: bytes) -> Any:
        logger.info("Making request to: %s", url)
        try:
            return self._session.post(
                url,
                data=body,
                headers=self._headers(api_key),
                timeout=None,
            )
        except requests.RequestException as exc:
            logger.error("Network error calling AI API: %s", exc)
            raise TransportError(f"Network error: {exc}") from exc

    def send(self, config: ReviewConfig, messages: List[ChatMessageDict]) -> bytes:
        """POST the review request and return the raw 2xx response body."""
        body = build_request_body(config, messages)
        response = self._post(url=config.api_url, api_key=config.api_key, body=body)

        if not 200 <= response.status_code < 300:
            error_body = response.text or "Unknown error"
            logger.error("API request failed: %s - %s", response.status_code, error_body)
            raise ProtocolError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
            )

        response_body = response.content
        if not response_body or not response_body.strip():
            raise ProtocolError("Empty response from API", status_code=response.status_code)

        return response_body

    def parse(self, body: bytes) -> str:
        try:
            return parse_completion_content(body)
        except ParseError:
            logger.exception("Error parsing AI response")
            raise

    def complete(self, config: ReviewConfig, messages: List[ChatMessageDict]) -> str:
        return self.parse(self.send(config, messages))

    def close(self) -> None:
        self._session.close()
