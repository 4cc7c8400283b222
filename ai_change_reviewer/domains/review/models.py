from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ai_change_reviewer.domains.diff.models import DiffPayload
from ai_change_reviewer.domains.review.prompt import DEFAULT_SYSTEM_PROMPT


DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4.1"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_REPORT_LANGUAGE = "简体中文"
SUPPORTED_REPORT_LANGUAGES = ("简体中文", "English", "日本語")


@dataclass(frozen=True)
class ReviewRequest:
    code_changes: str
    commit_message: str | None = None
    file_paths: Tuple[str, ...] = ()

    @classmethod
    def from_diff(cls, payload: DiffPayload, commit_message: str | None = None) -> "ReviewRequest":
        return cls(
            code_changes=payload.unified_diff,
            commit_message=commit_message,
            file_paths=tuple(payload.modified_files),
        )


@dataclass(frozen=True)
class ReviewConfig:
    """Read-only snapshot of the reviewer settings used by one submission."""

    api_url: str = DEFAULT_API_URL
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    report_language: str = DEFAULT_REPORT_LANGUAGE
    enabled: bool = True

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be between 0.0 and 1.0, got {self.temperature}")


@dataclass(frozen=True)
class ReviewSuccess:
    review_text: str

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class ReviewFailure:
    error_message: str

    @property
    def success(self) -> bool:
        return False


ReviewResult = ReviewSuccess | ReviewFailure
