from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from typing import Any

from ai_change_reviewer.domains.review.models import (
    DEFAULT_API_URL,
    DEFAULT_MODEL,
    DEFAULT_REPORT_LANGUAGE,
    SUPPORTED_REPORT_LANGUAGES,
    ReviewConfig,
)
from ai_change_reviewer.domains.review.prompt import DEFAULT_SYSTEM_PROMPT
from ai_change_reviewer.shared.errors import ConfigurationError


DEFAULT_TEMPERATURE_PERCENT = 30


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_optional_str(name: str) -> str | None:
    return _clean_optional(os.environ.get(name))


def _get_bool(name: str, default: bool) -> bool:
    raw = _clean_optional(os.environ.get(name))
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _get_int(
    name: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    raw = _clean_optional(os.environ.get(name))
    if raw is None:
        value = default
    else:
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid integer for {name}: {raw}") from exc

    if min_value is not None and value < min_value:
        raise ConfigurationError(f"{name} must be >= {min_value}")
    if max_value is not None and value > max_value:
        raise ConfigurationError(f"{name} must be <= {max_value}")
    return value


def temperature_from_percent(percent: int) -> float:
    """Settings UI exposes temperature as 0-100; the request uses a 0.0-1.0 fraction."""
    if not 0 <= percent <= 100:
        raise ConfigurationError(f"Temperature percent must be between 0 and 100, got {percent}")
    return percent / 100.0


@dataclass(frozen=True)
class AppSettings:
    log_level: str

    api_url: str
    api_key: str
    model: str
    temperature: float
    system_prompt: str
    report_language: str
    enabled: bool

    report_dir: str
    worker_concurrency: int

    def review_config(self) -> ReviewConfig:
        return ReviewConfig(
            api_url=self.api_url,
            api_key=self.api_key,
            model=self.model,
            temperature=self.temperature,
            system_prompt=self.system_prompt,
            report_language=self.report_language,
            enabled=self.enabled,
        )

    @classmethod
    def from_env(cls) -> "AppSettings":
        report_language = _get_optional_str("REVIEW_REPORT_LANGUAGE") or DEFAULT_REPORT_LANGUAGE
        if report_language not in SUPPORTED_REPORT_LANGUAGES:
            raise ConfigurationError(f"Unsupported REVIEW_REPORT_LANGUAGE: {report_language}")

        temperature_percent = _get_int(
            "REVIEW_TEMPERATURE_PERCENT",
            DEFAULT_TEMPERATURE_PERCENT,
            min_value=0,
            max_value=100,
        )

        return cls(
            log_level=(_get_optional_str("LOG_LEVEL") or "INFO").upper(),
            api_url=_get_optional_str("REVIEW_API_URL") or DEFAULT_API_URL,
            api_key=_get_optional_str("REVIEW_API_KEY") or "",
            model=_get_optional_str("REVIEW_MODEL") or DEFAULT_MODEL,
            temperature=temperature_from_percent(temperature_percent),
            system_prompt=_get_optional_str("REVIEW_SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
            report_language=report_language,
            enabled=_get_bool("REVIEW_ENABLED", True),
            report_dir=_get_optional_str("REVIEW_REPORT_DIR") or "reports",
            worker_concurrency=_get_int("REVIEW_WORKER_CONCURRENCY", 4, min_value=1),
        )


class ReviewSettingsStore:
    """Live reviewer settings that can be edited while reviews are running.

    Callers take a frozen ``ReviewConfig`` snapshot per submission, so later
    updates never reach a submission that is already in flight.
    """

    def __init__(self, config: ReviewConfig | None = None) -> None:
        self._lock = threading.Lock()
        self._config = config or ReviewConfig()

    def snapshot(self) -> ReviewConfig:
        with self._lock:
            return self._config

    def update(self, **changes: Any) -> ReviewConfig:
        with self._lock:
            try:
                self._config = replace(self._config, **changes)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid review settings update: {exc}") from exc
            return self._config
