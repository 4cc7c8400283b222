import pytest

from ai_change_reviewer.app.config import AppSettings, ReviewSettingsStore, temperature_from_percent
from ai_change_reviewer.domains.review.models import ReviewConfig
from ai_change_reviewer.domains.review.prompt import DEFAULT_SYSTEM_PROMPT
from ai_change_reviewer.shared.errors import ConfigurationError


_REVIEW_ENV = (
    "LOG_LEVEL",
    "REVIEW_API_URL",
    "REVIEW_API_KEY",
    "REVIEW_MODEL",
    "REVIEW_TEMPERATURE_PERCENT",
    "REVIEW_SYSTEM_PROMPT",
    "REVIEW_ENABLED",
    "REVIEW_REPORT_LANGUAGE",
    "REVIEW_REPORT_DIR",
    "REVIEW_WORKER_CONCURRENCY",
)


@pytest.fixture(autouse=True)
def _clear_review_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _REVIEW_ENV:
        monkeypatch.delenv(key, raising=False)


def test_app_settings_defaults() -> None:
    settings = AppSettings.from_env()

    assert settings.api_url == "https://api.openai.com/v1/chat/completions"
    assert settings.api_key == ""
    assert settings.model == "gpt-4.1"
    assert settings.temperature == pytest.approx(0.3)
    assert settings.system_prompt == DEFAULT_SYSTEM_PROMPT
    assert settings.report_language == "简体中文"
    assert settings.enabled is True
    assert settings.worker_concurrency == 4


def test_app_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REVIEW_API_KEY", " sk-test ")
    monkeypatch.setenv("REVIEW_MODEL", "gpt-test")
    monkeypatch.setenv("REVIEW_TEMPERATURE_PERCENT", "75")
    monkeypatch.setenv("REVIEW_ENABLED", "false")
    monkeypatch.setenv("REVIEW_REPORT_LANGUAGE", "日本語")

    config = AppSettings.from_env().review_config()

    assert config == ReviewConfig(
        api_key="sk-test",
        model="gpt-test",
        temperature=0.75,
        report_language="日本語",
        enabled=False,
    )


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("REVIEW_TEMPERATURE_PERCENT", "101"),
        ("REVIEW_TEMPERATURE_PERCENT", "warm"),
        ("REVIEW_REPORT_LANGUAGE", "Klingon"),
        ("REVIEW_WORKER_CONCURRENCY", "0"),
    ],
)
def test_app_settings_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        AppSettings.from_env()


def test_temperature_from_percent() -> None:
    assert temperature_from_percent(0) == 0.0
    assert temperature_from_percent(100) == 1.0
    with pytest.raises(ConfigurationError):
        temperature_from_percent(-1)


def test_review_config_rejects_out_of_range_temperature() -> None:
    with pytest.raises(ValueError):
        ReviewConfig(temperature=1.5)


def test_settings_store_snapshot_is_unaffected_by_updates() -> None:
    store = ReviewSettingsStore(ReviewConfig(api_key="first"))

    snapshot = store.snapshot()
    store.update(api_key="second", enabled=False)

    assert snapshot.api_key == "first"
    assert snapshot.enabled is True
    assert store.snapshot().api_key == "second"
    assert store.snapshot().enabled is False


def test_settings_store_rejects_invalid_update() -> None:
    store = ReviewSettingsStore()

    with pytest.raises(ConfigurationError):
        store.update(temperature=2.0)
    with pytest.raises(ConfigurationError):
        store.update(unknown_field=1)

    assert store.snapshot() == ReviewConfig()
