"""Unit tests for YAML configuration loading and env overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from cfetch.challenge import CHALLENGE_MARKERS, CHALLENGE_STATUS_CODES
from cfetch.config import Config, FetcherSettings
from cfetch.headers import DEFAULT_HEADERS

OVERRIDE_VARS = (
    "FETCHER_USER_AGENT",
    "FETCHER_TIMEOUT",
    "FETCHER_MAX_REDIRECTS",
    "FETCHER_MAX_REFETCHES",
    "FETCHER_MAX_RESPONSE_SIZE",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in OVERRIDE_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "fetcher:\n"
        "  timeout: 5\n"
        "  max_refetches: 1\n"
        "  headers:\n"
        "    Referer: https://example.com/\n"
        "challenge:\n"
        "  status_codes: [403]\n"
        "  markers: [captcha]\n"
        "logging:\n"
        "  level: DEBUG\n"
    )
    return path


def test_shipped_config_matches_defaults() -> None:
    settings = FetcherSettings.from_config(Config())

    assert settings.user_agent == DEFAULT_HEADERS["User-Agent"]
    assert settings.challenge_status_codes == CHALLENGE_STATUS_CODES
    assert settings.challenge_markers == CHALLENGE_MARKERS
    assert settings.max_response_size == 10 * 1024 * 1024


def test_values_read_from_yaml(config_file: Path) -> None:
    config = Config(config_file)

    assert config.get("fetcher", "timeout") == 5
    assert config.logging == {"level": "DEBUG"}
    assert config.get("fetcher", "missing", default="fallback") == "fallback"


def test_settings_from_config(config_file: Path) -> None:
    settings = FetcherSettings.from_config(Config(config_file))

    assert settings.timeout == 5.0
    assert settings.max_refetches == 1
    assert settings.max_redirects == 5
    assert settings.challenge_status_codes == (403,)
    assert settings.challenge_markers == ("captcha",)
    assert settings.extra_headers == {"Referer": "https://example.com/"}


def test_env_overrides_yaml(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FETCHER_TIMEOUT", "2.5")
    monkeypatch.setenv("FETCHER_USER_AGENT", "env-agent/1.0")
    monkeypatch.setenv("LOG_FORMAT", "console")

    config = Config(config_file)

    assert config.fetcher["timeout"] == "2.5"
    assert config.fetcher["user_agent"] == "env-agent/1.0"
    assert config.logging["format"] == "console"


def test_settings_coerce_env_strings(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FETCHER_MAX_REDIRECTS", "7")
    monkeypatch.setenv("FETCHER_TIMEOUT", "2.5")

    settings = FetcherSettings.from_config(Config(config_file))

    assert settings.max_redirects == 7
    assert settings.timeout == 2.5


def test_env_creates_missing_section(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("challenge:\n  markers: [captcha]\n")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    assert Config(path).logging == {"level": "WARNING"}


def test_non_mapping_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ValueError):
        Config(path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Config(tmp_path / "absent.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("fetcher: [unclosed\n")

    with pytest.raises(ValueError):
        Config(path)
