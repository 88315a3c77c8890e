"""
Tests for environment-driven settings.
"""

import pytest

from image2code.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "IMAGE2CODE_PROVIDER",
        "IMAGE2CODE_MODEL",
        "IMAGE2CODE_TEMPERATURE",
        "IMAGE2CODE_MAX_TOKENS",
        "IMAGE2CODE_TIMEOUT",
        "GOOGLE_API_KEY",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()

    assert settings.provider == "google"
    assert settings.resolved_model == "gemini-2.5-flash"
    assert settings.temperature == 0.3
    assert settings.max_tokens == 4096
    assert settings.timeout == 60.0


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("IMAGE2CODE_PROVIDER", "OpenAI")
    monkeypatch.setenv("IMAGE2CODE_TIMEOUT", "12.5")
    monkeypatch.setenv("IMAGE2CODE_MAX_TOKENS", "2048")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings.from_env()

    assert settings.provider == "openai"
    assert settings.resolved_model == "gpt-4o"
    assert settings.timeout == 12.5
    assert settings.max_tokens == 2048
    assert settings.api_key == "sk-test"


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("IMAGE2CODE_TEMPERATURE", "0.9")

    settings = Settings.from_env(provider="anthropic", temperature=0.1, model_name=None)

    assert settings.provider == "anthropic"
    assert settings.temperature == 0.1
    assert settings.resolved_model.startswith("claude")


def test_unknown_provider():
    with pytest.raises(ValueError, match="Unsupported provider"):
        Settings.from_env(provider="llama")


def test_bad_number(monkeypatch):
    monkeypatch.setenv("IMAGE2CODE_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="IMAGE2CODE_TIMEOUT"):
        Settings.from_env()


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        Settings.from_env(timeout=0)
