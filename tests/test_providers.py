"""
Tests for chat model construction.
"""

import pytest

from image2code.config import Settings
from image2code.models import GenerationRequest
from image2code.providers import build_content, create_chat_model
from image2code.utils.llm_logger import LoggedLLM


def test_create_openai_model():
    settings = Settings(provider="openai", api_key="sk-test", timeout=15, max_tokens=1024)

    llm = create_chat_model(settings)

    assert isinstance(llm, LoggedLLM)
    assert llm.provider == "openai"
    assert llm.model == "gpt-4o"
    assert llm.llm.model_name == "gpt-4o"
    assert llm.llm.max_tokens == 1024


def test_create_anthropic_model():
    settings = Settings(provider="anthropic", model_name="claude-test", api_key="sk-ant-test")

    llm = create_chat_model(settings)

    assert llm.provider == "anthropic"
    assert llm.llm.model == "claude-test"


def test_unknown_provider():
    with pytest.raises(ValueError):
        create_chat_model(Settings(provider="llama", model_name="x"))


def test_build_content_puts_instruction_first(fake_asset):
    request = GenerationRequest(asset=fake_asset, instruction="replicate this")

    content = build_content(request, "openai")

    assert content[0] == {"type": "text", "text": "replicate this"}
    assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")
