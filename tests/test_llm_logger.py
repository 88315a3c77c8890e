"""
Tests for the LLM call logger.
"""

import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from image2code.utils.llm_logger import LoggedLLM, LogLevel, extract_token_usage, get_logger


@pytest.fixture
def logger(tmp_path):
    logger = get_logger()
    saved = (logger.level, logger.log_to_file, logger.log_dir)
    logger.configure(level=LogLevel.TRACE, log_to_file=True, log_dir=tmp_path)
    yield logger
    logger.configure(level=saved[0], log_to_file=saved[1], log_dir=saved[2])


class EchoModel:
    temperature = 0.3
    max_tokens = 100

    def invoke(self, messages, **kwargs):
        return AIMessage(
            content="<p>Hi</p>CSS: p{}",
            usage_metadata={"input_tokens": 10, "output_tokens": 5, "total_tokens": 15},
        )


class BrokenModel:
    def invoke(self, messages, **kwargs):
        raise ConnectionError("down")


def test_get_logger_is_singleton():
    assert get_logger() is get_logger()


def test_strip_images_replaces_data_uris():
    logger = get_logger()
    content = [
        {"type": "text", "text": "describe"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,QUJDRA=="}},
        {"type": "image", "source": {"type": "base64", "media_type": "image/jpeg", "data": "QUJD"}},
    ]

    stripped = logger.strip_images(content)

    assert stripped[0] == {"type": "text", "text": "describe"}
    assert stripped[1]["text"] == "[IMAGE_DATA: png, base64 encoded, 8 bytes]"
    assert stripped[2]["text"] == "[IMAGE_DATA: jpeg, base64 encoded, 4 bytes]"


def test_extract_token_usage():
    message = AIMessage(
        content="x",
        usage_metadata={"input_tokens": 3, "output_tokens": 4, "total_tokens": 7},
    )
    assert extract_token_usage(message) == {
        "prompt_tokens": 3,
        "completion_tokens": 4,
        "total_tokens": 7,
    }
    assert extract_token_usage("plain text") == {}


def test_logged_llm_writes_jsonl_without_image_data(logger, tmp_path, capsys):
    llm = LoggedLLM(EchoModel(), component="generator", provider="google", model="gemini-test",
                    request_id="req123")
    message = HumanMessage(content=[
        {"type": "text", "text": "make html"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,QUJDRA=="}},
    ])

    response = llm.invoke([message])

    assert response.content == "<p>Hi</p>CSS: p{}"
    log_file = tmp_path / "req123" / "llm_calls.jsonl"
    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [entry["event"] for entry in entries] == ["request", "response"]
    assert "QUJDRA==" not in log_file.read_text(encoding="utf-8")
    assert entries[1]["usage"]["total_tokens"] == 15

    captured = capsys.readouterr()
    assert captured.out == ""
    output = captured.err
    assert "LLM Call: [generator] google/gemini-test" in output
    assert "QUJDRA==" not in output


def test_logged_llm_reraises_errors(logger, capsys):
    llm = LoggedLLM(BrokenModel(), component="generator", provider="openai", model="gpt-test")

    with pytest.raises(ConnectionError):
        llm.invoke([HumanMessage(content="hi")])

    assert "LLM Error: [generator] ConnectionError: down" in capsys.readouterr().err


def test_logging_disabled_is_silent(capsys):
    logger = get_logger()
    saved = logger.level
    logger.configure(level=LogLevel.NONE)
    try:
        LoggedLLM(EchoModel(), component="generator", provider="google", model="g").invoke(
            [HumanMessage(content="hi")]
        )
    finally:
        logger.configure(level=saved)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
