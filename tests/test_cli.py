"""
Tests for the command-line interface.
"""

import json

from langchain_core.language_models.fake_chat_models import FakeListChatModel

import cli
from conftest import StubCapability
from image2code.pipeline.generation import CodeGenerator, LangChainCapability
from image2code.utils.llm_logger import LogLevel, get_logger


class StubGeneratorFactory:
    reply = "<p>Hi</p>\n\nCSS: p{color:blue}"

    @classmethod
    def from_settings(cls, settings=None):
        return CodeGenerator(StubCapability(cls.reply))


def test_generate_prints_json(tmp_path, png_bytes, monkeypatch, capsys):
    monkeypatch.setattr(cli, "CodeGenerator", StubGeneratorFactory)
    image_path = tmp_path / "shot.png"
    image_path.write_bytes(png_bytes)

    exit_code = cli.main(["generate", "--image", str(image_path), "--json"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"html": "<p>Hi</p>", "css": "p{color:blue}"}


def test_generate_rejects_non_image(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(cli, "CodeGenerator", StubGeneratorFactory)
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    exit_code = cli.main(["generate", "--image", str(path)])

    assert exit_code == 1
    assert "valid image" in capsys.readouterr().err


def test_generate_missing_file(tmp_path, capsys):
    exit_code = cli.main(["generate", "--image", str(tmp_path / "missing.png")])

    assert exit_code == 1
    assert "not found" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "generate" in capsys.readouterr().out


class LoggedModelFactory:
    @classmethod
    def from_settings(cls, settings=None):
        llm = FakeListChatModel(responses=["<p>Hi</p>\n\nCSS: p{color:blue}"])
        return CodeGenerator(LangChainCapability(llm, provider="google", model_name="fake"))


def test_generate_json_stays_clean_with_llm_logging(tmp_path, png_bytes, monkeypatch, capsys):
    monkeypatch.setattr(cli, "CodeGenerator", LoggedModelFactory)
    logger = get_logger()
    saved = logger.level
    logger.configure(level=LogLevel.DEBUG)
    image_path = tmp_path / "shot.png"
    image_path.write_bytes(png_bytes)

    try:
        exit_code = cli.main(["generate", "--image", str(image_path), "--json"])
    finally:
        logger.configure(level=saved)

    captured = capsys.readouterr()
    assert exit_code == 0
    assert json.loads(captured.out) == {"html": "<p>Hi</p>", "css": "p{color:blue}"}
    assert "LLM Call: [generator] google/fake" in captured.err
