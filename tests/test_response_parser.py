"""
Tests for splitting model replies into HTML and CSS.
"""

import pytest

from image2code.errors import GenerationError
from image2code.models import GenerationErrorKind
from image2code.pipeline.generation import INSTRUCTION, ResponseParser


def test_parse_single_sentinel():
    pair = ResponseParser.parse("  <div class=\"a\"></div>\n\nCSS:\n.a { color: red; }\n")

    assert pair.markup == '<div class="a"></div>'
    assert pair.stylesheet == ".a { color: red; }"


def test_parse_splits_on_first_sentinel_only():
    pair = ResponseParser.parse("<div>CSS:x</div>CSS:.a{color:red}")

    assert pair.markup == "<div>"
    assert pair.stylesheet == "x</div>CSS:.a{color:red}"


def test_parse_keeps_interior_text_verbatim():
    reply = "<ul>\n  <li>One</li>\n</ul>\nCSS: ul {\n  margin: 0;\n}\n/* adjust spacing */"
    pair = ResponseParser.parse(reply)

    assert pair.markup == "<ul>\n  <li>One</li>\n</ul>"
    assert pair.stylesheet == "ul {\n  margin: 0;\n}\n/* adjust spacing */"


@pytest.mark.parametrize("reply", [
    "<p>No stylesheet here</p>",
    "",
    "CSS:",
    "   CSS:   \n  ",
    "CSS: p{color:blue}",
    "<p>Hi</p>\nCSS:\n   ",
])
def test_parse_malformed_replies(reply):
    with pytest.raises(GenerationError) as exc_info:
        ResponseParser.parse(reply)

    assert exc_info.value.kind == GenerationErrorKind.MALFORMED_REPLY
    assert exc_info.value.message == "Failed to generate both HTML and CSS"


def test_sentinel_is_case_sensitive():
    with pytest.raises(GenerationError):
        ResponseParser.parse("<p>Hi</p>\ncss: p{color:blue}")


def test_instruction_names_the_sentinel():
    assert "'CSS:'" in INSTRUCTION
    assert "inline styling" in INSTRUCTION
