"""
Shared fixtures and remote-capability stubs.
"""

import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image

from image2code.models import ImageAsset, ImageCandidate


class StubCapability:
    """Remote capability returning a canned reply and recording requests."""

    def __init__(self, reply):
        self.reply = reply
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        return self.reply


class FailingCapability:
    """Remote capability that raises the given error."""

    def __init__(self, error):
        self.error = error

    def complete(self, request):
        raise self.error


def png_header(width, height):
    """PNG signature, an IHDR chunk declaring the given size, and IEND."""
    def chunk(kind, body):
        return (
            struct.pack(">I", len(body))
            + kind
            + body
            + struct.pack(">I", zlib.crc32(kind + body) & 0xFFFFFFFF)
        )

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


@pytest.fixture
def png_bytes():
    """A small real PNG image."""
    image = Image.new("RGB", (64, 32), color="white")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_candidate(png_bytes):
    return ImageCandidate(filename="mockup.png", media_type="image/png", data=png_bytes)


@pytest.fixture
def fake_asset():
    """A 10-byte payload that is not a decodable image."""
    return ImageAsset(data=b"0123456789", media_type="image/png", filename="fake.png")
