"""
Data models and schemas for the image-to-code generation pipeline.
"""

import base64
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


# 1MB upload ceiling
MAX_IMAGE_BYTES = 1024 * 1024

IMAGE_TYPE_PREFIX = "image/"


class ValidationReason(str, Enum):
    """Reasons an image candidate is rejected before submission."""
    UNSUPPORTED_TYPE = "unsupported-type"
    TOO_LARGE = "too-large"


class GenerationErrorKind(str, Enum):
    """Failure categories of a generation request."""
    MISSING_INPUT = "missing-input"
    UPSTREAM_FAILURE = "upstream-failure"
    MALFORMED_REPLY = "malformed-reply"


class ImageCandidate(BaseModel):
    """A file picked or dropped by the user, not yet validated."""
    filename: str = ""
    media_type: str = ""
    data: bytes = b""

    @property
    def byte_length(self) -> int:
        return len(self.data)


class ImageAsset(BaseModel):
    """A validated image payload ready for submission."""
    data: bytes
    media_type: str
    filename: str = ""

    class Config:
        frozen = True

    @property
    def byte_length(self) -> int:
        """Size of the binary payload in bytes."""
        return len(self.data)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_uri(self) -> str:
        """Encode the payload as a ``data:`` URI tagged with its media type."""
        return f"data:{self.media_type};base64,{self.to_base64()}"


class ImagePreview(BaseModel):
    """Displayable encoding of an asset, used only by presentation layers."""
    data_uri: str
    width: Optional[int] = None
    height: Optional[int] = None

    class Config:
        frozen = True


class GenerationRequest(BaseModel):
    """One image plus the fixed instruction sent to the remote model."""
    asset: ImageAsset
    instruction: str
    request_id: str = ""

    class Config:
        frozen = True

    @property
    def media_type(self) -> str:
        return self.asset.media_type

    def encoded_image(self) -> str:
        """Transport-safe base64 text of the image payload."""
        return self.asset.to_base64()


class GenerationReply(BaseModel):
    """Raw text returned by the remote model."""
    text: str
    model_name: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    reply_metadata: Dict[str, Any] = Field(default_factory=dict)


class CodeArtifactPair(BaseModel):
    """Parsed generation result: HTML markup and its CSS stylesheet."""
    markup: str
    stylesheet: str

    class Config:
        frozen = True

    def to_response(self) -> Dict[str, str]:
        """Wire format returned by the HTTP surface."""
        return {"html": self.markup, "css": self.stylesheet}

    def render_document(self, title: str = "Generated preview") -> str:
        """
        Compose a standalone HTML page for previewing the result.

        The stylesheet is embedded in a <style> block inside <head>. When the
        markup is already a full document, the block is injected before its
        closing </head> tag instead.
        """
        style_block = f"<style>\n{self.stylesheet}\n</style>"
        lowered = self.markup.lower()
        head_end = lowered.find("</head>")
        if head_end != -1:
            return self.markup[:head_end] + style_block + "\n" + self.markup[head_end:]

        return (
            "<!DOCTYPE html>\n"
            "<html>\n<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{title}</title>\n"
            f"{style_block}\n"
            "</head>\n<body>\n"
            f"{self.markup}\n"
            "</body>\n</html>\n"
        )
