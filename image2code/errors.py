"""
Exception types raised by the image-to-code pipeline.
"""

from typing import Optional

from image2code.models import GenerationErrorKind, ValidationReason


class Image2CodeError(Exception):
    """Base class for all pipeline errors. ``message`` is safe to show to users."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(Image2CodeError):
    """An image candidate failed the local type/size policy."""

    MESSAGES = {
        ValidationReason.UNSUPPORTED_TYPE: "Please upload a valid image file.",
        ValidationReason.TOO_LARGE: "Image size should not exceed 1MB.",
    }

    def __init__(self, reason: ValidationReason, message: Optional[str] = None):
        super().__init__(message or self.MESSAGES[reason])
        self.reason = reason


class GenerationError(Image2CodeError):
    """A generation request failed. ``kind`` tells which stage failed."""

    def __init__(
        self,
        kind: GenerationErrorKind,
        message: str,
        detail: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.detail = detail if detail is not None else message
        self.cause = cause

    @classmethod
    def missing_input(cls) -> "GenerationError":
        return cls(GenerationErrorKind.MISSING_INPUT, "No image file provided")

    @classmethod
    def upstream(cls, cause: BaseException) -> "GenerationError":
        detail = str(cause) or type(cause).__name__
        return cls(
            GenerationErrorKind.UPSTREAM_FAILURE,
            f"Remote generation failed: {detail}",
            detail=detail,
            cause=cause
        )

    @classmethod
    def malformed_reply(cls, detail: str) -> "GenerationError":
        return cls(
            GenerationErrorKind.MALFORMED_REPLY,
            "Failed to generate both HTML and CSS",
            detail=detail
        )


class SessionStateError(Image2CodeError):
    """An upload session transition was requested from a state that forbids it."""
