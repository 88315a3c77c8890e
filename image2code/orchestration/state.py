"""
Client-side upload session modeled as a finite state machine.

Each state is its own immutable model carrying exactly the data valid in
that state, so combinations like "generating without an asset" cannot be
built. ``UploadSession`` holds the current state and applies transitions.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from image2code.errors import GenerationError, Image2CodeError, SessionStateError, ValidationError
from image2code.io.image_loader import ImageValidator
from image2code.models import CodeArtifactPair, ImageAsset, ImageCandidate, ImagePreview


class SessionStatus(str, Enum):
    EMPTY = "empty"
    PREVIEWING = "previewing"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class EmptyState(BaseModel):
    """Nothing selected."""
    status: SessionStatus = SessionStatus.EMPTY

    class Config:
        frozen = True


class PreviewingState(BaseModel):
    """An image is selected and shown, not yet submitted."""
    asset: ImageAsset
    preview: ImagePreview
    status: SessionStatus = SessionStatus.PREVIEWING

    class Config:
        frozen = True


class GeneratingState(BaseModel):
    """The selected image has been submitted and the caller is waiting."""
    asset: ImageAsset
    preview: ImagePreview
    status: SessionStatus = SessionStatus.GENERATING

    class Config:
        frozen = True


class ReadyState(BaseModel):
    """Generation succeeded."""
    asset: ImageAsset
    preview: ImagePreview
    result: CodeArtifactPair
    status: SessionStatus = SessionStatus.READY

    class Config:
        frozen = True


class FailedState(BaseModel):
    """
    Selection or generation failed.

    ``asset`` is kept after a generation failure so the user can resubmit,
    and is None after a rejected selection.
    """
    error_message: str
    error_kind: str
    asset: Optional[ImageAsset] = None
    preview: Optional[ImagePreview] = None
    status: SessionStatus = SessionStatus.FAILED

    class Config:
        frozen = True


SessionState = Union[EmptyState, PreviewingState, GeneratingState, ReadyState, FailedState]


def _error_kind(error: Image2CodeError) -> str:
    if isinstance(error, ValidationError):
        return error.reason.value
    if isinstance(error, GenerationError):
        return error.kind.value
    return type(error).__name__


class UploadSession:
    """Drives one user's select → submit → result cycle."""

    def __init__(self, validator: Optional[ImageValidator] = None):
        self.validator = validator or ImageValidator()
        self.state: SessionState = EmptyState()

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    def select(self, candidate: ImageCandidate) -> SessionState:
        """
        Select a new image, replacing any previous selection or result.

        Not allowed while generating. A rejected candidate moves the session
        to FAILED with no asset.
        """
        if isinstance(self.state, GeneratingState):
            raise SessionStateError("Cannot select an image while generation is in progress")

        try:
            asset, preview = self.validator.validate(candidate)
        except ValidationError as e:
            self.state = FailedState(error_message=e.message, error_kind=_error_kind(e))
        else:
            self.state = PreviewingState(asset=asset, preview=preview)
        return self.state

    def submit(self) -> ImageAsset:
        """
        Move to GENERATING and return the asset to send.

        Allowed from PREVIEWING, READY, or FAILED when an asset is still held.
        """
        state = self.state
        if isinstance(state, (PreviewingState, ReadyState)) or (
            isinstance(state, FailedState) and state.asset is not None
        ):
            self.state = GeneratingState(asset=state.asset, preview=state.preview)
            return state.asset

        raise SessionStateError(f"Cannot submit from state '{state.status.value}'")

    def succeed(self, result: CodeArtifactPair) -> SessionState:
        state = self._require_generating("succeed")
        self.state = ReadyState(asset=state.asset, preview=state.preview, result=result)
        return self.state

    def fail(self, error: Image2CodeError) -> SessionState:
        state = self._require_generating("fail")
        self.state = FailedState(
            error_message=error.message,
            error_kind=_error_kind(error),
            asset=state.asset,
            preview=state.preview
        )
        return self.state

    def reset(self) -> SessionState:
        self.state = EmptyState()
        return self.state

    def run(self, generator) -> SessionState:
        """
        Submit the selected image to ``generator`` and record the outcome.

        Args:
            generator: Object with a ``generate(asset)`` method (CodeGenerator).

        Returns:
            The READY or FAILED state.
        """
        asset = self.submit()
        try:
            result = generator.generate(asset)
        except Image2CodeError as e:
            return self.fail(e)
        return self.succeed(result)

    def _require_generating(self, action: str) -> GeneratingState:
        if not isinstance(self.state, GeneratingState):
            raise SessionStateError(f"Cannot {action} from state '{self.state.status.value}'")
        return self.state
