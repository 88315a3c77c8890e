"""
Client-side session state for selecting, submitting and viewing one image.
"""

from image2code.orchestration.state import (
    EmptyState,
    FailedState,
    GeneratingState,
    PreviewingState,
    ReadyState,
    SessionState,
    SessionStatus,
    UploadSession,
)

__all__ = [
    "EmptyState",
    "FailedState",
    "GeneratingState",
    "PreviewingState",
    "ReadyState",
    "SessionState",
    "SessionStatus",
    "UploadSession",
]
