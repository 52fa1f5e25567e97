# =============================================================================
# Pi Camera VLM Logger - Error Types
# =============================================================================
# Capture errors are fatal and end the reporter loop. Inference errors are
# recoverable: they are logged and the loop moves on to the next tick.
# =============================================================================

from typing import Optional


class PiCamError(Exception):
    """Base class for all reporter errors."""


class CaptureOpenError(PiCamError):
    """The video device could not be opened."""


class CaptureReadFailure(PiCamError):
    """A frame read from an open device failed."""


class FrameEncodeError(PiCamError):
    """A frame could not be JPEG-encoded; only that frame is skipped."""


class InferenceError(PiCamError):
    """
    Base class for recoverable failures of a single inference submission.

    Args:
        message: Human-readable description.
        body:    Raw response body, when one was received.
    """

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


class NetworkFailure(InferenceError):
    """Timeout, connection error, or non-2xx HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message, body=body)
        self.status_code = status_code


class ResponseParseFailure(InferenceError):
    """The response body lacked the expected choices/message/content fields."""


class ServerUnavailable(PiCamError):
    """The inference server did not become healthy in time."""
