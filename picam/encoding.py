# =============================================================================
# Pi Camera VLM Logger - Frame Encoding
# =============================================================================
# Converts an OpenCV BGR frame into a JPEG and wraps the base64 bytes in a
# data URI suitable for an ``image_url`` content part.  Encoding is
# deterministic: the same frame and quality always yield the same string.
# =============================================================================

import base64
import logging

import cv2
import numpy as np

from picam.errors import FrameEncodeError

logger = logging.getLogger(__name__)

JPEG_MIME_TYPE = "image/jpeg"


def encode_jpeg(frame: np.ndarray, quality: int = 80) -> bytes:
    """
    Encode a frame as JPEG bytes.

    Args:
        frame:   BGR (or grayscale) uint8 array as returned by VideoCapture.read().
        quality: JPEG quality, 0-100.

    Returns:
        The encoded JPEG bytes.

    Raises:
        FrameEncodeError: If OpenCV rejects the frame (empty, wrong dtype or
                          layout) or reports an encoding failure.
    """
    try:
        ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    except cv2.error as exc:
        raise FrameEncodeError(f"Cannot JPEG-encode frame of shape {frame.shape}: {exc}") from exc
    if not ok:
        raise FrameEncodeError(f"Failed to JPEG-encode frame of shape {frame.shape}")
    return buffer.tobytes()


def to_data_uri(image_bytes: bytes, content_type: str = JPEG_MIME_TYPE) -> str:
    """
    Wrap raw image bytes in a base64 data URI.

    Args:
        image_bytes:  Encoded image.
        content_type: MIME type placed in the URI header.

    Returns:
        ``data:<content_type>;base64,<payload>``
    """
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def encode_frame_data_uri(frame: np.ndarray, quality: int = 80) -> str:
    """
    JPEG-encode a frame and return it as a base64 data URI.

    Args:
        frame:   Frame to encode.
        quality: JPEG quality, 0-100.

    Returns:
        ``data:image/jpeg;base64,<payload>``

    Raises:
        FrameEncodeError: If the frame cannot be encoded.
    """
    jpeg_bytes = encode_jpeg(frame, quality)
    logger.debug(
        "Encoded %dx%d frame → %d KB JPEG (quality=%d)",
        frame.shape[1], frame.shape[0], len(jpeg_bytes) // 1024, quality,
    )
    return to_data_uri(jpeg_bytes)
