# =============================================================================
# Pi Camera VLM Logger - Webcam Capture Module
# =============================================================================
# Provides the WebcamCapture class wrapping cv2.VideoCapture.  Format,
# resolution and frame rate are requested on a best-effort basis: the
# outcome of each request is not checked, and the settings the driver
# actually negotiated are queried back after opening.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import cv2
import numpy as np

from picam.errors import CaptureOpenError, CaptureReadFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureSettings:
    """Settings reported by the device after configuration."""

    width: int
    height: int
    fps: float
    fourcc: str


def _decode_fourcc(value: float) -> str:
    """
    Convert a CAP_PROP_FOURCC value back into its four-character code.

    Args:
        value: Packed little-endian code as returned by VideoCapture.get().

    Returns:
        str: e.g. "MJPG", or "" when the driver reports no format.
    """
    code = int(value)
    if code <= 0:
        return ""
    return "".join(chr((code >> (8 * i)) & 0xFF) for i in range(4))


class WebcamCapture:
    """
    OpenCV video device handle with best-effort configuration.

    The device is opened by ``open()`` and released by ``release()``, which
    is safe to call any number of times; the underlying handle is released
    at most once.

    Args:
        device_index: System video device index (0 = first camera).
        width:        Requested frame width in pixels.
        height:       Requested frame height in pixels.
        fps:          Requested frame rate.
        fourcc:       Requested pixel format, e.g. "MJPG".
        video_capture_factory: Callable returning a cv2.VideoCapture-like
                      object for a device index.
    """

    def __init__(
        self,
        device_index: int = 0,
        width: int = 160,
        height: int = 120,
        fps: int = 10,
        fourcc: str = "MJPG",
        video_capture_factory: Optional[Callable[[int], object]] = None,
    ):
        self._device_index = device_index
        self._width = width
        self._height = height
        self._fps = fps
        self._fourcc = fourcc
        self._factory = video_capture_factory or cv2.VideoCapture
        self._cap = None
        self._released = False
        self.settings: Optional[CaptureSettings] = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None and not self._released

    def open(self) -> CaptureSettings:
        """
        Open the device and request the configured format.

        Returns:
            CaptureSettings: What the driver reports after the requests.

        Raises:
            CaptureOpenError: If the device cannot be opened.
        """
        if self.is_open:
            return self.settings

        cap = self._factory(self._device_index)
        if not cap.isOpened():
            cap.release()
            raise CaptureOpenError(f"Cannot open video device {self._device_index}")

        self._cap = cap
        self._released = False

        # Unsupported values are silently ignored by the driver
        cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*self._fourcc))
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        cap.set(cv2.CAP_PROP_FPS, self._fps)

        self.settings = CaptureSettings(
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=float(cap.get(cv2.CAP_PROP_FPS)),
            fourcc=_decode_fourcc(cap.get(cv2.CAP_PROP_FOURCC)),
        )

        logger.info(
            "Opened video device %d: requested %dx%d@%d %s, negotiated %dx%d@%.1f %s",
            self._device_index,
            self._width, self._height, self._fps, self._fourcc,
            self.settings.width, self.settings.height,
            self.settings.fps, self.settings.fourcc or "?",
        )
        if (self.settings.width, self.settings.height) != (self._width, self._height):
            logger.debug("Device ignored the requested resolution.")
        return self.settings

    def read(self) -> np.ndarray:
        """
        Read a single frame.

        Returns:
            numpy.ndarray: The BGR frame.

        Raises:
            CaptureReadFailure: If the device is not open or the read fails.
        """
        if not self.is_open:
            raise CaptureReadFailure("Video device is not open")
        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise CaptureReadFailure(f"Failed to read frame from device {self._device_index}")
        return frame

    def release(self) -> None:
        """Release the device handle if it is still held."""
        if self._cap is None or self._released:
            return
        self._released = True
        self._cap.release()
        logger.info("Released video device %d.", self._device_index)

    def __enter__(self) -> "WebcamCapture":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
