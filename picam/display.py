# =============================================================================
# Pi Camera VLM Logger - Preview Window
# =============================================================================
# Optional live preview with a quit key.  When disabled (the default, and the
# only sensible mode on a headless Pi) every call is a no-op.
# =============================================================================

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class PreviewWindow:
    """
    OpenCV preview window polled once per tick.

    Args:
        enabled:     Show frames and poll the keyboard.
        window_name: Title of the HighGUI window.
        quit_key:    Key that requests the loop to stop.
    """

    def __init__(self, enabled: bool = False, window_name: str = "Camera", quit_key: str = "q"):
        self._enabled = enabled
        self._window_name = window_name
        self._quit_code = ord(quit_key)
        self._opened = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def show(self, frame: np.ndarray) -> bool:
        """
        Display a frame and poll for the quit key.

        Returns:
            True if the quit key was pressed.
        """
        if not self._enabled:
            return False
        cv2.imshow(self._window_name, frame)
        self._opened = True
        return cv2.waitKey(1) & 0xFF == self._quit_code

    def close(self) -> None:
        """Destroy the window if one was opened."""
        if not self._opened:
            return
        self._opened = False
        cv2.destroyAllWindows()
        logger.debug("Preview window closed.")
