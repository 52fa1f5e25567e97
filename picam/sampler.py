# =============================================================================
# Pi Camera VLM Logger - Frame Sampler
# =============================================================================
# Decides which captured frames are submitted for inference: every Nth
# successfully read frame, counted from 1.
# =============================================================================


class FrameSampler:
    """
    Monotonic frame counter selecting every Nth frame.

    Args:
        interval: N; a frame is selected when ``count % N == 0``.
    """

    def __init__(self, interval: int = 10):
        if interval < 1:
            raise ValueError(f"Sample interval must be >= 1, got {interval}")
        self._interval = interval
        self._count = 0

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def count(self) -> int:
        """Number of frames seen so far."""
        return self._count

    def tick(self) -> bool:
        """
        Record one read frame.

        Returns:
            True if this frame should be submitted.
        """
        self._count += 1
        return self._count % self._interval == 0
