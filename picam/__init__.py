# =============================================================================
# Pi Camera VLM Logger - Client Package
# =============================================================================
# This package contains the components of the webcam reporter: OpenCV frame
# capture, frame sampling, JPEG encoding, the chat-completions HTTP client,
# and the append-only description log.
# =============================================================================
