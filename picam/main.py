# =============================================================================
# Pi Camera VLM Logger - Reporter Orchestrator
# =============================================================================
# Entry point for the webcam reporter.  A single control loop:
#   1. Read a frame from the webcam (a failed read ends the loop)
#   2. Count it; every Nth frame is selected for submission
#   3. JPEG-encode the selected frame and wrap it as a base64 data URI
#   4. POST it to the chat-completions endpoint and wait for the answer
#   5. Append the description to the log file
#   6. Wait a fixed tick interval and repeat
# Encode, network and parse failures are reported and skipped; the device is released
# exactly once on every exit path.
# =============================================================================

import argparse
import logging
import signal
import sys
import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import Config, get_config
from picam.capture import WebcamCapture
from picam.client import InferenceClient
from picam.display import PreviewWindow
from picam.encoding import encode_frame_data_uri
from picam.errors import (
    CaptureReadFailure,
    FrameEncodeError,
    NetworkFailure,
    PiCamError,
    ResponseParseFailure,
    ServerUnavailable,
)
from picam.log_writer import DescriptionLog
from picam.sampler import FrameSampler

logger = logging.getLogger(__name__)

# Longest raw response body echoed into a failure report
_MAX_BODY_CHARS = 500


@dataclass
class RunSummary:
    """Counters reported when the loop ends."""

    frames_read: int = 0
    submissions: int = 0
    successes: int = 0
    failures: int = 0
    stop_reason: Optional[str] = None


def _body_suffix(exc) -> str:
    """
    Format the raw response body of an inference error for a log line.

    Args:
        exc: An InferenceError, possibly carrying ``body``.

    Returns:
        str: "" when there is no body, otherwise " | response body: ..."
             truncated to _MAX_BODY_CHARS.
    """
    if not exc.body:
        return ""
    body = exc.body if len(exc.body) <= _MAX_BODY_CHARS else exc.body[:_MAX_BODY_CHARS] + "..."
    return f" | response body: {body}"


class ReporterPipeline:
    """
    Owns the capture device, frame counter, client and log for one run.

    Components not passed in are built from the config.

    Args:
        config:          The Config instance with all tunable parameters.
        capture:         Webcam wrapper (opened by ``run()``).
        client:          Inference HTTP client.
        description_log: Append-only output log.
        preview:         Optional preview window / quit-key poller.
        stop_event:      Event that ends the loop and cuts the inter-tick
                         wait short when set.
    """

    def __init__(
        self,
        config: Config,
        capture: Optional[WebcamCapture] = None,
        client: Optional[InferenceClient] = None,
        description_log: Optional[DescriptionLog] = None,
        preview: Optional[PreviewWindow] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        self._config = config
        self._sampler = FrameSampler(config.sample_interval)
        self._stop_event = stop_event or threading.Event()
        self._summary = RunSummary()

        self._capture = capture or WebcamCapture(
            device_index=config.device_index,
            width=config.frame_width,
            height=config.frame_height,
            fps=config.frame_rate,
            fourcc=config.capture_fourcc,
        )
        self._client = client or InferenceClient(
            server_url=config.server_url,
            model=config.model_name,
            instruction=config.instruction,
            max_tokens=config.max_tokens,
            timeout_seconds=config.request_timeout_seconds,
            api_key=config.api_key,
        )
        self._log = description_log or DescriptionLog(config.output_path)
        self._preview = preview or PreviewWindow(enabled=config.show_preview)

    @property
    def summary(self) -> RunSummary:
        return self._summary

    # -----------------------------------------------------------------
    # Single tick
    # -----------------------------------------------------------------

    def step(self) -> bool:
        """
        Run one tick: read, count, maybe submit, poll the quit key.

        Returns:
            False if the quit key was pressed, True otherwise.

        Raises:
            CaptureReadFailure: If the frame read fails.
        """
        frame = self._capture.read()
        self._summary.frames_read += 1

        if self._sampler.tick():
            self._submit(frame)

        if self._preview.show(frame):
            logger.info("Quit key pressed.")
            return False
        return True

    def _submit(self, frame: np.ndarray) -> None:
        """Encode, send and record one selected frame; failures are reported."""
        frame_number = self._sampler.count
        self._summary.submissions += 1

        try:
            image_uri = encode_frame_data_uri(frame, self._config.jpeg_quality)
        except FrameEncodeError as exc:
            self._summary.failures += 1
            logger.error("Skipping frame %d: %s", frame_number, exc)
            return

        try:
            description = self._client.describe(image_uri)
        except NetworkFailure as exc:
            self._summary.failures += 1
            logger.error(
                "Inference request failed for frame %d: %s%s",
                frame_number, exc, _body_suffix(exc),
            )
            return
        except ResponseParseFailure as exc:
            self._summary.failures += 1
            logger.warning(
                "No valid response for frame %d: %s%s",
                frame_number, exc, _body_suffix(exc),
            )
            return

        line = self._log.append(description)
        self._summary.successes += 1
        logger.info("Frame %d → %s", frame_number, line)

    # -----------------------------------------------------------------
    # Loop control
    # -----------------------------------------------------------------

    def run(self) -> RunSummary:
        """
        Open the device and run the control loop until it stops.

        Returns:
            RunSummary: Counters and the reason the loop ended.

        Raises:
            CaptureOpenError:  If the device cannot be opened.
            ServerUnavailable: If waiting for the server timed out.
        """
        self._print_banner()

        try:
            if self._config.wait_for_server and not self._client.wait_for_server(
                timeout=self._config.health_timeout_seconds
            ):
                raise ServerUnavailable(f"Server at {self._config.server_url} is not available")

            self._capture.open()
            logger.info("Starting capture loop; press Ctrl+C to stop.")

            while not self._stop_event.is_set():
                if not self.step():
                    self._summary.stop_reason = "quit_key"
                    break
                self._stop_event.wait(timeout=self._config.tick_interval_seconds)
            else:
                self._summary.stop_reason = "stopped"

        except CaptureReadFailure as exc:
            logger.error("Capture read failed, stopping: %s", exc)
            self._summary.stop_reason = "read_failure"
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received. Shutting down...")
            self._summary.stop_reason = "interrupted"
        finally:
            self.close()

        logger.info(
            "Reporter stopped (%s): %d frames read, %d submitted, %d described, %d failed.",
            self._summary.stop_reason,
            self._summary.frames_read,
            self._summary.submissions,
            self._summary.successes,
            self._summary.failures,
        )
        return self._summary

    def stop(self) -> None:
        """Ask the loop to exit after the current tick."""
        self._stop_event.set()

    def close(self) -> None:
        """Release the capture device and preview window."""
        self._capture.release()
        self._preview.close()

    def _print_banner(self) -> None:
        config = self._config
        print("\n" + "=" * 60)
        print("  Pi Camera VLM Logger")
        print("=" * 60)
        print(f"  Device      : {config.device_index} "
              f"({config.frame_width}x{config.frame_height}@{config.frame_rate} {config.capture_fourcc})")
        print(f"  Every Nth   : {config.sample_interval}")
        print(f"  JPEG quality: {config.jpeg_quality}")
        print(f"  Server      : {config.server_url}")
        print(f"  Model       : {config.model_name}")
        print(f"  Max tokens  : {config.max_tokens}")
        print(f"  Output      : {config.output_path}")
        print("=" * 60 + "\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser; every flag defaults to None so config values win."""
    parser = argparse.ArgumentParser(
        description="Pi Camera VLM Logger: describe webcam frames with a local VLM server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--device", type=int, default=None, help="Video device index")
    parser.add_argument(
        "--server-url", type=str, default=None,
        help="Server base URL (e.g., http://localhost:8080)",
    )
    parser.add_argument(
        "--interval", type=int, default=None,
        help="Submit every Nth frame (overrides config)",
    )
    parser.add_argument("--quality", type=int, default=None, help="JPEG quality (0-100)")
    parser.add_argument("--max-tokens", type=int, default=None, help="Max generated tokens")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--instruction", type=str, default=None, help="Prompt sent with each frame")
    parser.add_argument("--output", type=str, default=None, help="Description log file")
    parser.add_argument(
        "--preview", action="store_true",
        help="Show a preview window; press 'q' in it to quit",
    )
    parser.add_argument(
        "--wait-for-server", action="store_true",
        help="Poll the server's /health endpoint before starting",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Apply CLI flag overrides on top of the env-configured settings."""
    overrides = {
        "device_index": args.device,
        "server_url": args.server_url,
        "sample_interval": args.interval,
        "jpeg_quality": args.quality,
        "max_tokens": args.max_tokens,
        "request_timeout_seconds": args.timeout,
        "instruction": args.instruction,
        "output_path": args.output,
    }
    for field_name, value in overrides.items():
        if value is not None:
            setattr(config, field_name, value)
    if args.preview:
        config.show_preview = True
    if args.wait_for_server:
        config.wait_for_server = True
    config.server_url = config.server_url.rstrip("/")
    config.validate()
    return config


def main(argv=None):
    """CLI entry point for the webcam reporter."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = apply_args(get_config(), args)
    except ValueError as exc:
        parser.error(str(exc))
    logger.debug("Effective config: %s", config.describe())

    pipeline = ReporterPipeline(config)
    signal.signal(signal.SIGTERM, lambda signum, frame: pipeline.stop())

    try:
        summary = pipeline.run()
    except PiCamError as exc:
        logger.error("%s. Exiting.", exc)
        sys.exit(1)

    if summary.stop_reason == "read_failure":
        sys.exit(1)


if __name__ == "__main__":
    main()
