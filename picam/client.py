# =============================================================================
# Pi Camera VLM Logger - Inference HTTP Client
# =============================================================================
# Provides the InferenceClient class that submits a base64 JPEG frame to an
# OpenAI-compatible chat-completions endpoint and extracts the generated
# description.  One request per call, no retries: a failed submission is
# reported to the caller and the next sampled frame is the only retry.
# =============================================================================

import logging
import time
from typing import Optional

import requests
from pydantic import ValidationError

from picam.errors import NetworkFailure, ResponseParseFailure
from shared.schemas import ChatCompletionRequest, ChatCompletionResponse

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
HEALTH_PATH = "/health"


class InferenceClient:
    """
    HTTP client for the vision-language-model server.

    Args:
        server_url:      Base URL of the server (e.g., "http://localhost:8080").
        model:           Model name sent with every request.
        instruction:     Text prompt paired with each image.
        max_tokens:      Generated-token bound per request.
        timeout_seconds: Per-request timeout.
        api_key:         Optional bearer token.
        session:         Optional requests.Session (or compatible) to use.
    """

    def __init__(
        self,
        server_url: str,
        model: str,
        instruction: str,
        max_tokens: int = 100,
        timeout_seconds: float = 30.0,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self._server_url = server_url.rstrip("/")
        self._model = model
        self._instruction = instruction
        self._max_tokens = max_tokens
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self._session.headers.update({"Authorization": f"Bearer {api_key}"})

    @property
    def endpoint(self) -> str:
        return f"{self._server_url}{CHAT_COMPLETIONS_PATH}"

    def build_payload(self, image_data_uri: str) -> dict:
        """
        Build a fresh request body for one image.

        Args:
            image_data_uri: ``data:image/jpeg;base64,...`` string.

        Returns:
            dict: JSON-serializable chat-completions body.
        """
        request = ChatCompletionRequest.for_image(
            model=self._model,
            instruction=self._instruction,
            image_data_uri=image_data_uri,
            max_tokens=self._max_tokens,
        )
        return request.model_dump()

    def describe(self, image_data_uri: str) -> str:
        """
        Submit one image and return the generated description.

        Args:
            image_data_uri: The encoded frame as a data URI.

        Returns:
            str: The non-empty description text.

        Raises:
            NetworkFailure:       Timeout, connection error, or non-2xx status.
            ResponseParseFailure: Body is not JSON or lacks choices/message/content.
        """
        payload = self.build_payload(image_data_uri)
        payload_kb = len(image_data_uri) // 1024
        start = time.monotonic()

        try:
            response = self._session.post(self.endpoint, json=payload, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkFailure(f"Request timed out after {self._timeout}s: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkFailure(f"Request failed: {exc}") from exc

        body = response.text
        if not 200 <= response.status_code < 300:
            raise NetworkFailure(
                f"HTTP {response.status_code} from {self.endpoint}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseParseFailure("Response body is not valid JSON", body=body) from exc

        description = self.extract_description(data, body)
        logger.debug(
            "Server responded in %.0fms (%d KB payload)",
            (time.monotonic() - start) * 1000, payload_kb,
        )
        return description

    @staticmethod
    def extract_description(data, body: Optional[str] = None) -> str:
        """
        Pull ``choices[0].message.content`` out of a parsed response.

        Args:
            data: Parsed JSON body.
            body: Raw body text, attached to any raised error.

        Raises:
            ResponseParseFailure: If the expected fields are absent or empty.
        """
        try:
            parsed = ChatCompletionResponse.model_validate(data)
        except ValidationError as exc:
            raise ResponseParseFailure(
                f"Unexpected response shape: {exc.error_count()} validation error(s)",
                body=body,
            ) from exc

        if not parsed.choices:
            raise ResponseParseFailure("Response contained no choices", body=body)

        text = parsed.choices[0].message.text()
        if not text:
            raise ResponseParseFailure("First choice has empty content", body=body)
        return text

    def wait_for_server(self, timeout: float = 60.0, poll_interval: float = 2.0) -> bool:
        """
        Block until the server's /health endpoint answers 200.

        Args:
            timeout:       Maximum seconds to wait for the server.
            poll_interval: Seconds between health check polls.

        Returns:
            True if the server is ready, False if timeout expired.
        """
        url = f"{self._server_url}{HEALTH_PATH}"
        start = time.monotonic()

        logger.info("Waiting for server at %s (timeout=%ds)...", url, timeout)

        while (time.monotonic() - start) < timeout:
            try:
                response = self._session.get(url, timeout=5)
                if response.status_code == 200:
                    logger.info("Server is ready.")
                    return True
                # llama-server answers 503 while the model is loading
                logger.info("Server responded %d, not ready yet...", response.status_code)
            except requests.exceptions.RequestException:
                logger.debug("Server not reachable yet...")

            time.sleep(poll_interval)

        logger.error("Timed out waiting for server after %ds.", timeout)
        return False
