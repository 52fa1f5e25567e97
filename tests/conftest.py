import json
import os

import numpy as np
import pytest
import requests

from config import Config


class FakeVideoCapture:
    """Stands in for cv2.VideoCapture: yields ``frames`` then fails reads."""

    def __init__(self, frames=(), opened=True, supported=None, interrupt_after=None, on_read=None):
        self._frames = list(frames)
        self._opened = opened
        self._supported = supported
        self._interrupt_after = interrupt_after
        self._on_read = on_read
        self.props = {}
        self.set_calls = []
        self.reads = 0
        self.release_count = 0

    def isOpened(self):
        return self._opened

    def set(self, prop, value):
        self.set_calls.append((prop, value))
        if self._supported is None or prop in self._supported:
            self.props[prop] = value
            return True
        return False

    def get(self, prop):
        return float(self.props.get(prop, 0.0))

    def read(self):
        self.reads += 1
        if self._on_read is not None:
            self._on_read(self.reads)
        if self._interrupt_after is not None and self.reads > self._interrupt_after:
            raise KeyboardInterrupt
        if not self._frames:
            return False, None
        return True, self._frames.pop(0)

    def release(self):
        self.release_count += 1


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Minimal requests.Session replacement recording POST calls."""

    def __init__(self, responses=None, error=None):
        self.headers = {}
        self.posts = []
        self.gets = []
        self._responses = list(responses or [])
        self._error = error

    def _next(self):
        if self._error is not None:
            raise self._error
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    def post(self, url, json=None, timeout=None):
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        return self._next()

    def get(self, url, timeout=None):
        self.gets.append(url)
        return self._next()


def completion(content):
    return {
        "id": "chatcmpl-1",
        "model": "test-model",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 3},
    }


def make_frame(value=0, width=16, height=12):
    frame = np.full((height, width, 3), value, dtype=np.uint8)
    frame[:, : width // 2, 0] = 255
    return frame


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PIVLM_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config(tmp_path):
    return Config(
        sample_interval=10,
        tick_interval_seconds=0.0,
        output_path=str(tmp_path / "output.txt"),
        server_url="http://vlm.test:8080",
        model_name="test-model",
    )


@pytest.fixture
def frames():
    return [make_frame(i % 256) for i in range(25)]


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
