# =============================================================================
# Pi Camera VLM Logger - Centralized Configuration
# =============================================================================
# Provides a single Config dataclass containing all tunable parameters for
# the webcam capture loop and the inference client. Parameters are
# overridable via environment variables with the PIVLM_ prefix
# (e.g., PIVLM_SAMPLE_INTERVAL=5).
# =============================================================================

import os
from dataclasses import dataclass, fields
from typing import Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_bool(value: str) -> bool:
    """
    Interpret an environment variable string as a boolean.

    Args:
        value: Raw string such as "1", "true", "no".

    Returns:
        True for 1/true/yes/on (case-insensitive), False otherwise.
    """
    return value.strip().lower() in _TRUE_VALUES


def _optional_str(value: str) -> Optional[str]:
    """
    Interpret an environment variable string as an optional value.

    Args:
        value: Raw string; an empty string means "unset".

    Returns:
        The string, or None if it is empty.
    """
    return value or None


@dataclass
class Config:
    """
    Centralized configuration for the Pi Camera VLM Logger.

    All fields can be overridden via environment variables prefixed with PIVLM_.
    """

    # -- Webcam Capture (best-effort hints, the device may ignore them) --
    device_index: int = 0
    frame_width: int = 160
    frame_height: int = 120
    frame_rate: int = 10
    capture_fourcc: str = "MJPG"

    # -- Sampling --
    sample_interval: int = 10  # Submit every Nth frame
    tick_interval_seconds: float = 0.2

    # -- Encoding --
    jpeg_quality: int = 80

    # -- Inference Server --
    server_url: str = "http://localhost:8080"
    model_name: str = "SmolVLM-500M-Instruct"
    api_key: Optional[str] = None
    instruction: str = "What do you see?"
    max_tokens: int = 100
    request_timeout_seconds: float = 30.0
    wait_for_server: bool = False
    health_timeout_seconds: float = 60.0

    # -- Output --
    output_path: str = "output.txt"
    show_preview: bool = False

    def __post_init__(self):
        """Apply environment variable overrides and validate."""
        self._apply_env_overrides()
        self.server_url = self.server_url.rstrip("/")
        self.validate()

    def _apply_env_overrides(self):
        """
        Override config fields from environment variables.

        Looks for PIVLM_<FIELD_NAME_UPPERCASE> environment variables and
        applies them with appropriate type conversion.
        """
        field_types = {
            "device_index": int,
            "frame_width": int,
            "frame_height": int,
            "frame_rate": int,
            "capture_fourcc": str,
            "sample_interval": int,
            "tick_interval_seconds": float,
            "jpeg_quality": int,
            "server_url": str,
            "model_name": str,
            "api_key": _optional_str,
            "instruction": str,
            "max_tokens": int,
            "request_timeout_seconds": float,
            "wait_for_server": _parse_bool,
            "health_timeout_seconds": float,
            "output_path": str,
            "show_preview": _parse_bool,
        }
        for field_name, field_type in field_types.items():
            env_key = f"PIVLM_{field_name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is not None:
                setattr(self, field_name, field_type(env_value))

    def validate(self):
        """
        Check value ranges.

        Called after env overrides and again by the CLI after flag overrides.

        Raises:
            ValueError: If any field is out of range.
        """
        if self.sample_interval < 1:
            raise ValueError(f"sample_interval must be >= 1, got {self.sample_interval}")
        if not 0 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be within 0..100, got {self.jpeg_quality}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be >= 1, got {self.max_tokens}")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.tick_interval_seconds < 0:
            raise ValueError("tick_interval_seconds must not be negative")
        if len(self.capture_fourcc) != 4:
            raise ValueError(f"capture_fourcc must be 4 characters, got {self.capture_fourcc!r}")

    def describe(self) -> dict:
        """Return the settings as a dict with the API key masked."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        if values.get("api_key"):
            values["api_key"] = "***"
        return values


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Return the singleton Config instance, creating it on first call.

    Returns:
        Config: The global configuration object.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance
