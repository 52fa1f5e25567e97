import pytest

import config as config_module
from config import Config, get_config


def test_defaults():
    cfg = Config()
    assert cfg.device_index == 0
    assert (cfg.frame_width, cfg.frame_height, cfg.frame_rate) == (160, 120, 10)
    assert cfg.capture_fourcc == "MJPG"
    assert cfg.sample_interval == 10
    assert cfg.jpeg_quality == 80
    assert cfg.max_tokens == 100
    assert cfg.request_timeout_seconds == 30.0
    assert cfg.tick_interval_seconds == 0.2
    assert cfg.output_path == "output.txt"
    assert cfg.show_preview is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PIVLM_SAMPLE_INTERVAL", "5")
    monkeypatch.setenv("PIVLM_REQUEST_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("PIVLM_SERVER_URL", "http://pi.local:8080/")
    monkeypatch.setenv("PIVLM_SHOW_PREVIEW", "yes")
    monkeypatch.setenv("PIVLM_WAIT_FOR_SERVER", "off")
    monkeypatch.setenv("PIVLM_API_KEY", "")

    cfg = Config()

    assert cfg.sample_interval == 5
    assert cfg.request_timeout_seconds == 12.5
    assert cfg.server_url == "http://pi.local:8080"
    assert cfg.show_preview is True
    assert cfg.wait_for_server is False
    assert cfg.api_key is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"sample_interval": 0},
        {"jpeg_quality": 101},
        {"jpeg_quality": -1},
        {"max_tokens": 0},
        {"request_timeout_seconds": 0},
        {"tick_interval_seconds": -0.1},
        {"capture_fourcc": "MJPEG"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        Config(**overrides)


def test_invalid_env_value_rejected(monkeypatch):
    monkeypatch.setenv("PIVLM_SAMPLE_INTERVAL", "0")
    with pytest.raises(ValueError):
        Config()


def test_describe_masks_api_key():
    values = Config(api_key="secret").describe()
    assert values["api_key"] == "***"
    assert values["sample_interval"] == 10


def test_get_config_is_a_singleton(monkeypatch):
    monkeypatch.setattr(config_module, "_config_instance", None)
    assert get_config() is get_config()
