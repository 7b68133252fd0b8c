from __future__ import annotations

import pytest

from settings import DEFAULT_ALLOWED_ORIGINS, EngineStrategy, load_settings, resolve_engine_strategy


def test_defaults_for_empty_environment():
    settings = load_settings({})
    assert settings.render_engine is EngineStrategy.LOCAL
    assert settings.remote_browser_endpoint is None
    assert settings.engine_acquire_timeout_s == 15.0
    assert settings.pdf_capture_timeout_s == 30.0
    assert settings.engine_close_timeout_s == 5.0
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS
    assert settings.log_level == "INFO"
    assert settings.version == "unknown"


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({"AWS_REGION": "us-east-1"}, EngineStrategy.SANDBOXED),
        ({"AWS_LAMBDA_FUNCTION_NAME": "match-card"}, EngineStrategy.SANDBOXED),
        ({"REMOTE_BROWSER_ENDPOINT": "ws://browser:3000", "AWS_REGION": "us-east-1"}, EngineStrategy.REMOTE),
        ({"RENDER_ENGINE": "Local", "AWS_REGION": "us-east-1"}, EngineStrategy.LOCAL),
        ({"RENDER_ENGINE": "sandboxed"}, EngineStrategy.SANDBOXED),
        ({"AWS_REGION": "   "}, EngineStrategy.LOCAL),
    ],
)
def test_engine_strategy_resolution(environ, expected):
    assert resolve_engine_strategy(environ) is expected


def test_unknown_engine_rejected():
    with pytest.raises(ValueError, match="RENDER_ENGINE"):
        load_settings({"RENDER_ENGINE": "firefox"})


def test_remote_without_endpoint_rejected():
    with pytest.raises(ValueError, match="REMOTE_BROWSER_ENDPOINT"):
        load_settings({"RENDER_ENGINE": "remote"})


@pytest.mark.parametrize("value", ["0", "-1", "soon"])
def test_invalid_timeouts_rejected(value):
    with pytest.raises(ValueError, match="ENGINE_ACQUIRE_TIMEOUT_S"):
        load_settings({"ENGINE_ACQUIRE_TIMEOUT_S": value})


def test_values_parsed_from_environment():
    settings = load_settings(
        {
            "RENDER_ENGINE": "remote",
            "REMOTE_BROWSER_ENDPOINT": " ws://browser:3000 ",
            "CHROME_EXECUTABLE_PATH": "/opt/google/chrome/chrome",
            "CHROMIUM_EXECUTABLE_PATH": "/opt/chromium",
            "ENGINE_ACQUIRE_TIMEOUT_S": "2.5",
            "PDF_CAPTURE_TIMEOUT_S": "10",
            "ENGINE_CLOSE_TIMEOUT_S": "1.5",
            "ALLOWED_ORIGINS": "https://league.example, https://admin.league.example,",
            "LOG_LEVEL": "debug",
            "RENDER_GIT_COMMIT": "abc123",
        }
    )
    assert settings.render_engine is EngineStrategy.REMOTE
    assert settings.remote_browser_endpoint == "ws://browser:3000"
    assert settings.chrome_executable_path == "/opt/google/chrome/chrome"
    assert settings.chromium_executable_path == "/opt/chromium"
    assert settings.engine_acquire_timeout_s == 2.5
    assert settings.pdf_capture_timeout_s == 10.0
    assert settings.engine_close_timeout_s == 1.5
    assert settings.allowed_origins == ("https://league.example", "https://admin.league.example")
    assert settings.log_level == "DEBUG"
    assert settings.version == "abc123"


def test_invalid_close_timeout_rejected():
    with pytest.raises(ValueError, match="ENGINE_CLOSE_TIMEOUT_S"):
        load_settings({"ENGINE_CLOSE_TIMEOUT_S": "0"})
