"""
Process-wide configuration, resolved once at startup from the environment.

Nothing below the app module reads os.environ; the resulting Settings value
is passed to the engine provisioner and the request handler.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


class EngineStrategy(str, Enum):
    LOCAL = "local"
    SANDBOXED = "sandboxed"
    REMOTE = "remote"


@dataclass(frozen=True)
class Settings:
    render_engine: EngineStrategy = EngineStrategy.LOCAL
    remote_browser_endpoint: str | None = None
    chrome_executable_path: str | None = None
    chromium_executable_path: str | None = None
    engine_acquire_timeout_s: float = 15.0
    pdf_capture_timeout_s: float = 30.0
    engine_close_timeout_s: float = 5.0
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    log_level: str = "INFO"
    version: str = "unknown"


def _clean(environ: Mapping[str, str], key: str) -> str | None:
    value = (environ.get(key) or "").strip()
    return value or None


def _positive_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = _clean(environ, key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {raw!r}")
    return value


def resolve_engine_strategy(environ: Mapping[str, str]) -> EngineStrategy:
    """
    Explicit RENDER_ENGINE wins. Otherwise a configured remote endpoint means
    remote, an AWS runtime means the sandboxed bundle, and anything else is a
    developer machine with Chrome installed.
    """
    explicit = _clean(environ, "RENDER_ENGINE")
    if explicit:
        try:
            return EngineStrategy(explicit.lower())
        except ValueError:
            allowed = ", ".join(s.value for s in EngineStrategy)
            raise ValueError(f"RENDER_ENGINE must be one of {allowed}, got {explicit!r}") from None
    if _clean(environ, "REMOTE_BROWSER_ENDPOINT"):
        return EngineStrategy.REMOTE
    if _clean(environ, "AWS_REGION") or _clean(environ, "AWS_LAMBDA_FUNCTION_NAME"):
        return EngineStrategy.SANDBOXED
    return EngineStrategy.LOCAL


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    strategy = resolve_engine_strategy(env)
    endpoint = _clean(env, "REMOTE_BROWSER_ENDPOINT")
    if strategy is EngineStrategy.REMOTE and not endpoint:
        raise ValueError("RENDER_ENGINE=remote requires REMOTE_BROWSER_ENDPOINT")

    origins_env = _clean(env, "ALLOWED_ORIGINS")
    if origins_env:
        origins = tuple(o.strip() for o in origins_env.split(",") if o.strip())
    else:
        origins = DEFAULT_ALLOWED_ORIGINS

    return Settings(
        render_engine=strategy,
        remote_browser_endpoint=endpoint,
        chrome_executable_path=_clean(env, "CHROME_EXECUTABLE_PATH"),
        chromium_executable_path=_clean(env, "CHROMIUM_EXECUTABLE_PATH"),
        engine_acquire_timeout_s=_positive_float(env, "ENGINE_ACQUIRE_TIMEOUT_S", 15.0),
        pdf_capture_timeout_s=_positive_float(env, "PDF_CAPTURE_TIMEOUT_S", 30.0),
        engine_close_timeout_s=_positive_float(env, "ENGINE_CLOSE_TIMEOUT_S", 5.0),
        allowed_origins=origins,
        log_level=(_clean(env, "LOG_LEVEL") or "INFO").upper(),
        version=_clean(env, "RENDER_GIT_COMMIT") or "unknown",
    )
