"""
Rendering engine provisioning: one strategy per deployment environment.

- LocalBinaryProvisioner: developer machine, installed Google Chrome.
- SandboxedBinaryProvisioner: managed/serverless runtime, Playwright's bundled
  Chromium with sandbox-safe launch flags.
- RemoteServiceProvisioner: an already-running browser reached over CDP; the
  connection is shared, every acquisition gets its own browser context.

The strategy is picked once by build_provisioner() at startup.
"""
from __future__ import annotations

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from errors import ProvisionError, ProvisionFailure
from settings import EngineStrategy, Settings

from .handles import DEFAULT_CLOSE_TIMEOUT_S, EngineHandle, bounded_close

_LOG = logging.getLogger(__name__)

DEFAULT_CHROME_PATHS = {
    "win32": "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    "linux": "/usr/bin/google-chrome",
    "darwin": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
}

# No GPU, no zygote/sandbox helpers, /tmp instead of /dev/shm.
SANDBOX_CHROMIUM_ARGS = (
    "--allow-running-insecure-content",
    "--autoplay-policy=user-gesture-required",
    "--disable-background-networking",
    "--disable-component-update",
    "--disable-default-apps",
    "--disable-dev-shm-usage",
    "--disable-domain-reliability",
    "--disable-extensions",
    "--disable-gpu",
    "--disable-setuid-sandbox",
    "--disable-sync",
    "--font-render-hinting=none",
    "--hide-scrollbars",
    "--mute-audio",
    "--no-default-browser-check",
    "--no-first-run",
    "--no-pings",
    "--no-sandbox",
    "--no-zygote",
    "--single-process",
)

_ACQUIRE_ERRORS = (PlaywrightError, asyncio.TimeoutError, OSError)

PlaywrightFactory = Callable[[], Any]

# Strong references to cleanups scheduled for work that finished after its caller gave up.
_PENDING_CLEANUPS: set[asyncio.Task] = set()


def default_chrome_path(platform: str | None = None) -> str:
    platform = platform or sys.platform
    if platform.startswith("win"):
        return DEFAULT_CHROME_PATHS["win32"]
    if platform.startswith("linux"):
        return DEFAULT_CHROME_PATHS["linux"]
    return DEFAULT_CHROME_PATHS["darwin"]


async def _stop_driver(playwright: Any) -> None:
    try:
        await playwright.stop()
    except PlaywrightError as e:
        _LOG.warning("Playwright driver stop failed: %s", e)


async def _close_orphan(target: Any) -> None:
    try:
        await target.close()
    except PlaywrightError as e:
        _LOG.warning("Orphaned browser resource close failed: %s", e)


async def _await_or_release(
    awaitable: Awaitable[Any],
    release: Callable[[Any], Awaitable[None]],
    *,
    timeout_s: float | None = None,
) -> Any:
    """
    Await a resource-creating call without cancelling it.

    If the caller times out or is cancelled while the call is in flight, the
    call is left to finish and whatever it produces is handed to release().
    """
    task = asyncio.ensure_future(awaitable)
    try:
        if timeout_s is None:
            return await asyncio.shield(task)
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout_s)
    except BaseException:
        if not task.done() or (not task.cancelled() and task.exception() is None):
            task.add_done_callback(lambda t: _release_late_result(t, release))
        raise


def _release_late_result(task: asyncio.Task, release: Callable[[Any], Awaitable[None]]) -> None:
    if task.cancelled() or task.exception() is not None:
        return
    cleanup = asyncio.ensure_future(release(task.result()))
    _PENDING_CLEANUPS.add(cleanup)
    cleanup.add_done_callback(_PENDING_CLEANUPS.discard)


class EngineProvisioner(ABC):
    strategy: EngineStrategy

    def __init__(
        self,
        *,
        acquire_timeout_s: float,
        close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        self.acquire_timeout_s = acquire_timeout_s
        self.close_timeout_s = close_timeout_s
        self._playwright_factory = playwright_factory

    @property
    def _timeout_ms(self) -> float:
        return self.acquire_timeout_s * 1000

    async def _start_driver(self, *, timeout_s: float | None = None) -> Any:
        """Start a Playwright driver; one that comes up after the caller gave up is stopped."""
        return await _await_or_release(self._playwright_factory().start(), _stop_driver, timeout_s=timeout_s)

    @abstractmethod
    async def acquire(self) -> EngineHandle:
        """Return a ready engine or raise ProvisionError within acquire_timeout_s."""

    async def aclose(self) -> None:
        """Release process-wide resources at shutdown."""


class _LaunchingProvisioner(EngineProvisioner):
    """Starts a Playwright driver and a Chromium process for every acquisition."""

    def __init__(
        self,
        *,
        executable_path: str | None,
        args: Sequence[str] = (),
        acquire_timeout_s: float,
        close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        super().__init__(
            acquire_timeout_s=acquire_timeout_s,
            close_timeout_s=close_timeout_s,
            playwright_factory=playwright_factory,
        )
        self.executable_path = executable_path
        self.args = tuple(args)

    def _check_executable(self) -> None:
        if self.executable_path and not Path(self.executable_path).is_file():
            raise ProvisionError(
                ProvisionFailure.LOCAL_UNAVAILABLE,
                f"browser executable not found at {self.executable_path}",
            )

    async def _launch(self, started: list[Any]) -> EngineHandle:
        playwright = await self._start_driver()
        started.append(playwright)
        launch_kwargs: dict[str, Any] = {
            "args": list(self.args),
            "headless": True,
            "timeout": self._timeout_ms,
        }
        if self.executable_path:
            launch_kwargs["executable_path"] = self.executable_path
        browser = await playwright.chromium.launch(**launch_kwargs)
        return EngineHandle(
            browser,
            label=self.strategy.value,
            on_close=playwright.stop,
            close_timeout_s=self.close_timeout_s,
        )

    async def acquire(self) -> EngineHandle:
        self._check_executable()
        started: list[Any] = []
        handle: EngineHandle | None = None
        try:
            handle = await asyncio.wait_for(self._launch(started), timeout=self.acquire_timeout_s)
        except _ACQUIRE_ERRORS as e:
            raise ProvisionError(
                ProvisionFailure.LOCAL_UNAVAILABLE,
                f"could not launch browser ({type(e).__name__}): {e}",
            ) from e
        finally:
            if handle is None:
                # Stopping the driver also kills any browser it launched.
                for playwright in started:
                    await _stop_driver(playwright)
        return handle


class LocalBinaryProvisioner(_LaunchingProvisioner):
    strategy = EngineStrategy.LOCAL

    def __init__(
        self,
        *,
        executable_path: str | None = None,
        acquire_timeout_s: float,
        close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        super().__init__(
            executable_path=executable_path or default_chrome_path(),
            args=(),
            acquire_timeout_s=acquire_timeout_s,
            close_timeout_s=close_timeout_s,
            playwright_factory=playwright_factory,
        )


class SandboxedBinaryProvisioner(_LaunchingProvisioner):
    strategy = EngineStrategy.SANDBOXED

    def __init__(
        self,
        *,
        executable_path: str | None = None,
        acquire_timeout_s: float,
        close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        super().__init__(
            executable_path=executable_path,
            args=SANDBOX_CHROMIUM_ARGS,
            acquire_timeout_s=acquire_timeout_s,
            close_timeout_s=close_timeout_s,
            playwright_factory=playwright_factory,
        )


class RemoteServiceProvisioner(EngineProvisioner):
    strategy = EngineStrategy.REMOTE

    def __init__(
        self,
        endpoint: str,
        *,
        acquire_timeout_s: float,
        close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S,
        playwright_factory: PlaywrightFactory = async_playwright,
    ):
        super().__init__(
            acquire_timeout_s=acquire_timeout_s,
            close_timeout_s=close_timeout_s,
            playwright_factory=playwright_factory,
        )
        self.endpoint = endpoint
        self._playwright: Any = None
        self._browser: Any = None
        self._lock = asyncio.Lock()

    async def _connected_browser(self) -> Any:
        async with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser
            if self._browser is not None:
                _LOG.warning("Remote browser at %s disconnected; reconnecting", self.endpoint)
                self._browser = None
            if self._playwright is None:
                self._playwright = await self._start_driver()
            self._browser = await _await_or_release(
                self._playwright.chromium.connect_over_cdp(self.endpoint, timeout=self._timeout_ms),
                _close_orphan,
            )
            _LOG.info("Connected to remote browser at %s", self.endpoint)
            return self._browser

    async def acquire(self) -> EngineHandle:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.acquire_timeout_s
        try:
            browser = await asyncio.wait_for(self._connected_browser(), timeout=self.acquire_timeout_s)
            # A context created after the deadline still exists remotely, so it is closed, not dropped.
            context = await _await_or_release(
                browser.new_context(),
                _close_orphan,
                timeout_s=max(deadline - loop.time(), 0),
            )
        except _ACQUIRE_ERRORS as e:
            raise ProvisionError(
                ProvisionFailure.REMOTE_UNREACHABLE,
                f"remote browser at {self.endpoint} unavailable ({type(e).__name__}): {e}",
            ) from e
        return EngineHandle(context, label=self.strategy.value, close_timeout_s=self.close_timeout_s)

    async def aclose(self) -> None:
        async with self._lock:
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None
        if browser is not None:
            await bounded_close(browser.close, self.close_timeout_s, "Remote browser disconnect")
        if playwright is not None:
            await bounded_close(playwright.stop, self.close_timeout_s, "Playwright driver stop")


def build_provisioner(settings: Settings, *, playwright_factory: PlaywrightFactory = async_playwright) -> EngineProvisioner:
    timeout = settings.engine_acquire_timeout_s
    close_timeout = settings.engine_close_timeout_s
    if settings.render_engine is EngineStrategy.REMOTE:
        if not settings.remote_browser_endpoint:
            raise ValueError("remote render engine requires remote_browser_endpoint")
        return RemoteServiceProvisioner(
            settings.remote_browser_endpoint,
            acquire_timeout_s=timeout,
            close_timeout_s=close_timeout,
            playwright_factory=playwright_factory,
        )
    if settings.render_engine is EngineStrategy.SANDBOXED:
        return SandboxedBinaryProvisioner(
            executable_path=settings.chromium_executable_path,
            acquire_timeout_s=timeout,
            close_timeout_s=close_timeout,
            playwright_factory=playwright_factory,
        )
    return LocalBinaryProvisioner(
        executable_path=settings.chrome_executable_path,
        acquire_timeout_s=timeout,
        close_timeout_s=close_timeout,
        playwright_factory=playwright_factory,
    )
