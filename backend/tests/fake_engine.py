"""In-memory stand-ins for Playwright objects and engine provisioners."""
from __future__ import annotations

import asyncio
from typing import Any

from playwright.async_api import Error as PlaywrightError

from engine.handles import EngineHandle
from engine.provisioner import EngineProvisioner
from errors import ProvisionError, ProvisionFailure
from settings import EngineStrategy

FAKE_PDF = b"%PDF-1.4\n% fake match card\n%%EOF\n"


class FakePage:
    def __init__(
        self,
        *,
        pdf_bytes: bytes = FAKE_PDF,
        pdf_error: Exception | None = None,
        hang_on_pdf: bool = False,
        hang_on_close: bool = False,
    ):
        self.pdf_bytes = pdf_bytes
        self.pdf_error = pdf_error
        self.hang_on_pdf = hang_on_pdf
        self.hang_on_close = hang_on_close
        self.content: str | None = None
        self.pdf_kwargs: dict[str, Any] | None = None
        self.media: str | None = None
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def set_content(self, html: str, **kwargs: Any) -> None:
        self.content = html

    async def emulate_media(self, media: str | None = None) -> None:
        self.media = media

    async def pdf(self, **kwargs: Any) -> bytes:
        self.pdf_kwargs = kwargs
        if self.hang_on_pdf:
            await asyncio.sleep(3600)
        if self.pdf_error is not None:
            raise self.pdf_error
        return self.pdf_bytes

    async def close(self) -> None:
        self.close_calls += 1
        if self.hang_on_close:
            await asyncio.sleep(3600)


class FakeBrowser:
    """Plays both Browser and BrowserContext: new_page(), new_context(), close()."""

    def __init__(self, **page_options: Any):
        self.page_options = page_options
        self.pages: list[FakePage] = []
        self.contexts: list[FakeBrowser] = []
        self.close_calls = 0
        self.connected = True
        self.hang_on_close = False
        self.context_delay_s = 0.0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def is_connected(self) -> bool:
        return self.connected

    async def new_page(self) -> FakePage:
        page = FakePage(**self.page_options)
        self.pages.append(page)
        return page

    async def new_context(self) -> "FakeBrowser":
        if self.context_delay_s:
            await asyncio.sleep(self.context_delay_s)
        context = FakeBrowser(**self.page_options)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_calls += 1
        if self.hang_on_close:
            await asyncio.sleep(3600)


class FakeChromium:
    def __init__(self, *, error: Exception | None = None, hang: bool = False):
        self.error = error
        self.hang = hang
        self.launch_calls: list[dict[str, Any]] = []
        self.connect_calls: list[tuple[str, dict[str, Any]]] = []
        self.browsers: list[FakeBrowser] = []

    async def _browser(self) -> FakeBrowser:
        if self.hang:
            await asyncio.sleep(3600)
        if self.error is not None:
            raise self.error
        browser = FakeBrowser()
        self.browsers.append(browser)
        return browser

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_calls.append(kwargs)
        return await self._browser()

    async def connect_over_cdp(self, endpoint: str, **kwargs: Any) -> FakeBrowser:
        self.connect_calls.append((endpoint, kwargs))
        return await self._browser()


class FakePlaywright:
    def __init__(self, chromium: FakeChromium | None = None, *, start_delay_s: float = 0.0):
        self.chromium = chromium or FakeChromium()
        self.start_delay_s = start_delay_s
        self.start_calls = 0
        self.stop_calls = 0

    async def start(self) -> "FakePlaywright":
        if self.start_delay_s:
            await asyncio.sleep(self.start_delay_s)
        self.start_calls += 1
        return self

    async def stop(self) -> None:
        self.stop_calls += 1


def playwright_factory(fake: FakePlaywright):
    return lambda: fake


class FakeProvisioner(EngineProvisioner):
    """Hands out EngineHandles over FakeBrowsers and remembers every one of them."""
    strategy = EngineStrategy.LOCAL

    def __init__(
        self,
        *,
        acquire_error: Exception | None = None,
        hang_on_engine_close: bool = False,
        close_timeout_s: float = 1.0,
        **page_options: Any,
    ):
        super().__init__(acquire_timeout_s=1.0, close_timeout_s=close_timeout_s)
        self.acquire_error = acquire_error
        self.hang_on_engine_close = hang_on_engine_close
        self.page_options = page_options
        self.acquire_calls = 0
        self.browsers: list[FakeBrowser] = []
        self.handles: list[EngineHandle] = []
        self.aclose_calls = 0

    async def acquire(self) -> EngineHandle:
        self.acquire_calls += 1
        if self.acquire_error is not None:
            raise self.acquire_error
        browser = FakeBrowser(**self.page_options)
        browser.hang_on_close = self.hang_on_engine_close
        handle = EngineHandle(browser, label="fake", close_timeout_s=self.close_timeout_s)
        self.browsers.append(browser)
        self.handles.append(handle)
        return handle

    async def aclose(self) -> None:
        self.aclose_calls += 1

    @property
    def pages(self) -> list[FakePage]:
        return [page for browser in self.browsers for page in browser.pages]


def unavailable_local_engine() -> FakeProvisioner:
    return FakeProvisioner(
        acquire_error=ProvisionError(ProvisionFailure.LOCAL_UNAVAILABLE, "browser executable not found")
    )


def playwright_error(message: str) -> PlaywrightError:
    return PlaywrightError(message)
