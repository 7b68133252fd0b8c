"""
Uniform wrappers around a Playwright browser target and its pages.

An EngineHandle owns either a launched Browser or, for the shared remote
connection, a per-request BrowserContext. Both close() methods are idempotent,
bounded by close_timeout_s and never raise engine errors, so they can sit on
any teardown path.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from playwright.async_api import Error as PlaywrightError

from errors import RenderError

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfPageSpec:
    """Physical page for page.pdf(). Defaults: one Letter portrait page, margins in CSS."""
    format: str = "Letter"
    page_ranges: str = "1"
    print_background: bool = True
    landscape: bool = False
    margin: dict[str, str] = field(
        default_factory=lambda: {"top": "0in", "bottom": "0in", "left": "0in", "right": "0in"}
    )

    def to_pdf_kwargs(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "page_ranges": self.page_ranges,
            "print_background": self.print_background,
            "landscape": self.landscape,
            "margin": dict(self.margin),
        }


MATCH_CARD_PAGE = PdfPageSpec()

MATCH_CARD_PAGE = PdfPageSpec()

DEFAULT_CLOSE_TIMEOUT_S = 5.0


async def bounded_close(close: Callable[[], Awaitable[None]], timeout_s: float, what: str) -> None:
    """Await one teardown call; engine errors and an unanswered close are logged, not raised."""
    try:
        await asyncio.wait_for(close(), timeout=timeout_s)
    except asyncio.TimeoutError:
        _LOG.warning("%s did not finish within %gs; abandoning it", what, timeout_s)
    except PlaywrightError as e:
        _LOG.warning("%s failed: %s", what, e)


class PageHandle:
    def __init__(self, page: Any, *, close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S):
        self._page = page
        self._close_timeout_s = close_timeout_s
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def set_content(self, html_content: str, *, timeout_s: float | None = None) -> None:
        kwargs: dict[str, Any] = {"wait_until": "load"}
        if timeout_s is not None:
            kwargs["timeout"] = timeout_s * 1000
        await self._page.set_content(html_content, **kwargs)

    async def render_pdf(self, spec: PdfPageSpec = MATCH_CARD_PAGE) -> bytes:
        await self._page.emulate_media(media="print")
        return await self._page.pdf(**spec.to_pdf_kwargs())

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await bounded_close(self._page.close, self._close_timeout_s, "Page close")


class EngineHandle:
    def __init__(
        self,
        target: Any,
        *,
        label: str,
        on_close: Callable[[], Awaitable[None]] | None = None,
        close_timeout_s: float = DEFAULT_CLOSE_TIMEOUT_S,
    ):
        self._target = target
        self._on_close = on_close
        self._close_timeout_s = close_timeout_s
        self.label = label
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def new_page(self) -> PageHandle:
        if self._closed:
            raise RenderError(f"{self.label} engine handle is already closed")
        page = await self._target.new_page()
        return PageHandle(page, close_timeout_s=self._close_timeout_s)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await bounded_close(self._target.close, self._close_timeout_s, f"{self.label} engine close")
        if self._on_close is not None:
            await bounded_close(self._on_close, self._close_timeout_s, f"{self.label} engine driver stop")
