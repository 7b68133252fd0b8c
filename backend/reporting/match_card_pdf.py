"""
Match card PDF pipeline: normalize roster, build HTML, print it with the engine.

Engine and page are registered on an AsyncExitStack as soon as they exist, so
whichever step fails (or if the request is cancelled) the page is closed
first and then the engine.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack

from playwright.async_api import Error as PlaywrightError

from engine.handles import MATCH_CARD_PAGE, PdfPageSpec
from engine.provisioner import EngineProvisioner
from errors import RenderError
from models import MatchCardRequest
from services.roster_normalizer import normalize_roster

from .match_card_html import build_match_card_html

_LOG = logging.getLogger(__name__)

DEFAULT_CAPTURE_TIMEOUT_S = 30.0

_HEALTH_CHECK_HTML = "<!DOCTYPE html>\n<html><body>ok</body></html>\n"


async def html_to_pdf(
    html_content: str,
    provisioner: EngineProvisioner,
    *,
    capture_timeout_s: float = DEFAULT_CAPTURE_TIMEOUT_S,
    page_spec: PdfPageSpec = MATCH_CARD_PAGE,
) -> bytes:
    """
    Print one HTML document to PDF bytes.

    Raises ProvisionError when no engine could be acquired (no page work is
    attempted) and RenderError for page, capture or timeout failures.
    """
    async with AsyncExitStack() as stack:
        engine = await provisioner.acquire()
        stack.push_async_callback(engine.close)
        try:
            page = await engine.new_page()
            stack.push_async_callback(page.close)
            await asyncio.wait_for(
                page.set_content(html_content, timeout_s=capture_timeout_s), timeout=capture_timeout_s
            )
            pdf_bytes = await asyncio.wait_for(page.render_pdf(page_spec), timeout=capture_timeout_s)
        except asyncio.TimeoutError as e:
            raise RenderError(f"PDF capture exceeded {capture_timeout_s:g}s") from e
        except PlaywrightError as e:
            raise RenderError(f"PDF capture failed: {e}") from e
    if not pdf_bytes:
        raise RenderError("engine returned an empty PDF")
    return pdf_bytes


async def render_match_card_pdf(
    request: MatchCardRequest,
    provisioner: EngineProvisioner,
    *,
    capture_timeout_s: float = DEFAULT_CAPTURE_TIMEOUT_S,
) -> bytes:
    """Build the match card for one request and return its single-page PDF."""
    roster = normalize_roster(request.team_players)
    html_str = build_match_card_html(request, roster)
    pdf_bytes = await html_to_pdf(html_str, provisioner, capture_timeout_s=capture_timeout_s)
    _LOG.debug("Rendered match card for %s (%d bytes)", request.current_team_name, len(pdf_bytes))
    return pdf_bytes


async def check_engine(provisioner: EngineProvisioner, *, capture_timeout_s: float = DEFAULT_CAPTURE_TIMEOUT_S) -> int:
    """Print a trivial page end to end; returns the PDF size."""
    pdf_bytes = await html_to_pdf(_HEALTH_CHECK_HTML, provisioner, capture_timeout_s=capture_timeout_s)
    return len(pdf_bytes)
