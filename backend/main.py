from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory so RENDER_ENGINE etc. are available
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from engine.provisioner import EngineProvisioner, build_provisioner
from errors import MatchCardValidationError, PipelineError, ProvisionError, RenderError
from reporting.format_utils import format_pdf_filename
from reporting.match_card_html import build_match_card_html
from reporting.match_card_pdf import check_engine, render_match_card_pdf
from services.input_validator import parse_match_card_json
from services.roster_normalizer import normalize_roster
from settings import load_settings

SETTINGS = load_settings()

# Client-facing messages. Details only go to the log.
INVALID_BODY_MESSAGE = "Unexpected body"
GENERIC_FAILURE_MESSAGE = "Something went wrong"

_LOG = logging.getLogger("uvicorn.error")

LANDING_HTML = """<!DOCTYPE html>
<html>
  <head><title>Match card generator</title></head>
  <body><main>PDF generation available at the /api/pdf endpoint.</main></body>
</html>
"""


def _configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(levelname)s:     %(name)s %(message)s")
    for name in ("uvicorn.error", "engine", "reporting", "services"):
        logging.getLogger(name).setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging(SETTINGS.log_level)
    app.state.provisioner = build_provisioner(SETTINGS)
    _LOG.info(
        "Match card backend starting (render_engine=%s acquire_timeout_s=%s capture_timeout_s=%s) version=%s",
        SETTINGS.render_engine.value,
        SETTINGS.engine_acquire_timeout_s,
        SETTINGS.pdf_capture_timeout_s,
        SETTINGS.version,
    )
    try:
        yield
    finally:
        await app.state.provisioner.aclose()
        _LOG.info("Match card backend stopped")


app = FastAPI(title="Match Card Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


def get_provisioner(request: Request) -> EngineProvisioner:
    """The provisioner chosen at startup; built on first use when the app runs without lifespan."""
    provisioner = getattr(request.app.state, "provisioner", None)
    if provisioner is None:
        provisioner = build_provisioner(SETTINGS)
        request.app.state.provisioner = provisioner
    return provisioner


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


@app.get("/", response_class=HTMLResponse)
def landing() -> HTMLResponse:
    return HTMLResponse(LANDING_HTML)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "render_engine": SETTINGS.render_engine.value,
        "version": SETTINGS.version,
    }


@app.get("/health/pdf")
async def health_pdf(provisioner: EngineProvisioner = Depends(get_provisioner)):
    """
    Runtime check for the configured rendering engine.
    Returns 200 only when a page can be printed to PDF.
    """
    try:
        await check_engine(provisioner, capture_timeout_s=SETTINGS.pdf_capture_timeout_s)
    except PipelineError as e:
        msg = str(e)
        if len(msg) > 500:
            msg = msg[:500]
        raise HTTPException(status_code=503, detail=f"PDF runtime unavailable: {msg}") from e
    return {"status": "ok", "pdf_runtime": "ready", "render_engine": provisioner.strategy.value}


@app.post("/api/pdf")
async def generate_match_card_pdf(
    request: Request,
    provisioner: EngineProvisioner = Depends(get_provisioner),
) -> Response:
    """
    Validate the match card payload and return the printed card as a PDF.
    Both failure kinds answer 400 with a fixed message.
    """
    rid = _request_id(request)
    try:
        match_card = parse_match_card_json(await request.body())
    except MatchCardValidationError as e:
        _LOG.warning("request_id=%s match card rejected: %s", rid, e)
        return JSONResponse(INVALID_BODY_MESSAGE, status_code=400)

    try:
        pdf_bytes = await render_match_card_pdf(
            match_card,
            provisioner,
            capture_timeout_s=SETTINGS.pdf_capture_timeout_s,
        )
    except ProvisionError as e:
        _LOG.error("request_id=%s engine provisioning failed kind=%s: %s", rid, e.kind.value, e)
        return JSONResponse(GENERIC_FAILURE_MESSAGE, status_code=400)
    except RenderError as e:
        _LOG.error("request_id=%s PDF rendering failed: %s", rid, e, exc_info=e.__cause__ is not None)
        return JSONResponse(GENERIC_FAILURE_MESSAGE, status_code=400)
    except Exception:
        _LOG.exception("request_id=%s unexpected match card failure", rid)
        return JSONResponse(GENERIC_FAILURE_MESSAGE, status_code=400)

    filename = format_pdf_filename(match_card.current_team_name)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@app.post("/api/pdf/preview", response_class=HTMLResponse)
async def preview_match_card(request: Request) -> Response:
    """Return the match card as HTML (no rendering engine required). Same request body as POST /api/pdf."""
    try:
        match_card = parse_match_card_json(await request.body())
    except MatchCardValidationError as e:
        _LOG.warning("request_id=%s match card preview rejected: %s", _request_id(request), e)
        return JSONResponse(INVALID_BODY_MESSAGE, status_code=400)
    html_str = build_match_card_html(match_card, normalize_roster(match_card.team_players))
    return HTMLResponse(html_str)


def get_app() -> FastAPI:
    """
    Convenience accessor for ASGI servers.
    """
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8010,
        reload=True,
    )
