"""Rendering engine acquisition (headless Chromium via Playwright)."""

from engine.handles import DEFAULT_CLOSE_TIMEOUT_S, MATCH_CARD_PAGE, EngineHandle, PageHandle, PdfPageSpec
from engine.provisioner import (
    EngineProvisioner,
    LocalBinaryProvisioner,
    RemoteServiceProvisioner,
    SandboxedBinaryProvisioner,
    build_provisioner,
)

__all__ = [
    "DEFAULT_CLOSE_TIMEOUT_S",
    "MATCH_CARD_PAGE",
    "EngineHandle",
    "PageHandle",
    "PdfPageSpec",
    "EngineProvisioner",
    "LocalBinaryProvisioner",
    "RemoteServiceProvisioner",
    "SandboxedBinaryProvisioner",
    "build_provisioner",
]
