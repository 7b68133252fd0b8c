"""
Generate a sample match card as HTML and, when a browser is available, PDF.

Usage:
  cd backend
  python3 scripts/generate_example_match_card.py
"""
from __future__ import annotations

import asyncio
from pathlib import Path
import sys

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from engine.provisioner import build_provisioner
from errors import PipelineError
from models import MatchCardRequest
from reporting.match_card_html import build_match_card_html
from reporting.match_card_pdf import render_match_card_pdf
from services.input_validator import validate_match_card
from services.roster_normalizer import normalize_roster
from settings import load_settings


OUT_DIR = BACKEND_DIR / "reports" / "fixtures"


def _sample_payload() -> dict:
    players = [
        {"number": 7, "first_name": "Sam", "last_name": "Lee", "reserve": False},
        {"number": 10, "first_name": "Alex", "last_name": "Tremblay", "reserve": False},
        {"number": 4, "first_name": "Noah", "last_name": "Gagnon", "reserve": True},
        {"number": None, "first_name": "Léa", "last_name": "Roy", "reserve": False, "suspended": True},
        {"number": 22, "first_name": "Maya", "last_name": "Côté", "reserve": True},
    ]
    return {
        "divisionName": "U13 Masculin A",
        "formattedDate": "2026-06-14",
        "matchNumber": "1042",
        "fieldName": "Parc Lafontaine #2",
        "currentTeamName": "Eagles",
        "homeTeamName": "Eagles",
        "awayTeamName": "Hawks",
        "teamPlayers": players,
    }


async def _write_pdf(request: MatchCardRequest, path: Path) -> None:
    settings = load_settings()
    provisioner = build_provisioner(settings)
    try:
        pdf_bytes = await render_match_card_pdf(request, provisioner, capture_timeout_s=settings.pdf_capture_timeout_s)
    finally:
        await provisioner.aclose()
    path.write_bytes(pdf_bytes)


def main() -> None:
    OUT_DIR.mkdir(parents=True, exist_ok=True)
    request = validate_match_card(_sample_payload())

    html_path = OUT_DIR / "match-card-example.html"
    html_path.write_text(build_match_card_html(request, normalize_roster(request.team_players)), encoding="utf-8")
    print(f"Wrote {html_path}")

    pdf_path = OUT_DIR / "match-card-example.pdf"
    try:
        asyncio.run(_write_pdf(request, pdf_path))
    except PipelineError as e:
        print(f"Skipped PDF: {e}")
        return
    print(f"Wrote {pdf_path} ({pdf_path.stat().st_size} bytes)")


if __name__ == "__main__":
    main()
