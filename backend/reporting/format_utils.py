"""Consistent display strings for the match card. Missing values always print blank."""
from __future__ import annotations

from typing import Any


def format_optional(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def format_jersey_number(number: int | None) -> str:
    if number is None:
        return ""
    return str(number)


def format_player_name(first_name: str, last_name: str) -> str:
    return f"{last_name}, {first_name}"


def format_pdf_filename(team_name: str | None) -> str:
    """Filename for the Content-Disposition header; ascii letters, digits and dashes only."""
    slug = "".join(ch.lower() if ch.isascii() and ch.isalnum() else "-" for ch in (team_name or ""))
    slug = "-".join(part for part in slug.split("-") if part)
    return f"match-card-{slug}.pdf" if slug else "match-card.pdf"
