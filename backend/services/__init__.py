"""Match card input services."""

from services.input_validator import (
    parse_match_card_json,
    validate_match_card,
)
from services.roster_normalizer import normalize_roster

__all__ = [
    "parse_match_card_json",
    "validate_match_card",
    "normalize_roster",
]
