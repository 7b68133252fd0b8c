"""
Input layer: raw request payload -> MatchCardRequest.

Pydantic does the shape checking; failures are translated into FieldIssue
values so callers can tell a missing field from a wrongly typed one without
depending on pydantic's error format.
"""
from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from errors import FieldIssue, IssueKind, MatchCardValidationError
from models import MatchCardRequest

_MISSING_ERROR_TYPES = {"missing", "missing_argument", "missing_keyword_only_argument"}


def _loc_to_str(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "body"


def issues_from_pydantic(exc: ValidationError) -> list[FieldIssue]:
    issues: list[FieldIssue] = []
    for err in exc.errors():
        kind = IssueKind.MISSING if err.get("type") in _MISSING_ERROR_TYPES else IssueKind.WRONG_TYPE
        issues.append(FieldIssue(kind=kind, loc=_loc_to_str(tuple(err.get("loc", ()))), message=str(err.get("msg", ""))))
    return issues


def validate_match_card(raw: Any) -> MatchCardRequest:
    """Validate an already-decoded payload. Raises MatchCardValidationError."""
    if not isinstance(raw, dict):
        raise MatchCardValidationError(
            [FieldIssue(kind=IssueKind.WRONG_TYPE, loc="body", message="payload must be a JSON object")]
        )
    try:
        return MatchCardRequest.model_validate(raw)
    except ValidationError as e:
        raise MatchCardValidationError(issues_from_pydantic(e)) from e


def parse_match_card_json(body: bytes | str) -> MatchCardRequest:
    """Decode a raw request body and validate it."""
    try:
        raw = json.loads(body)
    except (ValueError, TypeError) as e:
        raise MatchCardValidationError(
            [FieldIssue(kind=IssueKind.WRONG_TYPE, loc="body", message=f"body is not valid JSON: {e}")]
        ) from e
    return validate_match_card(raw)
