"""Error taxonomy for match card generation."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MatchCardError(Exception):
    """Base class for every failure raised while producing a match card."""


class IssueKind(str, Enum):
    MISSING = "missing"
    WRONG_TYPE = "wrong_type"


@dataclass(frozen=True)
class FieldIssue:
    kind: IssueKind
    loc: str
    message: str


class MatchCardValidationError(MatchCardError):
    """The payload does not have the match card shape. Raised before any engine work."""

    def __init__(self, issues: tuple[FieldIssue, ...] | list[FieldIssue]):
        self.issues = tuple(issues)
        summary = "; ".join(f"{i.loc}: {i.kind.value}" for i in self.issues) or "invalid payload"
        super().__init__(summary)

    @property
    def missing_fields(self) -> list[str]:
        return [i.loc for i in self.issues if i.kind is IssueKind.MISSING]

    @property
    def wrong_type_fields(self) -> list[str]:
        return [i.loc for i in self.issues if i.kind is IssueKind.WRONG_TYPE]


class PipelineError(MatchCardError):
    """Failure after validation: engine acquisition or PDF rendering."""


class ProvisionFailure(str, Enum):
    LOCAL_UNAVAILABLE = "local_unavailable"
    REMOTE_UNREACHABLE = "remote_unreachable"


class ProvisionError(PipelineError):
    def __init__(self, kind: ProvisionFailure, message: str):
        self.kind = kind
        super().__init__(f"{kind.value}: {message}")


class RenderError(PipelineError):
    """Engine acquired, but loading the page or printing it failed."""
