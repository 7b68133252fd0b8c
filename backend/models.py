from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

# One physical line per player on the printed card.
ROSTER_SIZE = 25


class RosterEntry(BaseModel):
    """One player as submitted by the team, in listing order."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    number: Optional[StrictInt] = Field(default=None, description="Jersey number; null when none is assigned")
    first_name: StrictStr = Field(validation_alias=AliasChoices("first_name", "firstName"))
    last_name: StrictStr = Field(validation_alias=AliasChoices("last_name", "lastName"))
    reserve: StrictBool
    suspended: StrictBool = False

    @field_validator("suspended", mode="before")
    @classmethod
    def default_suspended(cls, v):
        """Treat an explicit null like an absent flag."""
        return False if v is None else v


class MatchCardRequest(BaseModel):
    """
    Validated match card payload.

    Wire names are camelCase (``divisionName``); snake_case names are accepted
    as well so the model can be built directly in Python.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    division_name: StrictStr = Field(validation_alias=AliasChoices("divisionName", "division_name"))
    formatted_date: Optional[StrictStr] = Field(
        default=None, validation_alias=AliasChoices("formattedDate", "formatted_date")
    )
    match_number: Optional[StrictStr] = Field(
        default=None, validation_alias=AliasChoices("matchNumber", "match_number")
    )
    field_name: Optional[StrictStr] = Field(
        default=None, validation_alias=AliasChoices("fieldName", "field_name")
    )
    current_team_name: StrictStr = Field(
        validation_alias=AliasChoices("currentTeamName", "current_team_name")
    )
    home_team_name: Optional[StrictStr] = Field(
        default=None, validation_alias=AliasChoices("homeTeamName", "home_team_name")
    )
    away_team_name: Optional[StrictStr] = Field(
        default=None, validation_alias=AliasChoices("awayTeamName", "away_team_name")
    )
    team_players: List[RosterEntry] = Field(validation_alias=AliasChoices("teamPlayers", "team_players"))


@dataclass(frozen=True)
class RosterRow:
    """A printed roster line. Empty rows keep their place on the card but show nothing."""
    number: int | None = None
    display_name: str = ""
    reserve: bool = False
    suspended: bool = False
    filled: bool = False

    @classmethod
    def empty(cls) -> RosterRow:
        return cls()


NormalizedRoster = Tuple[RosterRow, ...]
