"""
Roster normalization: any number of submitted players -> the 25 printed lines.

Index i of the output is index i of the input. Players past the last printed
line are dropped; the card has no room for them.
"""
from __future__ import annotations

import logging
from typing import Sequence

from models import ROSTER_SIZE, NormalizedRoster, RosterEntry, RosterRow
from reporting.format_utils import format_player_name

_LOG = logging.getLogger(__name__)


def roster_row_for(entry: RosterEntry) -> RosterRow:
    return RosterRow(
        number=entry.number,
        display_name=format_player_name(entry.first_name, entry.last_name),
        reserve=entry.reserve,
        suspended=entry.suspended,
        filled=True,
    )


def normalize_roster(entries: Sequence[RosterEntry]) -> NormalizedRoster:
    if len(entries) > ROSTER_SIZE:
        _LOG.debug("Dropping %d players beyond the %d printed roster lines", len(entries) - ROSTER_SIZE, ROSTER_SIZE)
    rows = [roster_row_for(entry) for entry in list(entries)[:ROSTER_SIZE]]
    rows.extend(RosterRow.empty() for _ in range(ROSTER_SIZE - len(rows)))
    return tuple(rows)
