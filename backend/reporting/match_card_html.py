"""
Build the printable match card HTML from a validated request and its normalized roster.

The card is a paper form: most cells are deliberately blank and filled in by
hand at the field. Every builder here is pure and returns markup.Element
values; build_match_card_html() serializes the assembled tree. The output is
self-contained (inline CSS and SVG) so the browser never touches the network.
"""
from __future__ import annotations

from pathlib import Path

from models import MatchCardRequest, NormalizedRoster, RosterRow

from .format_utils import format_jersey_number, format_optional
from .markup import Element, Raw, element, render_document

# Template path relative to this file
_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
_MATCH_CARD_CSS = (_TEMPLATE_DIR / "match_card.css").read_text(encoding="utf-8")

CURRENT_TEAM_INDICATOR = "▶"
SUSPENDED_LABEL = "(suspended)"

_CHECKMARK_PATH = (
    "M337.222 22.952c-15.912-8.568-33.66 7.956-44.064 17.748-23.867 23.256-44.063 50.184-66.708 "
    "74.664-25.092 26.928-48.348 53.856-74.052 80.173-14.688 14.688-30.6 30.6-40.392 48.96-22.032"
    "-21.421-41.004-44.677-65.484-63.648C28.774 167.385-.602 157.593.01 190.029c1.224 42.229 38.556 "
    "87.517 66.096 116.28 11.628 12.24 26.928 25.092 44.676 25.704 21.42 1.224 43.452-24.48 56.304"
    "-38.556 22.645-24.48 41.005-52.021 61.812-77.112 26.928-33.048 54.468-65.485 80.784-99.145 "
    "16.524-20.808 68.544-72.217 27.54-94.248z"
)

# Roster columns: (header label, fixed width or None for the stretching name column)
ROSTER_COLUMNS: tuple[tuple[str, str | None], ...] = (
    ("Présent", "4.5rem"),
    ("No", "3rem"),
    ("Nom", None),
    ("R", "3rem"),
    ("Buts", "3rem"),
    ("A/E", "3rem"),
)

LEGEND_LINES = ("A - Avertissement", "E - Expulsion", "R - Réserviste")
REFEREE_LABELS = ("Arbitre", "Arbitre Assistant", "Arbitre Assistant")


def _cell(*children, width: str | None = None, extra_cls: str = "") -> Element:
    classes = ["cell"]
    if width:
        classes.append("fixed")
    if extra_cls:
        classes.append(extra_cls)
    return element("div", *children, cls=" ".join(classes), style=f"width: {width}" if width else None)


def _labelled_pair(label: str, value: str, *, width: str, label_width: str, value_cls: str = "") -> Element:
    return element(
        "div",
        _cell(label, width=label_width),
        _cell(value, extra_cls=value_cls),
        cls="pair",
        style=f"width: {width}",
    )


def checkmark_svg() -> Element:
    return element(
        "svg",
        element("path", d=_CHECKMARK_PATH),
        cls="checkmark",
        viewBox="0 0 352.62 352.62",
        xmlns="http://www.w3.org/2000/svg",
    )


def build_title_row(request: MatchCardRequest) -> Element:
    return element(
        "div",
        _cell(
            "Carte de match - ",
            element("span", request.current_team_name, cls="emphasize"),
            extra_cls="title",
        ),
        cls="row",
    )


def build_header_rows(request: MatchCardRequest) -> list[Element]:
    def pair(label: str, value: str | None) -> Element:
        return _labelled_pair(label, format_optional(value), width="50%", label_width="6rem", value_cls="emphasize")

    return [
        element("div", pair("Division", request.division_name), pair("Date", request.formatted_date), cls="row"),
        element("div", pair("Match", request.match_number), pair("Terrain", request.field_name), cls="row"),
    ]


def team_row_is_current(team_name: str | None, current_team_name: str) -> bool:
    """An absent team name never identifies the current team."""
    return team_name is not None and team_name == current_team_name


def _team_row(label: str, team_name: str | None, current_team_name: str) -> Element:
    is_current = team_row_is_current(team_name, current_team_name)
    name_children: list = []
    if is_current:
        name_children.append(element("span", CURRENT_TEAM_INDICATOR, cls="indicator"))
    name_children.append(format_optional(team_name))
    return element(
        "div",
        element(
            "div",
            _cell(label, width="10rem"),
            _cell(*name_children, extra_cls="team-name"),
            cls="pair",
            style="width: 70%",
        ),
        element(
            "div",
            _cell("Pointage", width="8rem"),
            _cell(extra_cls="score"),
            cls="pair",
            style="width: 30%",
        ),
        cls="row team-row current-team" if is_current else "row team-row",
    )


def build_team_rows(request: MatchCardRequest) -> list[Element]:
    """Visiting team first, then home team."""
    return [
        _team_row("Visiteur", request.away_team_name, request.current_team_name),
        _team_row("Receveur", request.home_team_name, request.current_team_name),
    ]


def build_roster_header() -> Element:
    return element(
        "div",
        *(_cell(label, width=width) for label, width in ROSTER_COLUMNS),
        cls="player-row roster-header",
    )


def build_name_cell_content(row: RosterRow) -> list:
    if not row.filled:
        return []
    if row.suspended:
        return [element("s", row.display_name), element("strong", SUSPENDED_LABEL, cls="suspended-label")]
    return [row.display_name]


def build_roster_row(row: RosterRow) -> Element:
    widths = [width for _, width in ROSTER_COLUMNS]
    return element(
        "div",
        _cell(width=widths[0]),
        _cell(format_jersey_number(row.number), width=widths[1]),
        _cell(*build_name_cell_content(row)),
        _cell(checkmark_svg() if row.reserve else None, width=widths[3]),
        _cell(width=widths[4]),
        _cell(width=widths[5]),
        cls="player-row roster-row",
    )


def build_footer() -> list[Element]:
    refs = element(
        "div",
        *(element("div", _cell(label, width="10rem"), _cell(), cls="row") for label in REFEREE_LABELS),
        cls="refs",
    )
    legend = element("div", *(element("p", line) for line in LEGEND_LINES), cls="legend")
    observations = element(
        "div",
        element(
            "div",
            _cell("Observations de l'arbitre", extra_cls="centered"),
            _cell("Observations de l'entraîneur", extra_cls="centered"),
            cls="row",
        ),
        element("div", _cell(), _cell(), cls="remaining"),
        cls="observations",
    )
    return [element("div", refs, legend, cls="ref-and-legend"), observations]


def build_match_card_tree(request: MatchCardRequest, roster: NormalizedRoster) -> Element:
    head = element(
        "head",
        element("meta", charset="utf-8"),
        element("title", f"Match card - {request.current_team_name}"),
        element("style", Raw(_MATCH_CARD_CSS)),
    )
    card = element(
        "div",
        build_title_row(request),
        *build_header_rows(request),
        *build_team_rows(request),
        build_roster_header(),
        *(build_roster_row(row) for row in roster),
        *build_footer(),
        cls="match-card",
    )
    return element("html", head, element("body", card), lang="fr")


def build_match_card_html(request: MatchCardRequest, roster: NormalizedRoster) -> str:
    """Produce the full HTML string for one match card."""
    return render_document(build_match_card_tree(request, roster))
