"""Best-effort parser for the loosely structured schedule markup.

The board renders one table row per team. Rows carrying a rotation number are read in
document order and paired two at a time (away, home). A pair becomes a game only when both
rows yield a spread and a total; anything less is dropped rather than guessed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup, Tag

from betbridge.odds.json_lines import DEFAULT_HOME_MONEYLINE, DEFAULT_VISITOR_MONEYLINE
from betbridge.odds.text import format_line, format_odds, normalize_half_points
from betbridge.odds.types import GameLines, MoneyLine, SpreadLine, Team, TotalLine

logger = logging.getLogger(__name__)

_NUMBER = r"(?:\d+(?:\.\d+)?|\.\d+)"
_SPACE_RE = re.compile(r"\s+")

_ROTATION_RE = re.compile(r"^\d{3,4}$")
_SPREAD_RE = re.compile(rf"^([+-]?{_NUMBER}|pk)\s*([+-]\d{{3,4}})$", re.IGNORECASE)
_TOTAL_RE = re.compile(rf"^([ou])\s*({_NUMBER})\s*([+-]\d{{3,4}})$", re.IGNORECASE)
_MONEYLINE_RE = re.compile(r"^([+-]\d{3,4})$")
_TEAM_RE = re.compile(r"^[A-Za-z][A-Za-z0-9 .&'()/-]*$")
_TIME_RE = re.compile(r"\b(\d{1,2}:\d{2}(?:\s*[AP]M)?)", re.IGNORECASE)
_DATE_RE = re.compile(
    r"\b((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2})\b",
    re.IGNORECASE,
)
_TOKEN_RE = re.compile(r"\b[01]_(\d+)_-?\d")


@dataclass
class _TeamRow:
    rotation: str
    name: Optional[str] = None
    spread: Optional[tuple[str, str, str]] = None
    total: Optional[tuple[str, str, str, str]] = None
    moneyline: Optional[str] = None
    upstream_game_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


def _cells(row: Tag) -> list[str]:
    cells = (
        _SPACE_RE.sub(" ", normalize_half_points(cell.get_text())).strip()
        for cell in row.find_all(["td", "th"], recursive=False)
    )
    return [cell for cell in cells if cell]


def _read_row(
    row_tag: Tag, date: Optional[str], time: Optional[str]
) -> tuple[Optional[_TeamRow], Optional[str], Optional[str]]:
    """Classify the cells of one row; returns the team row (if any) and the running date/time."""

    row: Optional[_TeamRow] = None
    pending: list[str] = []
    for cell in _cells(row_tag):
        date_match = _DATE_RE.search(cell)
        time_match = _TIME_RE.search(cell)
        if date_match or time_match:
            date = date_match.group(1) if date_match else date
            time = time_match.group(1).upper() if time_match else time
            continue
        if row is None:
            if _ROTATION_RE.match(cell):
                row = _TeamRow(rotation=cell)
            else:
                pending.append(cell)
            continue
        _classify_cell(row, cell)
    if row is None:
        return None, date, time
    for cell in pending:
        _classify_cell(row, cell)
    token = _TOKEN_RE.search(str(row_tag))
    row.upstream_game_id = token.group(1) if token else None
    row.date, row.time = date, time
    return row, date, time


def _classify_cell(row: _TeamRow, cell: str) -> None:
    total = _TOTAL_RE.match(cell)
    if total:
        line, odds = format_line(total.group(2)), format_odds(total.group(3))
        if row.total is None and line is not None and odds is not None:
            row.total = (total.group(1).lower(), line, odds, cell[1:].strip())
        return
    spread = _SPREAD_RE.match(cell)
    if spread:
        line, odds = format_line(spread.group(1)), format_odds(spread.group(2))
        if row.spread is None and line is not None and odds is not None:
            row.spread = (line, odds, cell)
        return
    if row.moneyline is None and _MONEYLINE_RE.match(cell):
        row.moneyline = format_odds(cell)
        return
    if row.name is None and _TEAM_RE.match(cell):
        row.name = cell.upper()


def _pair(away: _TeamRow, home: _TeamRow) -> Optional[GameLines]:
    spreads = [row.spread for row in (away, home) if row.spread]
    totals = [row.total for row in (away, home) if row.total]
    if len(spreads) != 2 or len(totals) != 2 or not (away.name and home.name):
        return None
    by_prefix = {total[0]: total for total in totals}
    over, under = by_prefix.get("o"), by_prefix.get("u")
    if over is None or under is None:
        return None

    if away.moneyline and home.moneyline:
        moneyline = MoneyLine(visitor_odds=away.moneyline, home_odds=home.moneyline)
    else:
        moneyline = MoneyLine(visitor_odds=DEFAULT_VISITOR_MONEYLINE, home_odds=DEFAULT_HOME_MONEYLINE)

    game_id = away.upstream_game_id or home.upstream_game_id or f"{away.rotation}{home.rotation}"
    return GameLines(
        id=game_id,
        group_id=None,
        date=away.date or "Today",
        time=away.time or "TBD",
        visiting_team=Team(name=away.name, rotation_number=away.rotation),
        home_team=Team(name=home.name, rotation_number=home.rotation),
        spread=SpreadLine(
            visitor_line=away.spread[0],
            visitor_odds=away.spread[1],
            home_line=home.spread[0],
            home_odds=home.spread[1],
            visitor_display=away.spread[2],
            home_display=home.spread[2],
        ),
        total=TotalLine(line=over[1], over_odds=over[2], under_odds=under[2], display=over[3]),
        moneyline=moneyline,
    )


def parse_schedule_markup(markup: str) -> list[GameLines]:
    """Recover games from schedule markup; empty list when nothing pairs up."""

    soup = BeautifulSoup(markup, "html.parser")
    rows: list[_TeamRow] = []
    date: Optional[str] = None
    time: Optional[str] = None
    for row_tag in soup.find_all("tr"):
        row, date, time = _read_row(row_tag, date, time)
        if row is not None:
            rows.append(row)

    if len(rows) % 2:
        logger.warning("Dropping unpaired team row with rotation %s", rows[-1].rotation)

    games: list[GameLines] = []
    for away, home in zip(rows[0::2], rows[1::2]):
        game = _pair(away, home)
        if game is None:
            logger.warning("Dropping game %s/%s: paired data incomplete", away.rotation, home.rotation)
            continue
        games.append(game)
    return games
