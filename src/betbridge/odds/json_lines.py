"""Parser for the JSON schedule document returned by the upstream schedule helper."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

from betbridge.odds.text import display_text, format_line, format_odds, normalize_half_points
from betbridge.odds.types import GameLines, MoneyLine, SpreadLine, Team, TotalLine

logger = logging.getLogger(__name__)

GAME_LINES_SECTION = "GAME LINES"

DEFAULT_LINE_ODDS = "-110"
DEFAULT_VISITOR_MONEYLINE = "+100"
DEFAULT_HOME_MONEYLINE = "-100"

_NUMBER = r"(?:\d+(?:\.\d+)?|\.\d+)"
_SPREAD_RE = re.compile(rf"^([+-]?{_NUMBER}|pk)([+-]\d+)?$", re.IGNORECASE)
_TOTAL_RE = re.compile(rf"^([ou])?({_NUMBER})([+-]\d+)?$", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedLine:
    line: str
    odds: str
    display: str


def _compact(raw: Any) -> str:
    return normalize_half_points(display_text(raw)).replace(" ", "")


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def parse_spread(display_raw: Any, numeric: Any = None) -> ParsedLine | None:
    """Parse a spread such as ``+4½-108``; ``numeric`` wins for the machine-readable line."""

    display = display_text(display_raw)
    line = odds = None
    match = _SPREAD_RE.match(_compact(display_raw))
    if match:
        line = format_line(match.group(1))
        odds = format_odds(match.group(2))
    if _has_value(numeric):
        line = format_line(numeric) or line
    if line is None:
        return None
    return ParsedLine(line=line, odds=odds or DEFAULT_LINE_ODDS, display=display or line)


def parse_total(display_raw: Any, numeric: Any = None) -> ParsedLine | None:
    """Parse one side of a total such as ``o222-110`` or ``u222½-110``."""

    display = display_text(display_raw)
    line = odds = None
    match = _TOTAL_RE.match(_compact(display_raw))
    if match:
        line = format_line(match.group(2))
        odds = format_odds(match.group(3))
    if _has_value(numeric):
        line = format_line(numeric) or line
    if line is None:
        return None
    shown = re.sub(r"^[ou]", "", display, flags=re.IGNORECASE) if display else line
    return ParsedLine(line=line, odds=odds or DEFAULT_LINE_ODDS, display=shown)


def format_kickoff(raw_date: Any, raw_time: Any) -> tuple[str, str]:
    """``20260203`` / ``22:10:00`` -> ``02/03`` / ``22:10``; ``Today`` / ``TBD`` when absent."""

    day = str(raw_date) if _has_value(raw_date) else ""
    clock = str(raw_time) if _has_value(raw_time) else ""
    date = f"{day[4:6]}/{day[6:8]}" if len(day) >= 8 else "Today"
    time = clock[:5] if len(clock) >= 5 else "TBD"
    return date, time


def _as_id(value: Any) -> str | None:
    if isinstance(value, bool) or not _has_value(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def parse_game(entry: dict[str, Any]) -> GameLines | None:
    """Parse one ``Games`` entry; ``None`` when any required piece is missing."""

    game_lines = entry.get("GameLines") or []
    line = game_lines[0] if game_lines else None
    game_id = _as_id(entry.get("idgm"))
    visitor_name = display_text(entry.get("vtm"))
    home_name = display_text(entry.get("htm"))
    visitor_rot = _as_id(entry.get("vnum"))
    home_rot = _as_id(entry.get("hnum"))
    if not isinstance(line, dict) or not game_id:
        return None
    if not (visitor_name and home_name and visitor_rot and home_rot):
        return None

    visitor_spread = parse_spread(line.get("vsprdh"), line.get("vsprdt"))
    home_spread = parse_spread(line.get("hsprdh"), line.get("hsprdt"))
    over = parse_total(line.get("ovh"), line.get("unt"))
    under = parse_total(line.get("unh"), line.get("unt"))
    if visitor_spread is None or home_spread is None or (over is None and under is None):
        return None
    total_line = (over or under).line

    date, time = format_kickoff(entry.get("gmdt"), entry.get("gmtm"))
    group_id = _as_id(entry.get("idgp"))
    return GameLines(
        id=game_id,
        group_id=int(group_id) if group_id and group_id.isdigit() else None,
        date=date,
        time=time,
        visiting_team=Team(name=visitor_name, rotation_number=visitor_rot),
        home_team=Team(name=home_name, rotation_number=home_rot),
        spread=SpreadLine(
            visitor_line=visitor_spread.line,
            visitor_odds=visitor_spread.odds,
            home_line=home_spread.line,
            home_odds=home_spread.odds,
            visitor_display=visitor_spread.display,
            home_display=home_spread.display,
        ),
        total=TotalLine(
            line=total_line,
            over_odds=over.odds if over else DEFAULT_LINE_ODDS,
            under_odds=under.odds if under else DEFAULT_LINE_ODDS,
            display=(over or under).display,
        ),
        moneyline=MoneyLine(
            visitor_odds=format_odds(line.get("voddsh")) or DEFAULT_VISITOR_MONEYLINE,
            home_odds=format_odds(line.get("hoddsh")) or DEFAULT_HOME_MONEYLINE,
        ),
    )


def _game_lines_section(sections: Iterable[Any]) -> list[Any] | None:
    for section in sections:
        if not isinstance(section, dict) or not section.get("Games"):
            continue
        if GAME_LINES_SECTION in str(section.get("Description") or "").upper():
            return section["Games"]
    return None


def parse_schedule_json(document: Any) -> list[GameLines]:
    """Parse the ``result.listLeagues[0]`` game-lines section; empty list when absent."""

    if isinstance(document, (str, bytes)):
        document = json.loads(document)
    result = document.get("result") if isinstance(document, dict) else None
    leagues = result.get("listLeagues") if isinstance(result, dict) else None
    if not leagues or not isinstance(leagues[0], list):
        logger.info("Schedule JSON carries no league sections")
        return []
    entries = _game_lines_section(leagues[0])
    if entries is None:
        logger.info("Schedule JSON carries no %s section", GAME_LINES_SECTION)
        return []

    games: list[GameLines] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        parsed = parse_game(entry)
        if parsed is None:
            logger.warning("Dropping incomplete game entry idgm=%s", entry.get("idgm"))
            continue
        games.append(parsed)
    return games
