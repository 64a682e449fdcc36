"""Odds normalizer: upstream schedule responses into the canonical ``Schedule``."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable

import httpx

from betbridge.errors import SessionExpired
from betbridge.odds.json_lines import parse_schedule_json
from betbridge.odds.leagues import fallback_message
from betbridge.odds.markup_lines import parse_schedule_markup
from betbridge.odds.types import Game, GameLines, Schedule, ScheduleSource, WagerType
from betbridge.upstream.session import UpstreamSession
from betbridge.upstream.transport import (
    SCHEDULE_PAGE_PATH,
    SCHEDULE_PATH,
    looks_like_login_page,
    payload_of,
)
from betbridge.wagers.codec import InvalidSelectionToken, build_tokens

logger = logging.getLogger(__name__)

PARSE_ERRORS = (ValueError, TypeError, KeyError, AttributeError, IndexError)


class PayloadShape(str, Enum):
    JSON = "json"
    MARKUP = "markup"
    UNKNOWN = "unknown"


def detect_shape(response: httpx.Response, payload: Any) -> PayloadShape:
    """Pick a parser from what upstream actually sent, not from what the caller asked for."""

    content_type = response.headers.get("content-type", "").lower()
    if isinstance(payload, (dict, list)):
        return PayloadShape.JSON
    if "json" in content_type:
        # declared JSON that failed to decode
        return PayloadShape.UNKNOWN
    if isinstance(payload, str) and "<" in payload:
        return PayloadShape.MARKUP
    return PayloadShape.UNKNOWN


_PARSERS: Dict[PayloadShape, Callable[[Any], list[GameLines]]] = {
    PayloadShape.JSON: parse_schedule_json,
    PayloadShape.MARKUP: parse_schedule_markup,
}


def with_tokens(parsed: Iterable[GameLines]) -> list[Game]:
    """Attach the six selection tokens; games without derivable tokens are dropped."""

    games: list[Game] = []
    for lines in parsed:
        try:
            tokens = build_tokens(lines)
        except InvalidSelectionToken as exc:
            logger.warning("Dropping game %s: %s", lines.id, exc)
            continue
        games.append(Game.from_lines(lines, tokens))
    return games


def normalize_response(response: httpx.Response, league_id: int) -> Schedule:
    """Parse one schedule response; never raises for content problems."""

    payload = payload_of(response)
    shape = detect_shape(response, payload)
    parser = _PARSERS.get(shape)
    if parser is None:
        logger.warning("Unrecognised schedule payload for league %s", league_id)
        return Schedule.fallback(league_id, fallback_message(league_id))
    try:
        games = with_tokens(parser(payload))
    except PARSE_ERRORS as exc:
        logger.warning("Schedule %s parse failed for league %s: %s", shape.value, league_id, exc)
        return Schedule.fallback(league_id, fallback_message(league_id))
    if not games:
        logger.info("No games recovered for league %s, using fallback", league_id)
        return Schedule.fallback(league_id, fallback_message(league_id))
    logger.info("Parsed %d games for league %s from %s payload", len(games), league_id, shape.value)
    return Schedule(league_id=league_id, games=games, source=ScheduleSource.LIVE)


def _get_schedule(session: UpstreamSession, params: Dict[str, Any]) -> httpx.Response:
    session.require_authenticated()
    response = session.transport.get(
        SCHEDULE_PATH,
        params=params,
        headers={
            "Accept": "application/json, text/html, */*",
            "X-Requested-With": "XMLHttpRequest",
            "Referer": f"{session.transport.base_url}{SCHEDULE_PAGE_PATH}",
        },
    )
    if looks_like_login_page(response):
        session.mark_expired()
        raise SessionExpired("Session expired. Please login again.")
    return response


def fetch_schedule(
    session: UpstreamSession,
    league_id: int,
    wager_type: WagerType = WagerType.STRAIGHT,
) -> Schedule:
    """Current board for one league, as of this fetch."""

    response = _get_schedule(session, {"WT": int(wager_type), "lg": league_id})
    return normalize_response(response, league_id)


def matches_query(game: Game, query: str) -> bool:
    needle = query.strip().lower()
    haystack = (
        game.visiting_team.name,
        game.home_team.name,
        game.visiting_team.rotation_number,
        game.home_team.rotation_number,
    )
    return any(needle in value.lower() for value in haystack)


def search_schedule(
    session: UpstreamSession,
    query: str,
    league_id: int = 535,
    wager_type: WagerType = WagerType.STRAIGHT,
) -> Schedule:
    """Board filtered by team name or rotation number."""

    params = {"WT": int(wager_type), "lg": league_id, "quickfilter": query}
    schedule = normalize_response(_get_schedule(session, params), league_id)
    if schedule.source is ScheduleSource.FALLBACK or not query.strip():
        return schedule
    games = [game for game in schedule.games if matches_query(game, query)]
    if not games:
        return Schedule.fallback(league_id, f"No games matching '{query}'")
    return Schedule(league_id=league_id, games=games, source=ScheduleSource.LIVE)
