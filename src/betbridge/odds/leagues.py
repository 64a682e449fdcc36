"""Static league catalogue for the upstream board."""

from __future__ import annotations

from betbridge.odds.types import League

LEAGUES: tuple[League, ...] = (
    League(id=535, name="NBA", sport="Basketball"),
    League(id=43, name="College Basketball", sport="Basketball"),
    League(id=4029, name="NFL", sport="Football"),
    League(id=430, name="NFL 1st Half", sport="Football"),
    League(id=3, name="Soccer - Premier League", sport="Soccer"),
    League(id=1278, name="Soccer - Argentina", sport="Soccer"),
    League(id=1566, name="Soccer - Costa Rica", sport="Soccer"),
    League(id=1729, name="Brazil Basketball", sport="Basketball"),
)

_FALLBACK_MESSAGES = {
    4029: "No NFL games available (check if off-season)",
    535: "No NBA games available at this time",
    43: "No College Basketball games available at this time",
    430: "No NFL 1st Half games available",
    3: "No soccer games available",
    1278: "No soccer games available",
    1566: "No soccer games available",
}


def list_leagues() -> list[League]:
    return list(LEAGUES)


def get_league(league_id: int) -> League | None:
    return next((league for league in LEAGUES if league.id == league_id), None)


def fallback_message(league_id: int) -> str:
    return _FALLBACK_MESSAGES.get(league_id, f"No games available for league {league_id}")
