"""Dataclasses for the canonical schedule model."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Any, List, Optional


def _camel_dict(pairs: List[tuple[str, Any]]) -> dict[str, Any]:
    """``asdict`` factory emitting camelCase keys, the casing of every wire payload."""

    result = {}
    for key, value in pairs:
        head, *rest = key.split("_")
        result[head + "".join(part.title() for part in rest)] = value
    return result


class WagerType(IntEnum):
    """Upstream ``WT`` parameter."""

    STRAIGHT = 0
    PARLAY = 1
    TEASER = 2


class Market(str, Enum):
    SPREAD = "spread"
    TOTAL = "total"
    MONEYLINE = "moneyline"


class Side(IntEnum):
    """Primary is visitor (spread, moneyline) or over (total); secondary is home or under."""

    PRIMARY = 0
    SECONDARY = 1


class ScheduleSource(str, Enum):
    LIVE = "live"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class League:
    id: int
    name: str
    sport: str


@dataclass(frozen=True)
class Team:
    name: str
    rotation_number: str


@dataclass(frozen=True)
class SpreadLine:
    visitor_line: str
    visitor_odds: str
    home_line: str
    home_odds: str
    visitor_display: str
    home_display: str


@dataclass(frozen=True)
class TotalLine:
    line: str
    over_odds: str
    under_odds: str
    display: str


@dataclass(frozen=True)
class MoneyLine:
    visitor_odds: str
    home_odds: str


@dataclass(frozen=True)
class SelectionTokens:
    spread_visitor: str
    spread_home: str
    over: str
    under: str
    moneyline_visitor: str
    moneyline_home: str


@dataclass(frozen=True)
class GameLines:
    """A parsed game before its selection tokens are derived."""

    id: str
    group_id: Optional[int]
    date: str
    time: str
    visiting_team: Team
    home_team: Team
    spread: SpreadLine
    total: TotalLine
    moneyline: MoneyLine


@dataclass(frozen=True)
class Game(GameLines):
    """A bettable game; only ever constructed with all six selection tokens."""

    selection_tokens: SelectionTokens

    @classmethod
    def from_lines(cls, lines: GameLines, tokens: SelectionTokens) -> "Game":
        return cls(**vars(lines), selection_tokens=tokens)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self, dict_factory=_camel_dict)


@dataclass(frozen=True)
class Schedule:
    league_id: int
    games: List[Game] = field(default_factory=list)
    source: ScheduleSource = ScheduleSource.LIVE
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.source is ScheduleSource.FALLBACK and self.games:
            raise ValueError("a fallback schedule never carries games")

    @classmethod
    def fallback(cls, league_id: int, message: str) -> "Schedule":
        return cls(league_id=league_id, games=[], source=ScheduleSource.FALLBACK, message=message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "leagueId": self.league_id,
            "games": [game.to_dict() for game in self.games],
            "source": self.source.value,
            "message": self.message,
        }
