"""Selection token codec.

A token names one bettable line as ``side_gameId_line_odds``, e.g. ``0_5421290_4.5_-108``.
Side ``0`` is the visiting spread, the over and the visiting moneyline; side ``1`` is the
home spread, the under and the home moneyline. Moneyline tokens always carry line ``0``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from betbridge.odds.types import GameLines, Market, SelectionTokens, Side

_GAME_ID_RE = re.compile(r"^\d+$")
_LINE_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_ODDS_RE = re.compile(r"^[+-]\d+$")


class InvalidSelectionToken(ValueError):
    """Raised when a token cannot be built or parsed."""


@dataclass(frozen=True)
class DecodedSelection:
    side: Side
    game_id: str
    line: str
    odds: str

    def encode(self) -> str:
        return format_token(self.side, self.game_id, self.line, self.odds)


def _validate(game_id: str, line: str, odds: str) -> None:
    if not _GAME_ID_RE.match(game_id):
        raise InvalidSelectionToken(f"game id {game_id!r} is not numeric")
    if not _LINE_RE.match(line):
        raise InvalidSelectionToken(f"line {line!r} is not a decimal")
    if not _ODDS_RE.match(odds):
        raise InvalidSelectionToken(f"odds {odds!r} are not signed American odds")


def format_token(side: Side, game_id: str, line: str, odds: str) -> str:
    _validate(game_id, line, odds)
    return f"{int(side)}_{game_id}_{line}_{odds}"


def encode(game: GameLines, market: Market, side: Side) -> str:
    """Build the token for one side of one market of ``game``."""

    market = Market(market)
    primary = Side(side) is Side.PRIMARY
    if market is Market.SPREAD:
        line = game.spread.visitor_line if primary else game.spread.home_line
        odds = game.spread.visitor_odds if primary else game.spread.home_odds
    elif market is Market.TOTAL:
        line = game.total.line
        odds = game.total.over_odds if primary else game.total.under_odds
    elif market is Market.MONEYLINE:
        line = "0"
        odds = game.moneyline.visitor_odds if primary else game.moneyline.home_odds
    else:  # pragma: no cover - enum is closed
        raise InvalidSelectionToken(f"unknown market {market!r}")
    return format_token(Side(side), game.id, line, odds)


def decode(token: str) -> DecodedSelection:
    parts = (token or "").strip().split("_")
    if len(parts) != 4:
        raise InvalidSelectionToken(f"token {token!r} must have four '_' separated fields")
    raw_side, game_id, line, odds = parts
    if raw_side not in ("0", "1"):
        raise InvalidSelectionToken(f"side {raw_side!r} must be 0 or 1")
    _validate(game_id, line, odds)
    return DecodedSelection(side=Side(int(raw_side)), game_id=game_id, line=line, odds=odds)


def build_tokens(game: GameLines) -> SelectionTokens:
    """All six tokens for ``game``; raises ``InvalidSelectionToken`` if any is underivable."""

    return SelectionTokens(
        spread_visitor=encode(game, Market.SPREAD, Side.PRIMARY),
        spread_home=encode(game, Market.SPREAD, Side.SECONDARY),
        over=encode(game, Market.TOTAL, Side.PRIMARY),
        under=encode(game, Market.TOTAL, Side.SECONDARY),
        moneyline_visitor=encode(game, Market.MONEYLINE, Side.PRIMARY),
        moneyline_home=encode(game, Market.MONEYLINE, Side.SECONDARY),
    )
