"""Selection token codec tests."""

from __future__ import annotations

import pytest

from betbridge.odds.types import GameLines, Market, MoneyLine, Side, SpreadLine, Team, TotalLine
from betbridge.wagers import codec


def _game(**overrides) -> GameLines:
    values = dict(
        id="5421290",
        group_id=12,
        date="02/03",
        time="22:10",
        visiting_team=Team(name="Boston Celtics", rotation_number="501"),
        home_team=Team(name="Dallas Mavericks", rotation_number="502"),
        spread=SpreadLine(
            visitor_line="4.5",
            visitor_odds="-108",
            home_line="-4.5",
            home_odds="-112",
            visitor_display="+4½-108",
            home_display="-4½-112",
        ),
        total=TotalLine(line="222", over_odds="-110", under_odds="-105", display="222-110"),
        moneyline=MoneyLine(visitor_odds="+160", home_odds="-190"),
    )
    values.update(overrides)
    return GameLines(**values)


def test_build_tokens_covers_all_six_lines() -> None:
    tokens = codec.build_tokens(_game())
    assert tokens.spread_visitor == "0_5421290_4.5_-108"
    assert tokens.spread_home == "1_5421290_-4.5_-112"
    assert tokens.over == "0_5421290_222_-110"
    assert tokens.under == "1_5421290_222_-105"
    assert tokens.moneyline_visitor == "0_5421290_0_+160"
    assert tokens.moneyline_home == "1_5421290_0_-190"


def test_encode_accepts_market_names() -> None:
    assert codec.encode(_game(), "total", Side.SECONDARY) == "1_5421290_222_-105"
    assert codec.encode(_game(), Market.MONEYLINE, 0) == "0_5421290_0_+160"


def test_decode_splits_token_fields() -> None:
    decoded = codec.decode("0_5421290_4.5_-108")
    assert decoded.side is Side.PRIMARY
    assert decoded.game_id == "5421290"
    assert decoded.line == "4.5"
    assert decoded.odds == "-108"
    assert decoded.encode() == "0_5421290_4.5_-108"


def test_decode_keeps_negative_lines_and_plus_odds() -> None:
    decoded = codec.decode("1_77_-3_+120")
    assert decoded.side is Side.SECONDARY
    assert decoded.line == "-3"
    assert decoded.odds == "+120"


@pytest.mark.parametrize(
    "token",
    [
        "",
        "0_5421290_4.5",
        "0_5421290_4.5_-108_extra",
        "2_5421290_4.5_-108",
        "0_abc_4.5_-108",
        "0_5421290_four_-108",
        "0_5421290_4.5_108",
        "0_5421290_4.5_-1o8",
    ],
)
def test_decode_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(codec.InvalidSelectionToken):
        codec.decode(token)


def test_build_tokens_rejects_non_numeric_game_id() -> None:
    with pytest.raises(codec.InvalidSelectionToken):
        codec.build_tokens(_game(id="abc"))


def test_pick_em_spread_encodes_as_zero_line() -> None:
    spread = SpreadLine(
        visitor_line="0",
        visitor_odds="-110",
        home_line="0",
        home_odds="-110",
        visitor_display="pk-110",
        home_display="pk-110",
    )
    assert codec.encode(_game(spread=spread), Market.SPREAD, Side.PRIMARY) == "0_5421290_0_-110"


@pytest.mark.parametrize("market", list(Market))
@pytest.mark.parametrize("side", list(Side))
def test_decode_reverses_encode(market: Market, side: Side) -> None:
    game = _game()
    decoded = codec.decode(codec.encode(game, market, side))
    assert decoded.side is side
    assert decoded.game_id == game.id
    assert decoded.encode() == codec.encode(game, market, side)
