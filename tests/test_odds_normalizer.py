"""Schedule fetch, shape detection and fallback behaviour."""

from __future__ import annotations

import httpx
import pytest

from betbridge.errors import NotAuthenticated, SessionExpired
from betbridge.odds import normalizer
from betbridge.odds.leagues import fallback_message, get_league, list_leagues
from betbridge.odds.types import Schedule, ScheduleSource, WagerType
from betbridge.upstream.transport import SCHEDULE_PATH


def test_fetch_schedule_builds_tokens_from_json(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry)))

    schedule = normalizer.fetch_schedule(logged_in, 535)

    assert schedule.source is ScheduleSource.LIVE
    assert schedule.message is None
    [game] = schedule.games
    assert game.selection_tokens.spread_visitor == "0_5421290_4.5_-108"
    assert game.selection_tokens.under == "1_5421290_222_-110"
    assert game.selection_tokens.moneyline_home == "1_5421290_0_-190"

    request = upstream.calls(SCHEDULE_PATH)[-1]
    assert request.url.params["WT"] == "0"
    assert request.url.params["lg"] == "535"
    assert request.headers["X-Requested-With"] == "XMLHttpRequest"


def test_fetch_schedule_passes_wager_type(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry)))

    normalizer.fetch_schedule(logged_in, 4029, WagerType.TEASER)

    request = upstream.calls(SCHEDULE_PATH)[-1]
    assert request.url.params["WT"] == "2"
    assert request.url.params["lg"] == "4029"


def test_fetch_schedule_parses_markup_payload(logged_in, upstream, fake, markup_board) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.html(markup_board))

    schedule = normalizer.fetch_schedule(logged_in, 535)

    assert schedule.source is ScheduleSource.LIVE
    assert schedule.games[0].selection_tokens.spread_home == "1_5421290_-4.5_-112"


def test_empty_board_falls_back_with_league_message(logged_in, upstream, fake, schedule_json) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json()))

    schedule = normalizer.fetch_schedule(logged_in, 4029)

    assert schedule.source is ScheduleSource.FALLBACK
    assert schedule.games == []
    assert schedule.message == "No NFL games available (check if off-season)"


def test_games_without_derivable_tokens_are_dropped(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    bad = dict(game_entry, idgm="EXT-7")
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry, bad)))

    schedule = normalizer.fetch_schedule(logged_in, 535)

    assert [game.id for game in schedule.games] == ["5421290"]


def test_malformed_json_structure_falls_back(logged_in, upstream, fake) -> None:
    document = {"result": {"listLeagues": [[{"Description": "GAME LINES", "Games": 5}]]}}
    upstream.add("GET", SCHEDULE_PATH, fake.json(document))

    schedule = normalizer.fetch_schedule(logged_in, 535)

    assert schedule.source is ScheduleSource.FALLBACK
    assert schedule.message == fallback_message(535)


def test_unrecognised_payload_falls_back(logged_in, upstream) -> None:
    upstream.add(
        "GET",
        SCHEDULE_PATH,
        lambda request: httpx.Response(200, text="{not json", headers={"content-type": "application/json"}),
    )

    schedule = normalizer.fetch_schedule(logged_in, 43)

    assert schedule.source is ScheduleSource.FALLBACK
    assert schedule.games == []


def test_login_page_means_session_expired(logged_in, upstream) -> None:
    upstream.expire("GET", SCHEDULE_PATH)

    with pytest.raises(SessionExpired):
        normalizer.fetch_schedule(logged_in, 535)
    assert not logged_in.authenticated


def test_fetch_requires_login(session, upstream) -> None:
    with pytest.raises(NotAuthenticated):
        normalizer.fetch_schedule(session, 535)
    assert upstream.requests == []


def test_search_filters_by_team_and_rotation(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    other = dict(game_entry, idgm=5421300, vtm="Miami Heat", htm="Orlando Magic", vnum="503", hnum="504")
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry, other)))

    by_name = normalizer.search_schedule(logged_in, "celtics")
    by_rotation = normalizer.search_schedule(logged_in, "504")

    assert [game.id for game in by_name.games] == ["5421290"]
    assert [game.id for game in by_rotation.games] == ["5421300"]
    assert upstream.calls(SCHEDULE_PATH)[-1].url.params["quickfilter"] == "504"


def test_search_without_match_falls_back(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry)))

    schedule = normalizer.search_schedule(logged_in, "lakers")

    assert schedule.source is ScheduleSource.FALLBACK
    assert schedule.message == "No games matching 'lakers'"


def test_fallback_schedule_never_carries_games(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry)))
    game = normalizer.fetch_schedule(logged_in, 535).games[0]

    with pytest.raises(ValueError):
        Schedule(league_id=535, games=[game], source=ScheduleSource.FALLBACK)


def test_schedule_to_dict_shape(logged_in, upstream, fake, game_entry, schedule_json) -> None:
    upstream.add("GET", SCHEDULE_PATH, fake.json(schedule_json(game_entry)))

    payload = normalizer.fetch_schedule(logged_in, 535).to_dict()

    assert payload["leagueId"] == 535
    assert payload["source"] == "live"
    game = payload["games"][0]
    assert game["visitingTeam"] == {"name": "Boston Celtics", "rotationNumber": "501"}
    assert game["groupId"] == 12
    assert game["spread"]["visitorLine"] == "4.5"
    assert game["total"]["overOdds"] == "-110"
    assert game["moneyline"]["homeOdds"] == "-190"
    assert game["selectionTokens"]["over"] == "0_5421290_222_-110"
    assert game["selectionTokens"]["moneylineVisitor"] == "0_5421290_0_+160"


def test_league_catalogue() -> None:
    ids = [league.id for league in list_leagues()]
    assert ids == [535, 43, 4029, 430, 3, 1278, 1566, 1729]
    assert get_league(4029).name == "NFL"
    assert get_league(1) is None
    assert fallback_message(1729) == "No games available for league 1729"
