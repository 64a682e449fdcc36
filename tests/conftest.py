"""Shared fixtures: a scripted upstream behind ``httpx.MockTransport``."""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterator, List, Tuple
from urllib.parse import parse_qsl

import httpx
import pytest

from betbridge.config import Settings
from betbridge.upstream.session import UpstreamSession
from betbridge.upstream.transport import (
    LOGIN_PATH,
    LOGOUT_PATH,
    WELCOME_PATH,
    UpstreamTransport,
)

Handler = Callable[[httpx.Request], httpx.Response]

BASE_URL = "https://upstream.test"

LOGIN_PAGE = """
<html><body>
<form method="post" action="./Login.aspx" id="form1">
  <input type="hidden" name="__VIEWSTATE" id="__VIEWSTATE" value="dDwtMTA4MzE0MjEwNTs7Pg==" />
  <input value="8D0E13E6" type="hidden" name="__VIEWSTATEGENERATOR" />
  <input name="Account" type="text" />
  <input name="Password" type="password" />
  <input type="submit" name="BtnSubmit" value="Sign in" />
</form>
</body></html>
"""

WELCOME_PAGE = """
<html><body>
<div class="header">Welcome back, PLAYER1 | <a href="/Logout.aspx">Logout</a></div>
<span class="current-balance">$1,250.75</span>
<span class="avail-balance">$1,150.00</span>
<span class="at-risk">$100</span>
</body></html>
"""

GAME_ENTRY: Dict[str, Any] = {
    "idgm": 5421290,
    "idgp": 12,
    "gmdt": "20260203",
    "gmtm": "22:10:00",
    "vtm": "Boston Celtics",
    "htm": "Dallas Mavericks",
    "vnum": "501",
    "hnum": "502",
    "GameLines": [
        {
            "vsprdh": "+4&frac12;-108",
            "vsprdt": 4.5,
            "hsprdh": "-4&frac12;-112",
            "hsprdt": -4.5,
            "ovh": "o222-110",
            "unh": "u222-110",
            "unt": 222,
            "voddsh": "+160",
            "hoddsh": "-190",
        }
    ],
}


def html(text: str, status: int = 200, headers: Dict[str, str] | None = None) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        merged = {"content-type": "text/html; charset=utf-8"}
        merged.update(headers or {})
        return httpx.Response(status, text=text, headers=merged)

    return handler


def json_body(payload: Any, status: int = 200) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    return handler


def redirect(location: str, headers: Dict[str, str] | None = None) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        merged = {"location": location}
        merged.update(headers or {})
        return httpx.Response(302, headers=merged)

    return handler


def connection_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection reset by peer", request=request)


def schedule_document(*entries: Dict[str, Any], description: str = "NBA - GAME LINES") -> Dict[str, Any]:
    return {
        "result": {
            "listLeagues": [
                [
                    {"Description": "NBA - PROPS", "Games": [{"idgm": 1}]},
                    {"Description": description, "Games": list(entries)},
                ]
            ]
        }
    }


def form_of(request: httpx.Request) -> Dict[str, str]:
    return dict(parse_qsl(request.content.decode(), keep_blank_values=True))


class FakeUpstream:
    """Routes ``(method, path)`` to queued handlers; the last handler for a route repeats."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Handler]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *handlers: Handler) -> "FakeUpstream":
        self.routes[(method.upper(), path.lower())] = list(handlers)
        return self

    def allow_login(self, welcome: str = WELCOME_PAGE) -> "FakeUpstream":
        self.add("GET", LOGIN_PATH, html(LOGIN_PAGE))
        self.add(
            "POST",
            LOGIN_PATH,
            redirect(WELCOME_PATH, {"set-cookie": "ASP.NET_SessionId=abc123; path=/; HttpOnly"}),
        )
        self.add("GET", WELCOME_PATH, html(welcome))
        self.add("GET", LOGOUT_PATH, redirect(LOGIN_PATH))
        return self

    def expire(self, method: str, path: str) -> "FakeUpstream":
        return self.add(method, path, html(LOGIN_PAGE))

    def calls(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path.lower() == path.lower()]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handlers = self.routes.get((request.method, request.url.path.lower()))
        if not handlers:
            return httpx.Response(404, text="not found")
        handler = handlers.pop(0) if len(handlers) > 1 else handlers[0]
        return handler(request)


@pytest.fixture
def settings() -> Settings:
    return Settings(UPSTREAM_BASE_URL=BASE_URL, MIN_STAKE=25, DEFAULT_LEAGUE_ID=535)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_session(upstream: FakeUpstream, settings: Settings) -> Callable[[], UpstreamSession]:
    def factory() -> UpstreamSession:
        transport = UpstreamTransport(settings, transport=httpx.MockTransport(upstream))
        return UpstreamSession(transport=transport, settings=settings)

    return factory


@pytest.fixture
def session(make_session: Callable[[], UpstreamSession]) -> Iterator[UpstreamSession]:
    upstream_session = make_session()
    yield upstream_session
    upstream_session.close()


@pytest.fixture
def logged_in(session: UpstreamSession, upstream: FakeUpstream) -> UpstreamSession:
    upstream.allow_login()
    session.login("player1", "secret")
    return session


@pytest.fixture
def game_entry() -> Dict[str, Any]:
    return copy.deepcopy(GAME_ENTRY)


@pytest.fixture
def schedule_json() -> Callable[..., Dict[str, Any]]:
    return schedule_document


@pytest.fixture
def fake() -> SimpleNamespace:
    """Handler builders for tests that script their own routes."""

    return SimpleNamespace(
        html=html,
        json=json_body,
        redirect=redirect,
        connection_error=connection_error,
        form_of=form_of,
        login_page=LOGIN_PAGE,
        welcome_page=WELCOME_PAGE,
    )


MARKUP_BOARD = """
<table class="schedule">
  <tr><th>Feb 03</th><th>7:10 PM</th></tr>
  <tr class="team">
    <td>501</td><td><b>Boston Celtics</b></td><td>+4&frac12;-108</td><td>o222-110</td>
    <td>+160</td><td><input type="checkbox" value="0_5421290_4.5_-108" /></td>
  </tr>
  <tr class="team">
    <td>502</td><td>Dallas Mavericks</td><td>-4&frac12;-112</td><td>u222-110</td><td>-190</td>
  </tr>
  <tr><td>503</td><td>Miami Heat</td><td>+2-110</td><td>o215-110</td></tr>
  <tr><td>504</td><td>Orlando Magic</td><td>-2-110</td></tr>
</table>
"""


@pytest.fixture
def markup_board() -> str:
    return MARKUP_BOARD
