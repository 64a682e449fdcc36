"""Session manager: login handshake, authentication state and logout."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import httpx
from bs4 import BeautifulSoup

from betbridge.config import Settings
from betbridge.errors import AuthError, NetworkError, NotAuthenticated
from betbridge.upstream.account import Balance, parse_balance_markup
from betbridge.upstream.transport import LOGIN_PATH, LOGOUT_PATH, WELCOME_PATH, UpstreamTransport

logger = logging.getLogger(__name__)

SIGNED_IN_URL_MARKERS = ("welcome.aspx", "/wager/")
SIGNED_IN_BODY_MARKERS = ("welcome back", "hello,", "logout", "current-balance")
INVALID_CREDENTIAL_MARKERS = ("invalid", "incorrect")


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class LoginResult:
    username: str
    balance: Balance
    message: str


def extract_hidden_fields(markup: str) -> Dict[str, str]:
    """Hidden form inputs (``__VIEWSTATE`` and friends), quoted or not, in any attribute order."""

    soup = BeautifulSoup(markup, "html.parser")
    fields: Dict[str, str] = {}
    for tag in soup.find_all("input"):
        if str(tag.get("type") or "").lower() != "hidden" or not tag.get("name"):
            continue
        fields[tag["name"]] = tag.get("value") or ""
    return fields


def classify_login_response(response: httpx.Response) -> bool:
    """Heuristic: upstream gives no structured success code after the login post."""

    final_url = str(response.url).lower()
    body = response.text.lower()
    invalid = any(marker in body for marker in INVALID_CREDENTIAL_MARKERS)
    if any(marker in final_url for marker in SIGNED_IN_URL_MARKERS):
        return True
    if not invalid and any(marker in body for marker in SIGNED_IN_BODY_MARKERS):
        return True
    if invalid:
        raise AuthError("Invalid username or password")
    return False


class UpstreamSession:
    """One cookie-bearing upstream session per logical user. Not shared between callers."""

    def __init__(
        self,
        transport: Optional[UpstreamTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.transport = transport or UpstreamTransport(settings)
        self.state = SessionState.UNAUTHENTICATED
        self.username: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def require_authenticated(self) -> None:
        if not self.authenticated:
            raise NotAuthenticated("Not authenticated")

    def mark_expired(self) -> None:
        if self.authenticated:
            logger.warning("Upstream session for %s expired", self.username)
        self.state = SessionState.UNAUTHENTICATED

    def login(self, username: str, password: str) -> LoginResult:
        if not username or not password:
            raise AuthError("Username and password are required")
        self.state = SessionState.UNAUTHENTICATED

        login_page = self.transport.get(LOGIN_PATH)
        form = extract_hidden_fields(login_page.text)
        form.update({"Account": username, "Password": password, "BtnSubmit": "Sign in"})
        response = self.transport.post_form(
            LOGIN_PATH,
            form,
            headers={
                "Origin": self.transport.base_url,
                "Referer": f"{self.transport.base_url}{LOGIN_PATH}",
            },
        )
        logger.debug("Login response %s at %s", response.status_code, response.url)

        if not classify_login_response(response):
            logger.warning("Login for %s not recognised as signed in", username)
            raise AuthError("Login failed - unrecognized response from upstream")

        self.state = SessionState.AUTHENTICATED
        self.username = username
        logger.info("Logged in as %s", username)
        return LoginResult(
            username=username,
            balance=self._landing_balance(response),
            message=f"Logged in as {username}",
        )

    def _landing_balance(self, login_response: httpx.Response) -> Balance:
        balance: Optional[Balance] = None
        try:
            balance = parse_balance_markup(self.transport.get(WELCOME_PATH).text)
        except NetworkError as exc:
            logger.warning("Welcome page unavailable after login: %s", exc)
        if balance is None:
            balance = parse_balance_markup(login_response.text)
        return balance or Balance()

    def logout(self) -> None:
        """Best effort: local state is cleared whatever upstream answers."""

        try:
            self.transport.get(LOGOUT_PATH)
        except NetworkError as exc:
            logger.warning("Logout request failed for %s: %s", self.username, exc)
        finally:
            logger.info("Logged out %s", self.username)
            self.state = SessionState.UNAUTHENTICATED
            self.username = None
            self.transport.clear_cookies()

    def close(self) -> None:
        self.transport.close()
