"""Cookie-persisting HTTP transport for the upstream sportsbook backend."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from betbridge.config import Settings, get_settings
from betbridge.errors import NetworkError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/Login.aspx"
LOGOUT_PATH = "/Logout.aspx"
WELCOME_PATH = "/wager/Welcome.aspx"
SCHEDULE_PATH = "/wager/NewScheduleHelper.aspx"
SCHEDULE_PAGE_PATH = "/wager/NewSchedule.aspx"
COMPILE_PATH = "/wager/CreateWagerHelper.aspx"
CONFIRM_PATH = "/wager/ConfirmWagerHelper.aspx"
POST_PATH = "/wager/PostWagerMultipleHelper.aspx"
PLAYER_INFO_PATH = "/wager/PlayerInfoHelper.aspx"

AJAX_HEADERS = {"X-Requested-With": "XMLHttpRequest"}

_LOGIN_PAGE_MARKERS = ("login.aspx", "btnsubmit", 'name="password"', ">login<")


class UpstreamTransport:
    """Thin wrapper around one ``httpx.Client`` whose cookie jar carries the upstream session."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.base_url = self.settings.upstream_base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.settings.upstream_timeout_s,
            follow_redirects=True,
            max_redirects=self.settings.upstream_max_redirects,
            transport=transport,
            headers={
                "User-Agent": self.settings.upstream_user_agent,
                "Accept": (
                    "text/html,application/xhtml+xml,application/xml;q=0.9,"
                    "image/avif,image/webp,*/*;q=0.8"
                ),
                "Accept-Language": "en-US,en;q=0.9",
                "Cache-Control": "no-cache",
                "Pragma": "no-cache",
            },
        )

    def __enter__(self) -> "UpstreamTransport":  # pragma: no cover - context sugar
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def clear_cookies(self) -> None:
        self._client.cookies.clear()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {path} failed with transport error: {exc}") from exc
        if response.is_server_error:
            raise NetworkError(f"{method} {path} failed with status {response.status_code}")
        logger.debug("%s %s -> %s (%s)", method, path, response.status_code, response.url)
        return response

    def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return self._request("GET", path, params=params, headers=headers)

    def post_form(
        self,
        path: str,
        data: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """POST ``data`` as ``application/x-www-form-urlencoded``."""

        merged = {"Content-Type": "application/x-www-form-urlencoded"}
        merged.update(headers or {})
        return self._request("POST", path, data=dict(data), headers=merged)


def payload_of(response: httpx.Response) -> Any:
    """Return the decoded JSON body when the response is JSON-shaped, else its text."""

    text = response.text
    content_type = response.headers.get("content-type", "").lower()
    stripped = text.lstrip()
    if "json" in content_type or stripped[:1] in ("{", "["):
        try:
            return json.loads(text)
        except ValueError:
            return text
    return text


def looks_like_login_page(response: httpx.Response, payload: Any = None) -> bool:
    """True when upstream answered with its login form, i.e. the session silently expired."""

    if "login.aspx" in response.url.path.lower():
        return True
    body = payload if payload is not None else payload_of(response)
    if not isinstance(body, str):
        return False
    lowered = body.lower()
    return any(marker in lowered for marker in _LOGIN_PAGE_MARKERS)


def mentions_login(payload: Any) -> bool:
    """Looser check for wager helpers: any non-JSON body that mentions login at all."""

    return isinstance(payload, str) and "login" in payload.lower()
