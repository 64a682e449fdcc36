"""FastAPI facade over the upstream integration client."""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from betbridge import __version__
from betbridge.api.schemas import BetRequest, ErrorResponse, LoginRequest, LoginResponse
from betbridge.config import get_settings
from betbridge.errors import ErrorKind
from betbridge.service import SportsbookService, error_payload

settings = get_settings()

app = FastAPI(
    title="betbridge API",
    version=__version__,
    description="Sportsbook upstream bridge: login, odds, wager placement, balance.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATUS_BY_KIND: Dict[str, int] = {
    ErrorKind.ODDS_CHANGED.value: 409,
    ErrorKind.INSUFFICIENT_BALANCE.value: 402,
    ErrorKind.MARKET_CLOSED.value: 410,
    ErrorKind.MIN_BET_NOT_MET.value: 400,
    ErrorKind.VALIDATION_ERROR.value: 400,
    ErrorKind.INVALID_PASSWORD.value: 401,
    ErrorKind.AUTH_ERROR.value: 401,
    ErrorKind.NOT_AUTHENTICATED.value: 401,
    ErrorKind.SESSION_EXPIRED.value: 401,
    ErrorKind.NETWORK_ERROR.value: 502,
}
ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in sorted(set(STATUS_BY_KIND.values()))
}


@dataclass
class SessionEntry:
    service: SportsbookService
    username: str
    login_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # one in-flight wager per upstream session
    wager_lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    """In-memory map of opaque session ids to logged-in services."""

    def __init__(self) -> None:
        self._entries: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def add(self, entry: SessionEntry) -> str:
        session_id = f"session_{secrets.token_urlsafe(16)}"
        with self._lock:
            self._entries[session_id] = entry
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[SessionEntry]:
        if not session_id:
            return None
        with self._lock:
            return self._entries.get(session_id)

    def pop(self, session_id: Optional[str]) -> Optional[SessionEntry]:
        if not session_id:
            return None
        with self._lock:
            return self._entries.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return _registry


def get_service_factory() -> Callable[[], SportsbookService]:
    return SportsbookService


RegistryDep = Annotated[SessionRegistry, Depends(get_registry)]
FactoryDep = Annotated[Callable[[], SportsbookService], Depends(get_service_factory)]
SessionHeader = Annotated[Optional[str], Header(alias="X-Session-Id")]


def respond(payload: Dict[str, Any]) -> JSONResponse:
    if payload.get("success"):
        return JSONResponse(payload)
    status = STATUS_BY_KIND.get(payload.get("errorKind") or "", 400)
    return JSONResponse(payload, status_code=status)


def not_authenticated() -> JSONResponse:
    return respond(error_payload(ErrorKind.NOT_AUTHENTICATED, "Not authenticated"))


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/login", response_model=LoginResponse, responses=ERROR_RESPONSES)
def login(payload: LoginRequest, registry: RegistryDep, factory: FactoryDep) -> JSONResponse:
    if not payload.username or not payload.password:
        return respond(
            error_payload(ErrorKind.VALIDATION_ERROR, "Username and password are required")
        )
    service = factory()
    result = service.login(payload.username, payload.password)
    if not result.get("success"):
        service.close()
        return respond(result)
    session_id = registry.add(SessionEntry(service=service, username=payload.username))
    return respond(
        {
            "success": True,
            "sessionId": session_id,
            "balance": result["balance"],
            "message": f"Welcome back, {payload.username}!",
        }
    )


@app.get("/api/sports")
def sports(registry: RegistryDep, x_session_id: SessionHeader = None) -> JSONResponse:
    entry = registry.get(x_session_id)
    if entry is None:
        return not_authenticated()
    return respond(entry.service.list_leagues())


@app.get("/api/odds/{league_id}")
def odds(
    league_id: int,
    registry: RegistryDep,
    x_session_id: SessionHeader = None,
    wager_type: Annotated[int, Query(alias="wagerType", ge=0, le=2)] = 0,
) -> JSONResponse:
    entry = registry.get(x_session_id)
    if entry is None:
        return not_authenticated()
    return respond(entry.service.fetch_schedule(league_id, wager_type))


@app.get("/api/search")
def search(
    registry: RegistryDep,
    q: Annotated[str, Query(min_length=1)],
    x_session_id: SessionHeader = None,
    league_id: Annotated[Optional[int], Query(alias="leagueId")] = None,
) -> JSONResponse:
    entry = registry.get(x_session_id)
    if entry is None:
        return not_authenticated()
    return respond(entry.service.search_schedule(q, league_id))


@app.post("/api/bet", responses=ERROR_RESPONSES)
def bet(
    payload: BetRequest,
    registry: RegistryDep,
    x_session_id: SessionHeader = None,
) -> JSONResponse:
    entry = registry.get(x_session_id)
    if entry is None:
        return not_authenticated()
    with entry.wager_lock:
        result = entry.service.place_bet(
            payload.selection, payload.amount, payload.password, payload.wager_type
        )
    return respond(result)


@app.get("/api/balance")
def balance(registry: RegistryDep, x_session_id: SessionHeader = None) -> JSONResponse:
    entry = registry.get(x_session_id)
    if entry is None:
        return not_authenticated()
    return respond(entry.service.get_balance())


@app.post("/api/logout")
def logout(registry: RegistryDep, x_session_id: SessionHeader = None) -> JSONResponse:
    entry = registry.pop(x_session_id)
    if entry is not None:
        entry.service.logout()
        entry.service.close()
    return respond({"success": True, "message": "Logged out successfully"})
