"""Operations exposed to the REST facade, one service per upstream session.

Every method returns a JSON-ready dict: the success payload with ``success: True``, or
``{"success": False, "error": ..., "errorKind": ...}``. Nothing here raises for upstream
failures.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from betbridge.config import Settings, get_settings
from betbridge.errors import BetBridgeError, ErrorKind
from betbridge.odds import normalizer
from betbridge.odds.leagues import list_leagues
from betbridge.odds.types import WagerType
from betbridge.upstream import account
from betbridge.upstream.session import UpstreamSession
from betbridge.wagers.engine import place_bet
from betbridge.wagers.types import Placed, WagerRequest

logger = logging.getLogger(__name__)


def error_payload(kind: ErrorKind, message: str) -> Dict[str, Any]:
    return {"success": False, "error": message, "errorKind": kind.value}


class SportsbookService:
    """Facade over one ``UpstreamSession``."""

    def __init__(
        self,
        session: Optional[UpstreamSession] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session or UpstreamSession(settings=self.settings)

    @property
    def username(self) -> Optional[str]:
        return self.session.username

    def login(self, username: str, password: str) -> Dict[str, Any]:
        try:
            result = self.session.login(username, password)
        except BetBridgeError as exc:
            return error_payload(exc.kind, str(exc))
        return {
            "success": True,
            "username": result.username,
            "balance": result.balance.to_dict(),
            "message": result.message,
        }

    def list_leagues(self) -> Dict[str, Any]:
        return {
            "success": True,
            "sports": [
                {"id": league.id, "name": league.name, "sport": league.sport}
                for league in list_leagues()
            ],
        }

    def fetch_schedule(self, league_id: int, wager_type: int = 0) -> Dict[str, Any]:
        try:
            schedule = normalizer.fetch_schedule(self.session, league_id, WagerType(wager_type))
        except ValueError:
            return error_payload(ErrorKind.VALIDATION_ERROR, f"Unknown wager type {wager_type}")
        except BetBridgeError as exc:
            return error_payload(exc.kind, str(exc))
        return {"success": True, "odds": schedule.to_dict()}

    def search_schedule(self, query: str, league_id: Optional[int] = None) -> Dict[str, Any]:
        league = league_id if league_id is not None else self.settings.default_league_id
        try:
            schedule = normalizer.search_schedule(self.session, query or "", league)
        except BetBridgeError as exc:
            return error_payload(exc.kind, str(exc))
        return {"success": True, "results": schedule.to_dict()}

    def validate_bet(
        self, selection: str, amount: Any, password: str, wager_type: int
    ) -> Optional[str]:
        """Fast-path checks before any upstream traffic; upstream still has the final word."""

        if not selection:
            return "Selection is required"
        if isinstance(amount, bool) or not isinstance(amount, int):
            return "Bet amount must be a whole number"
        if amount < self.settings.min_stake:
            return f"Minimum bet amount is ${self.settings.min_stake}"
        if not password:
            return "Password is required to confirm bet"
        if wager_type not in {int(member) for member in WagerType}:
            return f"Unknown wager type {wager_type}"
        return None

    def place_bet(
        self,
        selection: str,
        amount: int,
        password: str,
        wager_type: int = 0,
    ) -> Dict[str, Any]:
        problem = self.validate_bet(selection, amount, password, wager_type)
        if problem:
            return error_payload(ErrorKind.VALIDATION_ERROR, problem)
        outcome = place_bet(
            self.session,
            WagerRequest(
                selection_token=selection,
                amount=amount,
                credential=password,
                wager_type=WagerType(wager_type),
            ),
        )
        if isinstance(outcome, Placed):
            return {"success": True, **outcome.to_dict(), "message": "Bet placed successfully!"}
        return {"success": False, **outcome.to_dict()}

    def get_balance(self) -> Dict[str, Any]:
        try:
            balance = account.get_balance(self.session)
        except BetBridgeError as exc:
            return error_payload(exc.kind, str(exc))
        return {"success": True, "balance": balance.to_dict()}

    def logout(self) -> Dict[str, Any]:
        self.session.logout()
        return {"success": True, "message": "Logged out successfully"}

    def close(self) -> None:
        self.session.close()
