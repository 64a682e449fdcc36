"""Error taxonomy shared by the upstream client, wager engine and facades."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure classes surfaced to callers as ``errorKind``."""

    AUTH_ERROR = "AUTH_ERROR"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    COMPILE_ERROR = "COMPILE_ERROR"
    INVALID_SELECTION = "INVALID_SELECTION"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    MIN_BET_NOT_MET = "MIN_BET_NOT_MET"
    ODDS_CHANGED = "ODDS_CHANGED"
    MARKET_CLOSED = "MARKET_CLOSED"
    CONFIRM_ERROR = "CONFIRM_ERROR"
    POST_ERROR = "POST_ERROR"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    NETWORK_ERROR = "NETWORK_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class BetBridgeError(RuntimeError):
    """Base error for upstream operations."""

    kind: ErrorKind = ErrorKind.NETWORK_ERROR


class AuthError(BetBridgeError):
    """Raised when upstream rejects credentials or the login response is unclassifiable."""

    kind = ErrorKind.AUTH_ERROR


class NotAuthenticated(BetBridgeError):
    """Raised when an operation needs a live session and there is none."""

    kind = ErrorKind.NOT_AUTHENTICATED


class SessionExpired(BetBridgeError):
    """Raised when upstream answers with its login page instead of the requested data."""

    kind = ErrorKind.SESSION_EXPIRED


class NetworkError(BetBridgeError):
    """Raised on transport failures: DNS, connection reset, timeout, upstream 5xx."""

    kind = ErrorKind.NETWORK_ERROR
