"""Upstream error text and codes mapped onto ``ErrorKind``.

Rules are ordered; the first rule with any matching substring wins. Text that matches no
rule falls back to the phase's generic kind rather than a guessed specific one.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from betbridge.errors import ErrorKind


class Phase(str, Enum):
    COMPILE = "compile"
    CONFIRM = "confirm"
    POST = "post"


Rule = Tuple[Tuple[str, ...], ErrorKind]

COMPILE_RULES: Tuple[Rule, ...] = (
    (("line has changed", "line changed", "odds", "changed"), ErrorKind.ODDS_CHANGED),
    (("closed", "unavailable", "suspended"), ErrorKind.MARKET_CLOSED),
    (("invalid", "not found", "not available", "selection"), ErrorKind.INVALID_SELECTION),
)

CONFIRM_RULES: Tuple[Rule, ...] = (
    (("password",), ErrorKind.INVALID_PASSWORD),
    (("balance", "insufficient"), ErrorKind.INSUFFICIENT_BALANCE),
    (("minimum",), ErrorKind.MIN_BET_NOT_MET),
    (("odds", "changed"), ErrorKind.ODDS_CHANGED),
    (("closed", "unavailable"), ErrorKind.MARKET_CLOSED),
)

POST_ERROR_CODES: Dict[str, ErrorKind] = {
    "GAMELINECHANGE": ErrorKind.ODDS_CHANGED,
}

_RULES: Dict[Phase, Tuple[Rule, ...]] = {
    Phase.COMPILE: COMPILE_RULES,
    Phase.CONFIRM: CONFIRM_RULES,
    Phase.POST: (),
}

_GENERIC: Dict[Phase, ErrorKind] = {
    Phase.COMPILE: ErrorKind.COMPILE_ERROR,
    Phase.CONFIRM: ErrorKind.CONFIRM_ERROR,
    Phase.POST: ErrorKind.POST_ERROR,
}

# Friendly text for kinds where upstream wording is noisy.
MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.INVALID_PASSWORD: "Invalid password",
    ErrorKind.INSUFFICIENT_BALANCE: "Insufficient balance",
    ErrorKind.MIN_BET_NOT_MET: "Minimum bet not met",
    ErrorKind.ODDS_CHANGED: "Odds have changed",
    ErrorKind.MARKET_CLOSED: "Market is closed",
    ErrorKind.SESSION_EXPIRED: "Session expired. Please login again.",
}


def classify_message(message: str, phase: Phase) -> ErrorKind:
    lowered = (message or "").lower()
    for needles, kind in _RULES[phase]:
        if any(needle in lowered for needle in needles):
            return kind
    return _GENERIC[phase]


def classify_post_code(code: str) -> ErrorKind:
    return POST_ERROR_CODES.get((code or "").strip().upper(), ErrorKind.POST_ERROR)


def describe(kind: ErrorKind, upstream_text: str) -> str:
    """Human-readable detail: friendly text plus upstream's own words when they differ."""

    friendly = MESSAGES.get(kind)
    if not friendly:
        return upstream_text
    if upstream_text and upstream_text.lower() != friendly.lower():
        return f"{friendly}: {upstream_text}"
    return friendly
