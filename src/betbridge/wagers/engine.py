"""Three-phase wager placement: compile -> confirm -> post."""

from __future__ import annotations

import json
import logging
import re
from decimal import Decimal
from typing import Any, Optional, Union

from betbridge.errors import ErrorKind, NetworkError
from betbridge.odds.text import american_to_decimal, format_line, format_odds
from betbridge.upstream.session import UpstreamSession
from betbridge.upstream.transport import (
    AJAX_HEADERS,
    COMPILE_PATH,
    CONFIRM_PATH,
    POST_PATH,
    looks_like_login_page,
    mentions_login,
    payload_of,
)
from betbridge.wagers.classify import Phase, classify_message, classify_post_code, describe
from betbridge.wagers.codec import DecodedSelection, InvalidSelectionToken, decode
from betbridge.wagers.types import (
    CompiledWager,
    ConfirmedWager,
    Placed,
    Rejected,
    WagerOutcome,
    WagerRequest,
)

logger = logging.getLogger(__name__)

_TOTAL_DESCRIPTION_RE = re.compile(r"\b(?:over|under|o|u)\s*\d", re.IGNORECASE)


def _expired(session: UpstreamSession) -> Rejected:
    session.mark_expired()
    return Rejected(ErrorKind.SESSION_EXPIRED, describe(ErrorKind.SESSION_EXPIRED, ""))


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _result(payload: Any) -> dict[str, Any]:
    result = payload.get("result") if isinstance(payload, dict) else None
    return result if isinstance(result, dict) else {}


def _amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


def payout_for(amount: int, odds: str) -> float:
    """Win amount for ``amount`` risked at American ``odds``."""

    return round(amount * (american_to_decimal(int(odds)) - 1), 2)


def _line_moved(detail: dict[str, Any], selection: DecodedSelection) -> bool:
    """True when the compiled leg reports a current price that differs from the token's."""

    current_odds = format_odds(detail.get("Odds"))
    if current_odds is not None and current_odds != selection.odds:
        return True
    points = detail.get("Points")
    current_line = None if isinstance(points, dict) else format_line(points)
    if current_line is None:
        return False
    current, expected = Decimal(current_line), Decimal(selection.line)
    # totals may come back signed by side; spreads keep their sign
    if _TOTAL_DESCRIPTION_RE.search(str(detail.get("Description") or "")):
        return abs(current) != abs(expected)
    return current != expected


def _session_lost(response: Any, payload: Any) -> bool:
    return looks_like_login_page(response, payload) or mentions_login(payload)


def compile_wager(
    session: UpstreamSession,
    request: WagerRequest,
    selection: DecodedSelection,
) -> Union[CompiledWager, Rejected]:
    """Phase 1: validate the token is still a live line and collect upstream identifiers."""

    response = session.transport.post_form(
        COMPILE_PATH,
        {"open": "0", "WT": str(int(request.wager_type)), "sel": request.selection_token},
        headers=AJAX_HEADERS,
    )
    payload = payload_of(response)
    if _session_lost(response, payload):
        return _expired(session)
    if not isinstance(payload, dict):
        return Rejected(ErrorKind.COMPILE_ERROR, "Unexpected compile response from upstream")

    result = _result(payload)
    message = result.get("ErrorMessage")
    if message:
        kind = classify_message(str(message), Phase.COMPILE)
        return Rejected(kind, describe(kind, str(message)))

    compiled = result.get("WagerCompile")
    if not isinstance(compiled, dict):
        return Rejected(ErrorKind.COMPILE_ERROR, "Could not compile wager - invalid selection")

    wager = _first(compiled.get("details")) or {}
    leg = _first(wager.get("details")) if isinstance(wager, dict) else None
    if not isinstance(leg, dict) or not leg.get("IdGame"):
        logger.warning("Compile response for %s lacks a leg descriptor", request.selection_token)
        return Rejected(
            ErrorKind.INVALID_SELECTION,
            "Invalid bet selection - please refresh odds and try again",
        )
    if _line_moved(leg, selection):
        return Rejected(ErrorKind.ODDS_CHANGED, describe(ErrorKind.ODDS_CHANGED, ""))

    description = leg.get("Description") or "Unknown bet"
    logger.info("Compiled wager: %s", description)
    return CompiledWager(
        selection=request.selection_token,
        wager_type=request.wager_type,
        wager_type_id=str(wager.get("IDWT") or ""),
        game_id=leg["IdGame"],
        play=leg.get("Play"),
        pitcher=leg.get("Pitcher") or 0,
        teaser_points_purchased=leg.get("TeaserPointsPurchased") or 0,
        description=str(description),
    )


def _wager_form(compiled: CompiledWager, amount: int) -> dict[str, str]:
    return {
        "WT": str(int(compiled.wager_type)),
        "open": "0",
        "IDWT": compiled.wager_type_id,
        "sel": compiled.selection,
        "amountType": "1",
        "sameAmount": "true",
        "detailData": json.dumps(compiled.detail_data(amount)),
        "sameAmountNumber": str(amount),
        "useFreePlayAmount": "false",
        "roundRobinCombinations": "0",
    }


def confirm_wager(
    session: UpstreamSession,
    compiled: CompiledWager,
    request: WagerRequest,
    selection: DecodedSelection,
) -> Union[ConfirmedWager, Rejected]:
    """Phase 2: stake and credential; upstream re-checks funds, minimums and freshness."""

    form = _wager_form(compiled, request.amount)
    form["password"] = request.credential
    response = session.transport.post_form(CONFIRM_PATH, form, headers=AJAX_HEADERS)
    payload = payload_of(response)
    if _session_lost(response, payload):
        return _expired(session)
    if not isinstance(payload, dict):
        return Rejected(ErrorKind.CONFIRM_ERROR, "Unexpected confirm response from upstream")

    result = _result(payload)
    message = result.get("ErrorMessage")
    if message:
        kind = classify_message(str(message), Phase.CONFIRM)
        return Rejected(kind, describe(kind, str(message)))

    detail = _first(result.get("details")) or {}
    risk = _amount(detail.get("Risk")) if isinstance(detail, dict) else None
    win = _amount(detail.get("Win")) if isinstance(detail, dict) else None
    return ConfirmedWager(
        compiled=compiled,
        amount=request.amount,
        risk=risk if risk is not None else float(request.amount),
        win=win if win is not None else payout_for(request.amount, selection.odds),
    )


def _post_result(payload: Any) -> Optional[dict[str, Any]]:
    candidates = []
    if isinstance(payload, dict):
        result = payload.get("result")
        candidates.append(_first(result))
        candidates.append(result)
    else:
        candidates.append(_first(payload))
    for candidate in candidates:
        if isinstance(candidate, dict) and isinstance(candidate.get("WagerPostResult"), dict):
            return candidate["WagerPostResult"]
    return None


def post_wager(
    session: UpstreamSession,
    confirmed: ConfirmedWager,
    request: WagerRequest,
) -> WagerOutcome:
    """Phase 3: commit the wager."""

    compiled = confirmed.compiled
    post_request: dict[str, Any] = _wager_form(compiled, confirmed.amount)
    post_request.update(
        {
            "WT": int(compiled.wager_type),
            "open": 0,
            "sameAmount": True,
            "amountType": 1,
            "useFreePlayAmount": False,
            "confirmPassword": request.credential,
        }
    )
    response = session.transport.post_form(
        POST_PATH,
        {"postWagerRequests": json.dumps([post_request])},
        headers=AJAX_HEADERS,
    )
    payload = payload_of(response)
    if _session_lost(response, payload):
        return _expired(session)

    post_result = _post_result(payload)
    if post_result is None:
        message = _result(payload).get("ErrorMessage")
        if message:
            return Rejected(ErrorKind.POST_ERROR, str(message))
        logger.warning("Post response carried no WagerPostResult: %.200r", payload)
        return Rejected(ErrorKind.POST_ERROR, "Unexpected post response from upstream")

    error_key = post_result.get("ErrorMsgKey")
    if error_key:
        kind = classify_post_code(str(error_key))
        return Rejected(kind, describe(kind, str(error_key)))

    detail = _first(post_result.get("details")) or {}
    ticket = detail.get("TicketNumber") if isinstance(detail, dict) else None
    risk = _amount(detail.get("Risk")) if isinstance(detail, dict) else None
    win = _amount(detail.get("Win")) if isinstance(detail, dict) else None
    placed = Placed(
        ticket_number=str(ticket) if ticket else "Unknown",
        risk_amount=risk if risk is not None else confirmed.risk,
        win_amount=win if win is not None else confirmed.win,
        description=compiled.description,
    )
    logger.info("Wager placed, ticket %s", placed.ticket_number)
    return placed


def place_bet(session: UpstreamSession, request: WagerRequest) -> WagerOutcome:
    """Run compile, confirm and post; the first rejection short-circuits the rest.

    Never raises for upstream or transport failures. Nothing is retried: on
    ``ODDS_CHANGED`` or ``SESSION_EXPIRED`` the caller re-fetches or re-authenticates
    and starts again from compile.
    """
    if not session.authenticated:
        return Rejected(ErrorKind.NOT_AUTHENTICATED, "Not authenticated")
    try:
        selection = decode(request.selection_token)
    except InvalidSelectionToken as exc:
        return Rejected(ErrorKind.INVALID_SELECTION, str(exc))

    try:
        compiled = compile_wager(session, request, selection)
        if isinstance(compiled, Rejected):
            return _rejected(compiled, Phase.COMPILE)
        confirmed = confirm_wager(session, compiled, request, selection)
        if isinstance(confirmed, Rejected):
            return _rejected(confirmed, Phase.CONFIRM)
        outcome = post_wager(session, confirmed, request)
    except NetworkError as exc:
        logger.warning("Wager placement aborted: %s", exc)
        return Rejected(ErrorKind.NETWORK_ERROR, str(exc))
    if isinstance(outcome, Rejected):
        return _rejected(outcome, Phase.POST)
    return outcome


def _rejected(outcome: Rejected, phase: Phase) -> Rejected:
    logger.warning("Wager rejected at %s: %s (%s)", phase.value, outcome.reason.value, outcome.detail)
    return outcome
