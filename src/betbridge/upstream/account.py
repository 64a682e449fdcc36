"""Account balance reader."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from itertools import chain
from typing import TYPE_CHECKING, Any, Optional

from bs4 import BeautifulSoup

from betbridge.errors import SessionExpired
from betbridge.upstream.transport import (
    AJAX_HEADERS,
    PLAYER_INFO_PATH,
    looks_like_login_page,
    payload_of,
)

if TYPE_CHECKING:  # pragma: no cover
    from betbridge.upstream.session import UpstreamSession

logger = logging.getLogger(__name__)

_AMOUNT_RE = re.compile(r"^\$?\s*(-?[0-9][0-9,]*(?:\.\d+)?)")
# (css class, label) anchors per balance figure, class first
_MARKUP_ANCHORS = {
    "current": ("current-balance", "Current Balance"),
    "available": ("avail-balance", "Available Balance"),
    "at_risk": ("at-risk", "Amount at Risk"),
}


@dataclass(frozen=True)
class Balance:
    current: int = 0
    available: int = 0
    at_risk: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"current": self.current, "available": self.available, "atRisk": self.at_risk}


def parse_amount(value: Any) -> int:
    """``"100,172.50"`` -> ``100172``; blanks, junk and negatives become ``0``."""

    if value is None or isinstance(value, bool):
        return 0
    raw = str(value).replace(",", "").replace("$", "").strip()
    if not raw:
        return 0
    try:
        amount = int(Decimal(raw))
    except (InvalidOperation, ValueError):
        return 0
    return max(amount, 0)


def parse_balance_markup(markup: str) -> Optional[Balance]:
    """Class- or label-anchored balance figures; ``None`` when no figure is present."""

    soup = BeautifulSoup(markup, "html.parser")
    found: dict[str, int] = {}
    for field_name, (css_class, label) in _MARKUP_ANCHORS.items():
        figure = _figure_by_class(soup, css_class) or _figure_by_label(soup, label)
        if figure is not None:
            found[field_name] = parse_amount(figure)
    if not found:
        return None
    return Balance(**found)


def _figure_by_class(soup: BeautifulSoup, css_class: str) -> Optional[str]:
    tag = soup.find(class_=css_class) or soup.find(id=css_class)
    if tag is None:
        return None
    match = _AMOUNT_RE.match(tag.get_text(" ", strip=True))
    return match.group(1) if match else None


def _figure_by_label(soup: BeautifulSoup, label: str) -> Optional[str]:
    """First non-blank text after the label, in the same node or the ones that follow."""

    label_re = re.compile(rf"{label}[:\s]*", re.IGNORECASE)
    node = soup.find(string=label_re)
    if node is None:
        return None
    tail = label_re.split(str(node), maxsplit=1)[-1]
    for text in chain([tail], node.find_all_next(string=True)):
        text = text.strip()
        if text:
            match = _AMOUNT_RE.match(text)
            return match.group(1) if match else None
    return None


def balance_from_payload(payload: Any) -> Balance:
    """Structured ``result`` payload first, markup patterns second, zeros last."""

    if isinstance(payload, dict) and isinstance(payload.get("result"), dict):
        result = payload["result"]
        return Balance(
            current=parse_amount(result.get("CurrentBalance")),
            available=parse_amount(result.get("RealAvailBalance")),
            at_risk=parse_amount(result.get("AmountAtRisk")),
        )
    if isinstance(payload, str):
        return parse_balance_markup(payload) or Balance()
    return Balance()


def get_balance(session: "UpstreamSession") -> Balance:
    """Fetch current, available and at-risk figures for the logged-in account."""

    session.require_authenticated()
    response = session.transport.get(PLAYER_INFO_PATH, headers=AJAX_HEADERS)
    payload = payload_of(response)
    if looks_like_login_page(response, payload):
        session.mark_expired()
        raise SessionExpired("Session expired. Please login again.")
    balance = balance_from_payload(payload)
    logger.debug("Balance for %s: %s", session.username, balance)
    return balance
