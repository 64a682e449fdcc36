"""Tolerant helpers for upstream line and odds strings."""

from __future__ import annotations

import html
import re
from decimal import Decimal, InvalidOperation
from typing import Any

HALF_POINT_GLYPHS = ("&frac12;", "½")

_ODDS_RE = re.compile(r"^[+-]?\d+$")


def normalize_half_points(raw: str) -> str:
    """Replace the half-point glyph (literal or HTML entity) with ``.5``."""

    text = raw
    for glyph in HALF_POINT_GLYPHS:
        text = text.replace(glyph, ".5")
    return text


def display_text(raw: Any) -> str:
    """Human display form: entities decoded, otherwise as upstream sent it."""

    if raw is None:
        return ""
    return html.unescape(str(raw)).strip()


def format_line(value: Any) -> str | None:
    """Canonical decimal string for a point line, e.g. ``4.5``, ``-3``, ``0``.

    Accepts numbers and strings (leading ``+``, ``pk`` and half-point glyphs allowed).
    Returns ``None`` when the value is missing or not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    raw = normalize_half_points(str(value)).strip()
    if not raw:
        return None
    if raw.lower() in ("pk", "pick", "even"):
        return "0"
    if raw.startswith("+"):
        raw = raw[1:]
    if raw.startswith("-."):
        raw = "-0" + raw[1:]
    elif raw.startswith("."):
        raw = "0" + raw
    try:
        number = Decimal(raw)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    if number == 0:
        return "0"
    return format(number.normalize(), "f")


def format_odds(value: Any) -> str | None:
    """Canonical American odds: signed integer string, positive values carry ``+``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    raw = str(value).strip()
    if raw.lower() in ("ev", "even"):
        return "+100"
    if not _ODDS_RE.match(raw):
        return None
    number = int(raw)
    if number == 0:
        return None
    return f"{number:+d}"


def american_to_decimal(odds: int) -> float:
    return 1 + (odds / 100) if odds > 0 else 1 + (100 / abs(odds))
